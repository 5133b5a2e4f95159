"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.router import api_router
from .services.resurrection_manager import resurrection_manager

# Configure logging for our modules
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s: %(message)s")
logging.getLogger("resurrect").setLevel(logging.DEBUG)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await resurrection_manager.resume_incomplete()
    yield
    await resurrection_manager.shutdown()


def create_app() -> FastAPI:
    app = FastAPI(
        title="resurrect",
        version="0.1.0",
        description="Archived project restoration engine",
        lifespan=lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app
