"""Aggregate all API sub-routers."""

from fastapi import APIRouter

from . import projects, requests, ws

api_router = APIRouter()

api_router.include_router(projects.router)
api_router.include_router(requests.router)
api_router.include_router(ws.router)
