"""Entry point: python -m resurrect"""

import sys

import uvicorn
from .config import settings
from .errors import UnknownProvider
from .providers import get_provider


def main():
    try:
        get_provider(settings.restore_provider)
    except UnknownProvider as e:
        sys.exit(f"{e} (set RESURRECT_RESTORE_PROVIDER)")
    uvicorn.run(
        "resurrect.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
