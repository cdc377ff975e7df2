"""Versions Radar FastAPI Application Entry Point."""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .routers import (
    stats_router,
    packages_router,
    navigation_router,
    cache_router,
)
from .services.error_handling import process_error
from .services.errors import ErrorKind, RadarError
from .store import RadarStore

_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NETWORK: 503,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.VALIDATION: 502,
}


async def radar_error_handler(request: Request, exc: RadarError) -> JSONResponse:
    """Render fetch failures with their category and retry hint."""
    processed = process_error(exc, request.url.path)
    return JSONResponse(
        status_code=_STATUS_BY_KIND.get(exc.kind, 500),
        content={"error": processed.to_dict()},
    )


def create_app(store: Optional[RadarStore] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Versions Radar",
        description="Track releases of JavaScript packages from NPM and GitHub",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.radar_store = store or RadarStore.from_settings(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RadarError, radar_error_handler)

    # Include routers with /api prefix
    app.include_router(stats_router, prefix="/api")
    app.include_router(packages_router, prefix="/api")
    app.include_router(navigation_router, prefix="/api")
    app.include_router(cache_router, prefix="/api")

    return app


def run():
    """Run the server."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"Versions Radar running at http://localhost:{settings.port}")
    uvicorn.run(
        "radar.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
