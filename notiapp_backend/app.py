"""
FastAPI Application Entry Point
NotiApp Backend API Server

Usage:
    # Development with auto-reload
    uvicorn notiapp_backend.app:app --reload

    # Production
    uvicorn notiapp_backend.app:app --host 0.0.0.0 --port 8000

    # Or through the CLI
    notiapp serve
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notiapp_backend import __version__
from notiapp_backend.config.loader import get_config
from notiapp_backend.core.logger import get_logger
from notiapp_backend.handlers import register_fastapi_routes
from notiapp_backend.system.runtime import get_runtime_stats, start_runtime, stop_runtime

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI application lifecycle management"""
    logger.info("========== NotiApp Backend Starting ==========")

    try:
        await start_runtime()
        logger.info("========== NotiApp Backend Ready ==========")
    except Exception as e:
        logger.error(f"Failed to initialize backend: {e}", exc_info=True)
        raise

    yield

    logger.info("========== NotiApp Backend Shutting Down ==========")
    await stop_runtime()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="NotiApp Backend API",
        description="Schedule state engine for the NotiApp schedule manager",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_fastapi_routes(app, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "service": "NotiApp Backend API",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
            "redoc": "/redoc",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        stats = await get_runtime_stats()
        return {
            "status": (
                "healthy"
                if stats.get("isRunning") and not stats.get("fatalError")
                else "unhealthy"
            ),
            "service": "notiapp-backend",
            "runtime": stats,
        }

    logger.info("✓ FastAPI application created with routes")
    return app


app = create_app()


def run_server(host: str, port: int, debug: bool = False) -> None:
    logger.info(f"Starting server at http://{host}:{port}")
    uvicorn.run(
        "notiapp_backend.app:app",
        host=host,
        port=port,
        reload=debug,
        log_level="debug" if debug else "info",
    )


if __name__ == "__main__":
    config = get_config()
    run_server(
        config.get("server.host", "127.0.0.1"),
        config.get("server.port", 8000),
        config.get("server.debug", False),
    )
