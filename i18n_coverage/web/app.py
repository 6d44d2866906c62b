"""FastAPI application serving coverage badges and JSON summaries."""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..cache.store import CacheStore
from ..config import Config, config as default_config
from ..coverage.calculator import CoverageCalculator
from ..gateway.github import GitHubGateway
from ..utils.logger_utils import LoggerUtils
from .routes import api, badges
from .services.badge_generator import BadgeGenerator

logger = LoggerUtils.get_logger(__name__)


def create_app(
    calculator: Optional[CoverageCalculator] = None,
    settings: Optional[Config] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        calculator: Coverage calculator to serve from. A GitHub-backed one is
            built from settings if not provided.
        settings: Configuration (uses the global config if not provided)
    """
    settings = settings or default_config
    if calculator is None:
        calculator = CoverageCalculator(GitHubGateway(settings=settings), CacheStore(settings), settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        for warning in settings.validate():
            logger.warning(warning)
        yield
        await calculator.close()

    app = FastAPI(
        title="i18n Coverage",
        description="Translation coverage badges for GitHub repositories",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET", "DELETE"])

    # Store services in app state
    app.state.settings = settings
    app.state.calculator = calculator
    app.state.badge_generator = BadgeGenerator()

    # Include routers; fixed paths before the per-language catch-all
    app.include_router(api.router, prefix="/api")
    app.include_router(badges.router, prefix="/api")

    return app


def main():
    """Entry point for the i18n-coverage-web command."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the i18n coverage badge service")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    LoggerUtils.configure(default_config.log_level, default_config.log_file)
    print(f"Starting i18n coverage service at http://{args.host}:{args.port}")
    uvicorn.run(
        "i18n_coverage.web.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
