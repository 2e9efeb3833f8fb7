"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from api.routes import game, scores
from api.session import get_registry
from api.websocket import router as ws_router
from config import AppConfig, config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Stop every running game clock when the server shuts down."""
    yield
    registry = get_registry()
    logger.info("Shutting down with %d game session(s)", len(registry))
    registry.close()


async def _rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(status_code=429, content={"detail": f"Too many requests: {exc.detail}"})


async def _invalid_setting(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def create_app(settings: AppConfig = config) -> FastAPI:
    """Build the Pick 21 API: game, high score and WebSocket routes."""
    logging.basicConfig(level=settings.log_level)

    limiter = Limiter(
        key_func=get_remote_address,
        enabled=settings.rate_limit.enabled,
        default_limits=[f"{settings.rate_limit.requests_per_minute}/minute"],
    )

    app = FastAPI(
        title="Pick 21 Solitaire",
        description="Timed five-column card arrangement game API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limited)  # type: ignore[arg-type]
    app.add_exception_handler(ValueError, _invalid_setting)  # type: ignore[arg-type]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    @app.get("/api/health")
    @limiter.limit(f"{settings.rate_limit.requests_per_minute}/minute")
    async def health_check(request: Request) -> dict[str, str | int]:
        """Liveness check with the number of open game sessions."""
        return {"status": "healthy", "sessions": len(get_registry())}

    app.include_router(game.router, prefix="/api/game", tags=["game"])
    app.include_router(scores.router, prefix="/api/scores", tags=["scores"])
    app.include_router(ws_router, prefix="/ws", tags=["websocket"])
    return app


app = create_app()
