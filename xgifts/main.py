"""FastAPI application entry point.

x-gifts API - paid gift recommendations from social media profiles.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from datetime import timedelta
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from xgifts.errors import GiftsError
from xgifts.payments import install_payment_middleware
from xgifts.routes import api_router
from xgifts.schemas import ErrorResponse
from xgifts.services.purch_client import PurchClient
from xgifts.services.suggestions import GiftSuggestionService
from xgifts.services.trending import TrendingService
from xgifts.settings import Settings, get_settings
from xgifts.stores.postgres import create_engine, create_session_factory, ping_db
from xgifts.stores.redis import KeyLock, close_redis, init_redis
from xgifts.stores.search_cache import SearchCacheStore

logger = logging.getLogger("uvicorn.error")


def _error_response(status_code: int, error: str, code: str) -> JSONResponse:
    body = ErrorResponse(error=error, code=code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def build_lifespan(settings: Settings):
    """Build the lifespan that wires stores, clients and services onto app.state."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager.

        Handles startup and shutdown events.
        """
        # Startup
        engine = create_engine(settings)
        try:
            await ping_db(engine)
            logger.info("Postgres connected")
        except Exception:
            logger.exception("Postgres init failed")

        redis_client = None
        lock = None
        if settings.suggest_lock_enabled:
            try:
                redis_client = await init_redis(settings)
                lock = KeyLock(redis_client, ttl=settings.suggest_lock_ttl_seconds)
            except Exception:
                logger.exception("Redis init failed, concurrent cache misses will not be collapsed")

        store = SearchCacheStore(create_session_factory(engine))
        purch = PurchClient(
            api_url=settings.purch_api_url,
            timeout_seconds=settings.purch_timeout_seconds,
        )
        app.state.suggestion_service = GiftSuggestionService(
            store,
            purch,
            lock=lock,
            checkout_url=settings.checkout_url,
            cache_ttl=timedelta(hours=settings.cache_ttl_hours),
            lock_wait_seconds=settings.suggest_lock_wait_seconds,
            lock_poll_seconds=settings.suggest_lock_poll_seconds,
        )
        app.state.trending_service = TrendingService(
            store,
            window=timedelta(days=settings.trending_window_days),
            sample_limit=settings.trending_sample_limit,
        )

        yield

        # Shutdown
        await purch.close()
        await close_redis(redis_client)
        await engine.dispose()

    return lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Gift recommendation API: social profile in, Amazon gifts out, paid per call via x402",
        lifespan=build_lifespan(settings),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # x402 metering (added first so CORS wraps it and 402s carry CORS headers)
    if settings.x402_enabled:
        install_payment_middleware(app, settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed request bodies -> 400 envelope."""
        return _error_response(400, _format_validation_errors(exc), "VALIDATION_ERROR")

    @app.exception_handler(GiftsError)
    async def gifts_exception_handler(request: Request, exc: GiftsError) -> JSONResponse:
        """Known failures -> envelope with the error's status and code."""
        message = str(exc) if settings.debug else exc.public_message
        return _error_response(exc.status_code, message, exc.code)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        message = str(exc) if settings.debug else "Internal server error"
        return _error_response(500, message, "INTERNAL_ERROR")

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # API information
    @app.get("/", tags=["info"])
    async def api_info() -> dict[str, object]:
        """API information and pricing."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "description": "Gift recommendation API for x402",
            "docs": "/docs",
            "endpoints": [
                {
                    "path": "POST /gifts/suggest",
                    "price": f"{settings.x402_suggest_price} USDC",
                    "description": "Get gift recommendations from social profile",
                },
                {
                    "path": "GET /gifts/trending",
                    "price": f"{settings.x402_trending_price} USDC",
                    "description": "Trending gifts and interests from the last 7 days",
                },
            ],
        }

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info(f"x-gifts server starting on port {settings.port}")
    uvicorn.run(
        "xgifts.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips,
    )
