"""FastAPI application entry point."""
import logging
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routers import health, posts, users
from core.config import Settings, get_settings
from core.errors import AppError, ErrorKind, error_type_for_status
from core.middleware import IPAllowListMiddleware, RateLimitMiddleware, get_client_ip
from core.redis import RedisClient, set_redis_client
from core.responses import error_response
from db.session import build_engine, build_session_factory, wait_for_database

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Connect to the database and Redis on startup; release both on shutdown."""
    settings: Settings = app.state.settings
    engine = app.state.engine
    await wait_for_database(
        engine, settings.db_connect_retries, settings.db_connect_retry_delay,
    )

    redis_client = RedisClient(settings.redis_url, enabled=settings.redis_enabled)
    await redis_client.connect()
    set_redis_client(redis_client)
    try:
        yield
    finally:
        await redis_client.close()
        set_redis_client(None)
        await engine.dispose()
        logger.info("Database pool closed")


def _stack(exc: Exception, settings: Settings) -> str | None:
    if settings.is_production:
        return None
    return "".join(traceback.format_exception(exc))


def _request_context(request: Request) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "ip": get_client_ip(request),
        "user_id": getattr(request.state, "user_id", None),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to the uniform error envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        context = {"status_code": exc.status_code, **_request_context(request)}
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s", exc.error_type, exc.message, exc_info=exc, extra=context,
            )
        else:
            logger.warning("[%s] %s", exc.error_type, exc.message, extra=context)
        return error_response(
            status_code=exc.status_code,
            message=exc.message,
            error_type=exc.error_type,
            stack=_stack(exc, request.app.state.settings),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]),
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        logger.warning(
            "[%s] request validation failed", ErrorKind.VALIDATION.error_type,
            extra={"errors": errors, **_request_context(request)},
        )
        return error_response(
            status_code=ErrorKind.VALIDATION.status_code,
            message="Validation failed",
            error_type=ErrorKind.VALIDATION.error_type,
            errors=errors,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException,
    ) -> JSONResponse:
        logger.warning(
            "HTTP %s: %s", exc.status_code, exc.detail,
            extra=_request_context(request),
        )
        return error_response(
            status_code=exc.status_code,
            message=str(exc.detail),
            error_type=error_type_for_status(exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "[%s] %s", type(exc).__name__, exc, extra=_request_context(request),
        )
        return error_response(
            status_code=500,
            message=str(exc) or "Internal Server Error",
            error_type=ErrorKind.SERVER.error_type,
            stack=_stack(exc, request.app.state.settings),
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application with its middleware pipeline and routes."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Blog API",
        description="Users, posts and comments with Redis-backed caching.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    # Starlette runs the last-added middleware first:
    # rate limit -> CORS -> IP allow-list -> routes
    app.add_middleware(IPAllowListMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RateLimitMiddleware, settings=settings)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router, prefix=API_PREFIX)
    app.include_router(posts.router, prefix=API_PREFIX)
    return app


app = create_app()
