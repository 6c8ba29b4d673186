"""Gulfquotes API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gulfquotes.auth.router import router as auth_router
from gulfquotes.auth.service import UserService
from gulfquotes.authors.router import router as authors_router
from gulfquotes.authors.service import AuthorService
from gulfquotes.comments.router import router as comments_router
from gulfquotes.comments.service import CommentService
from gulfquotes.config import get_settings
from gulfquotes.core.context import get_request_id
from gulfquotes.core.database import init_async_cassandra, shutdown_async_cassandra
from gulfquotes.core.errors import (
    INTERNAL_ERROR,
    STATUS_CODES,
    VALIDATION_ERROR,
    AppError,
    error_body,
)
from gulfquotes.core.logging import configure_structlog, get_logger
from gulfquotes.core.middleware import RequestContextMiddleware
from gulfquotes.core.redis import init_redis, shutdown_redis
from gulfquotes.email.router import admin_router as email_admin_router
from gulfquotes.email.service import EmailService
from gulfquotes.engagement import MembershipService
from gulfquotes.gallery.router import router as gallery_router
from gulfquotes.gallery.service import GalleryService
from gulfquotes.health.router import router as health_router
from gulfquotes.notifications.dispatcher import NotificationEmailDispatcher
from gulfquotes.notifications.router import router as notifications_router
from gulfquotes.notifications.service import NotificationService
from gulfquotes.quotes.router import router as quotes_router
from gulfquotes.quotes.router import users_router as quotes_users_router
from gulfquotes.quotes.service import QuoteService
from gulfquotes.search.router import router as search_router
from gulfquotes.search.service import SearchService
from gulfquotes.tags.router import router as tags_router
from gulfquotes.tags.service import TagService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


def init_services(app: FastAPI, session, keyspace: str, redis_client=None) -> None:
    """Build every service on ``app.state``.

    The email dispatcher is created here but started by the lifespan.
    """
    settings = get_settings()
    state = app.state

    state.cassandra_session = session
    state.user_service = UserService(session=session, keyspace=keyspace)
    state.membership_service = MembershipService(session=session, keyspace=keyspace)
    state.author_service = AuthorService(
        session=session,
        keyspace=keyspace,
        memberships=state.membership_service,
        user_service=state.user_service,
    )
    state.gallery_service = GalleryService(session=session, keyspace=keyspace)
    state.tag_service = TagService(session=session, keyspace=keyspace)
    state.search_service = SearchService(
        session=session, keyspace=keyspace, redis_client=redis_client
    )
    state.quote_service = QuoteService(
        session=session,
        keyspace=keyspace,
        memberships=state.membership_service,
        author_service=state.author_service,
        gallery_service=state.gallery_service,
        tag_service=state.tag_service,
        search_service=state.search_service,
    )
    state.comment_service = CommentService(
        session=session,
        keyspace=keyspace,
        memberships=state.membership_service,
    )

    state.email_service = EmailService(
        credentials_path=settings.email_credentials_path,
        sender_address=settings.email_sender_address,
        sender_name=settings.email_sender_name,
        site_url=settings.site_url,
        enabled=settings.email_enabled,
    )
    state.notification_dispatcher = NotificationEmailDispatcher(
        email_service=state.email_service,
        author_service=state.author_service,
        quote_service=state.quote_service,
        queue_size=settings.notification_queue_size,
        max_attempts=settings.notification_max_attempts,
        retry_delay=settings.notification_retry_delay_seconds,
    )
    state.notification_service = NotificationService(
        session=session,
        keyspace=keyspace,
        author_service=state.author_service,
        dispatcher=state.notification_dispatcher,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Initialize Redis (non-critical - app works without it)
    redis_client = None
    try:
        redis_client = await init_redis()
        logger.info("redis_initialized")
    except Exception as e:
        logger.warning(
            "redis_init_skipped",
            error=str(e),
            message="Running without Redis - popular searches are not cached",
        )

    dispatcher: NotificationEmailDispatcher | None = None
    try:
        session = await init_async_cassandra()
        init_services(app, session, settings.cassandra_keyspace, redis_client)
        dispatcher = app.state.notification_dispatcher
        await dispatcher.start()
        logger.info("services_initialized", email_enabled=settings.email_enabled)
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    if dispatcher is not None:
        await dispatcher.stop()
    await shutdown_redis()
    await shutdown_async_cassandra()


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": {code, message, details?}}``."""

    def _request_id(request: Request) -> str | None:
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> ORJSONResponse:
        log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.info
        log(
            "app_error",
            code=exc.code,
            status_code=exc.status_code,
            message=exc.message,
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content={"error": exc.to_dict()},
            headers={"X-Request-ID": _request_id(request) or ""},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        code = STATUS_CODES.get(exc.status_code, INTERNAL_ERROR)
        message = (
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error"
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content=error_body(code, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        logger.info(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        details = [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", []) if loc != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(VALIDATION_ERROR, "Validation error", details),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler; internal details are logged, never returned."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
            request_id=_request_id(request),
        )
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(INTERNAL_ERROR, "Internal server error"),
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Stack traces are never rendered; the handlers above log them instead
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Gulfquotes - quotes, authors and community API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(quotes_users_router)
    app.include_router(quotes_router)
    app.include_router(comments_router)
    app.include_router(authors_router)
    app.include_router(tags_router)
    app.include_router(gallery_router)
    app.include_router(search_router)
    app.include_router(notifications_router)
    app.include_router(email_admin_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        return {
            "message": "Gulfquotes API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
