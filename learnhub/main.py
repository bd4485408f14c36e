"""LearnHub API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from learnhub.config import get_settings
from learnhub.core.errors import STORE_EXCEPTIONS, register_error_handlers
from learnhub.core.logging import configure_structlog, get_logger
from learnhub.core.middleware import RequestContextMiddleware
from learnhub.courses.router import categories_router
from learnhub.courses.router import router as courses_router
from learnhub.courses.service import CourseService
from learnhub.health.router import router as health_router
from learnhub.progress.router import enrollments_router
from learnhub.progress.router import router as progress_router
from learnhub.progress.service import EnrollmentService, ProgressTracker
from learnhub.progress.stores import CassandraContentStore, CassandraEnrollmentStore
from learnhub.reviews.router import router as reviews_router
from learnhub.reviews.service import ReviewService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))
logger = get_logger(__name__)


def init_services(app: FastAPI, session, keyspace: str) -> None:
    """Build stores and services on top of a session and put them on app.state."""
    enrollment_store = CassandraEnrollmentStore(session=session, keyspace=keyspace)
    content_store = CassandraContentStore(session=session, keyspace=keyspace)

    app.state.cassandra_session = session
    app.state.course_service = CourseService(session=session, keyspace=keyspace)
    app.state.enrollment_service = EnrollmentService(
        enrollments=enrollment_store,
        courses=app.state.course_service,
    )
    app.state.progress_tracker = ProgressTracker(
        enrollments=enrollment_store,
        content=content_store,
        freeze_on_completion=get_settings().progress_freeze_on_completion,
    )
    app.state.review_service = ReviewService(
        session=session,
        keyspace=keyspace,
        enrollments=enrollment_store,
    )
    logger.info("services_initialized", keyspace=keyspace)


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

    from learnhub.core.database import init_async_cassandra, shutdown_async_cassandra

    try:
        session = await init_async_cassandra(settings)
        init_services(app, session, settings.cassandra_keyspace)
    except (ConnectionError, *STORE_EXCEPTIONS) as e:
        # Services stay unset; their dependencies answer 503 until restart
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug=False keeps Starlette from rendering stack traces
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="LearnHub course platform - API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request ID, trace ID and access log for every request
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

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(courses_router)
    app.include_router(categories_router)
    app.include_router(reviews_router)
    app.include_router(progress_router)
    app.include_router(enrollments_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "learnhub.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        workers=settings.api_workers,
    )
