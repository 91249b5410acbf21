"""
Image board job service.

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from imageboard.api.middleware.request_id import RequestIdMiddleware
from imageboard.api.v1 import router as api_v1_router
from imageboard.config import get_settings
from imageboard.database import async_session_maker, close_db, init_db
from imageboard.jobs.dispatcher import Api
from imageboard.kernel.errors import JobError
from imageboard.kernel.mail import build_mailer
from imageboard.logging_config import configure_logging, get_logger
from imageboard.schemas.common import ErrorResponse, HealthResponse
from imageboard.search.reverse_search import HttpSimilarityLookup

settings = get_settings()
logger = get_logger(__name__)


def build_api() -> Api:
    """Dispatcher wired to the configured database, mailer and lookup."""
    lookup = HttpSimilarityLookup(settings) if settings.reverse_search_url else None
    return Api(
        session_factory=async_session_maker,
        settings=settings,
        mailer=build_mailer(settings),
        reverse_search=lookup,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")
    if not hasattr(app.state, "api"):
        app.state.api = build_api()

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="Job execution and authorization core of an image board.",
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(RequestIdMiddleware)


def _request_headers(request: Request) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return {"X-Request-ID": req_id} if req_id else {}


@app.exception_handler(JobError)
async def job_error_handler(request: Request, exc: JobError):
    """JobErrors raised outside the dispatcher (login, token checks)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(**exc.to_dict()).model_dump(exclude_none=True),
        headers=_request_headers(request),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Validation error", "errors": errors},
        headers=_request_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    req_id = getattr(request.state, "request_id", None)
    if settings.debug:
        content = {"detail": str(exc), "type": type(exc).__name__, "request_id": req_id}
    else:
        content = {"detail": "Internal server error", "request_id": req_id}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_request_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(status="ok", version=settings.version)


app.include_router(api_v1_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "imageboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
