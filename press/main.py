"""Press Blog Backend - publishing pipeline for a blog CMS."""

from logging import getLogger

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from press import __version__
from press.configs import file_logger, settings
from press.errors import (
    DatabaseError,
    PostNotFoundError,
    SlugConflictError,
    UploadError,
    ValidationError,
    app_validation_exception_handler,
    create_fallback_handler,
    database_exception_handler,
    post_exception_handler,
    upload_exception_handler,
    validation_exception_handler,
)
from press.managers import limiter, rate_limit_exceeded_handler
from press.middleware import (
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_cors,
    lifespan,
)
from press.routes import admin_router, posts_router
from press.schemas import HealthCheckResponse
from press.services.storage import COVERS_URL_PATH
from press.utils.helpers import local_timestamp

logger = file_logger(getLogger(__name__))

app = FastAPI(
    title=settings.APP_NAME,
    description="Press Blog Backend API",
    version=__version__,
    lifespan=lifespan,
    swagger_ui_parameters={
        "docExpansion": "none",
        "operationsSorter": "method",
    },
)

configure_cors(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")


routes = [
    posts_router,
    admin_router,
]

_ = [app.include_router(router) for router in routes]

errors = [
    (RateLimitExceeded, rate_limit_exceeded_handler),
    (PostNotFoundError, post_exception_handler),
    (SlugConflictError, post_exception_handler),
    (DatabaseError, database_exception_handler),
    (UploadError, upload_exception_handler),
    (ValidationError, app_validation_exception_handler),
    (RequestValidationError, validation_exception_handler),
    (Exception, create_fallback_handler(logger)),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]

settings.COVERS_DIR.mkdir(parents=True, exist_ok=True)
app.mount(COVERS_URL_PATH, StaticFiles(directory=settings.COVERS_DIR), name="covers")

app.state.limiter = limiter
limiter: Limiter = app.state.limiter


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_model=HealthCheckResponse,
    response_class=ORJSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "version": "1.0.0",
                        "status": "ok",
                        "environment": "development",
                        "timestamp": "2025-01-01 10:00:00",
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
@limiter.exempt
async def health_check(request: Request) -> ORJSONResponse:
    """Report that the service is up."""
    return ORJSONResponse(
        HealthCheckResponse(
            version=app.version,
            status="ok",
            environment=settings.ENVIRONMENT,
            timestamp=local_timestamp(),
        ).model_dump(),
    )
