import logging
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api.v1.router import api_router
from app.config import settings
from app.database import init_db, close_db
from app.core.exceptions import (
    KeyNotFoundException,
    ProjectNotFoundException,
    InvalidCredentialsException,
    EmailAlreadyRegisteredException,
    DemoAccountDisabledException,
    ExternalAPIException,
    PermissionDeniedException,
)
from app.core.circuit_breaker import CircuitBreakerOpenException
from app.core.logging_config import setup_logging, cleanup_old_logs
from app.core.logging_utils import get_request_id, sanitize_log_message
from app.middleware.logging_middleware import LoggingMiddleware
from app.middleware.rate_limit import setup_rate_limiting
from app.middleware.security import setup_security_middleware

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
)


@app.on_event("startup")
async def startup_event():
    """Initialize logging, clean up old logs and create missing tables."""
    setup_logging()
    removed = cleanup_old_logs()
    if removed:
        logger.info(f"Removed {removed} old log file(s)")
    await init_db()
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    await close_db()
    logger.info("Application shutdown complete")


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID", "Accept", "Origin"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
)

# Security middleware (request size limit + security headers)
setup_security_middleware(app, max_request_size=settings.MAX_REQUEST_SIZE)

# Logging middleware assigns the request ID, so it is added last and runs first
app.add_middleware(LoggingMiddleware)

# Rate limiting
setup_rate_limiting(app)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


def _log_context(request: Request) -> dict:
    return {
        "Path": request.url.path,
        "Method": request.method,
        "IP": request.client.host if request.client else None,
        "RequestID": get_request_id(request),
    }


# Exception handlers with logging
@app.exception_handler(KeyNotFoundException)
async def key_not_found_handler(request: Request, exc: KeyNotFoundException):
    logger.info(sanitize_log_message("API key not found", Detail=exc.detail, **_log_context(request)))
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(ProjectNotFoundException)
async def project_not_found_handler(request: Request, exc: ProjectNotFoundException):
    logger.info(sanitize_log_message("Project not found", Detail=exc.detail, **_log_context(request)))
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(InvalidCredentialsException)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsException):
    logger.warning(sanitize_log_message("Invalid credentials", **_log_context(request)))
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers
    )


@app.exception_handler(EmailAlreadyRegisteredException)
async def email_registered_handler(request: Request, exc: EmailAlreadyRegisteredException):
    logger.warning(sanitize_log_message("Email already registered", **_log_context(request)))
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(DemoAccountDisabledException)
async def demo_disabled_handler(request: Request, exc: DemoAccountDisabledException):
    logger.warning(sanitize_log_message("Demo sign-in while disabled", **_log_context(request)))
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(ExternalAPIException)
async def external_api_handler(request: Request, exc: ExternalAPIException):
    logger.error(
        sanitize_log_message(
            "External API error",
            StatusCode=exc.status_code,
            Detail=exc.detail,
            **_log_context(request)
        )
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(PermissionDeniedException)
async def permission_denied_handler(request: Request, exc: PermissionDeniedException):
    logger.warning(sanitize_log_message("Permission denied", Detail=exc.detail, **_log_context(request)))
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(CircuitBreakerOpenException)
async def circuit_breaker_handler(request: Request, exc: CircuitBreakerOpenException):
    logger.warning(sanitize_log_message("Circuit breaker open", Message=exc.message, **_log_context(request)))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Key provider temporarily unavailable. Please try again later."}
    )


# Generic exception handler for unhandled exceptions
@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(
        sanitize_log_message(
            f"Unhandled exception: {type(exc).__name__}",
            ExceptionMessage=str(exc),
            **_log_context(request)
        )
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error" if settings.ENVIRONMENT == "production" else str(exc)
        }
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.VERSION}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": f"{settings.API_V1_STR}/docs"
    }
