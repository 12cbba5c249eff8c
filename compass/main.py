import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from compass.api.v1.auth import limiter, router as auth_router
from compass.api.v1.options import router as options_router
from compass.api.v1.outcome_rules import router as outcome_rules_router
from compass.api.v1.routes import router as v1_router
from compass.config import get_settings
from compass.core.errors import (
    AppError,
    app_error_handler,
    generic_exception_handler,
    http_exception_handler,
    permission_error_handler,
    rate_limit_error_handler,
    validation_error_handler,
    value_error_handler,
)
from compass.middleware.logging import StructuredLoggingMiddleware

settings = get_settings()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(settings.log_level_number),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=False,
)

app = FastAPI(
    title="Decision Compass API",
    description="Weighted multi-criteria decision support: decisions, alternatives, criteria, ratings and scores",
    version="1.0.0",
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(StructuredLoggingMiddleware)

# Register error handlers
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(PermissionError, permission_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(v1_router, prefix="/api/v1", tags=["v1"])
app.include_router(options_router, prefix="/api/v1")
app.include_router(outcome_rules_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """Startup event handler."""
    logger = structlog.get_logger()
    if settings.seed_on_start:
        from compass.db.seed import seed_outcome_rules
        from compass.db.session import session_scope

        with session_scope() as session:
            created = seed_outcome_rules(session)
        logger.info("outcome_rules_seeded", created=created)
    logger.info("application_started", environment=settings.app_env)


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown event handler."""
    logger = structlog.get_logger()
    logger.info("application_shutting_down")
