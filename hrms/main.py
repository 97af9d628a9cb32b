"""
HRMS Portal API

Serves recruitment, onboarding and the employee workspace from one app.
Run with: uvicorn hrms.main:app --reload
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hrms.config.database import init_db
from hrms.config.settings import settings
from hrms.endpoints import api_router
from hrms.middleware.auth import AuthMiddleware
from hrms.middleware.error_handler import setup_exception_handlers
from hrms.middleware.logging import LoggingMiddleware, configure_logging
from hrms.middleware.timeout import TimeoutMiddleware
from hrms.services.documents import WEASYPRINT_AVAILABLE, get_document_generator

configure_logging()
logger = structlog.get_logger()

DEFAULT_SECRET_KEY = "change-me-in-production"


def check_secret_key() -> None:
    """Refuse to start outside development with the placeholder signing key."""
    if settings.SECRET_KEY == DEFAULT_SECRET_KEY and settings.ENVIRONMENT != "development":
        raise RuntimeError("SECRET_KEY must be set outside development")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting HRMS Portal API",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
    )
    try:
        check_secret_key()
    except RuntimeError as e:
        logger.critical("Startup check failed", error=str(e))
        raise

    if not WEASYPRINT_AVAILABLE:
        logger.warning("WeasyPrint missing, offer letters, NDAs and certificates cannot be generated")

    # Schema comes from the ORM metadata in development
    if settings.DEBUG:
        logger.info("Creating database tables")
        try:
            init_db()
        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))

    yield

    await get_document_generator().close()
    logger.info("HRMS Portal API stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Recruitment, onboarding, attendance, leave and tasks for the HR team and employees",
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

setup_exception_handlers(app)

# The last middleware added runs first: CORS, timeout, auth, then logging
app.add_middleware(LoggingMiddleware)
app.add_middleware(AuthMiddleware)
app.add_middleware(TimeoutMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def root_health():
    """Load balancer probe."""
    return {"status": "ok", "version": settings.APP_VERSION}


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "api": "/api/v1",
        "docs": "/api/docs" if settings.DEBUG else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hrms.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
