"""FastAPI application factory.

Creates and configures the FastAPI application with all routers,
middleware, and exception handlers.

All resource endpoints live under ``/api``. The health check stays at
``/health`` so that load balancers and the E2E worker pool can poll it
without credentials.

Run with uvicorn's factory mode::

    uvicorn roster.presentation.api.app:create_app --factory
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError

from roster import __version__
from roster.infrastructure.persistence.sqlalchemy.database import create_tables
from roster.presentation.api.config import open_database
from roster.presentation.api.exception_handlers import setup_exception_handlers
from roster.presentation.api.rate_limiting import RateLimitMiddleware
from roster.presentation.api.routers import (
    auth_router,
    database_router,
    people_queries_router,
    people_router,
    roles_router,
)
from roster.presentation.api.schemas.common import HealthResponse
from roster_config.settings import Settings, get_settings

NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "sqlalchemy.engine",
    "aiosqlite",
    "uvicorn.access",
)


@lru_cache(maxsize=1)
def _configure_logging() -> None:
    """Configure application logging.

    Sets up logging for the roster application with:
    - Console output with timestamps and module names
    - Configurable log level for roster modules (from settings)
    - WARNING level for noisy third-party libraries
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,  # Override any existing config
    )

    logging.getLogger("roster").setLevel(log_level)
    logging.getLogger("roster_auth").setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

API_VERSION = __version__
API_PREFIX = "/api"

OPENAPI_TAGS = [
    {
        "name": "People",
        "description": """People and their role assignments.

**Validation:**
- `fullName`: letters, spaces, `-`, `'` and `.`, at most 200 characters
- `phone`: optional, 7-15 digits and separators
- `roleIds`: must refer to existing roles

**Concurrency:**
- Every person has a `rowVersion`; send it back on update to detect
  concurrent edits (409 on mismatch)
""",
    },
    {
        "name": "People Queries",
        "description": """Read-only lookups over people.

- `search?name=`: case-insensitive substring of the full name
- `by-role?roleName=` and `has-role?roleName=`: exact role name
- `count` and `{id}/with-roles`
""",
    },
    {
        "name": "Roles",
        "description": """Role catalogue.

**Access:**
- Any authenticated user may read
- Only admins may create, update or delete

**Caching:**
- `GET /api/roles` returns `ETag` and `Last-Modified` and answers
  conditional requests with 304
""",
    },
    {
        "name": "Authentication",
        "description": """User authentication and session management.

- Passwords are hashed with bcrypt
- Short-lived JWT access tokens, rotating refresh tokens
- Account lockout after repeated failed attempts
- Per-client request caps on login, register and refresh (429 with
  `Retry-After` when exceeded)
""",
    },
    {
        "name": "Database",
        "description": "Test-support maintenance. Hidden outside development/testing.",
    },
    {
        "name": "Health",
        "description": "Service health monitoring endpoints.",
    },
    {
        "name": "Info",
        "description": "API information and discovery.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database of this app, make sure its schema exists, close it."""
    logger.info("Starting Roster API v%s...", API_VERSION)
    engine = open_database(app)
    try:
        await create_tables(engine)
    except OperationalError as e:
        logger.critical("Could not open the database: %s", e)
        await engine.dispose()
        raise
    yield

    logger.info("Shutting down Roster API...")
    await engine.dispose()
    logger.info("Database connections closed")


def create_api_router() -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(
        people_queries_router,
        prefix="/people/queries",
        tags=["People Queries"],
    )
    api_router.include_router(people_router, prefix="/people", tags=["People"])
    api_router.include_router(roles_router, prefix="/roles", tags=["Roles"])
    api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    api_router.include_router(database_router, prefix="/database", tags=["Database"])
    return api_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings
        Settings of this app. Read from the environment (and configure
        logging) when omitted.

    Returns
    -------
    Configured FastAPI application instance.
    """
    # Configure logging on first app creation (not on module import)
    if settings is None:
        _configure_logging()
        settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Administration of **people** and their **roles**.",
        version=API_VERSION,
        docs_url="/docs" if settings.api_debug else None,
        redoc_url="/redoc" if settings.api_debug else None,
        openapi_url="/openapi.json" if settings.api_debug else None,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )
    app.state.settings = settings

    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "Last-Modified", "Location", "Retry-After"],
    )

    setup_exception_handlers(app)

    app.include_router(create_api_router(), prefix=API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint. Unversioned for load balancer compatibility."""
        return HealthResponse(status="healthy", version=API_VERSION)

    @app.get("/", tags=["Info"])
    async def root() -> dict:
        """API root endpoint with version information."""
        return {
            "name": f"{settings.app_name} API",
            "version": API_VERSION,
            "environment": settings.app_env,
            "docs": "/docs" if settings.api_debug else None,
            "api_base": API_PREFIX,
            "endpoints": {
                "health": "/health",
                "people": f"{API_PREFIX}/people",
                "people_queries": f"{API_PREFIX}/people/queries",
                "roles": f"{API_PREFIX}/roles",
                "auth": f"{API_PREFIX}/auth",
            },
        }

    return app
