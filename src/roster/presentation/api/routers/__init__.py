from roster.presentation.api.routers.auth import router as auth_router
from roster.presentation.api.routers.database import router as database_router
from roster.presentation.api.routers.people import router as people_router
from roster.presentation.api.routers.people_queries import (
    router as people_queries_router,
)
from roster.presentation.api.routers.roles import router as roles_router

__all__ = [
    "auth_router",
    "database_router",
    "people_queries_router",
    "people_router",
    "roles_router",
]
