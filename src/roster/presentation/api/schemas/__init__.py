from roster.presentation.api.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from roster.presentation.api.schemas.common import (
    CamelModel,
    HealthResponse,
)
from roster.presentation.api.schemas.database import (
    DatabaseOperationResponse,
    DatabaseStatusResponse,
    WorkerRequest,
)
from roster.presentation.api.schemas.people import (
    PersonCreateRequest,
    PersonResponse,
    PersonRoleResponse,
    PersonUpdateRequest,
)
from roster.presentation.api.schemas.roles import (
    RoleCreateRequest,
    RoleResponse,
    RoleUpdateRequest,
)

__all__ = [
    "AuthResponse",
    "CamelModel",
    "DatabaseOperationResponse",
    "DatabaseStatusResponse",
    "HealthResponse",
    "LoginRequest",
    "PersonCreateRequest",
    "PersonResponse",
    "PersonRoleResponse",
    "PersonUpdateRequest",
    "RefreshRequest",
    "RegisterRequest",
    "RoleCreateRequest",
    "RoleResponse",
    "RoleUpdateRequest",
    "TokenResponse",
    "UserResponse",
    "WorkerRequest",
]
