"""Pydantic request/response schemas."""

from app.schemas.auth import (
    LoginOrCreateRequest,
    LoginRequest,
    Principal,
    RefreshRequest,
    TokenResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.roles import RoleCreate, RoleRead, RoleUpdate
from app.schemas.users import UserCreate, UserRead, UserSummary, UserUpdate

__all__ = [
    "HealthResponse",
    "LoginOrCreateRequest",
    "LoginRequest",
    "Principal",
    "RefreshRequest",
    "RoleCreate",
    "RoleRead",
    "RoleUpdate",
    "TokenResponse",
    "UserCreate",
    "UserRead",
    "UserSummary",
    "UserUpdate",
]
