"""Request/response schemas for user management."""

from pydantic import Field

from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)
    role_ids: list[int] | None = Field(default=None, description="Roles to assign (admin only)")


class UserUpdate(CamelModel):
    """Partial update; blank or missing fields are left unchanged."""

    username: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    password: str | None = Field(default=None, max_length=128)
    role_ids: list[int] | None = Field(default=None, description="Replace role assignments (admin only)")


class UserSummary(CamelModel):
    """User fields returned by create and update."""

    id: int
    username: str
    email: str


class UserRead(UserSummary):
    """User with assigned role names (list endpoints)."""

    roles: list[str] = Field(default_factory=list)
