"""Request/response schemas for role management."""

from pydantic import Field

from app.schemas.base import CamelModel


class RoleCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class RoleUpdate(CamelModel):
    """Partial update; blank or missing fields are left unchanged."""

    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class RoleRead(CamelModel):
    id: int
    name: str
    description: str | None = None
