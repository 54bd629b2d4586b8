"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.refresh_token import RefreshToken
from app.models.role import ADMIN_ROLE, USER_ROLE, Role
from app.models.user import User, UserRole

__all__ = ["ADMIN_ROLE", "USER_ROLE", "Base", "RefreshToken", "Role", "User", "UserRole"]
