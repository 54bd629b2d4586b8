"""Request/response schemas for auth endpoints and the authenticated principal."""

from pydantic import BaseModel, Field

from app.models.role import ADMIN_ROLE
from app.schemas.base import CamelModel


class LoginRequest(CamelModel):
    """Credentials for login (username or email)."""

    username_or_email: str = Field(..., min_length=1, max_length=320, description="Username or email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class LoginOrCreateRequest(LoginRequest):
    """Login credentials; when auto_create is set a missing account is provisioned."""

    auto_create: bool = Field(default=False, description="Create the account if it does not exist")


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1, max_length=512, description="Refresh token from login")


class TokenResponse(CamelModel):
    """Access token plus the refresh token it can be renewed with."""

    access_token: str = Field(..., description="JWT access token (Bearer)")
    refresh_token: str = Field(..., description="Opaque refresh token")


class Principal(BaseModel):
    """Authenticated identity normalized from a bearer token or session cookie."""

    id: int
    username: str
    email: str = ""
    roles: list[str] = Field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles

    @classmethod
    def from_claims(cls, claims: dict) -> "Principal":
        """Build from decoded token claims. Raises ValueError on a malformed payload."""
        sub = claims.get("sub")
        if not sub:
            raise ValueError("token has no subject")
        roles = claims.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        return cls(
            id=int(sub),
            username=claims.get("unique_name") or "",
            email=claims.get("email") or "",
            roles=list(roles),
        )
