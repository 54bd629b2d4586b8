"""Password hashing plus access, session and refresh token issuance."""

import base64
import secrets
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Refresh tokens: 64 random bytes, valid for a fixed 7 days from issuance.
REFRESH_TOKEN_BYTES = 64
REFRESH_TOKEN_LIFETIME = timedelta(days=7)

SESSION_TOKEN_TYPE = "session"
CSRF_TOKEN_TYPE = "csrf"


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _identity_claims(
    user_id: int, username: str, email: str | None, roles: Iterable[str]
) -> dict[str, Any]:
    return {
        "sub": str(user_id),
        "unique_name": username,
        "email": email or "",
        "roles": list(roles),
    }


def _encode(payload: dict[str, Any], minutes: int) -> str:
    now = datetime.now(UTC)
    payload = {
        **payload,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def _decode(token: str) -> dict[str, Any]:
    return jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
        options={"require": ["sub", "exp", "iss", "aud"]},
    )


def create_access_token(
    user_id: int, username: str, email: str | None, roles: Iterable[str]
) -> str:
    """Create a signed access token carrying identity and one entry per role."""
    return _encode(
        _identity_claims(user_id, username, email, roles),
        settings.JWT_EXPIRE_MINUTES,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an access token; return its claims.
    Raises jwt.PyJWTError on a bad signature, issuer, audience or expiry,
    and when a session or anti-forgery token is presented as a bearer token.
    """
    payload = _decode(token)
    if payload.get("typ") is not None:
        raise jwt.InvalidTokenError("Typed token used as access token")
    return payload


def create_session_token(
    user_id: int, username: str, email: str | None, roles: Iterable[str]
) -> str:
    """Create the signed token stored in the dashboard session cookie."""
    payload = _identity_claims(user_id, username, email, roles)
    payload["typ"] = SESSION_TOKEN_TYPE
    return _encode(payload, settings.SESSION_EXPIRE_MINUTES)


def decode_session_token(token: str) -> dict[str, Any]:
    """Decode a session cookie token. Raises jwt.PyJWTError when invalid or expired."""
    payload = _decode(token)
    if payload.get("typ") != SESSION_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not a session token")
    return payload


def renew_session_token(payload: dict[str, Any]) -> str:
    """Re-issue a session token from decoded claims (sliding expiration)."""
    return create_session_token(
        int(payload["sub"]),
        payload.get("unique_name", ""),
        payload.get("email"),
        payload.get("roles") or [],
    )


def generate_csrf_nonce() -> str:
    return secrets.token_urlsafe(32)


def create_csrf_token(nonce: str) -> str:
    """Signed form token bound to the anti-forgery cookie nonce."""
    return _encode({"sub": nonce, "typ": CSRF_TOKEN_TYPE}, settings.CSRF_EXPIRE_MINUTES)


def decode_csrf_token(token: str) -> str:
    """Return the nonce an anti-forgery token was issued for. Raises jwt.PyJWTError when invalid."""
    payload = _decode(token)
    if payload.get("typ") != CSRF_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not an anti-forgery token")
    return payload["sub"]


def generate_refresh_token() -> str:
    """Return a new opaque refresh token (base64 of 64 CSPRNG bytes)."""
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


def refresh_token_expiry(issued_at: datetime | None = None) -> datetime:
    """Expiry timestamp for a refresh token issued at issued_at (default: now)."""
    return (issued_at or datetime.now(UTC)) + REFRESH_TOKEN_LIFETIME
