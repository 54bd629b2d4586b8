"""Authentication context: one Principal from a bearer token or the session cookie."""

from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.errors import AppError
from app.core.i18n import get_locale, translate
from app.core.security import decode_access_token, decode_session_token
from app.schemas.auth import Principal

security = HTTPBearer(auto_error=False)


def http_error(error: AppError, locale: str) -> HTTPException:
    """Convert a service error into an HTTPException with a localized detail."""
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return HTTPException(
        status_code=error.status_code,
        detail=translate(error.message_key, locale),
        headers=headers,
    )


def _unauthorized(key: str, locale: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=translate(key, locale),
        headers={"WWW-Authenticate": "Bearer"},
    )


def principal_from_bearer(token: str) -> Principal | None:
    try:
        return Principal.from_claims(decode_access_token(token))
    except (jwt.PyJWTError, ValueError, TypeError):
        return None


def principal_from_session(request: Request) -> Principal | None:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    try:
        return Principal.from_claims(decode_session_token(token))
    except (jwt.PyJWTError, ValueError, TypeError):
        return None


def resolve_principal(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> Principal | None:
    """Bearer token first, then the session cookie. None when neither is valid."""
    if credentials is not None and credentials.credentials:
        principal = principal_from_bearer(credentials.credentials)
        if principal is not None:
            return principal
    return principal_from_session(request)


def get_current_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    locale: Annotated[str, Depends(get_locale)],
) -> Principal:
    """Dependency: require a valid bearer token or session cookie. Raises 401 otherwise."""
    principal = resolve_principal(request, credentials)
    if principal is None:
        key = "InvalidToken" if credentials is not None else "NotAuthenticated"
        raise _unauthorized(key, locale)
    return principal


def require_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
    locale: Annotated[str, Depends(get_locale)],
) -> Principal:
    """Dependency: require the Admin role. Raises 403 for any other principal."""
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=translate("Forbidden", locale),
        )
    return principal
