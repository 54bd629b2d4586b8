"""Token endpoints: login, login-or-create, refresh, logout."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import http_error
from app.core.database import get_db
from app.core.errors import AppError
from app.core.i18n import get_locale
from app.schemas.auth import (
    LoginOrCreateRequest,
    LoginRequest,
    RefreshRequest,
    TokenResponse,
)
from app.services import auth as auth_service

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> TokenResponse:
    """
    Authenticate with username or email and password.
    Send the access token as: Authorization: Bearer <accessToken>
    """
    try:
        return auth_service.login(db, body.username_or_email, body.password)
    except AppError as e:
        raise http_error(e, locale) from e


@router.post("/login-or-create", response_model=TokenResponse)
def login_or_create(
    body: LoginOrCreateRequest,
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> TokenResponse:
    """
    Like login, but with autoCreate=true a missing account is created from
    usernameOrEmail (400 if the derived username or email is taken).
    """
    try:
        return auth_service.login_or_create(
            db, body.username_or_email, body.password, body.auto_create
        )
    except AppError as e:
        raise http_error(e, locale) from e


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    body: RefreshRequest,
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> TokenResponse:
    """Exchange a refresh token for a new access token; the refresh token is returned unchanged."""
    try:
        return auth_service.refresh(db, body.refresh_token)
    except AppError as e:
        raise http_error(e, locale) from e


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def logout(
    body: RefreshRequest,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Revoke a refresh token. Always 204, including for unknown tokens."""
    auth_service.revoke(db, body.refresh_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
