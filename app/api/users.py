"""User management endpoints (any authenticated principal reads; Admin writes)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_principal, http_error, require_admin
from app.core.database import get_db
from app.core.errors import AppError
from app.core.i18n import get_locale
from app.models import User
from app.schemas.auth import Principal
from app.schemas.users import UserCreate, UserRead, UserSummary, UserUpdate
from app.services import users as user_service

router = APIRouter()


def _to_read(user: User) -> UserRead:
    return UserRead(id=user.id, username=user.username, email=user.email, roles=user.role_names)


def _to_summary(user: User) -> UserSummary:
    return UserSummary(id=user.id, username=user.username, email=user.email)


@router.get("", response_model=list[UserRead])
def list_users(
    _principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> list[UserRead]:
    """List all users with their role names."""
    return [_to_read(u) for u in user_service.list_users(db)]


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    _principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> UserRead:
    try:
        return _to_read(user_service.get_user(db, user_id))
    except AppError as e:
        raise http_error(e, locale) from e


@router.post("", response_model=UserSummary)
def create_user(
    body: UserCreate,
    _admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> UserSummary:
    """Create a user (Admin only). 400 when the email or username is taken."""
    try:
        user = user_service.create_user(
            db, body.username, body.email, body.password, role_ids=body.role_ids
        )
    except AppError as e:
        raise http_error(e, locale) from e
    return _to_summary(user)


@router.put("/{user_id}", response_model=UserSummary)
def update_user(
    user_id: int,
    body: UserUpdate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> UserSummary:
    """
    Partially update a user. Admins may update anyone; other principals only
    themselves (403 otherwise). Blank fields are ignored.
    """
    try:
        user = user_service.update_user(
            db,
            principal,
            user_id,
            username=body.username,
            email=body.email,
            password=body.password,
            role_ids=body.role_ids,
        )
    except AppError as e:
        raise http_error(e, locale) from e
    return _to_summary(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_user(
    user_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete a user (Admin only). Idempotent: 204 even when the user does not exist."""
    user_service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
