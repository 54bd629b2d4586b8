"""Role endpoints (any authenticated principal reads; Admin writes)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_principal, http_error, require_admin
from app.core.database import get_db
from app.core.errors import AppError
from app.core.i18n import get_locale
from app.schemas.auth import Principal
from app.schemas.roles import RoleCreate, RoleRead, RoleUpdate
from app.services import roles as role_service

router = APIRouter()


@router.get("", response_model=list[RoleRead])
def list_roles(
    _principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> list[RoleRead]:
    return [RoleRead.model_validate(r) for r in role_service.list_roles(db)]


@router.get("/{role_id}", response_model=RoleRead)
def get_role(
    role_id: int,
    _principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> RoleRead:
    try:
        return RoleRead.model_validate(role_service.get_role(db, role_id))
    except AppError as e:
        raise http_error(e, locale) from e


@router.post("", response_model=RoleRead)
def create_role(
    body: RoleCreate,
    _admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> RoleRead:
    """Create a role (Admin only). 400 when the name is taken."""
    try:
        role = role_service.create_role(db, body.name, body.description)
    except AppError as e:
        raise http_error(e, locale) from e
    return RoleRead.model_validate(role)


@router.put("/{role_id}", response_model=RoleRead)
def update_role(
    role_id: int,
    body: RoleUpdate,
    _admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> RoleRead:
    try:
        role = role_service.update_role(db, role_id, body.name, body.description)
    except AppError as e:
        raise http_error(e, locale) from e
    return RoleRead.model_validate(role)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_role(
    role_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete a role and its assignments (Admin only). Idempotent."""
    role_service.delete_role(db, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
