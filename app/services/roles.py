"""Role CRUD over the credential store."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import Conflict, NotFound
from app.models import Role

logger = logging.getLogger(__name__)


def list_roles(db: Session) -> list[Role]:
    return db.query(Role).order_by(Role.id).all()


def get_role(db: Session, role_id: int) -> Role:
    role = db.query(Role).filter(Role.id == role_id).first()
    if role is None:
        raise NotFound("RoleNotFound")
    return role


def get_role_by_name(db: Session, name: str) -> Role | None:
    return db.query(Role).filter(Role.name == name).first()


def _name_in_use(db: Session, name: str, exclude_id: int | None = None) -> bool:
    q = db.query(Role.id).filter(Role.name == name)
    if exclude_id is not None:
        q = q.filter(Role.id != exclude_id)
    return q.first() is not None


def _commit_role(db: Session, role: Role) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("RoleAlreadyExists") from e
    db.refresh(role)


def create_role(db: Session, name: str, description: str | None = None) -> Role:
    """Create a role. Raises Conflict when the name is taken."""
    name = name.strip()
    if _name_in_use(db, name):
        raise Conflict("RoleAlreadyExists")
    role = Role(name=name, description=description)
    db.add(role)
    _commit_role(db, role)
    logger.info("Role created: id=%s name=%s", role.id, role.name)
    return role


def update_role(
    db: Session,
    role_id: int,
    name: str | None = None,
    description: str | None = None,
) -> Role:
    """Partial update; a new name must not belong to another role."""
    role = get_role(db, role_id)
    if name is not None and name.strip():
        name = name.strip()
        if _name_in_use(db, name, exclude_id=role_id):
            raise Conflict("RoleAlreadyExists")
        role.name = name
    if description is not None and description.strip():
        role.description = description.strip()
    _commit_role(db, role)
    logger.info("Role updated: id=%s", role.id)
    return role


def delete_role(db: Session, role_id: int) -> bool:
    """Delete a role and its assignments. Idempotent: False when already absent."""
    role = db.query(Role).filter(Role.id == role_id).first()
    if role is None:
        return False
    db.delete(role)
    db.commit()
    logger.info("Role deleted: id=%s", role_id)
    return True
