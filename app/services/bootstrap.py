"""Startup bootstrap: schema, default roles and the seed admin. Safe to run repeatedly."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.core.security import hash_password
from app.models import ADMIN_ROLE, USER_ROLE, Base, Role, User, UserRole

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_ROLES = {
    ADMIN_ROLE: "Full access to manage users and roles",
    USER_ROLE: "Read access; can update own profile",
}


def ensure_schema(engine: Engine) -> None:
    """Create missing tables. Existing tables are left untouched."""
    Base.metadata.create_all(bind=engine)


def ensure_role(db: Session, name: str, description: str) -> Role:
    role = db.query(Role).filter(Role.name == name).first()
    if role is None:
        role = Role(name=name, description=description)
        db.add(role)
        db.commit()
        db.refresh(role)
        logger.info("Bootstrap: created role %s", name)
    return role


def ensure_default_roles(db: Session) -> dict[str, Role]:
    return {name: ensure_role(db, name, desc) for name, desc in DEFAULT_ROLES.items()}


def ensure_admin(db: Session, settings: "Settings", admin_role: Role) -> User:
    """
    Make sure the seed admin (matched by email) exists and holds admin_role.
    An existing account keeps its password.
    """
    admin = db.query(User).filter(User.email == settings.SEED_ADMIN_EMAIL).first()
    if admin is None:
        admin = User(
            username=settings.SEED_ADMIN_USERNAME,
            email=settings.SEED_ADMIN_EMAIL,
            password_hash=hash_password(settings.SEED_ADMIN_PASSWORD.get_secret_value()),
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info("Bootstrap: created seed admin %s", admin.email)

    has_admin = (
        db.query(UserRole)
        .filter(UserRole.user_id == admin.id, UserRole.role_id == admin_role.id)
        .first()
    )
    if has_admin is None:
        db.add(UserRole(user_id=admin.id, role_id=admin_role.id))
        db.commit()
        db.refresh(admin)
        logger.info("Bootstrap: granted %s to %s", admin_role.name, admin.email)
    return admin


def run_bootstrap(db: Session, settings: "Settings", engine: Engine | None = None) -> User:
    """Ensure schema (when an engine is given), default roles and the seed admin."""
    if engine is not None:
        ensure_schema(engine)
    roles = ensure_default_roles(db)
    return ensure_admin(db, settings, roles[ADMIN_ROLE])
