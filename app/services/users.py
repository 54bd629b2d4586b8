"""User CRUD over the credential store, including role assignment."""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import Conflict, Forbidden, InvalidPassword, InvalidUsername, NotFound
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
)
from app.models import Role, User, UserRole
from app.schemas.auth import Principal

logger = logging.getLogger(__name__)


def validate_password(password: str) -> None:
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise InvalidPassword()


def validate_username(username: str) -> None:
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        raise InvalidUsername()


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound("UserNotFound")
    return user


def find_by_identifier(db: Session, identifier: str) -> User | None:
    """Return the user whose username or email equals identifier."""
    return (
        db.query(User)
        .filter(or_(User.username == identifier, User.email == identifier))
        .first()
    )


def username_or_email_taken(db: Session, username: str, email: str) -> bool:
    return (
        db.query(User.id)
        .filter(or_(User.username == username, User.email == email))
        .first()
        is not None
    )


def _email_in_use(db: Session, email: str, exclude_id: int | None = None) -> bool:
    q = db.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


def _username_in_use(db: Session, username: str, exclude_id: int | None = None) -> bool:
    q = db.query(User.id).filter(User.username == username)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


def _set_roles(db: Session, user: User, role_ids: list[int]) -> None:
    """Replace the user's role assignments. Raises NotFound for unknown role ids."""
    wanted = set(role_ids)
    roles = db.query(Role).filter(Role.id.in_(wanted)).all() if wanted else []
    if len(roles) != len(wanted):
        raise NotFound("RoleNotFound")
    kept = [ur for ur in user.user_roles if ur.role_id in wanted]
    have = {ur.role_id for ur in kept}
    user.user_roles = kept + [UserRole(role=role) for role in roles if role.id not in have]


def _commit_user(db: Session, user: User) -> None:
    """Commit; a unique-constraint race is reported like the pre-check would."""
    email, user_id = user.email, user.id
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if _email_in_use(db, email, exclude_id=user_id):
            raise Conflict("EmailAlreadyExists") from e
        raise Conflict("UsernameAlreadyExists") from e
    db.refresh(user)


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role_ids: list[int] | None = None,
) -> User:
    """Create a user. Raises Conflict on a duplicate email or username."""
    username = username.strip()
    email = email.strip()
    validate_username(username)
    validate_password(password)
    if _email_in_use(db, email):
        raise Conflict("EmailAlreadyExists")
    if _username_in_use(db, username):
        raise Conflict("UsernameAlreadyExists")

    user = User(username=username, email=email, password_hash=hash_password(password))
    db.add(user)
    if role_ids:
        _set_roles(db, user, role_ids)
    _commit_user(db, user)
    logger.info("User created: id=%s username=%s", user.id, user.username)
    return user


def update_user(
    db: Session,
    actor: Principal,
    user_id: int,
    username: str | None = None,
    email: str | None = None,
    password: str | None = None,
    role_ids: list[int] | None = None,
) -> User:
    """
    Apply a partial update. Only Admin or the user themself may update;
    only Admin may change role assignments.

    Raises NotFound when the target is missing (checked first), Forbidden
    for any other principal, Conflict when the new email or username
    belongs to a different user.
    """
    user = get_user(db, user_id)
    if not actor.is_admin and actor.id != user_id:
        raise Forbidden()
    if role_ids is not None and not actor.is_admin:
        raise Forbidden()

    if not _blank(username):
        username = username.strip()
        validate_username(username)
        if _username_in_use(db, username, exclude_id=user_id):
            raise Conflict("UsernameAlreadyExists")
        user.username = username
    if not _blank(email):
        email = email.strip()
        if _email_in_use(db, email, exclude_id=user_id):
            raise Conflict("EmailAlreadyExists")
        user.email = email
    if not _blank(password):
        validate_password(password)
        user.password_hash = hash_password(password)
    if role_ids is not None:
        _set_roles(db, user, role_ids)

    _commit_user(db, user)
    logger.info("User updated: id=%s by=%s", user.id, actor.id)
    return user


def delete_user(db: Session, user_id: int) -> bool:
    """Delete a user and, by cascade, its role assignments and refresh tokens.

    Idempotent: returns False when there was nothing to delete.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        return False
    db.delete(user)
    db.commit()
    logger.info("User deleted: id=%s", user_id)
    return True
