"""
Login, login-or-create, refresh and logout.

Passwords are verified with bcrypt, access tokens are stateless JWTs, and each
login appends one refresh-token row valid for 7 days. Refresh does not rotate:
the same refresh token keeps working until it expires or is revoked.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import InvalidCredentials, InvalidRefreshToken, UserAlreadyExists
from app.core.security import (
    create_access_token,
    generate_refresh_token,
    hash_password,
    refresh_token_expiry,
    verify_password,
)
from app.models import RefreshToken, User
from app.schemas.auth import TokenResponse
from app.services.users import (
    find_by_identifier,
    username_or_email_taken,
    validate_password,
    validate_username,
)

logger = logging.getLogger(__name__)

# Domain appended to auto-created accounts that sign in with a bare username.
PLACEHOLDER_EMAIL_DOMAIN = "example.com"


def derive_account_names(identifier: str) -> tuple[str, str]:
    """
    Split a login identifier into (username, email) for auto-create.

    "bob@x.com" -> ("bob", "bob@x.com"); "bob" -> ("bob", "bob@example.com").
    """
    value = identifier.strip()
    if "@" in value:
        return value.split("@", 1)[0], value
    return value, f"{value}@{PLACEHOLDER_EMAIL_DOMAIN}"


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def _create_account(db: Session, identifier: str, password: str) -> User:
    username, email = derive_account_names(identifier)
    validate_username(username)
    validate_password(password)
    if username_or_email_taken(db, username, email):
        raise UserAlreadyExists()

    user = User(username=username, email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise UserAlreadyExists() from e
    db.refresh(user)
    logger.info("Account auto-created: id=%s username=%s", user.id, user.username)
    return user


def authenticate(
    db: Session, identifier: str, password: str, auto_create: bool = False
) -> User:
    """
    Resolve identifier (username or email) to a user with a matching password.

    A missing user is created when auto_create is set; otherwise it fails with
    InvalidCredentials exactly like a wrong password does.
    """
    user = find_by_identifier(db, identifier)
    if user is not None:
        if not verify_password(password, user.password_hash):
            logger.info("Login failed: bad password for identifier=%s", identifier)
            raise InvalidCredentials()
        return user
    if not auto_create:
        logger.info("Login failed: unknown identifier=%s", identifier)
        raise InvalidCredentials()
    return _create_account(db, identifier, password)


def issue_tokens(db: Session, user: User) -> TokenResponse:
    """Mint an access token and persist a new refresh token for user."""
    access = create_access_token(user.id, user.username, user.email, user.role_names)
    refresh = generate_refresh_token()
    db.add(RefreshToken(token=refresh, expires_at=refresh_token_expiry(), user_id=user.id))
    db.commit()
    return TokenResponse(access_token=access, refresh_token=refresh)


def login(db: Session, identifier: str, password: str) -> TokenResponse:
    user = authenticate(db, identifier, password, auto_create=False)
    tokens = issue_tokens(db, user)
    logger.info("Login succeeded: user_id=%s", user.id)
    return tokens


def login_or_create(
    db: Session, identifier: str, password: str, auto_create: bool
) -> TokenResponse:
    user = authenticate(db, identifier, password, auto_create=auto_create)
    tokens = issue_tokens(db, user)
    logger.info("Login succeeded: user_id=%s auto_create=%s", user.id, auto_create)
    return tokens


def refresh(db: Session, refresh_token: str) -> TokenResponse:
    """
    Exchange a stored, unrevoked, unexpired refresh token for a new access token.
    The refresh token itself is returned unchanged.
    """
    row = db.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
    if row is None:
        logger.info("Refresh failed: unknown token")
        raise InvalidRefreshToken()
    if row.is_revoked:
        logger.info("Refresh failed: revoked token id=%s", row.id)
        raise InvalidRefreshToken()
    if _as_utc(row.expires_at) < datetime.now(UTC):
        logger.info("Refresh failed: expired token id=%s", row.id)
        raise InvalidRefreshToken()

    user = row.user
    access = create_access_token(user.id, user.username, user.email, user.role_names)
    return TokenResponse(access_token=access, refresh_token=refresh_token)


def revoke(db: Session, refresh_token: str) -> bool:
    """Mark a refresh token revoked (logout). Unknown tokens are ignored."""
    row = db.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
    if row is None:
        return False
    if not row.is_revoked:
        row.is_revoked = True
        db.commit()
        logger.info("Refresh token revoked: id=%s user_id=%s", row.id, row.user_id)
    return True
