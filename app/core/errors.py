"""Service-layer errors. Each carries a message key resolved by app.core.i18n."""


class AppError(Exception):
    """Base for errors that map onto an HTTP status with a localized message."""

    status_code: int = 400
    default_key: str = "BadRequest"

    def __init__(self, message_key: str | None = None) -> None:
        self.message_key = message_key or self.default_key
        super().__init__(self.message_key)


class InvalidCredentials(AppError):
    """Unknown identifier or wrong password (deliberately indistinguishable)."""

    status_code = 401
    default_key = "InvalidCredentials"


class UserAlreadyExists(AppError):
    """Auto-create derived a username or email that is already taken."""

    status_code = 400
    default_key = "UserAlreadyExists"


class InvalidRefreshToken(AppError):
    """Refresh token missing, revoked, or expired."""

    status_code = 401
    default_key = "InvalidRefreshToken"


class Forbidden(AppError):
    status_code = 403
    default_key = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_key = "NotFound"


class Conflict(AppError):
    """Duplicate email, username or role name on write."""

    status_code = 400
    default_key = "Conflict"


class InvalidPassword(AppError):
    status_code = 422
    default_key = "InvalidPasswordLength"


class InvalidUsername(AppError):
    status_code = 422
    default_key = "InvalidUsernameLength"


class InvalidAntiForgeryToken(AppError):
    """Form post without a matching anti-forgery token."""

    status_code = 400
    default_key = "InvalidAntiForgeryToken"
