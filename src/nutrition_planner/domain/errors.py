"""Typed errors reported to API clients."""


class AppError(Exception):
    """Base class for domain failures reported to API clients.

    Each subclass carries the HTTP status the routing layer should answer with
    and a default message that is safe to show to end users.
    """

    http_status = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, object]:
        return {"message": self.message}


class ValidationError(AppError):
    """Missing or malformed request fields."""

    http_status = 400
    default_message = "Email and password are required"


class DuplicateEmail(AppError):
    http_status = 400
    default_message = "Email is already registered"


class DuplicateUsername(AppError):
    http_status = 400
    default_message = "Username is already taken"


class InvalidCredentials(AppError):
    """Login failure; never says whether the email or the password was wrong."""

    http_status = 401
    default_message = "Invalid email or password"


class TokenInvalid(AppError):
    """Session token is malformed, expired, forged or points at no user."""

    http_status = 401
    default_message = "Invalid or expired token"


class StoreUnavailable(AppError):
    """The user store could not be reached."""

    http_status = 503
    default_message = "Service temporarily unavailable"
