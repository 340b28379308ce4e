"""Account registration, login and session-token checks."""

import logging
import secrets
from dataclasses import dataclass, field
from functools import cached_property
from typing import Protocol

from nutrition_planner.domain.errors import (
    DuplicateEmail,
    DuplicateUsername,
    InvalidCredentials,
    TokenInvalid,
    ValidationError,
)
from nutrition_planner.domain.users import (
    AuthResult,
    NewUser,
    UsernameAvailability,
    UserRecord,
    UserView,
    normalize_email,
    normalize_name,
)
from nutrition_planner.services.passwords import PasswordHasher
from nutrition_planner.services.tokens import TokenSigner

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 2
MAX_PASSWORD_BYTES = 72


class UserRepository(Protocol):
    """Persistence interface for user accounts.

    Implementations must enforce uniqueness of ``email`` and ``name`` in the
    store itself and raise ``DuplicateEmail`` / ``DuplicateUsername`` from
    ``create_user`` when an insert violates it. Connectivity failures are
    raised as ``StoreUnavailable``.
    """

    def ensure_indexes(self) -> None:
        """Create the unique constraints the store relies on."""

    def get_by_id(self, user_id: str) -> UserRecord | None:
        """Return the user with the given primary key, if present."""

    def find_by_email(self, email: str) -> UserRecord | None:
        """Return the user with the normalized email, if present."""

    def find_by_name(self, name: str) -> UserRecord | None:
        """Return the user with exactly this display name, if present."""

    def create_user(self, user: NewUser) -> UserRecord:
        """Insert a new user and return the stored record."""


@dataclass
class AuthService:
    """Application service for account lifecycle and session checks."""

    repository: UserRepository
    tokens: TokenSigner
    hasher: PasswordHasher = field(default_factory=PasswordHasher)

    def register(
        self, email: str | None, password: str | None, name: str | None = None
    ) -> AuthResult:
        """Create an account and return its sanitized view with a fresh token."""
        _require_credentials(email, password)
        _require_encodable(email, password, name)
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"
            )
        normalized_email = normalize_email(email)
        if not normalized_email:
            raise ValidationError()
        normalized_name = normalize_name(name)

        if self.repository.find_by_email(normalized_email):
            logger.info("Registration rejected: email already registered")
            raise DuplicateEmail()
        if normalized_name and self.repository.find_by_name(normalized_name):
            logger.info("Registration rejected: username %r taken", normalized_name)
            raise DuplicateUsername()

        # The store's unique indexes are authoritative; the lookups above only
        # produce friendlier errors in the common case.
        record = self.repository.create_user(
            NewUser(
                email=normalized_email,
                password_hash=self.hasher.hash(password),
                name=normalized_name,
            )
        )
        logger.info("Registered user %s", record.id)
        return self._issue(record)

    def login(self, email: str | None, password: str | None) -> AuthResult:
        """Check credentials and return the user with a fresh token."""
        _require_credentials(email, password)
        _require_encodable(email, password)
        record = self.repository.find_by_email(normalize_email(email))
        # Both failure paths run exactly one bcrypt check.
        password_hash = record.password_hash if record else self._decoy_hash
        if not self.hasher.verify(password, password_hash) or record is None:
            logger.info("Failed login attempt")
            raise InvalidCredentials()
        logger.info("Login: %s", record.id)
        return self._issue(record)

    def verify_token(self, token: str | None) -> UserRecord | None:
        """Return the user a token belongs to, or None if it is not valid."""
        try:
            return self.authenticate(token)
        except TokenInvalid:
            return None

    def authenticate(self, token: str | None) -> UserRecord:
        """Return the token's user or raise ``TokenInvalid``."""
        if not token:
            raise TokenInvalid()
        claims = self.tokens.decode(token)
        record = self.repository.get_by_id(claims.user_id)
        if record is None:
            raise TokenInvalid()
        return record

    def check_username_availability(self, name: str) -> UsernameAvailability:
        """Report whether a display name can still be registered."""
        candidate = name.strip()
        if len(candidate) < MIN_USERNAME_LENGTH:
            return UsernameAvailability(
                available=False,
                message=(
                    f"Username must be at least {MIN_USERNAME_LENGTH} "
                    "characters long"
                ),
                valid=False,
            )
        if self.repository.find_by_name(candidate):
            return UsernameAvailability(
                available=False, message="Username is already taken"
            )
        return UsernameAvailability(available=True, message="Username is available")

    def prepare_storage(self) -> None:
        """Make sure the store enforces the uniqueness constraints."""
        self.repository.ensure_indexes()

    @cached_property
    def _decoy_hash(self) -> str:
        return self.hasher.hash(secrets.token_urlsafe(16))

    def _issue(self, record: UserRecord) -> AuthResult:
        token = self.tokens.issue(record.id, record.email)
        return AuthResult(user=UserView.from_record(record), token=token)


def _require_credentials(email: str | None, password: str | None) -> None:
    if not email or not password:
        raise ValidationError()


def _require_encodable(*values: str | None) -> None:
    """Reject text that cannot be encoded as UTF-8, such as lone surrogates."""
    try:
        for value in values:
            if value is not None:
                value.encode()
    except UnicodeEncodeError as exc:
        raise ValidationError("Invalid characters in request fields") from exc
