"""Session token signing and verification.

Tokens are compact HS256 JWTs (``header.payload.signature``, base64url without
padding) carrying the user id and email. They are stateless: nothing is stored
server-side, so a token stays valid until it expires.
"""

import base64
import binascii
import hashlib
import hmac
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from nutrition_planner.domain.errors import TokenInvalid

_HEADER = {"alg": "HS256", "typ": "JWT"}


@dataclass(frozen=True)
class TokenClaims:
    """Decoded token payload."""

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class TokenSigner:
    """Issues and verifies HMAC-signed session tokens."""

    secret: str
    ttl: timedelta = timedelta(days=7)
    clock: Callable[[], datetime] = field(default=_utcnow)

    def issue(self, user_id: str, email: str) -> str:
        """Create a signed token for the user."""
        now = self.clock()
        payload = {
            "id": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        signing_input = f"{_encode_segment(_HEADER)}.{_encode_segment(payload)}"
        return f"{signing_input}.{self._sign(signing_input)}"

    def decode(self, token: str) -> TokenClaims:
        """Verify signature and expiry and return the claims.

        Raises ``TokenInvalid`` for anything that is not a live token signed
        with our secret.
        """
        parts = token.split(".")
        if len(parts) != 3 or not token.isascii():
            raise TokenInvalid()
        header_segment, payload_segment, signature = parts
        signing_input = f"{header_segment}.{payload_segment}"
        if not hmac.compare_digest(signature, self._sign(signing_input)):
            raise TokenInvalid()
        header = _decode_segment(header_segment)
        if header.get("alg") != _HEADER["alg"]:
            raise TokenInvalid()
        payload = _decode_segment(payload_segment)
        user_id = payload.get("id")
        email = payload.get("email")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise TokenInvalid()
        if not isinstance(issued_at, int) or not isinstance(expires_at, int):
            raise TokenInvalid()
        if expires_at <= self.clock().timestamp():
            raise TokenInvalid("Token has expired")
        return TokenClaims(
            user_id=user_id,
            email=email,
            issued_at=datetime.fromtimestamp(issued_at, tz=UTC),
            expires_at=datetime.fromtimestamp(expires_at, tz=UTC),
        )

    def _sign(self, signing_input: str) -> str:
        digest = hmac.new(
            self.secret.encode(), signing_input.encode(), hashlib.sha256
        ).digest()
        return _b64encode(digest)


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _encode_segment(data: dict[str, object]) -> str:
    return _b64encode(json.dumps(data, separators=(",", ":")).encode())


def _decode_segment(segment: str) -> dict[str, object]:
    padded = segment + "=" * (-len(segment) % 4)
    try:
        decoded = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise TokenInvalid() from exc
    if not isinstance(decoded, dict):
        raise TokenInvalid()
    return decoded
