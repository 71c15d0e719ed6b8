"""Password hashing and signed auth-token creation/verification."""

import base64
import hashlib
import hmac
import re
import time
from collections.abc import Callable
from datetime import timedelta

import bcrypt

from tracky.core.errors import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 128

# Signed tokens and their cookie share one lifetime.
TOKEN_LIFETIME = timedelta(days=7)

_FIELD_SEPARATOR = "."

# base64url alphabet only; "+" and "/" are rejected rather than treated as aliases
_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*={0,2}")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _b64encode(raw: bytes) -> str:
    # Unpadded: "=" would force the cookie value to be quoted
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(value: str) -> bytes:
    if not _B64URL_RE.fullmatch(value):
        raise ValueError("not base64url")
    padded = value + "=" * (-len(value) % 4)
    # validate=True rejects misplaced padding instead of skipping it
    return base64.b64decode(padded, altchars=b"-_", validate=True)


class SignedTokenCodec:
    """
    Stateless identity assertion: base64url("<user_id>.<exp>.<signature>").

    The signature is base64url(HMAC-SHA256(secret, "<user_id>.<exp>")). Nothing
    is stored server-side; a token is valid until it expires or the secret changes.
    """

    def __init__(
        self,
        secret: str,
        lifetime: timedelta = TOKEN_LIFETIME,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("Signing secret must be non-empty")
        self._secret = secret.encode("utf-8")
        self.lifetime = lifetime
        self._clock = clock

    def _sign(self, payload: str) -> str:
        digest = hmac.new(self._secret, payload.encode("utf-8"), hashlib.sha256).digest()
        return _b64encode(digest)

    def issue(self, user_id: int) -> str:
        """Create a token for user_id that expires after the configured lifetime."""
        expiration = int(self._clock() + self.lifetime.total_seconds())
        payload = f"{user_id}{_FIELD_SEPARATOR}{expiration}"
        signature = self._sign(payload)
        return _b64encode(f"{payload}{_FIELD_SEPARATOR}{signature}".encode("utf-8"))

    def validate(self, token: str) -> int:
        """
        Return the user id carried by token.

        The signature is checked before the expiration field is trusted, so a
        client cannot extend a token without knowing the secret.
        Raises MalformedTokenError, InvalidSignatureError or TokenExpiredError.
        """
        try:
            decoded = _b64decode(token).decode("utf-8")
        except ValueError as e:
            raise MalformedTokenError("Token is not valid base64url") from e

        parts = decoded.split(_FIELD_SEPARATOR)
        if len(parts) != 3:
            raise MalformedTokenError("Token must have exactly three fields")
        user_id_str, expiration_str, signature = parts

        expected = self._sign(f"{user_id_str}{_FIELD_SEPARATOR}{expiration_str}")
        if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
            raise InvalidSignatureError("Token signature mismatch")

        try:
            expiration = int(expiration_str)
        except ValueError as e:
            raise MalformedTokenError("Token expiration is not an integer") from e
        if self._clock() > expiration:
            raise TokenExpiredError("Token expired")

        try:
            return int(user_id_str)
        except ValueError as e:
            raise MalformedTokenError("Token user id is not an integer") from e
