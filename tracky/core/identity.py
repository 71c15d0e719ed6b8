"""Identity verifiers: one interface over the signed-cookie and session strategies."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from starlette.responses import Response

from tracky.core.security import TOKEN_LIFETIME, SignedTokenCodec
from tracky.core.sessions import SessionRegistry

if TYPE_CHECKING:
    from tracky.core.config import Settings

SIGNED_COOKIE_NAME = "auth_token"
SESSION_COOKIE_NAME = "session_token"


class IdentityVerifier(ABC):
    """
    Issues bearer tokens at login and resolves them back to a user id.

    The middleware and the auth routes only talk to this interface, so a
    deployment can switch strategy through configuration alone.
    """

    cookie_name: str
    # Cookie Max-Age in seconds; None means a browser-session cookie
    cookie_max_age: int | None = None

    def __init__(self, secure_cookie: bool = False) -> None:
        self.secure_cookie = secure_cookie

    @abstractmethod
    def issue(self, user_id: int) -> str:
        """Return a new token for user_id."""

    @abstractmethod
    def resolve(self, token: str) -> int:
        """Return the user id for token; raise an IdentityError subclass otherwise."""

    def revoke(self, token: str) -> None:
        """Invalidate token server-side, where the strategy keeps state."""

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.cookie_max_age,
            path="/",
            secure=self.secure_cookie,
            httponly=True,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            secure=self.secure_cookie,
            httponly=True,
            samesite="lax",
        )


class SignedCookieVerifier(IdentityVerifier):
    """Stateless HMAC-signed cookie; logout only clears the cookie."""

    cookie_name = SIGNED_COOKIE_NAME
    cookie_max_age = int(TOKEN_LIFETIME.total_seconds())

    def __init__(self, codec: SignedTokenCodec, secure_cookie: bool = False) -> None:
        super().__init__(secure_cookie)
        self.codec = codec

    def issue(self, user_id: int) -> str:
        return self.codec.issue(user_id)

    def resolve(self, token: str) -> int:
        return self.codec.validate(token)


class SessionVerifier(IdentityVerifier):
    """Opaque handle looked up in a SessionRegistry; logout deletes the entry."""

    cookie_name = SESSION_COOKIE_NAME

    def __init__(self, registry: SessionRegistry, secure_cookie: bool = False) -> None:
        super().__init__(secure_cookie)
        self.registry = registry

    def issue(self, user_id: int) -> str:
        return self.registry.create(user_id)

    def resolve(self, token: str) -> int:
        return self.registry.resolve(token)

    def revoke(self, token: str) -> None:
        self.registry.delete(token)


def build_verifier(settings: "Settings") -> IdentityVerifier:
    """Construct the verifier selected by AUTH_STRATEGY."""
    if settings.AUTH_STRATEGY == "session":
        return SessionVerifier(SessionRegistry(), secure_cookie=settings.COOKIE_SECURE)
    codec = SignedTokenCodec(settings.COOKIE_SECRET.get_secret_value())
    return SignedCookieVerifier(codec, secure_cookie=settings.COOKIE_SECURE)
