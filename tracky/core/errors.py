"""Exception taxonomy for authentication and ownership-scoped storage.

Identity errors are kept distinct so they can be logged, but the HTTP layer
collapses all of them into a single 401. NotFoundError covers both "missing"
and "owned by someone else" and is always reported as 404.
"""


class IdentityError(Exception):
    """Base for every reason a token cannot be turned into a user id."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MalformedTokenError(IdentityError):
    """Token is not valid base64url, has the wrong shape, or carries non-integer fields."""


class InvalidSignatureError(IdentityError):
    """Token signature does not match its payload under the current secret."""


class TokenExpiredError(IdentityError):
    """Token signature is valid but its expiration timestamp has passed."""


class SessionNotFoundError(IdentityError):
    """Opaque session handle is not present in the session registry."""


class InvalidCredentialsError(Exception):
    """Login failed: unknown username or wrong password (never distinguished)."""


class StoreError(Exception):
    """Base for storage-level failures surfaced to handlers."""


class UsernameTakenError(StoreError):
    """Signup with a username that already exists."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Username already taken: {username!r}")


class NotFoundError(StoreError):
    """Resource does not exist or is not owned by the calling user."""

    def __init__(self, kind: str, resource_id: int | str | None = None) -> None:
        self.kind = kind
        self.resource_id = resource_id
        super().__init__(f"{kind} not found")
