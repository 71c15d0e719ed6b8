"""In-memory session registry: opaque random token -> user id."""

import logging
import secrets
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from tracky.core.errors import SessionNotFoundError

logger = logging.getLogger(__name__)

# 16 random bytes = 128 bits of entropy
SESSION_TOKEN_BYTES = 16


class ReadWriteLock:
    """
    Many concurrent readers or a single writer.

    Writers waiting for the lock block new readers so a steady stream of
    resolves cannot starve a login or logout.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def _default_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


class SessionRegistry:
    """
    Volatile session store for the opaque-handle auth strategy.

    Entries never expire on their own; they live until delete() or process
    restart. Not shared between processes, so a multi-worker deployment needs
    the signed strategy or an external store.
    """

    def __init__(self, token_factory: Callable[[], str] = _default_token) -> None:
        self._sessions: dict[str, int] = {}
        self._lock = ReadWriteLock()
        self._token_factory = token_factory

    def create(self, user_id: int) -> str:
        """Register a new session for user_id and return its token."""
        with self._lock.write_locked():
            token = self._token_factory()
            while token in self._sessions:
                token = self._token_factory()
            self._sessions[token] = user_id
        logger.debug("Session created", extra={"user_id": user_id})
        return token

    def resolve(self, token: str) -> int:
        """Return the user id for token. Raises SessionNotFoundError if absent."""
        with self._lock.read_locked():
            user_id = self._sessions.get(token)
        if user_id is None:
            raise SessionNotFoundError("Session not found")
        return user_id

    def delete(self, token: str) -> None:
        """Remove token; deleting an unknown token is a no-op."""
        with self._lock.write_locked():
            self._sessions.pop(token, None)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._sessions)
