"""Server-side login sessions.

`SessionStore` maps an opaque token (carried by a cookie) to the
`Principal` that logged in with it. `SessionContext` is the per-request
view over a single token that routes use to read, install or clear the
current user. Nothing here touches the database: the principal is a
snapshot taken at login and refreshed after a profile update.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from . import models

logger = logging.getLogger("blog.sessions")


@dataclass(frozen=True)
class Principal:
    """The logged-in user as seen by the lifecycles."""
    id: int
    username: str
    email: str = ""

    @classmethod
    def from_user(cls, user: models.User) -> "Principal":
        return cls(id=user.id, username=user.username, email=user.email)


class SessionStore:
    """Thread-safe in-memory token -> principal map.

    Entries leave only through `discard` (logout or login rotation); there
    is no expiry, so sessions abandoned without logging out stay until the
    process restarts.
    """

    def __init__(self):
        self._sessions: dict[str, Principal] = {}
        self._lock = threading.Lock()

    @staticmethod
    def new_token() -> str:
        return uuid.uuid4().hex

    def get(self, token: Optional[str]) -> Optional[Principal]:
        if not token:
            return None
        with self._lock:
            return self._sessions.get(token)

    def put(self, token: str, principal: Principal) -> None:
        with self._lock:
            self._sessions[token] = principal

    def discard(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class SessionContext:
    """Identity holder for one client session.

    The token is allocated lazily on the first `set_current_user` call so
    anonymous visitors never get a server-side entry. Only tokens issued
    by the store are ever bound: a token the store does not know is
    replaced, and `new_session=True` (login) always rotates it.
    """

    def __init__(self, store: SessionStore, token: Optional[str] = None):
        self.store = store
        self.token = token

    def current_user(self) -> Optional[Principal]:
        return self.store.get(self.token)

    def set_current_user(self, user: Union[models.User, Principal], new_session: bool = False) -> Principal:
        principal = user if isinstance(user, Principal) else Principal.from_user(user)
        if new_session:
            self.store.discard(self.token)
            self.token = None
        if self.store.get(self.token) is None:
            self.token = self.store.new_token()
        self.store.put(self.token, principal)
        logger.info("session bound user_id=%s", principal.id)
        return principal

    def clear(self) -> None:
        principal = self.current_user()
        self.store.discard(self.token)
        if principal is not None:
            logger.info("session cleared user_id=%s", principal.id)
