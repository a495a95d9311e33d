"""Authentication helpers, the ownership guard and FastAPI dependencies.

`is_owner` is the single authorization predicate used before every
mutating board operation. `get_session_context` and `get_principal`
resolve the caller's session from the request cookie; they never raise,
so public routes can use them too and protected work is refused by the
services themselves.
"""

from typing import Optional

from fastapi import Depends, Request

from . import models
from .config import settings
from .sessions import Principal, SessionContext, SessionStore

session_store = SessionStore()


def is_owner(board: models.Board, acting_user_id: Optional[int]) -> bool:
    """Return True if `acting_user_id` owns `board`.

    Pure predicate: no lookups, no exceptions. An absent acting id never
    owns anything.
    """
    if acting_user_id is None:
        return False
    return board.user_id == acting_user_id


def get_session_store() -> SessionStore:
    """FastAPI dependency returning the process-wide session store."""
    return session_store


def get_session_context(request: Request, store: SessionStore = Depends(get_session_store)) -> SessionContext:
    """Bind a `SessionContext` to the session cookie of this request."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return SessionContext(store, token)


def get_principal(ctx: SessionContext = Depends(get_session_context)) -> Optional[Principal]:
    """Return the logged-in principal or `None` for anonymous callers."""
    return ctx.current_user()


def set_session_cookie(response, token: str) -> None:
    """Write the session token as an httpOnly cookie on `response`."""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.SECURE_COOKIES,
    )
