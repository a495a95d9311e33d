"""Logical outcomes of a controller call and their HTTP translation.

Controllers return one of these instead of building responses directly:
`Render` names a view and carries its data, the other classes are the
redirect targets the blog knows about. `to_response` is the only place
that turns them into Starlette responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse, Response


@dataclass(frozen=True)
class Render:
    view: str
    data: dict = field(default_factory=dict)
    status_code: int = 200


@dataclass(frozen=True)
class ShowDetail:
    board_id: int

    @property
    def url(self) -> str:
        return f"/board/{self.board_id}"


@dataclass(frozen=True)
class ShowList:
    url: str = "/"


@dataclass(frozen=True)
class ShowUpdateForm:
    """Redirect back to the profile edit form."""
    url: str = "/user/update-form"


@dataclass(frozen=True)
class RequireLogin:
    url: str = "/login-form"


def to_response(outcome: Any) -> Response:
    """Translate an outcome into a JSON view or a 303 redirect."""
    if isinstance(outcome, Render):
        body = {"view": outcome.view, **jsonable_encoder(outcome.data)}
        return JSONResponse(status_code=outcome.status_code, content=body)
    return RedirectResponse(url=outcome.url, status_code=303)
