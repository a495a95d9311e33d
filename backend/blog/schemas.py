"""Pydantic request/response schemas used by the API.

Request schemas validate the primitive shape of form posts (required,
non-blank, length limits); business rules such as username uniqueness
and ownership live in the services. Response schemas keep the JSON view
payloads stable.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


def _looks_like_email(value: str) -> str:
    if "@" not in value:
        raise ValueError("must be an email address")
    return value


Text = Annotated[str, AfterValidator(_not_blank)]
Email = Annotated[str, Field(max_length=100), AfterValidator(_not_blank), AfterValidator(_looks_like_email)]


class JoinIn(BaseModel):
    """Payload for user registration."""
    username: Annotated[Text, Field(max_length=50)]
    password: Annotated[Text, Field(max_length=100)]
    email: Email


class LoginIn(BaseModel):
    """Payload for the login form."""
    username: Text
    password: Text


class UserUpdateIn(BaseModel):
    """Payload for the profile edit form."""
    password: Annotated[Text, Field(max_length=100)]
    email: Email


class BoardSaveIn(BaseModel):
    """Payload for writing a new post."""
    title: Annotated[Text, Field(max_length=200)]
    content: Text


class BoardUpdateIn(BoardSaveIn):
    """Payload for editing a post; same rules as a new one."""


class UserOut(BaseModel):
    """Public view of a user. The password is never serialized."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str


class BoardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    user_id: int
    created_at: Optional[datetime] = None
    user: Optional[UserOut] = None


class BoardListOut(BaseModel):
    boardList: List[BoardOut]
