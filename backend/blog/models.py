"""SQLModel data models.

This module defines the application's database tables using SQLModel.
A `User` owns any number of `Board` posts; each board points back at
exactly one owner through `user_id`.
"""

from typing import List, Optional
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, timezone


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `username`: unique, case-sensitive login name; never changes
    - `password`: plaintext credential, compared verbatim on login
    - `email`: contact address, editable by the user
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False, unique=True)
    password: str
    email: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    boards: List['Board'] = Relationship(back_populates='user')


class Board(SQLModel, table=True):
    """A blog post written by a single `User`.

    `user_id` is set on creation and is the only input to ownership
    checks.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    content: str
    user_id: int = Field(foreign_key='user.id', index=True, nullable=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    user: Optional[User] = Relationship(back_populates='boards')
