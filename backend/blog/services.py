"""Business logic services used by HTTP controllers.

This module holds the two lifecycle services: `AccountService` for
users and `BoardService` for posts. Every call receives the acting
`Principal` (or `None`) explicitly; the services never look at request
or session state themselves. Errors from `blog.errors` are raised where
the problem is detected and left for the boundary to translate.
"""

import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from . import models, repositories
from .auth import is_owner
from .errors import AuthenticationRequired, Conflict, Forbidden, InvalidCredentials, NotFound
from .sessions import Principal

logger = logging.getLogger("blog.services")


def require_principal(principal: Optional[Principal]) -> Principal:
    """Return `principal` or raise `AuthenticationRequired` if absent."""
    if principal is None:
        raise AuthenticationRequired("login required")
    return principal


class AccountService:
    """Registration, login and self-service profile updates."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def register(self, username: str, password: str, email: str) -> models.User:
        """Create a new user.

        Raises `Conflict` if the username is taken, including when a
        concurrent registration wins the race to the unique index. The
        new user is not logged in.
        """
        if self.find_by_username(username) is not None:
            raise Conflict(f"username already exists: {username}")
        user = models.User(username=username, password=password, email=email)
        try:
            return self.user_repo.create(user)
        except IntegrityError as e:
            # only the username unique index means "taken"; other constraint failures propagate
            if "username" not in str(e.orig):
                raise
            raise Conflict(f"username already exists: {username}")

    def authenticate(self, username: str, password: str) -> models.User:
        """Return the single user matching `username` and `password` exactly.

        Zero or ambiguous matches raise `InvalidCredentials`. Installing
        the user into the session is the caller's job.
        """
        matches = self.user_repo.list_by_credentials(username, password)
        if len(matches) != 1:
            logger.info("login failed username=%s", username)
            raise InvalidCredentials("wrong username or password")
        logger.info("login succeeded user_id=%s", matches[0].id)
        return matches[0]

    def update_profile(self, principal: Optional[Principal], new_password: str, new_email: str) -> models.User:
        """Change the caller's own password and email and commit.

        The target is always the caller, so no ownership check applies.
        The returned user should replace the session's principal.
        """
        principal = require_principal(principal)
        user = self.get(principal.id)
        user.password = new_password
        user.email = new_email
        return self.user_repo.save(user)

    def find_by_username(self, username: str) -> Optional[models.User]:
        """Return the user with `username`, or `None`."""
        return self.user_repo.get_by_username(username)

    def get(self, user_id: int) -> models.User:
        user = self.user_repo.get(user_id)
        if user is None:
            raise NotFound(f"user not found: {user_id}")
        return user

    def profile(self, principal: Optional[Principal]) -> Principal:
        """Return the data shown on the profile edit form."""
        return require_principal(principal)


class BoardService:
    """Create, read, update and delete posts with ownership checks."""
    def __init__(self, session: Session):
        self.session = session
        self.board_repo = repositories.BoardRepository(session)

    def create(self, title: str, content: str, principal: Optional[Principal]) -> models.Board:
        """Persist a new board owned by the caller."""
        owner = require_principal(principal)
        board = models.Board(title=title, content=content, user_id=owner.id)
        return self.board_repo.create(board)

    def get(self, board_id: int) -> models.Board:
        """Fetch a board for public reading; raises `NotFound`."""
        board = self.board_repo.get(board_id)
        if board is None:
            raise NotFound(f"board not found: {board_id}")
        return board

    def list_all(self) -> List[models.Board]:
        """Return all boards, newest first."""
        boards = self.board_repo.list_all()
        logger.info("listed %d boards", len(boards))
        return boards

    def get_for_update(self, board_id: int, principal: Optional[Principal]) -> models.Board:
        """Fetch a board the caller is about to edit.

        Authentication, existence and ownership are checked in that
        order, so an anonymous caller never learns whether the id exists.
        """
        acting = require_principal(principal)
        board = self.get(board_id)
        if not is_owner(board, acting.id):
            logger.warning("board access denied id=%s user_id=%s", board_id, acting.id)
            raise Forbidden(f"not the owner of board {board_id}")
        return board

    def update(self, board_id: int, title: str, content: str, principal: Optional[Principal]) -> models.Board:
        """Change title and content of a board the caller owns.

        Fetch, check, mutate and commit run on one session; the commit
        happens before this returns.
        """
        board = self.get_for_update(board_id, principal)
        board.title = title
        board.content = content
        return self.board_repo.save(board)

    def delete(self, board_id: int, principal: Optional[Principal]) -> None:
        """Permanently delete a board the caller owns."""
        board = self.get_for_update(board_id, principal)
        self.board_repo.delete(board)
