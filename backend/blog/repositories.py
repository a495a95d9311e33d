"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
boards). Repositories return SQLModel objects, never raise for a missing
row (they return `None` instead) and perform commits/refreshes where
appropriate. A failed commit is rolled back before the error propagates
so the session stays usable.
"""

import logging
from typing import List, Optional
from sqlmodel import Session, select
from . import models

logger = logging.getLogger("blog.repositories")


class _Repository:
    def __init__(self, session: Session):
        self.session = session

    def _commit(self):
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise


class UserRepository(_Repository):
    """CRUD operations for `User` objects."""

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance.

        Raises `sqlalchemy.exc.IntegrityError` if the username is taken
        by a row committed after the caller's uniqueness check.
        """
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        logger.info("user saved id=%s username=%s", user.id, user.username)
        return user

    def save(self, user: models.User) -> models.User:
        """Commit pending changes on an already loaded user."""
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        logger.info("user updated id=%s", user.id)
        return user

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)

    def get_by_username(self, username: str) -> Optional[models.User]:
        """Return a `User` by username or `None` if not found."""
        stmt = select(models.User).where(models.User.username == username)
        return self.session.exec(stmt).first()

    def list_by_credentials(self, username: str, password: str) -> List[models.User]:
        """Return every user whose username and password both match exactly.

        The caller decides what zero or several matches mean.
        """
        stmt = select(models.User).where(
            models.User.username == username,
            models.User.password == password
        )
        return self.session.exec(stmt).all()


class BoardRepository(_Repository):
    """CRUD operations for `Board` posts."""

    def create(self, board: models.Board) -> models.Board:
        """Insert a new board and return it with its assigned id."""
        self.session.add(board)
        self._commit()
        self.session.refresh(board)
        logger.info("board saved id=%s user_id=%s", board.id, board.user_id)
        return board

    def save(self, board: models.Board) -> models.Board:
        """Commit in-place edits made to a board fetched from this session."""
        self.session.add(board)
        self._commit()
        self.session.refresh(board)
        logger.info("board updated id=%s", board.id)
        return board

    def get(self, board_id: int) -> Optional[models.Board]:
        """Fetch a board by id."""
        return self.session.get(models.Board, board_id)

    def list_all(self) -> List[models.Board]:
        """Return every board, newest first (highest id first)."""
        stmt = select(models.Board).order_by(models.Board.id.desc())
        return self.session.exec(stmt).all()

    def delete(self, board: models.Board) -> None:
        """Permanently remove `board`."""
        board_id = board.id
        self.session.delete(board)
        self._commit()
        logger.info("board deleted id=%s", board_id)
