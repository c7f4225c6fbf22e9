"""Look up signed-in users for the session layer."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from supermarket.entities import User


class BackendError(Exception):
    """The authentication backend could not reach its data."""


@dataclass(frozen=True)
class AuthUser:
    """A user as seen by the session layer; other attributes come from the user."""

    user: User

    def id(self) -> uuid.UUID:
        return self.user.id

    def __getattr__(self, name: str):
        if name == "user":
            raise AttributeError(name)
        return getattr(self.user, name)


class Backend:
    """Loads users from the database."""

    def __init__(self, database: Engine) -> None:
        self.database = database

    def get_user(self, user_id: uuid.UUID) -> AuthUser | None:
        """The user with ``user_id``, or ``None`` when there is none."""
        try:
            with Session(self.database, expire_on_commit=False) as session:
                user = session.get(User, user_id)
        except SQLAlchemyError as error:
            raise BackendError(str(error)) from error
        return None if user is None else AuthUser(user)