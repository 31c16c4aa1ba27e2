"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as drives/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Duplicate emails are rejected by the UNIQUE constraint on users.email, not
  by a read-then-insert check, so two concurrent signups for the same address
  cannot both succeed.

Layer rule: no imports from api/ or drives/.
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.tokens import hash_password
from core.db import now_iso, users
from core.errors import Conflict, InvalidInput

logger = logging.getLogger("lifelink.auth")

MIN_PASSWORD_LENGTH = 6
# bcrypt ignores (and bcrypt>=5 rejects) anything past 72 bytes.
_MAX_PASSWORD_BYTES = 72


class UserStore:
    """Repository for User entities (the credential store).

    Usage:
        store = UserStore(make_engine("sqlite:///lifelink.db"))
        user_id = store.register("a@x.com", "secret1")
        user = store.get_by_email("a@x.com")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def register(self, email: str, password: str) -> int:
        """Create an account and return its id.

        Raises:
            InvalidInput: blank email, password shorter than six characters,
                          or longer than bcrypt can hash.
            Conflict:     the email is already registered. The existing
                          record is left untouched.
        """
        email = (email or "").strip()
        password = password or ""
        if not email or len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(
                f"Please provide a valid email and a password of at least {MIN_PASSWORD_LENGTH} characters."
            )
        if len(password.encode("utf-8")) > _MAX_PASSWORD_BYTES:
            raise InvalidInput("Password is too long.")

        user = User(email=email, password_hash=hash_password(password))
        try:
            user_id = self.create_user(user)
        except IntegrityError as exc:
            raise Conflict() from exc
        logger.info("User registered (user_id=%d)", user_id)
        return user_id

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                users.insert().values(
                    email=user.email,
                    password_hash=user.password_hash,
                    created_at=_created_at(user),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None


def _created_at(user: User) -> str:
    return user.created_at or now_iso()


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
