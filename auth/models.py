"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work; these only own the shape.

Layer rule: no imports from api/ or drives/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered organizer account.

    Users are created at signup and never modified or deleted afterwards.
    password_hash is a bcrypt hash and never leaves the auth package.
    """

    email: str
    password_hash: str
    id: int | None = None
    created_at: str | None = None

    def identity(self) -> Identity:
        return Identity(id=self.id, email=self.email)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as carried inside a session token.

    This is the explicit session-state object: /api/auth/me returns it and
    every protected route receives it from get_current_identity().
    """

    id: int
    email: str
