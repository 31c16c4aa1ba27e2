"""
core/db.py -- Shared SQLAlchemy Core schema and engine factory.

All three tables live on one MetaData because drives carries foreign keys
into both users and locations; create_all() needs the whole graph at once.
Stores (auth/store.py, drives/locations.py, drives/store.py) import the Table
objects from here and never define schema of their own.

Uses SQLAlchemy Core (not ORM) so the dataclasses in auth/models.py and
drives/models.py remain the authoritative domain representation. Swapping
SQLite for PostgreSQL or MySQL is a DATABASE_URL change.

SQLite specifics (applied per connection, PRAGMAs are not inherited across
pooled connections):
  journal_mode=WAL  -- readers do not block during writes.
  foreign_keys=ON   -- SQLite ignores REFERENCES clauses without it.

Layer rule: core/ is the kernel. No imports from api/, auth/, or drives/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Date, Float, ForeignKey, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)

locations = Table(
    "locations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("latitude", Float, nullable=False),
    Column("longitude", Float, nullable=False),
)

drives = Table(
    "drives",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("organizer_name", String(255), nullable=False),
    Column("drive_date", Date, nullable=False, index=True),
    # Exactly one of location_id / location_name is set, depending on LOCATION_MODE.
    Column("location_id", Integer, ForeignKey("locations.id")),
    Column("location_name", String(255)),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def _sqlite_pragmas(dbapi_conn, connection_record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(db_url: str) -> Engine:
    """Create a pooled engine for db_url and make sure the schema exists.

    create_all() only creates missing tables, so calling this on every
    startup is safe against an existing database.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args, pool_pre_ping=True)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _sqlite_pragmas)
    metadata.create_all(engine)
    return engine


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
