"""
drives/store.py -- SQLAlchemy-backed repository for blood drives.

Pattern: Repository + Data Mapper. DriveStore is the repository; _row_to_drive
is the mapper. Route handlers never touch SQL directly.

Ownership model:
  Anyone may list drives. Only the user who created a drive may update or
  delete it. The owner check is part of the mutating statement itself:

      UPDATE drives SET ... WHERE id = :drive_id AND user_id = :owner_id
      DELETE FROM drives  WHERE id = :drive_id AND user_id = :owner_id

  A rowcount of zero means "no such drive" or "not yours"; both raise
  NotFoundOrForbidden so the caller cannot tell other users' drives from missing ones.
  There is no separate existence check, so nothing can change between the
  check and the write.

Location handling is delegated to a LocationResolver (drives/locations.py).
Resolution runs in the same transaction as the insert/update, so a catalog
location cannot disappear between validation and write.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = DriveStore(engine, resolver_for("catalog"))
    drive_id = store.create(user_id, DriveDraft("Korle Bu", "2025-08-20", 1))
    store.update(drive_id, user_id, DriveDraft("Korle Bu", "2025-08-21", 2))
    store.delete(drive_id, user_id)
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from core.db import drives, locations, now_iso
from core.errors import InvalidInput, NotFoundOrForbidden
from drives.locations import LocationResolver
from drives.models import Drive, DriveDraft

logger = logging.getLogger("lifelink.drives")


class DriveStore:
    """Repository for Drive entities with owner-only mutation."""

    def __init__(self, engine: Engine, resolver: LocationResolver) -> None:
        self.engine = engine
        self.resolver = resolver

    @property
    def location_field(self) -> str:
        """Name of the request field that carries the location reference."""
        return self.resolver.field

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self) -> list[Drive]:
        """Return every drive with its location data, soonest first."""
        query = self._listing().order_by(drives.c.drive_date.asc(), drives.c.id.asc())
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_drive(r) for r in rows]

    def get(self, drive_id: int) -> Optional[Drive]:
        with self.engine.connect() as conn:
            row = conn.execute(self._listing().where(drives.c.id == drive_id)).fetchone()
        return _row_to_drive(row) if row is not None else None

    def _listing(self):
        # Catalog rows store only location_id, inline rows only location_name;
        # coalesce yields a display name for both.
        return select(
            drives.c.id,
            drives.c.user_id,
            drives.c.organizer_name,
            drives.c.drive_date,
            drives.c.location_id,
            func.coalesce(locations.c.name, drives.c.location_name).label("location_name"),
            locations.c.latitude,
            locations.c.longitude,
        ).select_from(drives.outerjoin(locations, self.resolver.join_condition()))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, owner_id: int, draft: DriveDraft) -> int:
        """Insert a drive owned by owner_id and return its id.

        Raises InvalidInput if a field is missing or blank, the date is not
        an ISO date, or the location reference does not resolve.
        """
        organizer_name, drive_date = _validate(draft)
        with self.engine.begin() as conn:
            location_cols = self.resolver.resolve(conn, draft.location_ref)
            result = conn.execute(
                drives.insert().values(
                    user_id=owner_id,
                    organizer_name=organizer_name,
                    drive_date=drive_date,
                    created_at=now_iso(),
                    **location_cols,
                )
            )
            drive_id = result.inserted_primary_key[0]
        logger.info("Drive created (drive_id=%d, user_id=%d)", drive_id, owner_id)
        return drive_id

    def update(self, drive_id: int, owner_id: int, draft: DriveDraft) -> None:
        """Replace the editable fields of a drive the caller owns.

        Raises InvalidInput as for create(), NotFoundOrForbidden if no drive
        matches both drive_id and owner_id.
        """
        organizer_name, drive_date = _validate(draft)
        with self.engine.begin() as conn:
            location_cols = self.resolver.resolve(conn, draft.location_ref)
            result = conn.execute(
                drives.update()
                .where((drives.c.id == drive_id) & (drives.c.user_id == owner_id))
                .values(organizer_name=organizer_name, drive_date=drive_date, **location_cols)
            )
            if result.rowcount == 0:
                raise NotFoundOrForbidden()
        logger.info("Drive updated (drive_id=%d, user_id=%d)", drive_id, owner_id)

    def delete(self, drive_id: int, owner_id: int) -> None:
        """Delete a drive the caller owns. Raises NotFoundOrForbidden otherwise."""
        with self.engine.begin() as conn:
            result = conn.execute(drives.delete().where((drives.c.id == drive_id) & (drives.c.user_id == owner_id)))
            if result.rowcount == 0:
                raise NotFoundOrForbidden()
        logger.info("Drive deleted (drive_id=%d, user_id=%d)", drive_id, owner_id)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate(draft: DriveDraft) -> tuple[str, date]:
    organizer_name = (draft.organizer_name or "").strip()
    if not organizer_name or not draft.drive_date:
        raise InvalidInput()
    return organizer_name, _parse_date(draft.drive_date)


def _parse_date(value: date | str) -> date:
    """Accept a date, a datetime, or an ISO string ("2025-01-01" or "2025-01-01T00:00:00Z")."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidInput("drive_date must be an ISO date (YYYY-MM-DD).")
    try:
        return date.fromisoformat(value.strip().split("T")[0])
    except ValueError as exc:
        raise InvalidInput("drive_date must be an ISO date (YYYY-MM-DD).") from exc


def _row_to_drive(row) -> Drive:
    return Drive(
        id=row.id,
        user_id=row.user_id,
        organizer_name=row.organizer_name,
        drive_date=row.drive_date,
        location_id=row.location_id,
        location_name=row.location_name,
        latitude=row.latitude,
        longitude=row.longitude,
    )
