"""
drives/locations.py -- Location catalog and location-resolution strategies.

The catalog is a small reference table of named places with coordinates.
It is seeded at startup and read by the drive listing to put drives on a map.

Drives can point at a location in two ways, selected by LOCATION_MODE:

  catalog  -- requests carry location_id, a foreign key into locations.
              An id that does not exist is rejected with InvalidInput.
  inline   -- requests carry free-text location_name. Listing matches it to
              the catalog by name, so known places still get coordinates.

Both strategies implement the same three members, which is all DriveStore
needs to know about them:

  field                   name of the request field holding the reference
  resolve(conn, ref)      validate ref inside the caller's transaction and
                          return the drives columns to write
  join_condition()        ON clause joining drives to locations for listing
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.engine import Connection, Engine

from core.db import drives, locations
from core.errors import InvalidInput
from drives.models import Location, LocationRef

logger = logging.getLogger("lifelink.drives")

# Places the first version of the client plotted from a hard-coded table.
DEFAULT_LOCATIONS: tuple[Location, ...] = (
    Location(name="Accra Central", latitude=5.5582, longitude=-0.2037),
    Location(name="Airport Residential Area", latitude=5.6085, longitude=-0.1770),
    Location(name="Legon Campus", latitude=5.6514, longitude=-0.1843),
    Location(name="Tema", latitude=5.6667, longitude=0.0167),
)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class LocationCatalog:
    """Read access to the locations table, plus idempotent seeding."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def list_locations(self) -> list[Location]:
        """Return every location ordered by name."""
        with self.engine.connect() as conn:
            rows = conn.execute(locations.select().order_by(locations.c.name)).fetchall()
        return [_row_to_location(r) for r in rows]

    def get(self, location_id: int) -> Location | None:
        with self.engine.connect() as conn:
            row = conn.execute(locations.select().where(locations.c.id == location_id)).fetchone()
        return _row_to_location(row) if row is not None else None

    def get_by_name(self, name: str) -> Location | None:
        with self.engine.connect() as conn:
            row = conn.execute(locations.select().where(locations.c.name == name)).fetchone()
        return _row_to_location(row) if row is not None else None

    def seed(self, entries: tuple[Location, ...] | list[Location] = DEFAULT_LOCATIONS) -> int:
        """Insert entries whose name is not already in the catalog.

        Safe to call on every startup. Existing rows are never modified, so
        ids that drives already reference stay stable. Returns the number of
        rows inserted.
        """
        inserted = 0
        with self.engine.begin() as conn:
            existing = set(conn.execute(select(locations.c.name)).scalars())
            for loc in entries:
                if loc.name in existing:
                    continue
                conn.execute(locations.insert().values(name=loc.name, latitude=loc.latitude, longitude=loc.longitude))
                existing.add(loc.name)
                inserted += 1
        if inserted:
            logger.info("Seeded %d location(s)", inserted)
        return inserted


# ---------------------------------------------------------------------------
# Resolution strategies
# ---------------------------------------------------------------------------


class LocationResolver(Protocol):
    field: str

    def resolve(self, conn: Connection, ref: LocationRef) -> dict: ...

    def join_condition(self): ...


class CatalogResolver:
    """Drives reference the catalog by id."""

    field = "location_id"

    def resolve(self, conn: Connection, ref: LocationRef) -> dict:
        if isinstance(ref, str) and ref.strip().isdigit():
            ref = int(ref)
        if ref is None or isinstance(ref, bool) or not isinstance(ref, int):
            raise InvalidInput()
        found = conn.execute(select(locations.c.id).where(locations.c.id == ref)).first()
        if found is None:
            raise InvalidInput("Unknown location.")
        return {"location_id": ref, "location_name": None}

    def join_condition(self):
        return drives.c.location_id == locations.c.id


class InlineResolver:
    """Drives carry the location name as text."""

    field = "location_name"

    def resolve(self, conn: Connection, ref: LocationRef) -> dict:
        name = ref.strip() if isinstance(ref, str) else ""
        if not name:
            raise InvalidInput()
        return {"location_id": None, "location_name": name}

    def join_condition(self):
        return drives.c.location_name == locations.c.name


def resolver_for(mode: str) -> LocationResolver:
    """Return the strategy for a LOCATION_MODE value ("catalog" or "inline")."""
    if mode == "catalog":
        return CatalogResolver()
    if mode == "inline":
        return InlineResolver()
    raise ValueError(f"Unknown location mode: {mode!r}")


def _row_to_location(row) -> Location:
    return Location(
        id=row.id,
        name=row.name,
        latitude=row.latitude,
        longitude=row.longitude,
    )
