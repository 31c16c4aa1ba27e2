"""
drives/models.py -- Domain dataclasses for drives and locations.

These are pure data containers with zero logic. Validation, ownership and
location resolution live in drives/store.py and drives/locations.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

# A drive points at a location either by catalog id or by free-text name,
# depending on LOCATION_MODE.
LocationRef = Union[int, str, None]


@dataclass
class Location:
    """A named place with coordinates. Static reference data.

    id is None before the record is written to the database.
    """

    name: str
    latitude: float
    longitude: float
    id: Optional[int] = None


@dataclass
class DriveDraft:
    """The user-editable fields of a drive, as submitted on create or update.

    drive_date may arrive as an ISO "YYYY-MM-DD" string; the store parses it.
    """

    organizer_name: Optional[str]
    drive_date: Union[date, str, None]
    location_ref: LocationRef


@dataclass
class Drive:
    """A drive joined with its location, as returned by listing.

    latitude/longitude are None when the location name is not in the catalog
    (only possible in inline mode).
    """

    id: int
    user_id: int
    organizer_name: str
    drive_date: date
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
