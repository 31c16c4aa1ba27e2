"""
API request and response models for LifeLink REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
drives/models.py, which own the internal domain representation. Route
handlers map between the two.

Request validation failures are reported as 400 invalid_input (see the
RequestValidationError handler in api/main.py), the same status the stores
use for missing fields.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from drives.models import Drive, DriveDraft, Location

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Deliberately loose: one "@" with something on each side. Deliverability is
# not our problem; uniqueness is enforced by the database.
EMAIL_PATTERN = r"^\s*[^@\s]+@[^@\s]+\s*$"


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /api/auth/signup.

    Passwords are not whitespace-stripped; what the user typed is what gets
    hashed. The six-character minimum is checked again by UserStore.register.
    """

    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=72)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login.

    No minimum lengths: blank credentials fail authentication with 401 like
    any other wrong pair.
    """

    email: str = Field(max_length=255)
    password: str = Field(max_length=1024)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    token_type: str = "bearer"
    expires_in: int


class MeResponse(BaseModel):
    """The caller's identity, as carried by their token."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Drives and locations
# ---------------------------------------------------------------------------


class DriveRequest(BaseModel):
    """Request body for POST /api/drives and PUT /api/drives/{id}.

    Only one of location_id / location_name is used, depending on the
    server's LOCATION_MODE; the other is ignored. A missing reference is
    reported by the store as "All fields are required."
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    organizer_name: str = Field(min_length=1, max_length=255)
    drive_date: date
    location_id: Optional[int] = Field(default=None, ge=1)
    location_name: Optional[str] = Field(default=None, min_length=1, max_length=255)

    def to_draft(self, location_field: str) -> DriveDraft:
        return DriveDraft(
            organizer_name=self.organizer_name,
            drive_date=self.drive_date,
            location_ref=getattr(self, location_field),
        )


class DriveResponse(BaseModel):
    """One drive joined with its location. latitude/longitude may be null."""

    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    organizer_name: str
    drive_date: date
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def from_drive(cls, drive: Drive) -> "DriveResponse":
        return cls(
            id=drive.id,
            user_id=drive.user_id,
            organizer_name=drive.organizer_name,
            drive_date=drive.drive_date,
            location_id=drive.location_id,
            location_name=drive.location_name,
            latitude=drive.latitude,
            longitude=drive.longitude,
        )


class LocationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    latitude: float
    longitude: float

    @classmethod
    def from_location(cls, location: Location) -> "LocationResponse":
        return cls(
            id=location.id,
            name=location.name,
            latitude=location.latitude,
            longitude=location.longitude,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
