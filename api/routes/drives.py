"""
api/routes/drives.py -- Blood drive listing and owner-scoped CRUD.

Routes:
  GET    /api/drives        -- list all drives, soonest first (public)
  POST   /api/drives        -- create a drive owned by the caller
  PUT    /api/drives/{id}   -- replace a drive's fields (owner only)
  DELETE /api/drives/{id}   -- delete a drive (owner only)

The owner check lives in DriveStore, inside the UPDATE/DELETE statement.
A drive that exists but belongs to someone else gets the same 404 as a
drive that does not exist.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import DriveRequest, DriveResponse, MessageResponse
from auth.dependencies import get_current_identity
from auth.models import Identity
from core.errors import NotFoundOrForbidden
from drives.models import Drive
from drives.store import DriveStore

# Auth policy:
# - GET    /api/drives:       public -- the home page lists drives for everyone
# - POST   /api/drives:       requires bearer token
# - PUT    /api/drives/{id}:  requires bearer token + ownership (checked in store)
# - DELETE /api/drives/{id}:  requires bearer token + ownership (checked in store)
router = APIRouter()


@router.get("/drives", response_model=list[DriveResponse])
def list_drives(request: Request) -> list[DriveResponse]:
    store: DriveStore = request.app.state.drives
    return [DriveResponse.from_drive(d) for d in store.list()]


@router.post("/drives", response_model=DriveResponse, status_code=201)
def create_drive(
    request: Request,
    body: DriveRequest,
    identity: Identity = Depends(get_current_identity),
) -> DriveResponse:
    """Create a drive owned by the authenticated caller and return it."""
    store: DriveStore = request.app.state.drives
    drive_id = store.create(identity.id, body.to_draft(store.location_field))
    return _drive_response(store.get(drive_id))


@router.put("/drives/{drive_id}", response_model=DriveResponse)
def update_drive(
    request: Request,
    drive_id: int,
    body: DriveRequest,
    identity: Identity = Depends(get_current_identity),
) -> DriveResponse:
    """Replace organizer, date and location of a drive the caller owns."""
    store: DriveStore = request.app.state.drives
    store.update(drive_id, identity.id, body.to_draft(store.location_field))
    return _drive_response(store.get(drive_id))


@router.delete("/drives/{drive_id}", response_model=MessageResponse)
def delete_drive(
    request: Request,
    drive_id: int,
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    store: DriveStore = request.app.state.drives
    store.delete(drive_id, identity.id)
    return MessageResponse(message="Drive deleted successfully.")


def _drive_response(drive: Drive | None) -> DriveResponse:
    # The owner may delete the drive between the write and this read.
    if drive is None:
        raise NotFoundOrForbidden()
    return DriveResponse.from_drive(drive)
