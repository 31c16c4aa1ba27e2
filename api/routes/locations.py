"""
api/routes/locations.py -- Read-only location catalog.

  GET /api/locations -- every catalog entry with coordinates (public)

The client uses this to fill the location picker and to place map markers.
"""

from fastapi import APIRouter, Request

from api.models import LocationResponse
from drives.locations import LocationCatalog

router = APIRouter()


@router.get("/locations", response_model=list[LocationResponse])
def list_locations(request: Request) -> list[LocationResponse]:
    catalog: LocationCatalog = request.app.state.locations
    return [LocationResponse.from_location(loc) for loc in catalog.list_locations()]
