"""Route search response schemas.

A search returns up to three itineraries, each found under a different
cost profile (fastest, transfer-averse, local-preferring) and reported with
its true travel time and distance.
"""

from typing import Optional, List
from pydantic import BaseModel


class StationResponse(BaseModel):
    """A station record."""
    id: str
    name: str
    company: str
    line: str
    x: float
    y: float


class StationListResponse(BaseModel):
    stations: List[StationResponse]


class PresenceNodeResponse(BaseModel):
    """A station visited under a specific service type."""
    station_id: str
    service_type: str


class ItineraryLegResponse(BaseModel):
    """A single leg of an itinerary.

    - type="ride": consecutive stops on one line and service
    - type="transfer": change of service at a station (or between two
      station ids at the same point)
    - type="walk": walking link between nearby stations
    - type="through_service": the train continues onto another line
    """
    type: str
    origin: str
    destination: str
    origin_id: str
    destination_id: str

    # Line info (ride and through_service legs)
    company: Optional[str] = None
    line: Optional[str] = None
    service_type: Optional[str] = None

    duration_seconds: float
    distance_meters: int
    hops: int = 0


class RouteItineraryResponse(BaseModel):
    """One ranked itinerary."""
    profile: str
    time_seconds: float
    time_minutes: float
    distance_meters: int
    transfers: int
    path: List[PresenceNodeResponse]
    legs: List[ItineraryLegResponse]


class RouteSearchResponse(BaseModel):
    """Response from the route search endpoint."""
    success: bool
    message: Optional[str] = None
    routes: List[RouteItineraryResponse] = []
