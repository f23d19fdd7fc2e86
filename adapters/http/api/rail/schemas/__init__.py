"""Centralized API schemas for rail endpoints."""

from .routing_schemas import (
    StationResponse,
    StationListResponse,
    PresenceNodeResponse,
    ItineraryLegResponse,
    RouteItineraryResponse,
    RouteSearchResponse,
)

__all__ = [
    "StationResponse",
    "StationListResponse",
    "PresenceNodeResponse",
    "ItineraryLegResponse",
    "RouteItineraryResponse",
    "RouteSearchResponse",
]
