"""Raw dataset record models.

These mirror the JSON files produced by the network data team
(camelCase keys) and convert into domain entities.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.rail_bc.network.domain.entities import (
    Direction,
    Route,
    Service,
    Station,
    ThroughServiceRule,
)
from src.rail_bc.network.domain.value_objects import (
    BannedRideSegment,
    BannedTransfer,
    LineKey,
    OperatingExceptions,
    ServiceTaxonomy,
)


class StationRecord(BaseModel):
    """One entry of stations.json."""
    id: str
    name: str
    x: float
    y: float
    company: str
    line: str

    def to_entity(self) -> Station:
        return Station(
            id=self.id,
            name=self.name,
            x=self.x,
            y=self.y,
            company=self.company,
            line=self.line,
        )


class RouteRecord(BaseModel):
    company: str
    line: str
    stops: List[str] = []

    def to_entity(self) -> Route:
        return Route(company=self.company, line=self.line, stops=tuple(self.stops))


class ServiceRecord(BaseModel):
    """One entry of services.json."""
    type: str
    routes: List[RouteRecord] = []

    def to_entity(self) -> Service:
        return Service(type=self.type, routes=tuple(r.to_entity() for r in self.routes))


class ThroughServiceRecord(BaseModel):
    """One entry of through_services.json."""
    model_config = ConfigDict(populate_by_name=True)

    station_id_a: str = Field(alias="stationIdA")
    station_id_b: str = Field(alias="stationIdB")
    company_a: str = Field(alias="companyA")
    line_a: str = Field(alias="lineA")
    company_b: str = Field(alias="companyB")
    line_b: str = Field(alias="lineB")
    types: List[str] = []
    direction_from_a: Optional[Direction] = Field(default=None, alias="directionFromA")
    departure_direction: Optional[Direction] = Field(default=None, alias="departureDirection")

    @field_validator("direction_from_a", "departure_direction", mode="before")
    @classmethod
    def empty_direction_is_none(cls, v):
        # The source spreadsheets export unset directions as ""
        if v == "":
            return None
        return v

    def to_entity(self) -> ThroughServiceRule:
        return ThroughServiceRule(
            station_id_a=self.station_id_a,
            station_id_b=self.station_id_b,
            company_a=self.company_a,
            line_a=self.line_a,
            company_b=self.company_b,
            line_b=self.line_b,
            types=frozenset(self.types),
            direction_from_a=self.direction_from_a,
            departure_direction=self.departure_direction,
        )


class ServiceTypesRecord(BaseModel):
    """Contents of the optional service_types.json."""
    baseline: Optional[List[str]] = None
    training: Optional[List[str]] = None
    express: Optional[List[str]] = None
    base_types: Optional[Dict[str, str]] = Field(default=None, alias="baseTypes")

    model_config = ConfigDict(populate_by_name=True)

    def to_entity(self) -> ServiceTaxonomy:
        return ServiceTaxonomy.from_dict(self.model_dump(exclude_none=True))


class BannedRideSegmentRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_id: str = Field(alias="fromId")
    to_id: str = Field(alias="toId")
    service_type: str = Field(alias="serviceType")
    company: Optional[str] = None
    line: Optional[str] = None

    def to_entity(self) -> BannedRideSegment:
        line_key = None
        if self.company is not None and self.line is not None:
            line_key = LineKey(self.company, self.line)
        return BannedRideSegment(
            from_id=self.from_id,
            to_id=self.to_id,
            service_type=self.service_type,
            line=line_key,
        )


class BannedTransferRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    station_id: str = Field(alias="stationId")
    types: List[str] = Field(min_length=2, max_length=2)

    def to_entity(self) -> BannedTransfer:
        return BannedTransfer(station_id=self.station_id, type_a=self.types[0], type_b=self.types[1])


class OperatingExceptionsRecord(BaseModel):
    """Contents of the optional operating_exceptions.json."""
    model_config = ConfigDict(populate_by_name=True)

    banned_ride_segments: List[BannedRideSegmentRecord] = Field(default=[], alias="bannedRideSegments")
    banned_transfers: List[BannedTransferRecord] = Field(default=[], alias="bannedTransfers")

    def to_entity(self) -> OperatingExceptions:
        return OperatingExceptions(
            banned_ride_segments=tuple(r.to_entity() for r in self.banned_ride_segments),
            banned_transfers=tuple(r.to_entity() for r in self.banned_transfers),
        )


__all__ = [
    "StationRecord",
    "RouteRecord",
    "ServiceRecord",
    "ThroughServiceRecord",
    "ServiceTypesRecord",
    "BannedRideSegmentRecord",
    "BannedTransferRecord",
    "OperatingExceptionsRecord",
]
