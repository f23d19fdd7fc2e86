from dataclasses import dataclass
from typing import Optional, Tuple

from .keys import LineKey


@dataclass(frozen=True)
class BannedRideSegment:
    """A stop pair a service type does not serve, despite its stop list.

    `line` None applies the ban on every line.
    """
    from_id: str
    to_id: str
    service_type: str
    line: Optional[LineKey] = None

    def matches(self, line: LineKey, from_id: str, to_id: str, service_type: str) -> bool:
        return (
            self.from_id == from_id
            and self.to_id == to_id
            and self.service_type == service_type
            and (self.line is None or self.line == line)
        )


@dataclass(frozen=True)
class BannedTransfer:
    """Two service types that cannot be changed between at a station.

    Models platforms physically separated inside the same station.
    The pair is unordered.
    """
    station_id: str
    type_a: str
    type_b: str

    def matches(self, station_id: str, type_a: str, type_b: str) -> bool:
        if self.station_id != station_id:
            return False
        return {self.type_a, self.type_b} == {type_a, type_b}


@dataclass(frozen=True)
class OperatingExceptions:
    """Exception tables applied while the graph is built."""
    banned_ride_segments: Tuple[BannedRideSegment, ...] = ()
    banned_transfers: Tuple[BannedTransfer, ...] = ()

    def is_ride_banned(self, line: LineKey, from_id: str, to_id: str, service_type: str) -> bool:
        return any(b.matches(line, from_id, to_id, service_type) for b in self.banned_ride_segments)

    def is_transfer_banned(self, station_id: str, type_a: str, type_b: str) -> bool:
        return any(b.matches(station_id, type_a, type_b) for b in self.banned_transfers)
