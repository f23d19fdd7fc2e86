from typing import NamedTuple


class LineKey(NamedTuple):
    """Identifies a physical line by its operating company and line name."""
    company: str
    line: str

    def __str__(self) -> str:
        return f"{self.company} {self.line}"


class PresenceNode(NamedTuple):
    """A station visited under a specific service type.

    This is the unit of graph traversal: a station contributes one
    PresenceNode per service type that stops there.
    """
    station_id: str
    service_type: str

    def to_dict(self) -> dict:
        return {"station_id": self.station_id, "service_type": self.service_type}
