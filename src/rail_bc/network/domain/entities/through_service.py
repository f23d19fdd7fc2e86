from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional


class Direction(Enum):
    """Travel direction along a line's ordinal sequence."""
    UP = "Up"      # Towards increasing ordinal
    DOWN = "Down"  # Towards decreasing ordinal

    @classmethod
    def between(cls, from_ordinal: int, to_ordinal: int) -> "Direction":
        return cls.UP if to_ordinal > from_ordinal else cls.DOWN


@dataclass(frozen=True)
class ThroughServiceRule:
    """Allows trains of some service types to run from station A onto B.

    A and B are distinct station ids at the same physical point, usually on
    different companies' lines.
    """

    station_id_a: str
    station_id_b: str
    company_a: str
    line_a: str
    company_b: str
    line_b: str
    types: FrozenSet[str]
    direction_from_a: Optional[Direction] = None  # Required arrival direction on A's line
    departure_direction: Optional[Direction] = None  # Required direction on B's line

    def allows(self, base_type: str) -> bool:
        return base_type in self.types
