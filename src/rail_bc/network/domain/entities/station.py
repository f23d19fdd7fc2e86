from dataclasses import dataclass

from src.rail_bc.network.domain.value_objects import LineKey, PlanarPoint


@dataclass(frozen=True)
class Station:
    """A station on one company's line.

    The same physical place may appear as several stations (one per
    company/line); they share coordinates but have distinct ids.
    """

    id: str
    name: str
    x: float
    y: float
    company: str
    line: str

    @property
    def point(self) -> PlanarPoint:
        return PlanarPoint(self.x, self.y)

    @property
    def line_key(self) -> LineKey:
        return LineKey(self.company, self.line)
