from dataclasses import dataclass
from typing import Tuple

from src.rail_bc.network.domain.value_objects import LineKey


@dataclass(frozen=True)
class Route:
    """Physical stop order of one service instance on a line."""

    company: str
    line: str
    stops: Tuple[str, ...]

    @property
    def line_key(self) -> LineKey:
        return LineKey(self.company, self.line)


@dataclass(frozen=True)
class Service:
    """A named service class (local, express, ...) and the routes it runs."""

    type: str
    routes: Tuple[Route, ...] = ()
