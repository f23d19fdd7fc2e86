from dataclasses import dataclass
from math import sqrt


@dataclass(frozen=True)
class PlanarPoint:
    """Point on the network map plane, coordinates in meters."""
    x: float
    y: float

    def distance_to(self, other: "PlanarPoint") -> float:
        """Straight-line distance to another point in meters."""
        return euclidean_distance(self.x, self.y, other.x, other.y)


def euclidean_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Calculate the straight-line distance between two map points.

    Station coordinates are planar (meters on the network map), so no
    spherical correction is applied.

    Returns:
        Distance in meters
    """
    return sqrt((x1 - x2) ** 2 + (y1 - y2) ** 2)
