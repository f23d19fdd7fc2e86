"""Fold a ranked node path into presentation legs.

Consecutive rides on the same line and service merge into one leg; every
transfer, walk or through-running move becomes a leg of its own.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from src.rail_bc.network.domain.entities import NetworkDataset

from .graph_builder import Edge, EdgeType
from .route_search import RouteResult


@dataclass
class ItineraryLeg:
    """A single leg of an itinerary."""
    type: str  # "ride", "transfer", "walk" or "through_service"
    from_station_id: str
    to_station_id: str
    from_name: str
    to_name: str
    company: Optional[str] = None
    line: Optional[str] = None
    service_type: Optional[str] = None  # Base type, regional suffix removed
    time: float = 0.0
    distance: float = 0.0
    hops: int = 0  # Ride edges folded into this leg


@dataclass
class Itinerary:
    profile: str
    time: float
    distance: float
    legs: List[ItineraryLeg] = field(default_factory=list)

    @property
    def transfers(self) -> int:
        return sum(1 for leg in self.legs if leg.type in ("transfer", "walk"))

    @property
    def time_minutes(self) -> float:
        return round(self.time / 60, 1)


_LEG_TYPES = {
    EdgeType.TRANSFER: "transfer",
    EdgeType.PLATFORM_TRANSFER: "transfer",
    EdgeType.WALKING: "walk",
    EdgeType.THROUGH_SERVICE: "through_service",
}


class ItinerarySummarizer:
    """Turns RouteResults into Itineraries for display."""

    def __init__(self, dataset: NetworkDataset):
        self.dataset = dataset

    def _name(self, station_id: str) -> str:
        station = self.dataset.get_station(station_id)
        return station.name if station else station_id

    def _new_leg(self, edge: Edge, leg_type: str) -> ItineraryLeg:
        from_id = edge.from_node.station_id
        to_id = edge.to_node.station_id
        leg = ItineraryLeg(
            type=leg_type,
            from_station_id=from_id,
            to_station_id=to_id,
            from_name=self._name(from_id),
            to_name=self._name(to_id),
            time=edge.time,
            distance=edge.distance,
        )

        if leg_type == "ride":
            leg.company = edge.company
            leg.line = edge.line
            leg.service_type = self.dataset.taxonomy.base_type(edge.service_type)
            leg.hops = 1
        elif leg_type == "through_service":
            # Report the line the train continues onto
            target = self.dataset.get_station(to_id)
            if target is not None:
                leg.company = target.company
                leg.line = target.line
            leg.service_type = self.dataset.taxonomy.base_type(edge.to_node.service_type)
        elif leg_type == "transfer":
            leg.service_type = self.dataset.taxonomy.base_type(edge.to_node.service_type)
        return leg

    def _continues(self, leg: ItineraryLeg, edge: Edge) -> bool:
        return (
            leg.type == "ride"
            and leg.to_station_id == edge.from_node.station_id
            and leg.company == edge.company
            and leg.line == edge.line
            and leg.service_type == self.dataset.taxonomy.base_type(edge.service_type)
        )

    def summarize(self, result: RouteResult) -> Itinerary:
        itinerary = Itinerary(
            profile=result.profile_label,
            time=result.time,
            distance=result.distance,
        )

        current: Optional[ItineraryLeg] = None
        for edge in result.edges:
            if edge.edge_type == EdgeType.RIDE:
                if current is not None and self._continues(current, edge):
                    current.to_station_id = edge.to_node.station_id
                    current.to_name = self._name(edge.to_node.station_id)
                    current.time += edge.time
                    current.distance += edge.distance
                    current.hops += 1
                    continue
                current = self._new_leg(edge, "ride")
                itinerary.legs.append(current)
            else:
                current = None
                itinerary.legs.append(self._new_leg(edge, _LEG_TYPES[edge.edge_type]))

        return itinerary

    def summarize_all(self, results: List[RouteResult]) -> List[Itinerary]:
        return [self.summarize(r) for r in results]
