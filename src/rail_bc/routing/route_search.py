"""Multi-profile route search.

Runs the constrained path engine once per cost profile, each profile biasing
the search through edge-time penalties, then reports every distinct path with
its true (unpenalized) time and distance, fastest first.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from src.rail_bc.network.domain.entities import NetworkDataset, Station
from src.rail_bc.network.domain.value_objects import PresenceNode

from .graph_builder import Edge, EdgeType, RailGraph, TRANSFER_LIKE
from .path_engine import ConstrainedPathEngine, PathResult

logger = logging.getLogger(__name__)

MAX_RESULTS = 3


class RouteSearchError(Exception):
    """Base error for route search queries."""


class StationNotFoundError(RouteSearchError):
    """Raised when a queried station name does not exist in the dataset."""

    def __init__(self, names: Sequence[str]):
        self.names = list(names)
        super().__init__(f"Station not found: {', '.join(self.names)}")


@dataclass(frozen=True)
class CostProfile:
    """Named edge-time modification scheme.

    transfer_penalty is added to transfer, in-station transfer and walking
    edges; express_penalty to rides on express-class services.
    """
    label: str
    transfer_penalty: float = 0.0
    express_penalty: float = 0.0

    @property
    def is_neutral(self) -> bool:
        return not self.transfer_penalty and not self.express_penalty


DEFAULT_PROFILES = (
    CostProfile("fastest"),
    CostProfile("transfer-averse", transfer_penalty=180),
    CostProfile("local-preferring", transfer_penalty=30, express_penalty=60),
)


@dataclass
class RouteResult:
    """One ranked itinerary."""
    path: List[PresenceNode]
    edges: List[Edge] = field(default_factory=list)
    time: float = 0.0
    distance: float = 0.0
    profile_label: str = ""

    @property
    def signature(self) -> tuple:
        return tuple(self.path)

    def to_dict(self) -> dict:
        return {
            "path": [node.to_dict() for node in self.path],
            "time": self.time,
            "distance": self.distance,
            "profile": self.profile_label,
        }


class RouteSearchOrchestrator:
    """Searches routes between station names on a built graph."""

    def __init__(
        self,
        dataset: NetworkDataset,
        graph: RailGraph,
        profiles: Sequence[CostProfile] = DEFAULT_PROFILES,
        max_results: int = MAX_RESULTS,
    ):
        self.dataset = dataset
        self.graph = graph
        self.profiles = tuple(profiles)
        self.max_results = max_results

    def resolve(self, from_name: str, to_name: str) -> tuple:
        """Map both station names to their station records.

        Raises:
            StationNotFoundError: if either name is unknown
        """
        from_stations = self.dataset.stations_named(from_name)
        to_stations = self.dataset.stations_named(to_name)

        missing = []
        if not from_stations:
            missing.append(from_name)
        if not to_stations:
            missing.append(to_name)
        if missing:
            raise StationNotFoundError(missing)

        return from_stations, to_stations

    def search(self, from_name: str, to_name: str) -> List[RouteResult]:
        """Ranked itineraries between two station names.

        Returns:
            Up to max_results RouteResults, fastest first; empty when no
            profile reaches the goal
        """
        from_stations, to_stations = self.resolve(from_name.strip(), to_name.strip())

        found: List[RouteResult] = []
        for profile in self.profiles:
            best = self._search_profile(profile, from_stations, to_stations)
            if best is None:
                logger.debug(f"No path for profile {profile.label}: {from_name} -> {to_name}")
                continue
            found.append(self._true_cost(best, profile))

        results = self._rank(found)
        logger.info(f"Route search {from_name} -> {to_name}: {len(results)} result(s)")
        return results

    def _search_profile(
        self,
        profile: CostProfile,
        from_stations: List[Station],
        to_stations: List[Station],
    ) -> Optional[PathResult]:
        graph = self.graph if profile.is_neutral else self.graph.with_weights(self._weight_fn(profile))
        engine = ConstrainedPathEngine(self.dataset, graph)

        best: Optional[PathResult] = None
        for start in from_stations:
            for goal in to_stations:
                path = engine.find_path(start.id, goal.id)
                if path is not None and (best is None or path.time < best.time):
                    best = path
        return best

    def _weight_fn(self, profile: CostProfile):
        taxonomy = self.dataset.taxonomy

        def weight(edge: Edge) -> float:
            time = edge.time
            if profile.transfer_penalty and edge.edge_type in TRANSFER_LIKE:
                time += profile.transfer_penalty
            if (
                profile.express_penalty
                and edge.edge_type == EdgeType.RIDE
                and taxonomy.is_express(edge.service_type)
            ):
                time += profile.express_penalty
            return time

        return weight

    def _true_cost(self, path: PathResult, profile: CostProfile) -> RouteResult:
        """Re-cost a path against the unweighted edges so penalties never leak
        into reported times."""
        unweighted = [self.graph.edges[e.edge_id] for e in path.edges]
        return RouteResult(
            path=list(path.nodes),
            edges=unweighted,
            time=sum(e.time for e in unweighted),
            distance=sum(e.distance for e in unweighted),
            profile_label=profile.label,
        )

    def _rank(self, results: List[RouteResult]) -> List[RouteResult]:
        unique: List[RouteResult] = []
        seen = set()
        for result in results:
            if result.signature in seen:
                continue
            seen.add(result.signature)
            unique.append(result)

        unique.sort(key=lambda r: r.time)
        return unique[:self.max_results]


def search_routes(
    dataset: NetworkDataset,
    graph: RailGraph,
    from_name: str,
    to_name: str,
    profiles: Sequence[CostProfile] = DEFAULT_PROFILES,
    max_results: int = MAX_RESULTS,
) -> List[RouteResult]:
    return RouteSearchOrchestrator(dataset, graph, profiles, max_results).search(from_name, to_name)
