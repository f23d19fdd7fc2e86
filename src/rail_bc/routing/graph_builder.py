"""Rail network graph synthesis.

Turns station, service and through-service data into a directed multigraph
of presence nodes (station, service type) for the constrained route search.

Passes, in order:
1. Baseline topology: learn each line's station order and the physical
   distance of every adjacent segment from baseline services.
2. Service edges: one ride edge pair per consecutive stop pair of every real
   service, costed by summing the physical segments it runs over.
3. Same-station transfers between the service types stopping at a station.
4. Proximity: in-station transfers and through-running between stations at
   the same point, walking links between nearby stations.

Every edge is added together with its mirror (same weights, reversed
endpoints).
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from src.rail_bc.network.domain.entities import NetworkDataset, Station
from src.rail_bc.network.domain.value_objects import LineKey, PresenceNode

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

TRAIN_SPEED_MPS = 15.0
DWELL_SECONDS = 5.0
TRANSFER_SECONDS = 15.0
WALK_SPEED_MPS = 4.0
MAX_WALK_DISTANCE_M = 150.0
THROUGH_SERVICE_SECONDS = 1.0
PLATFORM_TRANSFER_SECONDS = 10.0

WALK_OPERATOR = "walking"


# =============================================================================
# Data Structures
# =============================================================================

class EdgeType(str, Enum):
    """Kind of move an edge represents."""
    RIDE = "ride"
    TRANSFER = "transfer"                    # Same station, other service type
    PLATFORM_TRANSFER = "platform_transfer"  # Other station id at the same point
    THROUGH_SERVICE = "through_service"      # Train continues onto another line
    WALKING = "walking"

    @property
    def is_transfer_like(self) -> bool:
        return self in TRANSFER_LIKE


TRANSFER_LIKE = frozenset({EdgeType.TRANSFER, EdgeType.PLATFORM_TRANSFER, EdgeType.WALKING})


@dataclass(frozen=True)
class GraphParameters:
    """Physical constants used to cost edges."""
    train_speed: float = TRAIN_SPEED_MPS
    dwell_seconds: float = DWELL_SECONDS
    transfer_seconds: float = TRANSFER_SECONDS
    walk_speed: float = WALK_SPEED_MPS
    max_walk_distance: float = MAX_WALK_DISTANCE_M
    through_service_seconds: float = THROUGH_SERVICE_SECONDS
    platform_transfer_seconds: float = PLATFORM_TRANSFER_SECONDS

    def ride_time(self, distance: float) -> float:
        return distance / self.train_speed + self.dwell_seconds


@dataclass(frozen=True)
class Segment:
    """Physical cost of one adjacent-stop hop on a line."""
    distance: float
    time: float


@dataclass(frozen=True)
class Edge:
    """A directed move between two presence nodes.

    `edge_id` is the position in the graph's edge list; it is kept when
    weights are modified so a path found on a penalized copy can be costed
    against the unweighted edges.
    """
    edge_id: int
    from_node: PresenceNode
    to_node: PresenceNode
    time: float
    distance: float
    edge_type: EdgeType
    company: str
    line: str
    service_type: Optional[str] = None  # Set on ride edges


@dataclass
class RailGraph:
    """Output of the graph builder."""
    edges: List[Edge]
    station_stops: Dict[str, List[str]]
    line_orders: Dict[LineKey, Dict[str, int]]
    segments: Dict[LineKey, Dict[Tuple[str, str], Segment]] = field(default_factory=dict)
    adjacency: Dict[PresenceNode, List[Edge]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.adjacency:
            self.adjacency = _index_edges(self.edges)

    def outgoing(self, node: PresenceNode) -> List[Edge]:
        return self.adjacency.get(node, [])

    def nodes_at(self, station_id: str) -> List[PresenceNode]:
        """Presence nodes of a station, in registration order."""
        return [PresenceNode(station_id, t) for t in self.station_stops.get(station_id, [])]

    def ordinal(self, line: LineKey, station_id: str) -> Optional[int]:
        order = self.line_orders.get(line)
        if order is None:
            return None
        return order.get(station_id)

    def with_weights(self, weight: Callable[[Edge], float]) -> "RailGraph":
        """Copy of the graph with every edge time replaced by `weight(edge)`.

        Topology, registry and line maps are shared with this graph.
        """
        edges = [replace(e, time=weight(e)) for e in self.edges]
        return RailGraph(
            edges=edges,
            station_stops=self.station_stops,
            line_orders=self.line_orders,
            segments=self.segments,
        )

    @property
    def stats(self) -> Dict[str, int]:
        counts: Dict[str, int] = {t.value: 0 for t in EdgeType}
        for e in self.edges:
            counts[e.edge_type.value] += 1
        counts["nodes"] = len(self.adjacency)
        counts["lines"] = len(self.line_orders)
        return counts


def _index_edges(edges: List[Edge]) -> Dict[PresenceNode, List[Edge]]:
    adjacency: Dict[PresenceNode, List[Edge]] = {}
    for edge in edges:
        adjacency.setdefault(edge.from_node, []).append(edge)
    return adjacency


# =============================================================================
# Builder
# =============================================================================

class GraphBuilder:
    """Builds a RailGraph from one NetworkDataset.

    A builder is single-use; `build()` always starts from empty state so
    nothing leaks between datasets. Lookups that fail (unknown station id,
    line without baseline topology) drop the affected segment or edge and
    building continues.
    """

    def __init__(self, dataset: NetworkDataset, parameters: Optional[GraphParameters] = None):
        self.dataset = dataset
        self.parameters = parameters or GraphParameters()
        self.taxonomy = dataset.taxonomy

        self._edges: List[Edge] = []
        self._station_stops: Dict[str, List[str]] = {}
        self._line_orders: Dict[LineKey, Dict[str, int]] = {}
        self._segments: Dict[LineKey, Dict[Tuple[str, str], Segment]] = {}

    def build(self) -> RailGraph:
        self._edges = []
        self._station_stops = {}
        self._line_orders = {}
        self._segments = {}

        self._learn_topology()
        self._add_service_edges()
        self._add_station_transfers()
        self._add_proximity_edges()

        graph = RailGraph(
            edges=self._edges,
            station_stops=self._station_stops,
            line_orders=self._line_orders,
            segments=self._segments,
        )
        logger.info(f"Built rail graph for dataset {self.dataset.version or '-'}: {graph.stats}")
        return graph

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _add_edge_pair(
        self,
        node_a: PresenceNode,
        node_b: PresenceNode,
        time: float,
        distance: float,
        edge_type: EdgeType,
        company: str,
        line: str,
        service_type: Optional[str] = None,
    ) -> None:
        for frm, to in ((node_a, node_b), (node_b, node_a)):
            self._edges.append(Edge(
                edge_id=len(self._edges),
                from_node=frm,
                to_node=to,
                time=time,
                distance=distance,
                edge_type=edge_type,
                company=company,
                line=line,
                service_type=service_type,
            ))

    def _register_stop(self, station_id: str, service_type: str) -> None:
        types = self._station_stops.setdefault(station_id, [])
        if service_type not in types:
            types.append(service_type)

    # -------------------------------------------------------------------------
    # 1. Baseline topology
    # -------------------------------------------------------------------------

    def _learn_topology(self) -> None:
        """Record station ordinals and adjacent segment costs per line."""
        for service in self.dataset.services:
            if not self.taxonomy.is_baseline(service.type):
                continue

            for route in service.routes:
                line = route.line_key
                order = self._line_orders.setdefault(line, {})
                segments = self._segments.setdefault(line, {})

                for i, stop_id in enumerate(route.stops):
                    if stop_id not in order:
                        order[stop_id] = i

                    if i == len(route.stops) - 1:
                        continue

                    next_id = route.stops[i + 1]
                    if (stop_id, next_id) in segments:
                        continue

                    a = self.dataset.get_station(stop_id)
                    b = self.dataset.get_station(next_id)
                    if a is None or b is None:
                        continue

                    distance = a.point.distance_to(b.point)
                    segment = Segment(distance=distance, time=self.parameters.ride_time(distance))
                    segments[(stop_id, next_id)] = segment
                    segments[(next_id, stop_id)] = segment

    # -------------------------------------------------------------------------
    # 2. Service edges
    # -------------------------------------------------------------------------

    def _physical_distance(self, line: LineKey, sequence: List[str], idx_from: int, idx_to: int) -> float:
        """Sum the segment distances over every hop between two sequence positions."""
        segments = self._segments.get(line, {})
        step = 1 if idx_to > idx_from else -1
        total = 0.0
        for j in range(idx_from, idx_to, step):
            segment = segments.get((sequence[j], sequence[j + step]))
            if segment is not None:
                total += segment.distance
        return total

    def _add_service_edges(self) -> None:
        for service in self.dataset.services:
            if self.taxonomy.is_training(service.type):
                continue

            for route in service.routes:
                line = route.line_key
                order = self._line_orders.get(line)
                if not order:
                    logger.warning(f"Baseline route not found for line {line}, skipping {service.type} route")
                    continue

                sequence = sorted(order, key=order.__getitem__)
                position = {station_id: i for i, station_id in enumerate(sequence)}

                for from_id, to_id in zip(route.stops, route.stops[1:]):
                    if self.dataset.exceptions.is_ride_banned(line, from_id, to_id, service.type):
                        continue

                    idx_from = position.get(from_id)
                    idx_to = position.get(to_id)
                    if idx_from is None or idx_to is None:
                        continue

                    distance = self._physical_distance(line, sequence, idx_from, idx_to)
                    self._add_edge_pair(
                        PresenceNode(from_id, service.type),
                        PresenceNode(to_id, service.type),
                        time=self.parameters.ride_time(distance),
                        distance=distance,
                        edge_type=EdgeType.RIDE,
                        company=route.company,
                        line=route.line,
                        service_type=service.type,
                    )
                    self._register_stop(from_id, service.type)
                    self._register_stop(to_id, service.type)

    # -------------------------------------------------------------------------
    # 3. Same-station transfers
    # -------------------------------------------------------------------------

    def _add_station_transfers(self) -> None:
        for station_id, types in self._station_stops.items():
            if len(types) < 2:
                continue

            station = self.dataset.get_station(station_id)
            if station is None:
                continue

            for i, type_a in enumerate(types):
                for type_b in types[i + 1:]:
                    if self.dataset.exceptions.is_transfer_banned(station_id, type_a, type_b):
                        continue
                    self._add_edge_pair(
                        PresenceNode(station_id, type_a),
                        PresenceNode(station_id, type_b),
                        time=self.parameters.transfer_seconds,
                        distance=0.0,
                        edge_type=EdgeType.TRANSFER,
                        company=station.company,
                        line=station.line,
                    )

    # -------------------------------------------------------------------------
    # 4. Proximity: in-station transfers, through-running, walking
    # -------------------------------------------------------------------------

    def _add_proximity_edges(self) -> None:
        stations = [s for s in self.dataset.stations if self._station_stops.get(s.id)]

        for i, a in enumerate(stations):
            for b in stations[i + 1:]:
                if a.id == b.id:
                    continue

                distance = a.point.distance_to(b.point)
                if distance == 0:
                    self._add_coincident_edges(a, b)
                elif distance <= self.parameters.max_walk_distance:
                    self._add_walking_edges(a, b, distance)

    def _add_coincident_edges(self, a: Station, b: Station) -> None:
        """Stations at the same point: through-running where a rule allows it,
        an in-station transfer otherwise."""
        for type_a in self._station_stops[a.id]:
            for type_b in self._station_stops[b.id]:
                edge_type = EdgeType.PLATFORM_TRANSFER
                time = self.parameters.platform_transfer_seconds

                if self.taxonomy.same_base(type_a, type_b):
                    base = self.taxonomy.base_type(type_a)
                    if self.dataset.has_through_rule(a, b, base):
                        edge_type = EdgeType.THROUGH_SERVICE
                        time = self.parameters.through_service_seconds

                self._add_edge_pair(
                    PresenceNode(a.id, type_a),
                    PresenceNode(b.id, type_b),
                    time=time,
                    distance=0.0,
                    edge_type=edge_type,
                    company=a.company,
                    line=a.line,
                )

    def _add_walking_edges(self, a: Station, b: Station, distance: float) -> None:
        walk_time = distance / self.parameters.walk_speed
        for type_a in self._station_stops[a.id]:
            for type_b in self._station_stops[b.id]:
                self._add_edge_pair(
                    PresenceNode(a.id, type_a),
                    PresenceNode(b.id, type_b),
                    time=walk_time,
                    distance=distance,
                    edge_type=EdgeType.WALKING,
                    company=WALK_OPERATOR,
                    line=WALK_OPERATOR,
                )


def build_graph(dataset: NetworkDataset, parameters: Optional[GraphParameters] = None) -> RailGraph:
    """Build the route-search graph for a dataset."""
    return GraphBuilder(dataset, parameters).build()
