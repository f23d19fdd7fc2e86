"""Constrained shortest-path search over the rail graph.

Dijkstra over presence nodes, where whether an edge may be taken also
depends on the edge that reached the current node:

- no transfer-like move right after a transfer or through-running move
- through-running only where a rule allows it, in the allowed direction
- no in-station transfer back onto the line just arrived on
- no ride leaving the stretch of line between start and goal

The last rule only steers the search: when it leaves the goal unreachable
the search is repeated without it.
"""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.rail_bc.network.domain.entities import Direction, NetworkDataset, Station
from src.rail_bc.network.domain.value_objects import LineKey, PresenceNode

from .graph_builder import Edge, EdgeType, RailGraph, TRANSFER_LIKE

INFINITY = float('inf')

# Edges that cannot follow a transfer-like or through-running move
_CHAINED_TRANSFER_BLOCKED = frozenset({EdgeType.WALKING, EdgeType.PLATFORM_TRANSFER})
_CHAINED_TRANSFER_BLOCKERS = TRANSFER_LIKE | {EdgeType.THROUGH_SERVICE}


@dataclass
class PathResult:
    """Best path found between two stations."""
    nodes: List[PresenceNode]
    edges: List[Edge] = field(default_factory=list)
    time: float = 0.0
    distance: float = 0.0

    @property
    def signature(self) -> tuple:
        return tuple(self.nodes)


class ConstrainedPathEngine:
    """Runs constrained searches on one (possibly re-weighted) graph.

    The engine holds no per-search state between calls.
    """

    def __init__(self, dataset: NetworkDataset, graph: RailGraph):
        self.dataset = dataset
        self.graph = graph

    def find_path(self, start_station_id: str, goal_station_id: str) -> Optional[PathResult]:
        """Find the fastest path from any presence node of the start station
        to any presence node of the goal station.

        Rides are first kept between the start and goal ordinals; if that
        finds nothing, detours beyond either end are allowed.

        Returns:
            PathResult, or None when the goal cannot be reached
        """
        path = self._search(start_station_id, goal_station_id, bounded=True)
        if path is None:
            path = self._search(start_station_id, goal_station_id, bounded=False)
        return path

    def _search(self, start_station_id: str, goal_station_id: str, bounded: bool) -> Optional[PathResult]:
        times: Dict[PresenceNode, float] = {}
        distances: Dict[PresenceNode, float] = {}
        arrived_by: Dict[PresenceNode, Edge] = {}
        queue: list = []
        counter = itertools.count()  # First discovered wins on equal times

        for node in self.graph.nodes_at(start_station_id):
            times[node] = 0.0
            distances[node] = 0.0
            heapq.heappush(queue, (0.0, next(counter), node))

        while queue:
            time, _, node = heapq.heappop(queue)
            if time > times.get(node, INFINITY):
                continue

            previous = arrived_by.get(node)
            for edge in self.graph.outgoing(node):
                if not self._allows_transfer_sequence(edge, previous):
                    continue
                if edge.edge_type == EdgeType.THROUGH_SERVICE:
                    arrival = self._last_move(previous, arrived_by)
                    if not self._allows_through_service(edge, previous, arrival, goal_station_id):
                        continue
                elif edge.edge_type == EdgeType.PLATFORM_TRANSFER:
                    if not self._allows_platform_transfer(edge, previous):
                        continue
                elif edge.edge_type == EdgeType.RIDE and bounded:
                    if not self._within_journey_range(edge, start_station_id, goal_station_id):
                        continue

                new_time = time + edge.time
                if new_time < times.get(edge.to_node, INFINITY):
                    times[edge.to_node] = new_time
                    distances[edge.to_node] = distances[node] + edge.distance
                    arrived_by[edge.to_node] = edge
                    heapq.heappush(queue, (new_time, next(counter), edge.to_node))

        best_goal: Optional[PresenceNode] = None
        best_time = INFINITY
        for node in self.graph.nodes_at(goal_station_id):
            if times.get(node, INFINITY) < best_time:
                best_time = times[node]
                best_goal = node

        if best_goal is None:
            return None

        edges: List[Edge] = []
        current = best_goal
        while current in arrived_by:
            edge = arrived_by[current]
            edges.append(edge)
            current = edge.from_node
        edges.reverse()

        nodes = [current] + [e.to_node for e in edges]
        return PathResult(nodes=nodes, edges=edges, time=best_time, distance=distances[best_goal])

    @staticmethod
    def _last_move(previous: Optional[Edge], arrived_by: Dict[PresenceNode, Edge]) -> Optional[Edge]:
        """Latest edge on the path that changed station.

        Skips same-station transfers, so a through-running move right after
        a change of service is judged by the ride that reached the station.
        """
        edge = previous
        while edge is not None and edge.from_node.station_id == edge.to_node.station_id:
            edge = arrived_by.get(edge.from_node)
        return edge

    # =========================================================================
    # Move constraints
    # =========================================================================

    def _allows_transfer_sequence(self, edge: Edge, previous: Optional[Edge]) -> bool:
        if previous is None:
            return True
        if edge.edge_type in _CHAINED_TRANSFER_BLOCKED and previous.edge_type in _CHAINED_TRANSFER_BLOCKERS:
            return False
        if edge.edge_type == EdgeType.TRANSFER and previous.edge_type in TRANSFER_LIKE:
            return False
        return True

    def _allows_through_service(
        self,
        edge: Edge,
        previous: Optional[Edge],
        arrival: Optional[Edge],
        goal_station_id: str,
    ) -> bool:
        """Through-running needs a matching rule and, where the rule says so,
        the right arrival and departure directions."""
        if previous is None:
            return False

        from_station = self.dataset.get_station(edge.from_node.station_id)
        to_station = self.dataset.get_station(edge.to_node.station_id)
        if from_station is None or to_station is None:
            return False

        base_type = self.dataset.taxonomy.base_type(edge.from_node.service_type)
        rule = self.dataset.find_through_rule(from_station, to_station, base_type)
        if rule is None:
            return False

        if rule.direction_from_a is not None:
            direction = self._arrival_direction(from_station, arrival)
            if direction is not None and direction != rule.direction_from_a:
                return False
            if direction is None and from_station.line_key in self.graph.line_orders:
                return False

        if rule.departure_direction is not None:
            line = to_station.line_key
            here = self.graph.ordinal(line, to_station.id)
            goal = self.graph.ordinal(line, goal_station_id)
            if here is not None and goal is not None and goal != here:
                if Direction.between(here, goal) != rule.departure_direction:
                    return False

        return True

    def _arrival_direction(self, station: Station, arrival: Optional[Edge]) -> Optional[Direction]:
        """Direction of travel along `station`'s line when reaching it, or None
        if it cannot be told from the line's ordinals."""
        if arrival is None:
            return None
        line = station.line_key
        here = self.graph.ordinal(line, station.id)
        before = self.graph.ordinal(line, arrival.from_node.station_id)
        if here is None or before is None or here == before:
            return None
        return Direction.between(before, here)

    def _allows_platform_transfer(self, edge: Edge, previous: Optional[Edge]) -> bool:
        """Block turning back onto the line just arrived on."""
        if previous is None:
            return True
        here = self.dataset.get_station(edge.from_node.station_id)
        before = self.dataset.get_station(previous.from_node.station_id)
        if here is None or before is None:
            return True
        return not (here.company == before.company and here.line == before.line)

    def _within_journey_range(self, edge: Edge, start_station_id: str, goal_station_id: str) -> bool:
        """Rides on a line serving both ends must stay between them."""
        line = LineKey(edge.company, edge.line)
        start = self.graph.ordinal(line, start_station_id)
        goal = self.graph.ordinal(line, goal_station_id)
        if start is None or goal is None:
            return True
        target = self.graph.ordinal(line, edge.to_node.station_id)
        if target is None:
            return True
        return min(start, goal) <= target <= max(start, goal)


def find_path(
    dataset: NetworkDataset,
    graph: RailGraph,
    start_station_id: str,
    goal_station_id: str,
) -> Optional[PathResult]:
    return ConstrainedPathEngine(dataset, graph).find_path(start_station_id, goal_station_id)
