"""Unit tests for the constrained path engine."""

import pytest

from src.rail_bc.network.domain.entities import Direction
from src.rail_bc.network.domain.value_objects import (
    BannedRideSegment,
    LineKey,
    OperatingExceptions,
    PresenceNode,
)
from src.rail_bc.routing.graph_builder import EdgeType, build_graph
from src.rail_bc.routing.path_engine import ConstrainedPathEngine, find_path
from tests.helpers.rail_network import (
    GraphSketch,
    dataset,
    express_into_junction,
    express_line,
    service,
    station,
    three_station_line,
    through_junction,
)

EMPTY = dataset(stations=[], services=[])


def engine_for(ds):
    return ConstrainedPathEngine(ds, build_graph(ds))


def station_ids(result):
    return [node.station_id for node in result.nodes]


class TestBasicSearch:
    """Plain shortest-path behaviour."""

    def test_three_station_line(self):
        result = engine_for(three_station_line()).find_path("A", "C")
        assert result is not None
        assert station_ids(result) == ["A", "B", "C"]
        assert result.time == pytest.approx(30.0)
        assert result.distance == pytest.approx(300.0)

    def test_time_and_distance_match_edges(self):
        result = engine_for(express_line()).find_path("L0", "L3")
        assert result.time == pytest.approx(sum(e.time for e in result.edges))
        assert result.distance == pytest.approx(sum(e.distance for e in result.edges))

    def test_path_is_contiguous(self):
        result = engine_for(express_line()).find_path("L4", "L1")
        assert result.nodes[0] == result.edges[0].from_node
        for edge, node in zip(result.edges, result.nodes[1:]):
            assert edge.to_node == node
        for a, b in zip(result.edges, result.edges[1:]):
            assert a.to_node == b.from_node

    def test_disconnected_goal_returns_none(self):
        ds = dataset(
            stations=[station("A", 0), station("B", 100), station("X", 9000, line="Far"), station("Y", 9500, line="Far")],
            services=[service("local", ("Co", "L", ["A", "B"]), ("Co", "Far", ["X", "Y"]))],
        )
        assert engine_for(ds).find_path("A", "Y") is None

    def test_unknown_station_returns_none(self):
        assert engine_for(three_station_line()).find_path("A", "NOPE") is None

    def test_start_equals_goal(self):
        result = engine_for(three_station_line()).find_path("B", "B")
        assert result.nodes == [PresenceNode("B", "local")]
        assert result.edges == []
        assert result.time == 0.0
        assert result.distance == 0.0

    def test_search_is_deterministic(self):
        ds = express_line()
        graph = build_graph(ds)
        first = find_path(ds, graph, "L0", "L4")
        second = find_path(ds, graph, "L0", "L4")
        assert first.nodes == second.nodes
        assert first.time == second.time


class TestTransferSequence:
    """A transfer-like move can never follow another transfer-like move."""

    def test_no_walk_after_transfer(self):
        graph = (
            GraphSketch()
            .link(("A", "l"), ("B", "l"), 10)
            .link(("B", "l"), ("B", "e"), 1, EdgeType.TRANSFER)
            .link(("B", "e"), ("C", "e"), 1, EdgeType.WALKING)
            .link(("B", "l"), ("C", "l"), 50, EdgeType.WALKING)
            .build()
        )
        result = ConstrainedPathEngine(EMPTY, graph).find_path("A", "C")
        assert result.nodes == [PresenceNode("A", "l"), PresenceNode("B", "l"), PresenceNode("C", "l")]
        assert result.time == pytest.approx(60)

    def test_no_transfer_after_walk(self):
        graph = (
            GraphSketch()
            .link(("A", "l"), ("B", "l"), 10)
            .link(("B", "l"), ("C", "l"), 5, EdgeType.WALKING)
            .link(("C", "l"), ("C", "x"), 1, EdgeType.TRANSFER)
            .link(("B", "l"), ("C", "x"), 30, EdgeType.WALKING)
            .link(("C", "x"), ("D", "x"), 10)
            .build()
        )
        result = ConstrainedPathEngine(EMPTY, graph).find_path("A", "D")
        assert result.time == pytest.approx(50)
        assert [e.edge_type for e in result.edges] == [EdgeType.RIDE, EdgeType.WALKING, EdgeType.RIDE]

    def test_transfer_after_ride_is_allowed(self):
        graph = (
            GraphSketch()
            .link(("A", "l"), ("B", "l"), 10)
            .link(("B", "l"), ("B", "e"), 1, EdgeType.TRANSFER)
            .link(("B", "e"), ("C", "e"), 10)
            .build()
        )
        result = ConstrainedPathEngine(EMPTY, graph).find_path("A", "C")
        assert result.time == pytest.approx(21)

    def test_walk_as_first_move_is_allowed(self):
        graph = GraphSketch().link(("A", "l"), ("B", "t"), 7, EdgeType.WALKING).build()
        result = ConstrainedPathEngine(EMPTY, graph).find_path("A", "B")
        assert result.time == pytest.approx(7)


class TestThroughService:
    """Through-running needs an ordered rule and the right directions."""

    def test_through_running_in_allowed_direction(self):
        result = engine_for(through_junction(direction_from_a=Direction.UP)).find_path("M1", "S2")
        assert result is not None
        assert station_ids(result) == ["M1", "M2", "M3", "S1", "S2"]
        assert EdgeType.THROUGH_SERVICE in [e.edge_type for e in result.edges]
        assert result.time == pytest.approx(3 * (1000 / 15 + 5) + 1)
        assert result.distance == pytest.approx(3000.0)

    def test_wrong_arrival_direction_is_rejected(self):
        assert engine_for(through_junction(direction_from_a=Direction.DOWN)).find_path("M1", "S2") is None

    def test_rule_without_direction_allows_any_arrival(self):
        result = engine_for(through_junction(direction_from_a=None)).find_path("M1", "S2")
        assert result is not None

    def test_rule_is_ordered(self):
        """A rule from M3 onto S1 does not allow running from S1 onto M3."""
        assert engine_for(through_junction()).find_path("S2", "M1") is None

    def test_requires_predecessor(self):
        """Cannot start a journey with a through-running move."""
        assert engine_for(through_junction()).find_path("M3", "S2") is None

    def test_departure_direction_towards_goal(self):
        ds = through_junction(departure_direction=Direction.UP)
        assert engine_for(ds).find_path("M1", "S2") is not None

    def test_departure_direction_away_from_goal(self):
        ds = through_junction(departure_direction=Direction.DOWN)
        assert engine_for(ds).find_path("M1", "S2") is None

    def test_departure_direction_ignored_when_goal_is_through_target(self):
        ds = through_junction(departure_direction=Direction.DOWN)
        assert engine_for(ds).find_path("M1", "S1") is not None

    def test_arrival_direction_taken_from_ride_before_transfer(self):
        """Change from express to local at M3, then run through onto S1."""
        result = engine_for(express_into_junction(Direction.UP)).find_path("M1", "S2")
        assert result is not None
        assert [e.edge_type for e in result.edges] == [
            EdgeType.RIDE, EdgeType.TRANSFER, EdgeType.THROUGH_SERVICE, EdgeType.RIDE,
        ]

    def test_arrival_direction_after_transfer_is_still_checked(self):
        assert engine_for(express_into_junction(Direction.DOWN)).find_path("M1", "S2") is None


class TestPlatformTransfer:
    """In-station transfers between coincident stations."""

    def test_platform_transfer_at_journey_start(self):
        ds = through_junction(with_rule=False)
        result = engine_for(ds).find_path("M3", "S2")
        assert result is not None
        assert [e.edge_type for e in result.edges] == [EdgeType.PLATFORM_TRANSFER, EdgeType.RIDE]
        assert result.time == pytest.approx(10 + 1000 / 15 + 5)

    def test_no_platform_transfer_back_onto_arrival_line(self):
        ds = through_junction(with_rule=False)
        assert engine_for(ds).find_path("M1", "S2") is None


class TestJourneyRange:
    """Rides stay between the ordinals of start and goal where they can."""

    @pytest.fixture
    def hooked_line(self):
        # The only way from R1 to R2 is back to R0 and out on the express
        return dataset(
            stations=[station("R0", 0), station("R1", 1000), station("R2", 2000)],
            services=[
                service("local", ("Co", "L", ["R0", "R1", "R2"])),
                service("express", ("Co", "L", ["R0", "R2"])),
            ],
            exceptions=OperatingExceptions(banned_ride_segments=(
                BannedRideSegment(from_id="R1", to_id="R2", service_type="local", line=LineKey("Co", "L")),
            )),
        )

    def test_out_of_range_detour_used_when_nothing_else_connects(self, hooked_line):
        result = engine_for(hooked_line).find_path("R1", "R2")
        assert result is not None
        assert station_ids(result) == ["R1", "R0", "R0", "R2"]
        assert result.time == pytest.approx((1000 / 15 + 5) + 15 + (2000 / 15 + 5))

    def test_in_range_path_preferred_over_faster_detour(self):
        sketch = (
            GraphSketch()
            .link(("A", "l"), ("B", "l"), 100)
            .link(("A", "l"), ("Z", "l"), 1)
            .link(("Z", "l"), ("B", "l"), 1)
        )
        sketch.line_orders[LineKey("Co", "L")] = {"Z": 0, "A": 1, "B": 2}
        result = ConstrainedPathEngine(EMPTY, sketch.build()).find_path("A", "B")
        assert station_ids(result) == ["A", "B"]
        assert result.time == pytest.approx(100)

    def test_graph_still_connects_the_stations(self, hooked_line):
        result = engine_for(hooked_line).find_path("R0", "R2")
        assert result is not None

    def test_range_not_applied_to_lines_without_both_ends(self):
        result = engine_for(through_junction()).find_path("M2", "S2")
        assert result is not None
        assert station_ids(result) == ["M2", "M3", "S1", "S2"]
