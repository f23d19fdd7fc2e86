"""Unit tests for itinerary summarization."""

import pytest

from src.rail_bc.network.domain.value_objects import PresenceNode
from src.rail_bc.routing.graph_builder import build_graph
from src.rail_bc.routing.itinerary import Itinerary, ItineraryLeg, ItinerarySummarizer
from src.rail_bc.routing.route_search import RouteResult, RouteSearchOrchestrator
from tests.helpers.rail_network import (
    GraphSketch,
    dataset,
    express_line,
    service,
    station,
    through_junction,
)


def edge(graph, frm, to):
    return next(
        e for e in graph.edges
        if e.from_node == PresenceNode(*frm) and e.to_node == PresenceNode(*to)
    )


def result_from(edges, profile="fastest"):
    return RouteResult(
        path=[edges[0].from_node] + [e.to_node for e in edges],
        edges=edges,
        time=sum(e.time for e in edges),
        distance=sum(e.distance for e in edges),
        profile_label=profile,
    )


class TestItinerarySummarizer:
    """Folding edges into legs."""

    def test_consecutive_rides_merge(self):
        ds = express_line()
        graph = build_graph(ds)
        result = result_from([
            edge(graph, ("L0", "local"), ("L1", "local")),
            edge(graph, ("L1", "local"), ("L2", "local")),
            edge(graph, ("L2", "local"), ("L3", "local")),
        ])
        itinerary = ItinerarySummarizer(ds).summarize(result)

        (leg,) = itinerary.legs
        assert leg.type == "ride"
        assert (leg.from_station_id, leg.to_station_id) == ("L0", "L3")
        assert leg.hops == 3
        assert leg.company == "Co"
        assert leg.line == "L"
        assert leg.service_type == "local"
        assert leg.distance == pytest.approx(3000.0)
        assert leg.time == pytest.approx(result.time)
        assert itinerary.transfers == 0

    def test_transfer_splits_rides(self):
        ds = express_line()
        graph = build_graph(ds)
        result = result_from([
            edge(graph, ("L0", "express"), ("L4", "express")),
            edge(graph, ("L4", "express"), ("L4", "local")),
            edge(graph, ("L4", "local"), ("L3", "local")),
        ])
        itinerary = ItinerarySummarizer(ds).summarize(result)

        assert [leg.type for leg in itinerary.legs] == ["ride", "transfer", "ride"]
        assert itinerary.legs[0].service_type == "express"
        assert itinerary.legs[1].service_type == "local"
        assert itinerary.legs[1].company is None
        assert itinerary.transfers == 1

    def test_through_service_reports_target_line(self):
        ds = through_junction()
        results = RouteSearchOrchestrator(ds, build_graph(ds)).search("M1", "S2")
        itinerary = ItinerarySummarizer(ds).summarize(results[0])

        assert [leg.type for leg in itinerary.legs] == ["ride", "through_service", "ride"]
        through = itinerary.legs[1]
        assert through.company == "South"
        assert through.line == "Branch"
        assert itinerary.legs[0].hops == 2
        assert itinerary.legs[2].line == "Branch"
        # Through-running is not a change of train
        assert itinerary.transfers == 0

    def test_unknown_station_named_by_id(self):
        graph = GraphSketch().link(("P", "local"), ("Q", "local"), 10).build()
        ds = dataset(stations=[station("P", 0, name="Pier")], services=[])
        (leg,) = ItinerarySummarizer(ds).summarize(result_from(graph.edges[:1])).legs
        assert leg.from_name == "Pier"
        assert leg.to_name == "Q"

    def test_walk_counts_as_transfer(self):
        ds = dataset(
            stations=[
                station("A", 0, name="Alpha"),
                station("B", 1000),
                station("T1", 0, 100, company="Tram", line="T", name="Tram Stop"),
                station("T2", 2000, 100, company="Tram", line="T"),
            ],
            services=[
                service("local", ("Co", "L", ["A", "B"])),
                service("tram", ("Tram", "T", ["T1", "T2"])),
                service("training", ("Tram", "T", ["T1", "T2"])),
            ],
        )
        graph = build_graph(ds)
        result = result_from([
            edge(graph, ("A", "local"), ("T1", "tram")),
            edge(graph, ("T1", "tram"), ("T2", "tram")),
        ])
        itinerary = ItinerarySummarizer(ds).summarize(result)

        walk, ride = itinerary.legs
        assert walk.type == "walk"
        assert walk.from_name == "Alpha"
        assert walk.to_name == "Tram Stop"
        assert walk.distance == pytest.approx(100.0)
        assert walk.company is None
        assert ride.service_type == "tram"
        assert itinerary.transfers == 1

    def test_regional_variant_reported_as_base_type(self):
        ds = dataset(
            stations=[station("A", 0), station("B", 1000)],
            services=[
                service("local", ("Co", "L", ["A", "B"])),
                service("local(south)", ("Co", "L", ["A", "B"])),
            ],
        )
        graph = build_graph(ds)
        result = result_from([edge(graph, ("A", "local(south)"), ("B", "local(south)"))])
        (leg,) = ItinerarySummarizer(ds).summarize(result).legs
        assert leg.service_type == "local"

    def test_summarize_all_keeps_order(self):
        ds = express_line()
        results = RouteSearchOrchestrator(ds, build_graph(ds)).search("L0", "L4")
        itineraries = ItinerarySummarizer(ds).summarize_all(results)
        assert [i.profile for i in itineraries] == ["fastest", "local-preferring"]


class TestItinerary:
    """Derived itinerary fields."""

    def test_time_minutes(self):
        assert Itinerary(profile="fastest", time=316.0, distance=0).time_minutes == 5.3

    def test_transfers_ignore_rides_and_through_running(self):
        legs = [
            ItineraryLeg(type=t, from_station_id="a", to_station_id="b", from_name="a", to_name="b")
            for t in ("ride", "transfer", "through_service", "walk", "ride")
        ]
        assert Itinerary(profile="fastest", time=0, distance=0, legs=legs).transfers == 2
