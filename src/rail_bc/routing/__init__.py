"""Routing module for rail route search.

Components:
- GraphBuilder: synthesizes the presence-node graph from network data
- ConstrainedPathEngine: Dijkstra with move-sequence constraints
- RouteSearchOrchestrator: runs cost profiles, ranks distinct paths
- ItinerarySummarizer: folds paths into legs for display

Data stores:
- NetworkStore: In-memory singleton holding the dataset and cached graph
"""

from .graph_builder import Edge, EdgeType, GraphBuilder, GraphParameters, RailGraph, Segment, build_graph
from .path_engine import ConstrainedPathEngine, PathResult, find_path
from .route_search import (
    CostProfile,
    DEFAULT_PROFILES,
    RouteResult,
    RouteSearchError,
    RouteSearchOrchestrator,
    StationNotFoundError,
    search_routes,
)
from .itinerary import Itinerary, ItineraryLeg, ItinerarySummarizer
from .network_store import NetworkStore, network_store

__all__ = [
    "Edge",
    "EdgeType",
    "GraphBuilder",
    "GraphParameters",
    "RailGraph",
    "Segment",
    "build_graph",
    "ConstrainedPathEngine",
    "PathResult",
    "find_path",
    "CostProfile",
    "DEFAULT_PROFILES",
    "RouteResult",
    "RouteSearchError",
    "RouteSearchOrchestrator",
    "StationNotFoundError",
    "search_routes",
    "Itinerary",
    "ItineraryLeg",
    "ItinerarySummarizer",
    "NetworkStore",
    "network_store",
]
