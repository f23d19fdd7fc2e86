from .station import Station
from .service import Route, Service
from .through_service import Direction, ThroughServiceRule
from .dataset import NetworkDataset

__all__ = ["Station", "Route", "Service", "Direction", "ThroughServiceRule", "NetworkDataset"]
