from .keys import LineKey, PresenceNode
from .geo import PlanarPoint, euclidean_distance
from .taxonomy import ServiceTaxonomy
from .operating_exceptions import BannedRideSegment, BannedTransfer, OperatingExceptions

__all__ = [
    "LineKey",
    "PresenceNode",
    "PlanarPoint",
    "euclidean_distance",
    "ServiceTaxonomy",
    "BannedRideSegment",
    "BannedTransfer",
    "OperatingExceptions",
]
