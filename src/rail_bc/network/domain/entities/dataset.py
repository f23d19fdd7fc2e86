from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from src.rail_bc.network.domain.value_objects import OperatingExceptions, ServiceTaxonomy

from .service import Service
from .station import Station
from .through_service import ThroughServiceRule


@dataclass(frozen=True)
class NetworkDataset:
    """Immutable snapshot of everything the route search reads.

    Passed explicitly into the graph builder and the route search so no
    routing code depends on process-wide state.
    """

    stations: Tuple[Station, ...]
    services: Tuple[Service, ...]
    through_rules: Tuple[ThroughServiceRule, ...] = ()
    taxonomy: ServiceTaxonomy = field(default_factory=ServiceTaxonomy)
    exceptions: OperatingExceptions = field(default_factory=OperatingExceptions)
    version: str = ""

    _by_id: Dict[str, Station] = field(init=False, repr=False, compare=False)
    _by_name: Dict[str, List[Station]] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        by_id: Dict[str, Station] = {}
        by_name: Dict[str, List[Station]] = {}
        for station in self.stations:
            # First definition of an id wins
            by_id.setdefault(station.id, station)
            by_name.setdefault(station.name, []).append(station)
        object.__setattr__(self, "_by_id", by_id)
        object.__setattr__(self, "_by_name", by_name)

    def get_station(self, station_id: str) -> Optional[Station]:
        return self._by_id.get(station_id)

    def stations_named(self, name: str) -> List[Station]:
        """All stations sharing a display name (one per company/line)."""
        return list(self._by_name.get(name, []))

    def station_names(self) -> List[str]:
        return list(self._by_name.keys())

    def has_through_rule(self, station_a: Station, station_b: Station, base_type: str) -> bool:
        """Whether through-running of `base_type` joins the two stations.

        Orientation-free: the rule may list the stations as A/B or B/A, but
        its companies and lines must match the stations it names.
        """
        for rule in self.through_rules:
            if not rule.allows(base_type):
                continue
            if _rule_matches(rule, station_a, station_b) or _rule_matches(rule, station_b, station_a):
                return True
        return False

    def find_through_rule(
        self, from_station: Station, to_station: Station, base_type: str
    ) -> Optional[ThroughServiceRule]:
        """Rule allowing through-running from `from_station` onto `to_station`."""
        for rule in self.through_rules:
            if rule.allows(base_type) and _rule_matches(rule, from_station, to_station):
                return rule
        return None

    @property
    def stats(self) -> Dict[str, int]:
        return {
            "stations": len(self.stations),
            "services": len(self.services),
            "routes": sum(len(s.routes) for s in self.services),
            "through_rules": len(self.through_rules),
        }


def _rule_matches(rule: ThroughServiceRule, station_a: Station, station_b: Station) -> bool:
    return (
        rule.station_id_a == station_a.id
        and rule.station_id_b == station_b.id
        and rule.company_a == station_a.company
        and rule.line_a == station_a.line
        and rule.company_b == station_b.company
        and rule.line_b == station_b.line
    )
