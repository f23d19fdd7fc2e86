from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Mapping


# Service types whose stop sequences define physical line topology
DEFAULT_BASELINE_TYPES = frozenset({"local", "local(south)", "semi-express", "training"})

# Pseudo-types that only teach the builder line geometry, never become edges
DEFAULT_TRAINING_TYPES = frozenset({"training"})

DEFAULT_EXPRESS_TYPES = frozenset({
    "limited-express",
    "rapid",
    "express",
    "semi-express",
    "rapid-express",
    "limited-express-yamakaze",
    "section-express",
    "commuter-semi-express",
    "rapid(south)",
})

# Regional variants that run as their base type
DEFAULT_BASE_TYPES = {
    "local(south)": "local",
    "rapid(south)": "rapid",
    "local(hakuba)": "local",
    "rapid(hakuba)": "rapid",
}


@dataclass(frozen=True)
class ServiceTaxonomy:
    """Classification of service types.

    Maps regional variants to their base type and tells which types are
    topology baselines, training-only pseudo-types and express classes.
    """
    baseline_types: FrozenSet[str] = DEFAULT_BASELINE_TYPES
    training_types: FrozenSet[str] = DEFAULT_TRAINING_TYPES
    express_types: FrozenSet[str] = DEFAULT_EXPRESS_TYPES
    # Excluded from hashing; equality still compares it
    base_types: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_BASE_TYPES), hash=False)

    def base_type(self, service_type: str) -> str:
        """Return the base type a service type runs as."""
        return self.base_types.get(service_type, service_type)

    def is_baseline(self, service_type: str) -> bool:
        return service_type in self.baseline_types

    def is_training(self, service_type: str) -> bool:
        return service_type in self.training_types

    def is_express(self, service_type: str) -> bool:
        return service_type in self.express_types

    def same_base(self, type_a: str, type_b: str) -> bool:
        return self.base_type(type_a) == self.base_type(type_b)

    @classmethod
    def from_dict(cls, data: Dict) -> "ServiceTaxonomy":
        """Build a taxonomy from a plain mapping, falling back to defaults."""
        return cls(
            baseline_types=frozenset(data.get("baseline", DEFAULT_BASELINE_TYPES)),
            training_types=frozenset(data.get("training", DEFAULT_TRAINING_TYPES)),
            express_types=frozenset(data.get("express", DEFAULT_EXPRESS_TYPES)),
            base_types=dict(data.get("base_types", DEFAULT_BASE_TYPES)),
        )
