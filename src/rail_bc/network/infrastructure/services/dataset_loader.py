"""Load the rail network dataset from a directory of JSON files.

Required files:
- stations.json: [{id, name, x, y, company, line}, ...]
- services.json: [{type, routes: [{company, line, stops: [...]}]}, ...]
- through_services.json: [{stationIdA, stationIdB, companyA, lineA,
  companyB, lineB, types, directionFromA?, departureDirection?}, ...]

Optional files:
- service_types.json: service-type taxonomy overrides
- operating_exceptions.json: banned ride segments / banned transfers
"""

import hashlib
import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from src.rail_bc.network.domain.entities import NetworkDataset
from src.rail_bc.network.domain.value_objects import OperatingExceptions, ServiceTaxonomy
from src.rail_bc.network.infrastructure.models import (
    OperatingExceptionsRecord,
    ServiceRecord,
    ServiceTypesRecord,
    StationRecord,
    ThroughServiceRecord,
)

logger = logging.getLogger(__name__)

STATIONS_FILE = "stations.json"
SERVICES_FILE = "services.json"
THROUGH_SERVICES_FILE = "through_services.json"
SERVICE_TYPES_FILE = "service_types.json"
OPERATING_EXCEPTIONS_FILE = "operating_exceptions.json"

_stations_adapter = TypeAdapter(List[StationRecord])
_services_adapter = TypeAdapter(List[ServiceRecord])
_through_adapter = TypeAdapter(List[ThroughServiceRecord])


class DatasetError(Exception):
    """Raised when the dataset directory is missing files or holds invalid records."""


class DatasetLoader:
    """Reads and validates the network dataset files."""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def _read(self, filename: str, required: bool = True) -> Optional[bytes]:
        path = self.data_dir / filename
        if not path.exists():
            if required:
                raise DatasetError(f"Dataset file not found: {path}")
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise DatasetError(f"Cannot read dataset file {path}: {e}") from e

    def _validate(self, adapter: TypeAdapter, raw: bytes, filename: str):
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            raise DatasetError(f"Invalid records in {filename}: {e}") from e

    def load(self) -> NetworkDataset:
        """Load all files and build an immutable NetworkDataset.

        The dataset version is a digest of every file read, so a graph built
        for one version can be reused until the files change.
        """
        digest = hashlib.sha256()

        stations_raw = self._read(STATIONS_FILE)
        services_raw = self._read(SERVICES_FILE)
        through_raw = self._read(THROUGH_SERVICES_FILE)
        for raw in (stations_raw, services_raw, through_raw):
            digest.update(raw)

        stations = self._validate(_stations_adapter, stations_raw, STATIONS_FILE)
        services = self._validate(_services_adapter, services_raw, SERVICES_FILE)
        through_rules = self._validate(_through_adapter, through_raw, THROUGH_SERVICES_FILE)

        taxonomy = ServiceTaxonomy()
        types_raw = self._read(SERVICE_TYPES_FILE, required=False)
        if types_raw is not None:
            digest.update(types_raw)
            taxonomy = self._validate(
                TypeAdapter(ServiceTypesRecord), types_raw, SERVICE_TYPES_FILE
            ).to_entity()

        exceptions = OperatingExceptions()
        exceptions_raw = self._read(OPERATING_EXCEPTIONS_FILE, required=False)
        if exceptions_raw is not None:
            digest.update(exceptions_raw)
            exceptions = self._validate(
                TypeAdapter(OperatingExceptionsRecord), exceptions_raw, OPERATING_EXCEPTIONS_FILE
            ).to_entity()

        dataset = NetworkDataset(
            stations=tuple(s.to_entity() for s in stations),
            services=tuple(s.to_entity() for s in services),
            through_rules=tuple(r.to_entity() for r in through_rules),
            taxonomy=taxonomy,
            exceptions=exceptions,
            version=digest.hexdigest()[:16],
        )
        logger.info(
            f"Loaded network dataset {dataset.version} from {self.data_dir}: {dataset.stats}"
        )
        return dataset


def load_dataset(data_dir: Union[str, Path]) -> NetworkDataset:
    """Convenience wrapper around DatasetLoader."""
    return DatasetLoader(data_dir).load()
