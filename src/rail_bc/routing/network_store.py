"""NetworkStore - in-memory holder of the rail network for route search.

Loaded once when the server starts. Keeps the current dataset snapshot and
the graph built from it, so requests do not rebuild the graph while the
dataset version is unchanged.

Thread-safe for concurrent reads; reloads swap the snapshot under a lock.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from src.rail_bc.network.domain.entities import NetworkDataset
from src.rail_bc.network.infrastructure.services import load_dataset

from .graph_builder import GraphParameters, RailGraph, build_graph

logger = logging.getLogger(__name__)


class NetworkStore:
    """Singleton with the current dataset and its cached graph."""

    _instance: Optional['NetworkStore'] = None
    _lock = threading.Lock()

    def __init__(self):
        self._dataset: Optional[NetworkDataset] = None
        # {(dataset_version, parameters): graph}
        self._graphs: Dict[Tuple[str, GraphParameters], RailGraph] = {}

        self.is_loaded = False
        self.load_time_seconds = 0.0
        self.stats: Dict[str, int] = {}
        self._reload_lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> 'NetworkStore':
        """Get the singleton instance (thread-safe)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton (tests, full reload)."""
        with cls._lock:
            cls._instance = None

    @property
    def dataset(self) -> Optional[NetworkDataset]:
        return self._dataset

    @property
    def version(self) -> Optional[str]:
        return self._dataset.version if self._dataset else None

    def load(self, data_dir: Union[str, Path]) -> None:
        """Load the dataset once; later calls are no-ops."""
        if self.is_loaded:
            return

        with self._reload_lock:
            if self.is_loaded:
                return
            self._do_load(data_dir)

    def reload(self, data_dir: Union[str, Path]) -> None:
        """Replace the dataset without restarting the server.

        The old snapshot keeps serving requests until the new one is ready.
        """
        with self._reload_lock:
            self._do_load(data_dir)

    def _do_load(self, data_dir: Union[str, Path]) -> None:
        start = time.time()
        dataset = load_dataset(data_dir)
        self.set_dataset(dataset)
        self.load_time_seconds = time.time() - start
        logger.info(f"Network store loaded in {self.load_time_seconds:.2f}s")

    def set_dataset(self, dataset: NetworkDataset) -> None:
        """Install a dataset snapshot and drop graphs built for older versions."""
        self._graphs = {
            key: graph for key, graph in self._graphs.items() if key[0] == dataset.version
        }
        self._dataset = dataset
        self.stats = dataset.stats
        self.is_loaded = True

    def snapshot(self, parameters: Optional[GraphParameters] = None) -> Tuple[NetworkDataset, RailGraph]:
        """Current dataset and the graph built from it.

        Raises:
            RuntimeError: if no dataset has been loaded
        """
        dataset = self._dataset
        if dataset is None:
            raise RuntimeError("Network data is not loaded")

        parameters = parameters or GraphParameters()
        key = (dataset.version, parameters)
        graph = self._graphs.get(key)
        if graph is None:
            graph = build_graph(dataset, parameters)
            self._graphs[key] = graph
        return dataset, graph


# Global singleton for direct import
network_store = NetworkStore.get_instance()
