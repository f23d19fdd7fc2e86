"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app import app
from src.rail_bc.routing.network_store import NetworkStore

DATA_DIR = Path(__file__).parents[1] / "data"


@pytest.fixture
def client():
    """Create a test client with the shipped network loaded."""
    NetworkStore.reset_instance()
    NetworkStore.get_instance().load(DATA_DIR)
    with TestClient(app) as c:
        yield c
    NetworkStore.reset_instance()


@pytest.fixture
def api_base_url():
    """Base URL for rail API endpoints."""
    return "/api/v1/rail"
