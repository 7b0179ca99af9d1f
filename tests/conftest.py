"""
Shared test fixtures — pinned planner settings, API test client.
"""

import os
import pytest
from fastapi.testclient import TestClient

# Pin planner defaults before importing app modules
os.environ["DEFAULT_STOCK_LENGTH_MM"] = "6000"
os.environ["KERF_MM"] = "5"
os.environ["BAR_OPENING_POLICY"] = "largest"
os.environ["LOG_LEVEL"] = "INFO"

from cutplanner.cutting.planner import CuttingPlanner
from cutplanner.main import app


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def planner():
    """Planner with the shop defaults: 5mm kerf, always open the longest stock."""
    return CuttingPlanner(kerf=5.0, policy="largest", default_stock_length=6000.0)
