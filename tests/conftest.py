"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample rings (square, concave farm)
- A sample farm with paddocks
- Sample livestock records
- Seeded random generators
- File-backed stores in a temporary directory
"""
from datetime import datetime, timezone

import numpy as np
import pytest

from paddock_mapper.domain.models import (
    FarmProperties,
    LivestockRecord,
    LivestockStatus,
    LivestockType,
    PaddockProperties,
    PolygonCollection,
    PolygonFeature,
    PolygonGeometry,
)
from paddock_mapper.infrastructure.storage import FarmStateStore, KeyValueStore


def make_farm(farm_id: str, ring: list[tuple[float, float]]) -> PolygonFeature:
    return PolygonFeature(
        properties=FarmProperties(id=farm_id, name="Farm Boundary", created="2024-01-15T00:00:00+00:00"),
        geometry=PolygonGeometry(coordinates=[ring]),
    )


def make_paddock(
    paddock_id: str,
    ring: list[tuple[float, float]],
    parent_id: str = "farm_1",
    name: str = "East Paddock",
) -> PolygonFeature:
    return PolygonFeature(
        properties=PaddockProperties(
            id=paddock_id,
            name=name,
            created="2024-01-15T00:00:00+00:00",
            parent_id=parent_id,
            purpose="Grazing",
        ),
        geometry=PolygonGeometry(coordinates=[ring]),
    )


def make_record(paddock_id: str, count: int) -> LivestockRecord:
    return LivestockRecord(
        paddock_id=paddock_id,
        count=count,
        type=LivestockType.CATTLE,
        status=LivestockStatus.HEALTHY,
        last_updated=datetime(2024, 1, 15, tzinfo=timezone.utc),
    )


# ============================================================
# Ring Fixtures
# ============================================================

@pytest.fixture
def square_ring() -> list[tuple[float, float]]:
    """Open 10x10 square."""
    return [(0, 0), (0, 10), (10, 10), (10, 0)]


@pytest.fixture
def concave_farm_ring() -> list[tuple[float, float]]:
    """U-shaped farm with a notch between x=3 and x=7 above y=3."""
    return [
        (0, 0), (10, 0), (10, 10), (7, 10),
        (7, 3), (3, 3), (3, 10), (0, 10),
        (0, 0),
    ]


@pytest.fixture
def farm_ring() -> list[tuple[float, float]]:
    """Closed square farm boundary, lon/lat order."""
    return [
        (-99.91, 41.49),
        (-99.91, 41.51),
        (-99.89, 41.51),
        (-99.89, 41.49),
        (-99.91, 41.49),
    ]


@pytest.fixture
def north_paddock_ring() -> list[tuple[float, float]]:
    return [
        (-99.905, 41.502),
        (-99.905, 41.508),
        (-99.895, 41.508),
        (-99.895, 41.502),
        (-99.905, 41.502),
    ]


@pytest.fixture
def south_paddock_ring() -> list[tuple[float, float]]:
    return [
        (-99.905, 41.492),
        (-99.905, 41.498),
        (-99.895, 41.498),
        (-99.895, 41.492),
        (-99.905, 41.492),
    ]


# ============================================================
# Collection Fixtures
# ============================================================

@pytest.fixture
def sample_collection(farm_ring, north_paddock_ring, south_paddock_ring) -> PolygonCollection:
    """One farm followed by two of its paddocks."""
    return PolygonCollection(features=[
        make_farm("farm_1", farm_ring),
        make_paddock("paddock_1", north_paddock_ring, name="North Field"),
        make_paddock("paddock_2", south_paddock_ring, name="South Paddock"),
    ])


@pytest.fixture
def sample_livestock() -> list[LivestockRecord]:
    return [
        make_record("paddock_1", 300),
        make_record("paddock_2", 45),
    ]


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


# ============================================================
# Storage Fixtures
# ============================================================

@pytest.fixture
def storage_path(tmp_path) -> str:
    return str(tmp_path / "farm-management-storage.json")


@pytest.fixture
def key_value_store(storage_path) -> KeyValueStore:
    return KeyValueStore(storage_path)


@pytest.fixture
def state_store(key_value_store) -> FarmStateStore:
    return FarmStateStore(key_value_store)
