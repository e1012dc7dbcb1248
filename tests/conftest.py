"""Shared test fixtures for extragrid."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from extragrid.engine import MemorySpreadsheet
from extragrid.main import create_app
from extragrid.rate_limit import limiter
from tests.fakes import COLUMN_WIDTH, ROW_HEIGHT, FakeGridMetrics


@pytest.fixture
def metrics() -> FakeGridMetrics:
    return FakeGridMetrics()


@pytest.fixture
def engine() -> MemorySpreadsheet:
    return MemorySpreadsheet(default_column_width=COLUMN_WIDTH, default_row_height=ROW_HEIGHT)


@pytest.fixture
def client(engine: MemorySpreadsheet) -> Iterator[TestClient]:
    """A TestClient over a fresh app whose lifespan has run."""
    limiter.reset()
    with TestClient(create_app(engine)) as test_client:
        yield test_client
