"""Shared fixtures for the search API tests."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from fastapi.testclient import TestClient
import pytest

from dogsearch.core.config import Settings
from dogsearch.domain.search_filters import CandidateFilters
from dogsearch.main import create_app

# Three veterinary clinics around downtown Indianapolis, in relevance order
VET_RECORDS: List[Dict[str, Any]] = [
    {
        "id": "svc-3",
        "type": "service",
        "name": "Carmel Animal Hospital",
        "service_type": "veterinarian",
        "city": "Carmel",
        "state": "IN",
        "latitude": 39.9784,
        "longitude": -86.1180,
        "rating": 4.9,
    },
    {
        "id": "svc-1",
        "type": "service",
        "name": "Mass Ave Vet Clinic",
        "service_type": "veterinarian",
        "city": "Indianapolis",
        "state": "IN",
        "latitude": 39.7750,
        "longitude": -86.1480,
        "rating": 4.7,
    },
    {
        "id": "svc-2",
        "type": "service",
        "name": "Broad Ripple Veterinary",
        "service_type": "veterinarian",
        "city": "Indianapolis",
        "state": "IN",
        "latitude": 39.8680,
        "longitude": -86.1420,
        "rating": 4.5,
    },
]


class RecordingFetcher:
    """Data store stand-in that records every call."""

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.records = records if records is not None else VET_RECORDS
        self.error = error
        self.calls: List[CandidateFilters] = []

    def __call__(self, filters: CandidateFilters) -> List[Dict[str, Any]]:
        self.calls.append(filters)
        if self.error is not None:
            raise self.error
        return [dict(record) for record in self.records]


class ManualClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def vet_records() -> List[Dict[str, Any]]:
    return [dict(record) for record in VET_RECORDS]


@pytest.fixture
def fetcher() -> RecordingFetcher:
    return RecordingFetcher()


@pytest.fixture
def make_fetcher():
    return RecordingFetcher


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        environment="test",
        database_url="sqlite:///:memory:",
        search_cache_ttl_seconds=300,
        search_cache_max_entries=1000,
        search_rate_limit_enabled=True,
        search_rate_limit_shadow=False,
        search_rate_limit_requests=10,
        search_rate_limit_window_seconds=60,
        search_rate_limit_retention_seconds=600,
    )


@pytest.fixture
def client(test_settings: Settings, fetcher: RecordingFetcher) -> Iterator[TestClient]:
    app = create_app(test_settings, fetcher)
    with TestClient(app) as test_client:
        yield test_client
