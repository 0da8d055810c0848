from __future__ import annotations

import pytest
from requests_mock import Mocker

import config
import store
from models import (
    CurrentConditions,
    DailyForecastSeries,
    ForecastResponse,
    LocationCandidate,
    WorkflowResult,
)


@pytest.fixture
def requests_mock():
    with Mocker(case_sensitive=True) as mock:
        yield mock


@pytest.fixture
def db(tmp_path, monkeypatch):
    """The real SQLite store, pointed at a throwaway file."""
    store.close()
    monkeypatch.setattr(config, "DB_PATH", str(tmp_path / "weather-test.db"))
    yield store
    store.close()


class FakeStore:
    def __init__(self, last_query: str | None = None) -> None:
        self.last_query = last_query
        self.writes: list[str] = []
        self.searches: list = []

    def set_last_query(self, query: str) -> None:
        self.writes.append(query)
        self.last_query = query

    def get_last_query(self) -> str | None:
        return self.last_query

    def log_search(self, entry) -> None:
        self.searches.append(entry)

    def get_searches(self, limit: int = 20) -> list:
        return list(reversed(self.searches))[:limit]


class FakeGeocoder:
    def __init__(self, candidates=None, error: Exception | None = None) -> None:
        self.candidates = candidates or []
        self.error = error
        self.calls: list[tuple] = []

    def search(self, name, limit=5, language="en"):
        self.calls.append((name, limit, language))
        if self.error:
            raise self.error
        return self.candidates


class FakeWeather:
    def __init__(self, response: ForecastResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple] = []

    def forecast(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        if self.error:
            raise self.error
        return self.response


def make_current(temp: float = 18.4, code: int = 2) -> CurrentConditions:
    return CurrentConditions(
        time="2024-06-01T14:00",
        temperature=temp,
        windspeed=11.2,
        winddirection=250,
        weathercode=code,
    )


def make_daily(days: int = 7) -> DailyForecastSeries:
    return DailyForecastSeries(
        time=tuple(f"2024-06-{d + 1:02d}" for d in range(days)),
        temperature_max=tuple(20.0 + d for d in range(days)),
        temperature_min=tuple(10.0 + d for d in range(days)),
        weathercode=tuple([0, 3, 61, 95, 45, 71, 2][d % 7] for d in range(days)),
    )


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def paris():
    return LocationCandidate(
        name="Paris", latitude=48.85341, longitude=2.3488,
        admin1="Ile-de-France", country="France",
    )


@pytest.fixture
def success_result():
    def factory(query: str = "Paris", label: str = "Paris, Ile-de-France, France") -> WorkflowResult:
        return WorkflowResult.success(query, label, make_current(), make_daily())
    return factory
