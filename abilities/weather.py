"""
Weather ability — free, no API key required.

Uses Open-Meteo geocoding + forecast APIs.
"""

import logging
from typing import Optional

import requests

from config import GEOCODE_URL, WEATHER_URL, HTTP_TIMEOUT
from models import (
    CurrentConditions,
    DailyForecastSeries,
    ForecastResponse,
    LocationCandidate,
)

log = logging.getLogger(__name__)

DAILY_FIELDS = ["temperature_2m_max", "temperature_2m_min", "weathercode"]


class WeatherAPIError(Exception):
    """Base error for the Open-Meteo clients."""


class TransportError(WeatherAPIError):
    """The HTTP call failed or returned something unusable."""


def _get_json(session: requests.Session, url: str, params: dict, timeout: float, what: str) -> dict:
    try:
        resp = session.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except requests.RequestException as e:
        log.warning(f"{what} request failed: {e}")
        raise TransportError(f"{what} failed") from e
    except ValueError as e:
        log.warning(f"{what} returned invalid JSON: {e}")
        raise TransportError(f"{what} failed") from e


class GeocodingService:
    """Resolve a place name to ranked LocationCandidates."""

    def __init__(self, url: str = GEOCODE_URL, timeout: float = HTTP_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def search(self, name: str, limit: int = 5, language: str = "en") -> list[LocationCandidate]:
        data = _get_json(
            self.session,
            self.url,
            {"name": name, "count": limit, "language": language, "format": "json"},
            self.timeout,
            "Geocoding",
        )
        try:
            return [LocationCandidate.from_api(row) for row in data.get("results") or []]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            log.warning(f"Malformed geocoding payload for {name!r}: {e}")
            raise TransportError("Geocoding failed") from e


class WeatherService:
    """Current conditions + daily forecast for a coordinate pair."""

    def __init__(self, url: str = WEATHER_URL, timeout: float = HTTP_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def forecast(self, latitude: float, longitude: float) -> ForecastResponse:
        data = _get_json(
            self.session,
            self.url,
            {
                "latitude": latitude,
                "longitude": longitude,
                "current_weather": "true",
                "daily": ",".join(DAILY_FIELDS),
                "timezone": "auto",
            },
            self.timeout,
            "Weather fetch",
        )
        try:
            current = data.get("current_weather")
            daily = data.get("daily")
            return ForecastResponse(
                current=CurrentConditions.from_api(current) if current else None,
                daily=DailyForecastSeries.from_api(daily) if daily else None,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            log.warning(f"Malformed forecast payload for ({latitude}, {longitude}): {e}")
            raise TransportError("Weather fetch failed") from e
