from __future__ import annotations

import pytest
import requests

from abilities.weather import GeocodingService, TransportError, WeatherService

GEO = "https://geo.test/v1/search"
WX = "https://wx.test/v1/forecast"


def geocoder():
    return GeocodingService(url=GEO, timeout=2)


def weather():
    return WeatherService(url=WX, timeout=2)


def test_geocode_sends_expected_params(requests_mock):
    requests_mock.get(GEO, json={"results": [
        {"name": "Paris", "latitude": 48.85341, "longitude": 2.3488,
         "admin1": "Ile-de-France", "country": "France"},
        {"name": "Paris", "latitude": 33.66094, "longitude": -95.55551,
         "admin1": "Texas", "country": "United States"},
    ]})

    candidates = geocoder().search("Paris", limit=5, language="en")

    qs = requests_mock.last_request.qs
    assert qs["name"] == ["Paris"]
    assert qs["count"] == ["5"]
    assert qs["language"] == ["en"]
    assert qs["format"] == ["json"]
    assert [c.label for c in candidates] == [
        "Paris, Ile-de-France, France",
        "Paris, Texas, United States",
    ]


def test_geocode_without_results_key_is_empty(requests_mock):
    requests_mock.get(GEO, json={"generationtime_ms": 0.4})
    assert geocoder().search("Nowhere-ville") == []


@pytest.mark.parametrize("status", [400, 404, 500, 503])
def test_geocode_http_error_is_transport_error(requests_mock, status):
    requests_mock.get(GEO, status_code=status, json={"error": True})
    with pytest.raises(TransportError, match="Geocoding failed"):
        geocoder().search("Paris")


def test_geocode_connection_error(requests_mock):
    requests_mock.get(GEO, exc=requests.ConnectionError("boom"))
    with pytest.raises(TransportError):
        geocoder().search("Paris")


def test_geocode_invalid_json(requests_mock):
    requests_mock.get(GEO, text="<html>oops</html>")
    with pytest.raises(TransportError):
        geocoder().search("Paris")


def test_geocode_malformed_candidate(requests_mock):
    requests_mock.get(GEO, json={"results": [{"name": "Paris"}]})
    with pytest.raises(TransportError):
        geocoder().search("Paris")


def test_forecast_sends_expected_params(requests_mock):
    requests_mock.get(WX, json={})
    weather().forecast(48.85, 2.35)

    qs = requests_mock.last_request.qs
    assert qs["latitude"] == ["48.85"]
    assert qs["longitude"] == ["2.35"]
    assert qs["current_weather"] == ["true"]
    assert qs["daily"] == ["temperature_2m_max,temperature_2m_min,weathercode"]
    assert qs["timezone"] == ["auto"]


def test_forecast_parses_current_and_daily(requests_mock):
    requests_mock.get(WX, json={
        "timezone": "Europe/Paris",
        "current_weather": {
            "time": "2024-06-01T14:00", "temperature": 18.4, "windspeed": 11.2,
            "winddirection": 250, "weathercode": 2, "is_day": 1,
        },
        "daily": {
            "time": ["2024-06-01", "2024-06-02"],
            "temperature_2m_max": [21.3, 23.0],
            "temperature_2m_min": [12.1, 13.4],
            "weathercode": [2, 61],
        },
    })

    response = weather().forecast(48.85, 2.35)

    assert response.current.temperature == 18.4
    assert response.current.weathercode == 2
    assert len(response.daily) == 2
    assert response.daily.weathercode == (2, 61)


def test_forecast_without_blocks(requests_mock):
    requests_mock.get(WX, json={"latitude": 48.86, "longitude": 2.36})
    response = weather().forecast(48.85, 2.35)
    assert response.current is None
    assert response.daily is None


def test_forecast_misaligned_daily_is_transport_error(requests_mock):
    requests_mock.get(WX, json={
        "current_weather": {"time": "2024-06-01T14:00", "temperature": 18.4},
        "daily": {
            "time": ["2024-06-01", "2024-06-02"],
            "temperature_2m_max": [21.3],
            "temperature_2m_min": [12.1, 13.4],
            "weathercode": [2, 61],
        },
    })
    with pytest.raises(TransportError, match="Weather fetch failed"):
        weather().forecast(48.85, 2.35)


def test_forecast_http_error(requests_mock):
    requests_mock.get(WX, status_code=502)
    with pytest.raises(TransportError, match="Weather fetch failed"):
        weather().forecast(48.85, 2.35)


def test_forecast_keeps_null_daily_values(requests_mock):
    requests_mock.get(WX, json={
        "current_weather": {"time": "2024-06-01T14:00", "temperature": 18.4},
        "daily": {
            "time": ["2024-06-01", "2024-06-02"],
            "temperature_2m_max": [None, 23],
            "temperature_2m_min": [12.1, None],
            "weathercode": [None, 61],
        },
    })

    daily = weather().forecast(48.85, 2.35).daily

    assert daily.temperature_max == (None, 23.0)
    assert daily.temperature_min == (12.1, None)
    assert daily.weathercode == (None, 61)


def test_forecast_non_numeric_daily_value_is_transport_error(requests_mock):
    requests_mock.get(WX, json={
        "current_weather": {"time": "2024-06-01T14:00", "temperature": 18.4},
        "daily": {
            "time": ["2024-06-01"],
            "temperature_2m_max": ["hot"],
            "temperature_2m_min": [12.1],
            "weathercode": [0],
        },
    })
    with pytest.raises(TransportError, match="Weather fetch failed"):
        weather().forecast(48.85, 2.35)
