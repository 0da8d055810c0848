"""
Search workflow — query string in, WorkflowResult out.

resolve location → fetch weather → shape result. Each step's failure
short-circuits the rest; nothing is raised past execute().
"""

from __future__ import annotations
import logging
from typing import Optional

from config import GEOCODE_COUNT, GEOCODE_LANGUAGE
from abilities.weather import GeocodingService, WeatherService, TransportError
from models import (
    ERROR_MESSAGE,
    NO_CURRENT_MESSAGE,
    NOT_FOUND_MESSAGE,
    ResultKind,
    WorkflowResult,
)
import store

log = logging.getLogger(__name__)


class SearchWorkflow:
    def __init__(self, geocoder=None, weather=None, persistence=store,
                 limit: int = GEOCODE_COUNT, language: str = GEOCODE_LANGUAGE):
        self.geocoder = geocoder or GeocodingService()
        self.weather = weather or WeatherService()
        self.persistence = persistence
        self.limit = limit
        self.language = language

    def execute(self, query: str) -> Optional[WorkflowResult]:
        """
        Run one search. Blank queries are a no-op and return None.

        The query is remembered as soon as a location resolves, even if
        the weather fetch afterwards fails.
        """
        if not query or not query.strip():
            return None
        try:
            return self._run(query)
        except Exception:
            log.exception(f"Search for {query!r} failed unexpectedly")
            return WorkflowResult.failure(ResultKind.ERROR, query, ERROR_MESSAGE)

    def _run(self, query: str) -> WorkflowResult:
        try:
            candidates = self.geocoder.search(query, limit=self.limit, language=self.language)
        except TransportError as e:
            log.error(f"Geocoding {query!r}: {e}")
            return WorkflowResult.failure(ResultKind.TRANSPORT_ERROR, query, "Geocoding failed")

        if not candidates:
            log.info(f"No location found for {query!r}")
            return WorkflowResult.failure(ResultKind.NOT_FOUND, query, NOT_FOUND_MESSAGE)

        top = candidates[0]
        label = top.label
        self.persistence.set_last_query(query)

        try:
            response = self.weather.forecast(top.latitude, top.longitude)
        except TransportError as e:
            log.error(f"Weather for {label}: {e}")
            return WorkflowResult.failure(
                ResultKind.TRANSPORT_ERROR, query, "Weather fetch failed", label=label
            )

        if response.current is None:
            return WorkflowResult.failure(
                ResultKind.NO_CURRENT_DATA, query, NO_CURRENT_MESSAGE, label=label
            )

        log.info(f"Resolved {query!r} → {label} ({top.latitude}, {top.longitude})")
        return WorkflowResult.success(query, label, response.current, response.daily)
