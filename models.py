"""
Data models for locations, weather payloads, and search results.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Iterator, NamedTuple, Optional
import uuid


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _uuid() -> str:
    return uuid.uuid4().hex[:12]


def _opt_float(value) -> Optional[float]:
    """null stays None; anything else must be a number."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected a number, got {value!r}")
    return float(value)


class DisplayUnit(Enum):
    CELSIUS = "c"
    FAHRENHEIT = "f"

    @property
    def symbol(self) -> str:
        return "°F" if self is DisplayUnit.FAHRENHEIT else "°C"

    @classmethod
    def parse(cls, value: Optional[str], default: DisplayUnit = None) -> DisplayUnit:
        """Accept 'c'/'f', 'celsius'/'fahrenheit' (any case)."""
        if default is None:
            default = cls.CELSIUS
        if not value:
            return default
        key = value.strip().lower()
        if key in ("c", "celsius"):
            return cls.CELSIUS
        if key in ("f", "fahrenheit"):
            return cls.FAHRENHEIT
        raise ValueError(f"Unknown unit: {value}")


class ConditionDescriptor(NamedTuple):
    description: str
    icon: str


@dataclass(frozen=True)
class LocationCandidate:
    name: str
    latitude: float
    longitude: float
    admin1: Optional[str] = None
    country: Optional[str] = None

    @property
    def label(self) -> str:
        """'Paris, Ile-de-France, France' — absent parts are skipped."""
        parts = [self.name, self.admin1, self.country]
        return ", ".join(p for p in parts if p)

    @classmethod
    def from_api(cls, row: dict) -> LocationCandidate:
        return cls(
            name=row["name"],
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            admin1=row.get("admin1"),
            country=row.get("country"),
        )


@dataclass(frozen=True)
class CurrentConditions:
    time: str
    temperature: float  # °C
    windspeed: Optional[float] = None  # km/h
    winddirection: Optional[float] = None  # degrees
    weathercode: Optional[int] = None

    @classmethod
    def from_api(cls, block: dict) -> CurrentConditions:
        return cls(
            time=block.get("time", ""),
            temperature=float(block["temperature"]),
            windspeed=block.get("windspeed"),
            winddirection=block.get("winddirection"),
            weathercode=block.get("weathercode"),
        )


@dataclass(frozen=True)
class ForecastDay:
    date: str
    temperature_max: Optional[float]  # None when the provider has no value
    temperature_min: Optional[float]
    weathercode: Optional[int]


@dataclass(frozen=True)
class DailyForecastSeries:
    """Parallel daily arrays. All four must have the same length."""

    time: tuple = ()
    temperature_max: tuple = ()
    temperature_min: tuple = ()
    weathercode: tuple = ()

    def __post_init__(self):
        lengths = {len(self.time), len(self.temperature_max),
                   len(self.temperature_min), len(self.weathercode)}
        if len(lengths) > 1:
            raise ValueError(f"Daily arrays are not aligned: lengths {sorted(lengths)}")

    def __len__(self) -> int:
        return len(self.time)

    def days(self) -> Iterator[ForecastDay]:
        for i in range(len(self.time)):
            yield ForecastDay(
                date=self.time[i],
                temperature_max=self.temperature_max[i],
                temperature_min=self.temperature_min[i],
                weathercode=self.weathercode[i],
            )

    @classmethod
    def from_api(cls, block: dict) -> DailyForecastSeries:
        return cls(
            time=tuple(block["time"]),
            temperature_max=tuple(_opt_float(v) for v in block["temperature_2m_max"]),
            temperature_min=tuple(_opt_float(v) for v in block["temperature_2m_min"]),
            weathercode=tuple(block["weathercode"]),
        )


@dataclass(frozen=True)
class ForecastResponse:
    current: Optional[CurrentConditions] = None
    daily: Optional[DailyForecastSeries] = None


class ResultKind(Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    NO_CURRENT_DATA = "no_current_data"
    TRANSPORT_ERROR = "transport_error"
    ERROR = "error"


NOT_FOUND_MESSAGE = "City not found. Try a different search."
NO_CURRENT_MESSAGE = "No current weather available for this location."
NO_FORECAST_MESSAGE = "No forecast data."
ERROR_MESSAGE = "An error occurred while fetching weather."


@dataclass
class WorkflowResult:
    kind: ResultKind
    query: str
    message: str = ""
    label: str = ""
    current: Optional[CurrentConditions] = None
    forecast: Optional[DailyForecastSeries] = None
    generation: int = 0

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    @classmethod
    def success(cls, query: str, label: str, current: CurrentConditions,
                forecast: Optional[DailyForecastSeries]) -> WorkflowResult:
        return cls(ResultKind.SUCCESS, query, label=label, current=current, forecast=forecast)

    @classmethod
    def failure(cls, kind: ResultKind, query: str, message: str, label: str = "") -> WorkflowResult:
        return cls(kind, query, message=message, label=label)

    def to_dict(self) -> dict:
        d = {
            "kind": self.kind.value,
            "query": self.query,
            "message": self.message,
            "label": self.label,
            "current": asdict(self.current) if self.current else None,
            "forecast": None,
        }
        if self.forecast is not None:
            d["forecast"] = [asdict(day) for day in self.forecast.days()]
        return d


@dataclass
class Session:
    """Per-conversation state: one per Telegram chat, one for the web page."""

    key: str
    unit: DisplayUnit = DisplayUnit.CELSIUS
    generation: int = 0
    last_result: Optional[WorkflowResult] = None


@dataclass
class SearchLogEntry:
    log_id: str = field(default_factory=_uuid)
    query: str = ""
    label: str = ""
    outcome: str = ""
    timestamp: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_row(cls, row: dict) -> SearchLogEntry:
        return cls(**dict(row))

    @classmethod
    def from_result(cls, result: WorkflowResult) -> SearchLogEntry:
        return cls(query=result.query, label=result.label, outcome=result.kind.value)
