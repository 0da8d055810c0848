"""
Presentation helpers — temperature formatting, condition lookup,
and text / view-model rendering of a WorkflowResult.

Everything here is pure: the display unit is passed in, never read
from a global.
"""

import math
from types import MappingProxyType
from typing import Optional

from models import (
    ConditionDescriptor,
    CurrentConditions,
    DailyForecastSeries,
    DisplayUnit,
    NO_FORECAST_MESSAGE,
    WorkflowResult,
)

# Open-Meteo (WMO) weather codes
CONDITIONS = MappingProxyType({
    0: ConditionDescriptor("Clear", "☀️"),
    1: ConditionDescriptor("Mainly clear", "🌤️"),
    2: ConditionDescriptor("Partly cloudy", "⛅"),
    3: ConditionDescriptor("Overcast", "☁️"),
    45: ConditionDescriptor("Fog", "🌫️"),
    48: ConditionDescriptor("Depositing rime fog", "🌫️"),
    51: ConditionDescriptor("Light drizzle", "🌦️"),
    53: ConditionDescriptor("Moderate drizzle", "🌦️"),
    55: ConditionDescriptor("Dense drizzle", "🌧️"),
    56: ConditionDescriptor("Light freezing drizzle", "🧊🌧️"),
    57: ConditionDescriptor("Dense freezing drizzle", "🧊🌧️"),
    61: ConditionDescriptor("Slight rain", "🌧️"),
    63: ConditionDescriptor("Moderate rain", "🌧️"),
    65: ConditionDescriptor("Heavy rain", "⛈️"),
    66: ConditionDescriptor("Light freezing rain", "🧊🌧️"),
    67: ConditionDescriptor("Heavy freezing rain", "🧊🌧️"),
    71: ConditionDescriptor("Slight snow fall", "🌨️"),
    73: ConditionDescriptor("Moderate snow fall", "🌨️"),
    75: ConditionDescriptor("Heavy snow fall", "❄️"),
    77: ConditionDescriptor("Snow grains", "❄️"),
    80: ConditionDescriptor("Slight rain showers", "🌧️"),
    81: ConditionDescriptor("Moderate rain showers", "🌧️"),
    82: ConditionDescriptor("Violent rain showers", "⛈️"),
    85: ConditionDescriptor("Slight snow showers", "🌨️"),
    86: ConditionDescriptor("Heavy snow showers", "❄️"),
    95: ConditionDescriptor("Thunderstorm", "⛈️"),
    96: ConditionDescriptor("Thunderstorm with slight hail", "⛈️🧊"),
    99: ConditionDescriptor("Thunderstorm with heavy hail", "⛈️🧊"),
})

UNKNOWN_CONDITION = ConditionDescriptor("Unknown", "❓")

MISSING = "–"


def describe_condition(code) -> ConditionDescriptor:
    """Total over any input: unknown codes get UNKNOWN_CONDITION."""
    try:
        return CONDITIONS.get(code, UNKNOWN_CONDITION)
    except TypeError:  # unhashable
        return UNKNOWN_CONDITION


def to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def format_temperature(celsius: Optional[float], unit: DisplayUnit) -> str:
    """Convert, then round half up, then append the unit symbol.

    Open-Meteo sends null for days it has no value for; those show as MISSING.
    """
    if celsius is None:
        return MISSING
    value = to_fahrenheit(celsius) if unit is DisplayUnit.FAHRENHEIT else celsius
    return f"{math.floor(value + 0.5)}{unit.symbol}"


# ── View models (HTML template) ─────────────────────────────────

def current_panel(label: str, current: CurrentConditions, unit: DisplayUnit) -> dict:
    meta = describe_condition(current.weathercode)
    return {
        "label": label,
        "icon": meta.icon,
        "description": meta.description,
        "updated": current.time,
        "temperature": format_temperature(current.temperature, unit),
        "windspeed": current.windspeed,
        "winddirection": current.winddirection,
    }


def forecast_cards(daily: Optional[DailyForecastSeries], unit: DisplayUnit) -> list[dict]:
    if daily is None:
        return []
    cards = []
    for day in daily.days():
        meta = describe_condition(day.weathercode)
        cards.append({
            "date": day.date,
            "icon": meta.icon,
            "description": meta.description,
            "max": format_temperature(day.temperature_max, unit),
            "min": format_temperature(day.temperature_min, unit),
        })
    return cards


# ── Text (Telegram) ─────────────────────────────────────────────

def render_current(label: str, current: CurrentConditions, unit: DisplayUnit) -> str:
    p = current_panel(label, current, unit)
    lines = [
        f"{p['icon']} {p['label']}",
        f"{p['temperature']} — {p['description']}",
    ]
    if p["windspeed"] is not None:
        direction = f" {p['winddirection']}°" if p["winddirection"] is not None else ""
        lines.append(f"Wind {p['windspeed']} km/h{direction}")
    lines.append(f"Updated: {p['updated']}")
    return "\n".join(lines)


def render_forecast(daily: Optional[DailyForecastSeries], unit: DisplayUnit) -> str:
    if not daily:  # None or zero days
        return NO_FORECAST_MESSAGE
    lines = [
        f"{c['date']}  {c['icon']}  {c['max']} / {c['min']}  {c['description']}"
        for c in forecast_cards(daily, unit)
    ]
    return "\n".join(lines)


def render_result(result: WorkflowResult, unit: DisplayUnit) -> str:
    if not result.ok:
        return result.message
    return (
        render_current(result.label, result.current, unit)
        + "\n\n"
        + render_forecast(result.forecast, unit)
    )
