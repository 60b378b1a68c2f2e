"""Reduce raw Tempest observation arrays into one reading per calendar day.

The WeatherFlow ``obs`` payload is a list of positional numeric arrays. Only a
handful of positions matter for the dashboard, and they are decoded once into
:class:`StationReading` so nothing downstream indexes by position.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from functools import reduce
from types import MappingProxyType
from typing import Any, Optional

# Positions within a Tempest device observation array
OBS_TIMESTAMP = 0
OBS_AIR_TEMPERATURE = 7
OBS_RELATIVE_HUMIDITY = 8
OBS_DAILY_RAIN = 11


def _finite(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        numeric = float(value)
    except OverflowError:
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


def _field(raw: Sequence[Any], index: int) -> Optional[float]:
    if index >= len(raw):
        return None
    return _finite(raw[index])


def _utc_day(timestamp: float) -> Optional[str]:
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()
    except (OverflowError, OSError, ValueError):
        return None


@dataclass(frozen=True, slots=True)
class StationReading:
    """Named view over a single raw observation array."""

    timestamp: float
    day: str
    temperature: Optional[float]
    humidity: Optional[float]
    daily_rain: Optional[float]

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["StationReading"]:
        """Decode a raw array, returning None when the timestamp is unusable."""
        if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)) or not raw:
            return None
        timestamp = _finite(raw[OBS_TIMESTAMP])
        if timestamp is None:
            return None
        day = _utc_day(timestamp)
        if day is None:
            return None
        return cls(
            timestamp=timestamp,
            day=day,
            temperature=_field(raw, OBS_AIR_TEMPERATURE),
            humidity=_field(raw, OBS_RELATIVE_HUMIDITY),
            daily_rain=_field(raw, OBS_DAILY_RAIN),
        )

    @property
    def rain_or_zero(self) -> float:
        # An absent rain reading is indistinguishable from a dry day here.
        return self.daily_rain if self.daily_rain is not None else 0.0


@dataclass(frozen=True, slots=True)
class WeatherObservation:
    timestamp: int
    temperature: float
    humidity: float
    rain: float

    def to_payload(self) -> dict[str, float | int]:
        return {
            "timestamp": self.timestamp,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "rain": self.rain,
        }


@dataclass(frozen=True, slots=True)
class HistorySummary:
    start_time: int
    end_time: int
    total_observations: int

    def to_payload(self) -> dict[str, int]:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "total_observations": self.total_observations,
        }


def decode_records(records: Iterable[Any]) -> list[StationReading]:
    readings: list[StationReading] = []
    for raw in records:
        reading = StationReading.from_raw(raw)
        if reading is not None:
            readings.append(reading)
    return readings


def _keep_max_rain(table: dict[str, float], reading: StationReading) -> dict[str, float]:
    rain = reading.rain_or_zero
    if reading.day not in table or rain > table[reading.day]:
        table[reading.day] = rain
    return table


def compute_daily_rain(records: Iterable[Any]) -> Mapping[str, float]:
    """Map each UTC date to the largest daily-rain accumulation reported that day.

    The sensor field is a running total that resets at midnight, so the daily
    figure is its maximum rather than a sum of the readings.
    """
    return _rain_table(decode_records(records))


def _rain_table(readings: Iterable[StationReading]) -> Mapping[str, float]:
    return MappingProxyType(reduce(_keep_max_rain, readings, {}))


def group_by_day(readings: Iterable[StationReading]) -> dict[str, list[StationReading]]:
    groups: dict[str, list[StationReading]] = {}
    for reading in readings:
        groups.setdefault(reading.day, []).append(reading)
    return groups


def noon_timestamp(day: str) -> float:
    """Epoch seconds of 12:00 UTC on the given ISO date."""
    calendar_day = date.fromisoformat(day)
    return datetime.combine(calendar_day, time(12, 0), tzinfo=timezone.utc).timestamp()


def closest_to_noon(day: str, readings: Sequence[StationReading]) -> StationReading:
    noon = noon_timestamp(day)
    # min() keeps the first of equally distant readings
    return min(readings, key=lambda reading: abs(reading.timestamp - noon))


def reduce_to_daily(records: Iterable[Any]) -> list[WeatherObservation]:
    """Collapse raw observation arrays into one noon-nearest reading per UTC day.

    Days whose selected reading lacks a finite temperature or humidity are
    dropped. The result is sorted by timestamp and may be empty.
    """
    readings = decode_records(records)
    daily_rain = _rain_table(readings)

    daily: list[WeatherObservation] = []
    for day, day_readings in group_by_day(readings).items():
        selected = closest_to_noon(day, day_readings)
        if selected.temperature is None or selected.humidity is None:
            continue
        daily.append(
            WeatherObservation(
                timestamp=int(round(selected.timestamp * 1000)),
                temperature=selected.temperature,
                humidity=selected.humidity,
                rain=daily_rain.get(day, 0.0),
            )
        )

    daily.sort(key=lambda obs: obs.timestamp)
    return daily


def summarize(observations: Sequence[WeatherObservation]) -> Optional[HistorySummary]:
    if not observations:
        return None
    return HistorySummary(
        start_time=observations[0].timestamp,
        end_time=observations[-1].timestamp,
        total_observations=len(observations),
    )
