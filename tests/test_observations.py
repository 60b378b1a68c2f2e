from __future__ import annotations

import math
import random
from datetime import datetime, timezone

import pytest

from services.observations import (
    StationReading,
    WeatherObservation,
    compute_daily_rain,
    noon_timestamp,
    reduce_to_daily,
    summarize,
)


def _ts(value: str) -> int:
    return int(datetime.fromisoformat(value).replace(tzinfo=timezone.utc).timestamp())


def _record(
    timestamp: float,
    temperature: float | None = 70.0,
    humidity: float | None = 50.0,
    rain: float | None = 0.0,
) -> list:
    raw: list = [0.0] * 18
    raw[0] = timestamp
    raw[7] = temperature
    raw[8] = humidity
    raw[11] = rain
    return raw


def test_noon_timestamp_is_utc_midday():
    assert noon_timestamp("2024-06-01") == _ts("2024-06-01T12:00:00")


def test_station_reading_decodes_named_fields():
    reading = StationReading.from_raw(_record(_ts("2024-06-01T10:00:00"), 71.5, 48.0, 0.12))
    assert reading is not None
    assert reading.day == "2024-06-01"
    assert reading.temperature == pytest.approx(71.5)
    assert reading.humidity == pytest.approx(48.0)
    assert reading.daily_rain == pytest.approx(0.12)


def test_station_reading_handles_short_and_null_arrays():
    short = StationReading.from_raw([_ts("2024-06-01T10:00:00"), None, 3])
    assert short is not None
    assert short.temperature is None
    assert short.daily_rain is None
    assert short.rain_or_zero == 0.0
    assert StationReading.from_raw([]) is None
    assert StationReading.from_raw([None, 1, 2]) is None
    assert StationReading.from_raw([True, 1, 2]) is None
    assert StationReading.from_raw("not a record") is None


def test_noon_nearest_record_supplies_temperature_and_humidity():
    records = [
        _record(_ts("2024-06-01T06:00:00"), temperature=55.0, humidity=80.0),
        _record(_ts("2024-06-01T11:55:00"), temperature=72.0, humidity=45.0),
        _record(_ts("2024-06-01T18:00:00"), temperature=66.0, humidity=60.0),
    ]

    result = reduce_to_daily(records)

    assert len(result) == 1
    assert result[0].temperature == 72.0
    assert result[0].humidity == 45.0
    assert result[0].timestamp == _ts("2024-06-01T11:55:00") * 1000


def test_equidistant_records_keep_the_first_encountered():
    records = [
        _record(_ts("2024-06-01T13:00:00"), temperature=80.0),
        _record(_ts("2024-06-01T11:00:00"), temperature=60.0),
    ]

    result = reduce_to_daily(records)

    assert result[0].temperature == 80.0


def test_daily_rain_is_max_not_sum_or_last():
    day = "2024-06-01"
    records = [
        _record(_ts(f"{day}T08:00:00"), rain=0.1),
        _record(_ts(f"{day}T12:00:00"), rain=0.3),
        _record(_ts(f"{day}T16:00:00"), rain=0.2),
    ]

    assert compute_daily_rain(records) == {day: 0.3}
    assert reduce_to_daily(records)[0].rain == 0.3


def test_daily_rain_table_is_read_only():
    table = compute_daily_rain([_record(_ts("2024-06-01T08:00:00"), rain=0.1)])
    with pytest.raises(TypeError):
        table["2024-06-01"] = 5.0  # type: ignore[index]


def test_daily_rain_never_decreases_with_more_records():
    base = [_record(_ts("2024-06-01T08:00:00"), rain=0.25)]
    more = base + [_record(_ts("2024-06-01T09:00:00"), rain=0.05)]
    assert compute_daily_rain(more)["2024-06-01"] >= compute_daily_rain(base)["2024-06-01"]


def test_missing_rain_defaults_to_zero():
    records = [_record(_ts("2024-06-01T12:00:00"), rain=None)]
    assert compute_daily_rain(records) == {"2024-06-01": 0.0}
    assert reduce_to_daily(records)[0].rain == 0.0


def test_nan_timestamp_is_skipped():
    records = [
        _record(math.nan, temperature=99.0),
        _record(_ts("2024-06-01T12:00:00"), temperature=70.0),
    ]

    assert list(compute_daily_rain(records)) == ["2024-06-01"]
    result = reduce_to_daily(records)
    assert [entry.temperature for entry in result] == [70.0]


def test_day_dropped_when_noon_reading_has_no_temperature():
    records = [
        _record(_ts("2024-06-01T07:00:00"), temperature=60.0),
        _record(_ts("2024-06-01T12:01:00"), temperature=math.nan),
        _record(_ts("2024-06-02T12:00:00"), temperature=65.0),
    ]

    result = reduce_to_daily(records)

    assert len(result) == 1
    assert result[0].temperature == 65.0


def test_day_dropped_when_noon_reading_has_null_humidity():
    records = [_record(_ts("2024-06-01T12:00:00"), humidity=None)]
    assert reduce_to_daily(records) == []


def test_output_sorted_and_one_entry_per_day_regardless_of_input_order():
    records = [
        _record(_ts(f"2024-06-0{day}T{hour:02d}:00:00"), temperature=float(day * 10 + hour))
        for day in range(1, 6)
        for hour in (3, 9, 12, 15, 21)
    ]
    random.Random(7).shuffle(records)

    result = reduce_to_daily(records)

    timestamps = [entry.timestamp for entry in result]
    assert timestamps == sorted(timestamps)
    assert len(set(timestamps)) == len(timestamps)
    days = [datetime.fromtimestamp(ts / 1000, tz=timezone.utc).date() for ts in timestamps]
    assert len(set(days)) == len(days) == 5
    assert [entry.temperature for entry in result] == [22.0, 32.0, 42.0, 52.0, 62.0]


def test_reduction_is_deterministic():
    records = [
        _record(_ts("2024-06-02T12:00:00"), rain=0.2),
        _record(_ts("2024-06-01T12:00:00"), rain=0.1),
    ]
    assert reduce_to_daily(records) == reduce_to_daily(list(records))


def test_empty_input_yields_empty_output():
    assert reduce_to_daily([]) == []
    assert compute_daily_rain([]) == {}
    assert summarize([]) is None


def test_two_day_scenario():
    records = [
        _record(_ts("2024-06-01T06:00:00"), temperature=58.0, humidity=70.0, rain=0.0),
        _record(_ts("2024-06-01T12:05:00"), temperature=70.0, humidity=55.0, rain=0.1),
        _record(_ts("2024-06-01T20:00:00"), temperature=62.0, humidity=65.0, rain=0.4),
        _record(_ts("2024-06-02T09:00:00"), temperature=60.0, humidity=66.0, rain=0.0),
        _record(_ts("2024-06-02T12:30:00"), temperature=68.0, humidity=60.0, rain=0.2),
    ]

    result = reduce_to_daily(records)

    assert [(entry.temperature, entry.humidity, entry.rain) for entry in result] == [
        (70.0, 55.0, 0.4),
        (68.0, 60.0, 0.2),
    ]
    summary = summarize(result)
    assert summary is not None
    assert summary.start_time == _ts("2024-06-01T12:05:00") * 1000
    assert summary.end_time == _ts("2024-06-02T12:30:00") * 1000
    assert summary.total_observations == 2


def test_weather_observation_payload():
    entry = WeatherObservation(timestamp=1_717_243_200_000, temperature=70.0, humidity=55.0, rain=0.4)
    assert entry.to_payload() == {
        "timestamp": 1_717_243_200_000,
        "temperature": 70.0,
        "humidity": 55.0,
        "rain": 0.4,
    }


def test_oversized_integer_timestamp_is_skipped():
    records = [
        _record(10**400, temperature=99.0),
        _record(_ts("2024-06-01T12:00:00"), temperature=70.0),
    ]

    assert list(compute_daily_rain(records)) == ["2024-06-01"]
    assert [entry.temperature for entry in reduce_to_daily(records)] == [70.0]


def test_oversized_integer_rain_counts_as_missing():
    records = [
        _record(_ts("2024-06-01T08:00:00"), rain=0.2),
        _record(_ts("2024-06-01T12:00:00"), rain=10**400),
    ]

    assert compute_daily_rain(records) == {"2024-06-01": 0.2}
    assert reduce_to_daily(records)[0].rain == 0.2
