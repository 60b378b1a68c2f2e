from __future__ import annotations

import logging
import time as time_utils
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from config import TempestConfig

logger = logging.getLogger("tempest.hub.upstream")

SECONDS_PER_DAY = 86_400
UNIT_PARAMS = {
    "units_temp": "f",
    "units_wind": "mph",
    "units_pressure": "inhg",
    "units_precip": "in",
    "units_distance": "mi",
}


@dataclass(slots=True)
class HistoryFetch:
    records: list[Any] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def day_window(day_offset: int, now: float) -> tuple[int, int]:
    """Return the (time_start, time_end) epoch-second window for a day offset."""
    current = int(now)
    return current - (day_offset + 1) * SECONDS_PER_DAY, current - day_offset * SECONDS_PER_DAY


def response_detail(response: httpx.Response | None) -> Any:
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text[:2_048] if response.text else None


class TempestClient:
    """Thin async wrapper over the WeatherFlow device observations endpoint."""

    def __init__(self, config: TempestConfig, client: Optional[httpx.AsyncClient] = None) -> None:
        self._config = config
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "TempestClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=self._config.timeout,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def fetch_day(self, day_offset: int, now: float | None = None) -> Optional[list[Any]]:
        """Fetch one day of raw observations; None when the body carries no ``obs`` list."""
        if now is None:
            now = time_utils.time()
        time_start, time_end = day_window(day_offset, now)
        params: dict[str, Any] = {"time_start": time_start, "time_end": time_end, **UNIT_PARAMS}
        client = self._get_client()
        response = await client.get(
            f"{self._config.base_url}/observations/device/{self._config.device_id}",
            params=params,
            headers={"Authorization": f"Bearer {self._config.token}"},
            timeout=self._config.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        observations = payload.get("obs") if isinstance(payload, dict) else None
        if not isinstance(observations, list):
            logger.warning("No observations found for day offset %s: %s", day_offset, payload)
            return None
        return observations

    async def fetch_history(self, days: int = 5, now: float | None = None) -> HistoryFetch:
        """Fetch ``days`` day offsets one after another, keeping whatever succeeds."""
        if now is None:
            now = time_utils.time()
        result = HistoryFetch()
        for day_offset in range(days):
            logger.info("Fetching data for day offset %s...", day_offset)
            try:
                observations = await self.fetch_day(day_offset, now=now)
            except httpx.HTTPError as exc:
                response = exc.response if isinstance(exc, httpx.HTTPStatusError) else None
                logger.error(
                    "Error fetching data for day offset %s: status=%s data=%s message=%s",
                    day_offset,
                    response.status_code if response is not None else None,
                    response_detail(response),
                    exc,
                )
                result.errors.append(f"Failed to fetch day {day_offset}: {exc}")
                continue
            except Exception as exc:  # noqa: BLE001 - we want to log and continue
                logger.warning("Failed to fetch day offset %s", day_offset, exc_info=True)
                result.errors.append(f"Failed to fetch day {day_offset}: {exc}")
                continue

            if observations is None:
                result.errors.append(f"No observations found for day offset {day_offset}")
                continue
            result.records.extend(observations)
            logger.info("Successfully fetched %s observations for day %s", len(observations), day_offset)
        return result
