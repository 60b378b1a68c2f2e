from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from services.errors import NoValidObservationsError, NoWeatherDataError, UpstreamError
from services.observations import HistorySummary, WeatherObservation, reduce_to_daily, summarize
from services.tempest import TempestClient, response_detail

logger = logging.getLogger("tempest.hub.history")


@dataclass(frozen=True, slots=True)
class HistoryPayload:
    obs: list[WeatherObservation]
    summary: HistorySummary

    def to_payload(self) -> dict[str, Any]:
        return {
            "obs": [entry.to_payload() for entry in self.obs],
            "summary": self.summary.to_payload(),
        }


def upstream_error_from(exc: httpx.HTTPError) -> UpstreamError:
    """Translate an httpx failure into an error mirroring the upstream status."""
    response = exc.response if isinstance(exc, httpx.HTTPStatusError) else None
    details = str(exc)
    detail = response_detail(response)
    if isinstance(detail, dict) and detail.get("message"):
        details = str(detail["message"])
    status = response.status_code if response is not None else 500
    return UpstreamError(details, status_code=status)


async def build_history(client: TempestClient, days: int = 5, now: float | None = None) -> HistoryPayload:
    try:
        fetched = await client.fetch_history(days=days, now=now)
    except httpx.HTTPError as exc:
        raise upstream_error_from(exc) from exc

    if not fetched.records:
        logger.error("No observations found: %s", fetched.errors)
        raise NoWeatherDataError(fetched.errors)

    observations = reduce_to_daily(fetched.records)
    summary = summarize(observations)
    if summary is None:
        logger.warning("Fetched %s raw records but none reduced to a daily reading", len(fetched.records))
        raise NoValidObservationsError()

    if fetched.errors:
        logger.warning("History built with partial data: %s", "; ".join(fetched.errors))
    return HistoryPayload(obs=observations, summary=summary)
