from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from config import settings
from services.errors import StationError
from services.history import build_history, upstream_error_from
from services.tempest import TempestClient
from .dependencies import get_tempest_client

logger = logging.getLogger("tempest.hub.weather")

router = APIRouter(prefix="/weather", tags=["weather"])
legacy_router = APIRouter(prefix="/api", tags=["weather"])

BASE_MAPS: dict[str, str] = {
    "dark": "https://{s}.basemaps.cartocdn.com/dark_all/{z}/{x}/{y}{r}.png",
    "light": "https://{s}.basemaps.cartocdn.com/light_all/{z}/{x}/{y}{r}.png",
    "satellite": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
    "terrain": "https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png",
}
DEFAULT_BASE_MAP = "light"
RADAR_LAYER_OPACITY = 0.7
RADAR_WMS_URL = "https://mesonet.agron.iastate.edu/cgi-bin/wms/nexrad/n0q.cgi"
RADAR_WMS_LAYER = "nexrad-n0q-900913"
RADAR_ATTRIBUTION = "©NOAA, Iowa State University"


class WeatherObservationModel(BaseModel):
    timestamp: int = Field(description="Observation time in epoch milliseconds")
    temperature: float = Field(description="Air temperature in degF")
    humidity: float = Field(description="Relative humidity %")
    rain: float = Field(description="Rain accumulated over the calendar day in inches")


class HistorySummaryModel(BaseModel):
    start_time: int
    end_time: int
    total_observations: int


class HistoricalWeatherResponse(BaseModel):
    obs: list[WeatherObservationModel]
    summary: HistorySummaryModel


class RadarLayer(BaseModel):
    name: str = "Weather Radar"
    opacity: float = RADAR_LAYER_OPACITY
    wms_url: str = Field(default=RADAR_WMS_URL, description="NEXRAD base reflectivity WMS endpoint")
    layers: str = RADAR_WMS_LAYER
    format: str = "image/png"
    transparent: bool = True
    attribution: str = RADAR_ATTRIBUTION


class StationInfoResponse(BaseModel):
    name: str
    lat: float
    lon: float
    zoom: int
    default_base_map: str = DEFAULT_BASE_MAP
    base_maps: dict[str, str] = Field(default_factory=lambda: dict(BASE_MAPS))
    radar: RadarLayer = Field(default_factory=RadarLayer)


@router.get("/historical", response_model=HistoricalWeatherResponse)
async def get_historical_weather(
    days: int | None = Query(None, ge=1, le=5, description="Number of days to fetch, today included"),
    client: TempestClient = Depends(get_tempest_client),
):
    window = days if days is not None else settings.history_days
    try:
        history = await build_history(client, days=window)
    except StationError:
        raise
    except httpx.HTTPError as exc:
        logger.error("Historical data fetch error: %s", exc)
        raise upstream_error_from(exc) from exc
    except Exception as exc:  # noqa: BLE001 - surfaced as a 500 body
        logger.exception("Historical data fetch error")
        raise StationError(str(exc) or exc.__class__.__name__) from exc
    return history.to_payload()


@router.get("/station", response_model=StationInfoResponse)
async def get_station_info():
    return StationInfoResponse(
        name=settings.station_name,
        lat=settings.station_lat,
        lon=settings.station_lon,
        zoom=settings.map_zoom,
    )


legacy_router.add_api_route(
    "/historical",
    get_historical_weather,
    methods=["GET"],
    response_model=HistoricalWeatherResponse,
)
