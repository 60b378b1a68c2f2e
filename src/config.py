from dataclasses import dataclass
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from services.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class TempestConfig:
    device_id: str
    token: str
    base_url: str
    timeout: float


ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    # Load the repo-level .env and accept env keys in any case
    model_config = SettingsConfigDict(env_file=str(ENV_FILE), extra="ignore", case_sensitive=False)

    app_name: str = "Tempest Station Hub"
    app_version: str = "0.1.0"
    debug: bool = False
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    port: int = 8000

    # Tempest / WeatherFlow API
    tempest_device_id: str | None = None
    tempest_token: str | None = None
    tempest_base_url: str = Field(
        default="https://swd.weatherflow.com/swd/rest",
        description="Base URL for the WeatherFlow REST API",
    )
    tempest_request_timeout: float = Field(default=10.0, ge=1.0, description="Timeout in seconds for each day request")
    history_days: int = Field(default=5, ge=1, le=5, description="Number of day offsets fetched for the history view")

    # Station display
    station_name: str = Field(default="Weather Station", description="Name shown on the dashboard and map marker")
    station_lat: float = Field(default=34.62946, ge=-90.0, le=90.0)
    station_lon: float = Field(default=-120.07014, ge=-180.0, le=180.0)
    map_zoom: int = Field(default=8, ge=1, le=19, description="Initial zoom level for the radar map")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def normalize_cors(cls, v):
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                import json
                return json.loads(s)
            if s in ("", "*"):
                return ["*"]
            return [p.strip() for p in s.split(",")]
        return v

    @field_validator("tempest_device_id", "tempest_token", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def tempest_configured(self) -> bool:
        return bool(self.tempest_device_id and self.tempest_token)

    def tempest_config(self) -> TempestConfig:
        """Return validated Tempest credentials or raise ConfigurationError."""
        if not self.tempest_configured:
            raise ConfigurationError(
                "Required environment variables TEMPEST_DEVICE_ID and TEMPEST_TOKEN are not set",
                has_device_id=bool(self.tempest_device_id),
                has_token=bool(self.tempest_token),
            )
        return TempestConfig(
            device_id=str(self.tempest_device_id),
            token=str(self.tempest_token),
            base_url=self.tempest_base_url.rstrip("/"),
            timeout=self.tempest_request_timeout,
        )


settings = Settings()
