from __future__ import annotations

from typing import Any


class StationError(RuntimeError):
    """Base error carrying the HTTP status and JSON body fields for the dashboard."""

    status_code: int = 500
    error: str = "An unexpected error occurred"

    def __init__(self, details: str, *, status_code: int | None = None) -> None:
        super().__init__(details)
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error, "details": self.details}


class ConfigurationError(StationError):
    status_code = 500
    error = "Missing configuration"

    def __init__(self, details: str, *, has_device_id: bool = False, has_token: bool = False) -> None:
        super().__init__(details)
        self.has_device_id = has_device_id
        self.has_token = has_token


class NoWeatherDataError(StationError):
    status_code = 404
    error = "No weather data available"

    def __init__(self, errors: list[str]) -> None:
        super().__init__(". ".join(errors))
        self.errors = list(errors)


class NoValidObservationsError(StationError):
    status_code = 404
    error = "No valid weather data available"

    def __init__(self, details: str = "Could not process any observations from the available data") -> None:
        super().__init__(details)


class UpstreamError(StationError):
    error = "Failed to fetch historical data"
