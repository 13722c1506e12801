"""Weather provider abstractions and implementations."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from chronowear_app.errors import WeatherUnavailableError
from models.weather import WeatherReading
from tools.http import http_client
from tools.observability import instrument_call


LOGGER = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
REVERSE_GEOCODE_URL = "https://api.bigdatacloud.net/data/reverse-geocode-client"

WEATHER_CODES: Dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Foggy",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


class _Current(BaseModel):
    temperature_2m: float
    relative_humidity_2m: Optional[float] = None
    weather_code: int = 0
    uv_index: Optional[float] = None


class _Daily(BaseModel):
    temperature_2m_max: List[Optional[float]] = []
    temperature_2m_min: List[Optional[float]] = []
    uv_index_max: List[Optional[float]] = []


class _ForecastResponse(BaseModel):
    current: _Current
    daily: _Daily = Field(default_factory=_Daily)


class _ReverseGeocode(BaseModel):
    city: Optional[str] = None
    locality: Optional[str] = None
    principalSubdivision: Optional[str] = None
    countryCode: Optional[str] = None
    countryName: Optional[str] = None


def describe_weather_code(code: int) -> str:
    return WEATHER_CODES.get(code, "Unknown")


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def _first(values: List[Optional[float]]) -> Optional[float]:
    return values[0] if values else None


def format_location_name(payload: _ReverseGeocode) -> str:
    city = payload.city or payload.locality or payload.principalSubdivision
    if city and payload.countryCode:
        return f"{city}, {payload.countryCode}"
    if city:
        return city
    if payload.countryName:
        return payload.countryName
    return "Unknown Location"


class WeatherProvider(ABC):
    """Abstract weather provider interface."""

    @abstractmethod
    async def fetch(self, latitude: float, longitude: float) -> WeatherReading:
        """Return current conditions; raise ``WeatherUnavailableError`` on failure."""


class OpenMeteoWeatherProvider(WeatherProvider):
    """Open-Meteo provider with schema validation and best-effort place names."""

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        temperature_unit: str = "fahrenheit",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.temperature_unit = temperature_unit
        self._client = client

    async def _location_name(self, client: httpx.AsyncClient, latitude: float, longitude: float) -> str:
        params = {"latitude": latitude, "longitude": longitude, "localityLanguage": "en"}
        try:
            response = await client.get(REVERSE_GEOCODE_URL, params=params)
            response.raise_for_status()
            return format_location_name(_ReverseGeocode.model_validate(response.json()))
        except (httpx.HTTPError, ValidationError, ValueError) as exc:
            LOGGER.warning("Reverse geocoding failed", extra={"error": str(exc)})
            return "Unknown Location"

    @instrument_call("weather.fetch")
    async def fetch(self, latitude: float, longitude: float) -> WeatherReading:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": "temperature_2m,relative_humidity_2m,weather_code,uv_index",
            "daily": "temperature_2m_max,temperature_2m_min,uv_index_max",
            "temperature_unit": self.temperature_unit,
            "timezone": "auto",
        }

        async with http_client(self._client, self.timeout_seconds) as client:
            try:
                response = await client.get(OPEN_METEO_URL, params=params)
                response.raise_for_status()
                parsed = _ForecastResponse.model_validate(response.json())
            except httpx.HTTPError as exc:
                LOGGER.error("Weather API unreachable", exc_info=exc)
                raise WeatherUnavailableError("Failed to fetch weather data") from exc
            except (ValidationError, ValueError) as exc:
                LOGGER.error("Weather payload schema validation failed", exc_info=exc)
                raise WeatherUnavailableError("Weather payload was malformed") from exc

            location_name = await self._location_name(client, latitude, longitude)

        current = parsed.current
        temp_max = _first(parsed.daily.temperature_2m_max)
        temp_min = _first(parsed.daily.temperature_2m_min)
        return WeatherReading(
            latitude=latitude,
            longitude=longitude,
            temperature=_round_half_up(current.temperature_2m),
            description=describe_weather_code(current.weather_code),
            uv_index=current.uv_index or 0.0,
            temp_min=_round_half_up(temp_min) if temp_min is not None else None,
            temp_max=_round_half_up(temp_max) if temp_max is not None else None,
            uv_index_max=_first(parsed.daily.uv_index_max) or 0.0,
            humidity=current.relative_humidity_2m,
            weather_code=current.weather_code,
            location_name=location_name,
            temperature_unit=self.temperature_unit,
        )


class MockWeatherProvider(WeatherProvider):
    """Offline deterministic weather provider for tests.

    The returned reading is stamped with the requested coordinates, the same
    way a live provider reports what it was computed for.
    """

    def __init__(self, reading: WeatherReading | None = None, error: Exception | None = None) -> None:
        self.reading = reading or WeatherReading(
            temperature=68.0,
            description="Clear sky",
            uv_index=3.0,
            temp_min=60.0,
            temp_max=74.0,
            location_name="Test City",
        )
        self.error = error
        self.calls: List[tuple] = []

    async def fetch(self, latitude: float, longitude: float) -> WeatherReading:
        self.calls.append((latitude, longitude))
        LOGGER.info("Returning mock weather reading")
        if self.error is not None:
            raise self.error
        return replace(self.reading, latitude=latitude, longitude=longitude)


__all__ = [
    "WEATHER_CODES",
    "WeatherProvider",
    "OpenMeteoWeatherProvider",
    "MockWeatherProvider",
    "describe_weather_code",
    "format_location_name",
]
