"""Sources for the caller's current coordinates."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from chronowear_app.errors import GeolocationUnavailableError
from chronowear_app.logging_config import get_logger, log_event
from models.weather import Coordinates
from tools.http import http_client

LOGGER = get_logger(__name__)

IP_GEOLOCATION_URL = "https://ipapi.co/json/"


class _IPLocation(BaseModel):
    latitude: float
    longitude: float


class GeolocationSource(ABC):
    """Supplies the caller's current position."""

    @abstractmethod
    async def current(self) -> Coordinates:
        """Return coordinates or raise ``GeolocationUnavailableError``."""


class FixedGeolocationSource(GeolocationSource):
    """Coordinates reported by the client, e.g. from the browser geolocation API."""

    def __init__(self, latitude: float | None = None, longitude: float | None = None) -> None:
        self.latitude = latitude
        self.longitude = longitude

    async def current(self) -> Coordinates:
        if self.latitude is None or self.longitude is None:
            raise GeolocationUnavailableError("client did not report a position")
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class IPGeolocationSource(GeolocationSource):
    """Approximate the position from the public IP address."""

    def __init__(
        self,
        ip_address: str | None = None,
        timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.ip_address = ip_address
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def current(self) -> Coordinates:
        url = (
            f"https://ipapi.co/{self.ip_address}/json/" if self.ip_address else IP_GEOLOCATION_URL
        )
        async with http_client(self._client, self.timeout_seconds) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
                parsed = _IPLocation.model_validate(response.json())
            except (httpx.HTTPError, ValidationError, ValueError) as exc:
                raise GeolocationUnavailableError(f"IP geolocation failed: {exc}") from exc
        return Coordinates(latitude=parsed.latitude, longitude=parsed.longitude)


async def resolve_coordinates(
    source: GeolocationSource | None,
    default: Coordinates,
    timeout_seconds: float = 8.0,
) -> Coordinates:
    """Ask ``source`` for a position, falling back to ``default``.

    Never raises: denial, source errors and timeouts all yield the default.
    """

    if source is None:
        return default
    try:
        return await asyncio.wait_for(source.current(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        reason: Optional[str] = "timeout"
    except Exception as exc:
        reason = f"{type(exc).__name__}: {exc}"
    log_event(
        LOGGER,
        logging.WARNING,
        "geolocation_fallback",
        reason=reason,
    )
    return default


__all__ = [
    "GeolocationSource",
    "FixedGeolocationSource",
    "IPGeolocationSource",
    "resolve_coordinates",
]
