"""Weather reading and coordinate models."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class WeatherReading:
    """Current conditions for the coordinates they were fetched for.

    Readings are stored verbatim inside a daily pick and never mutated; a new
    fetch always produces a new reading. ``latitude``/``longitude`` are optional
    because snapshots written by older clients may lack them.
    """

    temperature: float
    description: str
    uv_index: float
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    uv_index_max: Optional[float] = None
    humidity: Optional[float] = None
    weather_code: Optional[int] = None
    location_name: str = "Unknown Location"
    temperature_unit: str = "fahrenheit"

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "WeatherReading":
        known = {key: payload[key] for key in cls.__dataclass_fields__ if key in payload}
        known.setdefault("temperature", 0.0)
        known.setdefault("description", "Unknown")
        known.setdefault("uv_index", 0.0)
        return cls(**known)


__all__ = ["Coordinates", "WeatherReading"]
