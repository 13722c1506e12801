"""Domain exceptions raised by ChronoWear collaborators."""

from __future__ import annotations


class ChronoWearError(Exception):
    """Base class for ChronoWear errors."""


class WeatherUnavailableError(ChronoWearError):
    """Raised when current weather cannot be fetched; fatal to a pick request."""


class RecommenderError(ChronoWearError):
    """Raised when the outfit recommender fails or returns malformed output."""


class ImageSynthesisError(ChronoWearError):
    """Raised when outfit image synthesis fails."""


class GeolocationUnavailableError(ChronoWearError):
    """Raised when the caller's position cannot be determined."""


class ProductLookupError(ChronoWearError):
    """Raised when a product image search fails."""


class PickNotFoundError(ChronoWearError, LookupError):
    """Raised when a flag update targets a pick that does not exist."""

    def __init__(self, user_id: str, date: object) -> None:
        super().__init__(f"No daily pick stored for {date}")
        self.user_id = user_id
        self.date = date


__all__ = [
    "ChronoWearError",
    "WeatherUnavailableError",
    "RecommenderError",
    "ImageSynthesisError",
    "GeolocationUnavailableError",
    "ProductLookupError",
    "PickNotFoundError",
]
