"""Outfit image synthesis through the hosted image-generation function."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chronowear_app.errors import ImageSynthesisError
from models.outfit import OutfitCandidate
from models.weather import WeatherReading
from tools.http import http_client
from tools.observability import instrument_call

logger = logging.getLogger(__name__)


class _SynthesisResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    image_url: Optional[str] = Field(default=None, alias="imageUrl")


def build_request_body(candidate: OutfitCandidate, weather: WeatherReading | None) -> Dict[str, Any]:
    items: List[Dict[str, Any]] = [
        {
            "type": item.type,
            "name": item.name,
            "brand": item.brand,
            "model": item.model,
            "color": item.color,
            "imageUrl": item.image_url,
        }
        for item in candidate.items
    ]
    body: Dict[str, Any] = {"items": items, "hairstyle": candidate.hairstyle_note}
    if weather is not None:
        body["weather"] = {
            "temperature": weather.temperature,
            "weatherDescription": weather.description,
            "uvIndex": weather.uv_index,
        }
    return body


class ImageSynthesizer(ABC):
    """Produces a representative image for an outfit."""

    @abstractmethod
    async def synthesize(
        self, candidate: OutfitCandidate, weather: WeatherReading | None = None
    ) -> Optional[str]:
        """Return an image URL, ``None`` if the service produced no image.

        Raises:
            ImageSynthesisError: when the service call fails.
        """


class EdgeFunctionImageSynthesizer(ImageSynthesizer):
    """POST the outfit to the ``generate-outfit-image`` function."""

    function_name = "generate-outfit-image"

    def __init__(
        self,
        base_url: str | None,
        api_key: str | None = None,
        timeout_seconds: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._client = client

    @instrument_call("image.synthesize")
    async def synthesize(
        self, candidate: OutfitCandidate, weather: WeatherReading | None = None
    ) -> Optional[str]:
        if not self.base_url:
            raise ImageSynthesisError("functions_base_url is not configured")

        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        url = f"{self.base_url}/{self.function_name}"
        async with http_client(self._client, self.timeout_seconds) as client:
            try:
                response = await client.post(
                    url, json=build_request_body(candidate, weather), headers=headers
                )
                response.raise_for_status()
                parsed = _SynthesisResponse.model_validate(response.json())
            except httpx.HTTPError as exc:
                raise ImageSynthesisError(f"Image generation failed: {exc}") from exc
            except (ValidationError, ValueError) as exc:
                raise ImageSynthesisError("Image generation returned an unexpected payload") from exc

        if not parsed.image_url:
            logger.info("Image service returned no image")
        return parsed.image_url or None


class MockImageSynthesizer(ImageSynthesizer):
    """Offline synthesizer returning a fixed URL or raising ``error``."""

    def __init__(self, image_url: str | None = "https://images.example.com/outfit.png", error: Exception | None = None) -> None:
        self.image_url = image_url
        self.error = error
        self.calls: List[OutfitCandidate] = []

    async def synthesize(
        self, candidate: OutfitCandidate, weather: WeatherReading | None = None
    ) -> Optional[str]:
        self.calls.append(candidate)
        if self.error is not None:
            raise self.error
        return self.image_url


__all__ = [
    "ImageSynthesizer",
    "EdgeFunctionImageSynthesizer",
    "MockImageSynthesizer",
    "build_request_body",
]
