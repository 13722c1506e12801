"""Outfit recommender abstractions and the Gemini-backed implementation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Sequence

import google.generativeai as genai

from chronowear_app.config import DEFAULT_GEMINI_MODEL
from chronowear_app.errors import RecommenderError
from logic.validation import parse_recommendation
from models.garment import Garment
from models.outfit import OutfitCandidate
from models.weather import WeatherReading
from tools.observability import instrument_call

LOGGER = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a professional fashion stylist and wardrobe consultant. Recommend "
    "practical, stylish outfits that keep the user comfortable in the given "
    "temperature, protected from rain, wind and UV, and appropriate for the season."
)

_RAIN_WORDS = ("rain", "drizzle", "shower")


def uv_band(uv_index: float) -> str:
    if uv_index < 3:
        return "Low"
    if uv_index < 6:
        return "Moderate"
    if uv_index < 8:
        return "High"
    return "Very High"


def umbrella_requirement(weather: WeatherReading) -> str:
    """Rain calls for an umbrella; otherwise a UV index of 6+ calls for a parasol."""

    description = weather.description.lower()
    if any(word in description for word in _RAIN_WORDS):
        return (
            "IMPORTANT WEATHER REQUIREMENT: It is raining today. Every outfit MUST "
            "include a rain umbrella as an accessory."
        )
    if weather.uv_index >= 6:
        return (
            "IMPORTANT UV PROTECTION REQUIREMENT: UV index is high today. Every outfit "
            "MUST include a sun umbrella or parasol as an accessory."
        )
    return ""


def format_inventory(inventory: Sequence[Garment]) -> str:
    if not inventory:
        return "User has no garments in their closet yet."
    lines = [
        f"- ID: {g.garment_id}, Type: {g.type}, Brand: {g.brand or 'Unknown'}, "
        f"Model: {g.model or 'Unknown'}, Color: {g.color or 'Unknown'}"
        + (f", Material: {g.material}" if g.material else "")
        for g in inventory
    ]
    return "Available garments in closet:\n" + "\n".join(lines)


def build_prompt(weather: WeatherReading, inventory: Sequence[Garment]) -> str:
    unit = "F" if weather.temperature_unit == "fahrenheit" else "C"
    closet_rule = (
        "Use items from the closet when possible. Set \"fromCloset\" to true ONLY for "
        "items that match a closet garment by brand AND model, and include its "
        "\"garmentId\"."
        if inventory
        else "All items should have \"fromCloset\" set to false."
    )
    sections: List[str] = [
        "Recommend 3-5 complete outfit combinations for today's weather:",
        f"- Temperature: {weather.temperature:.0f}°{unit}",
        f"- Weather: {weather.description}",
        f"- UV Index: {weather.uv_index:g} ({uv_band(weather.uv_index)})",
        "",
        format_inventory(inventory),
        "",
        closet_rule,
        "Every item MUST name a real brand and a specific, searchable model.",
    ]
    requirement = umbrella_requirement(weather)
    if requirement:
        sections.append(requirement)
    sections.append(
        "Respond with JSON only: {\"outfits\": [{\"title\": str, \"summary\": str, "
        "\"hairstyle\": {\"name\": str, \"description\": str}, \"items\": [{\"type\": str, "
        "\"name\": str, \"brand\": str, \"model\": str, \"color\": str, \"material\": str, "
        "\"description\": str, \"fromCloset\": bool, \"garmentId\": str}], \"tips\": [str]}]}. "
        "Each outfit has 4-6 items."
    )
    return "\n".join(sections)


class OutfitRecommender(ABC):
    """Produces an outfit candidate for the weather and wardrobe."""

    @abstractmethod
    async def recommend(
        self, weather: WeatherReading, inventory: Sequence[Garment]
    ) -> OutfitCandidate:
        """Return a candidate or raise ``RecommenderError``."""


class GeminiOutfitRecommender(OutfitRecommender):
    """Ask a Gemini model for JSON outfit suggestions and keep the first one."""

    def __init__(
        self,
        api_key: str | None,
        model_name: str = DEFAULT_GEMINI_MODEL,
        timeout_seconds: float = 30.0,
        model: Any | None = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self._model = model

    def _get_model(self) -> Any:
        if self._model is None:
            self._model = genai.GenerativeModel(
                self.model_name, system_instruction=SYSTEM_INSTRUCTION
            )
        return self._model

    @instrument_call("recommender.recommend")
    async def recommend(
        self, weather: WeatherReading, inventory: Sequence[Garment]
    ) -> OutfitCandidate:
        if not self.api_key and self._model is None:
            raise RecommenderError("GEMINI_API_KEY is not configured")

        prompt = build_prompt(weather, inventory)
        try:
            response = await self._get_model().generate_content_async(
                prompt,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    temperature=0.7,
                    max_output_tokens=4000,
                ),
                request_options={"timeout": self.timeout_seconds},
            )
            text = response.text
        except Exception as exc:
            LOGGER.error("Gemini request failed", exc_info=exc)
            raise RecommenderError(f"Recommender request failed: {exc}") from exc

        return parse_recommendation(text)


class MockOutfitRecommender(OutfitRecommender):
    """Offline recommender returning a fixed candidate or raising ``error``."""

    def __init__(self, candidate: OutfitCandidate | None = None, error: Exception | None = None) -> None:
        self.candidate = candidate
        self.error = error
        self.calls = 0

    async def recommend(
        self, weather: WeatherReading, inventory: Sequence[Garment]
    ) -> OutfitCandidate:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.candidate is None:
            raise RecommenderError("no candidate configured")
        return self.candidate


__all__ = [
    "OutfitRecommender",
    "GeminiOutfitRecommender",
    "MockOutfitRecommender",
    "build_prompt",
    "umbrella_requirement",
    "uv_band",
]
