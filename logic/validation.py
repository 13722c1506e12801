"""Pydantic schemas for validating recommender output."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from chronowear_app.errors import RecommenderError
from models.outfit import OutfitCandidate, OutfitItem

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")


class RecommendedItem(BaseModel):
    """One item as returned by the recommender."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())

    type: str = Field(min_length=1)
    name: str = Field(min_length=1)
    brand: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    description: Optional[str] = None
    from_closet: bool = Field(default=False, alias="fromCloset")
    garment_id: Optional[str] = Field(default=None, alias="garmentId")

    def to_item(self) -> OutfitItem:
        return OutfitItem(
            type=self.type,
            name=self.name,
            brand=self.brand,
            model=self.model,
            color=self.color,
            material=self.material,
            description=self.description,
            from_closet=self.from_closet,
            garment_id=self.garment_id,
        )


class RecommendedOutfit(BaseModel):
    """A complete outfit suggestion."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1)
    summary: str = ""
    hairstyle: str = ""
    items: List[RecommendedItem] = Field(min_length=1)
    tips: List[str] = []

    @field_validator("hairstyle", mode="before")
    @classmethod
    def _flatten_hairstyle(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, dict):
            name = str(value.get("name") or "").strip()
            description = str(value.get("description") or "").strip()
            if name and description:
                return f"{name}: {description}"
            return name or description
        return str(value)

    def to_candidate(self) -> OutfitCandidate:
        return OutfitCandidate(
            title=self.title,
            summary=self.summary,
            hairstyle_note=self.hairstyle,
            items=[item.to_item() for item in self.items],
            tips=list(self.tips),
        )


class RecommendationPayload(BaseModel):
    """Top-level recommender response."""

    outfits: List[RecommendedOutfit] = Field(min_length=1)


def strip_code_fences(text: str) -> str:
    """Return the JSON body of a response that may be wrapped in markdown fences."""

    match = _FENCED_JSON.search(text) or _FENCED_ANY.search(text)
    return match.group(1) if match else text.strip()


def parse_recommendation(text: str | None) -> OutfitCandidate:
    """Parse raw recommender text into the first outfit candidate.

    Raises:
        RecommenderError: for empty, non-JSON or schema-violating output.
    """

    if not text or not text.strip():
        raise RecommenderError("No content in recommender response")
    try:
        payload: Dict[str, Any] = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise RecommenderError("Invalid recommender response format") from exc
    try:
        parsed = RecommendationPayload.model_validate(payload)
    except ValidationError as exc:
        raise RecommenderError(f"Recommender response failed schema checks: {exc.error_count()} errors") from exc
    return parsed.outfits[0].to_candidate()


__all__ = [
    "RecommendedItem",
    "RecommendedOutfit",
    "RecommendationPayload",
    "parse_recommendation",
    "strip_code_fences",
]
