"""Wardrobe garment data model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from models.taxonomy import normalize_item_type


@dataclass
class Garment:
    """An item the user owns, as registered in their closet."""

    garment_id: str
    user_id: str
    type: str
    image_url: str
    brand: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = normalize_item_type(self.type)
        self.brand = self.brand.strip() if self.brand else None
        self.model = self.model.strip() if self.model else None


def from_raw_metadata(metadata: Dict[str, Any]) -> Garment:
    """Factory to build a :class:`Garment` from loose closet metadata."""

    required_fields = ["garment_id", "user_id", "type", "image_url"]
    missing = [field for field in required_fields if not metadata.get(field)]
    if missing:
        raise ValueError(f"Missing required fields for Garment: {missing}")

    return Garment(
        garment_id=str(metadata["garment_id"]),
        user_id=str(metadata["user_id"]),
        type=str(metadata["type"]),
        image_url=str(metadata["image_url"]),
        brand=metadata.get("brand"),
        model=metadata.get("model"),
        color=metadata.get("color"),
        material=metadata.get("material"),
    )


__all__ = ["Garment", "from_raw_metadata"]
