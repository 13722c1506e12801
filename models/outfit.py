"""Outfit item and candidate schemas."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

from models.taxonomy import normalize_item_type


@dataclass
class OutfitItem:
    """One piece of a recommended outfit.

    ``garment_id`` is only meaningful when ``from_closet`` is true, i.e. when the
    item was matched to an owned wardrobe entry.
    """

    type: str
    name: str
    brand: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    description: Optional[str] = None
    from_closet: bool = False
    image_url: Optional[str] = None
    garment_id: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = normalize_item_type(self.type)
        if not self.from_closet:
            self.garment_id = None

    @property
    def has_product_identity(self) -> bool:
        """True when the item names a concrete brand and model."""

        return bool((self.brand or "").strip() and (self.model or "").strip())

    def evolve(self, **changes: Any) -> "OutfitItem":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "OutfitItem":
        return cls(
            type=str(payload.get("type") or "other"),
            name=str(payload.get("name") or ""),
            brand=payload.get("brand"),
            model=payload.get("model"),
            color=payload.get("color"),
            material=payload.get("material"),
            description=payload.get("description"),
            from_closet=bool(payload.get("from_closet", False)),
            image_url=payload.get("image_url"),
            garment_id=payload.get("garment_id"),
        )


@dataclass
class OutfitCandidate:
    """An outfit proposed by the recommender or the fallback template."""

    title: str
    summary: str
    hairstyle_note: str = ""
    items: List[OutfitItem] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)

    def with_items(self, items: List[OutfitItem]) -> "OutfitCandidate":
        return replace(self, items=list(items))


__all__ = ["OutfitItem", "OutfitCandidate"]
