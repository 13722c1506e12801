"""Attach closet data or product photos to recommended outfit items."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from chronowear_app.logging_config import get_logger, log_event
from models.garment import Garment
from models.outfit import OutfitItem
from tools.product_image_lookup import ProductImageLookup

LOGGER = get_logger(__name__)


def _key(value: str | None) -> str:
    return (value or "").strip().lower()


def find_closet_match(item: OutfitItem, inventory: Iterable[Garment]) -> Optional[Garment]:
    """Return the owned garment with the same brand and model, ignoring case."""

    if not item.has_product_identity:
        return None
    brand, model = _key(item.brand), _key(item.model)
    for garment in inventory:
        if _key(garment.brand) == brand and _key(garment.model) == model:
            return garment
    return None


def merge_with_garment(item: OutfitItem, garment: Garment) -> OutfitItem:
    """The owned garment is ground truth for image, color, material and type."""

    return item.evolve(
        type=garment.type or item.type,
        color=garment.color or item.color,
        material=garment.material or item.material,
        image_url=garment.image_url or item.image_url,
        from_closet=True,
        garment_id=garment.garment_id,
    )


async def _lookup_image(item: OutfitItem, lookup: ProductImageLookup | None) -> Optional[str]:
    if lookup is None:
        return None
    try:
        return await lookup.find(item.brand, item.model, item_type=item.type, color=item.color)
    except Exception as exc:
        log_event(
            LOGGER,
            logging.WARNING,
            "product_image_lookup_failed",
            item_type=item.type,
            error=str(exc),
        )
        return None


async def enrich_item(
    item: OutfitItem,
    inventory: Sequence[Garment],
    lookup: ProductImageLookup | None = None,
) -> OutfitItem:
    match = find_closet_match(item, inventory)
    if match is not None:
        return merge_with_garment(item, match)
    if item.has_product_identity:
        image_url = await _lookup_image(item, lookup)
        return item.evolve(image_url=image_url or item.image_url, from_closet=False, garment_id=None)
    return item.evolve(from_closet=False, garment_id=None)


async def enrich_items(
    items: Sequence[OutfitItem],
    inventory: Sequence[Garment],
    lookup: ProductImageLookup | None = None,
) -> List[OutfitItem]:
    """Enrich every item concurrently; the result keeps the input order."""

    enriched = await asyncio.gather(*(enrich_item(item, inventory, lookup) for item in items))
    return list(enriched)


__all__ = ["enrich_item", "enrich_items", "find_closet_match", "merge_with_garment"]
