"""Canonical labels for outfit item types.

Recommender output and closet entries use loose labels ("Top", "Accessories",
"sneakers"). Helpers here fold them into one vocabulary so items and garments
can be compared and displayed consistently.
"""

from typing import Dict, List


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower().replace(" ", "_").replace("-", "_")


ITEM_TYPES: Dict[str, List[str]] = {
    "top": ["tops", "shirt", "tee", "t_shirt", "blouse", "sweater", "hoodie", "knit"],
    "bottom": ["bottoms", "pants", "jeans", "trousers", "skirt", "shorts", "chinos"],
    "dress": ["dresses", "jumpsuit"],
    "outerwear": ["coat", "jacket", "blazer", "puffer", "trench", "cardigan"],
    "shoes": ["shoe", "footwear", "sneakers", "boots", "loafers", "heels", "sandals"],
    "bag": ["bags", "tote", "backpack", "handbag"],
    "accessory": ["accessories", "watch", "hat", "scarf", "belt", "jewellery", "umbrella", "parasol"],
    "hairstyle": ["hair", "hairstyles"],
}

_ALIASES: Dict[str, str] = {
    alias: canonical for canonical, aliases in ITEM_TYPES.items() for alias in aliases
}


def normalize_item_type(value: str | None) -> str:
    """Map an item type label onto the canonical vocabulary.

    Unknown labels are returned normalised but otherwise untouched so that
    novel recommender categories survive.
    """

    if not value:
        return "other"
    key = _normalize_key(value)
    if key in ITEM_TYPES:
        return key
    return _ALIASES.get(key, key)


__all__ = ["ITEM_TYPES", "normalize_item_type"]
