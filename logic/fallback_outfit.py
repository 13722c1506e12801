"""Fixed outfit template used when the recommender is unavailable."""

from __future__ import annotations

from models.outfit import OutfitCandidate, OutfitItem


def fallback_outfit() -> OutfitCandidate:
    """Return a new copy of the casual fallback outfit.

    Items are unenriched: closet matching and product images are attached by
    :func:`logic.enrichment.enrich_items` like any recommender output.
    """

    return OutfitCandidate(
        title="Casual Chic",
        summary="Perfect casual outfit for today's weather with complete accessories",
        hairstyle_note="Natural wavy hair",
        items=[
            OutfitItem(
                type="Hairstyle",
                name="Natural Waves",
                description="Soft, natural wavy hairstyle",
            ),
            OutfitItem(
                type="Top",
                name="White T-Shirt",
                brand="Uniqlo",
                model="Basic Tee",
                color="White",
                material="Cotton",
            ),
            OutfitItem(
                type="Bottom",
                name="Blue Jeans",
                brand="Levi's",
                model="501",
                color="Blue",
                material="Denim",
            ),
            OutfitItem(
                type="Shoes",
                name="White Sneakers",
                brand="Adidas",
                model="Stan Smith",
                color="White",
                material="Leather",
            ),
            OutfitItem(
                type="Bag",
                name="Tote Bag",
                brand="Canvas",
                model="Classic",
                color="Beige",
                material="Canvas",
            ),
            OutfitItem(
                type="Accessories",
                name="Watch",
                brand="Casio",
                model="Simple",
                color="Silver",
                material="Metal",
            ),
        ],
    )


__all__ = ["fallback_outfit"]
