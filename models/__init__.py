"""Model package exports."""

from models.daily_pick import DailyPick, hero_image_url
from models.garment import Garment, from_raw_metadata
from models.outfit import OutfitCandidate, OutfitItem
from models.taxonomy import normalize_item_type
from models.weather import Coordinates, WeatherReading

__all__ = [
    "Coordinates",
    "DailyPick",
    "Garment",
    "OutfitCandidate",
    "OutfitItem",
    "WeatherReading",
    "from_raw_metadata",
    "hero_image_url",
    "normalize_item_type",
]
