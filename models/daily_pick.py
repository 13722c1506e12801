"""Today's Pick record model."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from models.outfit import OutfitCandidate, OutfitItem
from models.weather import WeatherReading


@dataclass
class DailyPick:
    """The cached outfit recommendation for one user on one calendar day.

    ``(user_id, date)`` is the record's identity; ``pick_id`` is a surrogate id
    used for patches and references from elsewhere.
    """

    user_id: str
    date: date
    title: str
    summary: str
    weather_snapshot: WeatherReading
    hairstyle_note: str = ""
    items: List[OutfitItem] = field(default_factory=list)
    image_url: Optional[str] = None
    is_liked: bool = False
    was_logged: bool = False
    pick_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    @classmethod
    def from_candidate(
        cls,
        user_id: str,
        target_date: date,
        candidate: OutfitCandidate,
        weather: WeatherReading,
    ) -> "DailyPick":
        """Create a fresh pick: not liked, not logged, no image yet."""

        return cls(
            user_id=user_id,
            date=target_date,
            title=candidate.title,
            summary=candidate.summary,
            hairstyle_note=candidate.hairstyle_note,
            items=list(candidate.items),
            weather_snapshot=weather,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pick_id": self.pick_id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "title": self.title,
            "summary": self.summary,
            "hairstyle_note": self.hairstyle_note,
            "items": [item.to_dict() for item in self.items],
            "weather_snapshot": self.weather_snapshot.to_dict(),
            "image_url": self.image_url,
            "is_liked": self.is_liked,
            "was_logged": self.was_logged,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def hero_image_url(pick: DailyPick) -> Optional[str]:
    """Image to show for a pick: its synthesized image, else the first item image."""

    if pick.image_url:
        return pick.image_url
    return next((item.image_url for item in pick.items if item.image_url), None)


__all__ = ["DailyPick", "hero_image_url"]
