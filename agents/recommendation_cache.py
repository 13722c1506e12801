"""Today's Pick cache manager.

Decides whether the stored daily pick for a user can be served again or must be
regenerated, and drives regeneration through the weather, wardrobe,
recommender, enrichment and image collaborators.

The manager keeps no pick state between calls; every call re-reads the store.
Two concurrent regenerations for the same ``(user_id, date)`` are not
serialised: both write, and the store's upsert keeps the last one.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Optional, Set

from chronowear_app.config import DEFAULT_LATITUDE, DEFAULT_LONGITUDE
from chronowear_app.errors import PickNotFoundError, WeatherUnavailableError
from chronowear_app.logging_config import get_logger, log_event, operation_context
from logic.enrichment import enrich_items
from logic.fallback_outfit import fallback_outfit
from logic.staleness import CacheDecision, StalenessResult, evaluate_staleness
from models.daily_pick import DailyPick
from models.garment import Garment
from models.outfit import OutfitCandidate
from models.weather import Coordinates, WeatherReading
from tools.daily_pick_store import DailyPickStore
from tools.geolocation import GeolocationSource, resolve_coordinates
from tools.image_synthesizer import ImageSynthesizer
from tools.outfit_recommender import OutfitRecommender
from tools.product_image_lookup import ProductImageLookup
from tools.wardrobe_store import WardrobeStore
from tools.weather_provider import WeatherProvider

LOGGER = get_logger(__name__)

DEFAULT_COORDINATES = Coordinates(latitude=DEFAULT_LATITUDE, longitude=DEFAULT_LONGITUDE)


def today_utc() -> date:
    """Calendar date used as the cache key when the caller does not pass one."""

    return datetime.now(timezone.utc).date()


class RecommendationCacheManager:
    """Serves or regenerates the daily outfit pick."""

    def __init__(
        self,
        store: DailyPickStore,
        weather_provider: WeatherProvider,
        recommender: OutfitRecommender,
        wardrobe: WardrobeStore,
        image_synthesizer: ImageSynthesizer | None = None,
        product_lookup: ProductImageLookup | None = None,
        default_coordinates: Coordinates = DEFAULT_COORDINATES,
        geolocation_timeout_seconds: float = 8.0,
        recommendation_timeout_seconds: float | None = 60.0,
    ) -> None:
        self.store = store
        self.weather_provider = weather_provider
        self.recommender = recommender
        self.wardrobe = wardrobe
        self.image_synthesizer = image_synthesizer
        self.product_lookup = product_lookup
        self.default_coordinates = default_coordinates
        self.geolocation_timeout_seconds = geolocation_timeout_seconds
        self.recommendation_timeout_seconds = recommendation_timeout_seconds
        # Strong references so detached image tasks are not garbage collected.
        self._background_tasks: Set[asyncio.Task] = set()

    async def get_todays_pick(
        self,
        user_id: str,
        *,
        target_date: date | None = None,
        force_refresh: bool = False,
        geolocation: GeolocationSource | None = None,
    ) -> DailyPick:
        """Return the pick for ``target_date`` (UTC today by default).

        Raises:
            WeatherUnavailableError: when regeneration is needed and weather
                cannot be fetched. Nothing is written in that case.
        """

        pick_date = target_date or today_utc()
        with operation_context("agent:recommendation_cache.get_todays_pick") as correlation_id:
            coordinates = await resolve_coordinates(
                geolocation, self.default_coordinates, self.geolocation_timeout_seconds
            )
            existing = self.store.get(user_id, pick_date)
            result = evaluate_staleness(
                existing, coordinates.latitude, coordinates.longitude, force_refresh
            )
            log_event(
                LOGGER,
                logging.INFO,
                "cache_decision",
                agent="recommendation_cache",
                user_id=user_id,
                date=pick_date.isoformat(),
                decision=result.decision.value,
                reason=result.reason,
                distance_km=round(result.distance_km, 2) if result.distance_km is not None else None,
                correlation_id=correlation_id,
            )

            if not result.needs_regeneration:
                return existing

            return await self._regenerate(user_id, pick_date, coordinates, result)

    async def _regenerate(
        self,
        user_id: str,
        pick_date: date,
        coordinates: Coordinates,
        result: StalenessResult,
    ) -> DailyPick:
        weather = await self._fetch_weather(coordinates)
        inventory = self.wardrobe.list_garments(user_id)
        candidate = await self._recommend(weather, inventory)
        items = await enrich_items(candidate.items, inventory, self.product_lookup)
        candidate = candidate.with_items(items)

        pick = DailyPick.from_candidate(user_id, pick_date, candidate, weather)
        if result.decision is CacheDecision.MISS:
            saved = self.store.upsert(pick)
        else:
            saved = self.store.replace(pick)

        log_event(
            LOGGER,
            logging.INFO,
            "pick_regenerated",
            agent="recommendation_cache",
            user_id=user_id,
            date=pick_date.isoformat(),
            decision=result.decision.value,
            pick_id=saved.pick_id,
            item_count=len(saved.items),
            closet_items=sum(1 for item in saved.items if item.from_closet),
        )
        self._schedule_image(saved.pick_id, candidate, weather)
        return saved

    async def _fetch_weather(self, coordinates: Coordinates) -> WeatherReading:
        try:
            return await self.weather_provider.fetch(coordinates.latitude, coordinates.longitude)
        except WeatherUnavailableError:
            raise
        except Exception as exc:
            raise WeatherUnavailableError(f"Weather provider failed: {exc}") from exc

    async def _recommend(self, weather: WeatherReading, inventory: list[Garment]) -> OutfitCandidate:
        """Ask the recommender; any failure yields the fallback outfit."""

        try:
            candidate = await asyncio.wait_for(
                self.recommender.recommend(weather, inventory),
                timeout=self.recommendation_timeout_seconds,
            )
            if not candidate.items:
                raise ValueError("recommender returned an outfit without items")
            return candidate
        except Exception as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "recommender_fallback",
                agent="recommendation_cache",
                error=f"{type(exc).__name__}: {exc}",
            )
            return fallback_outfit()

    def _schedule_image(
        self, pick_id: str, candidate: OutfitCandidate, weather: WeatherReading
    ) -> None:
        if self.image_synthesizer is None:
            return
        task = asyncio.create_task(self._synthesize_and_patch(pick_id, candidate, weather))
        self._background_tasks.add(task)
        task.add_done_callback(self._on_image_task_done)

    async def _synthesize_and_patch(
        self, pick_id: str, candidate: OutfitCandidate, weather: WeatherReading
    ) -> Optional[str]:
        try:
            image_url = await self.image_synthesizer.synthesize(candidate, weather)
        except Exception as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "image_synthesis_failed",
                agent="recommendation_cache",
                pick_id=pick_id,
                error=f"{type(exc).__name__}: {exc}",
            )
            return None
        if not image_url:
            return None

        patched = self.store.update_image(pick_id, image_url)
        log_event(
            LOGGER,
            logging.INFO,
            "pick_image_patched" if patched else "pick_image_orphaned",
            agent="recommendation_cache",
            pick_id=pick_id,
        )
        return image_url

    def _on_image_task_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_event(
                LOGGER,
                logging.ERROR,
                "image_task_failed",
                agent="recommendation_cache",
                error=f"{type(exc).__name__}: {exc}",
            )

    @property
    def pending_background_tasks(self) -> int:
        return len(self._background_tasks)

    async def drain_background_tasks(self) -> None:
        """Wait for detached image tasks, e.g. on shutdown or in tests."""

        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    def toggle_like(self, user_id: str, target_date: date | None = None) -> DailyPick:
        pick_date = target_date or today_utc()
        existing = self.store.get(user_id, pick_date)
        if existing is None:
            raise PickNotFoundError(user_id, pick_date)
        updated = self.store.set_liked(user_id, pick_date, not existing.is_liked)
        if updated is None:
            raise PickNotFoundError(user_id, pick_date)
        return updated

    def mark_logged(self, user_id: str, target_date: date | None = None) -> DailyPick:
        """Flag the pick as logged to the outfit-of-the-day diary."""

        pick_date = target_date or today_utc()
        updated = self.store.set_logged(user_id, pick_date, True)
        if updated is None:
            raise PickNotFoundError(user_id, pick_date)
        return updated


__all__ = ["DEFAULT_COORDINATES", "RecommendationCacheManager", "today_utc"]
