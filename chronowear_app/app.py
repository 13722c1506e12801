"""ChronoWear service bootstrap."""

from __future__ import annotations

from datetime import date as dt_date
import logging

import google.generativeai as genai

from chronowear_app.config import ChronoWearConfig
from chronowear_app.logging_config import configure_logging, get_logger, log_event, operation_context
from agents.recommendation_cache import RecommendationCacheManager
from models.daily_pick import DailyPick
from models.weather import Coordinates
from tools.daily_pick_store import SQLiteDailyPickStore
from tools.geolocation import FixedGeolocationSource
from tools.image_synthesizer import EdgeFunctionImageSynthesizer
from tools.outfit_recommender import GeminiOutfitRecommender
from tools.product_image_lookup import UnsplashProductImageLookup
from tools.wardrobe_store import SQLiteWardrobeStore
from tools.weather_provider import OpenMeteoWeatherProvider


LOGGER = get_logger(__name__)


class ChronoWearApp:
    """Wires the cache manager to its concrete collaborators."""

    def __init__(self, config: ChronoWearConfig | None = None) -> None:
        self.config = config or ChronoWearConfig.from_env()
        configure_logging()
        if self.config.gemini_api_key:
            genai.configure(api_key=self.config.gemini_api_key)

        self.pick_store = SQLiteDailyPickStore(self.config.picks_db_path)
        self.wardrobe_store = SQLiteWardrobeStore(self.config.wardrobe_db_path)
        self.weather_provider = OpenMeteoWeatherProvider(
            timeout_seconds=self.config.http_timeout_seconds,
            temperature_unit=self.config.temperature_unit,
        )
        self.recommender = GeminiOutfitRecommender(
            api_key=self.config.gemini_api_key,
            model_name=self.config.model,
            timeout_seconds=self.config.http_timeout_seconds,
        )
        self.image_synthesizer = EdgeFunctionImageSynthesizer(
            base_url=self.config.functions_base_url,
            api_key=self.config.functions_api_key,
        )
        self.product_lookup = UnsplashProductImageLookup(
            access_key=self.config.unsplash_access_key,
            timeout_seconds=self.config.http_timeout_seconds,
        )
        self.manager = RecommendationCacheManager(
            store=self.pick_store,
            weather_provider=self.weather_provider,
            recommender=self.recommender,
            wardrobe=self.wardrobe_store,
            image_synthesizer=self.image_synthesizer,
            product_lookup=self.product_lookup,
            default_coordinates=Coordinates(
                latitude=self.config.default_latitude,
                longitude=self.config.default_longitude,
            ),
            geolocation_timeout_seconds=self.config.geolocation_timeout_seconds,
        )

    async def todays_pick(
        self,
        *,
        user_id: str,
        latitude: float | None = None,
        longitude: float | None = None,
        date: dt_date | None = None,
        force_refresh: bool = False,
    ) -> DailyPick:
        """Entry point for callers that report their own position."""

        with operation_context("app:todays_pick") as correlation_id:
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_started",
                agent="app",
                method="todays_pick",
                user_id=user_id,
                force_refresh=force_refresh,
                correlation_id=correlation_id,
            )
            pick = await self.manager.get_todays_pick(
                user_id,
                target_date=date,
                force_refresh=force_refresh,
                geolocation=FixedGeolocationSource(latitude, longitude),
            )
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_completed",
                agent="app",
                method="todays_pick",
                pick_id=pick.pick_id,
                correlation_id=correlation_id,
            )
            return pick

    async def shutdown(self) -> None:
        """Let detached image work finish before the process exits."""

        await self.manager.drain_background_tasks()


__all__ = ["ChronoWearApp"]
