"""End-to-end behaviour of the Today's Pick cache manager with offline collaborators."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import List, Sequence

import pytest

from agents.recommendation_cache import DEFAULT_COORDINATES, RecommendationCacheManager
from chronowear_app.errors import (
    ImageSynthesisError,
    PickNotFoundError,
    RecommenderError,
    WeatherUnavailableError,
)
from models.daily_pick import DailyPick
from models.garment import Garment
from models.outfit import OutfitCandidate, OutfitItem
from models.weather import Coordinates, WeatherReading
from tools.daily_pick_store import InMemoryDailyPickStore
from tools.geolocation import FixedGeolocationSource, GeolocationSource
from tools.image_synthesizer import MockImageSynthesizer
from tools.outfit_recommender import MockOutfitRecommender, OutfitRecommender
from tools.product_image_lookup import MockProductImageLookup
from tools.wardrobe_store import InMemoryWardrobeStore
from tools.weather_provider import MockWeatherProvider

PICK_DATE = date(2024, 6, 1)
TOKYO = (35.6764, 139.6500)


def _closet() -> List[Garment]:
    return [
        Garment(
            garment_id="g-tee",
            user_id="U1",
            type="Top",
            image_url="https://closet.example.com/tee.jpg",
            brand="Uniqlo",
            model="Basic Tee",
            color="Navy",
            material="Supima Cotton",
        ),
        Garment(
            garment_id="g-boots",
            user_id="U1",
            type="Shoes",
            image_url="https://closet.example.com/boots.jpg",
            brand="Dr. Martens",
            model="1460",
            color="Black",
        ),
    ]


def _candidate() -> OutfitCandidate:
    return OutfitCandidate(
        title="City Layers",
        summary="Light layers for a mild day",
        hairstyle_note="Low Bun",
        items=[
            OutfitItem(type="top", name="Tee", brand="UNIQLO", model="basic tee", color="White"),
            OutfitItem(type="shoes", name="Sneakers", brand="Nike", model="Air Force 1", color="White"),
            OutfitItem(type="hairstyle", name="Low Bun", from_closet=True, garment_id="bogus"),
        ],
    )


def _lookup() -> MockProductImageLookup:
    return MockProductImageLookup(
        {
            ("Nike", "Air Force 1"): "https://products.example.com/af1.jpg",
            ("Levi's", "501"): "https://products.example.com/501.jpg",
        }
    )


def _manager(
    store: InMemoryDailyPickStore | None = None,
    weather: MockWeatherProvider | None = None,
    recommender: OutfitRecommender | None = None,
    synthesizer: MockImageSynthesizer | None = None,
    **kwargs,
) -> RecommendationCacheManager:
    return RecommendationCacheManager(
        store=store if store is not None else InMemoryDailyPickStore(),
        weather_provider=weather or MockWeatherProvider(),
        recommender=recommender or MockOutfitRecommender(_candidate()),
        wardrobe=InMemoryWardrobeStore(_closet()),
        image_synthesizer=synthesizer,
        product_lookup=_lookup(),
        **kwargs,
    )


def _stored_pick(latitude: float | None, longitude: float | None, **changes) -> DailyPick:
    pick = DailyPick(
        user_id="U1",
        date=PICK_DATE,
        title="Yesterday's Idea",
        summary="Stored earlier today",
        weather_snapshot=WeatherReading(
            temperature=75.0,
            description="Clear sky",
            uv_index=4.0,
            latitude=latitude,
            longitude=longitude,
        ),
        items=[OutfitItem(type="top", name="Linen Shirt")],
    )
    for key, value in changes.items():
        setattr(pick, key, value)
    return pick


def _get(manager: RecommendationCacheManager, lat: float, lng: float, **kwargs) -> DailyPick:
    return asyncio.run(
        manager.get_todays_pick(
            "U1",
            target_date=PICK_DATE,
            geolocation=FixedGeolocationSource(lat, lng),
            **kwargs,
        )
    )


def test_miss_generates_and_enriches_new_pick() -> None:
    store = InMemoryDailyPickStore()
    weather = MockWeatherProvider()
    manager = _manager(store=store, weather=weather)

    pick = _get(manager, *TOKYO)

    assert weather.calls == [TOKYO]
    assert pick.title == "City Layers"
    assert pick.is_liked is False and pick.was_logged is False and pick.image_url is None
    assert pick.weather_snapshot.latitude == TOKYO[0]

    tee, sneakers, hair = pick.items
    assert tee.from_closet is True
    assert tee.garment_id == "g-tee"
    assert tee.image_url == "https://closet.example.com/tee.jpg"
    assert tee.color == "Navy"
    assert tee.material == "Supima Cotton"
    assert sneakers.from_closet is False
    assert sneakers.garment_id is None
    assert sneakers.image_url == "https://products.example.com/af1.jpg"
    assert hair.from_closet is False
    assert hair.garment_id is None
    assert hair.image_url is None

    assert len(store) == 1
    assert store.get("U1", PICK_DATE).pick_id == pick.pick_id


def test_fresh_record_is_returned_without_regeneration() -> None:
    store = InMemoryDailyPickStore()
    stored = store.upsert(_stored_pick(*TOKYO))
    weather = MockWeatherProvider()
    recommender = MockOutfitRecommender(_candidate())
    manager = _manager(store=store, weather=weather, recommender=recommender)

    pick = _get(manager, 35.6764, 139.7500)

    assert pick.to_dict() == stored.to_dict()
    assert weather.calls == []
    assert recommender.calls == 0


def test_location_drift_replaces_the_stored_pick() -> None:
    store = InMemoryDailyPickStore()
    old = store.upsert(_stored_pick(*TOKYO, is_liked=True, was_logged=True))
    weather = MockWeatherProvider()
    manager = _manager(store=store, weather=weather)

    pick = _get(manager, 35.9000, 139.6500)

    assert weather.calls == [(35.9000, 139.6500)]
    assert len(store) == 1
    current = store.get("U1", PICK_DATE)
    assert current.pick_id == pick.pick_id != old.pick_id
    assert current.title == "City Layers"
    assert current.weather_snapshot.latitude == 35.9000
    assert current.is_liked is False and current.was_logged is False


def test_travelling_user_scenario() -> None:
    store = InMemoryDailyPickStore()
    store.upsert(_stored_pick(35.0, 135.0))
    weather = MockWeatherProvider()
    manager = _manager(store=store, weather=weather)

    pick = _get(manager, 35.0, 135.2)

    assert weather.calls == [(35.0, 135.2)]
    stored = store.get("U1", PICK_DATE)
    assert stored.pick_id == pick.pick_id
    assert (stored.weather_snapshot.latitude, stored.weather_snapshot.longitude) == (35.0, 135.2)


def test_snapshot_without_coordinates_is_regenerated() -> None:
    store = InMemoryDailyPickStore()
    store.upsert(_stored_pick(None, None))
    weather = MockWeatherProvider()
    manager = _manager(store=store, weather=weather)

    pick = _get(manager, *TOKYO)

    assert weather.calls == [TOKYO]
    assert pick.weather_snapshot.has_coordinates
    assert len(store) == 1


def test_force_refresh_regenerates_fresh_record() -> None:
    store = InMemoryDailyPickStore()
    old = store.upsert(_stored_pick(*TOKYO))
    manager = _manager(store=store)

    pick = _get(manager, *TOKYO, force_refresh=True)

    assert pick.pick_id != old.pick_id
    assert len(store) == 1


def test_recommender_failure_falls_back_to_enriched_template() -> None:
    store = InMemoryDailyPickStore()
    manager = _manager(store=store, recommender=MockOutfitRecommender(error=RecommenderError("bad json")))

    pick = _get(manager, *TOKYO)

    assert pick.title == "Casual Chic"
    by_name = {item.name: item for item in pick.items}
    assert [item.type for item in pick.items] == ["hairstyle", "top", "bottom", "shoes", "bag", "accessory"]
    assert by_name["White T-Shirt"].from_closet is True
    assert by_name["White T-Shirt"].garment_id == "g-tee"
    assert by_name["White T-Shirt"].image_url == "https://closet.example.com/tee.jpg"
    assert by_name["Blue Jeans"].from_closet is False
    assert by_name["Blue Jeans"].image_url == "https://products.example.com/501.jpg"
    assert by_name["Natural Waves"].from_closet is False
    assert store.get("U1", PICK_DATE).title == "Casual Chic"


def test_unexpected_recommender_errors_and_empty_outfits_fall_back() -> None:
    crashing = _manager(recommender=MockOutfitRecommender(error=RuntimeError("boom")))
    empty = _manager(recommender=MockOutfitRecommender(OutfitCandidate(title="Nothing", summary="")))

    assert _get(crashing, *TOKYO).title == "Casual Chic"
    assert _get(empty, *TOKYO).title == "Casual Chic"


class _SlowRecommender(OutfitRecommender):
    async def recommend(self, weather: WeatherReading, inventory: Sequence[Garment]) -> OutfitCandidate:
        await asyncio.sleep(5)
        return _candidate()


def test_recommender_timeout_falls_back() -> None:
    manager = _manager(recommender=_SlowRecommender(), recommendation_timeout_seconds=0.01)

    assert _get(manager, *TOKYO).title == "Casual Chic"


def test_weather_failure_is_fatal_and_writes_nothing() -> None:
    store = InMemoryDailyPickStore()
    recommender = MockOutfitRecommender(_candidate())
    manager = _manager(
        store=store,
        weather=MockWeatherProvider(error=WeatherUnavailableError("Failed to fetch weather data")),
        recommender=recommender,
    )

    with pytest.raises(WeatherUnavailableError):
        _get(manager, *TOKYO)

    assert len(store) == 0
    assert recommender.calls == 0


def test_weather_failure_keeps_stale_record_untouched() -> None:
    store = InMemoryDailyPickStore()
    old = store.upsert(_stored_pick(*TOKYO))
    manager = _manager(store=store, weather=MockWeatherProvider(error=RuntimeError("socket closed")))

    with pytest.raises(WeatherUnavailableError):
        _get(manager, 35.9000, 139.6500)

    assert store.get("U1", PICK_DATE).to_dict() == old.to_dict()


class _HangingGeolocation(GeolocationSource):
    async def current(self) -> Coordinates:
        await asyncio.sleep(5)
        return Coordinates(0.0, 0.0)


def test_geolocation_timeout_uses_default_coordinates() -> None:
    weather = MockWeatherProvider()
    manager = _manager(weather=weather, geolocation_timeout_seconds=0.01)

    pick = asyncio.run(
        manager.get_todays_pick("U1", target_date=PICK_DATE, geolocation=_HangingGeolocation())
    )

    assert weather.calls == [(DEFAULT_COORDINATES.latitude, DEFAULT_COORDINATES.longitude)]
    assert pick.weather_snapshot.latitude == DEFAULT_COORDINATES.latitude


def test_unreported_position_uses_default_coordinates() -> None:
    weather = MockWeatherProvider()
    manager = _manager(weather=weather)

    _get(manager, None, None)

    assert weather.calls == [(DEFAULT_COORDINATES.latitude, DEFAULT_COORDINATES.longitude)]


def test_image_is_patched_after_the_pick_is_returned() -> None:
    store = InMemoryDailyPickStore()
    synthesizer = MockImageSynthesizer("https://images.example.com/look.png")
    manager = _manager(store=store, synthesizer=synthesizer)

    async def scenario() -> DailyPick:
        pick = await manager.get_todays_pick(
            "U1", target_date=PICK_DATE, geolocation=FixedGeolocationSource(*TOKYO)
        )
        assert pick.image_url is None
        assert manager.pending_background_tasks == 1
        await manager.drain_background_tasks()
        return pick

    pick = asyncio.run(scenario())

    assert manager.pending_background_tasks == 0
    assert len(synthesizer.calls) == 1
    assert synthesizer.calls[0].items[0].from_closet is True
    assert store.get("U1", PICK_DATE).image_url == "https://images.example.com/look.png"
    assert store.get("U1", PICK_DATE).pick_id == pick.pick_id


def test_image_failure_leaves_image_absent() -> None:
    store = InMemoryDailyPickStore()
    manager = _manager(store=store, synthesizer=MockImageSynthesizer(error=ImageSynthesisError("quota")))

    async def scenario() -> None:
        await manager.get_todays_pick(
            "U1", target_date=PICK_DATE, geolocation=FixedGeolocationSource(*TOKYO)
        )
        await manager.drain_background_tasks()

    asyncio.run(scenario())

    assert store.get("U1", PICK_DATE).image_url is None


def test_concurrent_misses_for_same_key_leave_one_record() -> None:
    store = InMemoryDailyPickStore()
    manager = _manager(store=store)

    async def scenario() -> List[DailyPick]:
        return await asyncio.gather(
            *(
                manager.get_todays_pick(
                    "U1", target_date=PICK_DATE, geolocation=FixedGeolocationSource(*TOKYO)
                )
                for _ in range(2)
            )
        )

    first, second = asyncio.run(scenario())

    assert len(store) == 1
    assert store.get("U1", PICK_DATE).pick_id in {first.pick_id, second.pick_id}


def test_toggle_like_and_mark_logged() -> None:
    store = InMemoryDailyPickStore()
    manager = _manager(store=store)
    _get(manager, *TOKYO)

    assert manager.toggle_like("U1", PICK_DATE).is_liked is True
    assert manager.toggle_like("U1", PICK_DATE).is_liked is False
    assert manager.mark_logged("U1", PICK_DATE).was_logged is True
    assert store.get("U1", PICK_DATE).was_logged is True

    with pytest.raises(PickNotFoundError):
        manager.toggle_like("U1", date(2024, 6, 2))
    with pytest.raises(PickNotFoundError):
        manager.mark_logged("someone-else", PICK_DATE)
