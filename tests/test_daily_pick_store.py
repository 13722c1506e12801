"""SQLite and in-memory daily pick stores."""

from __future__ import annotations

from datetime import date

import pytest

from models.daily_pick import DailyPick, hero_image_url
from models.outfit import OutfitItem
from models.weather import WeatherReading
from tools.daily_pick_store import InMemoryDailyPickStore, SQLiteDailyPickStore

PICK_DATE = date(2024, 6, 1)


def _pick(title: str = "Morning Layers", latitude: float | None = 35.0, **changes) -> DailyPick:
    pick = DailyPick(
        user_id="U1",
        date=PICK_DATE,
        title=title,
        summary="A light jacket over a tee",
        hairstyle_note="Low Bun",
        weather_snapshot=WeatherReading(
            temperature=64.0,
            description="Partly cloudy",
            uv_index=4.0,
            latitude=latitude,
            longitude=135.0 if latitude is not None else None,
            location_name="Kyoto, JP",
        ),
        items=[
            OutfitItem(type="top", name="Tee", brand="Uniqlo", model="U Crew", from_closet=True, garment_id="g-1", image_url="https://c/1.jpg"),
            OutfitItem(type="hairstyle", name="Low Bun"),
        ],
    )
    for key, value in changes.items():
        setattr(pick, key, value)
    return pick


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteDailyPickStore(tmp_path / "nested" / "daily_picks.db")
    return InMemoryDailyPickStore()


def test_upsert_then_get_round_trips(store) -> None:
    saved = store.upsert(_pick())

    fetched = store.get("U1", PICK_DATE)
    assert fetched.to_dict() == saved.to_dict()
    assert fetched.items[0].garment_id == "g-1"
    assert fetched.weather_snapshot.location_name == "Kyoto, JP"
    assert store.get("U1", date(2024, 6, 2)) is None
    assert store.get("U2", PICK_DATE) is None


def test_upsert_same_key_keeps_a_single_record(store) -> None:
    first = store.upsert(_pick("First"))
    second = store.upsert(_pick("Second"))

    fetched = store.get("U1", PICK_DATE)
    assert fetched.title == "Second"
    assert fetched.pick_id == second.pick_id != first.pick_id


def test_replace_swaps_record_and_resets_flags(store) -> None:
    old = store.upsert(_pick("Old", is_liked=True, was_logged=True, image_url="https://img/old.png"))
    new = store.replace(_pick("New", latitude=36.0))

    fetched = store.get("U1", PICK_DATE)
    assert fetched.pick_id == new.pick_id != old.pick_id
    assert fetched.title == "New"
    assert fetched.is_liked is False and fetched.was_logged is False
    assert fetched.image_url is None
    assert fetched.weather_snapshot.latitude == 36.0


def test_snapshot_without_coordinates_survives_storage(store) -> None:
    store.upsert(_pick(latitude=None))
    assert store.get("U1", PICK_DATE).weather_snapshot.has_coordinates is False


def test_update_image_targets_pick_id(store) -> None:
    old = store.upsert(_pick("Old"))
    store.replace(_pick("New"))

    assert store.update_image(old.pick_id, "https://img/late.png") is False
    current = store.get("U1", PICK_DATE)
    assert store.update_image(current.pick_id, "https://img/new.png") is True
    assert store.get("U1", PICK_DATE).image_url == "https://img/new.png"


def test_flags_update_existing_pick_only(store) -> None:
    store.upsert(_pick())

    assert store.set_liked("U1", PICK_DATE, True).is_liked is True
    assert store.set_logged("U1", PICK_DATE, True).was_logged is True
    assert store.set_liked("U1", date(2024, 6, 3), True) is None


def test_delete_removes_record(store) -> None:
    store.upsert(_pick())
    store.delete("U1", PICK_DATE)
    assert store.get("U1", PICK_DATE) is None


def test_sqlite_store_persists_across_instances(tmp_path) -> None:
    path = tmp_path / "daily_picks.db"
    saved = SQLiteDailyPickStore(path).upsert(_pick())

    assert SQLiteDailyPickStore(path).get("U1", PICK_DATE).pick_id == saved.pick_id


def test_hero_image_prefers_synthesized_image() -> None:
    assert hero_image_url(_pick(image_url="https://img/hero.png")) == "https://img/hero.png"
    assert hero_image_url(_pick()) == "https://c/1.jpg"
    assert hero_image_url(_pick(items=[OutfitItem(type="top", name="Tee")])) is None
