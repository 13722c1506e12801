"""Wardrobe storage and taxonomy tests."""

from __future__ import annotations

from typing import Dict

import pytest

from models import taxonomy
from models.garment import Garment, from_raw_metadata
from tools.wardrobe_store import InMemoryWardrobeStore, SQLiteWardrobeStore


@pytest.fixture()
def sample_metadata() -> Dict[str, object]:
    return {
        "garment_id": "item-1",
        "user_id": "user-123",
        "image_url": "https://example.com/image.jpg",
        "type": "Blazer",
        "brand": " Example ",
        "model": "Relaxed Fit",
        "color": "Navy",
        "material": "Wool",
    }


def test_taxonomy_normalization() -> None:
    assert taxonomy.normalize_item_type("Top") == "top"
    assert taxonomy.normalize_item_type("Sneakers") == "shoes"
    assert taxonomy.normalize_item_type("T-Shirt") == "top"
    assert taxonomy.normalize_item_type("Accessories") == "accessory"
    assert taxonomy.normalize_item_type("Jump Rope") == "jump_rope"
    assert taxonomy.normalize_item_type(None) == "other"


def test_from_raw_metadata_normalizes(sample_metadata: Dict[str, object]) -> None:
    garment = from_raw_metadata(sample_metadata)
    assert garment.type == "outerwear"
    assert garment.brand == "Example"
    assert garment.model == "Relaxed Fit"


def test_from_raw_metadata_requires_identity() -> None:
    with pytest.raises(ValueError):
        from_raw_metadata({"garment_id": "x", "user_id": "u", "type": "top"})


def test_sqlite_store_round_trip(tmp_path, sample_metadata: Dict[str, object]) -> None:
    db_path = tmp_path / "wardrobe.db"
    store = SQLiteWardrobeStore(db_path)

    garment = from_raw_metadata(sample_metadata)
    store.add_garment(garment)
    store.add_garment(Garment(garment_id="item-0", user_id="user-123", type="shoes", image_url="https://e/s.jpg"))
    store.add_garment(Garment(garment_id="item-2", user_id="someone-else", type="top", image_url="https://e/t.jpg"))

    listed = store.list_garments("user-123")
    assert [g.garment_id for g in listed] == ["item-0", "item-1"]
    assert listed[1] == garment

    reopened = SQLiteWardrobeStore(db_path)
    assert len(reopened.list_garments("user-123")) == 2


def test_in_memory_store_scopes_by_user() -> None:
    store = InMemoryWardrobeStore(
        [
            Garment(garment_id="b", user_id="u1", type="top", image_url="https://e/b.jpg"),
            Garment(garment_id="a", user_id="u1", type="bag", image_url="https://e/a.jpg"),
            Garment(garment_id="c", user_id="u2", type="top", image_url="https://e/c.jpg"),
        ]
    )

    assert [g.garment_id for g in store.list_garments("u1")] == ["a", "b"]
    assert store.list_garments("nobody") == []
