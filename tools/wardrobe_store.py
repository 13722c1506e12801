"""Wardrobe storage abstractions and SQLite implementation."""
from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Dict, List

from models.garment import Garment


class WardrobeStore:
    """Persistence interface for the garments a user owns."""

    def add_garment(self, garment: Garment) -> Garment:
        raise NotImplementedError

    def list_garments(self, user_id: str) -> List[Garment]:
        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store for wardrobe garments."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS garments (
                    user_id TEXT NOT NULL,
                    garment_id TEXT NOT NULL,
                    type TEXT NOT NULL,
                    image_url TEXT NOT NULL,
                    brand TEXT,
                    model TEXT,
                    color TEXT,
                    material TEXT,
                    PRIMARY KEY (user_id, garment_id)
                );
                """
            )

    def add_garment(self, garment: Garment) -> Garment:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO garments (
                    user_id, garment_id, type, image_url, brand, model, color, material
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    garment.user_id,
                    garment.garment_id,
                    garment.type,
                    garment.image_url,
                    garment.brand,
                    garment.model,
                    garment.color,
                    garment.material,
                ),
            )
        return garment

    @staticmethod
    def _row_to_garment(row: sqlite3.Row) -> Garment:
        return Garment(
            garment_id=row["garment_id"],
            user_id=row["user_id"],
            type=row["type"],
            image_url=row["image_url"],
            brand=row["brand"],
            model=row["model"],
            color=row["color"],
            material=row["material"],
        )

    def list_garments(self, user_id: str) -> List[Garment]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM garments WHERE user_id = ? ORDER BY garment_id",
                (user_id,),
            )
            return [self._row_to_garment(row) for row in cursor.fetchall()]


class InMemoryWardrobeStore(WardrobeStore):
    """Dictionary-backed wardrobe for tests."""

    def __init__(self, garments: List[Garment] | None = None) -> None:
        self._garments: Dict[tuple, Garment] = {}
        for garment in garments or []:
            self.add_garment(garment)

    def add_garment(self, garment: Garment) -> Garment:
        self._garments[(garment.user_id, garment.garment_id)] = garment
        return garment

    def list_garments(self, user_id: str) -> List[Garment]:
        return sorted(
            (g for (owner, _), g in self._garments.items() if owner == user_id),
            key=lambda g: g.garment_id,
        )


__all__ = ["WardrobeStore", "SQLiteWardrobeStore", "InMemoryWardrobeStore"]
