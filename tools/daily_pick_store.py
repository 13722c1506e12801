"""Daily pick persistence: interface, SQLite and in-memory implementations.

Records are keyed by ``(user_id, date)``; at most one pick exists per key.
Writers racing on the same key are not serialised here: the upsert's
on-conflict update makes the last write win.
"""
from __future__ import annotations

import copy
import json
import sqlite3
import time
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Tuple

from models.daily_pick import DailyPick
from models.outfit import OutfitItem
from models.weather import WeatherReading


class DailyPickStore:
    """Persistence interface for daily picks."""

    def get(self, user_id: str, target_date: date) -> Optional[DailyPick]:
        raise NotImplementedError

    def upsert(self, pick: DailyPick) -> DailyPick:
        """Insert, or overwrite the record with the same ``(user_id, date)``."""

        raise NotImplementedError

    def delete(self, user_id: str, target_date: date) -> None:
        raise NotImplementedError

    def replace(self, pick: DailyPick) -> DailyPick:
        """Drop whatever is stored for the pick's key and insert ``pick``.

        Stores that support transactions override this to make both steps atomic.
        """

        self.delete(pick.user_id, pick.date)
        return self.upsert(pick)

    def update_image(self, pick_id: str, image_url: str) -> bool:
        """Patch the image of the pick with ``pick_id``; False if it is gone."""

        raise NotImplementedError

    def set_liked(self, user_id: str, target_date: date, liked: bool) -> Optional[DailyPick]:
        raise NotImplementedError

    def set_logged(self, user_id: str, target_date: date, logged: bool) -> Optional[DailyPick]:
        raise NotImplementedError


class SQLiteDailyPickStore(DailyPickStore):
    """Local SQLite-backed store for daily picks."""

    def __init__(self, database_path: str | Path = "data/daily_picks.db") -> None:
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
                CREATE TABLE IF NOT EXISTS daily_picks (
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    pick_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    summary TEXT,
                    hairstyle_note TEXT,
                    items TEXT NOT NULL,
                    weather_snapshot TEXT,
                    image_url TEXT,
                    is_liked INTEGER NOT NULL DEFAULT 0,
                    was_logged INTEGER NOT NULL DEFAULT 0,
                    created_at REAL,
                    updated_at REAL,
                    PRIMARY KEY (user_id, date)
                );
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_daily_picks_pick_id ON daily_picks (pick_id)"
            )

    @staticmethod
    def _row_values(pick: DailyPick) -> Tuple[object, ...]:
        return (
            pick.user_id,
            pick.date.isoformat(),
            pick.pick_id,
            pick.title,
            pick.summary,
            pick.hairstyle_note,
            json.dumps([item.to_dict() for item in pick.items]),
            json.dumps(pick.weather_snapshot.to_dict()),
            pick.image_url,
            int(pick.is_liked),
            int(pick.was_logged),
            pick.created_at,
            pick.updated_at,
        )

    @staticmethod
    def _insert(conn: sqlite3.Connection, pick: DailyPick) -> None:
        conn.execute(
            """
            INSERT INTO daily_picks (
                user_id, date, pick_id, title, summary, hairstyle_note, items,
                weather_snapshot, image_url, is_liked, was_logged, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (user_id, date) DO UPDATE SET
                pick_id = excluded.pick_id,
                title = excluded.title,
                summary = excluded.summary,
                hairstyle_note = excluded.hairstyle_note,
                items = excluded.items,
                weather_snapshot = excluded.weather_snapshot,
                image_url = excluded.image_url,
                is_liked = excluded.is_liked,
                was_logged = excluded.was_logged,
                updated_at = excluded.updated_at
            """,
            SQLiteDailyPickStore._row_values(pick),
        )

    def _row_to_pick(self, row: sqlite3.Row) -> DailyPick:
        raw_weather = json.loads(row["weather_snapshot"]) if row["weather_snapshot"] else {}
        return DailyPick(
            pick_id=row["pick_id"],
            user_id=row["user_id"],
            date=date.fromisoformat(row["date"]),
            title=row["title"],
            summary=row["summary"] or "",
            hairstyle_note=row["hairstyle_note"] or "",
            items=[OutfitItem.from_dict(item) for item in json.loads(row["items"] or "[]")],
            weather_snapshot=WeatherReading.from_dict(raw_weather),
            image_url=row["image_url"],
            is_liked=bool(row["is_liked"]),
            was_logged=bool(row["was_logged"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get(self, user_id: str, target_date: date) -> Optional[DailyPick]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM daily_picks WHERE user_id = ? AND date = ?",
                (user_id, target_date.isoformat()),
            )
            row = cursor.fetchone()
            return self._row_to_pick(row) if row else None

    def upsert(self, pick: DailyPick) -> DailyPick:
        with self._connect() as conn:
            self._insert(conn, pick)
        return self.get(pick.user_id, pick.date) or pick

    def delete(self, user_id: str, target_date: date) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM daily_picks WHERE user_id = ? AND date = ?",
                (user_id, target_date.isoformat()),
            )

    def replace(self, pick: DailyPick) -> DailyPick:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM daily_picks WHERE user_id = ? AND date = ?",
                (pick.user_id, pick.date.isoformat()),
            )
            self._insert(conn, pick)
        return self.get(pick.user_id, pick.date) or pick

    def update_image(self, pick_id: str, image_url: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE daily_picks SET image_url = ?, updated_at = ? WHERE pick_id = ?",
                (image_url, time.time(), pick_id),
            )
            return cursor.rowcount > 0

    def _set_flag(self, column: str, user_id: str, target_date: date, value: bool) -> Optional[DailyPick]:
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE daily_picks SET {column} = ?, updated_at = ? WHERE user_id = ? AND date = ?",
                (int(value), time.time(), user_id, target_date.isoformat()),
            )
            if cursor.rowcount == 0:
                return None
        return self.get(user_id, target_date)

    def set_liked(self, user_id: str, target_date: date, liked: bool) -> Optional[DailyPick]:
        return self._set_flag("is_liked", user_id, target_date, liked)

    def set_logged(self, user_id: str, target_date: date, logged: bool) -> Optional[DailyPick]:
        return self._set_flag("was_logged", user_id, target_date, logged)


class InMemoryDailyPickStore(DailyPickStore):
    """Dictionary-backed store for tests and local runs.

    Records are copied on the way in and out so callers cannot mutate stored
    state by accident.
    """

    def __init__(self) -> None:
        self._records: Dict[Tuple[str, date], DailyPick] = {}

    def get(self, user_id: str, target_date: date) -> Optional[DailyPick]:
        pick = self._records.get((user_id, target_date))
        return copy.deepcopy(pick) if pick else None

    def upsert(self, pick: DailyPick) -> DailyPick:
        key = (pick.user_id, pick.date)
        stored = copy.deepcopy(pick)
        existing = self._records.get(key)
        if existing is not None:
            stored.created_at = existing.created_at
        self._records[key] = stored
        return copy.deepcopy(stored)

    def delete(self, user_id: str, target_date: date) -> None:
        self._records.pop((user_id, target_date), None)

    def update_image(self, pick_id: str, image_url: str) -> bool:
        for pick in self._records.values():
            if pick.pick_id == pick_id:
                pick.image_url = image_url
                pick.updated_at = time.time()
                return True
        return False

    def _set_flag(self, attribute: str, user_id: str, target_date: date, value: bool) -> Optional[DailyPick]:
        pick = self._records.get((user_id, target_date))
        if pick is None:
            return None
        setattr(pick, attribute, value)
        pick.updated_at = time.time()
        return copy.deepcopy(pick)

    def set_liked(self, user_id: str, target_date: date, liked: bool) -> Optional[DailyPick]:
        return self._set_flag("is_liked", user_id, target_date, liked)

    def set_logged(self, user_id: str, target_date: date, logged: bool) -> Optional[DailyPick]:
        return self._set_flag("was_logged", user_id, target_date, logged)

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["DailyPickStore", "SQLiteDailyPickStore", "InMemoryDailyPickStore"]
