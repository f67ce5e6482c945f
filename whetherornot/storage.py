"""sqlite store for postal locations the user has looked up."""
from __future__ import annotations

import sqlite3
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, List, Optional

from .entities import PostalLocation, SavedLocation


def _now_ms() -> int:
    return int(time.time() * 1000)


class LocationStore:
    """History and favourites of postal locations, keyed by zip code."""

    RECENT_LIMIT = 10

    def __init__(self, path: str = ":memory:", time_func: Callable[[], int] = _now_ms) -> None:
        self.path = path
        self._time_func = time_func
        self._lock = threading.Lock()
        self._connection = sqlite3.connect(path, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self.run_migrations()

    @contextmanager
    def session_scope(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._connection
                self._connection.commit()
            except Exception:
                self._connection.rollback()
                raise

    def run_migrations(self) -> None:
        with self.session_scope() as session:
            session.execute(
                """
                CREATE TABLE IF NOT EXISTS saved_locations (
                    zip TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    latitude REAL NOT NULL,
                    longitude REAL NOT NULL,
                    country TEXT NOT NULL,
                    searched_at INTEGER NOT NULL,
                    is_favorite INTEGER NOT NULL DEFAULT 0
                )
                """
            )

    def close(self) -> None:
        self._connection.close()

    # Writes -------------------------------------------------------------
    def save_location(self, location: PostalLocation, is_favorite: bool = False) -> SavedLocation:
        saved = SavedLocation(location=location, searched_at=self._time_func(), is_favorite=is_favorite)
        with self.session_scope() as session:
            self._upsert(session, saved)
        return saved

    def save_locations(self, locations: Iterable[PostalLocation]) -> int:
        now = self._time_func()
        count = 0
        with self.session_scope() as session:
            for location in locations:
                self._upsert(session, SavedLocation(location=location, searched_at=now))
                count += 1
        return count

    def save_or_update(self, location: PostalLocation) -> SavedLocation:
        """Record a lookup, refreshing the search time and keeping the favourite flag."""

        with self.session_scope() as session:
            row = session.execute(
                "SELECT is_favorite FROM saved_locations WHERE zip = ?", (location.zip,)
            ).fetchone()
            saved = SavedLocation(
                location=location,
                searched_at=self._time_func(),
                is_favorite=bool(row["is_favorite"]) if row else False,
            )
            self._upsert(session, saved)
        return saved

    def set_favorite(self, zip_code: str, is_favorite: bool) -> bool:
        with self.session_scope() as session:
            cursor = session.execute(
                "UPDATE saved_locations SET is_favorite = ? WHERE zip = ?",
                (int(is_favorite), zip_code),
            )
        return cursor.rowcount > 0

    def touch(self, zip_code: str) -> bool:
        with self.session_scope() as session:
            cursor = session.execute(
                "UPDATE saved_locations SET searched_at = ? WHERE zip = ?",
                (self._time_func(), zip_code),
            )
        return cursor.rowcount > 0

    def delete(self, zip_code: str) -> bool:
        with self.session_scope() as session:
            cursor = session.execute("DELETE FROM saved_locations WHERE zip = ?", (zip_code,))
        return cursor.rowcount > 0

    def clear_non_favorites(self) -> int:
        with self.session_scope() as session:
            cursor = session.execute("DELETE FROM saved_locations WHERE is_favorite = 0")
        return cursor.rowcount

    def clear_all(self) -> int:
        with self.session_scope() as session:
            cursor = session.execute("DELETE FROM saved_locations")
        return cursor.rowcount

    # Reads --------------------------------------------------------------
    def get(self, zip_code: str) -> Optional[SavedLocation]:
        rows = self._select("WHERE zip = ? LIMIT 1", (zip_code,))
        return rows[0] if rows else None

    def exists(self, zip_code: str) -> bool:
        return self.get(zip_code) is not None

    def all_locations(self) -> List[SavedLocation]:
        return self._select("ORDER BY searched_at DESC")

    def favorite_locations(self) -> List[SavedLocation]:
        return self._select("WHERE is_favorite = 1 ORDER BY name ASC")

    def recent_locations(self, limit: int = RECENT_LIMIT) -> List[SavedLocation]:
        return self._select("ORDER BY searched_at DESC LIMIT ?", (limit,))

    def search_by_name(self, fragment: str) -> List[SavedLocation]:
        return self._select("WHERE name LIKE '%' || ? || '%' ORDER BY name ASC", (fragment,))

    def count(self) -> int:
        return self._scalar("SELECT COUNT(*) FROM saved_locations")

    def favorite_count(self) -> int:
        return self._scalar("SELECT COUNT(*) FROM saved_locations WHERE is_favorite = 1")

    # helpers ------------------------------------------------------------
    def _upsert(self, session: sqlite3.Connection, saved: SavedLocation) -> None:
        location = saved.location
        session.execute(
            """
            INSERT OR REPLACE INTO saved_locations (
                zip, name, latitude, longitude, country, searched_at, is_favorite
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                location.zip,
                location.name,
                location.latitude,
                location.longitude,
                location.country,
                saved.searched_at,
                int(saved.is_favorite),
            ),
        )

    def _select(self, clause: str, params: tuple = ()) -> List[SavedLocation]:
        with self.session_scope() as session:
            rows = session.execute(f"SELECT * FROM saved_locations {clause}", params).fetchall()
        return [_saved_from_row(row) for row in rows]

    def _scalar(self, sql: str) -> int:
        with self.session_scope() as session:
            row = session.execute(sql).fetchone()
        return int(row[0])


def _saved_from_row(row: sqlite3.Row) -> SavedLocation:
    return SavedLocation(
        location=PostalLocation(
            zip=row["zip"],
            name=row["name"],
            latitude=row["latitude"],
            longitude=row["longitude"],
            country=row["country"],
        ),
        searched_at=row["searched_at"],
        is_favorite=bool(row["is_favorite"]),
    )


__all__ = ["LocationStore"]
