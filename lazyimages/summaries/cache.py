"""SQLite store for computed image summaries."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from lazyimages.summaries.models import ImageSummary
from lazyimages.urls import normalize_image_url


class SummaryEntry(BaseModel):
    """A stored summary with its metadata."""

    image_id: str
    source_path: str | None
    source_url: str | None
    summary: ImageSummary
    created_at: datetime


class SummaryStats(BaseModel):
    """Statistics for the summary store."""

    total_count: int
    empty_count: int
    backends: dict[str, int]


class SummaryStore:
    """SQLite-based store of image summaries keyed by image id."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._ensure_tables()

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _ensure_tables(self) -> None:
        """Create database tables if they don't exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS summaries (
                image_id TEXT PRIMARY KEY,
                source_path TEXT,
                source_url TEXT,
                backend TEXT,
                is_empty INTEGER NOT NULL DEFAULT 0,
                summary TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE INDEX IF NOT EXISTS idx_summaries_url
                ON summaries(source_url);
        """)
        self.conn.commit()

    def add(
        self,
        image_id: str,
        summary: ImageSummary,
        source_path: Path | str | None = None,
        source_url: str | None = None,
    ) -> None:
        """Add or replace the summary for an image."""
        self.conn.execute(
            """
            INSERT OR REPLACE INTO summaries
                (image_id, source_path, source_url, backend, is_empty, summary, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                image_id,
                str(source_path) if source_path is not None else None,
                source_url,
                summary.backend,
                int(summary.empty),
                summary.model_dump_json(),
                datetime.now().isoformat(),
            ),
        )
        self.conn.commit()

    def get_entry(self, image_id: str) -> SummaryEntry | None:
        """Get a stored summary with its metadata."""
        row = self.conn.execute(
            "SELECT * FROM summaries WHERE image_id = ?",
            (image_id,),
        ).fetchone()

        if row is None:
            return None

        return SummaryEntry(
            image_id=row["image_id"],
            source_path=row["source_path"],
            source_url=row["source_url"],
            summary=ImageSummary.model_validate_json(row["summary"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def get(self, image_id: str) -> ImageSummary | None:
        """Get the summary for an image."""
        entry = self.get_entry(image_id)
        return entry.summary if entry else None

    def exists(self, image_id: str) -> bool:
        """Check if a summary is stored for an image."""
        row = self.conn.execute(
            "SELECT 1 FROM summaries WHERE image_id = ?",
            (image_id,),
        ).fetchone()
        return row is not None

    def find_by_url(self, url: str) -> str | None:
        """Find the image id for a URL.

        Tries the URL with size suffixes stripped first, then the URL as given.
        """
        candidates = [normalize_image_url(url)]
        if candidates[0] != url:
            candidates.append(url)

        for candidate in candidates:
            row = self.conn.execute(
                "SELECT image_id FROM summaries WHERE source_url = ?",
                (candidate,),
            ).fetchone()
            if row is not None:
                return row["image_id"]
        return None

    def list_ids(self) -> list[str]:
        """List all stored image ids."""
        rows = self.conn.execute(
            "SELECT image_id FROM summaries ORDER BY image_id"
        ).fetchall()
        return [row["image_id"] for row in rows]

    def remove(self, image_id: str) -> int:
        """Remove the summary for an image. Returns count removed."""
        cursor = self.conn.execute(
            "DELETE FROM summaries WHERE image_id = ?",
            (image_id,),
        )
        self.conn.commit()
        return cursor.rowcount

    def clear(self) -> int:
        """Remove all summaries. Returns count removed."""
        cursor = self.conn.execute("DELETE FROM summaries")
        self.conn.commit()
        return cursor.rowcount

    def count(self) -> int:
        """Get number of stored summaries."""
        row = self.conn.execute("SELECT COUNT(*) as cnt FROM summaries").fetchone()
        return row["cnt"] if row else 0

    def get_stats(self) -> SummaryStats:
        """Get statistics about the store."""
        total = self.conn.execute(
            "SELECT COUNT(*) as cnt, COALESCE(SUM(is_empty), 0) as empty FROM summaries"
        ).fetchone()

        backends = self.conn.execute(
            "SELECT COALESCE(backend, 'none') as backend, COUNT(*) as cnt "
            "FROM summaries GROUP BY backend"
        ).fetchall()

        return SummaryStats(
            total_count=total["cnt"] if total else 0,
            empty_count=total["empty"] if total else 0,
            backends={row["backend"]: row["cnt"] for row in backends},
        )

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
