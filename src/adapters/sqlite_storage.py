"""SQLite storage adapter.

Implements the core MetadataStore and TelemetrySink ports using a simple
SQLite database.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, Optional

from core.models import Message, MessageMetadata


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the MetadataStore and TelemetrySink contracts."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - message_metadata: per-message impression/dismissal counters and expiry
        - events: append-only telemetry log
        """

        with self._connect() as conn:
            # message_metadata is keyed by catalog message id. Rows are created
            # lazily on the first display, press or dismissal.
            # Fields:
            # - message_id: catalog key (PRIMARY KEY)
            # - impressions: number of times the message was displayed
            # - dismissals: number of times the user dismissed it
            # - expired: 1 once the message must never be shown again
            # - last_impression: timestamp of the latest display
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS message_metadata (
                    message_id TEXT PRIMARY KEY,
                    impressions INTEGER NOT NULL DEFAULT 0,
                    dismissals INTEGER NOT NULL DEFAULT 0,
                    expired INTEGER NOT NULL DEFAULT 0,
                    last_impression TIMESTAMP
                )
                """
            )
            # events mirrors what a telemetry backend would receive.
            # Fields:
            # - id: auto-increment primary key
            # - category: event category (information, action, experiment)
            # - event: event name (message_impression, exposure, ...)
            # - message_id: catalog key, NULL for feature-level events
            # - extras: JSON object with event extras
            # - created_at: UTC timestamp
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    category TEXT NOT NULL,
                    event TEXT NOT NULL,
                    message_id TEXT,
                    extras TEXT,
                    created_at TIMESTAMP NOT NULL
                )
                """
            )

    def get_metadata(self, message_id: str) -> MessageMetadata:
        """Return the metadata for a message, zeroed if it was never seen."""

        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT impressions, dismissals, expired
                FROM message_metadata WHERE message_id = ?
                """,
                (message_id,),
            ).fetchone()
        if row is None:
            return MessageMetadata(message_id=message_id)
        return MessageMetadata(
            message_id=message_id,
            impressions=int(row["impressions"]),
            dismissals=int(row["dismissals"]),
            expired=bool(row["expired"]),
        )

    def on_message_displayed(self, message: Message) -> None:
        """Count an impression and expire the message at its style's limit.

        A max_display_count of zero or less means the style has no limit.
        """

        limit = message.style.max_display_count
        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO message_metadata (message_id, impressions, last_impression)
                VALUES (?, 1, ?)
                ON CONFLICT(message_id) DO UPDATE SET
                    impressions = impressions + 1,
                    last_impression = excluded.last_impression
                """,
                (message.id, now.isoformat()),
            )
            if limit > 0:
                conn.execute(
                    """
                    UPDATE message_metadata SET expired = 1
                    WHERE message_id = ? AND impressions >= ?
                    """,
                    (message.id, limit),
                )

    def on_message_pressed(self, message: Message) -> None:
        """A message that was acted upon has done its job."""

        self._expire(message.id)

    def on_message_dismissed(self, message: Message) -> None:
        """Count the dismissal and expire the message right away."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO message_metadata (message_id, dismissals, expired)
                VALUES (?, 1, 1)
                ON CONFLICT(message_id) DO UPDATE SET
                    dismissals = dismissals + 1,
                    expired = 1
                """,
                (message.id,),
            )

    def _expire(self, message_id: str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO message_metadata (message_id, expired)
                VALUES (?, 1)
                ON CONFLICT(message_id) DO UPDATE SET expired = 1
                """,
                (message_id,),
            )

    def record(
        self,
        category: str,
        event: str,
        message_id: Optional[str],
        extras: Optional[dict[str, str]] = None,
    ) -> None:
        """Append a telemetry event to the events table."""

        created_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO events (category, event, message_id, extras, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    category,
                    event,
                    message_id,
                    json.dumps(extras) if extras else None,
                    created_at.isoformat(),
                ),
            )

    def list_events(self, limit: int = 50) -> list[dict[str, Any]]:
        """Return the most recent events, newest first."""

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, category, event, message_id, extras, created_at
                FROM events ORDER BY id DESC LIMIT ?
                """,
                (limit,),
            ).fetchall()
        events = []
        for row in rows:
            event = dict(row)
            event["extras"] = json.loads(event["extras"]) if event["extras"] else {}
            events.append(event)
        return events
