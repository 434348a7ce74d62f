# src/tracking/sqlite_usage_store.py — v1
"""SQLite usage log (``usage_log`` table).

Shares the cache database file by default. Timestamps are stored as UTC
ISO-8601 strings so window queries compare lexicographically.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from readlearn.tracking.base_usage_store import BaseUsageStore
from readlearn.tracking.models import UsageEvent, UsageSummary
from readlearn.tracking.stats_aggregator import as_utc

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS usage_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    action TEXT NOT NULL,
    language TEXT NOT NULL,
    cache_hit INTEGER NOT NULL DEFAULT 0,
    tokens_used INTEGER NOT NULL DEFAULT 0,
    cost_usd REAL NOT NULL DEFAULT 0,
    status TEXT NOT NULL,
    timestamp TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_usage_log_timestamp ON usage_log(timestamp);
"""


class SqliteUsageStore(BaseUsageStore):
    """SQLite-backed usage log."""

    def __init__(self, db_path: Path | str) -> None:
        db_path = str(db_path)
        if db_path != ":memory:":
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            db_path = str(path)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.executescript(_SCHEMA)

    async def append(self, event: UsageEvent) -> None:
        with self._conn:
            self._conn.execute(
                """INSERT INTO usage_log
                   (action, language, cache_hit, tokens_used, cost_usd, status, timestamp)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    event.action,
                    event.language,
                    int(event.cache_hit),
                    event.tokens_used,
                    event.cost_usd,
                    event.status,
                    as_utc(event.timestamp).isoformat(),
                ),
            )

    async def summarize(self, since: datetime) -> UsageSummary:
        since = as_utc(since)
        bound = since.isoformat()
        row = self._conn.execute(
            """SELECT COUNT(*),
                      COALESCE(SUM(cache_hit), 0),
                      COALESCE(SUM(CASE WHEN status = 'failed' THEN 1 ELSE 0 END), 0),
                      COALESCE(SUM(tokens_used), 0),
                      COALESCE(SUM(cost_usd), 0.0)
               FROM usage_log WHERE timestamp >= ?""",
            (bound,),
        ).fetchone()
        by_action = dict(
            self._conn.execute(
                """SELECT action, COUNT(*) FROM usage_log
                   WHERE timestamp >= ? GROUP BY action""",
                (bound,),
            ).fetchall()
        )
        return UsageSummary(
            since=since,
            total_requests=row[0],
            cache_hits=row[1],
            failed_requests=row[2],
            total_tokens=row[3],
            total_cost_usd=row[4],
            by_action=by_action,
        )

    def close(self) -> None:
        self._conn.close()
