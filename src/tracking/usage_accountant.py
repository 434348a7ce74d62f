# src/tracking/usage_accountant.py — v1
"""Fire-and-forget usage accounting.

Every resolved request records one UsageEvent. Recording never affects the
request: when analytics is off it does nothing, and store failures are
logged and dropped.
"""

from __future__ import annotations

import logging
from datetime import datetime

from readlearn.config.settings import Settings
from readlearn.tracking.base_usage_store import BaseUsageStore
from readlearn.tracking.models import UsageEvent, UsageSummary
from readlearn.tracking.stats_aggregator import window_start

logger = logging.getLogger(__name__)


class UsageAccountant:
    """Appends usage events to a store when analytics is enabled."""

    def __init__(self, store: BaseUsageStore, enabled: bool = False) -> None:
        self._store = store
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def record(
        self,
        action: str,
        language: str,
        cache_hit: bool,
        tokens: int = 0,
        cost_usd: float = 0.0,
        status: str = "success",
    ) -> None:
        """Record one usage event. Never raises."""
        if not self._enabled:
            return
        try:
            event = UsageEvent(
                action=action,
                language=language,
                cache_hit=cache_hit,
                tokens_used=tokens,
                cost_usd=cost_usd,
                status=status,
            )
            await self._store.append(event)
        except Exception as e:
            logger.warning("Usage logging failed for %s: %s", action, e)

    async def summarize(self, since: datetime | None = None) -> UsageSummary:
        """Aggregate usage since ``since`` (default: trailing 24 hours)."""
        return await self._store.summarize(since or window_start(24))

    def close(self) -> None:
        self._store.close()


def create_usage_accountant(settings: Settings) -> UsageAccountant:
    """Build the accountant with the store matching the cache backend.

    The sqlite cache backend keeps usage in the same database file; every
    other backend keeps usage in memory.
    """
    if settings.cache_backend == "sqlite":
        from readlearn.tracking.sqlite_usage_store import SqliteUsageStore
        store: BaseUsageStore = SqliteUsageStore(settings.cache_db_path)
    else:
        from readlearn.tracking.memory_usage_store import MemoryUsageStore
        store = MemoryUsageStore()
    return UsageAccountant(store, enabled=settings.analytics_enabled)
