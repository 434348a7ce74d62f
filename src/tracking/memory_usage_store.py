# src/tracking/memory_usage_store.py — v1
"""In-process usage log, used for development and tests."""

from __future__ import annotations

from datetime import datetime

from readlearn.tracking.base_usage_store import BaseUsageStore
from readlearn.tracking.models import UsageEvent, UsageSummary
from readlearn.tracking.stats_aggregator import summarize_events


class MemoryUsageStore(BaseUsageStore):
    """List-backed usage log."""

    def __init__(self) -> None:
        self._events: list[UsageEvent] = []

    async def append(self, event: UsageEvent) -> None:
        self._events.append(event)

    async def summarize(self, since: datetime) -> UsageSummary:
        return summarize_events(self._events, since)

    @property
    def events(self) -> list[UsageEvent]:
        return list(self._events)
