# src/tracking/base_usage_store.py — v1
"""Abstract append-only usage log."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from readlearn.tracking.models import UsageEvent, UsageSummary


class BaseUsageStore(ABC):
    """Unified interface for usage log backends."""

    @abstractmethod
    async def append(self, event: UsageEvent) -> None:
        """Persist one usage event."""

    @abstractmethod
    async def summarize(self, since: datetime) -> UsageSummary:
        """Aggregate events at or after ``since``."""

    def close(self) -> None:
        """Release backend resources."""
