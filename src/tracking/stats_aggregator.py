# src/tracking/stats_aggregator.py — v2
"""Usage aggregation over a time window.

Used by the in-memory usage store and by the /stats endpoint.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from readlearn.tracking.models import UsageEvent, UsageSummary


def window_start(hours: int = 24, now: datetime | None = None) -> datetime:
    """Return the UTC start of a trailing window of ``hours``."""
    now = now or datetime.now(timezone.utc)
    return now - timedelta(hours=hours)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def summarize_events(events: Iterable[UsageEvent], since: datetime) -> UsageSummary:
    """Aggregate events at or after ``since``.

    Args:
        events: Usage events in any order.
        since: Inclusive lower bound of the window.

    Returns:
        UsageSummary for the window.
    """
    since = as_utc(since)
    in_window = [e for e in events if as_utc(e.timestamp) >= since]

    return UsageSummary(
        since=since,
        total_requests=len(in_window),
        cache_hits=sum(1 for e in in_window if e.cache_hit),
        failed_requests=sum(1 for e in in_window if e.status == "failed"),
        total_tokens=sum(e.tokens_used for e in in_window),
        total_cost_usd=sum(e.cost_usd for e in in_window),
        by_action=dict(Counter(e.action for e in in_window)),
    )
