# src/logging/context.py — v2
"""Contextual logging support: attach request_id, action, tier to log records."""

from __future__ import annotations

import contextvars
import uuid
from dataclasses import dataclass
from typing import Any

# Set per request by the HTTP layer and the resolver.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_action: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "action", default=None
)
_tier: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "tier", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    action: str | None = None
    tier: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        action=_action.get(),
        tier=_tier.get(),
    )


def set_request_context(action: str, request_id: str | None = None) -> str:
    """Set request-level context. Returns the request id in effect."""
    rid = request_id or uuid.uuid4().hex[:12]
    _request_id.set(rid)
    _action.set(action)
    _tier.set(None)
    return rid


def set_tier(tier: str) -> None:
    """Record which resolution tier is handling the current request."""
    _tier.set(tier)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _action.set(None)
    _tier.set(None)
