# src/classification/response_parser.py — v2
"""Tolerant extraction of JSON from LLM output.

Models are asked for bare JSON but sometimes wrap it in a Markdown fence or
surround it with prose. Attempts, in order: strict parse of the whole
content, the first fenced code block, the outermost ``{...}`` span (or
``[...]`` span for arrays).
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_BRACES_RE = re.compile(r"\{[\s\S]*\}")
_BRACKETS_RE = re.compile(r"\[[\s\S]*\]")


@dataclass(frozen=True)
class ParseSuccess:
    payload: dict[str, Any]
    strategy: str


@dataclass(frozen=True)
class ParseFailure:
    reason: str
    raw_content: str


@dataclass(frozen=True)
class ParseListSuccess:
    items: list[dict[str, Any]]
    strategy: str


ParseOutcome = ParseSuccess | ParseFailure


def parse_json_payload(content: str) -> ParseOutcome:
    """Extract a JSON object from ``content``. Never raises."""
    if not content or not content.strip():
        return ParseFailure(reason="empty response", raw_content=content or "")

    last_error = "no JSON object found"
    for strategy, candidate in _candidates(content, _BRACES_RE, "braces"):
        try:
            payload = json.loads(candidate)
        except json.JSONDecodeError as e:
            last_error = f"{strategy}: {e.msg}"
            continue
        if isinstance(payload, dict):
            return ParseSuccess(payload=payload, strategy=strategy)
        last_error = f"{strategy}: expected a JSON object, got {type(payload).__name__}"

    return ParseFailure(reason=last_error, raw_content=content)


def parse_json_array(content: str) -> ParseListSuccess | ParseFailure:
    """Extract a JSON array of objects from ``content``. Never raises.

    Non-object elements are dropped.
    """
    if not content or not content.strip():
        return ParseFailure(reason="empty response", raw_content=content or "")

    last_error = "no JSON array found"
    for strategy, candidate in _candidates(content, _BRACKETS_RE, "brackets"):
        try:
            payload = json.loads(candidate)
        except json.JSONDecodeError as e:
            last_error = f"{strategy}: {e.msg}"
            continue
        if isinstance(payload, list):
            items = [item for item in payload if isinstance(item, dict)]
            return ParseListSuccess(items=items, strategy=strategy)
        last_error = f"{strategy}: expected a JSON array, got {type(payload).__name__}"

    return ParseFailure(reason=last_error, raw_content=content)


def _candidates(
    content: str, span_re: re.Pattern[str], span_name: str
) -> list[tuple[str, str]]:
    candidates: list[tuple[str, str]] = [("strict", content.strip())]
    fence = _FENCE_RE.search(content)
    if fence:
        candidates.append(("fenced", fence.group(1)))
    span = span_re.search(content)
    if span:
        candidates.append((span_name, span.group(0)))
    return candidates
