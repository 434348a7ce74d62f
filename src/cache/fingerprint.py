# src/cache/fingerprint.py — v2
"""Content addressing for the exact-match cache.

SHA-256 over normalized text. Callers hash a Sample's text, so two inputs
that sample to the same text share a cache entry.
"""

from __future__ import annotations

import hashlib


def normalize_for_hash(text: str) -> str:
    """Normalize text before hashing: trim surrounding whitespace, lowercase."""
    return text.strip().lower()


def content_hash(text: str) -> str:
    """SHA-256 hex digest of normalized text.

    Args:
        text: Text to hash (typically a sample, or a source URL).

    Returns:
        64-character lowercase hex digest.
    """
    return hashlib.sha256(normalize_for_hash(text).encode("utf-8")).hexdigest()
