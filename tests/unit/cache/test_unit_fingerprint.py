# tests/unit/cache/test_unit_fingerprint.py — v1
"""Tests for cache/fingerprint.py — SHA-256 content hash."""

from __future__ import annotations

import hashlib

from readlearn.cache.fingerprint import content_hash, normalize_for_hash


class TestContentHash:
    def test_known_digest(self):
        assert content_hash("bonjour") == hashlib.sha256(b"bonjour").hexdigest()

    def test_trim_and_case_insensitive(self):
        assert content_hash("  Bonjour le Monde \n") == content_hash("bonjour le monde")

    def test_inner_whitespace_matters(self):
        assert content_hash("a b") != content_hash("a  b")

    def test_hex_length(self):
        digest = content_hash("n'importe quoi")
        assert len(digest) == 64
        assert all(c in "0123456789abcdef" for c in digest)

    def test_unicode(self):
        assert content_hash("ÉTÉ") == content_hash("été")

    def test_normalize(self):
        assert normalize_for_hash("  AbC ") == "abc"
