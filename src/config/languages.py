# src/config/languages.py — v1
"""Declarative registry of supported article languages.

ISO 639-1 code to English language name. The name is interpolated into
LLM prompts, the code is what clients send and what the caches store.
"""

from __future__ import annotations

SUPPORTED_LANGUAGES: dict[str, str] = {
    "bg": "Bulgarian",
    "hr": "Croatian",
    "cs": "Czech",
    "da": "Danish",
    "nl": "Dutch",
    "en": "English",
    "et": "Estonian",
    "fi": "Finnish",
    "fr": "French",
    "de": "German",
    "el": "Greek",
    "hu": "Hungarian",
    "ga": "Irish",
    "it": "Italian",
    "lv": "Latvian",
    "lt": "Lithuanian",
    "mt": "Maltese",
    "pl": "Polish",
    "pt": "Portuguese",
    "ro": "Romanian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "es": "Spanish",
    "sv": "Swedish",
}


def normalize_language(code: str | None, default: str = "fr") -> str:
    """Lower-case and trim a language code, falling back to ``default``."""
    if not code or not code.strip():
        return default
    return code.strip().lower()


def is_supported_language(code: str) -> bool:
    return normalize_language(code) in SUPPORTED_LANGUAGES


def get_language_name(code: str) -> str:
    """Return the English name for a language code.

    Unknown codes fall back to the upper-cased code itself so prompts stay
    readable.
    """
    normalized = normalize_language(code)
    return SUPPORTED_LANGUAGES.get(normalized, normalized.upper())
