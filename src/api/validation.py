# src/api/validation.py — v1
"""Content validation of incoming requests.

Raises InputValidationError, which the app maps to HTTP 400.
"""

from __future__ import annotations

import re

from readlearn.api.models import AnalyzeRequest, DefineBatchRequest, DefineRequest
from readlearn.config.languages import is_supported_language, normalize_language
from readlearn.config.settings import Settings

MIN_TEXT_LENGTH = 10
MAX_WORD_LENGTH = 100

# Two or more letters, any script.
_WORD_RE = re.compile(r"[^\W\d_]{2,}")
_HTML_RE = re.compile(r"<[a-zA-Z][^>]*>")
_SCRIPT_RE = re.compile(r"(javascript:|on\w+=|<script)", re.IGNORECASE)


class InputValidationError(ValueError):
    """Request content is not acceptable."""


def sanitize_string(value: str) -> str:
    """Trim whitespace and drop NUL bytes."""
    return value.strip().replace("\0", "")


def contains_html_or_script(value: str) -> bool:
    return bool(_HTML_RE.search(value) or _SCRIPT_RE.search(value))


def validate_language(code: str | None, settings: Settings) -> str:
    language = normalize_language(code, settings.default_language)
    if not is_supported_language(language):
        raise InputValidationError(f"Unsupported language: {language}")
    return language


def validate_analyze_request(req: AnalyzeRequest, settings: Settings) -> AnalyzeRequest:
    """Return a sanitized copy of ``req``."""
    text = sanitize_string(req.text)
    if len(text) < MIN_TEXT_LENGTH:
        raise InputValidationError(
            f"Text must be at least {MIN_TEXT_LENGTH} characters"
        )
    if len(text) > settings.max_text_length:
        raise InputValidationError(
            f"Text exceeds maximum length of {settings.max_text_length} characters"
        )
    if not _WORD_RE.search(text):
        raise InputValidationError("Text must contain readable words")

    url = sanitize_string(req.url) if req.url else None
    return req.model_copy(
        update={
            "text": text,
            "url": url or None,
            "language": validate_language(req.language, settings),
        }
    )


def validate_define_request(req: DefineRequest, settings: Settings) -> DefineRequest:
    """Return a sanitized copy of ``req``."""
    word = _validate_word(req.word)
    context = sanitize_string(req.context)
    if contains_html_or_script(context):
        raise InputValidationError("Context contains invalid characters")

    return req.model_copy(
        update={
            "word": word,
            "context": context,
            "language": validate_language(req.language, settings),
        }
    )


def validate_define_batch_request(
    req: DefineBatchRequest, settings: Settings
) -> DefineBatchRequest:
    """Return a copy of ``req`` with every word sanitized to a plain string."""
    if not req.words:
        raise InputValidationError("Words array is required")
    if len(req.words) > settings.max_batch_words:
        raise InputValidationError(
            f"At most {settings.max_batch_words} words per batch"
        )
    return req.model_copy(
        update={
            "words": [_validate_word(word) for word in req.word_list()],
            "language": validate_language(req.language, settings),
        }
    )


def _validate_word(value: str) -> str:
    word = sanitize_string(value)
    if not word or len(word) > MAX_WORD_LENGTH:
        raise InputValidationError(
            f"Word must be between 1 and {MAX_WORD_LENGTH} characters"
        )
    if contains_html_or_script(word):
        raise InputValidationError("Word contains invalid characters")
    return word
