"""Static content lookup."""

from .table import (
    DEFAULT_LANGUAGE,
    FALLBACK_TEXT,
    LANGUAGE_NAMES,
    SUPPORTED_LANGUAGES,
    ContentTable,
)

__all__ = [
    "ContentTable",
    "DEFAULT_LANGUAGE",
    "FALLBACK_TEXT",
    "LANGUAGE_NAMES",
    "SUPPORTED_LANGUAGES",
]
