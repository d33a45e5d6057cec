"""Lightweight message classification."""

from .classifier import (
    Classification,
    Intent,
    classify,
    detect_language,
    extract_birth_date,
    is_emergency,
    is_greeting,
    is_menu_command,
    is_website_request,
    parse_language_choice,
    validate_birth_date,
)

__all__ = [
    "Classification",
    "Intent",
    "classify",
    "detect_language",
    "extract_birth_date",
    "is_emergency",
    "is_greeting",
    "is_menu_command",
    "is_website_request",
    "parse_language_choice",
    "validate_birth_date",
]
