"""Keyword-based language detection and intent classification.

Everything here is deterministic: the same text and reference day always
produce the same classification.
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from ..content import DEFAULT_LANGUAGE, LANGUAGE_NAMES, SUPPORTED_LANGUAGES
from ..errors import InvalidUserInput


class Intent(Enum):
    """What an inbound message asks for."""

    MENU = "menu"
    EMERGENCY = "emergency"
    WEBSITE = "website"
    GREETING = "greeting"
    BIRTH_DATE = "birth_date"
    FREE_FORM = "free_form"


LANGUAGE_KEYWORDS = {
    "af": ["goeie", "dankie", "asseblief", "hoe", "wat", "kan", "jammer", "inenting", "inentings", "entstof"],
    "zu": ["sawubona", "ngiyabonga", "ngicela", "kanjani", "yini", "usizo", "ukugoma", "umgomo"],
    "xh": ["molo", "molweni", "enkosi", "nceda", "njani", "yintoni", "uncedo", "ukugonya", "isithintelo"],
}

GREETINGS = [
    "hi", "hello", "hey", "hallo", "howzit", "heita",
    "good morning", "good afternoon", "good evening",
    "goeiedag", "goeiemore", "goeienaand",
    "sawubona", "sanibonani",
    "molo", "molweni",
]

# Words allowed after a greeting before it stops being a plain greeting
MAX_GREETING_TAIL_WORDS = 2

EMERGENCY_KEYWORDS = [
    "emergency", "urgent", "ambulance", "not breathing",
    "noodgeval", "dringend", "ambulans",
    "isimo esiphuthumayo", "ngisize", "i-ambulensi",
    "ungxamiseko", "ngxamisekile",
]

WEBSITE_KEYWORDS = [
    "website", "webwerf", "iwebhusayithi", "online", "link", "url", "community", "forum",
]

MENU_COMMANDS = {"menu", "0", "kieslys", "imenyu"}

LANGUAGE_SELECTORS = {
    "1": "en",
    "2": "af",
    "3": "zu",
    "4": "xh",
    "english": "en",
    "afrikaans": "af",
    "zulu": "zu",
    "xhosa": "xh",
}

BIRTH_DATE_PATTERN = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
DEFAULT_LOOKBACK_YEARS = 5


@dataclass(frozen=True)
class Classification:
    """Result of classifying one inbound message."""

    intent: Intent
    language: str
    birth_date: date | None = None
    text: str = ""


def _normalize(text: str) -> str:
    return " ".join(text.lower().strip().split())


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", text) is not None


def detect_language(text: str) -> str:
    """Guess the language of a message from characteristic words."""
    normalized = _normalize(text)
    for language, keywords in LANGUAGE_KEYWORDS.items():
        if any(_contains_phrase(normalized, k) for k in keywords):
            return language
    return DEFAULT_LANGUAGE


def is_greeting(text: str) -> bool:
    """Check for a short, standalone greeting.

    Matches the whole message ("hello!") or a greeting followed by at most
    a couple of words ("hi there"), but not a greeting that opens a longer
    request ("hello I need help with schedule").
    """
    normalized = re.sub(r"[^\w\s-]", " ", _normalize(text))
    normalized = " ".join(normalized.split())
    for greeting in GREETINGS:
        if normalized == greeting:
            return True
        if normalized.startswith(greeting + " "):
            tail = normalized[len(greeting):].split()
            if len(tail) <= MAX_GREETING_TAIL_WORDS:
                return True
    return False


def is_emergency(text: str) -> bool:
    normalized = _normalize(text)
    return any(_contains_phrase(normalized, k) for k in EMERGENCY_KEYWORDS)


def is_website_request(text: str) -> bool:
    normalized = _normalize(text)
    return any(_contains_phrase(normalized, k) for k in WEBSITE_KEYWORDS)


def is_menu_command(text: str) -> bool:
    return _normalize(text) in MENU_COMMANDS


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return day.replace(year=day.year - years, day=28)


def validate_birth_date(
    text: str,
    today: date,
    lookback_years: int = DEFAULT_LOOKBACK_YEARS,
) -> date:
    """Find and validate a YYYY-MM-DD birth date in text.

    The date must not be in the future and must be less than
    `lookback_years` years before `today`.

    Raises:
        InvalidUserInput: No date, an impossible date, or one outside the window.
    """
    match = BIRTH_DATE_PATTERN.search(text)
    if not match:
        raise InvalidUserInput("no date in YYYY-MM-DD format")

    try:
        value = date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError as e:
        raise InvalidUserInput(f"not a calendar date: {match.group(0)}") from e

    if value > today:
        raise InvalidUserInput(f"date is in the future: {value.isoformat()}")
    if value <= _years_before(today, lookback_years):
        raise InvalidUserInput(f"date is more than {lookback_years} years ago: {value.isoformat()}")

    return value


def extract_birth_date(
    text: str,
    today: date,
    lookback_years: int = DEFAULT_LOOKBACK_YEARS,
) -> date | None:
    """Like validate_birth_date, but returns None instead of raising."""
    try:
        return validate_birth_date(text, today, lookback_years)
    except InvalidUserInput:
        return None


def parse_language_choice(text: str) -> str:
    """Map a language menu answer to a language code.

    Accepts the menu number, the code itself, or the language name.

    Raises:
        InvalidUserInput: The answer does not name a supported language.
    """
    normalized = _normalize(text)
    if normalized in SUPPORTED_LANGUAGES:
        return normalized
    if normalized in LANGUAGE_SELECTORS:
        return LANGUAGE_SELECTORS[normalized]
    for code, name in LANGUAGE_NAMES.items():
        if normalized == name.lower():
            return code
    raise InvalidUserInput(f"unknown language choice: {text!r}")


def classify(
    text: str,
    today: date,
    lookback_years: int = DEFAULT_LOOKBACK_YEARS,
) -> Classification:
    """Label a message with its intent, language and any birth date it carries."""
    language = detect_language(text)
    birth_date = extract_birth_date(text, today, lookback_years)

    if is_menu_command(text):
        intent = Intent.MENU
    elif is_emergency(text):
        intent = Intent.EMERGENCY
    elif is_website_request(text):
        intent = Intent.WEBSITE
    elif is_greeting(text):
        intent = Intent.GREETING
    elif birth_date is not None:
        intent = Intent.BIRTH_DATE
    else:
        intent = Intent.FREE_FORM

    return Classification(intent=intent, language=language, birth_date=birth_date, text=text.strip())
