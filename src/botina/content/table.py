"""Language-keyed string table for static replies."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

BUNDLED_CONTENT_PATH = Path(__file__).parent / "data" / "content.json"

DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "af", "zu", "xh")
LANGUAGE_NAMES = {
    "en": "English",
    "af": "Afrikaans",
    "zu": "isiZulu",
    "xh": "isiXhosa",
}

FALLBACK_TEXT = "Sorry, I cannot answer that right now. Please visit your local clinic."


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class ContentTable:
    """Static reply strings, looked up by language and key.

    Lookups never fail: a missing language or key falls back to the
    default language, and then to FALLBACK_TEXT.
    """

    def __init__(
        self,
        strings: dict[str, dict[str, str]],
        default_language: str = DEFAULT_LANGUAGE,
    ) -> None:
        self.strings = strings
        self.default_language = default_language

    @classmethod
    def load(cls, path: Path | None = None) -> "ContentTable":
        """Load the table from JSON, or an empty table if the file is unusable."""
        path = path or BUNDLED_CONTENT_PATH
        try:
            with open(path, "r", encoding="utf-8") as f:
                strings = json.load(f)
        except FileNotFoundError:
            logger.warning("Content file %s not found, using fallback text only", path)
            strings = {}
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in %s: %s. Using fallback text only.", path, e)
            strings = {}
        return cls(strings)

    def languages(self) -> list[str]:
        return list(self.strings.keys())

    def get(self, language: str, key: str) -> str:
        """Get a string, falling back to the default language, then a literal."""
        value = self.strings.get(language, {}).get(key)
        if value is not None:
            return value

        value = self.strings.get(self.default_language, {}).get(key)
        if value is not None:
            logger.debug("Content key %s missing for %s, using %s", key, language, self.default_language)
            return value

        logger.warning("Content key %s missing in all languages", key)
        return FALLBACK_TEXT

    def render(self, language: str, key: str, **params: Any) -> str:
        """Get a string and fill its {placeholders}.

        Placeholders without a matching parameter are left as-is.
        """
        template = self.get(language, key)
        if not params:
            return template
        return template.format_map(_KeepMissing(params))
