"""Tests for language detection and intent classification."""

from datetime import date

import pytest

from botina.errors import InvalidUserInput
from botina.nlu import (
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

TODAY = date(2024, 6, 1)


class TestDetectLanguage:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Goeie more, hoe gaan dit?", "af"),
            ("Dankie vir die hulp", "af"),
            ("Sawubona", "zu"),
            ("Ngicela usizo ngokugoma", "zu"),
            ("Molo, enkosi", "xh"),
            ("Hello, when is the next vaccine?", "en"),
            ("", "en"),
        ],
    )
    def test_detects(self, text, expected):
        assert detect_language(text) == expected

    def test_matches_whole_words_only(self):
        # "wat" and "kan" are Afrikaans keywords
        assert detect_language("whatever you can tell me") == "en"
        assert detect_language("Unjani? Kanjani?") == "zu"

    def test_case_insensitive(self):
        assert detect_language("DANKIE") == "af"


class TestIsGreeting:
    @pytest.mark.parametrize(
        "text",
        ["hello", "Hi!", "hey there", "Good morning", "good morning sister", "Sawubona", "molo"],
    )
    def test_standalone_greetings(self, text):
        assert is_greeting(text) is True

    @pytest.mark.parametrize(
        "text",
        [
            "hello I need help with schedule",
            "hi my baby has a fever since yesterday",
            "this is not a greeting",
            "whistle",
        ],
    )
    def test_not_greetings(self, text):
        assert is_greeting(text) is False


class TestKeywordChecks:
    def test_emergency(self):
        assert is_emergency("This is an EMERGENCY") is True
        assert is_emergency("my baby is not breathing") is True
        assert is_emergency("Dit is dringend") is True
        assert is_emergency("can you help me with vaccines") is False

    def test_website(self):
        assert is_website_request("what is your website?") is True
        assert is_website_request("send me the link") is True
        assert is_website_request("when is the next dose") is False

    def test_menu(self):
        assert is_menu_command("menu") is True
        assert is_menu_command("  MENU ") is True
        assert is_menu_command("0") is True
        assert is_menu_command("kieslys") is True
        assert is_menu_command("show me the menu") is False


class TestBirthDate:
    def test_valid_date_in_text(self):
        assert validate_birth_date("My baby was born 2024-01-10", TODAY) == date(2024, 1, 10)

    def test_today_is_valid(self):
        assert validate_birth_date("2024-06-01", TODAY) == TODAY

    def test_future_rejected(self):
        with pytest.raises(InvalidUserInput, match="future"):
            validate_birth_date("2024-06-02", TODAY)

    def test_lookback_boundary(self):
        assert validate_birth_date("2019-06-02", TODAY) == date(2019, 6, 2)
        with pytest.raises(InvalidUserInput, match="5 years"):
            validate_birth_date("2019-06-01", TODAY)

    def test_custom_lookback(self):
        with pytest.raises(InvalidUserInput):
            validate_birth_date("2022-01-01", TODAY, lookback_years=2)

    def test_impossible_date(self):
        with pytest.raises(InvalidUserInput, match="not a calendar date"):
            validate_birth_date("2024-02-30", TODAY)

    def test_no_date(self):
        with pytest.raises(InvalidUserInput):
            validate_birth_date("last tuesday", TODAY)

    def test_other_formats_ignored(self):
        assert extract_birth_date("10/01/2024", TODAY) is None

    def test_extract_returns_none_on_invalid(self):
        assert extract_birth_date("2030-01-01", TODAY) is None
        assert extract_birth_date("born 2024-01-10", TODAY) == date(2024, 1, 10)

    def test_leap_day_today(self):
        assert validate_birth_date("2019-03-01", date(2024, 2, 29)) == date(2019, 3, 1)
        with pytest.raises(InvalidUserInput):
            validate_birth_date("2019-02-28", date(2024, 2, 29))


class TestParseLanguageChoice:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("1", "en"),
            ("2", "af"),
            ("3", "zu"),
            ("4", "xh"),
            ("Afrikaans", "af"),
            ("isiZulu", "zu"),
            ("xhosa", "xh"),
            ("en", "en"),
        ],
    )
    def test_choices(self, text, expected):
        assert parse_language_choice(text) == expected

    @pytest.mark.parametrize("text", ["5", "french", "", "english please"])
    def test_invalid(self, text):
        with pytest.raises(InvalidUserInput):
            parse_language_choice(text)


class TestClassify:
    def test_menu_beats_everything(self):
        assert classify("menu", TODAY).intent is Intent.MENU

    def test_emergency_beats_greeting(self):
        assert classify("hello emergency", TODAY).intent is Intent.EMERGENCY

    def test_website(self):
        assert classify("Do you have a website?", TODAY).intent is Intent.WEBSITE

    def test_greeting(self):
        result = classify("Sawubona", TODAY)
        assert result.intent is Intent.GREETING
        assert result.language == "zu"

    def test_greeting_with_request_is_free_form(self):
        result = classify("hello I need help with schedule", TODAY)
        assert result.intent is Intent.FREE_FORM
        assert result.language == "en"

    def test_birth_date(self):
        result = classify("My baby was born 2024-01-10", TODAY)
        assert result.intent is Intent.BIRTH_DATE
        assert result.birth_date == date(2024, 1, 10)

    def test_invalid_birth_date_is_free_form(self):
        result = classify("born 2030-01-10", TODAY)
        assert result.intent is Intent.FREE_FORM
        assert result.birth_date is None

    def test_text_is_stripped(self):
        assert classify("  what is BCG?  ", TODAY).text == "what is BCG?"

    def test_deterministic(self):
        assert classify("Dankie, hoe gaan dit?", TODAY) == classify("Dankie, hoe gaan dit?", TODAY)
