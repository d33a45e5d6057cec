"""Tests for the pure conversation state machine."""

from datetime import date

from botina.conversation import (
    AskModel,
    ClearHistory,
    ConversationState,
    EntryMode,
    Reply,
    ReplySchedule,
    SetBirthDate,
    SetLanguage,
    route,
)
from botina.nlu import classify

TODAY = date(2024, 6, 1)
S = ConversationState


def go(state, text, has_birth_date=False, entry_mode=EntryMode.FREE_FORM):
    return route(
        state,
        classify(text, TODAY),
        has_birth_date=has_birth_date,
        entry_mode=entry_mode,
    )


class TestFirstContact:
    def test_greeting_welcomes_in_detected_language(self):
        t = go(S.UNINITIALIZED, "Sawubona")
        assert t.state is S.FREE_FORM
        assert t.effects == [SetLanguage("zu"), Reply("welcome", language="zu")]

    def test_menu_entry_mode_shows_menu(self):
        t = go(S.UNINITIALIZED, "hello", entry_mode=EntryMode.MENU)
        assert t.state is S.MENU_ROOT
        assert t.effects == [
            SetLanguage("en"),
            Reply("welcome", language="en"),
            Reply("menu", language="en"),
        ]

    def test_question_is_answered_after_welcome(self):
        t = go(S.UNINITIALIZED, "when is the measles vaccine?")
        assert t.state is S.FREE_FORM
        assert t.effects[:2] == [SetLanguage("en"), Reply("welcome", language="en")]
        assert t.effects[-1] == AskModel("when is the measles vaccine?")

    def test_first_message_with_birth_date(self):
        t = go(S.UNINITIALIZED, "My baby was born 2024-01-10")
        assert t.effects[2:] == [
            SetBirthDate(date(2024, 1, 10)),
            Reply("birthdate_confirmed", {"birthdate": "2024-01-10"}),
            AskModel("My baby was born 2024-01-10"),
        ]

    def test_emergency_on_first_contact(self):
        t = go(S.UNINITIALIZED, "emergency")
        assert Reply("emergency_contacts") in t.effects
        assert not any(isinstance(e, AskModel) for e in t.effects)

    def test_menu_mode_does_not_ask_model(self):
        t = go(S.UNINITIALIZED, "when is the measles vaccine?", entry_mode=EntryMode.MENU)
        assert not any(isinstance(e, AskModel) for e in t.effects)

    def test_menu_on_first_contact_opens_menu(self):
        for text in ("menu", "0"):
            for mode in EntryMode:
                t = go(S.UNINITIALIZED, text, entry_mode=mode)
                assert t.state is S.MENU_ROOT
                assert t.effects == [
                    SetLanguage("en"),
                    Reply("welcome", language="en"),
                    Reply("menu", language="en"),
                ]


class TestInterrupts:
    def test_menu_from_any_state_clears_history(self):
        for state in (
            S.FREE_FORM,
            S.MENU_ROOT,
            S.MENU_INFO,
            S.AWAITING_BIRTHDATE,
            S.AWAITING_LANGUAGE_CHOICE,
        ):
            t = go(state, "menu")
            assert t.state is S.MENU_ROOT
            assert t.effects == [ClearHistory(), Reply("menu")]

    def test_emergency_keeps_state(self):
        t = go(S.AWAITING_BIRTHDATE, "This is an emergency")
        assert t.state is S.AWAITING_BIRTHDATE
        assert t.effects == [Reply("emergency_contacts")]

    def test_website_keeps_state(self):
        t = go(S.MENU_INFO, "website")
        assert t.state is S.MENU_INFO
        assert t.effects == [Reply("website_info")]

    def test_greeting_rewelcomes(self):
        t = go(S.FREE_FORM, "hi")
        assert t.state is S.FREE_FORM
        assert t.effects == [Reply("welcome")]


class TestMenuRoot:
    def test_options(self):
        assert go(S.MENU_ROOT, "1").state is S.MENU_INFO
        assert go(S.MENU_ROOT, "2").effects == [ReplySchedule()]
        assert go(S.MENU_ROOT, "2").state is S.MENU_ROOT
        assert go(S.MENU_ROOT, "3").state is S.AWAITING_BIRTHDATE
        assert go(S.MENU_ROOT, "4").state is S.AWAITING_LANGUAGE_CHOICE
        assert go(S.MENU_ROOT, "5").state is S.FREE_FORM
        assert go(S.MENU_ROOT, "6").effects == [Reply("emergency_contacts")]
        assert go(S.MENU_ROOT, "7").effects == [Reply("website_info")]

    def test_invalid_option(self):
        t = go(S.MENU_ROOT, "9")
        assert t.state is S.MENU_ROOT
        assert t.effects == [Reply("invalid_option")]


class TestMenuInfo:
    def test_topics(self):
        assert go(S.MENU_INFO, "1").effects == [Reply("info_what")]
        assert go(S.MENU_INFO, "2").effects == [Reply("info_side_effects")]
        assert go(S.MENU_INFO, "3").effects == [Reply("info_booklet")]
        assert go(S.MENU_INFO, "3").state is S.MENU_INFO

    def test_invalid_topic(self):
        assert go(S.MENU_INFO, "banana").effects == [Reply("invalid_option")]

    def test_zero_returns_to_menu(self):
        assert go(S.MENU_INFO, "0").state is S.MENU_ROOT


class TestAwaitingBirthdate:
    def test_valid_date_advances(self):
        t = go(S.AWAITING_BIRTHDATE, "2023-05-14")
        assert t.state is S.FREE_FORM
        assert t.effects == [
            SetBirthDate(date(2023, 5, 14)),
            Reply("birthdate_confirmed", {"birthdate": "2023-05-14"}),
        ]

    def test_overwrites_existing_birth_date(self):
        t = go(S.AWAITING_BIRTHDATE, "2023-05-14", has_birth_date=True)
        assert SetBirthDate(date(2023, 5, 14)) in t.effects

    def test_menu_mode_returns_to_menu(self):
        t = go(S.AWAITING_BIRTHDATE, "2023-05-14", entry_mode=EntryMode.MENU)
        assert t.state is S.MENU_ROOT

    def test_invalid_date_stays(self):
        for text in ("2030-01-01", "2024-02-30", "last week"):
            t = go(S.AWAITING_BIRTHDATE, text)
            assert t.state is S.AWAITING_BIRTHDATE
            assert t.effects == [Reply("invalid_birthdate")]


class TestAwaitingLanguage:
    def test_valid_choice(self):
        t = go(S.AWAITING_LANGUAGE_CHOICE, "2")
        assert t.state is S.FREE_FORM
        assert t.effects == [SetLanguage("af"), Reply("language_set", language="af")]

    def test_invalid_choice(self):
        t = go(S.AWAITING_LANGUAGE_CHOICE, "klingon")
        assert t.state is S.AWAITING_LANGUAGE_CHOICE
        assert t.effects == [Reply("invalid_language")]


class TestFreeForm:
    def test_question_goes_to_model(self):
        t = go(S.FREE_FORM, "is a fever normal after vaccines?")
        assert t.state is S.FREE_FORM
        assert t.effects == [AskModel("is a fever normal after vaccines?")]

    def test_birth_date_confirmed_before_answer(self):
        t = go(S.FREE_FORM, "My baby was born 2024-01-10")
        assert t.effects == [
            SetBirthDate(date(2024, 1, 10)),
            Reply("birthdate_confirmed", {"birthdate": "2024-01-10"}),
            AskModel("My baby was born 2024-01-10"),
        ]

    def test_birth_date_set_only_once(self):
        t = go(S.FREE_FORM, "She was born 2023-05-14", has_birth_date=True)
        assert t.effects == [AskModel("She was born 2023-05-14")]
