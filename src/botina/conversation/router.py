"""Pure conversation state machine.

`route` decides the next state and the effects to perform for one
classified message. It does no I/O; ConversationHandler executes the
effects it returns.
"""

from datetime import date

from ..errors import InvalidUserInput
from ..nlu import Classification, Intent, parse_language_choice
from .states import (
    AskModel,
    ClearHistory,
    ConversationState,
    Effect,
    EntryMode,
    Reply,
    ReplySchedule,
    SetBirthDate,
    SetLanguage,
    Transition,
)

INFO_MENU_REPLIES = {
    "1": "info_what",
    "2": "info_side_effects",
    "3": "info_booklet",
}


def _birthdate_reply(birth_date: date) -> Reply:
    return Reply("birthdate_confirmed", {"birthdate": birth_date.isoformat()})


def _free_form(classification: Classification, has_birth_date: bool) -> list[Effect]:
    effects: list[Effect] = []
    if classification.birth_date is not None and not has_birth_date:
        effects.append(SetBirthDate(classification.birth_date))
        effects.append(_birthdate_reply(classification.birth_date))
    effects.append(AskModel(classification.text))
    return effects


def _first_contact(
    classification: Classification,
    has_birth_date: bool,
    entry_mode: EntryMode,
) -> Transition:
    effects: list[Effect] = [
        SetLanguage(classification.language),
        Reply("welcome", language=classification.language),
    ]
    if classification.intent is Intent.MENU:
        effects.append(Reply("menu", language=classification.language))
        return Transition(ConversationState.MENU_ROOT, effects)

    if entry_mode is EntryMode.MENU:
        effects.append(Reply("menu", language=classification.language))

    if classification.intent is Intent.EMERGENCY:
        effects.append(Reply("emergency_contacts"))
    elif classification.intent is Intent.WEBSITE:
        effects.append(Reply("website_info"))
    elif entry_mode is EntryMode.FREE_FORM and classification.intent in (Intent.FREE_FORM, Intent.BIRTH_DATE):
        effects.extend(_free_form(classification, has_birth_date))

    return Transition(entry_mode.home_state, effects)


def _menu_root(state: ConversationState, selection: str) -> Transition:
    if selection == "1":
        return Transition(ConversationState.MENU_INFO, [Reply("info_menu")])
    if selection == "2":
        return Transition(state, [ReplySchedule()])
    if selection == "3":
        return Transition(ConversationState.AWAITING_BIRTHDATE, [Reply("ask_birthdate")])
    if selection == "4":
        return Transition(ConversationState.AWAITING_LANGUAGE_CHOICE, [Reply("language_menu")])
    if selection == "5":
        return Transition(ConversationState.FREE_FORM, [Reply("ask_question")])
    if selection == "6":
        return Transition(state, [Reply("emergency_contacts")])
    if selection == "7":
        return Transition(state, [Reply("website_info")])
    return Transition(state, [Reply("invalid_option")])


def _menu_info(state: ConversationState, selection: str) -> Transition:
    key = INFO_MENU_REPLIES.get(selection)
    if key is None:
        return Transition(state, [Reply("invalid_option")])
    return Transition(state, [Reply(key)])


def _awaiting_birthdate(
    state: ConversationState,
    classification: Classification,
    entry_mode: EntryMode,
) -> Transition:
    if classification.birth_date is None:
        return Transition(state, [Reply("invalid_birthdate")])
    return Transition(
        entry_mode.home_state,
        [SetBirthDate(classification.birth_date), _birthdate_reply(classification.birth_date)],
    )


def _awaiting_language(
    state: ConversationState,
    classification: Classification,
    entry_mode: EntryMode,
) -> Transition:
    try:
        language = parse_language_choice(classification.text)
    except InvalidUserInput:
        return Transition(state, [Reply("invalid_language")])
    return Transition(
        entry_mode.home_state,
        [SetLanguage(language), Reply("language_set", language=language)],
    )


def route(
    state: ConversationState,
    classification: Classification,
    *,
    has_birth_date: bool,
    entry_mode: EntryMode = EntryMode.FREE_FORM,
) -> Transition:
    """Decide the next state and effects for one message.

    Args:
        state: The user's current state.
        classification: The classified inbound message.
        has_birth_date: Whether a birth date is already stored.
        entry_mode: Free-form-first or menu-first conversations.

    Returns:
        The new state with the effects to execute, in order.
    """
    intent = classification.intent

    if state is ConversationState.UNINITIALIZED:
        return _first_contact(classification, has_birth_date, entry_mode)

    if intent is Intent.MENU:
        return Transition(ConversationState.MENU_ROOT, [ClearHistory(), Reply("menu")])

    # Interrupts answer without moving the user
    if intent is Intent.EMERGENCY:
        return Transition(state, [Reply("emergency_contacts")])
    if intent is Intent.WEBSITE:
        return Transition(state, [Reply("website_info")])
    if intent is Intent.GREETING:
        return Transition(state, [Reply("welcome")])

    selection = classification.text.strip()

    if state is ConversationState.MENU_ROOT:
        return _menu_root(state, selection)
    if state is ConversationState.MENU_INFO:
        return _menu_info(state, selection)
    if state is ConversationState.AWAITING_BIRTHDATE:
        return _awaiting_birthdate(state, classification, entry_mode)
    if state is ConversationState.AWAITING_LANGUAGE_CHOICE:
        return _awaiting_language(state, classification, entry_mode)

    return Transition(ConversationState.FREE_FORM, _free_form(classification, has_birth_date))
