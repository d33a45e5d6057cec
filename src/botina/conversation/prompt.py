"""System prompt builder for the language model."""

from datetime import date

from ..content import DEFAULT_LANGUAGE, LANGUAGE_NAMES
from ..vaccines import VaccineDefinition, compute_due_date

SYSTEM_PROMPT_BASE = """You are Sister Botina, a friendly chatbot helping South African parents with child immunizations.

CRITICAL RULES:
1. Respond ONLY in {language_name}
2. Keep responses SHORT - maximum 3-4 sentences
3. Use VERY SIMPLE language
4. Be warm and kind
5. For serious medical concerns, always say "Please visit your clinic"

CONTEXT ABOUT THIS USER:
{user_context}

SOUTH AFRICAN VACCINATION SCHEDULE:
{schedule}"""


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def _age_label(vaccine: VaccineDefinition) -> str:
    if vaccine.offset_type == "birth":
        return "Birth"
    # Anchor on a fixed date so month and year offsets read as whole units
    anchor = date(2000, 1, 1)
    due = compute_due_date(anchor, vaccine)
    if due is None:
        return "Unknown age"
    if vaccine.offset_type == "weeks":
        return f"{vaccine.age_in_weeks:g} weeks"
    months = months_between(anchor, due)
    if vaccine.offset_type == "years" and months % 12 == 0:
        return f"{months // 12} years"
    return f"{months} months"


def format_schedule(vaccines: list[VaccineDefinition]) -> str:
    """Group vaccine names by age, one line per age."""
    groups: dict[str, list[str]] = {}
    for vaccine in vaccines:
        label = _age_label(vaccine)
        groups.setdefault(label, [])
        if vaccine.name not in groups[label]:
            groups[label].append(vaccine.name)
    return "\n".join(f"- {label}: {', '.join(names)}" for label, names in groups.items())


def build_system_prompt(
    language: str,
    birth_date: date | None,
    today: date,
    vaccines: list[VaccineDefinition],
) -> str:
    """Build the system prompt for one free-form answer.

    Args:
        language: The user's language code.
        birth_date: The child's birth date, if known.
        today: Reference day for the child's age.
        vaccines: Schedule to summarize for the model.

    Returns:
        Complete system prompt string.
    """
    language_name = LANGUAGE_NAMES.get(language, LANGUAGE_NAMES[DEFAULT_LANGUAGE])

    if birth_date is not None:
        age = months_between(birth_date, today)
        user_context = f"- Child's birth date: {birth_date.isoformat()} ({age} months old)"
    else:
        user_context = "- Child's birth date NOT provided yet"

    return SYSTEM_PROMPT_BASE.format(
        language_name=language_name,
        user_context=user_context,
        schedule=format_schedule(vaccines) or "- Not available",
    )
