"""Vaccine reference data and due-date calculation."""

from .calculator import (
    WEEKS_PER_MONTH,
    WEEKS_PER_YEAR,
    add_months,
    compute_due_date,
    format_display_date,
    parse_date,
    vaccine_schedule,
)
from .models import OffsetType, VaccineDefinition, load_vaccines

__all__ = [
    "OffsetType",
    "VaccineDefinition",
    "WEEKS_PER_MONTH",
    "WEEKS_PER_YEAR",
    "add_months",
    "compute_due_date",
    "format_display_date",
    "load_vaccines",
    "parse_date",
    "vaccine_schedule",
]
