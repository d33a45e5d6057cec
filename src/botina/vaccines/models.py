"""Vaccine reference data."""

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

BUNDLED_VACCINES_PATH = Path(__file__).parent / "data" / "vaccines.json"


class OffsetType(str, Enum):
    """Unit in which a dose's timing is expressed relative to birth."""

    BIRTH = "birth"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


@dataclass(frozen=True)
class VaccineDefinition:
    """A single dose in the immunization schedule.

    Attributes:
        name: Display name of the vaccine (e.g. 'BCG', 'Hexavalent (6-in-1)').
        dose: Sequence number of this dose for the vaccine.
        offset_type: One of the OffsetType values. Kept as a plain string so
            that unknown units from external data can be represented.
        age_in_weeks: Offset magnitude. Always expressed in weeks, even for
            month and year offsets.
    """

    name: str
    dose: int = 1
    offset_type: str = OffsetType.BIRTH.value
    age_in_weeks: float = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VaccineDefinition":
        """Create from a vaccines.json entry."""
        return cls(
            name=data["name"],
            dose=int(data.get("dose", 1)),
            offset_type=str(data.get("type", OffsetType.BIRTH.value)),
            age_in_weeks=data.get("age_in_weeks", 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dose": self.dose,
            "type": self.offset_type,
            "age_in_weeks": self.age_in_weeks,
        }


def load_vaccines(path: Path | None = None) -> list[VaccineDefinition]:
    """Load vaccine definitions from a JSON file.

    Args:
        path: JSON file with a list of vaccine entries. Defaults to the
            bundled South African schedule.

    Returns:
        List of vaccine definitions in file order.
    """
    path = path or BUNDLED_VACCINES_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [VaccineDefinition.from_dict(item) for item in data]
