"""
Weight entry validation.

Each check returns a ``FieldCheck``: either the parsed value or one of the
enumerated ``WeightErrorKind`` values. The service turns a failed check into
a ``WeightEntryError`` that the endpoint formats for the client.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from fastapi import status

from app.schemas.weight import WeightEntrySubmission

MAX_WEIGHT_KG = 1000
MAX_HEIGHT_CM = 300
MAX_BMI = 100

REQUIRED_FIELDS = ("weight", "height", "bmi", "date")

_DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

# Extended calendar date, optionally followed by an ISO time part
_ISO_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}(?:[T ].+)?$")


class WeightErrorKind(str, Enum):
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVALID_WEIGHT = "INVALID_WEIGHT"
    INVALID_HEIGHT = "INVALID_HEIGHT"
    INVALID_BMI = "INVALID_BMI"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    FUTURE_DATE_NOT_ALLOWED = "FUTURE_DATE_NOT_ALLOWED"
    WEIGHT_ENTRY_FAILED = "WEIGHT_ENTRY_FAILED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


ERROR_MESSAGES = {
    WeightErrorKind.MISSING_REQUIRED_FIELDS: "All fields (weight, height, bmi, date) are required.",
    WeightErrorKind.USER_NOT_FOUND: "User not found.",
    WeightErrorKind.INVALID_WEIGHT: "Weight must be a valid positive number between 1 and 1000 kg.",
    WeightErrorKind.INVALID_HEIGHT: "Height must be a valid positive number between 1 and 300 cm.",
    WeightErrorKind.INVALID_BMI: "BMI must be a valid positive number between 1 and 100.",
    WeightErrorKind.INVALID_DATE_FORMAT: "Please provide a valid date.",
    WeightErrorKind.FUTURE_DATE_NOT_ALLOWED: "Date cannot be in the future.",
    WeightErrorKind.WEIGHT_ENTRY_FAILED: "Failed to add weight entry.",
    WeightErrorKind.INTERNAL_SERVER_ERROR: "Internal server error. Please try again later.",
}

ERROR_STATUS_CODES = {
    WeightErrorKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    WeightErrorKind.INTERNAL_SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class WeightEntryError(Exception):
    """A weight submission that cannot be stored, tagged with its error kind."""

    def __init__(self, kind: WeightErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or ERROR_MESSAGES[kind]
        self.status_code = ERROR_STATUS_CODES.get(kind, status.HTTP_400_BAD_REQUEST)
        super().__init__(self.message)


@dataclass(frozen=True)
class FieldCheck:
    value: Any = None
    error: Optional[WeightErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ValidatedMeasurements:
    date: date
    weight: float
    height: float
    bmi: float


def is_missing(value: Any) -> bool:
    """Absent means None or a blank string; numeric zero is present."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def has_missing_fields(submission: Optional[WeightEntrySubmission]) -> bool:
    if submission is None:
        return True
    return any(is_missing(getattr(submission, field)) for field in REQUIRED_FIELDS)


def to_number(value: Any) -> Optional[float]:
    """Finite float from a JSON number or a decimal string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # integers beyond float range
            return None
    elif isinstance(value, str) and _DECIMAL_PATTERN.match(value.strip()):
        number = float(value.strip())
    else:
        return None
    return number if math.isfinite(number) else None


def check_bounded_number(value: Any, upper: float, kind: WeightErrorKind) -> FieldCheck:
    """Accept numbers in the half-open range (0, upper]."""
    number = to_number(value)
    if number is None or number <= 0 or number > upper:
        return FieldCheck(error=kind)
    return FieldCheck(value=number)


def parse_calendar_date(value: Any) -> FieldCheck:
    """ISO ``YYYY-MM-DD``, or an ISO datetime whose calendar date is used."""
    if isinstance(value, datetime):
        return FieldCheck(value=value.date())
    if isinstance(value, date):
        return FieldCheck(value=value)
    if not isinstance(value, str):
        return FieldCheck(error=WeightErrorKind.INVALID_DATE_FORMAT)

    text = value.strip()
    if not _ISO_DATE_PATTERN.match(text):
        return FieldCheck(error=WeightErrorKind.INVALID_DATE_FORMAT)
    try:
        if len(text) == 10:
            return FieldCheck(value=date.fromisoformat(text))
        return FieldCheck(value=datetime.fromisoformat(text).date())
    except ValueError:
        return FieldCheck(error=WeightErrorKind.INVALID_DATE_FORMAT)


def check_entry_date(value: Any, today: date) -> FieldCheck:
    parsed = parse_calendar_date(value)
    if not parsed.ok:
        return parsed
    if parsed.value > today:
        return FieldCheck(error=WeightErrorKind.FUTURE_DATE_NOT_ALLOWED)
    return parsed


def validate_measurements(submission: WeightEntrySubmission, today: date) -> FieldCheck:
    """
    Range and date checks, in order: weight, height, bmi, date format,
    future date. The first failing check decides the error kind.
    """
    weight = check_bounded_number(submission.weight, MAX_WEIGHT_KG, WeightErrorKind.INVALID_WEIGHT)
    if not weight.ok:
        return weight

    height = check_bounded_number(submission.height, MAX_HEIGHT_CM, WeightErrorKind.INVALID_HEIGHT)
    if not height.ok:
        return height

    bmi = check_bounded_number(submission.bmi, MAX_BMI, WeightErrorKind.INVALID_BMI)
    if not bmi.ok:
        return bmi

    entry_date = check_entry_date(submission.date, today)
    if not entry_date.ok:
        return entry_date

    return FieldCheck(
        value=ValidatedMeasurements(
            date=entry_date.value,
            weight=weight.value,
            height=height.value,
            bmi=bmi.value,
        )
    )
