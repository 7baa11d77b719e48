"""
Validation utilities
"""
import re
from datetime import date, datetime
from typing import Optional

from src.services.errors import ValidationError

STUDY_DAYS = 28

_CODE_PATTERN = re.compile(r"[0-9]{4}")


def is_valid_participant_code(code: Optional[str]) -> bool:
    """True when code is exactly four ASCII digits"""
    return bool(code) and bool(_CODE_PATTERN.fullmatch(code))


def validate_participant_code(code: Optional[str]) -> str:
    """
    Validate and normalize participant code

    Args:
        code: Participant code to validate

    Returns:
        Normalized participant code

    Raises:
        ValidationError: If code is not exactly 4 digits
    """
    code = (code or "").strip()
    if not is_valid_participant_code(code):
        raise ValidationError("Le code doit contenir 4 chiffres")
    return code


def validate_day(day: int) -> int:
    """
    Validate study day number

    Raises:
        ValidationError: If day is outside 1..28
    """
    if day < 1 or day > STUDY_DAYS:
        raise ValidationError(f"Day must be between 1 and {STUDY_DAYS}")
    return day


def parse_iso_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD string

    Raises:
        ValidationError: If value is not an ISO calendar date
    """
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
