"""
Day status calculator for the 28-day participant calendar.

Everything here is pure: callers pass ``today`` explicitly so the calendar
can be computed for any date.
"""
import math
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional

from src.models.schemas import Entry
from src.utils.validators import STUDY_DAYS

FRENCH_MONTHS_SHORT = [
    "janv.", "févr.", "mars", "avr.", "mai", "juin",
    "juil.", "août", "sept.", "oct.", "nov.", "déc.",
]


class DayStatus(str, Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    MISSED = "missed"
    FUTURE = "future"


def round_half_up(value: float) -> int:
    """Nearest integer with .5 rounded up (round() would give 2 for 2.5)"""
    return int(math.floor(value + 0.5))


def days_since_start(start_date: date, today: date) -> int:
    """Study day number of ``today``; 1 on the start date itself"""
    return (today - start_date).days + 1


def date_for_day(start_date: date, day: int) -> date:
    """Calendar date of a study day"""
    return start_date + timedelta(days=day - 1)


def day_label(day_date: date) -> str:
    """Short French label, e.g. '6 déc.'"""
    return f"{day_date.day} {FRENCH_MONTHS_SHORT[day_date.month - 1]}"


def completed_day_numbers(entries: Iterable[Entry]) -> set:
    return {entry.day for entry in entries if entry.status == "complete"}


def day_status(day: int, start_date: date, today: date, entries: Iterable[Entry]) -> DayStatus:
    """
    Classify one study day

    A complete entry wins over the date arithmetic, so a day submitted
    ahead of time still reads as completed.
    """
    return _classify(day, days_since_start(start_date, today), completed_day_numbers(entries))


def _classify(day: int, current_day: int, completed: set) -> DayStatus:
    if day in completed:
        return DayStatus.COMPLETED
    if day > current_day:
        return DayStatus.FUTURE
    if day == current_day:
        return DayStatus.CURRENT
    return DayStatus.MISSED


def is_interactive(status: DayStatus) -> bool:
    """Whether the questionnaire can be opened for a day in this state"""
    return status != DayStatus.FUTURE


def completed_days(entries: Iterable[Entry]) -> int:
    return sum(1 for entry in entries if entry.status == "complete")


def completion_percent(completed: int, total_days: int = STUDY_DAYS) -> int:
    if total_days <= 0:
        return 0
    return round_half_up(completed / total_days * 100)


def build_calendar(start_date: date, today: date, entries: List[Entry]) -> Dict:
    """
    Build the 28 calendar cells and progress summary for one participant

    Args:
        start_date: Participant's day 1
        today: Reference date
        entries: Entries of this participant only

    Returns:
        Dict with "days" (one cell per study day) and "progress"
    """
    completed = completed_day_numbers(entries)
    by_day: Dict[int, Entry] = {entry.day: entry for entry in entries}
    current_day = days_since_start(start_date, today)

    days = []
    for day in range(1, STUDY_DAYS + 1):
        status = _classify(day, current_day, completed)
        day_date = date_for_day(start_date, day)
        days.append({
            "day": day,
            "date": day_date.isoformat(),
            "label": day_label(day_date),
            "status": status.value,
            "interactive": is_interactive(status),
            "has_entry": day in by_day,
        })

    done = completed_days(entries)
    current: Optional[int] = current_day if 1 <= current_day <= STUDY_DAYS else None
    return {
        "days": days,
        "progress": {
            "completed_days": done,
            "total_days": STUDY_DAYS,
            "completion_percent": completion_percent(done),
            "days_since_start": current_day,
            "current_day": current,
        },
    }
