"""
Entry service - daily questionnaire submission and lookup
"""
from datetime import date, datetime, timezone
from typing import List, Optional

from src.database.repository import Repository
from src.models.schemas import OTHER_CAUSE, Entry, Participant, QuestionnairePayload
from src.services.day_status import DayStatus, day_status
from src.services.errors import NotFoundError, ValidationError
from src.utils.validators import validate_day


class EntryService:
    """Service for questionnaire entries"""

    @staticmethod
    def build_entry(participant_code: str, day: int, payload: QuestionnairePayload, submitted_at: datetime) -> Entry:
        """
        Turn questionnaire answers into a complete Entry

        Answers hidden behind a "no" (odor details when has_odor is not
        True, severities when has_symptoms is not True) are cleared so no
        stale value is stored. other_cause is kept only with "Autre".
        """
        values = payload.model_dump()

        if values["has_odor"] is not True:
            values["odor_intensity"] = None
            values["odor_causes"] = []
        if OTHER_CAUSE not in values["odor_causes"]:
            values["other_cause"] = None
        elif values["other_cause"] is not None:
            values["other_cause"] = values["other_cause"].strip() or None

        if values["has_symptoms"] is not True:
            for field in ("itching", "irritation", "redness", "dryness"):
                values[field] = None

        return Entry(
            participant_code=participant_code,
            day=day,
            date=submitted_at,
            status="complete",
            **values,
        )

    @staticmethod
    async def submit_entry(
        repository: Repository,
        participant: Participant,
        day: int,
        payload: QuestionnairePayload,
        today: date,
        submitted_at: Optional[datetime] = None,
    ) -> Entry:
        """
        Save the questionnaire for one study day (replaces any earlier answer)

        Raises:
            ValidationError: Day outside 1..28 or not yet open
            PersistenceError: Backend failure
        """
        validate_day(day)
        existing = await repository.list_entries(participant.code)
        status = day_status(day, participant.start_date, today, existing)
        if status == DayStatus.FUTURE:
            raise ValidationError(f"Day {day} is not open yet")

        entry = EntryService.build_entry(
            participant.code,
            day,
            payload,
            submitted_at or datetime.now(timezone.utc),
        )
        saved = await repository.upsert_entry(entry)
        print(f"Entry saved for participant {participant.code}, day {day} (was {status.value})")
        return saved

    @staticmethod
    async def get_entry(repository: Repository, participant_code: str, day: int) -> Entry:
        """
        Raises:
            ValidationError: Day outside 1..28
            NotFoundError: No entry for this day
        """
        validate_day(day)
        for entry in await repository.list_entries(participant_code):
            if entry.day == day:
                return entry
        raise NotFoundError(f"No entry for day {day}")

    @staticmethod
    async def list_entries(repository: Repository, participant_code: Optional[str] = None) -> List[Entry]:
        entries = await repository.list_entries(participant_code)
        return sorted(entries, key=lambda e: (e.participant_code, e.day))
