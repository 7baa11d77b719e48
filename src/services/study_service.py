"""
Study service - data loading and aggregate statistics
"""
from typing import Dict, List, Tuple

from pydantic import ValidationError as RecordValidationError

from src.database.repository import Repository
from src.models.schemas import Entry, Participant, StudySettings
from src.services.day_status import completed_days, completion_percent, round_half_up
from src.services.errors import LogbookError
from src.utils.validators import STUDY_DAYS


class StudyService:
    """Service for study-wide reads"""

    @staticmethod
    async def load_settings(repository: Repository) -> StudySettings:
        """
        Load study settings, falling back to defaults if the backend fails

        Returns:
            StudySettings (never None)
        """
        try:
            return await repository.get_settings()
        except (LogbookError, RecordValidationError) as e:
            print(f"Warning: Failed to load settings, using defaults: {e}")
            return StudySettings()

    @staticmethod
    async def load_study_data(repository: Repository) -> Tuple[List[Participant], List[Entry], StudySettings]:
        """
        Load participants, entries and settings for a dashboard

        Each collection degrades on its own: a failed participant load
        yields [], a failed entry load yields [], failed settings yield
        defaults. The page still renders.
        """
        try:
            participants = await repository.list_participants()
        except (LogbookError, RecordValidationError) as e:
            print(f"Warning: Failed to load participants: {e}")
            participants = []

        try:
            entries = await repository.list_entries()
        except (LogbookError, RecordValidationError) as e:
            print(f"Warning: Failed to load entries: {e}")
            entries = []

        study_settings = await StudyService.load_settings(repository)
        return participants, entries, study_settings

    @staticmethod
    def compute_stats(participants: List[Participant], entries: List[Entry]) -> Dict:
        """
        Admin dashboard statistics

        Entries whose participant is no longer on the roster are left out
        of every figure.
        """
        codes = {p.code for p in participants}
        rostered = [e for e in entries if e.participant_code in codes]
        active_codes = {e.participant_code for e in rostered}

        completion_rate = 0
        if participants:
            complete = completed_days(rostered)
            completion_rate = round_half_up(complete / (len(participants) * STUDY_DAYS) * 100)

        return {
            "total_participants": len(participants),
            "active_participants": len(active_codes),
            "total_entries": len(rostered),
            "completion_rate": completion_rate,
        }

    @staticmethod
    def participant_progress(participants: List[Participant], entries: List[Entry]) -> List[Dict]:
        """Roster rows with each participant's completed day count"""
        by_code: Dict[str, List[Entry]] = {}
        for entry in entries:
            by_code.setdefault(entry.participant_code, []).append(entry)

        rows = []
        for participant in participants:
            done = completed_days(by_code.get(participant.code, []))
            row = participant.model_dump(mode="json")
            row.update({
                "completed_days": done,
                "total_days": STUDY_DAYS,
                "progress_percent": completion_percent(done),
            })
            rows.append(row)
        return rows
