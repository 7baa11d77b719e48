"""
Persistence contract for participants, entries and study settings.

Services only ever talk to a ``Repository`` instance handed to them; the
application keeps one on ``app.state`` and routes receive it through the
``get_repository`` dependency.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from src.models.schemas import Entry, Participant, SettingsPatch, StudySettings
from src.services.errors import DuplicateError, NotFoundError


class Repository(ABC):
    """Operations the logbook needs from its row store"""

    name = "abstract"

    @abstractmethod
    async def list_participants(self) -> List[Participant]:
        ...

    @abstractmethod
    async def find_participant_by_code(self, code: str) -> Participant:
        """Raises NotFoundError when no participant has this code"""

    @abstractmethod
    async def create_participant(self, participant: Participant) -> Participant:
        """Raises DuplicateError when the code is already taken"""

    @abstractmethod
    async def delete_participant(self, code: str) -> None:
        """Delete a participant together with all of their entries"""

    @abstractmethod
    async def list_entries(self, participant_code: Optional[str] = None) -> List[Entry]:
        ...

    @abstractmethod
    async def upsert_entry(self, entry: Entry) -> Entry:
        """Insert or replace the entry for (participant_code, day)"""

    @abstractmethod
    async def get_settings(self) -> StudySettings:
        """Stored settings merged over defaults"""

    @abstractmethod
    async def update_settings(self, patch: SettingsPatch) -> StudySettings:
        ...


class InMemoryRepository(Repository):
    """Repository kept in process memory (demo mode and tests)"""

    name = "memory"

    def __init__(self, participants: Optional[List[Participant]] = None,
                 entries: Optional[List[Entry]] = None,
                 study_settings: Optional[StudySettings] = None):
        self.participants: Dict[str, Participant] = {}
        self.entries: Dict[Tuple[str, int], Entry] = {}
        self.settings_overrides: dict = {}

        for participant in participants or []:
            self.participants[participant.code] = participant
        for entry in entries or []:
            self.entries[(entry.participant_code, entry.day)] = entry
        if study_settings is not None:
            self.settings_overrides = study_settings.model_dump()

    async def list_participants(self) -> List[Participant]:
        # Newest first, like the SQL ordering on created_at
        return [p.model_copy() for p in reversed(list(self.participants.values()))]

    async def find_participant_by_code(self, code: str) -> Participant:
        participant = self.participants.get(code)
        if participant is None:
            raise NotFoundError("Participant not found")
        return participant.model_copy()

    async def create_participant(self, participant: Participant) -> Participant:
        if participant.code in self.participants:
            raise DuplicateError(f"Participant code {participant.code} already exists")
        self.participants[participant.code] = participant.model_copy()
        return participant.model_copy()

    async def delete_participant(self, code: str) -> None:
        if code not in self.participants:
            raise NotFoundError("Participant not found")
        del self.participants[code]
        for key in [key for key in self.entries if key[0] == code]:
            del self.entries[key]

    async def list_entries(self, participant_code: Optional[str] = None) -> List[Entry]:
        entries = [
            entry.model_copy(deep=True)
            for entry in self.entries.values()
            if participant_code is None or entry.participant_code == participant_code
        ]
        entries.sort(key=lambda e: e.date, reverse=True)
        return entries

    async def upsert_entry(self, entry: Entry) -> Entry:
        self.entries[(entry.participant_code, entry.day)] = entry.model_copy(deep=True)
        return entry.model_copy(deep=True)

    async def get_settings(self) -> StudySettings:
        return StudySettings(**self.settings_overrides)

    async def update_settings(self, patch: SettingsPatch) -> StudySettings:
        self.settings_overrides.update(patch.model_dump(exclude_none=True))
        return await self.get_settings()
