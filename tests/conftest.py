"""
Shared fixtures: sample participants, entries and an in-memory repository
"""
from datetime import date, datetime, timezone

import pytest

from src.database.repository import InMemoryRepository
from src.models.schemas import Entry, Participant, StudySettings
from src.services.errors import PersistenceError


def make_participant(code="1234", first_name="Marie", start_date=date(2025, 12, 6), **kwargs):
    return Participant(
        code=code,
        first_name=first_name,
        last_name=kwargs.pop("last_name", "Dupont"),
        email=kwargs.pop("email", "marie@example.com"),
        phone=kwargs.pop("phone", "0612345678"),
        start_date=start_date,
        **kwargs,
    )


def make_entry(code="1234", day=1, status="complete", submitted_at=None, **answers):
    return Entry(
        participant_code=code,
        day=day,
        date=submitted_at or datetime(2025, 12, 6, 9, 30, tzinfo=timezone.utc),
        status=status,
        **answers,
    )


class BrokenRepository(InMemoryRepository):
    """Every read and write fails like an unreachable backend"""

    async def list_participants(self):
        raise PersistenceError("list_participants failed: ConnectionError")

    async def list_entries(self, participant_code=None):
        raise PersistenceError("list_entries failed: ConnectionError")

    async def get_settings(self):
        raise PersistenceError("get_settings failed: ConnectionError")

    async def create_participant(self, participant):
        raise PersistenceError("create_participant failed: ConnectionError")


class CorruptSettingsRepository(InMemoryRepository):
    """Stored settings hold a value the settings model rejects"""

    async def get_settings(self):
        return StudySettings(study_start_date="")


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def marie():
    return make_participant()
