"""
Tests for participant, entry and study services against the in-memory repository
"""
import asyncio
from datetime import date, datetime, timezone

import pytest

from conftest import BrokenRepository, CorruptSettingsRepository, make_entry, make_participant
from src.config import settings
from src.database.repository import InMemoryRepository
from src.models.schemas import ParticipantCreate, QuestionnairePayload, SettingsPatch, StudySettings
from src.services.entry_service import EntryService
from src.services.errors import DuplicateError, NotFoundError, ValidationError
from src.services.participant_service import ParticipantService
from src.services.study_service import StudyService

START = date(2025, 12, 6)


def run(coro):
    return asyncio.run(coro)


# Participants

def test_create_participant_defaults_start_date_to_study_setting():
    repository = InMemoryRepository(study_settings=StudySettings(study_start_date=date(2026, 1, 5)))
    created = run(ParticipantService.create_participant(repository, ParticipantCreate(code="4321", first_name=" Lina ")))
    assert created.start_date == date(2026, 1, 5)
    assert created.first_name == "Lina"


@pytest.mark.parametrize("code", ["123", "12345", "12a4", ""])
def test_create_participant_rejects_malformed_code(repository, code):
    with pytest.raises(ValidationError):
        run(ParticipantService.create_participant(repository, ParticipantCreate(code=code)))
    assert repository.participants == {}


def test_create_participant_rejects_duplicate(marie):
    repository = InMemoryRepository(participants=[marie])
    with pytest.raises(DuplicateError):
        run(ParticipantService.create_participant(repository, ParticipantCreate(code="1234")))


def test_create_participant_rejects_admin_code(repository):
    with pytest.raises(DuplicateError):
        run(ParticipantService.create_participant(repository, ParticipantCreate(code=settings.ADMIN_CODE)))
    assert repository.participants == {}


def test_delete_participant_cascades_to_entries(marie):
    other = make_participant(code="5678")
    repository = InMemoryRepository(
        participants=[marie, other],
        entries=[make_entry(day=1), make_entry(day=2), make_entry(code="5678", day=1)],
    )
    run(ParticipantService.delete_participant(repository, "1234"))

    assert list(repository.participants) == ["5678"]
    assert list(repository.entries) == [("5678", 1)]


def test_delete_unknown_participant(repository):
    with pytest.raises(NotFoundError):
        run(ParticipantService.delete_participant(repository, "0000"))


def test_login_roles(marie):
    repository = InMemoryRepository(participants=[marie])
    assert run(ParticipantService.login(repository, "9999", "9999")) == {"role": "admin"}

    result = run(ParticipantService.login(repository, " 1234 ", "9999"))
    assert result["role"] == "participant"
    assert result["participant"].first_name == "Marie"


@pytest.mark.parametrize("code", ["0000", "12", "abcd", ""])
def test_login_unknown_and_malformed_codes_look_the_same(marie, code):
    repository = InMemoryRepository(participants=[marie])
    with pytest.raises(NotFoundError) as excinfo:
        run(ParticipantService.login(repository, code, "9999"))
    assert "Code invalide" in str(excinfo.value)


def test_get_participant_fills_missing_start_date():
    repository = InMemoryRepository(participants=[make_participant(start_date=None)])
    participant = run(ParticipantService.get_participant(repository, "1234"))
    assert participant.start_date == StudySettings().study_start_date


# Entries

def test_build_entry_clears_gated_answers():
    payload = QuestionnairePayload(
        has_odor=False,
        odor_intensity=6,
        odor_causes=["Autre"],
        other_cause="casque",
        has_symptoms=None,
        itching=3,
        washed_hair=True,
    )
    entry = EntryService.build_entry("1234", 2, payload, datetime(2025, 12, 7, tzinfo=timezone.utc))

    assert entry.status == "complete"
    assert entry.odor_intensity is None
    assert entry.odor_causes == []
    assert entry.other_cause is None
    assert entry.itching is None
    assert entry.washed_hair is True


def test_build_entry_keeps_other_cause_only_with_autre():
    submitted = datetime(2025, 12, 7, tzinfo=timezone.utc)
    with_other = EntryService.build_entry(
        "1234", 1,
        QuestionnairePayload(has_odor=True, odor_intensity=4, odor_causes=["Autre"], other_cause=" casque "),
        submitted,
    )
    without_other = EntryService.build_entry(
        "1234", 1,
        QuestionnairePayload(has_odor=True, odor_intensity=4, odor_causes=["Excès de sébum"], other_cause="casque"),
        submitted,
    )
    assert with_other.other_cause == "casque"
    assert without_other.other_cause is None


def test_unknown_cause_is_rejected():
    with pytest.raises(ValueError):
        QuestionnairePayload(odor_causes=["Pollution"])


def test_submit_entry_upserts(marie):
    repository = InMemoryRepository(participants=[marie])
    today = date(2025, 12, 8)

    run(EntryService.submit_entry(repository, marie, 1, QuestionnairePayload(has_odor=True, odor_intensity=3), today))
    run(EntryService.submit_entry(repository, marie, 1, QuestionnairePayload(has_odor=True, odor_intensity=8), today))

    assert len(repository.entries) == 1
    assert repository.entries[("1234", 1)].odor_intensity == 8


def test_submit_entry_missed_day_is_allowed(marie):
    repository = InMemoryRepository(participants=[marie])
    entry = run(EntryService.submit_entry(repository, marie, 1, QuestionnairePayload(), date(2025, 12, 20)))
    assert entry.day == 1


def test_submit_entry_future_day_is_rejected(marie):
    repository = InMemoryRepository(participants=[marie])
    with pytest.raises(ValidationError):
        run(EntryService.submit_entry(repository, marie, 5, QuestionnairePayload(), START))


@pytest.mark.parametrize("day", [0, 29, -1])
def test_submit_entry_day_out_of_range(marie, day):
    with pytest.raises(ValidationError):
        run(EntryService.submit_entry(InMemoryRepository(), marie, day, QuestionnairePayload(), START))


def test_get_entry(marie):
    repository = InMemoryRepository(participants=[marie], entries=[make_entry(day=3, washed_hair=True)])
    assert run(EntryService.get_entry(repository, "1234", 3)).washed_hair is True
    with pytest.raises(NotFoundError):
        run(EntryService.get_entry(repository, "1234", 4))


# Study

def test_stats_exclude_orphaned_entries(marie):
    participants = [marie, make_participant(code="5678")]
    entries = [
        make_entry(day=1),
        make_entry(day=2),
        make_entry(day=3, status="draft"),
        make_entry(code="4321", day=1),  # participant deleted without cascade
    ]
    stats = StudyService.compute_stats(participants, entries)

    assert stats == {
        "total_participants": 2,
        "active_participants": 1,
        "total_entries": 3,
        "completion_rate": 4,  # 2 / 56
    }


def test_stats_with_empty_roster():
    stats = StudyService.compute_stats([], [make_entry()])
    assert stats["completion_rate"] == 0
    assert stats["total_entries"] == 0


def test_participant_progress(marie):
    rows = StudyService.participant_progress([marie], [make_entry(day=d) for d in range(1, 15)])
    assert rows[0]["code"] == "1234"
    assert rows[0]["completed_days"] == 14
    assert rows[0]["progress_percent"] == 50


def test_load_study_data_degrades_to_defaults():
    participants, entries, study_settings = run(StudyService.load_study_data(BrokenRepository()))
    assert participants == []
    assert entries == []
    assert study_settings == StudySettings()


def test_corrupt_stored_settings_fall_back_to_defaults(marie):
    repository = CorruptSettingsRepository(participants=[marie])
    assert run(StudyService.load_settings(repository)) == StudySettings()

    participants, _, study_settings = run(StudyService.load_study_data(repository))
    assert [p.code for p in participants] == ["1234"]
    assert study_settings.study_start_date == START


def test_settings_patch_merges(repository):
    updated = run(repository.update_settings(SettingsPatch(company_name="Lab Test", show_progress_bar=False)))
    assert updated.company_name == "Lab Test"
    assert updated.show_progress_bar is False
    assert updated.primary_color == "#3b82f6"

    again = run(repository.update_settings(SettingsPatch(primary_color="#000000")))
    assert again.company_name == "Lab Test"
