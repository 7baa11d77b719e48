"""
Participant calendar and daily questionnaire endpoints
"""
from datetime import date

from fastapi import APIRouter, Depends

from src.database.connection import get_repository
from src.database.repository import Repository
from src.models.schemas import ODOR_CAUSES, OTHER_CAUSE, Participant, QuestionnairePayload
from src.routes.dependencies import current_participant
from src.services.day_status import build_calendar
from src.services.entry_service import EntryService
from src.services.errors import LogbookError
from src.services.study_service import StudyService
from src.utils.responses import internal_error_response, logbook_error_response

router = APIRouter()


@router.get("/questionnaire/options")
async def get_questionnaire_options():
    """Odor cause vocabulary shown on the daily questionnaire"""
    return {"status": "ok", "odor_causes": ODOR_CAUSES, "other_cause": OTHER_CAUSE}


@router.get("/me/calendar")
async def get_calendar(
    participant: Participant = Depends(current_participant),
    repository: Repository = Depends(get_repository),
):
    """
    28-day calendar for the logged-in participant.
    Each day is completed, current, missed or future; future days cannot be opened.
    """
    try:
        entries = await repository.list_entries(participant.code)
        study_settings = await StudyService.load_settings(repository)
        calendar = build_calendar(participant.start_date, date.today(), entries)
        return {
            "status": "ok",
            "participant": participant.model_dump(mode="json"),
            "show_progress_bar": study_settings.show_progress_bar,
            **calendar,
        }
    except LogbookError as e:
        return logbook_error_response(e, "getCalendar")
    except Exception as e:
        return internal_error_response(e, "getCalendar")


@router.get("/me/entries/{day}")
async def get_entry(
    day: int,
    participant: Participant = Depends(current_participant),
    repository: Repository = Depends(get_repository),
):
    """Saved answers for one day, used to prefill the questionnaire"""
    try:
        entry = await EntryService.get_entry(repository, participant.code, day)
        return {"status": "ok", "entry": entry.model_dump(mode="json")}
    except LogbookError as e:
        return logbook_error_response(e, "getEntry")
    except Exception as e:
        return internal_error_response(e, "getEntry")


@router.post("/me/entries/{day}")
async def submit_entry(
    day: int,
    payload: QuestionnairePayload,
    participant: Participant = Depends(current_participant),
    repository: Repository = Depends(get_repository),
):
    """Submit (or resubmit) the questionnaire for one study day"""
    try:
        entry = await EntryService.submit_entry(repository, participant, day, payload, date.today())
        return {"status": "ok", "entry": entry.model_dump(mode="json")}
    except LogbookError as e:
        return logbook_error_response(e, "submitEntry")
    except Exception as e:
        return internal_error_response(e, "submitEntry")
