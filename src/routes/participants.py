"""
Participant roster endpoints for the admin panel
"""
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from src.database.connection import get_repository
from src.database.repository import Repository
from src.models.schemas import CsvImportPayload, ParticipantCreate
from src.routes.dependencies import require_admin
from src.services.csv_transcoder import IMPORT_TEMPLATE_FILENAME, import_participants, import_template
from src.services.errors import LogbookError
from src.services.participant_service import ParticipantService
from src.services.study_service import StudyService
from src.utils.responses import internal_error_response, logbook_error_response

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@router.get("/participants")
async def get_participants(repository: Repository = Depends(get_repository)):
    """
    Roster with each participant's progress (completed days out of 28).
    Degrades to an empty roster if the backend is unreachable.
    """
    try:
        participants, entries, _ = await StudyService.load_study_data(repository)
        return {
            "status": "ok",
            "participants": StudyService.participant_progress(participants, entries),
        }
    except Exception as e:
        return internal_error_response(e, "getParticipants")


@router.post("/participants")
async def create_participant(payload: ParticipantCreate, repository: Repository = Depends(get_repository)):
    """Add one participant; the code must be 4 digits and unused"""
    try:
        participant = await ParticipantService.create_participant(repository, payload)
        return {"status": "ok", "participant": participant.model_dump(mode="json")}
    except LogbookError as e:
        return logbook_error_response(e, "createParticipant")
    except Exception as e:
        return internal_error_response(e, "createParticipant")


@router.delete("/participants/{code}")
async def delete_participant(code: str, repository: Repository = Depends(get_repository)):
    """Delete a participant and every entry they submitted"""
    try:
        await ParticipantService.delete_participant(repository, code)
        return {"status": "ok", "code": code}
    except LogbookError as e:
        return logbook_error_response(e, "deleteParticipant")
    except Exception as e:
        return internal_error_response(e, "deleteParticipant")


@router.post("/participants/import")
async def import_roster(payload: CsvImportPayload, repository: Repository = Depends(get_repository)):
    """
    Bulk-create participants from CSV text.
    Columns: prenom, nom, email, telephone, code[, date_debut]. Every row is attempted.
    """
    try:
        participants, _, study_settings = await StudyService.load_study_data(repository)
        result = await import_participants(
            repository,
            payload.csv_text,
            study_settings.study_start_date,
            [p.code for p in participants],
        )
        return {"status": "ok", **result.model_dump()}
    except LogbookError as e:
        return logbook_error_response(e, "importParticipants")
    except Exception as e:
        return internal_error_response(e, "importParticipants")


@router.get("/participants/import/template")
async def get_import_template():
    """Roster CSV template"""
    return Response(
        content=import_template(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{IMPORT_TEMPLATE_FILENAME}"'},
    )
