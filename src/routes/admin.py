"""
Admin dashboard endpoints: statistics, collected data, export, settings
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from src.database.connection import get_repository
from src.database.repository import Repository
from src.models.schemas import SettingsPatch
from src.routes.dependencies import require_admin
from src.services.csv_transcoder import count_exportable, export_entries_csv, export_filename
from src.services.entry_service import EntryService
from src.services.errors import LogbookError
from src.services.study_service import StudyService
from src.utils.responses import internal_error_response, logbook_error_response

router = APIRouter()


@router.get("/settings")
async def get_settings(repository: Repository = Depends(get_repository)):
    """Study settings (defaults when nothing is stored or the backend fails)"""
    study_settings = await StudyService.load_settings(repository)
    return {"status": "ok", "settings": study_settings.model_dump(mode="json")}


@router.patch("/admin/settings", dependencies=[Depends(require_admin)])
async def update_settings(patch: SettingsPatch, repository: Repository = Depends(get_repository)):
    """Update some study settings; omitted fields keep their value"""
    try:
        study_settings = await repository.update_settings(patch)
        return {"status": "ok", "settings": study_settings.model_dump(mode="json")}
    except LogbookError as e:
        return logbook_error_response(e, "updateSettings")
    except Exception as e:
        return internal_error_response(e, "updateSettings")


@router.get("/admin/stats", dependencies=[Depends(require_admin)])
async def get_stats(repository: Repository = Depends(get_repository)):
    """
    Dashboard counters: participants, active participants, entries and
    completion rate over participants x 28 days.
    """
    try:
        participants, entries, _ = await StudyService.load_study_data(repository)
        return {"status": "ok", **StudyService.compute_stats(participants, entries)}
    except Exception as e:
        return internal_error_response(e, "getStats")


@router.get("/admin/entries", dependencies=[Depends(require_admin)])
async def get_entries(
    participant_code: Optional[str] = Query(None, description="Only this participant"),
    repository: Repository = Depends(get_repository),
):
    """Collected entries, ordered by participant and day"""
    try:
        entries = await EntryService.list_entries(repository, participant_code)
        return {"status": "ok", "entries": [e.model_dump(mode="json") for e in entries]}
    except LogbookError as e:
        return logbook_error_response(e, "getEntries")
    except Exception as e:
        return internal_error_response(e, "getEntries")


@router.get("/admin/export", dependencies=[Depends(require_admin)])
async def export_csv(
    participant_code: Optional[str] = Query(None, description="Only this participant"),
    repository: Repository = Depends(get_repository),
):
    """Download complete entries as CSV (UTF-8 with BOM, one row per entry)"""
    try:
        participants = await repository.list_participants()
        entries = await repository.list_entries(participant_code)

        if count_exportable(entries, participant_code) == 0:
            return JSONResponse(
                status_code=404,
                content={"status": "error", "detail": "Aucune donnée à exporter"}
            )

        content = export_entries_csv(entries, participants, participant_code)
        filename = export_filename(date.today())
        return Response(
            content=content.encode("utf-8"),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    except LogbookError as e:
        return logbook_error_response(e, "exportCsv")
    except Exception as e:
        return internal_error_response(e, "exportCsv")
