"""
Login endpoint
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.config import settings
from src.database.connection import get_repository
from src.database.repository import Repository
from src.models.schemas import LoginPayload
from src.services.errors import LogbookError, NotFoundError
from src.services.participant_service import ParticipantService
from src.utils.responses import internal_error_response, logbook_error_response

router = APIRouter()


@router.post("/login")
async def login(payload: LoginPayload, repository: Repository = Depends(get_repository)):
    """
    Log in with a 4-digit code.
    The admin code opens the admin panel; any other code must belong to a participant.
    """
    try:
        result = await ParticipantService.login(repository, payload.code, settings.ADMIN_CODE)
        if result["role"] == "admin":
            return {"status": "ok", "role": "admin"}
        return {
            "status": "ok",
            "role": "participant",
            "participant": result["participant"].model_dump(mode="json"),
        }
    except NotFoundError as e:
        return JSONResponse(status_code=401, content={"status": "error", "detail": str(e)})
    except LogbookError as e:
        return logbook_error_response(e, "login")
    except Exception as e:
        return internal_error_response(e, "login")
