"""
Request dependencies: admin check and current participant
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException

from src.config import settings
from src.database.connection import get_repository
from src.database.repository import Repository
from src.models.schemas import Participant
from src.services.errors import LogbookError, PersistenceError
from src.services.participant_service import ParticipantService


async def require_admin(x_admin_code: Optional[str] = Header(None)) -> None:
    """Reject requests without the admin code"""
    if not x_admin_code:
        raise HTTPException(status_code=401, detail="Missing X-Admin-Code header")
    if x_admin_code.strip() != settings.ADMIN_CODE:
        raise HTTPException(status_code=403, detail="Invalid admin code")


async def current_participant(
    x_participant_code: Optional[str] = Header(None),
    repository: Repository = Depends(get_repository),
) -> Participant:
    """Participant identified by the X-Participant-Code header"""
    if not x_participant_code:
        raise HTTPException(status_code=400, detail="Missing X-Participant-Code header")
    try:
        return await ParticipantService.get_participant(repository, x_participant_code)
    except PersistenceError as e:
        print(f"Participant lookup failed: {e}")
        raise HTTPException(status_code=503, detail="Database unavailable")
    except LogbookError:
        # Unknown and malformed codes look the same to the caller
        raise HTTPException(status_code=401, detail="Code invalide")
