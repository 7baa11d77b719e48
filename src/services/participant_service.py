"""
Participant service - business logic for participant operations
"""
from typing import Dict

from src.config import settings
from src.database.repository import Repository
from src.models.schemas import Participant, ParticipantCreate
from src.services.errors import DuplicateError, NotFoundError
from src.services.study_service import StudyService
from src.utils.validators import is_valid_participant_code, validate_participant_code

INVALID_CODE_MESSAGE = "Code invalide. Vérifiez votre code à 4 chiffres."


class ParticipantService:
    """Service for participant-related operations"""

    @staticmethod
    async def login(repository: Repository, code: str, admin_code: str) -> Dict:
        """
        Resolve a login code

        Args:
            repository: Repository
            code: Code typed on the login screen
            admin_code: Code that opens the admin panel

        Returns:
            {"role": "admin"} or {"role": "participant", "participant": Participant}

        Raises:
            NotFoundError: For unknown and malformed codes alike
        """
        code = (code or "").strip()
        if admin_code and code == admin_code:
            return {"role": "admin"}

        if not is_valid_participant_code(code):
            raise NotFoundError(INVALID_CODE_MESSAGE)
        try:
            participant = await repository.find_participant_by_code(code)
        except NotFoundError:
            raise NotFoundError(INVALID_CODE_MESSAGE)
        return {"role": "participant", "participant": participant}

    @staticmethod
    async def get_participant(repository: Repository, code: str) -> Participant:
        """
        Get participant by code, with start date resolved

        Raises:
            ValidationError: Malformed code
            NotFoundError: Unknown code
        """
        code = validate_participant_code(code)
        participant = await repository.find_participant_by_code(code)
        if participant.start_date is None:
            study_settings = await StudyService.load_settings(repository)
            participant = participant.model_copy(update={"start_date": study_settings.study_start_date})
        return participant

    @staticmethod
    async def create_participant(repository: Repository, payload: ParticipantCreate) -> Participant:
        """
        Create a participant from the admin form

        Raises:
            ValidationError: Code is not exactly 4 digits
            DuplicateError: Code already used, or the admin code
            PersistenceError: Backend failure
        """
        code = validate_participant_code(payload.code)
        if code == settings.ADMIN_CODE:
            # Login would open the admin panel instead of this participant
            raise DuplicateError("Ce code existe déjà")

        try:
            await repository.find_participant_by_code(code)
        except NotFoundError:
            pass
        else:
            raise DuplicateError("Ce code existe déjà")

        start_date = payload.start_date
        if start_date is None:
            start_date = (await StudyService.load_settings(repository)).study_start_date

        participant = Participant(
            code=code,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            email=payload.email.strip(),
            phone=payload.phone.strip(),
            start_date=start_date,
        )
        created = await repository.create_participant(participant)
        print(f"Participant {code} created (start {start_date.isoformat()})")
        return created

    @staticmethod
    async def delete_participant(repository: Repository, code: str) -> None:
        """
        Delete a participant and all of their entries

        Raises:
            ValidationError: Malformed code
            NotFoundError: Unknown code
        """
        code = validate_participant_code(code)
        await repository.delete_participant(code)
        print(f"Participant {code} deleted with their entries")
