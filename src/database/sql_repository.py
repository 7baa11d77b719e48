"""
Supabase Postgres repository

Tables:
    participants(code PK, first_name, last_name, email, phone, start_date, created_at)
    entries(participant_code, day, entry_date, status, has_odor, odor_intensity,
            odor_causes text[], other_cause, has_symptoms, itching, irritation,
            redness, dryness, washed_hair, UNIQUE (participant_code, day))
    settings(key PK, value jsonb)
"""
import json
import re
from contextlib import asynccontextmanager
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker

from src.database.queries import execute_query
from src.database.repository import Repository
from src.models.schemas import Entry, Participant, SettingsPatch, StudySettings
from src.services.errors import LogbookError, NotFoundError, PersistenceError

SETTINGS_KEY = "study"

_ENTRY_COLUMNS = """
    participant_code, day, entry_date, status,
    has_odor, odor_intensity, odor_causes, other_cause,
    has_symptoms, itching, irritation, redness, dryness,
    washed_hair
"""


def _snake_case(key: str) -> str:
    # Rows written by the web frontend use camelCase keys (studyStartDate)
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _participant_from_row(row) -> Participant:
    return Participant(
        code=row[0],
        first_name=row[1] or "",
        last_name=row[2] or "",
        email=row[3] or "",
        phone=row[4] or "",
        start_date=row[5],
    )


def _entry_from_row(row) -> Entry:
    return Entry(
        participant_code=row[0],
        day=row[1],
        date=row[2],
        status=row[3] or "complete",  # Rows predating the status column
        has_odor=row[4],
        odor_intensity=row[5],
        odor_causes=list(row[6] or []),
        other_cause=row[7],
        has_symptoms=row[8],
        itching=row[9],
        irritation=row[10],
        redness=row[11],
        dryness=row[12],
        washed_hair=row[13],
    )


def _settings_from_rows(rows) -> StudySettings:
    """Merge every (key, value) settings row over the defaults"""
    merged = {}
    for row in rows:
        value = row[1]
        if isinstance(value, str):
            # text() queries skip the JSONB result processor
            value = json.loads(value)
        if isinstance(value, dict):
            merged.update({_snake_case(k): v for k, v in value.items()})
    return StudySettings(**merged)


class SqlRepository(Repository):
    """Repository backed by SQLAlchemy async sessions"""

    name = "postgres"

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    @asynccontextmanager
    async def _transaction(self, operation: str):
        """Session with an open transaction; commit failures surface as PersistenceError"""
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    yield session
        except LogbookError:
            raise
        except Exception as e:
            print(f"Transaction failed in {operation}: {type(e).__name__}: {str(e)[:200]}")
            raise PersistenceError(f"{operation} failed: {type(e).__name__}") from e

    async def list_participants(self) -> List[Participant]:
        async with self._transaction("list_participants") as session:
            result = await execute_query(
                session,
                text("""
                    SELECT code, first_name, last_name, email, phone, start_date
                    FROM participants
                    ORDER BY created_at DESC
                """),
                "list_participants",
            )
            return [_participant_from_row(row) for row in result.fetchall()]

    async def find_participant_by_code(self, code: str) -> Participant:
        async with self._transaction("find_participant_by_code") as session:
            result = await execute_query(
                session,
                text("""
                    SELECT code, first_name, last_name, email, phone, start_date
                    FROM participants
                    WHERE code = :code
                """).bindparams(code=code),
                "find_participant_by_code",
            )
            row = result.first()
            if not row:
                raise NotFoundError("Participant not found")
            return _participant_from_row(row)

    async def create_participant(self, participant: Participant) -> Participant:
        async with self._transaction("create_participant") as session:
            result = await execute_query(
                session,
                text("""
                    INSERT INTO participants (code, first_name, last_name, email, phone, start_date)
                    VALUES (:code, :first_name, :last_name, :email, :phone, :start_date)
                    RETURNING code, first_name, last_name, email, phone, start_date
                """).bindparams(
                    code=participant.code,
                    first_name=participant.first_name,
                    last_name=participant.last_name,
                    email=participant.email,
                    phone=participant.phone,
                    start_date=participant.start_date,
                ),
                "create_participant",
                duplicate_message=f"Participant code {participant.code} already exists",
            )
            return _participant_from_row(result.first())

    async def delete_participant(self, code: str) -> None:
        async with self._transaction("delete_participant") as session:
            await execute_query(
                session,
                text("DELETE FROM entries WHERE participant_code = :code").bindparams(code=code),
                "delete_participant",
            )
            result = await execute_query(
                session,
                text("DELETE FROM participants WHERE code = :code RETURNING code").bindparams(code=code),
                "delete_participant",
            )
            if result.first() is None:
                # Raising inside the transaction rolls back the entry delete too
                raise NotFoundError("Participant not found")

    async def list_entries(self, participant_code: Optional[str] = None) -> List[Entry]:
        if participant_code:
            query = text(
                f"SELECT {_ENTRY_COLUMNS} FROM entries "
                "WHERE participant_code = :code ORDER BY entry_date DESC"
            ).bindparams(code=participant_code)
        else:
            query = text(f"SELECT {_ENTRY_COLUMNS} FROM entries ORDER BY entry_date DESC")

        async with self._transaction("list_entries") as session:
            result = await execute_query(session, query, "list_entries")
            # Mapped inside the transaction so malformed rows surface as PersistenceError
            entries = [_entry_from_row(row) for row in result.fetchall()]

        print(f"Loaded {len(entries)} entries" + (f" for {participant_code}" if participant_code else ""))
        return entries

    async def upsert_entry(self, entry: Entry) -> Entry:
        async with self._transaction("upsert_entry") as session:
            result = await execute_query(
                session,
                text(f"""
                    INSERT INTO entries ({_ENTRY_COLUMNS})
                    VALUES (
                        :participant_code, :day, :entry_date, :status,
                        :has_odor, :odor_intensity, :odor_causes, :other_cause,
                        :has_symptoms, :itching, :irritation, :redness, :dryness,
                        :washed_hair
                    )
                    ON CONFLICT (participant_code, day) DO UPDATE SET
                        entry_date = EXCLUDED.entry_date,
                        status = EXCLUDED.status,
                        has_odor = EXCLUDED.has_odor,
                        odor_intensity = EXCLUDED.odor_intensity,
                        odor_causes = EXCLUDED.odor_causes,
                        other_cause = EXCLUDED.other_cause,
                        has_symptoms = EXCLUDED.has_symptoms,
                        itching = EXCLUDED.itching,
                        irritation = EXCLUDED.irritation,
                        redness = EXCLUDED.redness,
                        dryness = EXCLUDED.dryness,
                        washed_hair = EXCLUDED.washed_hair
                    RETURNING {_ENTRY_COLUMNS}
                """).bindparams(
                    participant_code=entry.participant_code,
                    day=entry.day,
                    entry_date=entry.date,
                    status=entry.status,
                    has_odor=entry.has_odor,
                    odor_intensity=entry.odor_intensity,
                    odor_causes=entry.odor_causes,
                    other_cause=entry.other_cause,
                    has_symptoms=entry.has_symptoms,
                    itching=entry.itching,
                    irritation=entry.irritation,
                    redness=entry.redness,
                    dryness=entry.dryness,
                    washed_hair=entry.washed_hair,
                ),
                "upsert_entry",
            )
            return _entry_from_row(result.first())

    async def get_settings(self) -> StudySettings:
        async with self._transaction("get_settings") as session:
            result = await execute_query(
                session,
                text("SELECT key, value FROM settings ORDER BY key"),
                "get_settings",
            )
            return _settings_from_rows(result.fetchall())

    async def update_settings(self, patch: SettingsPatch) -> StudySettings:
        values = patch.model_dump(mode="json", exclude_none=True)
        if values:
            async with self._transaction("update_settings") as session:
                await execute_query(
                    session,
                    text("""
                        INSERT INTO settings (key, value)
                        VALUES (:key, CAST(:value AS JSONB))
                        ON CONFLICT (key) DO UPDATE SET value = settings.value || EXCLUDED.value
                    """).bindparams(key=SETTINGS_KEY, value=json.dumps(values)),
                    "update_settings",
                )
        return await self.get_settings()
