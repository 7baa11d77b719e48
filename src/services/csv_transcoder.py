"""
CSV import of participant rosters and CSV export of questionnaire entries.

The two directions use different column sets and are not inverses:
import creates participants, export dumps entries joined with names.
"""
import csv
import io
from datetime import date, datetime
from typing import Iterable, List, Optional, Set, Tuple
from zoneinfo import ZoneInfo

from src.config import settings
from src.database.repository import Repository
from src.models.schemas import (
    ODOR_CAUSES,
    OTHER_CAUSE,
    Entry,
    ImportResult,
    ImportRowResult,
    Participant,
)
from src.services.errors import DuplicateError, LogbookError, ValidationError
from src.utils.validators import is_valid_participant_code, parse_iso_date

UTF8_BOM = "\ufeff"
MIN_IMPORT_FIELDS = 5

IMPORT_COLUMNS = ["prenom", "nom", "email", "telephone", "code", "date_debut"]
IMPORT_TEMPLATE_FILENAME = "template_participants.csv"

EXPORT_HEADERS = [
    "code_participant", "prenom", "nom", "email", "jour", "date",
    "odeur_presente", "intensite_odeur",
    "transpiration", "foulard", "shampooing_rare", "sebum", "hormones", "produit_inapproprie",
    "autre_cause", "autre_cause_details",
    "symptomes_presents", "demangeaisons", "irritation", "rougeurs", "secheresse",
    "cheveux_laves",
]


def import_template() -> str:
    """Example roster the admin can download and fill in"""
    return "\n".join([
        ",".join(IMPORT_COLUMNS),
        "Marie,Dupont,marie@example.com,0612345678,1234,2025-12-06",
        "Jean,Martin,jean@example.com,0623456789,5678,2025-12-06",
    ]) + "\n"


def parse_roster_rows(csv_text: str) -> List[Tuple[int, List[str]]]:
    """
    Split roster CSV into data rows

    Blank lines are skipped. The first non-blank row is the header and is
    always dropped, whatever its column names.

    Returns:
        List of (line number, stripped field values)
    """
    reader = csv.reader(io.StringIO(csv_text.lstrip(UTF8_BOM)))
    rows = []
    for values in reader:
        if not any(value.strip() for value in values):
            continue
        rows.append((reader.line_num, [value.strip() for value in values]))
    return rows[1:]


def participant_from_row(values: List[str], default_start_date: date) -> Participant:
    """
    Build a Participant from one roster row

    Raises:
        ValidationError: Too few fields, malformed code or start date
    """
    if len(values) < MIN_IMPORT_FIELDS:
        raise ValidationError(f"Expected at least {MIN_IMPORT_FIELDS} fields, got {len(values)}")

    code = values[4]
    if not is_valid_participant_code(code):
        raise ValidationError(f"Invalid code '{code}', expected 4 digits")

    start_date = default_start_date
    if len(values) > 5 and values[5]:
        start_date = parse_iso_date(values[5])

    return Participant(
        code=code,
        first_name=values[0],
        last_name=values[1],
        email=values[2],
        phone=values[3],
        start_date=start_date,
    )


async def import_participants(
    repository: Repository,
    csv_text: str,
    default_start_date: date,
    known_codes: Iterable[str],
) -> ImportResult:
    """
    Create participants from roster CSV, one row at a time

    Rows run strictly in order so that a code created earlier in the batch
    is seen as a duplicate by later rows. A failing row is counted and the
    batch continues.

    Args:
        repository: Target repository
        csv_text: Roster CSV text
        default_start_date: Start date for rows without one
        known_codes: Codes already in the roster. The admin code is always
            treated as taken.

    Returns:
        ImportResult with created / ignored / errors counts and per-row details

    Raises:
        ValidationError: If the CSV has no data rows at all
    """
    rows = parse_roster_rows(csv_text)
    if not rows:
        raise ValidationError("Fichier CSV vide ou invalide")

    seen: Set[str] = set(known_codes)
    seen.add(settings.ADMIN_CODE)
    result = ImportResult()

    for line, values in rows:
        code = values[4] if len(values) > 4 else None
        try:
            participant = participant_from_row(values, default_start_date)
        except ValidationError as e:
            result.errors += 1
            result.details.append(ImportRowResult(line=line, code=code, outcome="error", message=str(e)))
            continue

        if participant.code in seen:
            result.ignored += 1
            result.details.append(ImportRowResult(
                line=line, code=code, outcome="ignored", message="Code already exists"
            ))
            continue

        try:
            await repository.create_participant(participant)
        except DuplicateError as e:
            seen.add(participant.code)
            result.ignored += 1
            result.details.append(ImportRowResult(line=line, code=code, outcome="ignored", message=str(e)))
            continue
        except LogbookError as e:
            print(f"Import row {line} ({code}) failed: {e}")
            result.errors += 1
            result.details.append(ImportRowResult(line=line, code=code, outcome="error", message=str(e)))
            continue

        seen.add(participant.code)
        result.created += 1
        result.details.append(ImportRowResult(line=line, code=code, outcome="created"))

    print(f"CSV import: {result.created} created, {result.ignored} ignored, {result.errors} errors")
    return result


def _yes_no(value: Optional[bool]) -> str:
    return "Oui" if value else "Non"


def format_export_date(value: datetime, timezone_name: Optional[str] = None) -> str:
    """
    French calendar date, dd/mm/yyyy, as seen in the study timezone

    Naive timestamps are formatted as they are.
    """
    if value.tzinfo is not None:
        value = value.astimezone(ZoneInfo(timezone_name or settings.STUDY_TIMEZONE))
    return value.strftime("%d/%m/%Y")


def export_row(entry: Entry, participant: Optional[Participant]) -> list:
    """One flattened export row; gated values are blank when their gate is not True"""
    causes = set(entry.odor_causes or [])
    row = [
        entry.participant_code,
        participant.first_name if participant else "",
        participant.last_name if participant else "",
        participant.email if participant else "",
        entry.day,
        format_export_date(entry.date),
        _yes_no(entry.has_odor),
        entry.odor_intensity if entry.has_odor and entry.odor_intensity is not None else "",
    ]
    row.extend(_yes_no(cause in causes) for cause in ODOR_CAUSES)
    row.append(_yes_no(OTHER_CAUSE in causes))
    row.append((entry.other_cause or "") if OTHER_CAUSE in causes else "")
    row.append(_yes_no(entry.has_symptoms))
    for severity in (entry.itching, entry.irritation, entry.redness, entry.dryness):
        row.append(severity if entry.has_symptoms and severity is not None else "")
    row.append(_yes_no(entry.washed_hair))
    return row


def export_entries_csv(
    entries: Iterable[Entry],
    participants: Iterable[Participant],
    participant_code: Optional[str] = None,
) -> str:
    """
    Flatten complete entries into the export CSV

    Args:
        entries: Entry collection
        participants: Roster used to join names and email
        participant_code: Restrict the export to one participant

    Returns:
        CSV text prefixed with a UTF-8 BOM, every cell quoted
    """
    by_code = {p.code: p for p in participants}

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for entry in entries:
        if entry.status != "complete":
            continue
        if participant_code and entry.participant_code != participant_code:
            continue
        writer.writerow(export_row(entry, by_code.get(entry.participant_code)))

    return UTF8_BOM + buffer.getvalue()


def count_exportable(entries: Iterable[Entry], participant_code: Optional[str] = None) -> int:
    return sum(
        1 for entry in entries
        if entry.status == "complete" and (not participant_code or entry.participant_code == participant_code)
    )


def export_filename(export_date: date) -> str:
    return f"export_{export_date.isoformat()}.csv"
