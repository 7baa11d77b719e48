"""
Pydantic models for request/response validation
"""
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

# Fixed odor cause vocabulary, in questionnaire (and export column) order
ODOR_CAUSES = [
    "Transpiration excessive",
    "Port de foulard/hijab",
    "Shampooing peu fréquent",
    "Excès de sébum",
    "Changements hormonaux",
    "Produit inapproprié",
]
OTHER_CAUSE = "Autre"

DEFAULT_STUDY_START_DATE = date(2025, 12, 6)

EntryStatus = Literal["draft", "complete"]


class Participant(BaseModel):
    """Enrolled study participant"""
    code: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    start_date: Optional[date] = None  # Falls back to study_start_date


class ParticipantCreate(BaseModel):
    """Admin payload for a new participant"""
    code: str
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)
    email: str = ""
    phone: str = ""
    start_date: Optional[date] = None  # Falls back to study_start_date


class QuestionnairePayload(BaseModel):
    """Daily questionnaire answers as submitted by a participant"""
    has_odor: Optional[bool] = None
    odor_intensity: Optional[int] = Field(None, ge=1, le=10)
    odor_causes: List[str] = Field(default_factory=list)
    other_cause: Optional[str] = None
    has_symptoms: Optional[bool] = None
    itching: Optional[int] = Field(None, ge=0, le=10)
    irritation: Optional[int] = Field(None, ge=0, le=10)
    redness: Optional[int] = Field(None, ge=0, le=10)
    dryness: Optional[int] = Field(None, ge=0, le=10)
    washed_hair: Optional[bool] = None

    @field_validator("odor_causes")
    @classmethod
    def check_causes(cls, value: List[str]) -> List[str]:
        allowed = set(ODOR_CAUSES) | {OTHER_CAUSE}
        unknown = [cause for cause in value if cause not in allowed]
        if unknown:
            raise ValueError(f"Unknown odor causes: {', '.join(unknown)}")
        # Drop repeats, keep selection order
        return list(dict.fromkeys(value))


class Entry(QuestionnairePayload):
    """One participant's response for one study day"""
    participant_code: str
    day: int = Field(..., ge=1, le=28)
    date: datetime
    status: EntryStatus = "complete"


class StudySettings(BaseModel):
    """Study-wide settings; every field has a default so a missing row never breaks callers"""
    study_start_date: date = DEFAULT_STUDY_START_DATE
    show_progress_bar: bool = True
    company_name: str = "Lab Capillaire"
    primary_color: str = "#3b82f6"
    allow_retroactive: bool = True  # Stored only, nothing enforces it
    auto_complete: bool = True


class SettingsPatch(BaseModel):
    """Partial settings update"""
    study_start_date: Optional[date] = None
    show_progress_bar: Optional[bool] = None
    company_name: Optional[str] = None
    primary_color: Optional[str] = None
    allow_retroactive: Optional[bool] = None
    auto_complete: Optional[bool] = None


class LoginPayload(BaseModel):
    """Login screen payload"""
    code: str


class CsvImportPayload(BaseModel):
    """Roster CSV pasted by the admin"""
    csv_text: str


class ImportRowResult(BaseModel):
    """Outcome of one CSV data row"""
    line: int
    code: Optional[str] = None
    outcome: Literal["created", "ignored", "error"]
    message: Optional[str] = None


class ImportResult(BaseModel):
    """Counts returned after a roster import"""
    created: int = 0
    ignored: int = 0
    errors: int = 0
    details: List[ImportRowResult] = Field(default_factory=list)
