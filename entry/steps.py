"""Round-entry steps, the editable draft, and per-step validation.

The draft accepts whatever the user has typed so far; each step validates only
the fields it owns when the user tries to move past it.
"""

from datetime import date, time
from enum import IntEnum
from typing import Annotated, Any, Dict, List, Literal, Optional, Type
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from models import HoleScore, Participant
from models.course import DEFAULT_HOLE_PAR
from models.base import BaseGolfModel
from models.round import HOLES_PER_ROUND, MAX_PARTICIPANTS
from models.user import DEFAULT_TEE

DEFAULT_STROKES = 4
DEFAULT_START_TIME = "08:00"


class EntryStep(IntEnum):
    BASIC_INFO = 0
    PARTICIPANTS = 1
    SCORE_INPUT = 2
    CONFIRMATION = 3

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


# ================================================================
# Draft (raw form state)
# ================================================================

class ParticipantDraft(BaseGolfModel):
    user_id: Optional[str] = None
    name: str = ""
    type: Literal["registered", "guest"] = "guest"
    handicap: Optional[float] = None


class ScoreDraft(BaseGolfModel):
    hole_number: int
    par: int = DEFAULT_HOLE_PAR
    strokes: Optional[int] = DEFAULT_STROKES
    putts: Optional[int] = None
    fairway_hit: Optional[bool] = None
    green_in_regulation: Optional[bool] = None
    penalties: Optional[int] = None


def default_scores() -> List[ScoreDraft]:
    return [ScoreDraft(hole_number=n) for n in range(1, HOLES_PER_ROUND + 1)]


class RoundDraft(BaseGolfModel):
    """Everything entered so far, across all steps."""
    course_id: str = ""
    course_name: Optional[str] = None
    play_date: str = Field(default_factory=lambda: date.today().isoformat())
    start_time: str = DEFAULT_START_TIME
    tee_name: str = DEFAULT_TEE
    weather: Optional[str] = None
    temperature: Optional[float] = None
    wind_speed: Optional[float] = None
    participants: List[ParticipantDraft] = Field(
        default_factory=lambda: [ParticipantDraft()]
    )
    scores: List[ScoreDraft] = Field(default_factory=default_scores)
    memo: str = ""


# ================================================================
# Step forms
# ================================================================

def _required(message: str):
    def check(value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise PydanticCustomError("missing_value", message)
        return value
    return BeforeValidator(check)


def _valid_id(message: str):
    # Empty values are left to _required / Optional
    def check(value: Any) -> Any:
        if value is None or value == "":
            return value
        try:
            UUID(str(value))
        except ValueError:
            raise PydanticCustomError("invalid_id", message)
        return str(value)
    return BeforeValidator(check)


# Before-validators run right to left: presence first, then the id format
CourseId = Annotated[str, _valid_id("Select a golf course"), _required("Select a golf course")]
UserId = Annotated[Optional[str], _valid_id("Select a registered user")]


class BasicInfoForm(BaseModel):
    course_id: CourseId
    play_date: Annotated[date, _required("Enter the play date")]
    start_time: Annotated[time, _required("Enter the start time")]
    tee_name: Annotated[str, _required("Select a tee")]
    weather: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=-20, le=50)
    wind_speed: Optional[float] = Field(None, ge=0, le=100)


class ParticipantEntry(Participant):
    user_id: UserId = None
    name: Annotated[str, _required("Enter a name"), Field(max_length=50)]


class ParticipantsForm(BaseModel):
    participants: List[ParticipantEntry]

    @field_validator("participants", mode="before")
    @classmethod
    def check_participant_count(cls, v):
        if not v:
            raise PydanticCustomError("too_short", "Add at least one participant")
        if len(v) > MAX_PARTICIPANTS:
            raise PydanticCustomError(
                "too_long", "Up to {max} participants can be registered", {"max": MAX_PARTICIPANTS}
            )
        return v


class ScoreEntry(HoleScore):
    strokes: Annotated[int, _required("Enter the number of strokes"), Field(ge=1, le=20)]


class ScoresForm(BaseModel):
    scores: List[ScoreEntry]

    @field_validator("scores", mode="before")
    @classmethod
    def check_hole_count(cls, v):
        if v is None or len(v) != HOLES_PER_ROUND:
            raise PydanticCustomError(
                "wrong_length", "Enter scores for all {holes} holes", {"holes": HOLES_PER_ROUND}
            )
        return v


class ConfirmationForm(BaseModel):
    memo: Optional[str] = Field(None, max_length=500)


STEP_FORMS: Dict[EntryStep, Type[BaseModel]] = {
    EntryStep.BASIC_INFO: BasicInfoForm,
    EntryStep.PARTICIPANTS: ParticipantsForm,
    EntryStep.SCORE_INPUT: ScoresForm,
    EntryStep.CONFIRMATION: ConfirmationForm,
}


def field_errors(error: ValidationError) -> Dict[str, str]:
    """One message per failing field, keyed by dotted location."""
    errors: Dict[str, str] = {}
    for item in error.errors():
        key = ".".join(str(part) for part in item["loc"]) or "__root__"
        errors.setdefault(key, item["msg"])
    return errors


def parse_step(step: EntryStep, draft: RoundDraft) -> BaseModel:
    """Validate the fields owned by `step`; raises ValidationError."""
    form = STEP_FORMS[step]
    return form.model_validate(draft.model_dump(include=set(form.model_fields)))


def validate_step(step: EntryStep, draft: RoundDraft) -> Dict[str, str]:
    try:
        parse_step(step, draft)
    except ValidationError as e:
        return field_errors(e)
    return {}
