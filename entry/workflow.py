"""Four-step round entry: basic info, participants, scores, confirmation.

The workflow owns a `RoundDraft` and moves strictly forward/backward one step
at a time. Moving forward validates only the current step. Submitting builds a
completed `Round` and hands it to a `RoundStore` through the retry layer.
"""

import logging
from typing import Any, Dict, Optional, Protocol

from pydantic import ValidationError

from models import Course, Round
from database.retry import RetryPolicy, with_retry
from entry.app_state import AppState
from entry.messages import get_error_message
from entry.steps import (
    EntryStep,
    ParticipantDraft,
    RoundDraft,
    field_errors,
    parse_step,
    validate_step,
)
from models.round import HOLES_PER_ROUND, MAX_PARTICIPANTS

logger = logging.getLogger(__name__)

BASIC_INFO_FIELDS = frozenset({
    "course_id", "course_name", "play_date", "start_time", "tee_name",
    "weather", "temperature", "wind_speed",
})
PARTICIPANT_FIELDS = frozenset({"user_id", "name", "type", "handicap"})
SCORE_FIELDS = frozenset({
    "par", "strokes", "putts", "fairway_hit", "green_in_regulation", "penalties",
})


class WorkflowError(Exception):
    """Operation not allowed in the workflow's current state."""


class RoundStore(Protocol):
    async def create_round(self, round_: Round, user_id: Optional[str] = None) -> Round:
        ...


class RoundEntryWorkflow:
    def __init__(
        self,
        store: RoundStore,
        *,
        user_id: Optional[str] = None,
        user_name: str = "",
        user_handicap: Optional[float] = None,
        app_state: Optional[AppState] = None,
        retry_policy: Optional[RetryPolicy] = None,
        draft: Optional[RoundDraft] = None,
    ) -> None:
        self.store = store
        self.user_id = user_id
        self.app_state = app_state or AppState()
        self.retry_policy = retry_policy or RetryPolicy()
        self.step = EntryStep.BASIC_INFO
        self.errors: Dict[str, str] = {}
        self.submit_error: Optional[str] = None
        self.created_round: Optional[Round] = None
        self.submitting = False
        if draft is None:
            draft = RoundDraft()
            # First participant is the person entering the round
            draft.participants = [
                ParticipantDraft(
                    user_id=user_id,
                    name=user_name,
                    type="registered" if user_id else "guest",
                    handicap=user_handicap,
                )
            ]
        self.draft = draft

    @property
    def finished(self) -> bool:
        return self.created_round is not None

    def _ensure_editable(self) -> None:
        if self.finished:
            raise WorkflowError("Round has already been submitted")

    # ================================================================
    # Navigation
    # ================================================================

    def advance(self) -> bool:
        """Validate the current step and move forward. Returns False on errors."""
        self._ensure_editable()
        if self.step is EntryStep.CONFIRMATION:
            raise WorkflowError("Cannot advance past confirmation")
        errors = validate_step(self.step, self.draft)
        if errors:
            self.errors = errors
            self.app_state.show_notification("Please correct the highlighted fields", "error")
            return False
        self.errors = {}
        self.step = EntryStep(self.step + 1)
        return True

    def retreat(self) -> None:
        """Go back one step. Entered data is kept."""
        self._ensure_editable()
        if self.step is EntryStep.BASIC_INFO:
            raise WorkflowError("Already at the first step")
        self.errors = {}
        self.step = EntryStep(self.step - 1)

    # ================================================================
    # Basic info
    # ================================================================

    def update_basic_info(self, **fields: Any) -> Dict[str, str]:
        """Edit basic-info fields; returns messages for values of the wrong type."""
        self._ensure_editable()
        unknown = set(fields) - BASIC_INFO_FIELDS
        if unknown:
            raise WorkflowError(f"Unknown basic info fields: {', '.join(sorted(unknown))}")
        return self.draft.update_fields(**fields)

    def select_course(self, course: Course) -> None:
        """Pick the course: fills its name and the par of every hole."""
        self._ensure_editable()
        self.draft.course_id = course.id or ""
        self.draft.course_name = course.name
        for score, par in zip(self.draft.scores, course.get_pars()):
            if par == 3:
                score.fairway_hit = None
            score.par = par
        if course.tees and not course.get_tee(self.draft.tee_name):
            self.draft.tee_name = course.tees[0].name

    # ================================================================
    # Participants
    # ================================================================

    def _participant(self, index: int) -> ParticipantDraft:
        if not 0 <= index < len(self.draft.participants):
            raise WorkflowError(f"No participant at position {index}")
        return self.draft.participants[index]

    def add_participant(
        self,
        name: str = "",
        type: str = "guest",
        handicap: Optional[float] = None,
        user_id: Optional[str] = None,
    ) -> ParticipantDraft:
        self._ensure_editable()
        if len(self.draft.participants) >= MAX_PARTICIPANTS:
            raise WorkflowError(f"Up to {MAX_PARTICIPANTS} participants can be registered")
        participant = ParticipantDraft(user_id=user_id, name=name, type=type, handicap=handicap)
        self.draft.participants.append(participant)
        return participant

    def update_participant(self, index: int, **fields: Any) -> Dict[str, str]:
        self._ensure_editable()
        unknown = set(fields) - PARTICIPANT_FIELDS
        if unknown:
            raise WorkflowError(f"Unknown participant fields: {', '.join(sorted(unknown))}")
        return self._participant(index).update_fields(**fields)

    def remove_participant(self, index: int) -> ParticipantDraft:
        self._ensure_editable()
        self._participant(index)
        if len(self.draft.participants) <= 1:
            raise WorkflowError("A round needs at least one participant")
        return self.draft.participants.pop(index)

    # ================================================================
    # Scores
    # ================================================================

    def _score(self, hole_number: int):
        if not 1 <= hole_number <= HOLES_PER_ROUND:
            raise WorkflowError(f"Hole number must be between 1 and {HOLES_PER_ROUND}")
        return self.draft.scores[hole_number - 1]

    def update_score(self, hole_number: int, **fields: Any) -> Dict[str, str]:
        self._ensure_editable()
        unknown = set(fields) - SCORE_FIELDS
        if unknown:
            raise WorkflowError(f"Unknown score fields: {', '.join(sorted(unknown))}")
        score = self._score(hole_number)
        errors = score.update_fields(**fields)
        # No fairway on a par 3; the value is dropped rather than rejected
        if score.par == 3:
            score.fairway_hit = None
        return errors

    def set_strokes(self, hole_number: int, strokes: Optional[int]) -> Dict[str, str]:
        return self.update_score(hole_number, strokes=strokes)

    def set_all_strokes(self, strokes: int) -> None:
        """Fill every hole with the same stroke count."""
        self._ensure_editable()
        for score in self.draft.scores:
            score.strokes = strokes

    def set_memo(self, memo: str) -> Dict[str, str]:
        self._ensure_editable()
        return self.draft.update_fields(memo=memo)

    # Derived totals; holes without strokes count as 0

    @property
    def front_nine_total(self) -> int:
        return sum(s.strokes or 0 for s in self.draft.scores if s.hole_number <= 9)

    @property
    def back_nine_total(self) -> int:
        return sum(s.strokes or 0 for s in self.draft.scores if s.hole_number >= 10)

    @property
    def total_strokes(self) -> int:
        return self.front_nine_total + self.back_nine_total

    @property
    def total_par(self) -> int:
        return sum(s.par for s in self.draft.scores)

    # ================================================================
    # Submission
    # ================================================================

    def build_round(self) -> Round:
        """Assemble a completed Round from every step; raises ValidationError."""
        basic = parse_step(EntryStep.BASIC_INFO, self.draft)
        participants = parse_step(EntryStep.PARTICIPANTS, self.draft).participants
        scores = parse_step(EntryStep.SCORE_INPUT, self.draft).scores
        confirmation = parse_step(EntryStep.CONFIRMATION, self.draft)

        return Round(
            user_id=self.user_id,
            course_id=basic.course_id,
            course_name=self.draft.course_name or basic.course_id,
            play_date=basic.play_date,
            start_time=basic.start_time,
            weather=basic.weather,
            temperature=basic.temperature,
            wind_speed=basic.wind_speed,
            tee_name=basic.tee_name,
            scores=[s.model_dump() for s in scores],
            participants=[p.model_dump() for p in participants],
            memo=confirmation.memo or None,
            is_completed=True,
            total_score=sum(s.strokes for s in scores),
            total_par=sum(s.par for s in scores),
        )

    async def submit(self) -> Round:
        """
        Create the round. On failure the workflow stays on confirmation with
        the error recorded, and the error is re-raised; submit may be retried.
        """
        self._ensure_editable()
        if self.step is not EntryStep.CONFIRMATION:
            raise WorkflowError("Round can only be submitted from confirmation")
        if self.submitting:
            raise WorkflowError("Round is already being submitted")

        try:
            round_ = self.build_round()
        except ValidationError as e:
            self.errors = field_errors(e)
            self.submit_error = "Some entries are invalid"
            self.app_state.show_notification(self.submit_error, "error")
            raise

        self.submit_error = None
        self.submitting = True
        self.app_state.set_loading(True, "Saving round")
        try:
            created = await with_retry(
                lambda: self.store.create_round(round_, user_id=self.user_id),
                self.retry_policy,
            )
        except Exception as e:
            self.submit_error = get_error_message(e)
            logger.warning("Round submission failed: %s", e)
            self.app_state.show_notification(self.submit_error, "error", action_label="Retry")
            raise
        finally:
            self.submitting = False
            self.app_state.set_loading(False)

        self.errors = {}
        self.created_round = created
        self.app_state.show_notification("Round saved", "success")
        logger.info("Round %s submitted for user %s", created.id, self.user_id)
        return created

    def snapshot(self) -> Dict[str, Any]:
        return {
            "step": self.step.name,
            "step_index": int(self.step),
            "finished": self.finished,
            "round_id": self.created_round.id if self.created_round else None,
            "draft": self.draft.model_dump(mode="json"),
            "errors": self.errors,
            "submit_error": self.submit_error,
            "front_nine_total": self.front_nine_total,
            "back_nine_total": self.back_nine_total,
            "total_strokes": self.total_strokes,
            "total_par": self.total_par,
            "state": self.app_state.to_dict(),
        }
