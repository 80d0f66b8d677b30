import asyncio
import pytest
from datetime import date, time
from unittest.mock import AsyncMock

from pydantic import ValidationError

from database.exceptions import NotFoundError, ServiceUnavailableError
from database.retry import NO_RETRY, RetryPolicy
from entry import AppState, EntryStep, RoundDraft, RoundEntryWorkflow, WorkflowError, validate_step
from entry.messages import get_error_message
from entry.sessions import EntrySessionStore
from models import Course, CourseHole, Round, TeeSet

PARS = [4, 5, 3, 4, 4, 5, 3, 4, 4, 4, 5, 3, 4, 4, 5, 3, 4, 4]
COURSE_ID = "3f2b8c1e-6a4d-4e2f-9b7a-1c5d8e0f2a41"
USER_ID = "8d1e5a7c-2b3f-4c6d-a9e8-7f0b1c2d3e4f"


def _course():
    return Course(
        id=COURSE_ID,
        name="Test Golf Club",
        tees=[TeeSet(name="Regular"), TeeSet(name="Back")],
        holes=[CourseHole(number=i, par=p) for i, p in enumerate(PARS, start=1)],
    )


def _store(created_id="r1"):
    store = AsyncMock()

    async def create_round(round_, user_id=None):
        return round_.model_copy(update={"id": created_id, "user_id": user_id})

    store.create_round.side_effect = create_round
    return store


def _workflow(store=None, **kwargs):
    kwargs.setdefault("retry_policy", NO_RETRY)
    return RoundEntryWorkflow(
        store or _store(), user_id=USER_ID, user_name="Taro", **kwargs
    )


def _at_confirmation(workflow):
    workflow.select_course(_course())
    for _ in range(3):
        assert workflow.advance(), workflow.errors
    assert workflow.step is EntryStep.CONFIRMATION
    return workflow


# ================================================================
# Draft defaults
# ================================================================

def test_new_workflow_defaults():
    wf = _workflow()
    assert wf.step is EntryStep.BASIC_INFO
    assert wf.draft.play_date == date.today().isoformat()
    assert wf.draft.start_time == "08:00"
    assert wf.draft.tee_name == "Regular"
    assert len(wf.draft.scores) == 18
    assert all(s.strokes == 4 and s.par == 4 for s in wf.draft.scores)

    owner = wf.draft.participants[0]
    assert owner.name == "Taro"
    assert owner.type == "registered"
    assert owner.user_id == USER_ID


# ================================================================
# Step validation
# ================================================================

def test_basic_info_with_four_empty_fields():
    wf = _workflow()
    wf.update_basic_info(course_id="", play_date="", start_time="", tee_name="")

    assert wf.advance() is False
    assert wf.step is EntryStep.BASIC_INFO
    assert set(wf.errors) == {"course_id", "play_date", "start_time", "tee_name"}
    assert wf.errors["course_id"] == "Select a golf course"
    assert wf.app_state.notification.severity == "error"


def test_basic_info_optional_ranges():
    draft = RoundDraft(course_id=COURSE_ID, temperature=60, wind_speed=-1)
    errors = validate_step(EntryStep.BASIC_INFO, draft)
    assert set(errors) == {"temperature", "wind_speed"}

    draft = RoundDraft(course_id=COURSE_ID, play_date="2024-13-40")
    assert set(validate_step(EntryStep.BASIC_INFO, draft)) == {"play_date"}


def test_basic_info_rejects_unknown_fields():
    with pytest.raises(WorkflowError):
        _workflow().update_basic_info(scores=[])


def test_participants_step_requires_one_entry():
    wf = _workflow()
    wf.update_basic_info(course_id=COURSE_ID)
    assert wf.advance()
    assert wf.step is EntryStep.PARTICIPANTS

    wf.draft.participants = []
    assert wf.advance() is False
    assert wf.errors == {"participants": "Add at least one participant"}

    wf.add_participant(name="Hanako")
    assert wf.advance()
    assert wf.step is EntryStep.SCORE_INPUT


def test_participant_errors_are_per_field():
    draft = RoundDraft()
    draft.participants[0].name = ""
    draft.participants[0].handicap = 60
    errors = validate_step(EntryStep.PARTICIPANTS, draft)
    assert set(errors) == {"participants.0.name", "participants.0.handicap"}
    assert errors["participants.0.name"] == "Enter a name"


def test_participant_field_array_bounds():
    wf = _workflow()
    for name in ("A", "B", "C"):
        wf.add_participant(name=name)
    assert len(wf.draft.participants) == 4

    with pytest.raises(WorkflowError):
        wf.add_participant(name="E")

    assert wf.update_participant(1, handicap=12.5) == {}
    assert wf.draft.participants[1].handicap == 12.5

    removed = wf.remove_participant(1)
    assert removed.name == "A"
    assert [p.name for p in wf.draft.participants] == ["Taro", "B", "C"]

    with pytest.raises(WorkflowError):
        wf.remove_participant(7)

    for _ in range(2):
        wf.remove_participant(0)
    with pytest.raises(WorkflowError):
        wf.remove_participant(0)


def test_score_step_validation():
    draft = RoundDraft()
    draft.scores[0].strokes = None
    draft.scores[1].strokes = 21
    draft.scores[2].putts = 11
    errors = validate_step(EntryStep.SCORE_INPUT, draft)
    assert errors["scores.0.strokes"] == "Enter the number of strokes"
    assert "scores.1.strokes" in errors
    assert "scores.2.putts" in errors
    assert len(errors) == 3


def test_score_step_requires_eighteen_holes():
    draft = RoundDraft()
    draft.scores = draft.scores[:9]
    assert validate_step(EntryStep.SCORE_INPUT, draft) == {
        "scores": "Enter scores for all 18 holes"
    }


def test_validation_only_covers_current_step():
    wf = _workflow()
    wf.update_basic_info(course_id=COURSE_ID)
    wf.draft.scores[0].strokes = None  # invalid, but owned by a later step
    assert wf.advance()
    assert wf.errors == {}


def test_malformed_ids_are_field_errors():
    draft = RoundDraft(course_id="pebble-beach")
    assert validate_step(EntryStep.BASIC_INFO, draft) == {"course_id": "Select a golf course"}

    wf = _workflow()
    wf.update_basic_info(course_id=COURSE_ID)
    assert wf.advance()
    wf.add_participant(name="Friend", type="registered", user_id="friend-1")

    assert wf.advance() is False
    assert wf.errors == {"participants.1.user_id": "Select a registered user"}
    assert wf.step is EntryStep.PARTICIPANTS

    wf.update_participant(1, user_id=None, type="guest")
    assert wf.advance()


# ================================================================
# Navigation
# ================================================================

def test_retreat_keeps_participant_data():
    wf = _workflow()
    wf.update_basic_info(course_id=COURSE_ID)
    wf.advance()
    wf.add_participant(name="Hanako", handicap=18)
    before = [p.model_dump() for p in wf.draft.participants]
    wf.advance()
    assert wf.step is EntryStep.SCORE_INPUT

    wf.retreat()
    assert wf.step is EntryStep.PARTICIPANTS
    assert [p.model_dump() for p in wf.draft.participants] == before


def test_retreat_from_first_step_is_rejected():
    with pytest.raises(WorkflowError):
        _workflow().retreat()


def test_advance_past_confirmation_is_rejected():
    wf = _at_confirmation(_workflow())
    with pytest.raises(WorkflowError):
        wf.advance()


# ================================================================
# Course selection and derived totals
# ================================================================

def test_select_course_fills_name_and_pars():
    wf = _workflow()
    wf.update_score(3, fairway_hit=True)
    wf.select_course(_course())

    assert wf.draft.course_id == COURSE_ID
    assert wf.draft.course_name == "Test Golf Club"
    assert [s.par for s in wf.draft.scores] == PARS
    assert wf.draft.scores[2].fairway_hit is None  # hole 3 became a par 3
    assert wf.total_par == 72


def test_select_course_without_holes_keeps_par_four():
    wf = _workflow()
    wf.select_course(Course(id="c9", name="No Data CC", tees=[TeeSet(name="Back")]))
    assert all(s.par == 4 for s in wf.draft.scores)
    assert wf.draft.tee_name == "Back"


def test_nine_totals_update_with_each_edit():
    wf = _workflow()
    assert (wf.front_nine_total, wf.back_nine_total, wf.total_strokes) == (36, 36, 72)

    wf.set_strokes(1, 7)
    assert wf.front_nine_total == 39
    wf.set_strokes(18, 2)
    assert wf.back_nine_total == 34
    assert wf.total_strokes == 73

    wf.set_strokes(5, None)
    assert wf.front_nine_total == 35


def test_set_all_strokes():
    wf = _workflow()
    wf.set_all_strokes(5)
    assert wf.total_strokes == 90


def test_update_score_reports_type_errors():
    wf = _workflow()
    errors = wf.update_score(2, strokes="many")
    assert set(errors) == {"strokes"}
    assert wf.draft.scores[1].strokes == 4

    with pytest.raises(WorkflowError):
        wf.update_score(19, strokes=4)
    with pytest.raises(WorkflowError):
        wf.update_score(1, hole_number=3)


def test_fairway_on_par_three_is_dropped():
    wf = _workflow()
    wf.select_course(_course())

    assert wf.update_score(3, fairway_hit=True, putts=2) == {}
    assert wf.draft.scores[2].fairway_hit is None
    assert wf.draft.scores[2].putts == 2

    wf.update_score(1, fairway_hit=True)
    assert wf.draft.scores[0].fairway_hit is True

    wf.update_score(1, par=3)
    assert wf.draft.scores[0].fairway_hit is None


# ================================================================
# Submission
# ================================================================

def test_build_round_totals():
    wf = _workflow()
    wf.update_basic_info(course_id=COURSE_ID)
    round_ = wf.build_round()
    assert round_.total_score == 72
    assert round_.total_par == 72
    assert round_.is_completed
    assert round_.course_name == COURSE_ID  # falls back to the id without a selected course
    assert round_.start_time == time(8, 0)


@pytest.mark.asyncio
async def test_submit_even_par_round():
    store = _store()
    wf = _at_confirmation(_workflow(store))
    for hole, par in enumerate(PARS, start=1):
        wf.set_strokes(hole, par)

    created = await wf.submit()

    assert created.id == "r1"
    assert created.total_score == created.total_par == 72
    assert [s.get_score_label() for s in created.scores] == ["P"] * 18
    assert created.course_name == "Test Golf Club"
    assert wf.finished
    assert wf.app_state.notification.severity == "success"
    store.create_round.assert_awaited_once()
    assert store.create_round.call_args.kwargs["user_id"] == USER_ID


@pytest.mark.asyncio
async def test_submit_only_from_confirmation():
    wf = _workflow()
    with pytest.raises(WorkflowError):
        await wf.submit()


@pytest.mark.asyncio
async def test_submit_failure_keeps_state_and_allows_resubmit():
    store = _store()
    calls = {"n": 0}
    succeed = store.create_round.side_effect

    async def flaky(round_, user_id=None):
        calls["n"] += 1
        if calls["n"] == 1:
            raise ServiceUnavailableError("down")
        return await succeed(round_, user_id=user_id)

    store.create_round.side_effect = flaky
    wf = _at_confirmation(_workflow(store))
    draft_before = wf.draft.model_dump()

    with pytest.raises(ServiceUnavailableError):
        await wf.submit()

    assert wf.step is EntryStep.CONFIRMATION
    assert not wf.finished
    assert wf.submit_error == "The service is temporarily unavailable"
    assert wf.app_state.notification.action_label == "Retry"
    assert wf.app_state.is_loading is False
    assert wf.draft.model_dump() == draft_before

    created = await wf.submit()
    assert created.id == "r1"
    assert wf.submit_error is None


@pytest.mark.asyncio
async def test_submit_retries_transient_errors():
    store = _store()
    succeed = store.create_round.side_effect
    failures = [ServiceUnavailableError("down"), ServiceUnavailableError("down")]

    async def flaky(round_, user_id=None):
        if failures:
            raise failures.pop()
        return await succeed(round_, user_id=user_id)

    store.create_round.side_effect = flaky
    wf = _at_confirmation(_workflow(store, retry_policy=RetryPolicy(base_delay=0, max_delay=0)))

    created = await wf.submit()
    assert created.id == "r1"
    assert store.create_round.await_count == 3


@pytest.mark.asyncio
async def test_submit_does_not_retry_not_found():
    store = _store()
    store.create_round.side_effect = NotFoundError("missing course")
    wf = _at_confirmation(_workflow(store, retry_policy=RetryPolicy(base_delay=0, max_delay=0)))

    with pytest.raises(NotFoundError):
        await wf.submit()
    assert store.create_round.await_count == 1
    assert wf.submit_error == "Data not found"


@pytest.mark.asyncio
async def test_second_submit_while_saving_is_rejected():
    store = _store()
    succeed = store.create_round.side_effect
    release = asyncio.Event()

    async def slow(round_, user_id=None):
        await release.wait()
        return await succeed(round_, user_id=user_id)

    store.create_round.side_effect = slow
    wf = _at_confirmation(_workflow(store))

    first = asyncio.ensure_future(wf.submit())
    await asyncio.sleep(0)
    assert wf.app_state.is_loading

    with pytest.raises(WorkflowError):
        await wf.submit()

    release.set()
    created = await first
    assert created.id == "r1"
    store.create_round.assert_awaited_once()
    assert wf.submitting is False


@pytest.mark.asyncio
async def test_submit_with_invalid_memo_stays_on_confirmation():
    wf = _at_confirmation(_workflow())
    wf.draft.memo = "x" * 501

    with pytest.raises(ValidationError):
        await wf.submit()
    assert "memo" in wf.errors
    assert wf.step is EntryStep.CONFIRMATION


@pytest.mark.asyncio
async def test_finished_workflow_is_read_only():
    wf = _at_confirmation(_workflow())
    await wf.submit()
    with pytest.raises(WorkflowError):
        wf.set_strokes(1, 5)
    with pytest.raises(WorkflowError):
        await wf.submit()


def test_snapshot_shape():
    snap = _workflow().snapshot()
    assert snap["step"] == "BASIC_INFO"
    assert snap["total_strokes"] == 72
    assert snap["draft"]["participants"][0]["name"] == "Taro"
    assert snap["state"]["notification"] is None


# ================================================================
# AppState
# ================================================================

def test_app_state_notifications():
    state = AppState()
    seen = []
    state.show_notification("Saved", "success")
    assert state.notification.message == "Saved"
    assert state.error is None

    with state.listening(lambda s: seen.append(s.notification)):
        assert state.listener_count == 1
        state.show_notification("Failed", "error")
        state.hide_notification()
    assert state.listener_count == 0
    assert [n.message if n else None for n in seen] == ["Failed", None]
    assert state.error == "Failed"

    state.show_notification("ignored")
    assert len(seen) == 2


def test_app_state_listener_released_on_error():
    state = AppState()
    with pytest.raises(RuntimeError):
        with state.listening(lambda s: None):
            raise RuntimeError("view crashed")
    assert state.listener_count == 0


def test_app_state_loading():
    state = AppState()
    state.set_loading(True, "Saving")
    assert state.is_loading and state.loading_message == "Saving"
    state.set_loading(False)
    assert not state.is_loading and state.loading_message is None


# ================================================================
# Messages and sessions
# ================================================================

def test_error_messages():
    assert get_error_message(code="auth/wrong-password") == "Incorrect password"
    assert get_error_message(NotFoundError("x")) == "Data not found"
    assert get_error_message(ValueError("x")) == "An unexpected error occurred."
    assert get_error_message(status=429).startswith("Request limit")
    assert get_error_message(status=418) == "An error occurred (418)"


def test_session_store_expires_idle_sessions():
    now = {"t": 0.0}
    sessions = EntrySessionStore(ttl=60, clock=lambda: now["t"])
    wf = _workflow()
    sid = sessions.open(wf)
    assert sessions.get(sid) is wf

    now["t"] = 30
    sessions.get(sid)  # touch
    now["t"] = 80
    assert sessions.get(sid) is wf

    now["t"] = 200
    with pytest.raises(NotFoundError):
        sessions.get(sid)
    assert len(sessions) == 0
    assert sessions.discard(sid) is None
