"""Round entry endpoints: one multi-step workflow per session."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from typing import Literal, Optional
from database.db_manager import DatabaseManager
from api.dependencies import get_db, get_entry_sessions
from api.schemas import EntrySessionResponse
from entry import RoundEntryWorkflow
from entry.sessions import EntrySessionStore

router = APIRouter()


class BasicInfoRequest(BaseModel):
    course_id: Optional[str] = None
    play_date: Optional[str] = None
    start_time: Optional[str] = None
    tee_name: Optional[str] = None
    weather: Optional[str] = None
    temperature: Optional[float] = None
    wind_speed: Optional[float] = None


class ParticipantRequest(BaseModel):
    user_id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[Literal["registered", "guest"]] = None
    handicap: Optional[float] = None


class ScoreRequest(BaseModel):
    strokes: Optional[int] = None
    putts: Optional[int] = None
    fairway_hit: Optional[bool] = None
    green_in_regulation: Optional[bool] = None
    penalties: Optional[int] = None


class AllStrokesRequest(BaseModel):
    strokes: int = Field(..., ge=1, le=20)


class MemoRequest(BaseModel):
    memo: str = ""


def _snapshot(session_id: str, workflow: RoundEntryWorkflow) -> EntrySessionResponse:
    return EntrySessionResponse(session_id=session_id, **workflow.snapshot())


@router.post("", response_model=EntrySessionResponse, status_code=201)
async def open_entry(
    user_id: str = Query(..., description="User recording the round"),
    db: DatabaseManager = Depends(get_db),
    sessions: EntrySessionStore = Depends(get_entry_sessions),
):
    """Start a new round entry, pre-filled with the user's name and default tee."""
    user = await db.call(lambda: db.users.get_user(user_id))
    if not user:
        raise HTTPException(404, "User not found")
    workflow = RoundEntryWorkflow(
        db,
        user_id=user_id,
        user_name=user.name,
        user_handicap=user.handicap,
        retry_policy=db.retry_policy,
    )
    workflow.draft.tee_name = user.preferences.default_tee
    session_id = sessions.open(workflow)
    return _snapshot(session_id, workflow)


@router.get("/{session_id}", response_model=EntrySessionResponse)
async def get_entry(session_id: str, sessions: EntrySessionStore = Depends(get_entry_sessions)):
    return _snapshot(session_id, sessions.get(session_id))


@router.delete("/{session_id}", status_code=204)
async def discard_entry(session_id: str, sessions: EntrySessionStore = Depends(get_entry_sessions)):
    if not sessions.discard(session_id):
        raise HTTPException(404, "Entry session not found")


@router.put("/{session_id}/basic-info", response_model=EntrySessionResponse)
async def update_basic_info(
    session_id: str,
    req: BasicInfoRequest,
    db: DatabaseManager = Depends(get_db),
    sessions: EntrySessionStore = Depends(get_entry_sessions),
):
    """Edit basic info. A new course_id loads that course's name and hole pars."""
    workflow = sessions.get(session_id)
    updates = req.model_dump(exclude_unset=True)
    # Cleared text fields are stored as empty strings so the step check reports them
    for name in ("play_date", "start_time", "tee_name"):
        if name in updates and updates[name] is None:
            updates[name] = ""
    if "course_id" in updates:
        course_id = updates.pop("course_id")
        if not course_id:
            updates.update(course_id="", course_name=None)
        elif course_id != workflow.draft.course_id:
            course = await db.call(lambda: db.courses.get_course(course_id))
            if not course:
                raise HTTPException(404, "Course not found")
            workflow.select_course(course)
    workflow.errors = workflow.update_basic_info(**updates)
    return _snapshot(session_id, workflow)


@router.post("/{session_id}/participants", response_model=EntrySessionResponse, status_code=201)
async def add_participant(
    session_id: str,
    req: ParticipantRequest,
    sessions: EntrySessionStore = Depends(get_entry_sessions),
):
    workflow = sessions.get(session_id)
    workflow.add_participant(
        name=req.name or "", type=req.type or "guest", handicap=req.handicap, user_id=req.user_id
    )
    return _snapshot(session_id, workflow)


@router.put("/{session_id}/participants/{index}", response_model=EntrySessionResponse)
async def update_participant(
    session_id: str,
    index: int,
    req: ParticipantRequest,
    sessions: EntrySessionStore = Depends(get_entry_sessions),
):
    workflow = sessions.get(session_id)
    workflow.errors = workflow.update_participant(index, **req.model_dump(exclude_unset=True))
    return _snapshot(session_id, workflow)


@router.delete("/{session_id}/participants/{index}", response_model=EntrySessionResponse)
async def remove_participant(
    session_id: str,
    index: int,
    sessions: EntrySessionStore = Depends(get_entry_sessions),
):
    workflow = sessions.get(session_id)
    workflow.remove_participant(index)
    return _snapshot(session_id, workflow)


@router.put("/{session_id}/scores/{hole_number}", response_model=EntrySessionResponse)
async def update_score(
    session_id: str,
    hole_number: int,
    req: ScoreRequest,
    sessions: EntrySessionStore = Depends(get_entry_sessions),
):
    workflow = sessions.get(session_id)
    workflow.errors = workflow.update_score(hole_number, **req.model_dump(exclude_unset=True))
    return _snapshot(session_id, workflow)


@router.put("/{session_id}/scores", response_model=EntrySessionResponse)
async def set_all_strokes(
    session_id: str,
    req: AllStrokesRequest,
    sessions: EntrySessionStore = Depends(get_entry_sessions),
):
    workflow = sessions.get(session_id)
    workflow.set_all_strokes(req.strokes)
    return _snapshot(session_id, workflow)


@router.put("/{session_id}/memo", response_model=EntrySessionResponse)
async def update_memo(
    session_id: str,
    req: MemoRequest,
    sessions: EntrySessionStore = Depends(get_entry_sessions),
):
    workflow = sessions.get(session_id)
    workflow.errors = workflow.set_memo(req.memo)
    return _snapshot(session_id, workflow)


@router.post("/{session_id}/advance", response_model=EntrySessionResponse)
async def advance(session_id: str, sessions: EntrySessionStore = Depends(get_entry_sessions)):
    """Validate the current step and move on; field errors come back in the snapshot."""
    workflow = sessions.get(session_id)
    workflow.advance()
    return _snapshot(session_id, workflow)


@router.post("/{session_id}/retreat", response_model=EntrySessionResponse)
async def retreat(session_id: str, sessions: EntrySessionStore = Depends(get_entry_sessions)):
    workflow = sessions.get(session_id)
    workflow.retreat()
    return _snapshot(session_id, workflow)


@router.post("/{session_id}/submit", response_model=EntrySessionResponse)
async def submit(session_id: str, sessions: EntrySessionStore = Depends(get_entry_sessions)):
    """Save the round. The session is closed once the round has been created."""
    workflow = sessions.get(session_id)
    await workflow.submit()
    sessions.discard(session_id)
    return _snapshot(session_id, workflow)
