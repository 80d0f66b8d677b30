"""API-specific response models for list views and aggregated data."""

from datetime import date, datetime, time
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

from models import Pagination, Participant, UserStatsSummary


class RoundSummaryResponse(BaseModel):
    """Lightweight round for list views."""
    id: str
    course_id: str
    course_name: Optional[str] = None
    play_date: date
    tee_name: Optional[str] = None
    total_score: Optional[int] = None
    total_par: Optional[int] = None
    to_par: Optional[int] = None
    front_nine: Optional[int] = None
    back_nine: Optional[int] = None
    total_putts: Optional[int] = None
    total_gir: Optional[int] = None
    fairways_hit: Optional[int] = None
    participant_count: int = 0
    memo: Optional[str] = None


class RoundListResponse(BaseModel):
    items: List[RoundSummaryResponse]
    pagination: Pagination


class HoleScoreDetail(BaseModel):
    hole_number: int
    par: int
    strokes: int
    putts: Optional[int] = None
    fairway_hit: Optional[bool] = None
    green_in_regulation: Optional[bool] = None
    penalties: Optional[int] = None
    to_par: int
    score_type: str
    label: str
    color: str


class RoundDetailResponse(RoundSummaryResponse):
    """Full round with per-hole score-to-par labels."""
    user_id: Optional[str] = None
    start_time: Optional[time] = None
    weather: Optional[str] = None
    temperature: Optional[float] = None
    wind_speed: Optional[float] = None
    front_nine_par: Optional[int] = None
    back_nine_par: Optional[int] = None
    total_penalties: int = 0
    is_completed: bool = False
    metrics: Dict[str, Optional[float]] = Field(default_factory=dict)
    scores: List[HoleScoreDetail] = Field(default_factory=list)
    participants: List[Participant] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DashboardResponse(BaseModel):
    """Aggregated stats for the dashboard page."""
    stats: UserStatsSummary
    handicap: Optional[float] = None
    best_round_id: Optional[str] = None
    best_round_course: Optional[str] = None
    recent_rounds: List[RoundSummaryResponse]
    average_putts: Optional[float] = None
    average_gir: Optional[float] = None
    scoring_by_par: List[Dict[str, Any]] = Field(default_factory=list)
    score_distribution: List[Dict[str, Any]] = Field(default_factory=list)


class CourseSummaryResponse(BaseModel):
    """Course for card/list views."""
    id: str
    name: str
    prefecture: Optional[str] = None
    city: Optional[str] = None
    par: Optional[int] = None
    total_holes: int = 0
    tee_names: List[str] = Field(default_factory=list)


class NotificationResponse(BaseModel):
    message: str
    severity: Literal["success", "error", "warning", "info"]
    action_label: Optional[str] = None


class EntryStateResponse(BaseModel):
    notification: Optional[NotificationResponse] = None
    is_loading: bool = False
    loading_message: Optional[str] = None
    error: Optional[str] = None


class EntrySessionResponse(BaseModel):
    """Snapshot of an open round-entry workflow."""
    session_id: str
    step: str
    step_index: int
    finished: bool
    round_id: Optional[str] = None
    draft: Dict[str, Any]
    errors: Dict[str, str] = Field(default_factory=dict)
    submit_error: Optional[str] = None
    front_nine_total: int
    back_nine_total: int
    total_strokes: int
    total_par: int
    state: EntryStateResponse
