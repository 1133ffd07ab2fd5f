from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Literal

PeriodType = Literal["month", "trimester"]
SnapshotPeriod = Literal["month", "trimester", "year", "all"]
SortMode = Literal["score", "volunteering"]
FeeStatusFilter = Literal["all", "paid", "unpaid"]

PerformanceCategory = Literal[
    "Observer",
    "Active Citizen",
    "Rising Leader",
    "Impact Architect",
    "Outstanding Leader",
]

class ScoreBreakdown(BaseModel):
    activity_points: float = 0.0
    meetings_points: float = 0.0
    formations_points: float = 0.0
    general_assembly_points: float = 0.0
    events_points: float = 0.0
    task_points: float = 0.0
    earned_points: float = 0.0
    participation_rate: float = Field(1.0, ge=0.0, le=1.0)         # multiplier used for the score
    actual_participation_rate: float = Field(1.0, ge=0.0, le=1.0)  # raw rate, for display
    attended_activities: int = 0
    total_activities: int = 0
    complaints_penalty: float = 0.0
    fee_multiplier: float = 1.0

class ScoreComparison(BaseModel):
    mentorship_impact: int = 0        # MIS
    consistency_index: int = 100      # MCI
    contribution_density: float = 0.0  # CD
    engagement_diversity: int = 0     # DoE
    momentum: int = 0                 # growth %

class ScoreResult(BaseModel):
    member_id: int
    period_type: PeriodType
    period_start: datetime
    period_end: datetime
    score: int = Field(..., ge=0)
    category: PerformanceCategory
    breakdown: ScoreBreakdown
    comparison: ScoreComparison

class SnapshotResponse(BaseModel):
    id: int
    member_id: int
    year: int
    month: int
    trimester: int
    score: int
    category: str
    details: dict
    computed_at: Optional[datetime]

    model_config = {"from_attributes": True}

class LeaderboardEntry(BaseModel):
    member_id: int
    fullname: str
    role: str
    poste: Optional[str] = None
    score: int = 0
    category: str = "Observer"
    estimated_volunteering_hours: Optional[float] = None
    fee_status: List[bool] = [False, False]

class RoleLeaderboard(BaseModel):
    role: str
    members: List[LeaderboardEntry]

class RefreshAccepted(BaseModel):
    status: str  # "scheduled"
    period_type: PeriodType
