from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from jps.config import settings
from jps.models.activity import Activity, Participation
from jps.models.complaint import Complaint
from jps.models.member import Member
from jps.models.points import PointsHistory
from jps.models.task import TaskAssignment
from jps.schemas.performance import ScoreBreakdown, ScoreComparison, ScoreResult
from jps.services import comparison
from jps.services.multipliers import activity_multiplier, task_multiplier
from jps.services.periods import (
    resolve_window, resolve_cutoff, as_naive_utc, utcnow,
)
from jps.services.snapshots import recent_snapshots

# Points-ledger entries written by the engine itself carry this tag.
ENGINE_SOURCE_TAG = "jps"

DEFAULT_RATING = 3
RATING_FACTOR = 0.1
LENIENCY_THRESHOLD = 3     # fewer activities than this in the window...
LENIENCY_RATE = 0.8        # ...and the scoring rate never drops below this
FEE_MULTIPLIER = 1.1
COMPLAINT_PENALTY = 25

CATEGORY_BANDS = [
    (0, 75, "Observer"),
    (76, 200, "Active Citizen"),
    (201, 400, "Rising Leader"),
    (401, 650, "Impact Architect"),
    (651, None, "Outstanding Leader"),
]

BUCKET_BY_TYPE = {
    "meeting": "meetings_points",
    "formation": "formations_points",
    "general_assembly": "general_assembly_points",
    "event": "events_points",
}


def round_score(value: float) -> int:
    """Half-up rounding; scores are never negative."""
    return int(value + 0.5)


def get_category(score: int) -> str:
    for low, high, name in CATEGORY_BANDS:
        if score >= low and (high is None or score <= high):
            return name
    return "Observer"


def scoring_participation_rate(attended: int, total: int) -> Tuple[float, float]:
    """
    Returns (scoring_rate, actual_rate), both within [0, 1].
    Low-activity windows are floored at LENIENCY_RATE so nobody is punished for them.
    """
    actual = min(1.0, attended / total) if total > 0 else 1.0
    if total < LENIENCY_THRESHOLD:
        rate = max(LENIENCY_RATE, actual)
    else:
        rate = max(settings.MIN_SCORING_RATE, actual)
    return min(1.0, rate), actual


def fee_multiplier(member: Optional[Member]) -> float:
    if member is not None and member.fee_paid_first_semester and member.fee_paid_second_semester:
        return FEE_MULTIPLIER
    return 1.0


async def get_member(db: AsyncSession, member_id: int) -> Optional[Member]:
    result = await db.execute(select(Member).where(Member.id == member_id))
    return result.scalar_one_or_none()


async def get_attended_participations(
    db: AsyncSession, member_id: int, start: datetime, cutoff: datetime
) -> List[Participation]:
    """Attended (not interest-only) participations in activities held in [start, cutoff]."""
    result = await db.execute(
        select(Participation)
        .join(Activity, Activity.id == Participation.activity_id)
        .where(Participation.member_id == member_id)
        .where(Participation.is_interested.is_(False))
        .where(Activity.begin_date >= start)
        .where(Activity.begin_date <= cutoff)
    )
    return list(result.scalars().all())


async def get_completed_assignments(
    db: AsyncSession, member_id: int, start: datetime, end: datetime
) -> List[TaskAssignment]:
    result = await db.execute(
        select(TaskAssignment)
        .where(TaskAssignment.member_id == member_id)
        .where(TaskAssignment.status == "completed")
        .where(TaskAssignment.updated_at >= start)
        .where(TaskAssignment.updated_at <= end)
    )
    return list(result.scalars().all())


async def get_earned_points(db: AsyncSession, member_id: int, start: datetime, end: datetime) -> float:
    """Ledger points of the window, leaving out what the engine itself awarded."""
    result = await db.execute(
        select(func.coalesce(func.sum(PointsHistory.points), 0))
        .where(PointsHistory.member_id == member_id)
        .where(PointsHistory.created_at >= start)
        .where(PointsHistory.created_at <= end)
        .where(or_(PointsHistory.source_type.is_(None), PointsHistory.source_type != ENGINE_SOURCE_TAG))
    )
    return float(result.scalar_one() or 0)


async def count_activities(db: AsyncSession, start: datetime, cutoff: datetime) -> int:
    """Organization-wide activities held in [start, cutoff]."""
    if start > cutoff:
        return 0
    result = await db.execute(
        select(func.count(Activity.id))
        .where(Activity.begin_date >= start)
        .where(Activity.begin_date <= cutoff)
    )
    return result.scalar_one() or 0


async def count_resolved_complaints(db: AsyncSession, member_id: int, start: datetime, end: datetime) -> int:
    result = await db.execute(
        select(func.count(Complaint.id))
        .where(Complaint.member_id == member_id)
        .where(Complaint.status == "resolved")
        .where(Complaint.created_at >= start)
        .where(Complaint.created_at <= end)
    )
    return result.scalar_one() or 0


async def calculate_score(
    db: AsyncSession,
    member_id: int,
    period_type: Optional[str] = None,
    reference_date: Optional[datetime] = None,
) -> ScoreResult:
    period_type = period_type or settings.DEFAULT_PERIOD
    reference = as_naive_utc(reference_date) or utcnow()
    start, end = resolve_window(period_type, reference)
    cutoff = resolve_cutoff(reference, end)

    member = await get_member(db, member_id)

    # 1. Activities
    participations = await get_attended_participations(db, member_id, start, cutoff)
    breakdown = ScoreBreakdown()
    for participation in participations:
        rating = participation.rating if participation.rating is not None else DEFAULT_RATING
        points = activity_multiplier(participation.activity) * (rating * RATING_FACTOR)
        breakdown.activity_points += points
        bucket = BUCKET_BY_TYPE.get(participation.activity.type)
        if bucket:
            setattr(breakdown, bucket, getattr(breakdown, bucket) + points)

    # 2. Tasks
    for assignment in await get_completed_assignments(db, member_id, start, end):
        rating = assignment.star_rating if assignment.star_rating is not None else DEFAULT_RATING
        complexity = assignment.task.complexity if assignment.task is not None else None
        breakdown.task_points += task_multiplier(complexity) * rating

    # 3. Manually earned points
    breakdown.earned_points = await get_earned_points(db, member_id, start, end)

    # 4. Participation rate, counted from the later of period start and join date
    joined_at = as_naive_utc(member.created_at) if member is not None else None
    effective_start = max(start, joined_at) if joined_at else start
    total = await count_activities(db, effective_start, cutoff)
    breakdown.attended_activities = len(participations)
    breakdown.total_activities = total
    breakdown.participation_rate, breakdown.actual_participation_rate = scoring_participation_rate(
        len(participations), total
    )

    # 5. Fee and complaints
    breakdown.fee_multiplier = fee_multiplier(member)
    breakdown.complaints_penalty = float(
        await count_resolved_complaints(db, member_id, start, end) * COMPLAINT_PENALTY
    )

    raw_total = breakdown.activity_points + breakdown.task_points + breakdown.earned_points
    final_score = max(
        0.0,
        raw_total * breakdown.participation_rate * breakdown.fee_multiplier - breakdown.complaints_penalty,
    )
    score = round_score(final_score)

    # 6. Comparison against history, excluding the snapshot of the reference month itself
    history = await recent_snapshots(
        db, member_id, limit=settings.SNAPSHOT_HISTORY_LIMIT, before=(reference.year, reference.month)
    )
    history_scores = [snap.score for snap in history]
    metrics = ScoreComparison(
        mentorship_impact=await comparison.get_mentorship_impact(db, member_id, reference),
        consistency_index=comparison.consistency_index(history_scores),
        contribution_density=comparison.contribution_density(
            member.points if member is not None else 0, joined_at, reference
        ),
        engagement_diversity=comparison.engagement_diversity(
            p.activity.type for p in participations if p.activity is not None
        ),
        momentum=comparison.momentum(final_score, history_scores),
    )

    return ScoreResult(
        member_id=member_id,
        period_type=period_type,
        period_start=start,
        period_end=end,
        score=score,
        category=get_category(score),
        breakdown=breakdown,
        comparison=metrics,
    )

