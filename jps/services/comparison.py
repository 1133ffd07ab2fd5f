"""
Comparative metrics shown next to a member's score.

Everything here except `get_mentorship_impact` is a pure function of its
arguments.
"""
import statistics
from datetime import datetime
from typing import Iterable, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from jps.models.member import Member
from jps.services.multipliers import ACTIVITY_TYPES
from jps.services.periods import months_between, trimester_of, as_naive_utc
from jps.services.snapshots import latest_snapshots_by_member


def _half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def mentorship_impact(advisee_scores: Sequence[float]) -> int:
    """MIS: mean current score of the member's advisees."""
    if not advisee_scores:
        return 0
    return _half_up(sum(advisee_scores) / len(advisee_scores))


def consistency_index(scores: Sequence[float]) -> int:
    """MCI: 100 * (1 - stddev/mean) over the snapshot history, floored at 0."""
    if len(scores) < 2:
        return 100
    mean = statistics.fmean(scores)
    if mean == 0:
        return 0
    deviation = statistics.pstdev(scores)
    return max(0, min(100, _half_up(100 * (1 - deviation / mean))))


def contribution_density(lifetime_points: float, joined_at: Optional[datetime], reference: datetime) -> float:
    """CD: lifetime points per month of membership."""
    joined_at = as_naive_utc(joined_at) or reference
    months = max(1, months_between(joined_at, reference))
    return round((lifetime_points or 0) / months, 1)


def engagement_diversity(activity_types: Iterable[str]) -> int:
    """DoE: share of the activity categories the member took part in."""
    distinct = {t for t in activity_types if t in ACTIVITY_TYPES}
    return _half_up(100 * len(distinct) / len(ACTIVITY_TYPES))


def momentum(current: float, history: Sequence[float]) -> int:
    """Growth in % against the most recent prior score (history is newest first)."""
    if not history or not history[0]:
        return 0
    previous = history[0]
    return _half_up(100 * (current - previous) / previous)


async def get_mentorship_impact(db: AsyncSession, member_id: int, reference: datetime) -> int:
    """MIS for `member_id`, from the advisees' snapshots of the reference trimester."""
    result = await db.execute(select(Member.id).where(Member.advisor_id == member_id))
    advisee_ids = [row[0] for row in result.fetchall()]
    if not advisee_ids:
        return 0

    snaps = await latest_snapshots_by_member(
        db, "trimester", reference.year, trimester_of(reference), member_ids=advisee_ids
    )
    return mentorship_impact([snap.score for snap in snaps.values()])
