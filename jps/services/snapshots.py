import logging
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_
from jps.models.snapshot import ScoreSnapshot
from jps.services.periods import trimester_of_month, SNAPSHOT_PERIODS

logger = logging.getLogger(__name__)


def _period_filters(period_type: str, year: int, value: Optional[int]) -> list:
    """WHERE clauses selecting the snapshots that belong to a leaderboard period."""
    if period_type not in SNAPSHOT_PERIODS:
        raise ValueError(f"Unsupported period type: {period_type!r}")
    if period_type == "all":
        # Every snapshot on record, whatever the year
        return []
    if period_type in ("month", "trimester") and value is None:
        raise ValueError(f"A {period_type} value is required")
    filters = [ScoreSnapshot.year == year]
    if period_type == "month":
        filters.append(ScoreSnapshot.month == value)
        filters.append(ScoreSnapshot.trimester == trimester_of_month(value))
    elif period_type == "trimester":
        filters.append(ScoreSnapshot.trimester == value)
    return filters


async def upsert_snapshot(
    db: AsyncSession,
    member_id: int,
    year: int,
    month: int,
    trimester: int,
    score: int,
    category: str,
    details: dict,
) -> ScoreSnapshot:
    """Insert the snapshot for this exact key, or overwrite the existing one in place.

    The caller owns the transaction; nothing is committed here.
    """
    if trimester != trimester_of_month(month):
        raise ValueError(f"Trimester {trimester} does not contain month {month}")
    result = await db.execute(
        select(ScoreSnapshot)
        .where(ScoreSnapshot.member_id == member_id)
        .where(ScoreSnapshot.year == year)
        .where(ScoreSnapshot.month == month)
        .where(ScoreSnapshot.trimester == trimester)
    )
    snapshot = result.scalar_one_or_none()

    if snapshot is None:
        snapshot = ScoreSnapshot(
            member_id=member_id,
            year=year,
            month=month,
            trimester=trimester,
        )
        db.add(snapshot)

    snapshot.score = score
    snapshot.category = category
    snapshot.details = details
    await db.flush()
    logger.debug("Saved snapshot member=%s %s-%02d score=%s", member_id, year, month, score)
    return snapshot


async def find_latest_matching(
    db: AsyncSession,
    member_id: int,
    period_type: str,
    year: int,
    value: Optional[int] = None,
) -> Optional[ScoreSnapshot]:
    """Most recent snapshot of a member inside the requested period, or None."""
    result = await db.execute(
        select(ScoreSnapshot)
        .where(ScoreSnapshot.member_id == member_id)
        .where(*_period_filters(period_type, year, value))
        .order_by(ScoreSnapshot.year.desc(), ScoreSnapshot.month.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def latest_snapshots_by_member(
    db: AsyncSession,
    period_type: str,
    year: int,
    value: Optional[int] = None,
    member_ids: Optional[Iterable[int]] = None,
) -> Dict[int, ScoreSnapshot]:
    """Bulk form of find_latest_matching: one query, latest snapshot kept per member."""
    query = select(ScoreSnapshot).where(*_period_filters(period_type, year, value))
    if member_ids is not None:
        query = query.where(ScoreSnapshot.member_id.in_(list(member_ids)))
    result = await db.execute(query)

    latest: Dict[int, ScoreSnapshot] = {}
    for snap in result.scalars().all():
        current = latest.get(snap.member_id)
        if current is None or (snap.year, snap.month) > (current.year, current.month):
            latest[snap.member_id] = snap
    return latest


async def recent_snapshots(
    db: AsyncSession,
    member_id: int,
    limit: int = 6,
    before: Optional[Tuple[int, int]] = None,
) -> List[ScoreSnapshot]:
    """
    Newest-first history of a member.
    `before` is a (year, month) key; only strictly older snapshots are returned.
    """
    query = select(ScoreSnapshot).where(ScoreSnapshot.member_id == member_id)
    if before is not None:
        year, month = before
        query = query.where(
            or_(
                ScoreSnapshot.year < year,
                and_(ScoreSnapshot.year == year, ScoreSnapshot.month < month),
            )
        )
    result = await db.execute(
        query.order_by(ScoreSnapshot.year.desc(), ScoreSnapshot.month.desc()).limit(limit)
    )
    return list(result.scalars().all())
