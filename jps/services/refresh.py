import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select
from jps.config import settings
from jps.models.member import Member
from jps.schemas.performance import ScoreResult
from jps.services.performance import calculate_score, get_member
from jps.services.periods import as_naive_utc, trimester_of, utcnow
from jps.services.snapshots import upsert_snapshot

logger = logging.getLogger(__name__)


@dataclass
class RefreshSummary:
    refreshed: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)


def chunked(items: list, size: int) -> List[list]:
    return [items[i:i + size] for i in range(0, len(items), size)]


async def refresh_one(
    db: AsyncSession,
    member_id: int,
    period_type: Optional[str] = None,
    reference_date: Optional[datetime] = None,
) -> ScoreResult:
    """Recompute a member's score and store it under the reference month."""
    reference = as_naive_utc(reference_date) or utcnow()
    result = await calculate_score(db, member_id, period_type, reference)
    if await get_member(db, member_id) is None:
        # Nothing to attach a snapshot to
        logger.warning("Member %s not found, score not stored", member_id)
        return result

    await upsert_snapshot(
        db,
        member_id=member_id,
        year=reference.year,
        month=reference.month,
        trimester=trimester_of(reference),
        score=result.score,
        category=result.category,
        details=result.breakdown.model_dump(),
    )
    await db.commit()
    return result


async def _refresh_isolated(
    session_factory: async_sessionmaker,
    member_id: int,
    period_type: Optional[str],
    reference: datetime,
) -> bool:
    # Each member gets its own session; a session can't be shared across tasks.
    try:
        async with session_factory() as session:
            await refresh_one(session, member_id, period_type, reference)
        return True
    except Exception:
        logger.exception("Score refresh failed for member %s", member_id)
        return False


async def refresh_all(
    session_factory: async_sessionmaker,
    period_type: Optional[str] = None,
    reference_date: Optional[datetime] = None,
    chunk_size: Optional[int] = None,
) -> RefreshSummary:
    """
    Refresh every member's snapshot.

    Chunks run one after the other, members inside a chunk run concurrently.
    A failing member is logged and skipped; only a failure to load the roster
    is raised.
    """
    reference = as_naive_utc(reference_date) or utcnow()
    chunk_size = chunk_size or settings.REFRESH_CHUNK_SIZE

    async with session_factory() as session:
        result = await session.execute(select(Member.id).order_by(Member.id))
        member_ids = [row[0] for row in result.fetchall()]

    summary = RefreshSummary()
    for chunk in chunked(member_ids, chunk_size):
        outcomes = await asyncio.gather(
            *(_refresh_isolated(session_factory, member_id, period_type, reference) for member_id in chunk)
        )
        for member_id, ok in zip(chunk, outcomes):
            (summary.refreshed if ok else summary.failed).append(member_id)

    logger.info(
        "Refreshed %d member scores (%d failed)", len(summary.refreshed), len(summary.failed)
    )
    return summary
