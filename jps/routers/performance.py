from datetime import datetime
from typing import List, Optional, Union
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from jps.database import get_db, get_session_factory
from jps.config import settings
from jps.core.auth import get_current_member, get_current_admin
from jps.models.member import Member
from jps.schemas.performance import (
    PeriodType, SnapshotPeriod, SortMode, FeeStatusFilter,
    ScoreResult, SnapshotResponse, LeaderboardEntry, RoleLeaderboard, RefreshAccepted,
)
from jps.services.performance import calculate_score
from jps.services.refresh import refresh_one, refresh_all
from jps.services.leaderboard import get_top_members, filter_by_fee_status, group_by_role
from jps.services.periods import utcnow
from jps.services.snapshots import recent_snapshots

router = APIRouter(prefix="/performance", tags=["performance"])

PERIOD_VALUE_RANGES = {"month": (1, 12), "trimester": (1, 4)}


@router.get("/me", response_model=ScoreResult)
async def get_my_score(
    period: Optional[PeriodType] = None,
    reference_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    return await calculate_score(db, current_member.id, period, reference_date)


@router.get("/members/{member_id}", response_model=ScoreResult)
async def get_member_score(
    member_id: int,
    period: Optional[PeriodType] = None,
    reference_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    # Unknown members score zero rather than 404
    return await calculate_score(db, member_id, period, reference_date)


@router.post("/members/{member_id}/refresh", response_model=ScoreResult)
async def refresh_member_score(
    member_id: int,
    period: Optional[PeriodType] = None,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(get_current_admin)
):
    return await refresh_one(db, member_id, period)


@router.post("/refresh", response_model=RefreshAccepted, status_code=status.HTTP_202_ACCEPTED)
async def refresh_all_scores(
    background_tasks: BackgroundTasks,
    period: Optional[PeriodType] = None,
    session_factory: async_sessionmaker = Depends(get_session_factory),
    admin: Member = Depends(get_current_admin)
):
    period = period or settings.DEFAULT_PERIOD
    # Fire and forget; per-member failures are only logged
    background_tasks.add_task(refresh_all, session_factory, period)
    return RefreshAccepted(status="scheduled", period_type=period)


@router.get("/leaderboard", response_model=Union[List[RoleLeaderboard], List[LeaderboardEntry]])
async def get_leaderboard(
    period: SnapshotPeriod = "trimester",
    year: Optional[int] = None,
    value: Optional[int] = None,
    sort_by: SortMode = "score",
    fee_status: FeeStatusFilter = "all",
    by_role: bool = Query(False, alias="group_by_role"),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    if period in PERIOD_VALUE_RANGES:
        low, high = PERIOD_VALUE_RANGES[period]
        if value is None or not low <= value <= high:
            raise HTTPException(400, f"{period} requires a value between {low} and {high}")

    entries = await get_top_members(db, period, year or utcnow().year, value, sort_by)
    entries = filter_by_fee_status(entries, fee_status)
    if by_role:
        return group_by_role(entries)
    return entries


@router.get("/members/{member_id}/snapshots", response_model=List[SnapshotResponse])
async def get_member_snapshots(
    member_id: int,
    limit: int = Query(6, ge=1, le=24),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    # Newest first
    return await recent_snapshots(db, member_id, limit=limit)
