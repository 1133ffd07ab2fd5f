from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from jps.models.member import Member
from jps.schemas.performance import LeaderboardEntry, RoleLeaderboard
from jps.services.snapshots import latest_snapshots_by_member

DEFAULT_ROLE = "Member"
TOP_PER_ROLE = 3


def _sort_key(sort_by: str):
    if sort_by == "volunteering":
        return lambda entry: entry.estimated_volunteering_hours or 0
    if sort_by == "score":
        return lambda entry: entry.score
    raise ValueError(f"Unsupported sort mode: {sort_by!r}")


async def get_top_members(
    db: AsyncSession,
    period_type: str,
    year: int,
    value: Optional[int] = None,
    sort_by: str = "score",
) -> List[LeaderboardEntry]:
    """
    Ranked list of every member who hasn't opted out of leaderboards.
    Members without a snapshot for the period rank with score 0.
    """
    key = _sort_key(sort_by)

    result = await db.execute(
        select(Member).where(Member.leaderboard_privacy.is_not(True)).order_by(Member.id)
    )
    members = result.scalars().all()
    # "all" spans every year; `year` only narrows the other periods
    snapshots = await latest_snapshots_by_member(db, period_type, year, value)

    entries = []
    for member in members:
        snap = snapshots.get(member.id)
        entries.append(LeaderboardEntry(
            member_id=member.id,
            fullname=member.fullname,
            role=member.role or DEFAULT_ROLE,
            poste=member.poste,
            score=snap.score if snap else 0,
            category=snap.category if snap else "Observer",
            estimated_volunteering_hours=member.estimated_volunteering_hours,
            fee_status=member.fee_status,
        ))

    # Stable sort keeps roster order among ties
    return sorted(entries, key=key, reverse=True)


def filter_by_fee_status(entries: List[LeaderboardEntry], fee_status: str = "all") -> List[LeaderboardEntry]:
    """`paid` keeps members with at least one semester paid, `unpaid` the rest."""
    if fee_status == "all":
        return list(entries)
    if fee_status not in ("paid", "unpaid"):
        raise ValueError(f"Unsupported fee status filter: {fee_status!r}")
    want_paid = fee_status == "paid"
    return [e for e in entries if any(e.fee_status) == want_paid]


def group_by_role(entries: List[LeaderboardEntry], limit: int = TOP_PER_ROLE) -> List[RoleLeaderboard]:
    """Top `limit` entries per role, keeping the incoming order; roles sorted by name."""
    grouped: Dict[str, List[LeaderboardEntry]] = {}
    for entry in entries:
        role_entries = grouped.setdefault(entry.role or DEFAULT_ROLE, [])
        if len(role_entries) < limit:
            role_entries.append(entry)
    return [RoleLeaderboard(role=role, members=grouped[role]) for role in sorted(grouped)]
