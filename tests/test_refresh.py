"""Tests for the refresh orchestrator."""

import asyncio
from datetime import datetime

import pytest
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from jps.database import Base
from jps.models.member import Member
from jps.models.snapshot import ScoreSnapshot
from jps.services import refresh as refresh_service
from jps.services.refresh import chunked, refresh_all, refresh_one

CLOSED_FEB = datetime(2024, 2, 29, 22)


def test_chunked():
    assert chunked([1, 2, 3, 4, 5, 6, 7], 5) == [[1, 2, 3, 4, 5], [6, 7]]
    assert chunked([], 5) == []


@pytest.mark.asyncio
async def test_refresh_one_persists_snapshot(seed, db_session):
    member = await seed.member()
    await seed.points(member, 90)
    await seed.commit()

    result = await refresh_one(db_session, member.id, "month", CLOSED_FEB)

    snap = (await db_session.execute(select(ScoreSnapshot))).scalar_one()
    assert (snap.member_id, snap.year, snap.month, snap.trimester) == (member.id, 2024, 2, 1)
    assert snap.score == result.score == 90
    assert snap.category == result.category == "Active Citizen"
    assert snap.details["earned_points"] == 90


@pytest.mark.asyncio
async def test_refresh_twice_is_idempotent(seed, db_session):
    member = await seed.member()
    official = await seed.activity("meeting", datetime(2024, 2, 5), "official")
    await seed.participation(member, official, rating=4)
    await seed.assignment(member, "major", star_rating=5)
    await seed.commit()

    first = await refresh_one(db_session, member.id, "month", CLOSED_FEB)
    second = await refresh_one(db_session, member.id, "month", CLOSED_FEB)

    count = await db_session.execute(select(func.count(ScoreSnapshot.id)))
    assert count.scalar_one() == 1
    assert first.score == second.score
    stored = (await db_session.execute(select(ScoreSnapshot))).scalar_one()
    assert stored.score == first.score


@pytest.mark.asyncio
async def test_refresh_all_writes_every_member(seed, session_factory):
    members = [await seed.member(fullname=f"Member {i}") for i in range(3)]
    await seed.points(members[1], 300)
    await seed.commit()

    summary = await refresh_all(session_factory, "month", CLOSED_FEB, chunk_size=1)

    assert summary.refreshed == [m.id for m in members]
    assert summary.failed == []
    async with session_factory() as session:
        rows = (await session.execute(select(ScoreSnapshot).order_by(ScoreSnapshot.member_id))).scalars().all()
    assert [r.score for r in rows] == [0, 300, 0]


@pytest.mark.asyncio
async def test_refresh_all_isolates_failures(seed, session_factory, monkeypatch, caplog):
    members = [await seed.member(fullname=f"Member {i}") for i in range(7)]
    await seed.commit()
    broken = members[2].id
    seen = []
    in_flight = 0
    peak = 0

    async def fake_refresh_one(db, member_id, period_type=None, reference_date=None):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0)
        in_flight -= 1
        if member_id == broken:
            raise RuntimeError("connection reset")
        seen.append(member_id)

    monkeypatch.setattr(refresh_service, "refresh_one", fake_refresh_one)

    summary = await refresh_all(session_factory, "month", CLOSED_FEB)

    assert summary.failed == [broken]
    assert sorted(summary.refreshed) == sorted(m.id for m in members if m.id != broken)
    assert sorted(seen) == sorted(summary.refreshed)
    assert peak <= 5
    assert f"member {broken}" in caplog.text


@pytest.mark.asyncio
async def test_refresh_all_with_no_members(session_factory):
    summary = await refresh_all(session_factory, "month", CLOSED_FEB)
    assert summary.refreshed == []
    assert summary.failed == []


@pytest.fixture()
async def strict_session_factory():
    # SQLite only enforces foreign keys when asked to, per connection
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.mark.asyncio
async def test_refresh_missing_member_returns_zero_without_snapshot(strict_session_factory):
    async with strict_session_factory() as session:
        result = await refresh_one(session, 4242, "month", datetime(2024, 2, 20))

        assert result.member_id == 4242
        assert result.score == 0
        assert result.category == "Observer"
        count = await session.execute(select(func.count(ScoreSnapshot.id)))
        assert count.scalar_one() == 0


@pytest.mark.asyncio
async def test_refresh_existing_member_with_foreign_keys_enforced(strict_session_factory):
    async with strict_session_factory() as session:
        member = Member(fullname="Strict Member", role="Member", created_at=datetime(2023, 1, 1))
        session.add(member)
        await session.commit()

        await refresh_one(session, member.id, "month", CLOSED_FEB)

        stored = (await session.execute(select(ScoreSnapshot))).scalar_one()
        assert stored.member_id == member.id
