import os
from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from jps.database import Base  # noqa: E402
from jps.models.activity import Activity, Formation, GeneralAssembly, Meeting, Participation  # noqa: E402
from jps.models.complaint import Complaint  # noqa: E402
from jps.models.member import Member  # noqa: E402
from jps.models.points import PointsHistory  # noqa: E402
from jps.models.snapshot import ScoreSnapshot  # noqa: E402
from jps.models.task import Task, TaskAssignment  # noqa: E402


@pytest.fixture()
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


class Seeder:
    """Writes collaborator rows the way the profile/activity/task services would."""

    def __init__(self, session):
        self.session = session

    async def _add(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def member(self, fullname="Test Member", joined=datetime(2023, 1, 1), **kwargs):
        kwargs.setdefault("role", "Member")
        return await self._add(Member(fullname=fullname, created_at=joined, **kwargs))

    async def activity(self, type, begin_date, subtype=None, name="Activity"):
        activity = Activity(
            name=name,
            type=type,
            begin_date=begin_date,
            meeting=Meeting(meeting_type=subtype) if type == "meeting" else None,
            formation=Formation(training_type=subtype) if type == "formation" else None,
            general_assembly=GeneralAssembly(assembly_type=subtype) if type == "general_assembly" else None,
        )
        return await self._add(activity)

    async def participation(self, member, activity, rating=None, is_interested=False):
        return await self._add(Participation(
            member_id=member.id, activity_id=activity.id, rating=rating, is_interested=is_interested,
        ))

    async def assignment(self, member, complexity="minor", star_rating=None, status="completed",
                         updated_at=datetime(2024, 2, 10)):
        task = await self._add(Task(title="Task", complexity=complexity))
        return await self._add(TaskAssignment(
            member_id=member.id, task_id=task.id, status=status,
            star_rating=star_rating, updated_at=updated_at,
        ))

    async def points(self, member, points, created_at=datetime(2024, 2, 10), source_type="manual"):
        return await self._add(PointsHistory(
            member_id=member.id, points=points, source_type=source_type, created_at=created_at,
        ))

    async def complaint(self, member, status="resolved", created_at=datetime(2024, 2, 10)):
        return await self._add(Complaint(
            member_id=member.id, content="Late again", status=status, created_at=created_at,
        ))

    async def snapshot(self, member, year, month, score, category="Observer"):
        return await self._add(ScoreSnapshot(
            member_id=member.id, year=year, month=month, trimester=(month - 1) // 3 + 1,
            score=score, category=category, details={},
        ))

    async def commit(self):
        # Later reads start from a clean identity map so eager loaders run
        await self.session.commit()
        self.session.expunge_all()


@pytest.fixture()
def seed(db_session):
    return Seeder(db_session)
