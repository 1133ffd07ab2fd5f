# jps/models/snapshot.py
from sqlalchemy import Column, Integer, String, JSON, ForeignKey, UniqueConstraint, func
from jps.database import Base, UTCDateTime

class ScoreSnapshot(Base):
    __tablename__ = "score_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)      # 1-12
    trimester = Column(Integer, nullable=False)  # always ceil(month / 3)
    score = Column(Integer, nullable=False)
    category = Column(String, nullable=False)
    details = Column(JSON, nullable=False, default=dict)
    computed_at = Column(UTCDateTime(), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("member_id", "year", "month", "trimester", name="uq_member_year_month_trimester"),
    )
