from sqlalchemy import Column, Integer, String, Text, ForeignKey, func
from jps.database import Base, UTCDateTime

class PointsHistory(Base):
    __tablename__ = "points_history"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    points = Column(Integer, nullable=False)  # positive or negative delta
    source_type = Column(String, nullable=True, default="manual")  # manual, activity, task, penalty, jps
    description = Column(Text, nullable=True)
    created_at = Column(UTCDateTime(), server_default=func.now())
