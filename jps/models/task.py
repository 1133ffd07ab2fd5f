from sqlalchemy import Column, Integer, String, Text, ForeignKey, func
from sqlalchemy.orm import relationship
from jps.database import Base, UTCDateTime

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    complexity = Column(String, nullable=True, default="minor")  # lead, major, minor
    created_at = Column(UTCDateTime(), server_default=func.now())

class TaskAssignment(Base):
    __tablename__ = "member_tasks"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False)
    status = Column(String, default="pending")  # pending, in_progress, completed
    star_rating = Column(Integer, nullable=True)  # 1–5
    updated_at = Column(UTCDateTime(), server_default=func.now(), onupdate=func.now())

    task = relationship("Task", lazy="selectin")
