from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from jps.database import Base, UTCDateTime

class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # meeting, formation, general_assembly, event
    begin_date = Column(UTCDateTime(), nullable=False, index=True)

    # Type-specific details, at most one populated
    meeting = relationship("Meeting", uselist=False, lazy="selectin", back_populates="activity")
    formation = relationship("Formation", uselist=False, lazy="selectin", back_populates="activity")
    general_assembly = relationship("GeneralAssembly", uselist=False, lazy="selectin", back_populates="activity")

class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(Integer, primary_key=True, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), unique=True, nullable=False)
    meeting_type = Column(String, nullable=True)  # official, committee, other

    activity = relationship("Activity", back_populates="meeting")

class Formation(Base):
    __tablename__ = "formations"

    id = Column(Integer, primary_key=True, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), unique=True, nullable=False)
    training_type = Column(String, nullable=True)  # official_session, important_training, member_to_member

    activity = relationship("Activity", back_populates="formation")

class GeneralAssembly(Base):
    __tablename__ = "general_assemblies"

    id = Column(Integer, primary_key=True, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), unique=True, nullable=False)
    assembly_type = Column(String, nullable=True)  # national, international, zonal, local

    activity = relationship("Activity", back_populates="general_assembly")

class Participation(Base):
    __tablename__ = "activity_participants"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=False)
    rating = Column(Integer, nullable=True)  # 1–5
    is_interested = Column(Boolean, nullable=False, default=False)  # interest only, did not attend

    activity = relationship("Activity", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("member_id", "activity_id", name="uq_member_activity"),
    )
