from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, func
from sqlalchemy.orm import relationship
from jps.database import Base, UTCDateTime

class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    fullname = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True)
    role = Column(String, nullable=True, server_default="Member")
    poste = Column(String, nullable=True)  # position inside the role, shown on the leaderboard

    points = Column(Integer, nullable=False, default=0)  # lifetime total
    # One flag per semester
    fee_paid_first_semester = Column(Boolean, nullable=False, default=False)
    fee_paid_second_semester = Column(Boolean, nullable=False, default=False)
    estimated_volunteering_hours = Column(Float, nullable=True)

    advisor_id = Column(Integer, ForeignKey("members.id"), nullable=True)
    leaderboard_privacy = Column(Boolean, nullable=False, default=False)  # True = hidden from leaderboards
    created_at = Column(UTCDateTime(), server_default=func.now())  # join date

    advisor = relationship("Member", remote_side=[id], back_populates="advisees")
    advisees = relationship("Member", back_populates="advisor")

    @property
    def fee_status(self) -> list[bool]:
        return [bool(self.fee_paid_first_semester), bool(self.fee_paid_second_semester)]
