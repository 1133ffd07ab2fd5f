from sqlalchemy import Column, Integer, String, Text, ForeignKey, func
from jps.database import Base, UTCDateTime

class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, resolved
    created_at = Column(UTCDateTime(), server_default=func.now())
