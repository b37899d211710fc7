from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(150), nullable=False)
    description = Column(Text, nullable=False)
    budget = Column(Float, nullable=False)
    min_budget = Column(Float, nullable=True)
    max_budget = Column(Float, nullable=True)
    budget_type = Column(String(20), nullable=False, default="fixed")  # fixed / hourly
    duration = Column(String(100), nullable=True)  # e.g., "2 weeks", "3 months"
    category = Column(String(100), nullable=True, index=True)
    location = Column(String(255), nullable=True)
    tags = Column(Text, nullable=False, default="[]")  # JSON string list, order preserved
    status = Column(String(20), nullable=False, default="open")
    is_featured = Column(Boolean, nullable=False, default=False)
    view_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="jobs")
    # Deleting a job also removes its proposals at ORM level.
    proposals = relationship("Proposal", back_populates="job", cascade="all, delete-orphan")
