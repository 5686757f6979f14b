"""Notification model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from eduhub.database import Base


class Notification(Base):
    """Represents an announcement for one course cohort."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True)
    year = Column(Integer)
    semester = Column(Integer)
    notification = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
