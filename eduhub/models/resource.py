"""Resource model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from eduhub.database import Base

RESOURCE_TYPES = ("Notes", "Papers", "Tasks")


class Resource(Base):
    """An uploaded file attached to a unit."""
    __tablename__ = "resources"

    resource_id = Column(Integer, primary_key=True, index=True)
    unit_id = Column(Integer, ForeignKey("units.unit_id", ondelete="CASCADE"), index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    link = Column(String, nullable=False)
    file_type = Column(String)
    resource_type = Column(String, nullable=False)
    upload_date = Column(DateTime, default=datetime.now)
