"""Course and unit model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from eduhub.database import Base


class Course(Base):
    __tablename__ = "courses"

    course_id = Column(Integer, primary_key=True, index=True)
    course_name = Column(String, unique=True, nullable=False)


class Unit(Base):
    """A unit taught to one course cohort (year and semester)."""
    __tablename__ = "units"

    unit_id = Column(Integer, primary_key=True, index=True)
    unit_code = Column(String, nullable=False)
    unit_name = Column(String, nullable=False)
    lecturer = Column(String)
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True)
    year = Column(Integer)
    semester = Column(Integer)
