"""Account model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from eduhub.database import Base


class Student(Base):
    """A registered student; ``user_role`` becomes ``classRep`` on promotion."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    first_name = Column(String)
    last_name = Column(String)
    course_id = Column(Integer, ForeignKey("courses.course_id"))
    year = Column(Integer)
    semester = Column(Integer)
    gender = Column(String)
    user_role = Column(String, default="student", nullable=False)
    reset_token = Column(String, index=True)
    reset_token_expiry = Column(DateTime)


class ClassRepresentative(Base):
    """Class representative account stored outside the students table."""
    __tablename__ = "class_representatives"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    first_name = Column(String)
    last_name = Column(String)
    course_id = Column(Integer, ForeignKey("courses.course_id"))
    year = Column(Integer)
    semester = Column(Integer)


class Admin(Base):
    """Represents an administrator created by the superadmin."""
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    first_name = Column(String)
    last_name = Column(String)
