"""Feed post and reaction model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from eduhub.database import Base


class Feed(Base):
    """A course-scoped post with denormalized like/dislike counters."""
    __tablename__ = "feeds"

    feed_id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="CASCADE"))
    year = Column(Integer)
    semester = Column(Integer)
    description = Column(Text)
    image_path = Column(String)
    likes = Column(Integer, default=0, nullable=False)
    dislikes = Column(Integer, default=0, nullable=False)
    upload_date = Column(DateTime, default=datetime.now)


class FeedLike(Base):
    __tablename__ = "feed_likes"

    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)
    feed_id = Column(Integer, ForeignKey("feeds.feed_id", ondelete="CASCADE"), primary_key=True)


class FeedDislike(Base):
    __tablename__ = "feed_dislikes"

    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)
    feed_id = Column(Integer, ForeignKey("feeds.feed_id", ondelete="CASCADE"), primary_key=True)
