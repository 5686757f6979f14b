"""Like/dislike toggling for feed posts.

A student holds at most one reaction per post: a like record or a dislike
record, never both. Existing reactions are never switched automatically; a
like has to be removed before the same student can dislike, and vice versa.
The ``likes``/``dislikes`` counters on ``feeds`` always equal the number of
surviving records of each kind.
"""

import logging
from enum import Enum

from pydantic import BaseModel
from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eduhub.core.errors import Internal, NotFound
from eduhub.models.feed import Feed, FeedDislike, FeedLike

logger = logging.getLogger(__name__)


class ReactionAction(str, Enum):
    LIKE = 'like'
    DISLIKE = 'dislike'


class ReactionCounts(BaseModel):
    likes: int
    dislikes: int


def _record_exists(db: Session, record_model, feed_id: int, student_id: int) -> bool:
    return db.query(record_model).filter(
        record_model.student_id == student_id,
        record_model.feed_id == feed_id,
    ).first() is not None


def _toggle(db: Session, record_model, counter, feed_id: int, student_id: int, *, present: bool, blocked: bool) -> None:
    if present:
        removed = db.query(record_model).filter(
            record_model.student_id == student_id,
            record_model.feed_id == feed_id,
        ).delete(synchronize_session=False)
        # Only decrement for a row this call actually removed.
        if removed:
            db.query(Feed).filter(Feed.feed_id == feed_id).update(
                {counter: counter - 1}, synchronize_session=False
            )
    elif not blocked:
        # The composite primary key rejects a second record for the same pair.
        db.execute(insert(record_model).values(student_id=student_id, feed_id=feed_id))
        db.query(Feed).filter(Feed.feed_id == feed_id).update(
            {counter: counter + 1}, synchronize_session=False
        )


def read_counts(db: Session, feed_id: int) -> ReactionCounts:
    row = db.query(Feed.likes, Feed.dislikes).filter(Feed.feed_id == feed_id).first()
    if row is None:
        raise NotFound('Feed not found.')
    return ReactionCounts(likes=row.likes, dislikes=row.dislikes)


def react(db: Session, feed_id: int, student_id: int, action: ReactionAction) -> ReactionCounts:
    action = ReactionAction(action)
    try:
        # Serialises concurrent reactions on the same post where the dialect supports row locks.
        feed = db.query(Feed.feed_id).filter(Feed.feed_id == feed_id).with_for_update().first()
        if feed is None:
            db.rollback()
            raise NotFound('Feed not found.')

        liked = _record_exists(db, FeedLike, feed_id, student_id)
        disliked = _record_exists(db, FeedDislike, feed_id, student_id)

        if action is ReactionAction.LIKE:
            _toggle(db, FeedLike, Feed.likes, feed_id, student_id, present=liked, blocked=disliked)
        else:
            _toggle(db, FeedDislike, Feed.dislikes, feed_id, student_id, present=disliked, blocked=liked)

        db.commit()
    except IntegrityError:
        # A concurrent duplicate call inserted the same record first; this call changes nothing.
        db.rollback()
        logger.warning('Duplicate %s from student %s on feed %s ignored', action.value, student_id, feed_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error updating reaction on feed %s', feed_id)
        raise Internal('Error updating reaction.') from exc

    return read_counts(db, feed_id)


def reaction_flags(db: Session, student_id: int | None, feed_ids: list[int]) -> dict[int, tuple[bool, bool]]:
    """Map each feed id to ``(liked, disliked)`` for one student."""
    flags = {feed_id: (False, False) for feed_id in feed_ids}
    if student_id is None or not feed_ids:
        return flags

    liked = {
        feed_id for (feed_id,) in db.query(FeedLike.feed_id).filter(
            FeedLike.student_id == student_id, FeedLike.feed_id.in_(feed_ids)
        )
    }
    disliked = {
        feed_id for (feed_id,) in db.query(FeedDislike.feed_id).filter(
            FeedDislike.student_id == student_id, FeedDislike.feed_id.in_(feed_ids)
        )
    }
    return {feed_id: (feed_id in liked, feed_id in disliked) for feed_id in feed_ids}


def withdraw_student_reactions(db: Session, student_id: int) -> None:
    """Remove every reaction by ``student_id`` and decrement the matching counters.

    Runs inside the caller's transaction; the caller commits.
    """
    for record_model, counter in ((FeedLike, Feed.likes), (FeedDislike, Feed.dislikes)):
        feed_ids = [
            feed_id for (feed_id,) in db.query(record_model.feed_id).filter(record_model.student_id == student_id)
        ]
        if not feed_ids:
            continue
        db.query(Feed.feed_id).filter(Feed.feed_id.in_(feed_ids)).with_for_update().all()
        db.query(record_model).filter(record_model.student_id == student_id).delete(synchronize_session=False)
        db.query(Feed).filter(Feed.feed_id.in_(feed_ids)).update(
            {counter: counter - 1}, synchronize_session=False
        )
