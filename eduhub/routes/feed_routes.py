from datetime import datetime

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from eduhub.auth.credentials import Credential, Role
from eduhub.auth.dependencies import get_current_credential, require_roles
from eduhub.core.errors import BadRequest, Forbidden, NotFound, database_errors
from eduhub.database import get_db
from eduhub.models.account import Student
from eduhub.models.feed import Feed, FeedDislike, FeedLike
from eduhub.services import reactions
from eduhub.services.reactions import ReactionAction
from eduhub.services.storage import StorageAdapter, discard_on_failure, get_storage, store_upload

router = APIRouter(tags=['feeds'])

feed_publishers = require_roles(Role.CLASS_REP, Role.ADMIN, Role.SUPERADMIN)
feed_reactors = require_roles(Role.STUDENT, Role.CLASS_REP)
flag_inspectors = {Role.ADMIN, Role.SUPERADMIN}


def is_student_account(credential: Credential) -> bool:
    return credential.account == Student.__tablename__ and credential.id is not None


def get_reacting_student(credential: Credential = Depends(feed_reactors)) -> Credential:
    # Reaction records are keyed on students.id, so only students-table accounts may react.
    if not is_student_account(credential):
        raise Forbidden('Only student accounts can react to posts.')
    return credential


class FeedResponse(BaseModel):
    feed_id: int
    course_id: int | None
    year: int | None
    semester: int | None
    description: str | None
    image_path: str | None
    likes: int
    dislikes: int
    upload_date: datetime | None
    user_liked: bool = Field(default=False, serialization_alias='userLiked')
    user_disliked: bool = Field(default=False, serialization_alias='userDisliked')

    class Config:
        from_attributes = True


class EditFeedRequest(BaseModel):
    description: str

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Description is required.')
        return normalized


class ReactRequest(BaseModel):
    feed_id: int = Field(alias='feedId')
    action: ReactionAction
    student_id: int = Field(alias='studentId')

    class Config:
        populate_by_name = True


class ReactResponse(BaseModel):
    success: bool
    likes: int
    dislikes: int


def get_feed_or_404(db: Session, feed_id: int) -> Feed:
    feed = db.query(Feed).filter(Feed.feed_id == feed_id).first()
    if feed is None:
        raise NotFound('Feed not found.')
    return feed


@router.post('/react', response_model=ReactResponse)
def react(
    data: ReactRequest,
    db: Session = Depends(get_db),
    credential: Credential = Depends(get_reacting_student),
):
    if data.student_id != credential.id:
        raise Forbidden('You can only react as yourself.')

    counts = reactions.react(db, data.feed_id, data.student_id, data.action)
    return ReactResponse(success=True, likes=counts.likes, dislikes=counts.dislikes)


@router.get('/{course_id}', response_model=list[FeedResponse], response_model_by_alias=True)
def list_feeds(
    course_id: int,
    year: int = Query(...),
    semester: int = Query(...),
    student_id: int | None = Query(default=None, alias='studentId'),
    db: Session = Depends(get_db),
    credential: Credential = Depends(get_current_credential),
):
    if student_id is not None and credential.role in flag_inspectors:
        viewer_id = student_id
    elif is_student_account(credential):
        viewer_id = credential.id
    else:
        viewer_id = None
    with database_errors(db, 'Error fetching feeds'):
        feeds = db.query(Feed).filter(
            Feed.course_id == course_id,
            Feed.year == year,
            Feed.semester == semester,
        ).order_by(Feed.upload_date.desc()).all()
        flags = reactions.reaction_flags(db, viewer_id, [feed.feed_id for feed in feeds])

    results = []
    for feed in feeds:
        liked, disliked = flags[feed.feed_id]
        response = FeedResponse.model_validate(feed)
        response.user_liked = liked
        response.user_disliked = disliked
        results.append(response)
    return results


@router.post('', status_code=status.HTTP_201_CREATED)
def add_feed(
    course_id: int | None = Form(None, alias='courseId'),
    year: int | None = Form(None),
    semester: int | None = Form(None),
    description: str = Form(''),
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    storage: StorageAdapter = Depends(get_storage),
    credential: Credential = Depends(feed_publishers),
):
    if file is None or not description.strip() or not year or not semester or not course_id:
        raise BadRequest('All fields are required')

    file_url, _ = store_upload(storage, file, 'feed')
    feed = Feed(
        course_id=course_id,
        year=year,
        semester=semester,
        description=description.strip(),
        image_path=file_url,
        likes=0,
        dislikes=0,
    )
    with discard_on_failure(storage, file_url), database_errors(db, 'Error adding feed'):
        db.add(feed)
        db.commit()

    return {'message': 'feed added successfully!', 'fileUrl': file_url}


@router.put('/{feed_id}', response_model=FeedResponse, response_model_by_alias=True)
def edit_feed(
    feed_id: int,
    data: EditFeedRequest,
    db: Session = Depends(get_db),
    credential: Credential = Depends(feed_publishers),
):
    feed = get_feed_or_404(db, feed_id)
    with database_errors(db, 'Error updating feed'):
        feed.description = data.description
        db.commit()
        db.refresh(feed)
    return FeedResponse.model_validate(feed)


@router.delete('/{feed_id}')
def delete_feed(
    feed_id: int,
    db: Session = Depends(get_db),
    credential: Credential = Depends(feed_publishers),
):
    feed = get_feed_or_404(db, feed_id)
    with database_errors(db, 'Error deleting feed'):
        # SQLite does not enforce ON DELETE CASCADE unless told to.
        db.query(FeedLike).filter(FeedLike.feed_id == feed_id).delete(synchronize_session=False)
        db.query(FeedDislike).filter(FeedDislike.feed_id == feed_id).delete(synchronize_session=False)
        db.delete(feed)
        db.commit()
    return {'message': 'Feed deleted successfully'}
