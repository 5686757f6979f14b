from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from eduhub.auth.credentials import Credential, Role
from eduhub.auth.dependencies import get_current_credential, require_roles
from eduhub.core.errors import NotFound, database_errors
from eduhub.database import get_db
from eduhub.models.notification import Notification

router = APIRouter(tags=['notifications'])

notification_publishers = require_roles(Role.CLASS_REP, Role.ADMIN, Role.SUPERADMIN)


class CreateNotificationRequest(BaseModel):
    course_id: int = Field(alias='courseId')
    year: int = Field(ge=1)
    semester: int = Field(ge=1)
    notification: str

    class Config:
        populate_by_name = True

    @field_validator('notification')
    @classmethod
    def validate_notification(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Notification text is required.')
        return normalized


class NotificationResponse(BaseModel):
    id: int
    course_id: int | None
    year: int | None
    semester: int | None
    notification: str
    created_at: datetime | None

    class Config:
        from_attributes = True


@router.get('/{course_id}')
def list_notifications(
    course_id: int,
    year: int | None = Query(default=None),
    semester: int | None = Query(default=None),
    db: Session = Depends(get_db),
    credential: Credential = Depends(get_current_credential),
):
    with database_errors(db, 'Error fetching notifications'):
        query = db.query(Notification).filter(Notification.course_id == course_id)
        if year is not None and semester is not None:
            query = query.filter(Notification.year == year, Notification.semester == semester)
        notifications = query.order_by(Notification.created_at.desc()).all()
    return {'notifications': [NotificationResponse.model_validate(item) for item in notifications]}


@router.post('', status_code=status.HTTP_201_CREATED)
def add_notification(
    data: CreateNotificationRequest,
    db: Session = Depends(get_db),
    credential: Credential = Depends(notification_publishers),
):
    notification = Notification(**data.model_dump())
    with database_errors(db, 'Error adding notification'):
        db.add(notification)
        db.commit()
        db.refresh(notification)
    return {'notification': NotificationResponse.model_validate(notification)}


@router.delete('/{notification_id}')
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    credential: Credential = Depends(notification_publishers),
):
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if notification is None:
        raise NotFound('notification not found')

    with database_errors(db, 'Error deleting notification'):
        db.delete(notification)
        db.commit()
    return {'message': 'Notification deleted successfully'}
