from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from eduhub.core.errors import database_errors
from eduhub.database import get_db
from eduhub.models.support import Feedback, SupportMessage

router = APIRouter(tags=['support'])

MAX_MESSAGE_LENGTH = 2000


class SupportMessageRequest(BaseModel):
    user_id: int | None = Field(default=None, alias='userId')
    email: str
    message: str

    class Config:
        populate_by_name = True

    @field_validator('email', 'message')
    @classmethod
    def require_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Email and message are required.')
        if len(normalized) > MAX_MESSAGE_LENGTH:
            raise ValueError(f'Must be {MAX_MESSAGE_LENGTH} characters or fewer.')
        return normalized


class FeedbackRequest(BaseModel):
    user_id: int | None = Field(default=None, alias='userId')
    email: str | None = None
    rating: int = Field(ge=1, le=5)
    feedback: str

    class Config:
        populate_by_name = True

    @field_validator('feedback')
    @classmethod
    def validate_feedback(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Rating and feedback are required.')
        return normalized


@router.post('/support-messages', status_code=status.HTTP_201_CREATED)
def create_support_message(data: SupportMessageRequest, db: Session = Depends(get_db)):
    with database_errors(db, 'Failed to send your message'):
        db.add(SupportMessage(**data.model_dump()))
        db.commit()
    return {'message': 'Your message has been sent. Our support team will contact you shortly.'}


@router.post('/feedbacks', status_code=status.HTTP_201_CREATED)
def create_feedback(data: FeedbackRequest, db: Session = Depends(get_db)):
    with database_errors(db, 'Failed to submit feedback'):
        db.add(Feedback(**data.model_dump()))
        db.commit()
    return {'message': 'Thank you for your feedback!'}
