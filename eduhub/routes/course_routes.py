from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from eduhub.auth.credentials import Credential, Role
from eduhub.auth.dependencies import require_roles
from eduhub.core.errors import Conflict, NotFound, database_errors
from eduhub.database import get_db
from eduhub.models.course import Course

router = APIRouter(tags=['courses'])

course_managers = require_roles(Role.ADMIN, Role.SUPERADMIN)


class CourseRequest(BaseModel):
    course_name: str

    @field_validator('course_name')
    @classmethod
    def validate_course_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Course name is required.')
        return normalized


class CourseResponse(BaseModel):
    course_id: int
    course_name: str

    class Config:
        from_attributes = True


def get_course_or_404(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(Course.course_id == course_id).first()
    if course is None:
        raise NotFound('Course not found.')
    return course


def ensure_unique_name(db: Session, course_name: str, exclude_id: int | None = None) -> None:
    query = db.query(Course.course_id).filter(Course.course_name == course_name)
    if exclude_id is not None:
        query = query.filter(Course.course_id != exclude_id)
    if query.first() is not None:
        raise Conflict('A course with this name already exists.')


@router.get('', response_model=list[CourseResponse])
def list_courses(db: Session = Depends(get_db)):
    with database_errors(db, 'Error fetching courses'):
        return db.query(Course).order_by(Course.course_name.asc()).all()


@router.post('', response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    data: CourseRequest,
    db: Session = Depends(get_db),
    credential: Credential = Depends(course_managers),
):
    ensure_unique_name(db, data.course_name)
    course = Course(course_name=data.course_name)
    with database_errors(db, 'Error creating course'):
        db.add(course)
        db.commit()
        db.refresh(course)
    return course


@router.put('/{course_id}')
def rename_course(
    course_id: int,
    data: CourseRequest,
    db: Session = Depends(get_db),
    credential: Credential = Depends(course_managers),
):
    course = get_course_or_404(db, course_id)
    ensure_unique_name(db, data.course_name, exclude_id=course_id)
    with database_errors(db, 'Error updating course'):
        course.course_name = data.course_name
        db.commit()
    return {'message': 'Course updated successfully'}


@router.delete('/{course_id}')
def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    credential: Credential = Depends(course_managers),
):
    course = get_course_or_404(db, course_id)
    with database_errors(db, 'Error deleting course'):
        db.delete(course)
        db.commit()
    return {'message': 'Course deleted successfully'}
