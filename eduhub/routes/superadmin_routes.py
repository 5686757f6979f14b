from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import func
from sqlalchemy.orm import Session

from eduhub.auth.credentials import Credential, Role
from eduhub.auth.dependencies import require_roles
from eduhub.core.errors import database_errors
from eduhub.database import get_db
from eduhub.models.account import Student
from eduhub.models.resource import Resource
from eduhub.services import accounts
from eduhub.services.mailer import MailQueue, get_mail_queue

# Every route here is superadmin-only.
router = APIRouter(tags=['superadmin'], dependencies=[Depends(require_roles(Role.SUPERADMIN))])


class AssignClassRepRequest(BaseModel):
    email: str = ''


class CreateAdminRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    first_name: str = Field(alias='firstName', min_length=1)
    last_name: str = Field(alias='lastName', min_length=1)

    class Config:
        populate_by_name = True

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip()
        if '@' not in normalized:
            raise ValueError('A valid email is required.')
        return normalized


class StudentSummary(BaseModel):
    id: int
    email: str
    first_name: str | None
    last_name: str | None
    course_id: int | None
    year: int | None
    semester: int | None
    gender: str | None
    user_role: str

    class Config:
        from_attributes = True


class ResourceSummary(BaseModel):
    resource_id: int
    unit_id: int | None
    title: str
    description: str | None
    link: str
    file_type: str | None
    resource_type: str
    upload_date: datetime | None

    class Config:
        from_attributes = True


class AdminSummary(BaseModel):
    id: int
    email: str
    first_name: str | None
    last_name: str | None

    class Config:
        from_attributes = True


def count_students(db: Session, *criteria) -> int:
    return db.query(func.count(Student.id)).filter(*criteria).scalar() or 0


@router.get('/resources')
def list_resources(db: Session = Depends(get_db)):
    with database_errors(db, 'Error fetching resources'):
        resources = db.query(Resource).order_by(Resource.upload_date.desc()).all()
    return {
        'totalResources': len(resources),
        'resources': [ResourceSummary.model_validate(resource) for resource in resources],
    }


@router.post('/assign-class-rep')
def assign_class_rep(
    data: AssignClassRepRequest,
    db: Session = Depends(get_db),
    mail_queue: MailQueue = Depends(get_mail_queue),
):
    accounts.assign_class_rep(db, data.email.strip(), mail_queue)
    return {'message': 'Class representative assigned successfully and notified via email.'}


@router.get('/classreps')
def list_class_reps(db: Session = Depends(get_db)):
    with database_errors(db, 'Error fetching class representatives'):
        class_reps = db.query(Student).filter(
            Student.user_role == Role.CLASS_REP.value
        ).order_by(Student.id.desc()).all()
    return {
        'totalClassReps': len(class_reps),
        'classReps': [StudentSummary.model_validate(student) for student in class_reps],
    }


@router.get('/students')
def list_students(db: Session = Depends(get_db)):
    with database_errors(db, 'Error fetching students'):
        students = db.query(Student).order_by(Student.id.desc()).all()
        total_female = count_students(db, Student.gender == 'Female')
        total_male = count_students(db, Student.gender == 'Male')
    return {
        'totalStudents': len(students),
        'totalFemaleStudents': total_female,
        'totalMaleStudents': total_male,
        'students': [StudentSummary.model_validate(student) for student in students],
    }


@router.post('/admins', status_code=status.HTTP_201_CREATED)
def create_admin(data: CreateAdminRequest, db: Session = Depends(get_db)):
    admin = accounts.create_admin(
        db,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
    )
    return {'message': 'Admin created successfully', 'admin': AdminSummary.model_validate(admin)}


@router.delete('/{entity}/{entity_id}')
def delete_entity(entity: str, entity_id: int, db: Session = Depends(get_db)):
    deleted = accounts.delete_entity(db, entity, entity_id)
    return {
        'message': f'{entity.lower()[:-1]} deleted successfully',
        'deletedEntity': deleted,
    }
