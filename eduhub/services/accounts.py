"""Account lookup, login and role-scoped profile updates.

Each role that owns a database row is represented by an account class that
knows which table holds it, which profile fields it may change and how to
build a fresh credential from the stored row. The role used for dispatch
always comes from the caller's credential, never from the request body.
"""

import logging

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.orm import Session

from eduhub.auth.credentials import Credential, Role
from eduhub.auth.passwords import hash_password, verify_password
from eduhub.core import config
from eduhub.core.errors import BadRequest, Conflict, Forbidden, NotFound, Unauthorized, database_errors
from eduhub.models.account import Admin, ClassRepresentative, Student
from eduhub.models.course import Course
from eduhub.models.resource import Resource
from eduhub.services import reactions
from eduhub.services.mailer import MailQueue

logger = logging.getLogger(__name__)


class StudentProfileFields(BaseModel):
    first_name: str = Field(alias='firstName', min_length=1)
    last_name: str = Field(alias='lastName', min_length=1)
    course: str = Field(min_length=1)
    year: int = Field(ge=1)
    semester: int = Field(ge=1)

    class Config:
        populate_by_name = True


class AdminProfileFields(BaseModel):
    first_name: str = Field(alias='firstName', min_length=1)
    last_name: str = Field(alias='lastName', min_length=1)

    class Config:
        populate_by_name = True


def resolve_course_id(db: Session, course_name: str) -> int:
    course_id = db.query(Course.course_id).filter(Course.course_name == course_name).scalar()
    if course_id is None:
        raise NotFound('Course not found.')
    return course_id


class StudentAccount:
    role = Role.STUDENT
    fields_model = StudentProfileFields

    def __init__(self, row) -> None:
        self.row = row

    @classmethod
    def find(cls, db: Session, email: str):
        return db.query(Student).filter(Student.email == email).first()

    def apply(self, db: Session, fields: StudentProfileFields) -> None:
        # Resolve first so an unknown course leaves the row untouched.
        course_id = resolve_course_id(db, fields.course)
        self.row.first_name = fields.first_name
        self.row.last_name = fields.last_name
        self.row.course_id = course_id
        self.row.year = fields.year
        self.row.semester = fields.semester

    def credential(self, db: Session) -> Credential:
        course_name = db.query(Course.course_name).filter(Course.course_id == self.row.course_id).scalar()
        if course_name is None:
            raise NotFound('Course not found.')
        return Credential(
            id=self.row.id,
            role=self.role,
            email=self.row.email,
            first_name=self.row.first_name,
            last_name=self.row.last_name,
            course_id=self.row.course_id,
            course=course_name,
            year=self.row.year,
            semester=self.row.semester,
            account=self.row.__tablename__,
        )


class ClassRepAccount(StudentAccount):
    """A class rep lives in ``class_representatives`` or is a promoted student row."""

    role = Role.CLASS_REP

    @classmethod
    def find(cls, db: Session, email: str):
        row = db.query(ClassRepresentative).filter(ClassRepresentative.email == email).first()
        if row is None:
            row = db.query(Student).filter(
                Student.email == email,
                Student.user_role == Role.CLASS_REP.value,
            ).first()
        return row


class AdminAccount:
    role = Role.ADMIN
    fields_model = AdminProfileFields

    def __init__(self, row) -> None:
        self.row = row

    @classmethod
    def find(cls, db: Session, email: str):
        return db.query(Admin).filter(Admin.email == email).first()

    def apply(self, db: Session, fields: AdminProfileFields) -> None:
        self.row.first_name = fields.first_name
        self.row.last_name = fields.last_name

    def credential(self, db: Session) -> Credential:
        return Credential(
            id=self.row.id,
            role=self.role,
            email=self.row.email,
            first_name=self.row.first_name,
            last_name=self.row.last_name,
            account=self.row.__tablename__,
        )


ACCOUNT_TYPES = {
    Role.STUDENT: StudentAccount,
    Role.CLASS_REP: ClassRepAccount,
    Role.ADMIN: AdminAccount,
}


def account_for_row(row):
    if isinstance(row, Admin):
        return AdminAccount(row)
    if isinstance(row, ClassRepresentative) or row.user_role == Role.CLASS_REP.value:
        return ClassRepAccount(row)
    return StudentAccount(row)


def is_superadmin_login(email: str, password: str) -> bool:
    return bool(config.SUPER_USER) and email == config.SUPER_USER and password == config.SUPER_PASSWORD


def login(db: Session, email: str, password: str) -> Credential:
    if not email or not password:
        raise BadRequest('Email and password are required.')

    if is_superadmin_login(email, password):
        return Credential(role=Role.SUPERADMIN, email=email)

    row = None
    for model in (Student, ClassRepresentative, Admin):
        row = db.query(model).filter(model.email == email).first()
        if row is not None:
            break
    if row is None:
        raise NotFound('User not found.')

    if not verify_password(password, row.password_hash):
        raise Unauthorized('Invalid email or password.')

    credential = account_for_row(row).credential(db)
    logger.info('%s %s logged in', credential.role.value, credential.id)
    return credential


def update_profile(db: Session, credential: Credential, payload: dict) -> Credential:
    """Write the caller's editable profile fields and return a replacement credential.

    The previous credential stays valid until it expires; there is no
    server-side revocation.
    """
    account_type = ACCOUNT_TYPES.get(credential.role)
    if account_type is None:
        raise Unauthorized('Unauthorized role.')

    try:
        fields = account_type.fields_model.model_validate(payload)
    except ValidationError as exc:
        raise BadRequest(f'Invalid profile fields: {_describe_errors(exc)}') from exc

    row = account_type.find(db, credential.email)
    if row is None:
        raise NotFound('User not found.')

    account = account_type(row)
    with database_errors(db, 'Error updating profile'):
        account.apply(db, fields)
        db.commit()
        db.refresh(row)
    return account.credential(db)


def _describe_errors(exc: ValidationError) -> str:
    return ', '.join(
        '.'.join(str(part) for part in error['loc']) for error in exc.errors()
    )


def register_student(
    db: Session,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    course: str,
    year: int,
    semester: int,
    gender: str | None = None,
) -> Student:
    if db.query(Student.id).filter(Student.email == email).first() is not None:
        raise Conflict('Email already in use.')

    course_id = resolve_course_id(db, course)
    student = Student(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        course_id=course_id,
        year=year,
        semester=semester,
        gender=gender,
        user_role=Role.STUDENT.value,
    )
    with database_errors(db, 'Error registering user'):
        db.add(student)
        db.commit()
        db.refresh(student)
    logger.info('Registered student %s', student.id)
    return student


ACCOUNT_TABLES = {model.__tablename__: model for model in (Student, ClassRepresentative, Admin)}


def own_account_row(db: Session, credential: Credential):
    """Load the row a credential was issued for, using the table named in its ``account`` claim."""
    model = ACCOUNT_TABLES.get(credential.account or '')
    if model is None or credential.id is None:
        raise Forbidden('This credential is not backed by an account row.')

    row = db.query(model).filter(model.id == credential.id).first()
    if row is None:
        raise NotFound('User not found.')
    return row


def get_student(db: Session, student_id: int) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if student is None:
        raise NotFound('Student not found.')
    return student


def change_password(db: Session, row, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, row.password_hash):
        raise BadRequest('Incorrect current password.')

    with database_errors(db, 'Error changing password'):
        row.password_hash = hash_password(new_password)
        db.commit()
    logger.info('Password changed for %s %s', row.__tablename__, row.id)


def assign_class_rep(db: Session, email: str, mail_queue: MailQueue) -> Student:
    if not email:
        raise BadRequest('Email is required.')

    student = db.query(Student).filter(Student.email == email).first()
    if student is None:
        raise NotFound('Student not found.')

    with database_errors(db, 'Error assigning class representative'):
        student.user_role = Role.CLASS_REP.value
        db.commit()

    mail_queue.submit(
        email,
        'Class Representative Assignment',
        'Dear Student,\n\nYou have been assigned as the Class Representative.\n\n'
        'Please check with the administration for further details.\n\nBest regards,\nAdmin Team',
    )
    return student


def create_admin(db: Session, *, email: str, password: str, first_name: str, last_name: str) -> Admin:
    if db.query(Admin.id).filter(Admin.email == email).first() is not None:
        raise Conflict('Email already in use.')

    admin = Admin(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
    )
    with database_errors(db, 'Error creating admin'):
        db.add(admin)
        db.commit()
        db.refresh(admin)
    return admin


DELETABLE_ENTITIES = {
    'classreps': ClassRepresentative,
    'students': Student,
    'admins': Admin,
    'resources': Resource,
}

_HIDDEN_COLUMNS = {'password_hash', 'reset_token', 'reset_token_expiry'}


def delete_entity(db: Session, entity: str, entity_id: int) -> dict:
    model = DELETABLE_ENTITIES.get(entity.lower())
    if model is None:
        raise BadRequest('Invalid entity type.')

    primary_key = model.__table__.primary_key.columns.values()[0]
    row = db.query(model).filter(primary_key == entity_id).first()
    if row is None:
        raise NotFound(f'{entity.lower()[:-1]} not found.')

    deleted = {
        column.name: getattr(row, column.name)
        for column in model.__table__.columns
        if column.name not in _HIDDEN_COLUMNS
    }
    with database_errors(db, f'Error deleting {entity.lower()[:-1]}'):
        if model is Student:
            reactions.withdraw_student_reactions(db, entity_id)
        db.delete(row)
        db.commit()
    return deleted
