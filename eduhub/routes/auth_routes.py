from fastapi import APIRouter, Body, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from eduhub.auth import jwt_handler
from eduhub.auth.credentials import Credential, Role
from eduhub.auth.dependencies import get_current_credential, require_roles
from eduhub.core.errors import Forbidden
from eduhub.database import get_db
from eduhub.models.account import Student
from eduhub.services import accounts, password_reset
from eduhub.services.mailer import MailQueue, get_mail_queue

router = APIRouter(tags=['auth'])

LOGIN_REDIRECTS = {
    Role.SUPERADMIN: '/superadmin',
    Role.ADMIN: '/admin/dashboard',
    Role.CLASS_REP: '/dashboard',
    Role.STUDENT: '/dashboard',
}


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    first_name: str
    last_name: str
    course: str
    year: int = Field(ge=1)
    semester: int = Field(ge=1)
    gender: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip()
        if '@' not in normalized:
            raise ValueError('A valid email is required.')
        return normalized


class RegisteredStudentResponse(BaseModel):
    id: int
    email: str
    first_name: str | None
    last_name: str | None
    course_id: int | None

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    email: str = ''
    password: str = ''

    @field_validator('email')
    @classmethod
    def strip_email(cls, value: str) -> str:
        return value.strip()


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(alias='currentPassword')
    new_password: str = Field(alias='newPassword', min_length=6)

    class Config:
        populate_by_name = True


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    password: str = Field(min_length=6)


class ResendResetLinkRequest(BaseModel):
    token: str


def profile_snapshot(credential: Credential) -> dict:
    return {
        'firstName': credential.first_name,
        'lastName': credential.last_name,
        'email': credential.email,
        'course': credential.course,
        'year': credential.year,
        'semester': credential.semester,
        'role': credential.role.value,
    }


@router.post('/register', status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    student = accounts.register_student(
        db,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        course=data.course,
        year=data.year,
        semester=data.semester,
        gender=data.gender,
    )
    return {
        'message': 'Registration successful',
        'user': RegisteredStudentResponse.model_validate(student),
    }


@router.post('/login')
def login(data: LoginRequest, db: Session = Depends(get_db)):
    credential = accounts.login(db, data.email, data.password)
    return {
        'message': 'Login successful',
        'token': jwt_handler.create_access_token(credential),
        'redirectTo': LOGIN_REDIRECTS[credential.role],
    }


@router.get('/user/check')
def check_user(credential: Credential = Depends(get_current_credential)):
    if credential.role not in {Role.SUPERADMIN, Role.CLASS_REP, Role.STUDENT}:
        raise Forbidden('Forbidden.')
    return {'role': credential.role.value}


@router.get('/dashboard')
def student_dashboard(credential: Credential = Depends(require_roles(Role.STUDENT, Role.CLASS_REP))):
    return {
        'id': credential.id,
        'firstName': credential.first_name,
        'lastName': credential.last_name,
        'courseId': credential.course_id,
        'role': credential.role.value,
        'course': credential.course,
        'year': credential.year,
        'semester': credential.semester,
    }


@router.get('/classrep/dashboard')
def class_rep_dashboard(credential: Credential = Depends(require_roles(Role.CLASS_REP))):
    return {
        'firstName': credential.first_name,
        'courseId': credential.course_id,
        'role': credential.role.value,
        'course': credential.course,
        'year': credential.year,
        'semester': credential.semester,
    }


@router.get('/admin/dashboard')
def admin_dashboard(credential: Credential = Depends(require_roles(Role.ADMIN))):
    return {'message': f'Welcome to the admin dashboard, {credential.first_name}!'}


@router.get('/superadmin/dashboard')
def superadmin_dashboard(credential: Credential = Depends(require_roles(Role.SUPERADMIN))):
    del credential
    return {'message': 'Welcome to the Super Admin Dashboard!'}


@router.get('/user/profile')
def get_profile(credential: Credential = Depends(get_current_credential)):
    return profile_snapshot(credential)


@router.put('/user/profile')
def update_profile(
    payload: dict = Body(...),
    credential: Credential = Depends(get_current_credential),
    db: Session = Depends(get_db),
):
    refreshed = accounts.update_profile(db, credential, payload)
    return {
        'message': 'profile updated successfully',
        'token': jwt_handler.create_access_token(refreshed),
    }


@router.get('/resource-adder/check')
def resource_adder_check(credential: Credential = Depends(get_current_credential)):
    response = {'role': credential.role.value}
    if credential.role is Role.CLASS_REP:
        response.update(course=credential.course, year=credential.year, semester=credential.semester)
    return response


@router.put('/students/{student_id}/change-password')
def change_password(
    student_id: int,
    data: ChangePasswordRequest,
    credential: Credential = Depends(get_current_credential),
    db: Session = Depends(get_db),
):
    if credential.role is Role.SUPERADMIN:
        row = accounts.get_student(db, student_id)
    elif credential.account == Student.__tablename__ and credential.id == student_id:
        row = accounts.own_account_row(db, credential)
    else:
        raise Forbidden('You can only change your own password.')

    accounts.change_password(db, row, data.current_password, data.new_password)
    return {'message': 'Password changed successfully'}


@router.put('/user/change-password')
def change_own_password(
    data: ChangePasswordRequest,
    credential: Credential = Depends(get_current_credential),
    db: Session = Depends(get_db),
):
    row = accounts.own_account_row(db, credential)
    accounts.change_password(db, row, data.current_password, data.new_password)
    return {'message': 'Password changed successfully'}


@router.post('/forgot-password')
def forgot_password(
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mail_queue: MailQueue = Depends(get_mail_queue),
):
    password_reset.forgot_password(db, data.email.strip(), mail_queue)
    return {'message': 'Password reset link sent'}


@router.post('/reset-password/{token}')
def reset_password(
    token: str,
    data: ResetPasswordRequest,
    db: Session = Depends(get_db),
    mail_queue: MailQueue = Depends(get_mail_queue),
):
    password_reset.reset_password(db, token, data.password, mail_queue)
    return {'message': 'Password reset successful'}


@router.post('/resend-reset-link')
def resend_reset_link(
    data: ResendResetLinkRequest,
    db: Session = Depends(get_db),
    mail_queue: MailQueue = Depends(get_mail_queue),
):
    password_reset.resend_reset_link(db, data.token, mail_queue)
    return {'message': 'A new reset link has been sent to your email.'}
