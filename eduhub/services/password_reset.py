import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from eduhub.auth.passwords import hash_password
from eduhub.core import config
from eduhub.core.errors import BadRequest, NotFound, database_errors
from eduhub.models.account import Student
from eduhub.services.mailer import MailQueue

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    # Stored without tzinfo so SQLite and Postgres compare the same way.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def reset_link(token: str) -> str:
    return f"{config.RESET_PASSWORD_URL.rstrip('/')}/{token}"


def _issue_token(db: Session, student: Student) -> str:
    token = secrets.token_hex(32)
    with database_errors(db, 'Error issuing reset token'):
        student.reset_token = token
        student.reset_token_expiry = utcnow() + timedelta(minutes=config.RESET_TOKEN_EXPIRES_MINUTES)
        db.commit()
    return token


def forgot_password(db: Session, email: str, mail_queue: MailQueue) -> str:
    student = db.query(Student).filter(Student.email == email).first()
    if student is None:
        raise NotFound('User not found.')

    token = _issue_token(db, student)
    mail_queue.submit(
        email,
        'Password Reset Request',
        f'Click the link to reset your password: {reset_link(token)}',
    )
    return token


def reset_password(db: Session, token: str, new_password: str, mail_queue: MailQueue) -> None:
    if not new_password:
        raise BadRequest('Password is required.')

    student = db.query(Student).filter(
        Student.reset_token == token,
        Student.reset_token_expiry > utcnow(),
    ).first()
    if not token or student is None:
        raise BadRequest('Invalid or expired token.')

    # Password and token are cleared in one commit so the token cannot be replayed.
    with database_errors(db, 'Error resetting password'):
        student.password_hash = hash_password(new_password)
        student.reset_token = None
        student.reset_token_expiry = None
        db.commit()

    mail_queue.submit(
        student.email,
        'Password Reset',
        'Your password was reset successfully!',
        '<h5>Your password was reset successfully!</h5>',
    )


def resend_reset_link(db: Session, token: str, mail_queue: MailQueue) -> str:
    """Replace a pending reset token with a fresh one and mail the new link.

    Expired tokens are accepted here on purpose: this is how a user whose link
    timed out asks for another one. Only the token value has to match.
    """
    student = db.query(Student).filter(Student.reset_token == token).first() if token else None
    if student is None:
        raise NotFound('Invalid or expired token.')

    if student.reset_token_expiry is not None and student.reset_token_expiry <= utcnow():
        logger.warning('Reissuing reset token for student %s after expiry', student.id)

    new_token = _issue_token(db, student)
    mail_queue.submit(
        student.email,
        'Password Reset Request',
        f'Click here: {reset_link(new_token)}',
    )
    return new_token
