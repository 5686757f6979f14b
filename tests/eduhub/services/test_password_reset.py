from datetime import timedelta

import pytest
from fastapi import HTTPException

from eduhub.services import accounts, password_reset
from eduhub.services.password_reset import utcnow


def test_forgot_password_stores_token_and_mails_link(db, make_student, mail_queue) -> None:
    student = make_student()

    token = password_reset.forgot_password(db, student.email, mail_queue)

    db.refresh(student)
    assert student.reset_token == token
    assert len(token) == 64
    assert student.reset_token_expiry > utcnow()
    assert student.reset_token_expiry <= utcnow() + timedelta(minutes=5)
    assert mail_queue.sent[0]['to'] == student.email
    assert token in mail_queue.sent[0]['body']


def test_forgot_password_for_unknown_email(db, mail_queue) -> None:
    with pytest.raises(HTTPException) as exception_info:
        password_reset.forgot_password(db, 'ghost@students.example.edu', mail_queue)

    assert exception_info.value.status_code == 404
    assert mail_queue.sent == []


def test_reset_password_then_login_and_token_cannot_be_reused(db, make_student, mail_queue) -> None:
    student = make_student()
    token = password_reset.forgot_password(db, student.email, mail_queue)

    password_reset.reset_password(db, token, 'fresh-password', mail_queue)

    assert accounts.login(db, student.email, 'fresh-password').id == student.id
    db.refresh(student)
    assert student.reset_token is None
    assert student.reset_token_expiry is None
    assert mail_queue.sent[-1]['subject'] == 'Password Reset'

    with pytest.raises(HTTPException) as exception_info:
        password_reset.reset_password(db, token, 'another-password', mail_queue)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Invalid or expired token.'


def test_reset_password_rejects_expired_token(db, make_student, mail_queue) -> None:
    student = make_student()
    token = password_reset.forgot_password(db, student.email, mail_queue)
    student.reset_token_expiry = utcnow() - timedelta(minutes=1)
    db.commit()

    with pytest.raises(HTTPException) as exception_info:
        password_reset.reset_password(db, token, 'fresh-password', mail_queue)

    assert exception_info.value.status_code == 400


def test_resend_reset_link_accepts_expired_token(db, make_student, mail_queue) -> None:
    student = make_student()
    old_token = password_reset.forgot_password(db, student.email, mail_queue)
    student.reset_token_expiry = utcnow() - timedelta(hours=1)
    db.commit()

    new_token = password_reset.resend_reset_link(db, old_token, mail_queue)

    db.refresh(student)
    assert new_token != old_token
    assert student.reset_token == new_token
    assert student.reset_token_expiry > utcnow()
    assert new_token in mail_queue.sent[-1]['body']


def test_resend_reset_link_for_unknown_token(db, mail_queue) -> None:
    with pytest.raises(HTTPException) as exception_info:
        password_reset.resend_reset_link(db, 'does-not-exist', mail_queue)

    assert exception_info.value.status_code == 404
