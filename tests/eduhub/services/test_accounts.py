import pytest
from fastapi import HTTPException

from eduhub.auth.credentials import Credential, Role
from eduhub.auth.passwords import verify_password
from eduhub.core import config
from eduhub.models.account import Admin, ClassRepresentative, Student
from eduhub.models.feed import Feed, FeedLike
from eduhub.services import accounts
from eduhub.services.reactions import ReactionAction, react

DEFAULT_PASSWORD = 'secret-pass'


@pytest.fixture
def superadmin(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'SUPER_USER', 'super@eduhub.example.edu')
    monkeypatch.setattr(config, 'SUPER_PASSWORD', 'root-pass')


def test_login_returns_superadmin_credential_for_fixed_pair(db, superadmin) -> None:
    credential = accounts.login(db, 'super@eduhub.example.edu', 'root-pass')

    assert credential.role is Role.SUPERADMIN
    assert credential.email == 'super@eduhub.example.edu'
    assert credential.id is None


def test_login_with_wrong_superadmin_password_falls_through_to_not_found(db, superadmin) -> None:
    with pytest.raises(HTTPException) as exception_info:
        accounts.login(db, 'super@eduhub.example.edu', 'wrong-pass')

    assert exception_info.value.status_code == 404


def test_login_requires_email_and_password(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        accounts.login(db, '', 'anything')

    assert exception_info.value.status_code == 400


def test_login_issues_student_credential_with_course_snapshot(db, make_course, make_student) -> None:
    course = make_course('Software Engineering')
    student = make_student(course_row=course, year=3, semester=2)

    credential = accounts.login(db, student.email, DEFAULT_PASSWORD)

    assert credential.id == student.id
    assert credential.role is Role.STUDENT
    assert credential.course == 'Software Engineering'
    assert credential.course_id == course.course_id
    assert (credential.year, credential.semester) == (3, 2)


def test_login_with_wrong_password_is_unauthorized(db, make_student) -> None:
    student = make_student()

    with pytest.raises(HTTPException) as exception_info:
        accounts.login(db, student.email, 'not-the-password')

    assert exception_info.value.status_code == 401


def test_login_reports_missing_course(db, make_student) -> None:
    student = make_student()
    student.course_id = 999
    db.commit()

    with pytest.raises(HTTPException) as exception_info:
        accounts.login(db, student.email, DEFAULT_PASSWORD)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Course not found.'


def test_login_uses_user_role_of_promoted_student(db, make_student) -> None:
    student = make_student(role='classRep')

    credential = accounts.login(db, student.email, DEFAULT_PASSWORD)

    assert credential.role is Role.CLASS_REP


def test_login_finds_admins_and_class_reps_in_their_tables(db, make_admin, make_class_rep) -> None:
    admin = make_admin()
    class_rep = make_class_rep()

    admin_credential = accounts.login(db, admin.email, DEFAULT_PASSWORD)
    rep_credential = accounts.login(db, class_rep.email, DEFAULT_PASSWORD)

    assert admin_credential.role is Role.ADMIN
    assert admin_credential.course is None
    assert rep_credential.role is Role.CLASS_REP
    assert rep_credential.year == 3


def test_update_profile_writes_student_fields_and_reissues_credential(db, make_course, make_student) -> None:
    student = make_student()
    new_course = make_course('Data Science')
    credential = accounts.login(db, student.email, DEFAULT_PASSWORD)

    refreshed = accounts.update_profile(db, credential, {
        'firstName': 'Amani',
        'lastName': 'Mwangi',
        'course': 'Data Science',
        'year': 4,
        'semester': 2,
    })

    db.refresh(student)
    assert (student.first_name, student.last_name) == ('Amani', 'Mwangi')
    assert student.course_id == new_course.course_id
    assert refreshed.course == 'Data Science'
    assert refreshed.first_name == 'Amani'
    assert (refreshed.year, refreshed.semester) == (4, 2)
    assert refreshed.role is Role.STUDENT


def test_update_profile_with_unknown_course_changes_nothing(db, make_student) -> None:
    student = make_student()
    credential = accounts.login(db, student.email, DEFAULT_PASSWORD)

    with pytest.raises(HTTPException) as exception_info:
        accounts.update_profile(db, credential, {
            'firstName': 'Changed',
            'lastName': 'Name',
            'course': 'Astrology',
            'year': 1,
            'semester': 1,
        })

    db.refresh(student)
    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Course not found.'
    assert student.first_name == 'Amina'


def test_update_profile_for_admin_ignores_student_only_fields(db, make_admin) -> None:
    admin = make_admin()
    credential = accounts.login(db, admin.email, DEFAULT_PASSWORD)

    refreshed = accounts.update_profile(db, credential, {
        'firstName': 'Grace',
        'lastName': 'Achieng',
        'course': 'Nonexistent Course',
        'year': 9,
        'semester': 9,
    })

    db.refresh(admin)
    assert admin.last_name == 'Achieng'
    assert refreshed.role is Role.ADMIN
    assert refreshed.course is None
    assert refreshed.year is None


def test_update_profile_takes_role_from_credential_not_payload(db, make_student) -> None:
    student = make_student()
    credential = accounts.login(db, student.email, DEFAULT_PASSWORD)

    refreshed = accounts.update_profile(db, credential, {
        'firstName': 'Amina',
        'lastName': 'Otieno',
        'course': 'Course for amina@students.example.edu',
        'year': 2,
        'semester': 1,
        'role': 'admin',
        'user_role': 'admin',
    })

    db.refresh(student)
    assert refreshed.role is Role.STUDENT
    assert student.user_role == 'student'


def test_update_profile_rejects_role_without_account_row(db) -> None:
    credential = Credential(role=Role.SUPERADMIN, email='super@eduhub.example.edu')

    with pytest.raises(HTTPException) as exception_info:
        accounts.update_profile(db, credential, {'firstName': 'Root', 'lastName': 'User'})

    assert exception_info.value.status_code == 401


def test_update_profile_reports_missing_row(db) -> None:
    credential = Credential(id=1, role=Role.ADMIN, email='gone@eduhub.example.edu')

    with pytest.raises(HTTPException) as exception_info:
        accounts.update_profile(db, credential, {'firstName': 'Gone', 'lastName': 'Admin'})

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'User not found.'


def test_update_profile_rejects_incomplete_student_payload(db, make_student) -> None:
    student = make_student()
    credential = accounts.login(db, student.email, DEFAULT_PASSWORD)

    with pytest.raises(HTTPException) as exception_info:
        accounts.update_profile(db, credential, {'firstName': 'Only'})

    assert exception_info.value.status_code == 400


def test_update_profile_for_promoted_class_rep_uses_students_row(db, make_course, make_student) -> None:
    course = make_course('Statistics')
    student = make_student(role='classRep')
    credential = accounts.login(db, student.email, DEFAULT_PASSWORD)

    refreshed = accounts.update_profile(db, credential, {
        'firstName': 'Amina',
        'lastName': 'Otieno',
        'course': 'Statistics',
        'year': 2,
        'semester': 2,
    })

    db.refresh(student)
    assert student.course_id == course.course_id
    assert refreshed.role is Role.CLASS_REP
    assert refreshed.semester == 2


def test_register_student_hashes_password(db, make_course) -> None:
    make_course('Mathematics')

    student = accounts.register_student(
        db,
        email='new@students.example.edu',
        password='pass-word',
        first_name='Neema',
        last_name='Kamau',
        course='Mathematics',
        year=1,
        semester=1,
        gender='Female',
    )

    assert student.password_hash != 'pass-word'
    assert verify_password('pass-word', student.password_hash)
    assert student.user_role == 'student'


def test_register_student_rejects_duplicate_email(db, make_student) -> None:
    student = make_student()

    with pytest.raises(HTTPException) as exception_info:
        accounts.register_student(
            db,
            email=student.email,
            password='pass-word',
            first_name='Copy',
            last_name='Cat',
            course='Anything',
            year=1,
            semester=1,
        )

    assert exception_info.value.status_code == 409


def test_register_student_requires_known_course(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        accounts.register_student(
            db,
            email='lost@students.example.edu',
            password='pass-word',
            first_name='Lost',
            last_name='Student',
            course='Unknown',
            year=1,
            semester=1,
        )

    assert exception_info.value.status_code == 404
    assert db.query(Student).count() == 0


def test_change_password_requires_current_password(db, make_student) -> None:
    student = make_student()

    with pytest.raises(HTTPException) as exception_info:
        accounts.change_password(db, student, 'wrong', 'brand-new-pass')

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Incorrect current password.'


def test_change_password_replaces_hash(db, make_student) -> None:
    student = make_student()

    accounts.change_password(db, student, DEFAULT_PASSWORD, 'brand-new-pass')

    assert accounts.login(db, student.email, 'brand-new-pass').id == student.id


def test_assign_class_rep_promotes_and_notifies(db, make_student, mail_queue) -> None:
    student = make_student()

    accounts.assign_class_rep(db, student.email, mail_queue)

    db.refresh(student)
    assert student.user_role == 'classRep'
    assert mail_queue.sent[0]['to'] == student.email
    assert mail_queue.sent[0]['subject'] == 'Class Representative Assignment'


def test_assign_class_rep_for_unknown_student(db, mail_queue) -> None:
    with pytest.raises(HTTPException) as exception_info:
        accounts.assign_class_rep(db, 'nobody@students.example.edu', mail_queue)

    assert exception_info.value.status_code == 404
    assert mail_queue.sent == []


def test_create_admin_then_login(db) -> None:
    admin = accounts.create_admin(
        db,
        email='dean@eduhub.example.edu',
        password='dean-pass',
        first_name='Peter',
        last_name='Ouma',
    )

    credential = accounts.login(db, 'dean@eduhub.example.edu', 'dean-pass')

    assert credential.id == admin.id
    assert credential.role is Role.ADMIN


def test_delete_entity_hides_secrets(db, make_student) -> None:
    student = make_student()

    deleted = accounts.delete_entity(db, 'Students', student.id)

    assert deleted['email'] == student.email
    assert 'password_hash' not in deleted
    assert db.query(Student).count() == 0


def test_delete_entity_rejects_unknown_entity(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        accounts.delete_entity(db, 'courses', 1)

    assert exception_info.value.status_code == 400


def test_delete_entity_reports_missing_row(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        accounts.delete_entity(db, 'admins', 42)

    assert exception_info.value.status_code == 404
    assert db.query(Admin).count() == 0


def test_login_credential_names_the_account_table(db, make_student, make_class_rep, make_admin) -> None:
    student = make_student()
    class_rep = make_class_rep()
    admin = make_admin()

    assert accounts.login(db, student.email, DEFAULT_PASSWORD).account == 'students'
    assert accounts.login(db, class_rep.email, DEFAULT_PASSWORD).account == 'class_representatives'
    assert accounts.login(db, admin.email, DEFAULT_PASSWORD).account == 'admins'


def test_own_account_row_keeps_tables_with_shared_ids_apart(db, make_student, make_class_rep) -> None:
    student = make_student()
    class_rep = make_class_rep()
    credential = accounts.login(db, class_rep.email, DEFAULT_PASSWORD)

    row = accounts.own_account_row(db, credential)

    assert student.id == class_rep.id
    assert isinstance(row, ClassRepresentative)
    assert row.email == class_rep.email


def test_own_account_row_rejects_credential_without_account(db) -> None:
    credential = Credential(role=Role.SUPERADMIN, email='super@eduhub.example.edu')

    with pytest.raises(HTTPException) as exception_info:
        accounts.own_account_row(db, credential)

    assert exception_info.value.status_code == 403


def test_class_rep_password_change_leaves_student_with_same_id_alone(db, make_student, make_class_rep) -> None:
    student = make_student()
    class_rep = make_class_rep()
    credential = accounts.login(db, class_rep.email, DEFAULT_PASSWORD)

    accounts.change_password(db, accounts.own_account_row(db, credential), DEFAULT_PASSWORD, 'rep-new-pass')

    assert accounts.login(db, class_rep.email, 'rep-new-pass').account == 'class_representatives'
    assert accounts.login(db, student.email, DEFAULT_PASSWORD).id == student.id


def test_delete_student_withdraws_their_reactions(db, make_student, make_feed) -> None:
    student = make_student()
    feed = make_feed()
    react(db, feed.feed_id, student.id, ReactionAction.LIKE)
    react(db, feed.feed_id, student.id + 1, ReactionAction.LIKE)

    accounts.delete_entity(db, 'students', student.id)

    db.expire_all()
    assert db.query(Feed.likes).filter(Feed.feed_id == feed.feed_id).scalar() == 1
    assert db.query(FeedLike).count() == 1
