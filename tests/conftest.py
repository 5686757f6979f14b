import os
import tempfile

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-with-enough-length-for-hs256')
os.environ.setdefault('UPLOAD_DIR', tempfile.mkdtemp(prefix='eduhub-uploads-'))

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from eduhub.auth.passwords import hash_password  # noqa: E402
from eduhub.database import Base  # noqa: E402
from eduhub.models import account, course, feed, notification, resource, support  # noqa: E402,F401
from eduhub.models.account import Admin, ClassRepresentative, Student  # noqa: E402
from eduhub.models.course import Course  # noqa: E402
from eduhub.models.feed import Feed  # noqa: E402

DEFAULT_PASSWORD = 'secret-pass'


class FakeMailQueue:
    def __init__(self):
        self.sent = []

    def submit(self, recipient_email, subject, body, html_content=None):
        self.sent.append({'to': recipient_email, 'subject': subject, 'body': body, 'html': html_content})


class FakeStorage:
    def __init__(self):
        self.uploads = []
        self.deleted = []

    def upload(self, data, filename):
        self.uploads.append((filename, data))
        return f'https://files.example.com/{filename}'

    def delete(self, url):
        self.deleted.append(url)


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mail_queue():
    return FakeMailQueue()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def make_course(db):
    def _make_course(name: str = 'Computer Science') -> Course:
        course_row = Course(course_name=name)
        db.add(course_row)
        db.commit()
        db.refresh(course_row)
        return course_row

    return _make_course


@pytest.fixture
def make_student(db, make_course):
    def _make_student(email: str = 'amina@students.example.edu', role: str = 'student', course_row=None, **fields) -> Student:
        course_row = course_row or make_course(f'Course for {email}')
        student = Student(
            email=email,
            password_hash=hash_password(fields.pop('password', DEFAULT_PASSWORD)),
            first_name=fields.pop('first_name', 'Amina'),
            last_name=fields.pop('last_name', 'Otieno'),
            course_id=course_row.course_id,
            year=fields.pop('year', 2),
            semester=fields.pop('semester', 1),
            gender=fields.pop('gender', 'Female'),
            user_role=role,
            **fields,
        )
        db.add(student)
        db.commit()
        db.refresh(student)
        return student

    return _make_student


@pytest.fixture
def make_admin(db):
    def _make_admin(email: str = 'registrar@eduhub.example.edu') -> Admin:
        admin = Admin(
            email=email,
            password_hash=hash_password(DEFAULT_PASSWORD),
            first_name='Grace',
            last_name='Wanjiru',
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        return admin

    return _make_admin


@pytest.fixture
def make_class_rep(db, make_course):
    def _make_class_rep(email: str = 'rep@students.example.edu') -> ClassRepresentative:
        course_row = make_course(f'Course for {email}')
        class_rep = ClassRepresentative(
            email=email,
            password_hash=hash_password(DEFAULT_PASSWORD),
            first_name='Brian',
            last_name='Kiprop',
            course_id=course_row.course_id,
            year=3,
            semester=2,
        )
        db.add(class_rep)
        db.commit()
        db.refresh(class_rep)
        return class_rep

    return _make_class_rep


@pytest.fixture
def make_feed(db):
    def _make_feed(course_id: int = 1, year: int = 2, semester: int = 1, description: str = 'Lab moved to room 4') -> Feed:
        feed_row = Feed(
            course_id=course_id,
            year=year,
            semester=semester,
            description=description,
            image_path='https://files.example.com/poster.png',
            likes=0,
            dislikes=0,
        )
        db.add(feed_row)
        db.commit()
        db.refresh(feed_row)
        return feed_row

    return _make_feed
