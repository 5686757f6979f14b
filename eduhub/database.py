from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from eduhub.core import config


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 300}


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_student_schema_checked = False
_feed_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_student_schema() -> None:
    """Add the password-reset columns to ``students`` tables created before they existed."""
    global _student_schema_checked

    if _student_schema_checked:
        return

    with _schema_lock:
        if _student_schema_checked:
            return

        inspector = inspect(engine)

        if 'students' not in inspector.get_table_names():
            _student_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('students')}
        migration_steps = [
            ('user_role', "ALTER TABLE students ADD COLUMN user_role VARCHAR DEFAULT 'student'"),
            ('reset_token', 'ALTER TABLE students ADD COLUMN reset_token VARCHAR'),
            ('reset_token_expiry', 'ALTER TABLE students ADD COLUMN reset_token_expiry TIMESTAMP'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_students_reset_token ON students(reset_token)')
            )

        _student_schema_checked = True


def ensure_feed_schema() -> None:
    global _feed_schema_checked

    if _feed_schema_checked:
        return

    with _schema_lock:
        if _feed_schema_checked:
            return

        inspector = inspect(engine)

        if 'feeds' not in inspector.get_table_names():
            _feed_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('feeds')}
        migration_steps = [
            ('likes', 'ALTER TABLE feeds ADD COLUMN likes INTEGER NOT NULL DEFAULT 0'),
            ('dislikes', 'ALTER TABLE feeds ADD COLUMN dislikes INTEGER NOT NULL DEFAULT 0'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_feeds_cohort ON feeds(course_id, year, semester)')
            )

        _feed_schema_checked = True
