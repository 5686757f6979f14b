import os

from dotenv import load_dotenv

load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_TO_FILE = _get_bool(os.getenv("LOG_TO_FILE"), default=APP_ENV.lower() == "production")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./eduhub.db")

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = _get_int(os.getenv("JWT_EXPIRES_MINUTES"), 30 * 24 * 60)

# Fixed operator identity, never stored in the database.
SUPER_USER = os.getenv("SUPER_USER", "")
SUPER_PASSWORD = os.getenv("SUPER_PASSWORD", "")

FRONTEND_ORIGINS = [
    origin
    for origin in (
        os.getenv("FRONTEND_URL_DEV", "http://localhost:5173"),
        os.getenv("FRONTEND_URL_PROD"),
        os.getenv("FRONTEND_URL_STAGING"),
    )
    if origin
]

RESET_PASSWORD_URL = os.getenv("RESET_PASSWORD_URL", "http://localhost:5173/reset-password")
RESET_TOKEN_EXPIRES_MINUTES = _get_int(os.getenv("RESET_TOKEN_EXPIRES_MINUTES"), 5)

UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads"))
UPLOAD_BASE_URL = os.getenv("UPLOAD_BASE_URL", "/uploads")

SMTP_SERVER = os.getenv("SMTP_SERVER", "")
SMTP_PORT = _get_int(os.getenv("SMTP_PORT"), 587)
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SENDER_EMAIL = os.getenv("SENDER_EMAIL", "no-reply@eduhub.local")
MAIL_MAX_WORKERS = _get_int(os.getenv("MAIL_MAX_WORKERS"), 2)
MAIL_SEND_TIMEOUT_SECONDS = _get_int(os.getenv("MAIL_SEND_TIMEOUT_SECONDS"), 20)


def validate_runtime_config() -> None:
    if APP_ENV.lower() != "production":
        return
    if JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if not SUPER_USER or not SUPER_PASSWORD:
        raise RuntimeError("SUPER_USER and SUPER_PASSWORD must be set in production.")
