import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from eduhub.core import config
from eduhub.core.errors import GENERIC_SERVER_ERROR
from eduhub.core.logging_config import setup_logging
from eduhub.database import Base, engine, ensure_feed_schema, ensure_student_schema
from eduhub.models import account, course, feed, notification, resource, support  # noqa: F401
from eduhub.routes import (
    auth_routes,
    course_routes,
    feed_routes,
    notification_routes,
    resource_routes,
    superadmin_routes,
    support_routes,
    unit_routes,
)
from eduhub.services.mailer import mail_queue

setup_logging()
config.validate_runtime_config()

logger = logging.getLogger(__name__)

app = FastAPI(title='EduHub API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE'],
    allow_headers=['*'],
)

os.makedirs(config.UPLOAD_DIR, exist_ok=True)
app.mount(config.UPLOAD_BASE_URL, StaticFiles(directory=config.UPLOAD_DIR), name='uploads')


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_student_schema()
        ensure_feed_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.on_event('shutdown')
def drain_mail_queue() -> None:
    mail_queue.shutdown(wait=True)
    logger.info('Mail queue drained: %d sent, %d failed', mail_queue.sent_count, mail_queue.failed_count)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': 'Missing or invalid fields.', 'errors': jsonable_errors(exc)},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error('Unhandled database error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': GENERIC_SERVER_ERROR},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {'loc': [str(part) for part in error['loc']], 'msg': error['msg']}
        for error in exc.errors()
    ]


@app.get('/')
def root():
    return {'status': 'EduHub API Running'}


app.include_router(auth_routes.router)
app.include_router(course_routes.router, prefix='/courses')
app.include_router(unit_routes.router, prefix='/units')
app.include_router(resource_routes.router, prefix='/resources')
app.include_router(feed_routes.router, prefix='/feeds')
app.include_router(notification_routes.router, prefix='/notifications')
app.include_router(superadmin_routes.router, prefix='/superadmin')
app.include_router(support_routes.router)
