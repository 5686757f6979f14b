import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from eduhub.auth.credentials import Credential, Role
from eduhub.auth.dependencies import require_roles
from eduhub.core.errors import BadRequest, NotFound, database_errors
from eduhub.database import get_db
from eduhub.models.course import Unit
from eduhub.models.resource import RESOURCE_TYPES, Resource
from eduhub.services.storage import StorageAdapter, discard_on_failure, get_storage, store_upload

router = APIRouter(tags=['resources'])

logger = logging.getLogger(__name__)

resource_uploaders = require_roles(Role.CLASS_REP, Role.ADMIN, Role.SUPERADMIN)

RESOURCE_TYPE_ALIASES = {
    'past paper': 'Papers',
    'past papers': 'Papers',
    'paper': 'Papers',
    'task': 'Tasks',
    'note': 'Notes',
}


def normalize_resource_type(value: str) -> str:
    normalized = value.strip()
    for resource_type in RESOURCE_TYPES:
        if normalized.lower() == resource_type.lower():
            return resource_type
    if normalized.lower() in RESOURCE_TYPE_ALIASES:
        return RESOURCE_TYPE_ALIASES[normalized.lower()]
    raise BadRequest('Invalid resource type!')


@router.post('', status_code=status.HTTP_201_CREATED)
def add_resource(
    title: str = Form(...),
    description: str = Form(''),
    unit_id: int = Form(..., alias='unitId'),
    resource_type: str = Form(...),
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    storage: StorageAdapter = Depends(get_storage),
    credential: Credential = Depends(resource_uploaders),
):
    normalized_type = normalize_resource_type(resource_type)
    if db.query(Unit.unit_id).filter(Unit.unit_id == unit_id).first() is None:
        raise NotFound('Unit not found.')

    file_url, file_type = store_upload(storage, file, 'resource')

    resource = Resource(
        unit_id=unit_id,
        title=title.strip(),
        description=description,
        link=file_url,
        file_type=file_type,
        resource_type=normalized_type,
    )
    with discard_on_failure(storage, file_url), database_errors(db, 'Error adding resource'):
        db.add(resource)
        db.commit()
    logger.info('%s %s added %s resource to unit %s', credential.role.value, credential.email, normalized_type, unit_id)

    return {'message': 'Resource added successfully!', 'fileUrl': file_url}


@router.delete('/{resource_id}')
def delete_resource(
    resource_id: int,
    db: Session = Depends(get_db),
    credential: Credential = Depends(resource_uploaders),
):
    resource = db.query(Resource).filter(Resource.resource_id == resource_id).first()
    if resource is None:
        raise NotFound('Resource not found')

    with database_errors(db, 'Error deleting resource'):
        db.delete(resource)
        db.commit()
    return {'message': 'Resource deleted successfully'}
