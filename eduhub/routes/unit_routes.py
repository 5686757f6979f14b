from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from eduhub.auth.credentials import Credential, Role
from eduhub.auth.dependencies import get_current_credential, require_roles
from eduhub.core.errors import NotFound, database_errors
from eduhub.database import get_db
from eduhub.models.course import Course, Unit
from eduhub.models.resource import Resource

router = APIRouter(tags=['units'])

unit_managers = require_roles(Role.ADMIN, Role.SUPERADMIN)


class UnitRequest(BaseModel):
    unit_code: str = Field(min_length=1)
    unit_name: str = Field(min_length=1)
    lecturer: str = Field(min_length=1)
    course_id: int = Field(alias='courseId')
    year: int = Field(ge=1)
    semester: int = Field(ge=1)

    class Config:
        populate_by_name = True


class UnitResponse(BaseModel):
    unit_id: int
    unit_code: str
    unit_name: str
    lecturer: str | None
    course_id: int | None
    year: int | None
    semester: int | None

    class Config:
        from_attributes = True


class UnitWithCourseResponse(BaseModel):
    unit_id: int
    unit_code: str
    unit_name: str
    lecturer: str | None
    year: int | None
    semester: int | None
    course_name: str


class UnitSummaryResponse(BaseModel):
    unit_id: int
    unit_code: str
    unit_name: str
    lecturer: str | None

    class Config:
        from_attributes = True


class UnitResourceResponse(BaseModel):
    resource_id: int
    title: str
    description: str | None
    link: str
    upload_date: datetime | None
    file_type: str | None
    resource_type: str

    class Config:
        from_attributes = True


def get_unit_or_404(db: Session, unit_id: int) -> Unit:
    unit = db.query(Unit).filter(Unit.unit_id == unit_id).first()
    if unit is None:
        raise NotFound('Unit not found.')
    return unit


@router.get('', response_model=list[UnitWithCourseResponse])
def list_units(
    db: Session = Depends(get_db),
    credential: Credential = Depends(get_current_credential),
):
    with database_errors(db, 'Error fetching units'):
        rows = db.query(
            Unit.unit_id,
            Unit.unit_code,
            Unit.unit_name,
            Unit.semester,
            Unit.year,
            Unit.lecturer,
            Course.course_name,
        ).join(Course, Unit.course_id == Course.course_id).order_by(Unit.unit_id.desc()).all()
    return [UnitWithCourseResponse(**row._asdict()) for row in rows]


@router.get('/details/{unit_id}')
def unit_details(
    unit_id: int,
    db: Session = Depends(get_db),
    credential: Credential = Depends(get_current_credential),
):
    unit = get_unit_or_404(db, unit_id)
    with database_errors(db, 'Error fetching unit resources'):
        resources = db.query(Resource).filter(Resource.unit_id == unit_id).order_by(
            Resource.upload_date.desc()
        ).all()
    return {
        'unit': UnitSummaryResponse.model_validate(unit),
        'resources': [UnitResourceResponse.model_validate(resource) for resource in resources],
    }


@router.get('/{course_id}', response_model=list[UnitResponse])
def list_course_units(
    course_id: int,
    year: int | None = Query(default=None),
    semester: int | None = Query(default=None),
    db: Session = Depends(get_db),
    credential: Credential = Depends(get_current_credential),
):
    with database_errors(db, 'Error fetching units'):
        query = db.query(Unit).filter(Unit.course_id == course_id)
        # Cohort filter only applies when both halves are given.
        if year is not None and semester is not None:
            query = query.filter(Unit.year == year, Unit.semester == semester)
        return query.order_by(Unit.year, Unit.semester).all()


@router.post('', status_code=status.HTTP_201_CREATED)
def create_unit(
    data: UnitRequest,
    db: Session = Depends(get_db),
    credential: Credential = Depends(unit_managers),
):
    unit = Unit(**data.model_dump())
    with database_errors(db, 'Error creating unit'):
        db.add(unit)
        db.commit()
        db.refresh(unit)
    return {'unit': UnitResponse.model_validate(unit)}


@router.put('/{unit_id}')
def update_unit(
    unit_id: int,
    data: UnitRequest,
    db: Session = Depends(get_db),
    credential: Credential = Depends(unit_managers),
):
    unit = get_unit_or_404(db, unit_id)
    with database_errors(db, 'Error updating unit'):
        for field, value in data.model_dump().items():
            setattr(unit, field, value)
        db.commit()
        db.refresh(unit)
    return {'unit': UnitResponse.model_validate(unit)}


@router.delete('/{unit_id}')
def delete_unit(
    unit_id: int,
    db: Session = Depends(get_db),
    credential: Credential = Depends(unit_managers),
):
    unit = get_unit_or_404(db, unit_id)
    with database_errors(db, 'Error deleting unit'):
        db.delete(unit)
        db.commit()
    return {'message': 'Unit deleted successfully'}
