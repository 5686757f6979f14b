"""Identity carried by a signed credential."""

from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    STUDENT = "student"
    CLASS_REP = "classRep"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class Credential(BaseModel):
    """Identity, role and a snapshot of the profile fields taken at issue time.

    The profile fields are copied, not referenced: renaming a course does not
    change credentials that are already out in the wild.
    """

    id: int | None = None
    role: Role
    email: str
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    course_id: int | None = Field(default=None, alias="courseId")
    course: str | None = None
    year: int | None = None
    semester: int | None = None
    # Table that `id` belongs to; ids are only unique within one table.
    account: str | None = None

    class Config:
        populate_by_name = True

    def to_claims(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
