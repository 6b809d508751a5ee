# app/school/models/db_models.py

from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal["student", "teacher", "admin"]
AttendanceStatus = Literal["present", "absent"]


def from_document(value: Any) -> Any:
    """
    Turns a raw Mongo document into plain python values: `_id` becomes `id`
    and every ObjectId (nested ones included) becomes its hex string.
    """
    if isinstance(value, dict):
        return {("id" if key == "_id" else key): from_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [from_document(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    return value


class MongoModel(BaseModel):
    """Stored documents use camelCase field names; python code uses snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @classmethod
    def from_document(cls, document: dict):
        return cls.model_validate(from_document(document))


class UserRef(MongoModel):
    """A user reference replaced by a projection of the referenced document."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None


class ClassRef(MongoModel):
    """A class reference replaced by a projection of the referenced document."""
    id: str
    class_name: Optional[str] = None


class User(MongoModel):
    """
    Represents a user in the system, mapping to the 'users' collection.
    `password` always holds the bcrypt hash, never the plaintext.
    """
    id: str = Field(..., description="Hex string of the document ObjectId")
    name: str
    email: str = Field(..., description="Lowercased, unique across users")
    password: str
    role: Role = "student"
    created_at: datetime
    updated_at: datetime


class SchoolClass(MongoModel):
    """
    Represents a class, mapping to the 'classes' collection.
    """
    id: str
    class_name: str
    teacher_id: Union[UserRef, str, None] = Field(..., description="References a user; not enforced by the store")
    student_ids: List[Union[UserRef, str]] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class Attendance(MongoModel):
    """
    Represents one student's attendance in one class, mapping to the
    'attendances' collection.
    """
    id: str
    class_id: Union[ClassRef, str, None]
    student_id: Union[UserRef, str, None]
    status: AttendanceStatus = "absent"
    created_at: datetime
    updated_at: datetime


class ClassStatistics(BaseModel):
    total: int = 0
    present: int = 0
    absent: int = 0
