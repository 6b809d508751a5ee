from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

ClassName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)]
EntityId = Annotated[str, StringConstraints(min_length=1)]


class ClassRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClassCreateRequest(ClassRequest):
    """Request model for creating a class."""
    class_name: ClassName
    teacher_id: EntityId = Field(..., description="ID of the teacher who owns the class.")
    student_ids: List[str] = Field(default_factory=list)


class ClassUpdateRequest(ClassRequest):
    """Request model for updating a class. Only the fields sent are changed."""
    class_name: Optional[ClassName] = None
    teacher_id: Optional[EntityId] = None
    student_ids: Optional[List[str]] = None


class AddStudentRequest(ClassRequest):
    student_id: EntityId
