import logging
from typing import Any, Dict, List, Optional

from ..db.base_repository import ensure_valid_ids
from ..db.class_repository import ClassRepository
from ..errors import NotFoundError
from ..models.db_models import SchoolClass

logger = logging.getLogger(__name__)


class ClassService:
    """
    Class CRUD and membership changes.
    """
    def __init__(self, class_repository: ClassRepository):
        self.class_repository = class_repository

    async def create(self, class_data: Dict[str, Any]) -> SchoolClass:
        logger.info(f"Creating new class {class_data.get('className')}")
        new_class = await self.class_repository.create(class_data)
        logger.info(f"Class created: {new_class.id}")
        return new_class

    async def find_all(self) -> List[SchoolClass]:
        logger.debug("Fetching all classes")
        return await self.class_repository.find_all()

    async def find_by_id(self, class_id: str) -> Optional[SchoolClass]:
        logger.debug(f"Fetching class by ID: {class_id}")
        return await self.class_repository.find_by_id(class_id)

    async def find_by_id_with_details(self, class_id: str) -> Optional[SchoolClass]:
        return await self.class_repository.find_by_id_with_details(class_id)

    async def update(self, class_id: str, update_data: Dict[str, Any]) -> Optional[SchoolClass]:
        logger.info(f"Updating class ID: {class_id}")
        updated_class = await self.class_repository.update(class_id, update_data)
        if not updated_class:
            logger.warning(f"Class not found for update: {class_id}")
        else:
            logger.info(f"Class updated successfully: {class_id}")
        return updated_class

    async def delete(self, class_id: str) -> Optional[SchoolClass]:
        logger.info(f"Deleting class ID: {class_id}")
        deleted_class = await self.class_repository.delete(class_id)
        if not deleted_class:
            logger.warning(f"Class not found for deletion: {class_id}")
        else:
            logger.info(f"Class deleted successfully: {class_id}")
        return deleted_class

    async def find_by_teacher_id(self, teacher_id: str) -> List[SchoolClass]:
        logger.debug(f"Fetching classes for teacher ID: {teacher_id}")
        return await self.class_repository.find_by_teacher_id(teacher_id)

    async def find_by_student_id(self, student_id: str) -> List[SchoolClass]:
        logger.debug(f"Fetching classes for student ID: {student_id}")
        return await self.class_repository.find_by_student_id(student_id)

    async def add_student(self, class_id: str, student_id: str) -> SchoolClass:
        """
        Adds a student to the class. Adding an existing member is a no-op.

        This is load, modify, save; a scan of the member list decides whether
        the student is already enrolled, so the cost grows with class size.
        """
        _, student_oid = ensure_valid_ids(class_id, student_id)
        student_id = str(student_oid)

        school_class = await self.class_repository.find_by_id(class_id)
        if not school_class:
            raise NotFoundError("Class not found")

        if student_id in school_class.student_ids:
            logger.warning(f"Student {student_id} already enrolled in class {class_id}")
            return school_class

        updated_class = await self.class_repository.update(
            class_id, {"studentIds": [*school_class.student_ids, student_id]}
        )
        if not updated_class:
            raise NotFoundError("Class not found")
        logger.info(f"Student {student_id} added to class {class_id}")
        return updated_class

    async def remove_student(self, class_id: str, student_id: str) -> Optional[SchoolClass]:
        """Atomic removal; returns None when the class does not exist."""
        logger.info(f"Removing student {student_id} from class {class_id}")
        return await self.class_repository.pull_student(class_id, student_id)

    async def is_student_enrolled(self, class_id: str, student_id: str) -> bool:
        return await self.class_repository.is_student_enrolled(class_id, student_id)
