import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status

from ..errors import NotFoundError
from ..models.db_models import SchoolClass
from ..services.class_service import ClassService
from .auth import authenticate, require_staff
from .dependencies import get_class_service
from .schemas.common import ApiResponse
from .schemas.school_class import AddStudentRequest, ClassCreateRequest, ClassUpdateRequest
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

# Every class route needs a signed-in user; mutations additionally need teacher or admin.
router = APIRouter(prefix="/classes", tags=["Classes"], dependencies=[Depends(authenticate)])

ClassResponse = ApiResponse[SchoolClass]
ClassListResponse = ApiResponse[List[SchoolClass]]


@router.post("", response_model=ClassResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_staff)], summary="Create a class")
@limiter.limit("60/minute")
async def create_class(request: Request, create_request: ClassCreateRequest, service: ClassService = Depends(get_class_service)):
    logger.info("Create class request received")
    new_class = await service.create(create_request.model_dump(by_alias=True))
    return ClassResponse(message="Class created successfully", data=new_class)


@router.get("", response_model=ClassListResponse, summary="List all classes")
@limiter.limit("120/minute")
async def get_all_classes(request: Request, service: ClassService = Depends(get_class_service)):
    logger.info("Get all classes request received")
    classes = await service.find_all()
    return ClassListResponse(message="Classes retrieved successfully", data=classes, count=len(classes))


# Fixed paths are declared before the `/{class_id}` routes.
@router.get("/teacher/{teacher_id}", response_model=ClassListResponse, summary="Classes taught by a teacher")
@limiter.limit("120/minute")
async def get_classes_by_teacher(request: Request, teacher_id: str, service: ClassService = Depends(get_class_service)):
    logger.info(f"Get classes by teacher request received: {teacher_id}")
    classes = await service.find_by_teacher_id(teacher_id)
    return ClassListResponse(message="Classes retrieved successfully", data=classes, count=len(classes))


@router.get("/student/{student_id}", response_model=ClassListResponse, summary="Classes a student is enrolled in")
@limiter.limit("120/minute")
async def get_classes_by_student(request: Request, student_id: str, service: ClassService = Depends(get_class_service)):
    logger.info(f"Get classes by student request received: {student_id}")
    classes = await service.find_by_student_id(student_id)
    return ClassListResponse(message="Classes retrieved successfully", data=classes, count=len(classes))


@router.get("/{class_id}/details", response_model=ClassResponse, summary="Class with teacher and students populated")
@limiter.limit("120/minute")
async def get_class_with_details(request: Request, class_id: str, service: ClassService = Depends(get_class_service)):
    logger.info(f"Get class with details request received: {class_id}")
    school_class = await service.find_by_id_with_details(class_id)
    if not school_class:
        raise NotFoundError("Class not found")
    return ClassResponse(message="Class retrieved successfully", data=school_class)


@router.get("/{class_id}", response_model=ClassResponse, summary="Get a class")
@limiter.limit("120/minute")
async def get_class_by_id(request: Request, class_id: str, service: ClassService = Depends(get_class_service)):
    logger.info(f"Get class by ID request received: {class_id}")
    school_class = await service.find_by_id(class_id)
    if not school_class:
        raise NotFoundError("Class not found")
    return ClassResponse(message="Class retrieved successfully", data=school_class)


@router.put("/{class_id}", response_model=ClassResponse, dependencies=[Depends(require_staff)], summary="Update a class")
@limiter.limit("60/minute")
async def update_class(request: Request, class_id: str, update_request: ClassUpdateRequest, service: ClassService = Depends(get_class_service)):
    logger.info(f"Update class request received: {class_id}")
    updated_class = await service.update(class_id, update_request.model_dump(by_alias=True, exclude_unset=True, exclude_none=True))
    if not updated_class:
        raise NotFoundError("Class not found")
    return ClassResponse(message="Class updated successfully", data=updated_class)


@router.delete("/{class_id}", response_model=ClassResponse, dependencies=[Depends(require_staff)], summary="Delete a class")
@limiter.limit("60/minute")
async def delete_class(request: Request, class_id: str, service: ClassService = Depends(get_class_service)):
    logger.info(f"Delete class request received: {class_id}")
    deleted_class = await service.delete(class_id)
    if not deleted_class:
        raise NotFoundError("Class not found")
    return ClassResponse(message="Class deleted successfully", data=deleted_class)


@router.post("/{class_id}/students", response_model=ClassResponse, dependencies=[Depends(require_staff)],
             summary="Enroll a student in a class")
@limiter.limit("60/minute")
async def add_student_to_class(request: Request, class_id: str, add_request: AddStudentRequest, service: ClassService = Depends(get_class_service)):
    logger.info(f"Add student to class request received: class {class_id}, student {add_request.student_id}")
    updated_class = await service.add_student(class_id, add_request.student_id)
    return ClassResponse(message="Student added to class successfully", data=updated_class)


@router.delete("/{class_id}/students/{student_id}", response_model=ClassResponse, dependencies=[Depends(require_staff)],
               summary="Remove a student from a class")
@limiter.limit("60/minute")
async def remove_student_from_class(request: Request, class_id: str, student_id: str, service: ClassService = Depends(get_class_service)):
    logger.info(f"Remove student from class request received: class {class_id}, student {student_id}")
    updated_class = await service.remove_student(class_id, student_id)
    if not updated_class:
        raise NotFoundError("Class not found")
    return ClassResponse(message="Student removed from class successfully", data=updated_class)
