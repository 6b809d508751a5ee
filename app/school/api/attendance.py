import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Request, status

from ..errors import NotFoundError
from ..models.db_models import Attendance, ClassStatistics
from ..services.attendance_service import AttendanceService
from .auth import authenticate, require_staff
from .dependencies import get_attendance_service
from .schemas.attendance import (
    AttendanceCreateRequest,
    AttendanceUpdateRequest,
    DateRangeQuery,
    MarkAttendanceRequest,
)
from .schemas.common import ApiResponse
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

# The public path keeps its historical spelling.
router = APIRouter(prefix="/attendence", tags=["Attendance"], dependencies=[Depends(authenticate)])

AttendanceResponse = ApiResponse[Attendance]
AttendanceListResponse = ApiResponse[List[Attendance]]
StatisticsResponse = ApiResponse[ClassStatistics]


def get_date_range(
    start_date: datetime = Query(..., alias="startDate", description="Inclusive lower bound on creation time."),
    end_date: datetime = Query(..., alias="endDate", description="Inclusive upper bound on creation time.")
) -> DateRangeQuery:
    return DateRangeQuery(start_date=start_date, end_date=end_date)


@router.post("", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_staff)], summary="Create an attendance record")
@limiter.limit("120/minute")
async def create_attendance(request: Request, create_request: AttendanceCreateRequest, service: AttendanceService = Depends(get_attendance_service)):
    logger.info("Create attendance request received")
    attendance = await service.create(create_request.model_dump(by_alias=True))
    return AttendanceResponse(message="Attendance record created successfully", data=attendance)


@router.get("", response_model=AttendanceListResponse, summary="List all attendance records")
@limiter.limit("120/minute")
async def get_all_attendance(request: Request, service: AttendanceService = Depends(get_attendance_service)):
    logger.info("Get all attendance request received")
    records = await service.find_all()
    return AttendanceListResponse(message="Attendance records retrieved successfully", data=records, count=len(records))


# Fixed paths are declared before `/{attendance_id}`.
@router.get("/class/{class_id}", response_model=AttendanceListResponse, summary="Attendance records of a class")
@limiter.limit("120/minute")
async def get_attendance_by_class(request: Request, class_id: str, service: AttendanceService = Depends(get_attendance_service)):
    logger.info(f"Get attendance by class request received: {class_id}")
    records = await service.find_by_class_id(class_id)
    return AttendanceListResponse(message="Attendance records retrieved successfully", data=records, count=len(records))


@router.get("/student/{student_id}", response_model=AttendanceListResponse, summary="Attendance records of a student")
@limiter.limit("120/minute")
async def get_attendance_by_student(request: Request, student_id: str, service: AttendanceService = Depends(get_attendance_service)):
    logger.info(f"Get attendance by student request received: {student_id}")
    records = await service.find_by_student_id(student_id)
    return AttendanceListResponse(message="Attendance records retrieved successfully", data=records, count=len(records))


@router.get("/class/{class_id}/student/{student_id}", response_model=AttendanceResponse,
            summary="Latest attendance record of a student in a class")
@limiter.limit("120/minute")
async def get_attendance_by_class_and_student(request: Request, class_id: str, student_id: str, service: AttendanceService = Depends(get_attendance_service)):
    logger.info(f"Get attendance by class and student request received: class {class_id}, student {student_id}")
    attendance = await service.find_by_class_and_student(class_id, student_id)
    if not attendance:
        raise NotFoundError("Attendance record not found")
    return AttendanceResponse(message="Attendance record retrieved successfully", data=attendance)


@router.get("/class/{class_id}/statistics", response_model=StatisticsResponse, summary="Attendance counts of a class")
@limiter.limit("120/minute")
async def get_class_statistics(request: Request, class_id: str, service: AttendanceService = Depends(get_attendance_service)):
    logger.info(f"Get class statistics request received: {class_id}")
    statistics = await service.get_class_statistics(class_id)
    return StatisticsResponse(message="Statistics retrieved successfully", data=statistics)


@router.get("/class/{class_id}/date-range", response_model=AttendanceListResponse,
            summary="Attendance records of a class created within a date range")
@limiter.limit("120/minute")
async def get_attendance_by_date_range(request: Request, class_id: str, date_range: DateRangeQuery = Depends(get_date_range), service: AttendanceService = Depends(get_attendance_service)):
    logger.info(f"Get attendance by date range request received: {date_range.start_date} to {date_range.end_date}")
    records = await service.find_by_date_range(date_range.start_date, date_range.end_date, class_id)
    return AttendanceListResponse(message="Attendance records retrieved successfully", data=records, count=len(records))


@router.post("/class/{class_id}/student/{student_id}/mark", response_model=AttendanceResponse,
             dependencies=[Depends(require_staff)], summary="Create or update a student's attendance in a class")
@limiter.limit("200/minute")
async def mark_attendance(request: Request, class_id: str, student_id: str, mark_request: MarkAttendanceRequest, service: AttendanceService = Depends(get_attendance_service)):
    logger.info(f"Mark attendance request received: class {class_id}, student {student_id}, status {mark_request.status}")
    attendance = await service.mark_attendance(class_id, student_id, mark_request.status)
    return AttendanceResponse(message="Attendance marked successfully", data=attendance)


@router.get("/{attendance_id}", response_model=AttendanceResponse, summary="Get an attendance record")
@limiter.limit("120/minute")
async def get_attendance_by_id(request: Request, attendance_id: str, service: AttendanceService = Depends(get_attendance_service)):
    logger.info(f"Get attendance by ID request received: {attendance_id}")
    attendance = await service.find_by_id(attendance_id)
    if not attendance:
        raise NotFoundError("Attendance record not found")
    return AttendanceResponse(message="Attendance record retrieved successfully", data=attendance)


@router.put("/{attendance_id}", response_model=AttendanceResponse, dependencies=[Depends(require_staff)],
            summary="Update an attendance record")
@limiter.limit("120/minute")
async def update_attendance(request: Request, attendance_id: str, update_request: AttendanceUpdateRequest, service: AttendanceService = Depends(get_attendance_service)):
    logger.info(f"Update attendance request received: {attendance_id}")
    attendance = await service.update(attendance_id, update_request.model_dump(by_alias=True, exclude_unset=True, exclude_none=True))
    if not attendance:
        raise NotFoundError("Attendance record not found")
    return AttendanceResponse(message="Attendance record updated successfully", data=attendance)


@router.delete("/{attendance_id}", response_model=AttendanceResponse, dependencies=[Depends(require_staff)],
               summary="Delete an attendance record")
@limiter.limit("120/minute")
async def delete_attendance(request: Request, attendance_id: str, service: AttendanceService = Depends(get_attendance_service)):
    logger.info(f"Delete attendance request received: {attendance_id}")
    attendance = await service.delete(attendance_id)
    if not attendance:
        raise NotFoundError("Attendance record not found")
    return AttendanceResponse(message="Attendance record deleted successfully", data=attendance)
