import logging
from typing import Optional

import pydantic
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_monitor.crud.attendance import get_all_attendance, get_attendance_by_student_id
from attendance_monitor.crud.student import get_all_students, get_students_by_department
from attendance_monitor.dependencies import get_db
from attendance_monitor.exceptions import AttendanceError, ValidationError
from attendance_monitor.schemas.monitor import MonitorFilters
from attendance_monitor.services.attendance_monitor import build_monitor_report, get_department_abbreviation
from attendance_monitor.services.filter_options import load_filter_options

logger = logging.getLogger(__name__)

monitor_router = APIRouter(prefix="/attendance-monitor", tags=["attendance-monitor"])


@monitor_router.get("")
async def get_attendance_monitor(
        department: Optional[str] = Query(None, description="Department full name or abbreviation"),
        subject: Optional[str] = Query(None, description="Subject code or part of its name"),
        teacher: Optional[str] = Query(None, description="Faculty name or id"),
        counselor: Optional[str] = Query(None),
        id_range: Optional[str] = Query(None, alias="idRange", description="Roll number range, e.g. '22DCE001 to 22DCE060'"),
        date: Optional[str] = Query(None, description="Single day as dd/mm/yyyy"),
        student_id: Optional[str] = Query(None, alias="studentId"),
        date_from: Optional[str] = Query(None, alias="dateFrom"),
        date_to: Optional[str] = Query(None, alias="dateTo"),
        db: AsyncSession = Depends(get_db)
):
    """
    Per-student attendance percentages, status tiers and dashboard summary.

    With **studentId** only that student's attendance rows are returned.
    """
    try:
        if student_id:
            logger.info(f"Fetching attendance monitor rows for student {student_id}")
            records = await get_attendance_by_student_id(db, student_id)
            return {"success": True, "data": records}

        try:
            filters = MonitorFilters(
                department=department,
                subject=subject,
                teacher=teacher,
                counselor=counselor,
                id_range=id_range,
                date=date,
                date_from=date_from,
                date_to=date_to
            )
        except pydantic.ValidationError as e:
            logger.warning(f"Invalid attendance monitor filters: {e}")
            raise ValidationError("Invalid date range: dateFrom and dateTo must be ISO dates")

        logger.info(f"Attendance monitor request with filters: {filters.model_dump(exclude_none=True)}")

        attendance_records = await get_all_attendance(db)
        if filters.department:
            students = await get_students_by_department(db, get_department_abbreviation(filters.department))
        else:
            students = await get_all_students(db)

        report = build_monitor_report(students, attendance_records, filters)
        return {"success": True, "data": report}

    except AttendanceError as e:
        logger.error(f"Error fetching attendance monitor data: {e.message}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error fetching attendance monitor data: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch attendance data"
        )


@monitor_router.get("/filters")
async def get_filter_options(db: AsyncSession = Depends(get_db)):
    """Departments, subjects, faculty, divisions, batches, semesters and roll number ranges"""
    try:
        options = await load_filter_options(db)
        return {"success": True, "data": options}
    except AttendanceError as e:
        logger.error(f"Error fetching filter options: {e.message}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error fetching filter options: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch filter options"
        )
