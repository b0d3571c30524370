import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_monitor.dependencies import get_db
from attendance_monitor.crud.student import (
    get_students_by_department_and_sem,
    get_students_by_division_and_sem,
    get_students_by_division_batch_and_sem
)
from attendance_monitor.exceptions import AttendanceError, ValidationError
from attendance_monitor.models.student import Student
from attendance_monitor.schemas.student_schema import RosterStudent
from attendance_monitor.services.attendance_monitor import get_department_abbreviation


# Setup logger
logger = logging.getLogger(__name__)

str_router = APIRouter(prefix="/students", tags=["students"])


def convert_to_roster_student(student: Student) -> RosterStudent:
    """Convert SQLAlchemy model to a roster row, every student starts out present."""
    return RosterStudent(
        id=student.id,
        student_id=student.roll_no or student.id,
        name=student.name or "Unknown",
        counselor_name=student.counselor or "Not Assigned",
        present=True,
        division=student.division,
        batch=student.batch,
        semester=student.semester,
        department=student.department
    )


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except ValueError:
        return None


@str_router.get("")
async def get_lecture_roster(
        division: Optional[str] = Query(None, description="Division number"),
        sem: Optional[str] = Query(None, description="Semester number"),
        batch: Optional[str] = Query(None, description="Lab batch"),
        type: Optional[str] = Query(None, description="'lecture' or 'lab'"),
        department: Optional[str] = Query(None, description="Department full name or abbreviation"),
        db: AsyncSession = Depends(get_db)
):
    """
    Roster of students for marking a lecture's attendance.

    - **department** + **sem**: whole department semester
    - **division** + **sem**: a division; with **type=lab** and **batch** only that batch
    """
    try:
        if not sem or not (department or division):
            logger.warning(f"Roster request missing parameters: division={division}, sem={sem}, department={department}")
            raise ValidationError("Division and semester, or department and semester, are required")

        sem_num = _parse_int(sem)
        if sem_num is None:
            raise ValidationError("Division and semester must be valid numbers")

        students: List[Student]
        if department:
            department_abbr = get_department_abbreviation(department)
            logger.info(f"Fetching roster for department {department_abbr}, sem {sem_num}")
            students = await get_students_by_department_and_sem(db, department_abbr, sem_num)
        else:
            division_num = _parse_int(division)
            if division_num is None:
                raise ValidationError("Division and semester must be valid numbers")

            if type == "lab" and batch:
                logger.info(f"Fetching lab roster for division {division_num}, batch {batch}, sem {sem_num}")
                students = await get_students_by_division_batch_and_sem(db, division_num, batch, sem_num)
            else:
                logger.info(f"Fetching lecture roster for division {division_num}, sem {sem_num}")
                students = await get_students_by_division_and_sem(db, division_num, sem_num)

        roster = [convert_to_roster_student(student) for student in students]
        logger.info(f"Returning roster of {len(roster)} students")
        return {"success": True, "data": roster}

    except AttendanceError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error fetching students: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch students"
        )
