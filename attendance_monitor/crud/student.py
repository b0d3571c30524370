import logging
from typing import List

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from attendance_monitor.exceptions import DataUnavailableError
from attendance_monitor.models.student import Student

# Setup logger
logger = logging.getLogger(__name__)


async def _fetch_students(db: AsyncSession, query, description: str) -> List[Student]:
    try:
        result = await db.execute(query.order_by(Student.roll_no))
        students = list(result.scalars().all())
        logger.debug(f"Fetched {len(students)} students ({description})")
        return students
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching students ({description}): {str(e)}", exc_info=True)
        raise DataUnavailableError(
            f"Database error: {e}",
            public_message="Failed to fetch students"
        ) from e


async def get_all_students(db: AsyncSession) -> List[Student]:
    return await _fetch_students(db, select(Student), "all")


async def get_students_by_department(db: AsyncSession, department: str) -> List[Student]:
    """Students whose stored department (an abbreviation such as "DCE") matches exactly"""
    query = select(Student).where(Student.department == department)
    return await _fetch_students(db, query, f"department={department}")


async def get_students_by_division_and_sem(db: AsyncSession, division: int, semester: int) -> List[Student]:
    query = select(Student).where(
        and_(
            Student.division == division,
            Student.semester == semester
        )
    )
    return await _fetch_students(db, query, f"division={division}, sem={semester}")


async def get_students_by_division_batch_and_sem(
        db: AsyncSession,
        division: int,
        batch: str,
        semester: int
) -> List[Student]:
    """Lab rosters are narrowed to one batch of a division"""
    query = select(Student).where(
        and_(
            Student.division == division,
            Student.batch == batch,
            Student.semester == semester
        )
    )
    return await _fetch_students(db, query, f"division={division}, batch={batch}, sem={semester}")


async def get_students_by_department_and_sem(db: AsyncSession, department: str, semester: int) -> List[Student]:
    query = select(Student).where(
        and_(
            Student.department == department,
            Student.semester == semester
        )
    )
    return await _fetch_students(db, query, f"department={department}, sem={semester}")
