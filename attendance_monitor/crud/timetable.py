import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from attendance_monitor.exceptions import DataUnavailableError
from attendance_monitor.models.subject import Subject
from attendance_monitor.models.timetable import Timetable
from attendance_monitor.schemas.timetable import TimetableEntry

logger = logging.getLogger(__name__)


def to_timetable_entry(lecture: Timetable) -> TimetableEntry:
    subject = lecture.subject
    faculty = lecture.faculty
    # Lecture's own department first, then the subject's
    department = lecture.department or (subject.department if subject else None)
    return TimetableEntry(
        id=lecture.id,
        subject_id=lecture.subject_id,
        subject_code=subject.code if subject else None,
        subject_name=subject.name if subject else None,
        faculty_id=lecture.faculty_id,
        faculty_name=faculty.name if faculty else None,
        faculty_email=faculty.email if faculty else None,
        department=department.name if department else None,
        division=lecture.division,
        batch=lecture.batch,
        semester=lecture.semester if lecture.semester is not None else (subject.semester if subject else None),
        lecture_type=lecture.lecture_type,
        time_from=lecture.time_from,
        time_to=lecture.time_to,
    )


async def get_all_timetables(db: AsyncSession) -> List[TimetableEntry]:
    """Every timetable row with subject, faculty and department names resolved"""
    query = select(Timetable).execution_options(populate_existing=True).options(
        selectinload(Timetable.subject).selectinload(Subject.department),
        selectinload(Timetable.faculty),
        selectinload(Timetable.department),
    )
    try:
        result = await db.execute(query)
        lectures = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching timetables: {str(e)}", exc_info=True)
        raise DataUnavailableError(
            f"Database error: {e}",
            public_message="Failed to fetch timetable"
        ) from e

    logger.debug(f"Fetched {len(lectures)} timetable entries")
    return [to_timetable_entry(lecture) for lecture in lectures]
