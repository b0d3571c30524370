# attendance_monitor/crud/attendance.py
import logging
from datetime import datetime, date
from typing import Iterable, List, Optional

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from attendance_monitor.exceptions import PersistenceError, ValidationError
from attendance_monitor.models.attendance import AttendanceRecord
from attendance_monitor.models.subject import Subject
from attendance_monitor.models.timetable import Timetable
from attendance_monitor.schemas.attendance import (
    AttendanceCreate,
    AttendanceUpdate,
    EnrichedAttendance,
    LectureAttendance,
    LectureStatus,
    LectureStatusEntry,
)
from attendance_monitor.utils.record_helper import day_bounds, is_blank, split_full_name

# Setup logger
logger = logging.getLogger(__name__)

# Placeholder the marking screen sends when a lecture has no faculty assigned
UNKNOWN_FACULTY = "unknown"


def _with_lecture():
    """Eager loads for attendance -> timetable -> subject -> department and timetable -> faculty"""
    return (
        selectinload(AttendanceRecord.lecture)
        .selectinload(Timetable.subject)
        .selectinload(Subject.department),
        selectinload(AttendanceRecord.lecture).selectinload(Timetable.faculty),
    )


def _lecture_fields(record: AttendanceRecord) -> dict:
    lecture = record.lecture
    subject = lecture.subject if lecture else None
    faculty = lecture.faculty if lecture else None
    department = subject.department if subject else None
    return {
        "id": record.id,
        "lecture_id": record.lecture_id,
        "student_id": record.student_id,
        "is_present": record.is_present,
        "date": record.date,
        "faculty_id": record.faculty_id,
        "remark": record.remark,
        "created_at": record.created_at,
        "subject_code": subject.code if subject else None,
        "subject_name": subject.name if subject else None,
        "faculty_name": faculty.name if faculty else None,
        "lecture_faculty_id": lecture.faculty_id if lecture else None,
        "department_name": department.name if department else None,
        "time_from": lecture.time_from if lecture else None,
        "time_to": lecture.time_to if lecture else None,
    }


def to_lecture_attendance(record: AttendanceRecord) -> LectureAttendance:
    return LectureAttendance(**_lecture_fields(record))


def to_enriched_attendance(record: AttendanceRecord) -> EnrichedAttendance:
    """Flatten a record with its lecture and student relations into display fields"""
    student = record.student
    first_name, last_name = split_full_name(student.name if student else None)
    return EnrichedAttendance(
        **_lecture_fields(record),
        student_first_name=first_name,
        student_last_name=last_name,
        student_email=student.guardian_email if student else None,
        student_roll_no=student.roll_no if student else None,
        student_department=student.department if student else None,
    )


def _build_record(attendance: AttendanceCreate) -> AttendanceRecord:
    """Validate a single submitted row and turn it into a model instance"""
    if is_blank(attendance.student_id):
        raise ValidationError("Student ID is required")
    if is_blank(attendance.lecture_id):
        raise ValidationError("Lecture ID is required")

    record = AttendanceRecord(
        lecture_id=attendance.lecture_id,
        student_id=attendance.student_id,
        is_present=bool(attendance.is_present),
        date=attendance.date,
    )
    if not is_blank(attendance.faculty_id) and attendance.faculty_id != UNKNOWN_FACULTY:
        record.faculty_id = attendance.faculty_id
    if not is_blank(attendance.remark):
        record.remark = attendance.remark
    return record


async def _persist(db: AsyncSession, records: List[AttendanceRecord]) -> List[AttendanceRecord]:
    """Write all records in one commit. Nothing is kept if any row fails."""
    try:
        db.add_all(records)
        await db.commit()
        for record in records:
            await db.refresh(record)
        return records
    except SQLAlchemyError as e:
        logger.error(f"Database error inserting {len(records)} attendance records: {str(e)}", exc_info=True)
        await db.rollback()
        raise PersistenceError(
            f"Database error: {e}",
            public_message="Failed to save attendance records"
        ) from e


async def insert_attendance(db: AsyncSession, attendance: AttendanceCreate) -> AttendanceRecord:
    """
    Insert a single attendance record.

    Args:
        db: Database session
        attendance: Submitted attendance row

    Returns:
        The stored AttendanceRecord with its generated id

    Raises:
        ValidationError: If the student or lecture id is missing
        PersistenceError: If the write fails
    """
    record = _build_record(attendance)
    logger.info(f"Inserting attendance record: lecture={record.lecture_id} student={record.student_id}")
    stored = await _persist(db, [record])
    return stored[0]


async def insert_attendance_records(
        db: AsyncSession,
        attendance_records: Iterable[AttendanceCreate]
) -> List[AttendanceRecord]:
    """Insert several submitted rows as one batch, each normalised like insert_attendance"""
    records = [_build_record(attendance) for attendance in attendance_records]
    if not records:
        return []
    logger.info(f"Inserting batch of {len(records)} attendance records")
    return await _persist(db, records)


async def insert_bulk_attendance_by_status(
        db: AsyncSession,
        lecture_id: str,
        present_ids: Optional[List[Optional[str]]],
        absent_ids: Optional[List[Optional[str]]],
        attendance_date: Optional[datetime],
        faculty_id: Optional[str] = None,
        remark: Optional[str] = None
) -> List[AttendanceRecord]:
    """
    Record a whole lecture session: one row per present and one per absent student.

    Empty ids are dropped. faculty_id and remark are attached to every row when
    non-blank; unlike insert_attendance, the "unknown" placeholder is not filtered here.
    """
    if is_blank(lecture_id):
        raise ValidationError("Lecture ID is required")

    present = [student_id for student_id in (present_ids or []) if student_id]
    absent = [student_id for student_id in (absent_ids or []) if student_id]
    if not present and not absent:
        raise ValidationError("No present or absent student IDs provided")

    shared = {"lecture_id": lecture_id, "date": attendance_date}
    if not is_blank(faculty_id):
        shared["faculty_id"] = faculty_id
    if not is_blank(remark):
        shared["remark"] = remark

    records = [AttendanceRecord(student_id=student_id, is_present=True, **shared) for student_id in present]
    records += [AttendanceRecord(student_id=student_id, is_present=False, **shared) for student_id in absent]

    logger.info(
        f"Bulk attendance for lecture {lecture_id}: "
        f"{len(present)} present, {len(absent)} absent"
    )
    return await _persist(db, records)


async def _get_record(db: AsyncSession, attendance_id: str) -> Optional[AttendanceRecord]:
    result = await db.execute(select(AttendanceRecord).where(AttendanceRecord.id == attendance_id))
    return result.scalar_one_or_none()


async def update_attendance(
        db: AsyncSession,
        attendance_id: str,
        updates: AttendanceUpdate
) -> Optional[AttendanceRecord]:
    """
    Update the provided fields of an attendance record.

    Returns:
        Updated AttendanceRecord, or None if no record has this id
    """
    try:
        record = await _get_record(db, attendance_id)
        if not record:
            logger.warning(f"Cannot update attendance: record not found with ID: {attendance_id}")
            return None

        for field, value in updates.model_dump(exclude_unset=True).items():
            setattr(record, field, value)

        await db.commit()
        await db.refresh(record)
        logger.info(f"Attendance record updated: {attendance_id}")
        return record

    except SQLAlchemyError as e:
        logger.error(f"Database error updating attendance {attendance_id}: {str(e)}", exc_info=True)
        await db.rollback()
        raise PersistenceError(f"Database error: {e}") from e


async def delete_attendance(db: AsyncSession, attendance_id: str) -> Optional[AttendanceRecord]:
    """Delete an attendance record and return it, or None if it does not exist"""
    try:
        record = await _get_record(db, attendance_id)
        if not record:
            return None

        await db.delete(record)
        await db.commit()
        logger.info(f"Attendance record deleted: {attendance_id}")
        return record

    except SQLAlchemyError as e:
        logger.error(f"Database error deleting attendance {attendance_id}: {str(e)}", exc_info=True)
        await db.rollback()
        raise PersistenceError(f"Database error: {e}") from e


async def list_attendance(
        db: AsyncSession,
        lecture_id: Optional[str] = None,
        student_id: Optional[str] = None,
        day: Optional[date] = None
) -> List[AttendanceRecord]:
    """Raw attendance rows, optionally narrowed to a lecture, a student and a calendar day"""
    conditions = []
    if lecture_id:
        conditions.append(AttendanceRecord.lecture_id == lecture_id)
    if student_id:
        conditions.append(AttendanceRecord.student_id == student_id)
    if day:
        start_of_day, end_of_day = day_bounds(day)
        conditions.append(AttendanceRecord.date >= start_of_day)
        conditions.append(AttendanceRecord.date <= end_of_day)

    query = select(AttendanceRecord)
    if conditions:
        query = query.where(and_(*conditions))

    try:
        result = await db.execute(query)
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Database error listing attendance: {str(e)}", exc_info=True)
        raise PersistenceError(
            f"Database error: {e}",
            public_message="Failed to fetch attendance records"
        ) from e


async def get_all_attendance(db: AsyncSession) -> List[EnrichedAttendance]:
    """
    Every attendance row joined with its lecture and student display fields.

    Rows come back in insertion order (created_at); the monitor's recent
    attendance is the tail of this list. Rows written in the same commit share
    a created_at and keep the store's order among themselves.
    """
    query = select(AttendanceRecord).execution_options(populate_existing=True).options(
        *_with_lecture(),
        selectinload(AttendanceRecord.student)
    ).order_by(AttendanceRecord.created_at)
    try:
        result = await db.execute(query)
        records = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching all attendance: {str(e)}", exc_info=True)
        raise PersistenceError(
            f"Database error: {e}",
            public_message="Failed to fetch attendance records"
        ) from e

    logger.debug(f"Fetched {len(records)} attendance records")
    return [to_enriched_attendance(record) for record in records]


async def get_attendance_by_id(db: AsyncSession, attendance_id: str) -> Optional[EnrichedAttendance]:
    """
    Get one enriched attendance row.

    Returns:
        EnrichedAttendance, or None when no row has this id
    """
    query = select(AttendanceRecord).execution_options(populate_existing=True).options(
        *_with_lecture(),
        selectinload(AttendanceRecord.student)
    ).where(AttendanceRecord.id == attendance_id)
    try:
        result = await db.execute(query)
        record = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching attendance {attendance_id}: {str(e)}", exc_info=True)
        raise PersistenceError(
            f"Database error: {e}",
            public_message="Failed to fetch attendance record"
        ) from e

    if not record:
        logger.debug(f"No attendance found with ID: {attendance_id}")
        return None
    return to_enriched_attendance(record)


async def get_attendance_by_student_id(db: AsyncSession, student_id: str) -> List[LectureAttendance]:
    """A student's attendance rows with lecture details. Student fields are not joined."""
    query = select(AttendanceRecord).execution_options(populate_existing=True).options(*_with_lecture()).where(
        AttendanceRecord.student_id == student_id
    )
    try:
        result = await db.execute(query)
        records = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching attendance for student {student_id}: {str(e)}", exc_info=True)
        raise PersistenceError(
            f"Database error: {e}",
            public_message="Failed to fetch attendance records"
        ) from e

    return [to_lecture_attendance(record) for record in records]


def _status_entry(record: AttendanceRecord) -> LectureStatusEntry:
    student = record.student
    lecture = record.lecture
    subject = lecture.subject if lecture else None
    faculty = lecture.faculty if lecture else None

    first_name = last_name = None
    if student:
        first_name, last_name = split_full_name(student.name)

    return LectureStatusEntry(
        student_first_name=first_name,
        student_last_name=last_name,
        student_email=student.guardian_email if student else None,
        subject_name=subject.name if subject else None,
        subject_code=subject.code if subject else None,
        faculty_name=faculty.name if faculty else None,
    )


async def get_attendance_status_by_lecture(db: AsyncSession, lecture_id: str) -> LectureStatus:
    """Split a lecture's attendance into presentees and absentees, keeping query order"""
    query = select(AttendanceRecord).execution_options(populate_existing=True).options(
        *_with_lecture(),
        selectinload(AttendanceRecord.student)
    ).where(AttendanceRecord.lecture_id == lecture_id)
    try:
        result = await db.execute(query)
        records = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching status for lecture {lecture_id}: {str(e)}", exc_info=True)
        raise PersistenceError(
            f"Database error: {e}",
            public_message="Failed to fetch attendance records"
        ) from e

    return LectureStatus(
        presentees=[_status_entry(record) for record in records if record.is_present],
        absentees=[_status_entry(record) for record in records if not record.is_present],
    )
