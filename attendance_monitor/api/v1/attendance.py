# attendance_monitor/api/v1/attendance.py
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_monitor.crud.attendance import (
    delete_attendance,
    get_all_attendance,
    get_attendance_by_id,
    get_attendance_by_student_id,
    get_attendance_status_by_lecture,
    insert_attendance_records,
    insert_bulk_attendance_by_status,
    list_attendance,
    update_attendance,
)
from attendance_monitor.dependencies import get_db
from attendance_monitor.exceptions import AttendanceError, ValidationError
from attendance_monitor.schemas.attendance import (
    AttendanceBatchRequest,
    AttendanceRecordResponse,
    AttendanceUpdate,
    BulkAttendanceRequest,
)
from attendance_monitor.utils.record_helper import parse_timestamp

# Setup logging
logger = logging.getLogger(__name__)
router = APIRouter(prefix="/attendance", tags=["attendance"])


def _records_payload(records):
    return [AttendanceRecordResponse.model_validate(record) for record in records]


@router.post("")
async def save_attendance(
        payload: AttendanceBatchRequest,
        db: AsyncSession = Depends(get_db)
):
    """
    Save a batch of attendance records.

    - **attendanceRecords**: rows with lecture, student_id, is_present, Date and optional faculty_id / Remark
    """
    try:
        logger.info(f"Saving {len(payload.attendance_records)} attendance records")
        records = await insert_attendance_records(db, payload.attendance_records)
        return {
            "success": True,
            "message": f"{len(records)} attendance records saved successfully",
            "data": _records_payload(records)
        }
    except AttendanceError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error saving attendance: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )


@router.get("")
async def get_attendance(
        lecture: Optional[str] = Query(None, description="Timetable entry id"),
        student: Optional[str] = Query(None, description="Student id"),
        date: Optional[str] = Query(None, description="Calendar day, e.g. 2024-09-16"),
        db: AsyncSession = Depends(get_db)
):
    """Raw attendance rows filtered by lecture, student and calendar day"""
    day = None
    if date:
        try:
            day = parse_timestamp(date).date()
        except ValueError:
            raise ValidationError(f"Invalid date: {date}")

    logger.info(f"Fetching attendance: lecture={lecture}, student={student}, date={date}")
    records = await list_attendance(db, lecture_id=lecture, student_id=student, day=day)
    return {"success": True, "data": _records_payload(records)}


@router.post("/bulk")
async def save_bulk_attendance(
        payload: BulkAttendanceRequest,
        db: AsyncSession = Depends(get_db)
):
    """
    Record one lecture session from present and absent student id lists.

    - **lectureId**: timetable entry the session belongs to
    - **presentIds** / **absentIds**: student ids
    - **date**: session timestamp, defaults to now
    """
    try:
        records = await insert_bulk_attendance_by_status(
            db,
            lecture_id=payload.lecture_id,
            present_ids=payload.present_ids,
            absent_ids=payload.absent_ids,
            attendance_date=payload.date or datetime.now(),
            faculty_id=payload.faculty_id,
            remark=payload.remark
        )
        present_count = sum(1 for record in records if record.is_present)
        logger.info(f"Bulk attendance saved for lecture {payload.lecture_id}: {len(records)} records")
        return {
            "success": True,
            "message": f"Attendance saved: {present_count} present, {len(records) - present_count} absent",
            "data": _records_payload(records)
        }
    except AttendanceError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error saving bulk attendance: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )


@router.get("/all")
async def get_all_attendance_endpoint(db: AsyncSession = Depends(get_db)):
    """All attendance rows with subject, faculty, department and student details"""
    records = await get_all_attendance(db)
    return {"success": True, "data": records}


@router.get("/student/{student_id}")
async def get_student_attendance(student_id: str, db: AsyncSession = Depends(get_db)):
    records = await get_attendance_by_student_id(db, student_id)
    return {"success": True, "data": records}


@router.get("/lecture/{lecture_id}/status")
async def get_lecture_status(lecture_id: str, db: AsyncSession = Depends(get_db)):
    """Presentees and absentees of one lecture"""
    lecture_status = await get_attendance_status_by_lecture(db, lecture_id)
    return {"success": True, "data": lecture_status}


@router.get("/{attendance_id}")
async def get_attendance_record(attendance_id: str, db: AsyncSession = Depends(get_db)):
    record = await get_attendance_by_id(db, attendance_id)
    if record is None:
        logger.warning(f"Attendance record not found with id: {attendance_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attendance record not found"
        )
    return {"success": True, "data": record}


@router.put("/{attendance_id}")
async def update_attendance_record(
        attendance_id: str,
        updates: AttendanceUpdate,
        db: AsyncSession = Depends(get_db)
):
    """
    Update attendance record fields.

    - **attendance_id**: ID of the record to update
    - **updates**: Fields to change
    """
    logger.info(f"Updating attendance record: {attendance_id}")
    record = await update_attendance(db, attendance_id, updates)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attendance record not found"
        )
    return {"success": True, "data": AttendanceRecordResponse.model_validate(record)}


@router.delete("/{attendance_id}")
async def delete_attendance_record(attendance_id: str, db: AsyncSession = Depends(get_db)):
    logger.info(f"Deleting attendance record: {attendance_id}")
    record = await delete_attendance(db, attendance_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attendance record not found"
        )
    return {"success": True, "data": AttendanceRecordResponse.model_validate(record)}
