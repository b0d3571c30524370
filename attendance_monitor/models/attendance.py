import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from attendance_monitor.database import Base
from attendance_monitor.models.student import Student
from attendance_monitor.models.timetable import Timetable


class AttendanceRecord(Base):
    __tablename__ = "attendance"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    lecture_id = Column(String(36), ForeignKey("timetable.id"), nullable=False, index=True)
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False, index=True)
    is_present = Column(Boolean, nullable=False, default=False)
    date = Column(DateTime, nullable=True)
    faculty_id = Column(String(36), ForeignKey("faculty.id"), nullable=True)
    remark = Column(String(1024), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    lecture = relationship(Timetable)
    student = relationship(Student)
