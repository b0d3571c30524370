import uuid

from sqlalchemy import Column, Integer, String, Time, ForeignKey
from sqlalchemy.orm import relationship

from attendance_monitor.database import Base
from attendance_monitor.models.department import Department
from attendance_monitor.models.faculty import Faculty
from attendance_monitor.models.subject import Subject


class Timetable(Base):
    """One scheduled lecture or lab session for which attendance is taken"""
    __tablename__ = "timetable"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    subject_id = Column(String(36), ForeignKey("subjects.id"), nullable=True)
    faculty_id = Column(String(36), ForeignKey("faculty.id"), nullable=True)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=True)
    division = Column(Integer, nullable=True)
    batch = Column(String(32), nullable=True)
    semester = Column(Integer, nullable=True)
    lecture_type = Column(String(16), nullable=False, default="lecture")
    time_from = Column(Time, nullable=True)
    time_to = Column(Time, nullable=True)

    subject = relationship(Subject)
    faculty = relationship(Faculty)
    department = relationship(Department)
