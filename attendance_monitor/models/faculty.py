import uuid

from sqlalchemy import Column, String

from attendance_monitor.database import Base


class Faculty(Base):
    __tablename__ = "faculty"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
