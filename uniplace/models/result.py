"""
Result model - a student's outcome in one drive.

No unique constraint on (drive_id, student_id):
uploading the same sheet twice stores the rows twice.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from uniplace.database import Base
import enum


class ResultStatus(str, enum.Enum):
    """Stored result status tokens (case-sensitive)."""
    SHORTLISTED = "Shortlisted"
    SELECTED = "Selected"


class Result(Base):
    __tablename__ = "results"

    id = Column(Integer, primary_key=True)
    drive_id = Column(Integer, ForeignKey("drives.id"), nullable=False, index=True)
    student_id = Column(String(32), ForeignKey("students_data.enrollment_number"), nullable=False, index=True)
    status = Column(String(20), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    drive = relationship("Drive", back_populates="results")
    student = relationship("Student", back_populates="results")

    __table_args__ = (
        Index("ix_results_student_status", "student_id", "status"),
    )

    def __repr__(self):
        return f"<Result(drive_id={self.drive_id}, student_id={self.student_id}, status={self.status})>"
