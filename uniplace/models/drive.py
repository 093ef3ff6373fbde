"""
Drive model - one recruitment event per uploaded result sheet.

A drive is created together with its result rows when an admin uploads
a CSV, and is never mutated afterwards.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from uniplace.database import Base
import enum


class EmploymentType(str, enum.Enum):
    """Kind of position offered in a drive."""
    INTERN = "Intern"
    FTE = "FTE"
    PPO = "PPO"


class ResultType(str, enum.Enum):
    """Stage of the drive that an uploaded sheet reports."""
    OA = "OA"
    FINAL_OFFER = "Final Offer"


class Drive(Base):
    """A recruitment drive for one company and job title."""
    __tablename__ = "drives"

    id = Column(Integer, primary_key=True)

    company_name = Column(String(255), nullable=False, index=True)
    job_title = Column(String(255), nullable=False)

    employment_type = Column(String(20), default=EmploymentType.FTE.value)  # Intern, FTE, PPO
    result_type = Column(String(20), default=ResultType.OA.value)  # OA, Final Offer
    batch = Column(String(20), index=True)  # e.g. "2026"

    description = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    results = relationship("Result", back_populates="drive")

    __table_args__ = (
        Index("ix_drives_company_batch", "company_name", "batch"),
    )

    @property
    def label(self) -> str:
        """Human readable "Company - Job" label used by filters."""
        return f"{self.company_name} - {self.job_title}"

    def __repr__(self):
        return f"<Drive(id={self.id}, company={self.company_name}, job={self.job_title})>"
