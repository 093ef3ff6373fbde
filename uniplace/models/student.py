"""
Student model - the institute's student roster.

Rows are keyed by enrollment number, which is also what result rows
reference. Both e-mail columns are indexed because CSV uploads are
reconciled against them.
"""

from sqlalchemy import Column, String, Float, Integer, Index
from sqlalchemy.orm import relationship
from uniplace.database import Base


class Student(Base):
    """A student who can appear in drive results."""
    __tablename__ = "students_data"

    enrollment_number = Column(String(32), primary_key=True)

    name = Column(String(255))
    branch = Column(String(64), index=True)
    course = Column(String(64), default="B.Tech")

    # Reconciliation keys for CSV uploads
    primary_email = Column(String(255), index=True)
    secondary_email = Column(String(255), index=True)

    cgpa = Column(Float)
    passing_year = Column(Integer, index=True)

    results = relationship("Result", back_populates="student")

    __table_args__ = (
        Index("ix_students_branch_year", "branch", "passing_year"),
    )

    def __repr__(self):
        return f"<Student(enrollment_number={self.enrollment_number}, name={self.name})>"
