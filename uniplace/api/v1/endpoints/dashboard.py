"""
Dashboard and student directory endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from uniplace.api.errors import to_http
from uniplace.core.auth import get_current_admin
from uniplace.database import get_db
from uniplace.exceptions import UniPlaceError
from uniplace.services import stats_service


router = APIRouter(tags=["Dashboard"], dependencies=[Depends(get_current_admin)])


# ============ Response Schemas ============

class BranchStat(BaseModel):
    branch: str
    total: int
    placed: int
    percentage: float


class CompanyHires(BaseModel):
    name: str
    value: int


class DashboardResponse(BaseModel):
    total_students: int
    total_companies: int
    active_job_postings: int
    students_placed: int
    students_unplaced: int
    intern_count: int
    fte_count: int
    branch_data: list[BranchStat]
    company_data: list[CompanyHires]


class StudentRow(BaseModel):
    id: str
    name: str
    roll_no: str
    branch: str
    course: str
    batch: int
    cgpa: float
    status: str
    company: str
    type: str


class StudentDirectoryResponse(BaseModel):
    total: int
    total_selections: int
    fte_offers: int
    internships: int
    students: list[StudentRow]


# ============ ENDPOINTS ============

@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(db: Session = Depends(get_db)):
    """
    Headline numbers for the admin dashboard.

    A student counts as placed once they have any "Selected" result;
    intern/FTE counts assign each placed student to one bucket only.
    """
    try:
        return stats_service.dashboard_summary(db)
    except UniPlaceError as e:
        raise to_http(e)


@router.get("/students", response_model=StudentDirectoryResponse)
def list_students(
    search: Optional[str] = Query(None, description="Name or enrollment number"),
    branch: Optional[str] = Query(None, description="Exact branch, e.g. 'CSE'"),
    batch: Optional[int] = Query(None, description="Passing year, e.g. 2026"),
    db: Session = Depends(get_db),
):
    """
    Student directory merged with placement status.

    **Example:**
    ```
    GET /api/v1/students?branch=CSE&batch=2026
    ```
    """
    try:
        return stats_service.student_directory(db, search=search, branch=branch, batch=batch)
    except UniPlaceError as e:
        raise to_http(e)
