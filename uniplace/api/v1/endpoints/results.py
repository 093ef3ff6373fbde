"""
Result endpoints for the admin console.

Upload: a CSV of student e-mails plus drive details creates one drive and
its result rows in one go.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from uniplace.api.errors import to_http
from uniplace.core.auth import get_current_admin
from uniplace.database import get_db
from uniplace.exceptions import UniPlaceError
from uniplace.models import EmploymentType, ResultType
from uniplace.services import db_service
from uniplace.services.result_ingestor import ingest_results

router = APIRouter(prefix="/results", tags=["Results"], dependencies=[Depends(get_current_admin)])

MAX_UPLOAD_MB = 5
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024


# ============ Response Schemas ============

class ResultRowResponse(BaseModel):
    """One row of the results table."""
    id: str
    student_name: str
    roll_no: str
    job: str
    oa_status: str
    interview_status: str
    final_status: str
    drive_id: Optional[int] = None
    status: Optional[str] = None


class UploadResponse(BaseModel):
    """Outcome of a CSV upload."""
    success: bool
    message: str
    drive_id: int
    inserted: int
    not_found: int
    results: list[ResultRowResponse]


class ResultsListResponse(BaseModel):
    total: int
    oa_results: list[ResultRowResponse]
    final_offers: list[ResultRowResponse]


# ============ ENDPOINTS ============

@router.get("", response_model=ResultsListResponse)
def list_results(db: Session = Depends(get_db)):
    """
    List stored results, newest first.

    Rows are split the way the console shows them: OA-level results
    (not selected) and final offers (selected).
    """
    try:
        rows = db_service.list_result_views(db)
    except UniPlaceError as e:
        raise to_http(e)
    return ResultsListResponse(
        total=len(rows),
        oa_results=[r for r in rows if r["final_status"] != "Selected"],
        final_offers=[r for r in rows if r["final_status"] == "Selected"],
    )


@router.post("/upload", response_model=UploadResponse, status_code=201)
async def upload_results(
    file: UploadFile = File(..., description="CSV with an 'email' or 'primary_email' column"),
    company_name: str = Form(...),
    job_title: str = Form(...),
    batch: str = Form("2026"),
    result_type: ResultType = Form(ResultType.OA),
    employment_type: EmploymentType = Form(EmploymentType.INTERN),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """
    Create a drive and its results from an uploaded CSV.

    **Form fields:**
    - `company_name`, `job_title`, `batch`: drive details
    - `result_type`: "OA" (rows stored as Shortlisted) or
      "Final Offer" (rows stored as Selected)
    - `employment_type`: Intern, FTE or PPO
    - `file`: CSV; rows are matched to students by primary or
      secondary e-mail

    **Returns:**
    - 201: drive created with counts of inserted and unmatched rows
    - 400: empty/malformed CSV, no e-mail column, or no matching students
    - 500: database error (nothing is saved)
    """
    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_UPLOAD_MB}MB"
        )

    try:
        report = ingest_results(
            db,
            content,
            company_name=company_name,
            job_title=job_title,
            batch=batch,
            result_type=result_type.value,
            employment_type=employment_type.value,
            description=description,
        )
    except UniPlaceError as e:
        raise to_http(e)

    return UploadResponse(
        success=True,
        message=report.message,
        drive_id=report.drive_id,
        inserted=report.inserted,
        not_found=report.not_found,
        results=[ResultRowResponse(**vars(view)) for view in report.results],
    )
