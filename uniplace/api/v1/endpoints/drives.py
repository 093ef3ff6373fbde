"""
Drive endpoints for the admin console.

Drives are created by result uploads (see results.py); here they are only
listed and inspected.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from uniplace.api.errors import to_http
from uniplace.core.auth import get_current_admin
from uniplace.database import get_db
from uniplace.exceptions import UniPlaceError
from uniplace.services import db_service


router = APIRouter(prefix="/drives", tags=["Drives"], dependencies=[Depends(get_current_admin)])


# ============ Response Schemas ============

class DriveResponse(BaseModel):
    id: int
    company_name: str
    job_title: str
    employment_type: str
    result_type: str
    batch: Optional[str]
    description: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class DrivesListResponse(BaseModel):
    total: int
    drives: list[DriveResponse]


# ============ ENDPOINTS ============

@router.get("", response_model=DrivesListResponse)
def list_drives(db: Session = Depends(get_db)):
    """List every drive, newest first."""
    try:
        drives = db_service.list_drives(db)
    except UniPlaceError as e:
        raise to_http(e)
    return DrivesListResponse(total=len(drives), drives=drives)


@router.get("/{drive_id}", response_model=DriveResponse)
def get_drive(drive_id: int, db: Session = Depends(get_db)):
    """
    Get a single drive by ID.

    **Returns:**
    - 200: Drive details
    - 404: Drive not found
    """
    try:
        drive = db_service.get_drive(db, drive_id)
    except UniPlaceError as e:
        raise to_http(e)
    if not drive:
        raise HTTPException(
            status_code=404,
            detail=f"Drive with ID {drive_id} not found"
        )
    return drive
