"""
Database service layer for the admin console.

This module provides CRUD operations for:
- Companies and their points of contact
- The single-row portal settings
- Drives and joined result listings
- Filter options (branches, drives) for the email center
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from uniplace.database import store_read
from uniplace.exceptions import StoreError
from uniplace.models import Company, Drive, PortalSettings, Result, SETTINGS_ROW_ID, Student
from uniplace.services.result_ingestor import result_labels

logger = logging.getLogger(__name__)

COMPANY_FIELDS = [
    "name", "industry", "location", "website", "description",
    "poc_name", "poc_email", "poc_phone",
]

SETTINGS_FIELDS = [
    "college_name", "admin_email", "placement_year",
    "notify_on_application", "notify_on_result", "auto_sync_sheets",
]


def _commit(db: Session, action: str) -> None:
    """Commit, rolling back and raising StoreError on failure."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("%s failed: %s", action, e)
        raise StoreError(str(e))


# ============ COMPANY OPERATIONS ============

@store_read("Listing companies")
def list_companies(db: Session, search: Optional[str] = None) -> List[Company]:
    """
    Get companies ordered by name.

    Args:
        db: Database session
        search: Optional case-insensitive match on company or POC name
    """
    query = db.query(Company)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Company.name.ilike(pattern), Company.poc_name.ilike(pattern)))
    return query.order_by(Company.name.asc()).all()


@store_read("Loading company")
def get_company(db: Session, company_id: int) -> Optional[Company]:
    return db.query(Company).filter(Company.id == company_id).first()


def create_company(db: Session, data: Dict[str, Any]) -> Company:
    """Create a company from the fields in COMPANY_FIELDS."""
    company = Company(**{k: data.get(k) for k in COMPANY_FIELDS})
    db.add(company)
    _commit(db, f"Creating company {company.name!r}")
    db.refresh(company)
    return company


def update_company(db: Session, company: Company, data: Dict[str, Any]) -> Company:
    """Overwrite the given fields of an existing company."""
    for key in COMPANY_FIELDS:
        if key in data:
            setattr(company, key, data[key])
    _commit(db, f"Updating company {company.id}")
    db.refresh(company)
    return company


def delete_company(db: Session, company: Company) -> None:
    db.delete(company)
    _commit(db, f"Deleting company {company.id}")


# ============ SETTINGS ============

@store_read("Loading settings")
def get_settings(db: Session) -> Optional[PortalSettings]:
    """Get the settings row (id 1), or None if it was never created."""
    return db.query(PortalSettings).filter(PortalSettings.id == SETTINGS_ROW_ID).first()


def update_settings(db: Session, data: Dict[str, Any]) -> Optional[PortalSettings]:
    """
    Update the settings row.

    Returns:
        The updated row, or None if the row does not exist
    """
    settings = get_settings(db)
    if settings is None:
        return None

    for key in SETTINGS_FIELDS:
        if key in data:
            setattr(settings, key, data[key])
    settings.updated_at = datetime.utcnow()

    _commit(db, "Saving settings")
    db.refresh(settings)
    return settings


# ============ DRIVES & RESULTS ============

@store_read("Listing drives")
def list_drives(db: Session) -> List[Drive]:
    """All drives, newest first."""
    return db.query(Drive).order_by(Drive.id.desc()).all()


@store_read("Loading drive")
def get_drive(db: Session, drive_id: int) -> Optional[Drive]:
    return db.query(Drive).filter(Drive.id == drive_id).first()


@store_read("Listing results")
def list_result_views(db: Session) -> List[Dict[str, Any]]:
    """
    Result rows joined with drive and student, newest first.

    Each row carries the OA / interview / final labels shown in the
    admin results table.
    """
    results = (
        db.query(Result)
        .options(joinedload(Result.drive), joinedload(Result.student))
        .order_by(Result.id.desc())
        .all()
    )

    views = []
    for r in results:
        drive, student = r.drive, r.student
        views.append({
            "id": str(r.id),
            "drive_id": r.drive_id,
            "student_name": str((student.name if student else None) or r.student_id),
            "roll_no": str(r.student_id),
            "job": f"{drive.job_title} - {drive.company_name}" if drive else "",
            "status": r.status,
            **result_labels(r.status),
        })
    return views


# ============ FILTER OPTIONS ============

@store_read("Listing branches")
def get_unique_branches(db: Session) -> List[str]:
    """Distinct non-empty student branches for filters."""
    results = db.query(Student.branch).distinct().order_by(Student.branch).all()
    return [r[0] for r in results if r[0]]


@store_read("Listing drive options")
def get_drive_options(db: Session) -> List[Dict[str, Any]]:
    """Drives as {"id", "title"} pairs for the email center."""
    return [{"id": d.id, "title": d.label} for d in db.query(Drive).order_by(Drive.id).all()]
