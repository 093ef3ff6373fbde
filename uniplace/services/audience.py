"""
Audience calculation for targeted e-mails.

Resolves a recipient group (optionally narrowed by branch or drive) into
the list of student primary e-mail addresses. Results are computed fresh
on every call.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from uniplace.exceptions import StoreError
from uniplace.models import Result, ResultStatus, Student

logger = logging.getLogger(__name__)

RECIPIENT_GROUPS = ["all", "branch", "job", "placed", "unplaced", "oa_qualified", "selected"]


def plausible_addresses(emails: Iterable[Optional[str]]) -> List[str]:
    """
    Keep addresses that look like e-mails (contain "@").

    Strips whitespace and drops duplicates, keeping first occurrence.
    Best effort only - not RFC validation.
    """
    seen = set()
    addresses = []
    for email in emails:
        if not email:
            continue
        email = email.strip()
        if "@" not in email or email in seen:
            continue
        seen.add(email)
        addresses.append(email)
    return addresses


def _student_ids_with_status(status: str, drive_id: Optional[int] = None):
    stmt = select(Result.student_id).where(Result.status == status)
    if drive_id is not None:
        stmt = stmt.where(Result.drive_id == drive_id)
    return stmt.distinct()


def _emails_for(db: Session, student_ids) -> List[Optional[str]]:
    rows = (
        db.query(Student.primary_email)
        .filter(Student.enrollment_number.in_(student_ids))
        .order_by(Student.enrollment_number)
        .all()
    )
    return [r[0] for r in rows]


def compute_audience(
    db: Session,
    group: str,
    branch: Optional[str] = None,
    drive_id: Optional[int] = None,
) -> List[str]:
    """
    Resolve a recipient group into e-mail addresses.

    Groups:
    - all: every student
    - branch: students of `branch`
    - job: students with any result in drive `drive_id`
    - placed: students with at least one "Selected" result
    - unplaced: students with no "Selected" result
    - oa_qualified: students shortlisted (in `drive_id` if given)
    - selected: students selected in `drive_id` (same as placed without one)

    Returns:
        Primary e-mails that contain "@", deduplicated

    Raises:
        ValueError: unknown group
        StoreError: database failure
    """
    if group not in RECIPIENT_GROUPS:
        raise ValueError(f"Unknown recipient group: {group!r}")

    try:
        emails = _resolve(db, group, branch, drive_id)
    except SQLAlchemyError as e:
        logger.error("Audience query for group %s failed: %s", group, e)
        raise StoreError(str(e))

    addresses = plausible_addresses(emails)
    logger.info("Audience %s (branch=%s, drive=%s): %d recipients", group, branch, drive_id, len(addresses))
    return addresses


def _resolve(db: Session, group: str, branch: Optional[str], drive_id: Optional[int]) -> List[Optional[str]]:
    if group == "all":
        rows = db.query(Student.primary_email).order_by(Student.enrollment_number).all()
        return [r[0] for r in rows]

    if group == "branch":
        if not branch:
            return []
        rows = (
            db.query(Student.primary_email)
            .filter(Student.branch == branch)
            .order_by(Student.enrollment_number)
            .all()
        )
        return [r[0] for r in rows]

    if group == "job":
        if drive_id is None:
            return []
        applicants = select(Result.student_id).where(Result.drive_id == drive_id).distinct()
        return _emails_for(db, applicants)

    if group == "placed":
        return _emails_for(db, _student_ids_with_status(ResultStatus.SELECTED.value))

    if group == "unplaced":
        placed = _student_ids_with_status(ResultStatus.SELECTED.value)
        rows = (
            db.query(Student.primary_email)
            .filter(Student.enrollment_number.not_in(placed))
            .order_by(Student.enrollment_number)
            .all()
        )
        return [r[0] for r in rows]

    if group == "oa_qualified":
        return _emails_for(db, _student_ids_with_status(ResultStatus.SHORTLISTED.value, drive_id))

    # selected
    return _emails_for(db, _student_ids_with_status(ResultStatus.SELECTED.value, drive_id))
