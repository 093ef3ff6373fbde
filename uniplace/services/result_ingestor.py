"""
Result ingestion: CSV upload -> Drive + Result rows.

Pipeline:
1. Validate the drive form
2. Parse every CSV row (any parse error aborts)
3. Extract and deduplicate candidate e-mails
4. Match candidates to students
5. Build one Result per matched, not-yet-seen row
6. Insert the Drive and all Results in a single transaction

Nothing is written unless every step before the insert succeeds, and a
failed insert rolls back the drive as well.
"""

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from uniplace.exceptions import ValidationError, StoreError
from uniplace.models import Drive, EmploymentType, Result, ResultStatus, ResultType
from uniplace.services.csv_parser import parse_csv
from uniplace.services.email_extractor import collect_emails, extract_email
from uniplace.services.student_matcher import match_students

logger = logging.getLogger(__name__)


@dataclass
class ResultView:
    """One row of the admin results table."""
    id: str
    student_name: str
    roll_no: str
    job: str
    oa_status: str
    interview_status: str
    final_status: str


@dataclass
class IngestionReport:
    """Outcome of a successful upload."""
    drive_id: int
    inserted: int
    not_found: int
    results: List[ResultView] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.not_found > 0:
            return (
                f"Created drive and {self.inserted} result records. "
                f"{self.not_found} email(s) were not found in students_data."
            )
        return f"Created drive and {self.inserted} result records."


def status_for_result_type(result_type: str) -> str:
    """Stored status for rows of a drive with the given result type."""
    if result_type == ResultType.FINAL_OFFER.value:
        return ResultStatus.SELECTED.value
    return ResultStatus.SHORTLISTED.value


def result_labels(status: str) -> Dict[str, str]:
    """OA / interview / final labels shown for a stored status."""
    if status == ResultStatus.SELECTED.value:
        return {"oa_status": "Cleared", "interview_status": "Cleared", "final_status": "Selected"}
    return {"oa_status": "Cleared", "interview_status": "Pending", "final_status": "Pending"}


def _validate_form(company_name, job_title, batch, result_type, employment_type) -> None:
    missing = [
        name for name, value in (
            ("company_name", company_name),
            ("job_title", job_title),
            ("batch", batch),
        )
        if not (value or "").strip()
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    if result_type not in {t.value for t in ResultType}:
        raise ValidationError(f"Unknown result type: {result_type!r}")
    if employment_type not in {t.value for t in EmploymentType}:
        raise ValidationError(f"Unknown employment type: {employment_type!r}")


def ingest_results(
    db: Session,
    csv_source: Union[bytes, BinaryIO],
    company_name: str,
    job_title: str,
    batch: str,
    result_type: str = ResultType.OA.value,
    employment_type: str = EmploymentType.INTERN.value,
    description: Optional[str] = None,
) -> IngestionReport:
    """
    Create a drive from an uploaded result sheet.

    Args:
        db: Database session
        csv_source: CSV bytes or binary file object
        company_name, job_title, batch: Drive details (required)
        result_type: "OA" or "Final Offer"; decides the stored status
        employment_type: "Intern", "FTE" or "PPO"
        description: Free-text notes about the drive

    Returns:
        IngestionReport with inserted / not-found counts

    Raises:
        ParseError: malformed CSV
        ValidationError: bad form, empty CSV, no e-mail column,
            or no matching students
        StoreError: database failure (nothing is persisted)
    """
    _validate_form(company_name, job_title, batch, result_type, employment_type)

    # Materialize so a parse error anywhere aborts before any write
    rows = list(parse_csv(csv_source))
    if not rows:
        raise ValidationError("Uploaded CSV does not contain any rows.")

    candidates = collect_emails(rows)
    if not candidates:
        raise ValidationError(
            "No valid email column found in CSV. "
            "Expected a column like 'email' or 'primary_email'."
        )

    email_to_student = match_students(db, candidates)

    status = status_for_result_type(result_type)
    job_label = f"{job_title} - {company_name}"

    matched = []
    seen_emails = set()
    seen_students = set()
    not_found = set()
    for row in rows:
        email = extract_email(row)
        if not email or email in seen_emails:
            continue
        seen_emails.add(email)

        student = email_to_student.get(email)
        if student is None:
            not_found.add(email)
            continue
        # A student listed under both primary and secondary e-mail gets one row
        if student.enrollment_number in seen_students:
            continue
        seen_students.add(student.enrollment_number)
        matched.append(student)

    if not matched:
        raise ValidationError(
            "No matching students found in students_data for the uploaded emails."
        )

    drive = Drive(
        company_name=company_name.strip(),
        job_title=job_title.strip(),
        batch=batch.strip(),
        result_type=result_type,
        employment_type=employment_type,
        description=description,
    )

    try:
        db.add(drive)
        db.flush()  # assigns drive.id

        db.add_all([
            Result(drive_id=drive.id, student_id=student.enrollment_number, status=status)
            for student in matched
        ])
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Result ingestion for %s failed, rolled back: %s", job_label, e)
        raise StoreError(str(e))

    logger.info(
        "Created drive %s (%s) with %d results, %d unmatched e-mails",
        drive.id, job_label, len(matched), len(not_found),
    )

    views = [
        ResultView(
            id=f"drive-{drive.id}-{student.enrollment_number}",
            student_name=str(student.name or student.enrollment_number),
            roll_no=str(student.enrollment_number),
            job=job_label,
            **result_labels(status),
        )
        for student in matched
    ]

    return IngestionReport(
        drive_id=drive.id,
        inserted=len(matched),
        not_found=len(not_found),
        results=views,
    )
