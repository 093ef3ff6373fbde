"""
Spreadsheet reports for the admin console.

Each report is a list of flat dicts with human readable column names,
serialized with pandas to .xlsx (openpyxl) or .csv.
"""

import io
import logging
from typing import Any, Dict, List, Tuple

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from uniplace.exceptions import ReportEmptyError, StoreError
from uniplace.models import Drive, EmploymentType, Result, ResultStatus, Student

logger = logging.getLogger(__name__)

REPORTS = {
    "students": ("Student_Database", "All students with details"),
    "applicants": ("Job_Applicants", "Applicants grouped by job"),
    "placed": ("Placed_Students_List", "All selected & shortlisted students"),
    "company_results": ("Company_Results", "Hiring results per company"),
    "branch_stats": ("Branch_Statistics", "Placement stats by branch"),
    "intern_ppo": ("Intern_PPO_Report", "Internship & PPO data"),
}

EXPORT_FORMATS = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
}

# Statuses that count as placed/shortlisted in exports
PLACED_STATUSES = [ResultStatus.SELECTED.value, ResultStatus.SHORTLISTED.value]


def _joined_results(db: Session, statuses: List[str] = None) -> List[Result]:
    query = db.query(Result).options(joinedload(Result.drive), joinedload(Result.student))
    if statuses:
        query = query.filter(Result.status.in_(statuses))
    return query.order_by(Result.id).all()


def _students_rows(db: Session) -> List[Dict[str, Any]]:
    return [
        {
            "enrollment_number": s.enrollment_number,
            "name": s.name,
            "branch": s.branch,
            "course": s.course,
            "primary_email": s.primary_email,
            "secondary_email": s.secondary_email,
            "cgpa": s.cgpa,
            "passing_year": s.passing_year,
        }
        for s in db.query(Student).order_by(Student.enrollment_number).all()
    ]


def _placed_rows(db: Session) -> List[Dict[str, Any]]:
    rows = []
    for r in _joined_results(db, PLACED_STATUSES):
        student, drive = r.student, r.drive
        rows.append({
            "Student Name": student.name if student else None,
            "Enrollment No": student.enrollment_number if student else r.student_id,
            "Branch": student.branch if student else None,
            "Company": drive.company_name if drive else None,
            "Job Role": drive.job_title if drive else None,
            "Type": drive.employment_type if drive else None,
            "Status": r.status,
        })
    return rows


def _applicant_rows(db: Session) -> List[Dict[str, Any]]:
    rows = []
    for r in _joined_results(db):
        student, drive = r.student, r.drive
        rows.append({
            "Company": drive.company_name if drive else "",
            "Job Title": drive.job_title if drive else None,
            "Student Name": student.name if student else None,
            "Branch": student.branch if student else None,
            "CGPA": student.cgpa if student else None,
            "Status": r.status,
        })
    rows.sort(key=lambda row: (row["Company"] or "").lower())
    return rows


def _branch_stat_rows(db: Session) -> List[Dict[str, Any]]:
    """Branch totals where both Selected and Shortlisted count as placed."""
    branch_map: Dict[str, Dict[str, int]] = {}
    for (branch,) in db.query(Student.branch).all():
        entry = branch_map.setdefault(branch or "Unknown", {"total": 0, "placed": 0})
        entry["total"] += 1

    for r in _joined_results(db, PLACED_STATUSES):
        branch = (r.student.branch if r.student else None) or "Unknown"
        if branch in branch_map:
            branch_map[branch]["placed"] += 1

    return [
        {
            "Branch": branch,
            "Total Students": entry["total"],
            "Placed/Shortlisted": entry["placed"],
            "Percentage": f"{entry['placed'] / entry['total'] * 100:.2f}%",
        }
        for branch, entry in branch_map.items()
    ]


def _intern_ppo_rows(db: Session) -> List[Dict[str, Any]]:
    kinds = [EmploymentType.INTERN.value, EmploymentType.PPO.value]
    results = (
        db.query(Result)
        .join(Result.drive)
        .options(joinedload(Result.drive), joinedload(Result.student))
        .filter(Drive.employment_type.in_(kinds))
        .order_by(Result.id)
        .all()
    )
    return [
        {
            "Student": r.student.name if r.student else None,
            "Branch": r.student.branch if r.student else None,
            "Company": r.drive.company_name,
            "Role": r.drive.job_title,
            "Type": r.drive.employment_type,
            "Status": r.status,
        }
        for r in results
    ]


_BUILDERS = {
    "students": _students_rows,
    "applicants": _applicant_rows,
    "company_results": _applicant_rows,
    "placed": _placed_rows,
    "branch_stats": _branch_stat_rows,
    "intern_ppo": _intern_ppo_rows,
}


def build_report(db: Session, report_id: str) -> Tuple[List[Dict[str, Any]], str]:
    """
    Collect the rows of a report.

    Returns:
        (rows, file_stem)

    Raises:
        KeyError: unknown report id
        ReportEmptyError: report has no rows
        StoreError: database failure
    """
    if report_id not in REPORTS:
        raise KeyError(report_id)

    try:
        rows = _BUILDERS[report_id](db)
    except SQLAlchemyError as e:
        logger.error("Report %s failed: %s", report_id, e)
        raise StoreError(str(e))

    if not rows:
        raise ReportEmptyError("There is no data available for this report.")

    file_stem = REPORTS[report_id][0]
    logger.info("Built report %s with %d rows", report_id, len(rows))
    return rows, file_stem


def render_report(rows: List[Dict[str, Any]], fmt: str) -> bytes:
    """
    Serialize report rows.

    Args:
        rows: Report rows (dicts sharing the same keys)
        fmt: "xlsx" (single sheet named "Report") or "csv"
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r}")

    df = pd.DataFrame(rows)
    if fmt == "csv":
        return df.to_csv(index=False).encode("utf-8")

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Report")
    return output.getvalue()
