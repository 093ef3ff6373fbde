"""
Placement statistics for the admin dashboard and student directory.

The aggregation functions are pure and work on plain dict rows:
- students: {"enrollment_number", "branch", ...}
- results:  {"student_id", "status", "company_name", "employment_type"}

The load_* helpers fetch those rows from the database.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from uniplace.exceptions import StoreError
from uniplace.models import Company, Drive, EmploymentType, Result, ResultStatus, Student

logger = logging.getLogger(__name__)

TOP_COMPANIES = 5
OTHERS_LABEL = "Others"
UNKNOWN_LABEL = "Unknown"


def is_selected(status: Optional[str]) -> bool:
    """Status check tolerant of case and surrounding whitespace."""
    return (status or "").strip().lower() == "selected"


def _branch_of(student: Dict[str, Any]) -> str:
    return (student.get("branch") or "").strip() or UNKNOWN_LABEL


def selected_student_ids(results: List[Dict[str, Any]]) -> set:
    """Distinct students with at least one selected result."""
    return {r["student_id"] for r in results if is_selected(r.get("status"))}


# ============ AGGREGATIONS ============

def branch_breakdown(students: List[Dict[str, Any]], results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Per-branch totals and selected counts.

    Each student is counted once in its branch total, and once in
    `placed` if any of its results is selected.

    Returns:
        [{"branch", "total", "placed", "percentage"}] in first-seen branch order
    """
    placed_ids = selected_student_ids(results)
    stats: "OrderedDict[str, Dict[str, int]]" = OrderedDict()

    for student in students:
        branch = _branch_of(student)
        entry = stats.setdefault(branch, {"total": 0, "placed": 0})
        entry["total"] += 1
        if student["enrollment_number"] in placed_ids:
            entry["placed"] += 1

    return [
        {
            "branch": branch,
            "total": entry["total"],
            "placed": entry["placed"],
            "percentage": round(entry["placed"] / entry["total"] * 100, 2) if entry["total"] else 0.0,
        }
        for branch, entry in stats.items()
    ]


def company_hires(results: List[Dict[str, Any]], top: int = TOP_COMPANIES) -> List[Dict[str, Any]]:
    """
    Selected results per company, largest first.

    The first `top` companies are kept; the rest are summed into "Others".
    Values always add up to the number of selected results.
    """
    hires: "OrderedDict[str, int]" = OrderedDict()
    for r in results:
        if not is_selected(r.get("status")):
            continue
        company = r.get("company_name") or UNKNOWN_LABEL
        hires[company] = hires.get(company, 0) + 1

    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(
        ({"name": name, "value": count} for name, count in hires.items()),
        key=lambda item: item["value"],
        reverse=True,
    )

    top_companies = ranked[:top]
    remaining = ranked[top:]
    if remaining:
        top_companies.append({"name": OTHERS_LABEL, "value": sum(item["value"] for item in remaining)})
    return top_companies


def employment_split(results: List[Dict[str, Any]]) -> Dict[str, int]:
    """
    Count selected students as Intern or FTE.

    A student is classified by its first selected result and never
    counted twice. Missing or unknown employment types count as FTE.
    """
    assigned: Dict[str, str] = {}
    for r in results:
        if not is_selected(r.get("status")):
            continue
        student_id = r["student_id"]
        if student_id in assigned:
            continue
        employment = (r.get("employment_type") or "").strip()
        assigned[student_id] = "intern" if employment == EmploymentType.INTERN.value else "fte"

    values = list(assigned.values())
    return {"intern": values.count("intern"), "fte": values.count("fte")}


def placement_status_map(results: List[Dict[str, Any]]) -> Dict[str, Dict[str, str]]:
    """
    Authoritative status per student.

    A "Selected" row is never overwritten (first one wins); any other
    status is replaced by later rows.
    """
    status_map: Dict[str, Dict[str, str]] = {}
    for r in results:
        student_id = r["student_id"]
        if is_selected(status_map.get(student_id, {}).get("status")):
            continue
        status = r.get("status")
        status_map[student_id] = {
            "status": ResultStatus.SELECTED.value if is_selected(status) else status,
            "company": r.get("company_name") or "-",
            "type": r.get("employment_type") or EmploymentType.FTE.value,
        }
    return status_map


# ============ LOADERS ============

def load_students(db: Session) -> List[Dict[str, Any]]:
    students = db.query(Student).order_by(Student.enrollment_number).all()
    return [
        {
            "enrollment_number": s.enrollment_number,
            "name": s.name,
            "branch": s.branch,
            "course": s.course,
            "passing_year": s.passing_year,
            "cgpa": s.cgpa,
        }
        for s in students
    ]


def load_results(db: Session) -> List[Dict[str, Any]]:
    """All results joined with their drive, in insertion order."""
    results = (
        db.query(Result)
        .options(joinedload(Result.drive))
        .order_by(Result.id)
        .all()
    )
    return [
        {
            "student_id": r.student_id,
            "status": r.status,
            "company_name": r.drive.company_name if r.drive else None,
            "employment_type": r.drive.employment_type if r.drive else None,
        }
        for r in results
    ]


# ============ VIEWS ============

def dashboard_summary(db: Session) -> Dict[str, Any]:
    """Headline numbers and chart data for the admin dashboard."""
    try:
        students = load_students(db)
        results = load_results(db)
        total_companies = db.query(func.count(Company.id)).scalar() or 0
        total_drives = db.query(func.count(Drive.id)).scalar() or 0
    except SQLAlchemyError as e:
        logger.error("Dashboard query failed: %s", e)
        raise StoreError(str(e))

    total_students = len(students)
    placed = len(selected_student_ids(results))
    split = employment_split(results)

    return {
        "total_students": total_students,
        "total_companies": total_companies,
        "active_job_postings": total_drives,
        "students_placed": placed,
        "students_unplaced": max(0, total_students - placed),
        "intern_count": split["intern"],
        "fte_count": split["fte"],
        "branch_data": branch_breakdown(students, results),
        "company_data": company_hires(results),
    }


def student_directory(
    db: Session,
    search: Optional[str] = None,
    branch: Optional[str] = None,
    batch: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Students merged with their placement status, plus counters.

    Filters: `search` matches name (case-insensitive) or enrollment number,
    `branch` and `batch` (passing year) must match exactly.
    """
    try:
        students = load_students(db)
        results = load_results(db)
    except SQLAlchemyError as e:
        logger.error("Student directory query failed: %s", e)
        raise StoreError(str(e))

    status_map = placement_status_map(results)
    rows = []
    for s in students:
        status = status_map.get(s["enrollment_number"], {"status": "Unplaced", "company": "-", "type": "-"})
        rows.append({
            "id": s["enrollment_number"],
            "name": s["name"] or "",
            "roll_no": s["enrollment_number"],
            "branch": s["branch"] or "-",
            "course": s["course"] or "B.Tech",
            "batch": s["passing_year"] or 2026,
            "cgpa": s["cgpa"] if s["cgpa"] is not None else 0.0,
            "status": status["status"],
            "company": status["company"],
            "type": status["type"],
        })

    if search:
        needle = search.lower()
        rows = [r for r in rows if needle in r["name"].lower() or search in r["roll_no"]]
    if branch:
        rows = [r for r in rows if r["branch"] == branch]
    if batch is not None:
        rows = [r for r in rows if r["batch"] == batch]

    selected = [r for r in rows if is_selected(r["status"])]
    return {
        "total": len(rows),
        "total_selections": len(selected),
        "fte_offers": len([r for r in selected if r["type"] == EmploymentType.FTE.value]),
        "internships": len([r for r in selected if r["type"] == EmploymentType.INTERN.value]),
        "students": rows,
    }
