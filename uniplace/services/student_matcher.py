"""
Reconcile uploaded e-mail addresses against the student roster.

Two lookups are made, one on primary_email and one on secondary_email.
Both sides are lower-cased before comparison.
"""

import logging
from typing import Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from uniplace.exceptions import StoreError
from uniplace.models.student import Student

logger = logging.getLogger(__name__)

# Max values per IN (...) clause
LOOKUP_CHUNK_SIZE = 500


def _chunks(items: List[str], size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _lookup(db: Session, column, emails: List[str]) -> List[Student]:
    """Fetch students whose lower-cased column value is in emails."""
    students = []
    for chunk in _chunks(emails, LOOKUP_CHUNK_SIZE):
        students.extend(
            db.query(Student)
            .filter(func.lower(column).in_(chunk))
            .order_by(Student.enrollment_number)
            .all()
        )
    return students


def register_student(mapping: Dict[str, Student], student: Student) -> None:
    """
    Register both addresses of a student in the mapping.

    An address already present keeps its first student.
    """
    for address in (student.primary_email, student.secondary_email):
        key = (address or "").strip().lower()
        if key and key not in mapping:
            mapping[key] = student


def match_students(db: Session, emails: Iterable[str]) -> Dict[str, Student]:
    """
    Map candidate e-mails to students.

    Args:
        db: Database session
        emails: Candidate addresses (any case)

    Returns:
        dict of lower-cased address -> Student. Candidates missing from
        the dict had no match.

    Raises:
        StoreError: if either lookup fails
    """
    candidates = sorted({e.strip().lower() for e in emails if e and e.strip()})
    if not candidates:
        return {}

    try:
        primary_matches = _lookup(db, Student.primary_email, candidates)
        secondary_matches = _lookup(db, Student.secondary_email, candidates)
    except SQLAlchemyError as e:
        logger.error("Student lookup failed: %s", e)
        raise StoreError(str(e))

    mapping: Dict[str, Student] = {}
    for student in primary_matches:
        register_student(mapping, student)
    for student in secondary_matches:
        register_student(mapping, student)

    logger.info(
        "Matched %d of %d candidate e-mails (%d primary, %d secondary hits)",
        len([c for c in candidates if c in mapping]),
        len(candidates),
        len(primary_matches),
        len(secondary_matches),
    )
    return mapping
