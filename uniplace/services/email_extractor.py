"""
E-mail extraction for uploaded result sheets.

This module provides functions to:
- Find the e-mail column of a parsed CSV row
- Normalize the address (trimmed, lower-cased)
- Collect the deduplicated candidate set for a whole upload
"""

from typing import Dict, Iterable, List, Optional

# Header aliases that hold a student's e-mail, in priority order.
# Matching is case-insensitive, so "Email" and "PRIMARY_EMAIL" are covered.
EMAIL_HEADER_ALIASES = ["email", "primary_email"]


def normalize_email(raw) -> Optional[str]:
    """
    Normalize a raw cell value into a canonical address.

    Args:
        raw: Cell value (any type, may be None)

    Returns:
        Trimmed lower-case address, or None when empty
    """
    if raw is None:
        return None
    email = str(raw).strip().lower()
    return email or None


def extract_email(row: Dict[str, str]) -> Optional[str]:
    """
    Extract the canonical e-mail address from a CSV row.

    Looks for a header matching one of EMAIL_HEADER_ALIASES
    (case-insensitive). The first alias with a non-empty value wins.

    Args:
        row: Header-keyed row from the CSV parser

    Returns:
        Lower-cased address, or None if the row has no usable e-mail
    """
    by_header = {}
    for header, value in row.items():
        key = str(header).strip().lower()
        # "email" and "Email" can both be present
        by_header.setdefault(key, []).append(value)

    for alias in EMAIL_HEADER_ALIASES:
        for value in by_header.get(alias, []):
            email = normalize_email(value)
            if email:
                return email

    return None


def collect_emails(rows: Iterable[Dict[str, str]]) -> List[str]:
    """
    Collect candidate e-mails from all rows.

    Deduplicates by first occurrence and keeps row order. Rows without
    a recognized e-mail are dropped.
    """
    seen = set()
    emails = []
    for row in rows:
        email = extract_email(row)
        if email and email not in seen:
            seen.add(email)
            emails.append(email)
    return emails
