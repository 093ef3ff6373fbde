"""
SQLAlchemy models for the UniPlace backend.

This package contains:
- Student: roster keyed by enrollment number
- Drive: one recruitment event per uploaded result sheet
- Result: a student's outcome in a drive
- Company: recruiter and POC directory
- Blog / BlogStatusAck: senior blogs and moderation notifications
- PortalSettings: single-row admin settings
"""

from uniplace.models.student import Student
from uniplace.models.drive import Drive, EmploymentType, ResultType
from uniplace.models.result import Result, ResultStatus
from uniplace.models.company import Company
from uniplace.models.blog import Blog, BlogStatus, BlogStatusAck
from uniplace.models.portal_settings import PortalSettings, SETTINGS_ROW_ID

__all__ = [
    "Student", "Drive", "EmploymentType", "ResultType",
    "Result", "ResultStatus", "Company",
    "Blog", "BlogStatus", "BlogStatusAck",
    "PortalSettings", "SETTINGS_ROW_ID",
]
