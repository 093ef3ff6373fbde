"""
Spreadsheet exports for the admin console.
"""

import io

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from uniplace.api.errors import to_http
from uniplace.core.auth import get_current_admin
from uniplace.database import get_db
from uniplace.exceptions import UniPlaceError
from uniplace.services.report_service import EXPORT_FORMATS, REPORTS, build_report, render_report


router = APIRouter(prefix="/reports", tags=["Reports"], dependencies=[Depends(get_current_admin)])


class ReportInfo(BaseModel):
    id: str
    file_name: str
    description: str


@router.get("", response_model=list[ReportInfo])
def list_reports():
    """Available report ids."""
    return [
        ReportInfo(id=report_id, file_name=stem, description=description)
        for report_id, (stem, description) in REPORTS.items()
    ]


@router.get("/{report_id}")
def export_report(
    report_id: str,
    format: str = Query("xlsx", description="xlsx or csv"),
    db: Session = Depends(get_db),
):
    """
    Download a report as a spreadsheet.

    **Returns:**
    - 200: attachment named `{report}.{format}`
    - 400: unknown report id or format
    - 404: the report has no rows
    """
    if report_id not in REPORTS:
        raise HTTPException(status_code=400, detail=f"Unknown report: {report_id}")
    if format not in EXPORT_FORMATS:
        raise HTTPException(status_code=400, detail=f"Unsupported format: {format}")

    try:
        rows, file_stem = build_report(db, report_id)
    except UniPlaceError as e:
        raise to_http(e)

    content = render_report(rows, format)
    return StreamingResponse(
        io.BytesIO(content),
        media_type=EXPORT_FORMATS[format],
        headers={"Content-Disposition": f'attachment; filename="{file_stem}.{format}"'},
    )
