"""
Email center endpoints.

Admins pick a recipient group (optionally narrowed by branch or drive),
preview the audience and send one templated message through the mail relay.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from uniplace.api.errors import to_http
from uniplace.core.auth import get_current_admin
from uniplace.database import get_db
from uniplace.exceptions import UniPlaceError
from uniplace.services import db_service
from uniplace.services.audience import RECIPIENT_GROUPS, compute_audience
from uniplace.services.mail_client import send_bulk_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/emails", tags=["Email Center"], dependencies=[Depends(get_current_admin)])


# ============ Schemas ============

class AudienceResponse(BaseModel):
    group: str
    count: int
    recipients: list[str]


class DriveOption(BaseModel):
    id: int
    title: str


class EmailFiltersResponse(BaseModel):
    groups: list[str]
    branches: list[str]
    drives: list[DriveOption]


class SendEmailRequest(BaseModel):
    group: str = "all"
    branch: Optional[str] = None
    drive_id: Optional[int] = None
    subject: str
    body: str


class SendEmailResponse(BaseModel):
    success: bool
    message: str
    recipients: int


def _audience(db: Session, group: str, branch: Optional[str], drive_id: Optional[int]) -> list[str]:
    try:
        return compute_audience(db, group, branch=branch, drive_id=drive_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UniPlaceError as e:
        raise to_http(e)


# ============ ENDPOINTS ============

@router.get("/filters", response_model=EmailFiltersResponse)
def get_email_filters(db: Session = Depends(get_db)):
    """Recipient groups, branches and drives for the audience pickers."""
    try:
        branches = db_service.get_unique_branches(db)
        drives = db_service.get_drive_options(db)
    except UniPlaceError as e:
        raise to_http(e)

    return EmailFiltersResponse(groups=RECIPIENT_GROUPS, branches=branches, drives=drives)


@router.get("/audience", response_model=AudienceResponse)
def preview_audience(
    group: str = Query("all", description=f"One of: {', '.join(RECIPIENT_GROUPS)}"),
    branch: Optional[str] = Query(None, description="Required for group=branch"),
    drive_id: Optional[int] = Query(None, description="Required for group=job"),
    db: Session = Depends(get_db),
):
    """
    Resolve a recipient group without sending anything.

    **Example:**
    ```
    GET /api/v1/emails/audience?group=branch&branch=CSE
    ```
    """
    recipients = _audience(db, group, branch, drive_id)
    return AudienceResponse(group=group, count=len(recipients), recipients=recipients)


@router.post("/send", response_model=SendEmailResponse)
def send_to_audience(payload: SendEmailRequest, db: Session = Depends(get_db)):
    """
    Send a message to every address in the chosen group.

    **Returns:**
    - 200: relay accepted the message
    - 400: empty subject/body, unknown group or no recipients
    - 502: mail relay unreachable or failed
    """
    if not payload.subject.strip() or not payload.body.strip():
        raise HTTPException(status_code=400, detail="Please provide subject and message.")

    recipients = _audience(db, payload.group, payload.branch, payload.drive_id)
    if not recipients:
        raise HTTPException(status_code=400, detail="No recipients found for the selected filters.")

    try:
        send_bulk_email(recipients, payload.subject, payload.body)
    except UniPlaceError as e:
        raise to_http(e)

    logger.info("Sent %r to %d recipients (group=%s)", payload.subject, len(recipients), payload.group)
    return SendEmailResponse(
        success=True,
        message=f"Sent email to {len(recipients)} recipients.",
        recipients=len(recipients),
    )
