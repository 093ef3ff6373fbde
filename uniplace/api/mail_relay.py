"""
Mail relay route.

Mounted at the application root as POST /send-email so the admin console
(or any internal caller) can hand off a message for SMTP delivery.
"""

import logging
import smtplib

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from uniplace.services import mail_relay

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Mail Relay"])


class SendEmailPayload(BaseModel):
    to: list[str] = Field(..., min_length=1)
    subject: str
    body: str


@router.post("/send-email")
def send_email(payload: SendEmailPayload):
    """
    Send one templated message addressed to every recipient.

    **Returns:**
    - 200: `{"success": true}`
    - 422: missing fields or empty recipient list
    - 500: `{"success": false, "error": "..."}` on SMTP failure
    """
    try:
        mail_relay.send_email(payload.to, payload.subject, payload.body)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("SMTP delivery failed: %s", e)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return {"success": True}
