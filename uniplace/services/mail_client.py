"""
HTTP client for the mail relay endpoint.

The relay may run inside this service or as a separate deployment;
MAIL_RELAY_URL points at its /send-email route.
"""

import logging
import os
from typing import List

import requests
from dotenv import load_dotenv

from uniplace.exceptions import MailRelayError

load_dotenv()

logger = logging.getLogger(__name__)

MAIL_RELAY_URL = os.getenv("MAIL_RELAY_URL", "http://localhost:8000/send-email")
MAIL_RELAY_TIMEOUT = float(os.getenv("MAIL_RELAY_TIMEOUT", "60"))


def send_bulk_email(to: List[str], subject: str, body: str) -> dict:
    """
    POST a message to the mail relay.

    Args:
        to: Recipient addresses
        subject: Subject line
        body: Plain-text body (the relay renders the HTML)

    Returns:
        The relay's JSON response, e.g. {"success": True}

    Raises:
        MailRelayError: relay unreachable, non-2xx response, or a reply
            that does not confirm success
    """
    try:
        response = requests.post(
            MAIL_RELAY_URL,
            json={"to": to, "subject": subject, "body": body},
            timeout=MAIL_RELAY_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error("Mail relay unreachable at %s: %s", MAIL_RELAY_URL, e)
        raise MailRelayError(f"Mail relay unreachable: {e}")

    if not response.ok:
        logger.error("Mail relay returned HTTP %s: %s", response.status_code, response.text[:200])
        raise MailRelayError(f"Mail relay returned HTTP {response.status_code}")

    try:
        payload = response.json()
    except ValueError as e:
        logger.error("Mail relay sent a non-JSON reply: %s", response.text[:200])
        raise MailRelayError(f"Mail relay sent an unreadable reply: {e}")

    if not isinstance(payload, dict) or payload.get("success") is not True:
        logger.error("Mail relay did not confirm delivery: %s", response.text[:200])
        raise MailRelayError("Mail relay did not confirm delivery")

    return payload
