"""
Mail relay: render the UniPlace announcement template and send it over SMTP.

The relay is stateless. Every request becomes one message addressed to
all recipients.
"""

import html
import logging
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
MAIL_FROM = os.getenv("MAIL_FROM", '"UniPlace Admin" <placements@uniplace.local>')

BANNER_IMAGE = os.getenv(
    "MAIL_BANNER_URL",
    "https://assets.visme.co/templates/banners/thumbnails/i_Congratulations-Email-Header_full.jpg",
)
PORTAL_URL = os.getenv("PORTAL_URL", "http://localhost:8080")

HTML_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; border: 1px solid #e0e0e0; border-radius: 8px; overflow: hidden;">
  <div style="background-color: #0F172A; padding: 20px; text-align: center;">
    <h1 style="color: #ffffff; margin: 0; font-size: 24px;">UniPlace</h1>
    <p style="color: #94A3B8; margin: 5px 0 0;">Placement &amp; Recruitment Drive</p>
  </div>

  <div style="padding: 30px; background-color: #ffffff;">
    <h2 style="color: #334155; margin-top: 0;">Update from Admin</h2>
    <p style="font-size: 16px; line-height: 1.6; color: #475569;">
      {body}
    </p>

    <div style="margin-top: 25px; border-radius: 8px; overflow: hidden;">
      <img src="{banner}" alt="Update Details" style="width: 100%; height: auto; display: block;">
    </div>

    <p style="font-size: 14px; color: #64748B; margin-top: 20px; font-style: italic;">
      Please log in to the student portal to view full details and take necessary action.
    </p>

    <div style="text-align: center; margin-top: 30px;">
      <a href="{portal_url}" style="background-color: #10B981; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; font-weight: bold; display: inline-block;">Open Student Portal</a>
    </div>
  </div>

  <div style="background-color: #F8FAFC; padding: 15px; text-align: center; font-size: 12px; color: #94A3B8; border-top: 1px solid #e0e0e0;">
    <p>&copy; 2026 UniPlace. All rights reserved.</p>
    <p>University Placement Cell | Admin Block</p>
  </div>
</div>
"""


def render_email_html(body: str) -> str:
    """
    Embed a plain-text body in the announcement template.

    The body is HTML-escaped and newlines become <br>.
    """
    safe_body = html.escape(body or "").replace("\r\n", "\n").replace("\n", "<br>")
    return HTML_TEMPLATE.format(body=safe_body, banner=BANNER_IMAGE, portal_url=PORTAL_URL)


def build_message(to: List[str], subject: str, body: str) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["From"] = MAIL_FROM
    message["To"] = ", ".join(to)
    message["Subject"] = subject
    message.attach(MIMEText(body or "", "plain", "utf-8"))
    message.attach(MIMEText(render_email_html(body), "html", "utf-8"))
    return message


def send_email(to: List[str], subject: str, body: str) -> None:
    """
    Send one templated message to every recipient.

    Raises:
        smtplib.SMTPException / OSError: transport failure
    """
    message = build_message(to, subject, body)

    with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30) as server:
        server.starttls()
        if SMTP_USER:
            server.login(SMTP_USER, SMTP_PASSWORD)
        server.send_message(message, to_addrs=to)

    logger.info("Email sent to %d recipients", len(to))
