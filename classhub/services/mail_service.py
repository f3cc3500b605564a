"""
Outbound mail over SMTP (STARTTLS, login with the configured account).
"""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from classhub.core.config import settings

logger = logging.getLogger(__name__)

PRIVATE_MESSAGE_SUBJECT = "Private Message from Classroom"
CLASSROOM_UPDATE_SUBJECT = "Classroom Update"


class MailError(Exception):
    pass


def build_message(to: str, subject: str, text: str) -> MIMEMultipart:
    message = MIMEMultipart()
    message["From"] = settings.SMTP_EMAIL or ""
    message["To"] = to
    message["Subject"] = subject
    message.attach(MIMEText(text, "plain"))
    return message


def send_mail(to: str, subject: str, text: str) -> None:
    """Blocking send. Raises MailError on any SMTP or connection failure."""
    if not settings.SMTP_EMAIL or not settings.SMTP_PASS:
        raise MailError("SMTP credentials are not configured")

    message = build_message(to, subject, text)
    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
            server.starttls()
            server.login(settings.SMTP_EMAIL, settings.SMTP_PASS)
            server.sendmail(settings.SMTP_EMAIL, [to], message.as_string())
    except (smtplib.SMTPException, OSError) as e:
        raise MailError(str(e)) from e


async def send_mail_async(to: str, subject: str, text: str) -> None:
    # smtplib blocks; keep it off the event loop
    await asyncio.to_thread(send_mail, to, subject, text)


async def send_private_message(*, sender_name: str, to: str, content: str) -> None:
    await send_mail_async(to, PRIVATE_MESSAGE_SUBJECT, f"{sender_name}: {content}")
    logger.info("Private message from %s delivered to SMTP for %s", sender_name, to)
