"""
Notification Tasks for Worker
Executed by RQ workers so that mailing a whole classroom never holds up
the request that triggered it.
"""

import logging

from classhub.db.session import SessionLocal
from classhub.services import classroom_service
from classhub.services.mail_service import (
    CLASSROOM_UPDATE_SUBJECT,
    MailError,
    send_mail,
)

logger = logging.getLogger(__name__)


def notify_classroom_task(classroom_id: int, message: str) -> dict:
    """
    Email `message` to every member of the classroom that has an address.

    One failed recipient does not stop the others; failures are logged and
    counted in the returned summary.
    """
    db = SessionLocal()
    try:
        recipients = classroom_service.member_emails(db, classroom_id=classroom_id)
    finally:
        db.close()

    sent, failed = 0, 0
    for email in recipients:
        try:
            send_mail(email, CLASSROOM_UPDATE_SUBJECT, message)
            sent += 1
        except MailError as e:
            failed += 1
            logger.error(f"Notification to {email} for classroom {classroom_id} failed: {e}")

    logger.info(
        f"Classroom {classroom_id} notification done: sent={sent}, failed={failed}"
    )
    return {
        "status": "success" if failed == 0 else "partial",
        "classroom_id": classroom_id,
        "sent": sent,
        "failed": failed,
    }
