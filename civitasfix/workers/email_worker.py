# civitasfix/workers/email_worker.py
import asyncio
import logging
import os
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
from rq import SimpleWorker, Worker

from civitasfix.config import settings
from civitasfix.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_message(to_email: str, subject: str, body: str, report_id: Optional[int] = None) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["From"] = f"CivitasFix <{settings.EMAIL_FROM}>"
    message["To"] = to_email
    message["Subject"] = f"[CivitasFix] {subject}"

    text = body
    if report_id is not None:
        text = f"{body}\n\nReport #{report_id}"
    message.attach(MIMEText(text, "plain"))
    return message


def send_notification_email(to_email: str, subject: str, body: str, report_id: Optional[int] = None) -> bool:
    """rq job body. Raising marks the job failed in rq; the API never waits on it."""
    message = build_message(to_email, subject, body, report_id)
    asyncio.run(
        aiosmtplib.send(
            message,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER or None,
            password=settings.SMTP_PASSWORD or None,
            start_tls=True,
        )
    )
    logger.info("Sent notification email to %s: %s", to_email, subject)
    return True


if __name__ == "__main__":
    from civitasfix.rq_connection import email_queue, redis_conn

    setup_logging()
    worker_cls = Worker if os.name != "nt" else SimpleWorker
    worker = worker_cls([email_queue], connection=redis_conn)
    worker.work()
