import logging
import smtplib
from email.mime.text import MIMEText

from app.config import settings

logger = logging.getLogger(__name__)


def notify_report_filed(
    report_id: int,
    target_type: str,
    target_id: int,
    reason: str,
    reporter_email: str,
) -> None:
    """
    Tell the site admin that a reader reported a story, chapter or comment.
    Always logs. Sends an email if SMTP_HOST and SMTP_ADMIN_EMAIL are set.
    Email failures never propagate: a broken mail server must not prevent
    the report from being filed.
    """
    logger.info(
        "REPORT_FILED | id=%s target=%s:%s reporter=%s",
        report_id,
        target_type,
        target_id,
        reporter_email,
    )

    if not (settings.SMTP_HOST and settings.SMTP_ADMIN_EMAIL):
        return

    body = (
        f"New content report on {settings.SITE_NAME}\n"
        f"  Report:   #{report_id}\n"
        f"  Target:   {target_type} {target_id}\n"
        f"  Reporter: {reporter_email}\n"
        f"  Reason:   {reason}\n"
    )
    msg = MIMEText(body)
    msg["Subject"] = f"[{settings.SITE_NAME}] New {target_type} report #{report_id}"
    msg["From"] = settings.SMTP_FROM_EMAIL or settings.SMTP_ADMIN_EMAIL
    msg["To"] = settings.SMTP_ADMIN_EMAIL

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as smtp:
            if settings.SMTP_TLS:
                smtp.starttls()
            if settings.SMTP_USERNAME:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
        logger.info("Report notification email sent to %s", settings.SMTP_ADMIN_EMAIL)
    except Exception as exc:
        logger.warning("Failed to send report notification email: %s", exc)
