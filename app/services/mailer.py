"""
Outbound SMTP mail.
"""
import smtplib
from email.message import EmailMessage
from typing import List, Optional
import structlog

from ..config import settings


log = structlog.get_logger(__name__)


def smtp_configured() -> bool:
    return bool(settings.smtp_host and settings.smtp_username and settings.smtp_password)


def send_email(to: List[str], subject: str, text: str, html: Optional[str] = None) -> bool:
    """
    Send one message to ``to``. Returns False instead of raising when SMTP is
    not configured or delivery fails; the failure is logged.
    """
    if not smtp_configured() or not to:
        log.info("email_skipped", reason="smtp_not_configured" if to else "no_recipients", subject=subject)
        return False
    msg = EmailMessage()
    msg["From"] = settings.mail_from
    msg["To"] = ", ".join(to)
    msg["Subject"] = subject
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")
    try:
        if settings.smtp_secure:
            with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port) as s:
                s.login(settings.smtp_username, settings.smtp_password)
                s.send_message(msg)
        else:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as s:
                s.starttls()
                s.login(settings.smtp_username, settings.smtp_password)
                s.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        log.warning("email_failed", subject=subject, error=str(e))
        return False
    log.info("email_sent", subject=subject, recipients=len(to))
    return True
