"""
Error alert emails.
Formats a failure as an HTML report and mails it to ADMIN_EMAILS. Severity is
picked by the caller, never derived from the error.
"""
import json
import traceback
from datetime import datetime, timezone
from html import escape
from typing import Optional, Dict, Any
import structlog

from ..config import settings
from . import mailer


log = structlog.get_logger(__name__)


SEVERITY_COLORS = {
    "low": "#28a745",
    "medium": "#ffc107",
    "high": "#fd7e14",
    "critical": "#dc3545",
}


def alerts_enabled() -> bool:
    return mailer.smtp_configured() and bool(settings.admin_emails)


def _metadata_item(label: str, value: str) -> str:
    return (
        '<div class="metadata-item">'
        f'<div class="metadata-label">{escape(label)}</div>'
        f'<div class="metadata-value">{escape(value)}</div>'
        "</div>"
    )


def build_alert_html(
    message: str,
    severity: str,
    timestamp: datetime,
    endpoint: Optional[str] = None,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    stack: Optional[str] = None,
) -> str:
    color = SEVERITY_COLORS[severity]
    items = [
        _metadata_item("Timestamp", timestamp.isoformat()),
        _metadata_item("Severity", severity.upper()),
    ]
    if endpoint:
        items.append(_metadata_item("Endpoint", endpoint))
    if user_id:
        items.append(_metadata_item("User ID", str(user_id)))
    if context:
        items.append(_metadata_item("Context", json.dumps(context, default=str, indent=2)))
    stack_html = f'<h3>Stack Trace</h3><div class="stack-trace">{escape(stack)}</div>' if stack else ""
    return f"""<!DOCTYPE html>
<html>
<head>
<style>
  body {{ font-family: Arial, sans-serif; margin: 0; padding: 20px; background-color: #f8f9fa; }}
  .container {{ max-width: 600px; margin: 0 auto; background-color: white; border-radius: 8px; overflow: hidden; }}
  .header {{ background-color: {color}; color: white; padding: 20px; text-align: center; }}
  .content {{ padding: 20px; }}
  .error-details {{ background-color: #f8f9fa; padding: 15px; border-left: 4px solid {color}; margin: 15px 0; }}
  .metadata-item {{ padding: 10px; background-color: #f8f9fa; border-radius: 4px; margin-bottom: 8px; }}
  .metadata-label {{ font-weight: bold; color: #6c757d; font-size: 12px; text-transform: uppercase; }}
  .metadata-value {{ color: #212529; margin-top: 5px; white-space: pre-wrap; }}
  .stack-trace {{ background-color: #f8f9fa; padding: 15px; font-family: monospace; font-size: 12px; white-space: pre-wrap; }}
  .footer {{ background-color: #f8f9fa; padding: 15px; text-align: center; color: #6c757d; font-size: 12px; }}
</style>
</head>
<body>
<div class="container">
  <div class="header">
    <h1>System Error Alert</h1>
    <p>Severity: {severity.upper()}</p>
  </div>
  <div class="content">
    <div class="error-details">
      <h3>Error Message</h3>
      <p><strong>{escape(message)}</strong></p>
    </div>
    <div class="metadata">{''.join(items)}</div>
    {stack_html}
  </div>
  <div class="footer">
    <p>HR Payroll System - Error Monitoring</p>
    <p>This is an automated alert. Please check the system logs for more details.</p>
  </div>
</div>
</body>
</html>"""


def send_error_alert(
    error: BaseException,
    severity: str,
    context: Optional[Dict[str, Any]] = None,
    endpoint: Optional[str] = None,
    user_id: Optional[str] = None,
) -> bool:
    """
    Mail an alert for ``error`` to the configured admins.

    Args:
        error: The exception being reported
        severity: low|medium|high|critical
        context: Extra JSON-able details
        endpoint: Request path, when raised inside a request
        user_id: Acting user, when known

    Returns:
        True when the message was handed to the SMTP server
    """
    if severity not in SEVERITY_COLORS:
        raise ValueError(f"unknown severity: {severity}")
    if not alerts_enabled():
        log.info("alert_skipped", severity=severity, error=str(error))
        return False
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__)) if error.__traceback__ else None
    html = build_alert_html(
        message=str(error) or type(error).__name__,
        severity=severity,
        timestamp=datetime.now(timezone.utc),
        endpoint=endpoint,
        user_id=user_id,
        context=context,
        stack=stack,
    )
    subject = f"HR Payroll System Error - {severity.upper()}"
    return mailer.send_email(settings.admin_emails, subject, f"{subject}\n\n{error}", html=html)


def send_database_error(error: BaseException, context: Optional[str] = None) -> bool:
    return send_error_alert(error, "critical", {"context": context or "Database operation failed"})


def send_authentication_error(error: BaseException, user_id: Optional[str] = None) -> bool:
    return send_error_alert(error, "high", {"context": "Authentication system error"}, user_id=user_id)


def send_api_error(error: BaseException, endpoint: str, user_id: Optional[str] = None) -> bool:
    return send_error_alert(error, "medium", {"context": "API endpoint error"}, endpoint=endpoint, user_id=user_id)


def send_payroll_error(error: BaseException, context: Optional[str] = None) -> bool:
    return send_error_alert(error, "critical", {"context": context or "Payroll processing error"})


def send_system_error(error: BaseException, context: Optional[str] = None) -> bool:
    return send_error_alert(error, "high", {"context": context or "System error"})
