"""
Letter template processing.
Substitutes {{placeholder}} tokens with employee data and reports which ones were used.
"""
import re
from datetime import datetime, date
from typing import Dict, Optional, Tuple
import pytz

from ..config import settings
from ..models.models import Employee


PLACEHOLDERS = (
    "firstName",
    "lastName",
    "fullName",
    "employeeId",
    "email",
    "department",
    "position",
    "startDate",
    "salary",
    "phone",
    "address",
    "emergencyContact",
    "emergencyPhone",
    "currentDate",
    "currentYear",
)

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def _fmt_date(value: Optional[date]) -> str:
    return value.strftime("%m/%d/%Y") if value else ""


def _fmt_salary(value) -> str:
    if value is None:
        return ""
    return f"${float(value):,.2f}"


def employee_values(employee: Employee, now: Optional[datetime] = None) -> Dict[str, str]:
    """Placeholder values for ``employee``; dates use the district timezone."""
    if now is None:
        now = datetime.now(pytz.timezone(settings.tz_default))
    return {
        "firstName": employee.first_name or "",
        "lastName": employee.last_name or "",
        "fullName": f"{employee.first_name or ''} {employee.last_name or ''}".strip(),
        "employeeId": employee.employee_id or "",
        "email": employee.email or "",
        "department": employee.department or "",
        "position": employee.position or "",
        "startDate": _fmt_date(employee.hire_date),
        "salary": _fmt_salary(employee.salary),
        "phone": employee.phone or "",
        "address": employee.address or "",
        "emergencyContact": employee.emergency_contact or "",
        "emergencyPhone": employee.emergency_phone or "",
        "currentDate": _fmt_date(now.date()),
        "currentYear": str(now.year),
    }


def render_template(template: str, values: Dict[str, str]) -> Tuple[str, Dict[str, str]]:
    """
    Replace every known ``{{name}}`` in ``template``.

    Args:
        template: Letter body containing placeholders
        values: Placeholder name -> replacement text

    Returns:
        (processed content, {placeholder: value} for the placeholders that appeared)
    """
    used: Dict[str, str] = {}

    # Single pass over the original text so values are never re-scanned
    def replace(match):
        name = match.group(1)
        if name not in PLACEHOLDERS:
            return match.group(0)
        value = values.get(name, "")
        used[name] = value
        return value

    content = PLACEHOLDER_RE.sub(replace, template)
    return content, used
