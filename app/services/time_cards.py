"""
Time card approval stages.
Each dedicated endpoint moves a card one stage forward; the tables below say which
statuses an endpoint accepts and what it stamps. There is no engine beyond that.
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any
import pytz


# Regular staff: secretary -> employee -> administrator -> payroll -> completed
TIME_CARD_RULES: Dict[str, Dict[str, Any]] = {
    "submit": {
        "allowed_from": ("draft", "rejected"),
        "status": "secretary_submitted",
        "stage": "employee",
        "actor_field": "submitted_by",
        "at_field": "submitted_at",
        "notes_field": "secretary_notes",
    },
    "approve-employee": {
        "allowed_from": ("secretary_submitted",),
        "status": "employee_approved",
        "stage": "administrator",
        "actor_field": "approved_by_employee",
        "at_field": "employee_approved_at",
        "notes_field": "employee_notes",
    },
    "approve-admin": {
        "allowed_from": ("employee_approved",),
        "status": "admin_approved",
        "stage": "payroll",
        "actor_field": "approved_by_admin",
        "at_field": "admin_approved_at",
        "notes_field": "admin_notes",
    },
    "process-payroll": {
        "allowed_from": ("admin_approved",),
        "status": "payroll_processed",
        "stage": "completed",
        "actor_field": "processed_by_payroll",
        "at_field": "payroll_processed_at",
        "notes_field": "payroll_notes",
    },
    "reject": {
        "allowed_from": ("draft", "secretary_submitted", "employee_approved", "admin_approved"),
        "status": "rejected",
        "stage": None,
    },
}

# Substitutes skip the employee sign-off
SUBSTITUTE_TIME_CARD_RULES: Dict[str, Dict[str, Any]] = {
    "submit": {
        "allowed_from": ("draft", "rejected"),
        "status": "secretary_submitted",
        "stage": "administrator",
        "actor_field": "submitted_by",
        "at_field": "submitted_at",
        "notes_field": "secretary_notes",
    },
    "approve-admin": {
        "allowed_from": ("secretary_submitted",),
        "status": "admin_approved",
        "stage": "payroll",
        "actor_field": "approved_by_admin",
        "at_field": "admin_approved_at",
        "notes_field": "admin_notes",
    },
    "process-payroll": {
        "allowed_from": ("admin_approved",),
        "status": "payroll_processed",
        "stage": "completed",
        "actor_field": "processed_by_payroll",
        "at_field": "payroll_processed_at",
        "notes_field": "payroll_notes",
    },
    "reject": {
        "allowed_from": ("draft", "secretary_submitted", "admin_approved"),
        "status": "rejected",
        "stage": None,
    },
}


# A rejection's notes land in the column of the stage that rejected the card
STAGE_NOTES_FIELDS: Dict[str, str] = {
    "secretary": "secretary_notes",
    "employee": "employee_notes",
    "administrator": "admin_notes",
    "payroll": "payroll_notes",
}


def stage_update(
    rule: Dict[str, Any],
    user_id=None,
    notes: Optional[str] = None,
    current_stage: Optional[str] = None,
) -> Dict[str, Any]:
    """Column values to write for ``rule``; callers have already checked ``allowed_from``."""
    notes_field = rule.get("notes_field") or STAGE_NOTES_FIELDS.get(current_stage or "")
    data: Dict[str, Any] = {"status": rule["status"]}
    if rule.get("stage"):
        data["current_approval_stage"] = rule["stage"]
    if rule.get("actor_field"):
        data[rule["actor_field"]] = user_id
    if rule.get("at_field"):
        data[rule["at_field"]] = datetime.now(timezone.utc)
    if notes and notes_field:
        data[notes_field] = notes
    return data


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive values (as SQLite returns them) are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=pytz.UTC)
    return value.astimezone(pytz.UTC)


def compute_total_hours(
    clock_in: Optional[datetime],
    clock_out: Optional[datetime],
    break_start: Optional[datetime] = None,
    break_end: Optional[datetime] = None,
) -> Optional[float]:
    """Worked hours between clock in/out minus the break, rounded to 2 decimals."""
    clock_in, clock_out = as_utc(clock_in), as_utc(clock_out)
    break_start, break_end = as_utc(break_start), as_utc(break_end)
    if not clock_in or not clock_out or clock_out <= clock_in:
        return None
    seconds = (clock_out - clock_in).total_seconds()
    if break_start and break_end and break_end > break_start:
        seconds -= (break_end - break_start).total_seconds()
    return round(max(seconds, 0) / 3600.0, 2)


def compute_overtime(total_hours: Optional[float], regular_hours: float = 8.0) -> float:
    if not total_hours or total_hours <= regular_hours:
        return 0.0
    return round(total_hours - regular_hours, 2)


def substitute_pay(daily_rate: Optional[float], total_hours: Optional[float], full_day_hours: float = 6.0) -> Optional[float]:
    """Full daily rate from ``full_day_hours`` worked, half a day below that."""
    if daily_rate is None:
        return None
    if total_hours is not None and total_hours >= full_day_hours:
        return round(float(daily_rate), 2)
    return round(float(daily_rate) / 2, 2)
