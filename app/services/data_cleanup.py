"""
Demo data cleanup.
Empties the HR tables one statement at a time, dependents before parents. There is
no enclosing transaction: a failure part-way leaves earlier tables already emptied.
"""
from typing import Dict, Any, List
from sqlalchemy import text, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog


log = structlog.get_logger(__name__)


# Order matters: each table only references tables further down the list
CLEANUP_ORDER: List[str] = [
    "letters",
    "time_cards",
    "substitute_time_cards",
    "payroll_records",
    "extra_pay_timestamps",
    "extra_pay_requests",
    "extra_pay_contracts",
    "substitute_assignments",
    "documents",
    "employee_accounts",
    "activity_logs",
    "onboarding_form_submissions",
    "onboarding_workflows",
    "signature_requests",
    "paf_timestamps",
    "paf_approval_steps",
    "paf_submissions",
    "leave_requests",
    "employees",
    "retirees",
]


def _existing_tables(db: Session) -> set:
    return set(inspect(db.get_bind()).get_table_names())


def cleanup_demo_data(db: Session) -> Dict[str, Any]:
    """
    Delete every row from the tables in CLEANUP_ORDER.

    Args:
        db: Database session

    Returns:
        {"success", "records_removed", "tables": {table: rows}, "errors": [...]}
    """
    existing = _existing_tables(db)
    removed = 0
    per_table: Dict[str, int] = {}
    errors: List[str] = []

    for table in CLEANUP_ORDER:
        if table not in existing:
            log.info("cleanup_table_skipped", table=table)
            continue
        try:
            result = db.execute(text(f"DELETE FROM {table}"))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            errors.append(f"{table}: {e}")
            log.warning("cleanup_table_failed", table=table, error=str(e))
            continue
        count = result.rowcount if result.rowcount and result.rowcount > 0 else 0
        per_table[table] = count
        removed += count

    log.info("cleanup_completed", records_removed=removed, errors=len(errors))
    return {
        "success": not errors,
        "records_removed": removed,
        "tables": per_table,
        "errors": errors,
    }


def validate_clean_state(db: Session) -> Dict[str, Any]:
    """Row counts left in each cleanup table; ``clean`` is True when all are zero."""
    existing = _existing_tables(db)
    remaining: Dict[str, int] = {}
    for table in CLEANUP_ORDER:
        if table not in existing:
            continue
        remaining[table] = db.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar() or 0
    return {
        "clean": all(v == 0 for v in remaining.values()),
        "remaining": {k: v for k, v in remaining.items() if v},
    }
