from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from ..auth.security import require_roles
from ..db import get_db
from ..services import email_alerts
from ..services.data_cleanup import cleanup_demo_data, validate_clean_state


router = APIRouter(prefix="/api", tags=["system"])
log = structlog.get_logger(__name__)


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        log.error("health_db_failed", error=str(e))
        database = "error"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "time": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/system/cleanup")
def run_cleanup(db: Session = Depends(get_db), user=Depends(require_roles())):
    """Remove every demo/business row; users, roles and leave types are kept."""
    log.warning("cleanup_requested", user_id=str(user.id))
    result = cleanup_demo_data(db)
    log.warning("cleanup_finished", user_id=str(user.id), records_removed=result["records_removed"])
    return result


@router.get("/system/validate-clean-state")
def clean_state(db: Session = Depends(get_db), _=Depends(require_roles())):
    return validate_clean_state(db)


@router.post("/system/test-alert")
def test_alert(severity: str = Query("low"), user=Depends(require_roles())):
    if severity not in email_alerts.SEVERITY_COLORS:
        raise HTTPException(status_code=400, detail=f"Unknown severity '{severity}'")
    sent = email_alerts.send_error_alert(
        RuntimeError("Test alert from the HR Payroll system"),
        severity,
        context={"context": "Manual test alert"},
        endpoint="POST /api/system/test-alert",
        user_id=str(user.id),
    )
    return {"enabled": email_alerts.alerts_enabled(), "sent": sent}
