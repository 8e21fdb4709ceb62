"""
PAF audit trail.
Each submission's lifecycle events are appended to paf_timestamps.
"""
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session

from ..models.models import PafTimestamp, PafSubmission


def record_event(
    db: Session,
    submission_id: int,
    event_type: str,
    event_description: str,
    user_id=None,
    user_role: Optional[str] = None,
    from_status: Optional[str] = None,
    to_status: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> PafTimestamp:
    event = PafTimestamp(
        submission_id=submission_id,
        event_type=event_type,
        event_description=event_description,
        user_id=user_id,
        user_role=user_role,
        from_status=from_status,
        to_status=to_status,
        details=details,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def get_submission_timeline(db: Session, submission_id: int) -> List[PafTimestamp]:
    return (
        db.query(PafTimestamp)
        .filter(PafTimestamp.submission_id == submission_id)
        .order_by(PafTimestamp.timestamp.asc(), PafTimestamp.id.asc())
        .all()
    )


def record_created(db: Session, submission: PafSubmission, user_id=None, user_role: Optional[str] = None):
    return record_event(
        db, submission.id, "created", f"PAF created: {submission.paf_type} - {submission.position_title}",
        user_id=user_id, user_role=user_role, to_status=submission.status,
    )


def record_submitted(db: Session, submission_id: int, from_status: str, user_id=None, user_role: Optional[str] = None):
    return record_event(
        db, submission_id, "submitted", "PAF submitted for approval",
        user_id=user_id, user_role=user_role, from_status=from_status, to_status="submitted",
    )


def record_decision(
    db: Session,
    submission_id: int,
    step: int,
    approver_role: str,
    from_status: str,
    to_status: str,
    user_id=None,
    user_role: Optional[str] = None,
    comments: Optional[str] = None,
):
    """
    Record one approver's decision.

    A denial is ``rejected``. Approvals are ``reviewed`` until the last step,
    which is ``approved``.
    """
    if to_status == "approved":
        event_type, verb = "approved", "approved the PAF"
    elif to_status == "denied":
        event_type, verb = "rejected", "rejected the PAF"
    else:
        event_type, verb = "reviewed", "approved"
    details: Dict[str, Any] = {"step": step, "approver_role": approver_role}
    if comments:
        details["comments"] = comments
    return record_event(
        db, submission_id, event_type, f"Step {step} ({approver_role}) {verb}",
        user_id=user_id, user_role=user_role, from_status=from_status, to_status=to_status,
        details=details,
    )
