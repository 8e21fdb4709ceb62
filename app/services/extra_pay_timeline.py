"""
Extra pay timeline.
Every contract/request lifecycle event is appended to extra_pay_timestamps.
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session

from ..models.models import ExtraPayTimestamp, ExtraPayContract, ExtraPayRequest


def record_event(
    db: Session,
    entity_type: str,
    entity_id: int,
    event_type: str,
    event_description: str,
    user_id=None,
    user_role: Optional[str] = None,
    from_status: Optional[str] = None,
    to_status: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ExtraPayTimestamp:
    """
    Append a timeline event and bump the entity's updated_at.

    Args:
        db: Database session
        entity_type: contract|request
        entity_id: Contract or request ID
        event_type: created|status_change|approved|rejected|paid
        event_description: Human readable description
        user_id: Acting user
        user_role: Acting user's primary role
        from_status: Status before the event
        to_status: Status after the event
        details: Extra JSON payload

    Returns:
        Created ExtraPayTimestamp object
    """
    event = ExtraPayTimestamp(
        entity_type=entity_type,
        entity_id=entity_id,
        event_type=event_type,
        event_description=event_description,
        user_id=user_id,
        user_role=user_role,
        from_status=from_status,
        to_status=to_status,
        details=details,
    )
    db.add(event)

    model = ExtraPayContract if entity_type == "contract" else ExtraPayRequest
    entity = db.query(model).filter(model.id == entity_id).first()
    if entity is not None:
        entity.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(event)
    return event


def get_entity_timeline(db: Session, entity_type: str, entity_id: int) -> List[ExtraPayTimestamp]:
    return (
        db.query(ExtraPayTimestamp)
        .filter(ExtraPayTimestamp.entity_type == entity_type, ExtraPayTimestamp.entity_id == entity_id)
        .order_by(ExtraPayTimestamp.timestamp.asc(), ExtraPayTimestamp.id.asc())
        .all()
    )


# Helpers for common events

def record_contract_created(db: Session, contract: ExtraPayContract, user_id=None, user_role: Optional[str] = None):
    return record_event(
        db, "contract", contract.id, "created", "Extra Pay contract created",
        user_id=user_id, user_role=user_role, to_status=contract.status,
    )


def record_contract_status_change(db: Session, contract_id: int, from_status: str, to_status: str, user_id=None, user_role: Optional[str] = None):
    return record_event(
        db, "contract", contract_id, "status_change",
        f"Contract status changed from {from_status} to {to_status}",
        user_id=user_id, user_role=user_role, from_status=from_status, to_status=to_status,
    )


def record_request_created(db: Session, request: ExtraPayRequest, user_id=None, user_role: Optional[str] = None):
    return record_event(
        db, "request", request.id, "created", "Extra Pay request created",
        user_id=user_id, user_role=user_role, to_status="pending",
        details={"contract_id": request.contract_id} if request.contract_id else None,
    )


def record_request_approved(db: Session, request_id: int, user_id=None, user_role: Optional[str] = None, comments: Optional[str] = None):
    return record_event(
        db, "request", request_id, "approved", "Extra Pay request approved",
        user_id=user_id, user_role=user_role, from_status="pending", to_status="approved",
        details={"comments": comments} if comments else None,
    )


def record_request_rejected(db: Session, request_id: int, reason: str, user_id=None, user_role: Optional[str] = None):
    return record_event(
        db, "request", request_id, "rejected", f"Extra Pay request rejected: {reason}",
        user_id=user_id, user_role=user_role, from_status="pending", to_status="rejected",
        details={"reason": reason},
    )


def record_request_paid(db: Session, request_id: int, user_id=None, user_role: Optional[str] = None):
    return record_event(
        db, "request", request_id, "paid", "Extra Pay request marked as paid",
        user_id=user_id, user_role=user_role, from_status="approved", to_status="paid",
    )
