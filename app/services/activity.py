"""
Activity log service.
Writes the human-readable trail shown on the dashboard's recent-activity feed.
"""
import json
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
import structlog

from ..models.models import ActivityLog


log = structlog.get_logger(__name__)


def create_activity_log(
    db: Session,
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    user_id=None,
    description: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ActivityLog:
    """
    Record an activity log entry in its own commit.

    Args:
        db: Database session
        action: Event name (employee_created|time_card_submitted|access_granted|...)
        entity_type: Type of entity (employee|time_card|leave_request|...)
        entity_id: Entity ID
        user_id: User who performed the action, if any
        description: Free text shown in activity feeds
        details: Extra JSON payload (diffs, notes, ids)

    Returns:
        Created ActivityLog object
    """
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        description=description,
        # Round-trip through json so dates and decimals are stored as plain values
        details=json.loads(json.dumps(details, default=str)) if details else None,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    log.info(action, entity_type=entity_type, entity_id=entity_id)
    return entry


def compute_diff(before: Dict, after: Dict) -> Dict:
    """
    Compute a diff between two dictionaries.

    Args:
        before: Before state
        after: After state

    Returns:
        Dict with before/after values for changed fields
    """
    diff = {}
    for key in set(before.keys()) | set(after.keys()):
        before_val = before.get(key)
        after_val = after.get(key)
        if before_val != after_val:
            diff[key] = {"before": before_val, "after": after_val}
    return diff
