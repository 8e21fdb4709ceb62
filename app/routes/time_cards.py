from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user, require_roles
from ..models.models import TimeCard, SubstituteTimeCard
from ..schemas.time_cards import (
    ApprovalStage,
    TimeCardCreate,
    TimeCardUpdate,
    TimeCardResponse,
    StageAction,
)
from ..services.activity import create_activity_log
from ..services.time_cards import TIME_CARD_RULES, stage_update, compute_total_hours, compute_overtime
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/time-cards", tags=["time-cards"])


def apply_stage_action(storage: Storage, card, rules: dict, action: str, user, notes: Optional[str]):
    """
    Move ``card`` through one approval stage.

    Raises 400 when a rejection has no notes and 409 when the card's current
    status does not allow ``action``. Shared by regular and substitute cards.
    """
    rule = rules[action]
    if action == "reject" and not (notes or "").strip():
        raise HTTPException(status_code=400, detail="Rejection notes are required")
    if card.status not in rule["allowed_from"]:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot {action.replace('-', ' ')} a time card with status '{card.status}'",
        )
    previous = card.status
    data = stage_update(rule, user_id=user.id, notes=notes, current_stage=card.current_approval_stage)
    if isinstance(card, SubstituteTimeCard):
        card = storage.update_substitute_time_card(card, data)
        entity_type = "substitute_time_card"
    else:
        card = storage.update_time_card(card, data)
        entity_type = "time_card"
    create_activity_log(
        storage.db, f"{entity_type}_{rule['status']}", entity_type, card.id, user_id=user.id,
        description=f"Time card moved from {previous} to {card.status}",
        details={"from": previous, "to": card.status, "stage": card.current_approval_stage, "notes": notes},
    )
    return card


def _notes(payload: Optional[StageAction]) -> Optional[str]:
    return payload.notes if payload else None


def _get_card(storage: Storage, card_id: int) -> TimeCard:
    card = storage.get_time_card(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Time card not found")
    return card


@router.get("", response_model=List[TimeCardResponse])
def list_time_cards(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_time_cards()


@router.get("/pending", response_model=List[TimeCardResponse])
def list_pending_time_cards(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_pending_time_cards()


@router.get("/date-range", response_model=List[TimeCardResponse])
def list_time_cards_by_date_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date cannot be before start_date")
    return storage.get_time_cards_by_date_range(start_date, end_date)


@router.get("/approval-stage/{stage}", response_model=List[TimeCardResponse])
def list_time_cards_by_stage(stage: ApprovalStage, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_time_cards_by_stage(stage.value)


@router.get("/employee/{employee_id}", response_model=List[TimeCardResponse])
def list_employee_time_cards(employee_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_time_cards_by_employee(employee_id)


@router.get("/{card_id}", response_model=TimeCardResponse)
def get_time_card(card_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return _get_card(storage, card_id)


@router.post("", response_model=TimeCardResponse, status_code=201)
def create_time_card(
    payload: TimeCardCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("secretary", "hr", "payroll")),
):
    employee = storage.get_employee(payload.employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    data = payload.model_dump()
    if data.get("total_hours") is None:
        data["total_hours"] = compute_total_hours(
            payload.clock_in, payload.clock_out, payload.break_start, payload.break_end
        ) or 0
    if data.get("overtime_hours") is None:
        data["overtime_hours"] = compute_overtime(data["total_hours"])
    card = storage.create_time_card(data)
    create_activity_log(
        storage.db, "time_card_created", "time_card", card.id, user_id=user.id,
        description=f"Time card created for {employee.full_name}",
    )
    return card


@router.put("/{card_id}", response_model=TimeCardResponse)
def update_time_card(
    card_id: int,
    payload: TimeCardUpdate,
    storage: Storage = Depends(get_storage),
    _=Depends(require_roles("secretary", "hr", "payroll")),
):
    card = _get_card(storage, card_id)
    data = payload.model_dump(exclude_unset=True)
    clock_fields = {"clock_in", "clock_out", "break_start", "break_end"}
    if clock_fields & data.keys() and "total_hours" not in data:
        total = compute_total_hours(
            data.get("clock_in", card.clock_in),
            data.get("clock_out", card.clock_out),
            data.get("break_start", card.break_start),
            data.get("break_end", card.break_end),
        )
        if total is not None:
            data["total_hours"] = total
            data.setdefault("overtime_hours", compute_overtime(total))
    return storage.update_time_card(card, data)


@router.delete("/{card_id}")
def delete_time_card(card_id: int, storage: Storage = Depends(get_storage), user=Depends(require_roles("hr"))):
    if not storage.delete_time_card(card_id):
        raise HTTPException(status_code=404, detail="Time card not found")
    create_activity_log(storage.db, "time_card_deleted", "time_card", card_id, user_id=user.id)
    return {"message": "Time card deleted successfully"}


# ---------- APPROVAL STAGES ----------
@router.post("/{card_id}/submit", response_model=TimeCardResponse)
def submit_time_card(
    card_id: int,
    payload: Optional[StageAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("secretary", "hr")),
):
    return apply_stage_action(storage, _get_card(storage, card_id), TIME_CARD_RULES, "submit", user, _notes(payload))


@router.post("/{card_id}/approve-employee", response_model=TimeCardResponse)
def employee_approve_time_card(
    card_id: int,
    payload: Optional[StageAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("employee", "hr")),
):
    return apply_stage_action(storage, _get_card(storage, card_id), TIME_CARD_RULES, "approve-employee", user, _notes(payload))


@router.post("/{card_id}/approve-admin", response_model=TimeCardResponse)
def admin_approve_time_card(
    card_id: int,
    payload: Optional[StageAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles()),
):
    return apply_stage_action(storage, _get_card(storage, card_id), TIME_CARD_RULES, "approve-admin", user, _notes(payload))


@router.post("/{card_id}/process-payroll", response_model=TimeCardResponse)
def payroll_process_time_card(
    card_id: int,
    payload: Optional[StageAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("payroll")),
):
    return apply_stage_action(storage, _get_card(storage, card_id), TIME_CARD_RULES, "process-payroll", user, _notes(payload))


@router.post("/{card_id}/reject", response_model=TimeCardResponse)
def reject_time_card(
    card_id: int,
    payload: Optional[StageAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("secretary", "hr", "payroll")),
):
    return apply_stage_action(storage, _get_card(storage, card_id), TIME_CARD_RULES, "reject", user, _notes(payload))
