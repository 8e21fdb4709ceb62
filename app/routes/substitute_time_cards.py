from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user, require_roles
from ..models.models import SubstituteTimeCard
from ..schemas.time_cards import (
    SubstituteTimeCardCreate,
    SubstituteTimeCardUpdate,
    SubstituteTimeCardResponse,
    StageAction,
)
from ..services.activity import create_activity_log
from ..services.time_cards import SUBSTITUTE_TIME_CARD_RULES, compute_total_hours, substitute_pay
from ..storage import Storage, get_storage
from .time_cards import apply_stage_action


router = APIRouter(prefix="/api/substitute-time-cards", tags=["substitute-time-cards"])


def _get_card(storage: Storage, card_id: int) -> SubstituteTimeCard:
    card = storage.get_substitute_time_card(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Substitute time card not found")
    return card


@router.get("", response_model=List[SubstituteTimeCardResponse])
def list_substitute_time_cards(
    substitute_id: Optional[int] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_substitute_time_cards(substitute_id)


@router.get("/{card_id}", response_model=SubstituteTimeCardResponse)
def get_substitute_time_card(card_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return _get_card(storage, card_id)


@router.post("", response_model=SubstituteTimeCardResponse, status_code=201)
def create_substitute_time_card(
    payload: SubstituteTimeCardCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("secretary", "hr", "payroll")),
):
    substitute = storage.get_employee(payload.substitute_id)
    if not substitute:
        raise HTTPException(status_code=404, detail="Substitute not found")
    if payload.assignment_id is not None and not storage.get_substitute_assignment(payload.assignment_id):
        raise HTTPException(status_code=404, detail="Assignment not found")
    data = payload.model_dump()
    if data.get("total_hours") is None:
        data["total_hours"] = compute_total_hours(payload.clock_in, payload.clock_out) or 0
    if data.get("total_pay") is None:
        data["total_pay"] = substitute_pay(payload.daily_rate, data["total_hours"])
    card = storage.create_substitute_time_card(data)
    create_activity_log(
        storage.db, "substitute_time_card_created", "substitute_time_card", card.id, user_id=user.id,
        description=f"Substitute time card created for {substitute.full_name}",
    )
    return card


@router.put("/{card_id}", response_model=SubstituteTimeCardResponse)
def update_substitute_time_card(
    card_id: int,
    payload: SubstituteTimeCardUpdate,
    storage: Storage = Depends(get_storage),
    _=Depends(require_roles("secretary", "hr", "payroll")),
):
    card = _get_card(storage, card_id)
    return storage.update_substitute_time_card(card, payload.model_dump(exclude_unset=True))


@router.delete("/{card_id}")
def delete_substitute_time_card(card_id: int, storage: Storage = Depends(get_storage), _=Depends(require_roles("hr"))):
    if not storage.delete_substitute_time_card(card_id):
        raise HTTPException(status_code=404, detail="Substitute time card not found")
    return {"message": "Substitute time card deleted successfully"}


# ---------- APPROVAL STAGES ----------
# Substitutes skip the employee sign-off: secretary -> administrator -> payroll
@router.post("/{card_id}/submit", response_model=SubstituteTimeCardResponse)
def submit_substitute_time_card(
    card_id: int,
    payload: Optional[StageAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("secretary", "hr")),
):
    notes = payload.notes if payload else None
    return apply_stage_action(storage, _get_card(storage, card_id), SUBSTITUTE_TIME_CARD_RULES, "submit", user, notes)


@router.post("/{card_id}/approve-admin", response_model=SubstituteTimeCardResponse)
def admin_approve_substitute_time_card(
    card_id: int,
    payload: Optional[StageAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles()),
):
    notes = payload.notes if payload else None
    return apply_stage_action(storage, _get_card(storage, card_id), SUBSTITUTE_TIME_CARD_RULES, "approve-admin", user, notes)


@router.post("/{card_id}/process-payroll", response_model=SubstituteTimeCardResponse)
def payroll_process_substitute_time_card(
    card_id: int,
    payload: Optional[StageAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("payroll")),
):
    notes = payload.notes if payload else None
    return apply_stage_action(storage, _get_card(storage, card_id), SUBSTITUTE_TIME_CARD_RULES, "process-payroll", user, notes)


@router.post("/{card_id}/reject", response_model=SubstituteTimeCardResponse)
def reject_substitute_time_card(
    card_id: int,
    payload: Optional[StageAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("secretary", "hr", "payroll")),
):
    notes = payload.notes if payload else None
    return apply_stage_action(storage, _get_card(storage, card_id), SUBSTITUTE_TIME_CARD_RULES, "reject", user, notes)
