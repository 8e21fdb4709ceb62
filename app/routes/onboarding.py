from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user, require_roles
from ..schemas.employees import (
    OnboardingWorkflowCreate,
    OnboardingWorkflowUpdate,
    OnboardingWorkflowResponse,
    OnboardingFormCreate,
    OnboardingFormUpdate,
    OnboardingFormReview,
    OnboardingFormResponse,
)
from ..services.activity import create_activity_log
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])


# ---------- FORM SUBMISSIONS ----------
# Declared before /{workflow_id} so "forms" is not parsed as an id
@router.get("/forms", response_model=List[OnboardingFormResponse])
def list_forms(
    employee_id: Optional[int] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_onboarding_forms(employee_id)


@router.get("/forms/{form_id}", response_model=OnboardingFormResponse)
def get_form(form_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    form = storage.get_onboarding_form(form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form submission not found")
    return form


@router.post("/forms", response_model=OnboardingFormResponse, status_code=201)
def create_form(payload: OnboardingFormCreate, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    if not storage.get_employee(payload.employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    return storage.create_onboarding_form(payload.model_dump())


@router.put("/forms/{form_id}", response_model=OnboardingFormResponse)
def update_form(
    form_id: int,
    payload: OnboardingFormUpdate,
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    form = storage.get_onboarding_form(form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form submission not found")
    return storage.update_onboarding_form(form, payload.model_dump(exclude_unset=True))


@router.post("/forms/{form_id}/submit", response_model=OnboardingFormResponse)
def submit_form(form_id: int, storage: Storage = Depends(get_storage), user=Depends(get_current_user)):
    form = storage.get_onboarding_form(form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form submission not found")
    if form.status != "draft":
        raise HTTPException(status_code=409, detail=f"Form cannot be submitted from status '{form.status}'")
    form = storage.update_onboarding_form(form, {"status": "submitted", "submitted_at": datetime.now(timezone.utc)})
    create_activity_log(
        storage.db, "onboarding_form_submitted", "onboarding_form", form.id, user_id=user.id,
        description=f"{form.form_type} submitted",
    )
    return form


@router.post("/forms/{form_id}/review", response_model=OnboardingFormResponse)
def review_form(
    form_id: int,
    payload: OnboardingFormReview,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    form = storage.get_onboarding_form(form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form submission not found")
    if form.status != "submitted":
        raise HTTPException(status_code=409, detail=f"Form cannot be reviewed from status '{form.status}'")
    new_status = "approved" if payload.approve else "rejected"
    form = storage.update_onboarding_form(form, {
        "status": new_status,
        "reviewed_by": user.id,
        "reviewed_at": datetime.now(timezone.utc),
        "review_notes": payload.notes,
    })
    create_activity_log(
        storage.db, f"onboarding_form_{new_status}", "onboarding_form", form.id, user_id=user.id,
        description=f"{form.form_type} {new_status}",
    )
    return form


# ---------- WORKFLOWS ----------
@router.get("", response_model=List[OnboardingWorkflowResponse])
def list_workflows(
    status: Optional[str] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_onboarding_workflows(status)


@router.get("/{workflow_id}", response_model=OnboardingWorkflowResponse)
def get_workflow(workflow_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    workflow = storage.get_onboarding_workflow(workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Onboarding workflow not found")
    return workflow


@router.post("", response_model=OnboardingWorkflowResponse, status_code=201)
def create_workflow(
    payload: OnboardingWorkflowCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    employee = storage.get_employee(payload.employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    data = payload.model_dump(exclude_none=True)
    data.setdefault("required_documents", [])
    workflow = storage.create_onboarding_workflow(data)
    create_activity_log(
        storage.db, "onboarding_started", "onboarding_workflow", workflow.id, user_id=user.id,
        description=f"Onboarding started for {employee.full_name}",
    )
    return workflow


@router.put("/{workflow_id}", response_model=OnboardingWorkflowResponse)
def update_workflow(
    workflow_id: int,
    payload: OnboardingWorkflowUpdate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    workflow = storage.get_onboarding_workflow(workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Onboarding workflow not found")
    data = payload.model_dump(exclude_unset=True)
    completing = data.get("status") == "completed" and workflow.completed_at is None
    if completing:
        data["completed_at"] = datetime.now(timezone.utc)
    workflow = storage.update_onboarding_workflow(workflow, data)
    if completing:
        create_activity_log(storage.db, "onboarding_completed", "onboarding_workflow", workflow.id, user_id=user.id)
    return workflow
