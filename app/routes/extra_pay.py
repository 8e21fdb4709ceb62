from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..auth.security import get_current_user, primary_role, require_roles
from ..schemas.extra_pay import (
    ContractStatus,
    RequestStatus,
    TimelineEntity,
    ContractCreate,
    ContractUpdate,
    ContractResponse,
    ContractDetail,
    ExtraPayRequestCreate,
    ExtraPayRequestResponse,
    ExtraPayRequestDetail,
    ApproveAction,
    RejectRequestAction,
    TimelineEvent,
    ExtraPayDashboardStats,
    WorkflowTemplateCreate,
    WorkflowTemplateUpdate,
    WorkflowTemplateResponse,
)
from ..services import extra_pay_timeline as timeline
from ..services.activity import create_activity_log
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/extra-pay", tags=["extra-pay"])


def _sorted_steps(steps) -> list:
    return sorted((s.model_dump() for s in steps), key=lambda s: s["order"])


# ---------- CONTRACTS ----------
@router.get("/contracts", response_model=List[ContractResponse])
def list_contracts(
    status: Optional[ContractStatus] = Query(None),
    search: Optional[str] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_extra_pay_contracts(status=status.value if status else None, search=search)


@router.get("/contracts/{contract_id}", response_model=ContractDetail)
def get_contract(contract_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    contract = storage.get_extra_pay_contract(contract_id)
    if not contract:
        raise HTTPException(status_code=404, detail="Contract not found")
    detail = ContractDetail.model_validate(contract)
    detail.timeline = [
        TimelineEvent.model_validate(e) for e in timeline.get_entity_timeline(storage.db, "contract", contract.id)
    ]
    return detail


@router.post("/contracts", response_model=ContractResponse, status_code=201)
def create_contract(
    payload: ContractCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr", "payroll")),
):
    contract = storage.create_extra_pay_contract({**payload.model_dump(), "created_by": user.id})
    timeline.record_contract_created(storage.db, contract, user_id=user.id, user_role=primary_role(user))
    storage.db.refresh(contract)
    return contract


@router.put("/contracts/{contract_id}", response_model=ContractResponse)
def update_contract(
    contract_id: int,
    payload: ContractUpdate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr", "payroll")),
):
    contract = storage.get_extra_pay_contract(contract_id)
    if not contract:
        raise HTTPException(status_code=404, detail="Contract not found")
    data = payload.model_dump(exclude_unset=True)
    start = data.get("start_date") or contract.start_date
    end = data.get("end_date") or contract.end_date
    if end < start:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    previous = contract.status
    contract = storage.update_extra_pay_contract(contract, data)
    if contract.status != previous:
        timeline.record_contract_status_change(
            storage.db, contract.id, previous, contract.status, user_id=user.id, user_role=primary_role(user)
        )
        storage.db.refresh(contract)
    return contract


@router.delete("/contracts/{contract_id}")
def delete_contract(contract_id: int, storage: Storage = Depends(get_storage), user=Depends(require_roles("hr", "payroll"))):
    if storage.get_extra_pay_requests(contract_id=contract_id):
        raise HTTPException(status_code=409, detail="Contract has requests and cannot be deleted")
    if not storage.delete_extra_pay_contract(contract_id):
        raise HTTPException(status_code=404, detail="Contract not found")
    create_activity_log(storage.db, "extra_pay_contract_deleted", "extra_pay_contract", contract_id, user_id=user.id)
    return {"message": "Contract deleted successfully"}


# ---------- REQUESTS ----------
def _request_detail(storage: Storage, request) -> ExtraPayRequestDetail:
    detail = ExtraPayRequestDetail.model_validate(request)
    employee = storage.get_employee(request.employee_id)
    detail.employee_name = employee.full_name if employee else None
    if request.contract_id:
        contract = storage.get_extra_pay_contract(request.contract_id)
        detail.contract_title = contract.title if contract else None
    detail.timeline = [
        TimelineEvent.model_validate(e) for e in timeline.get_entity_timeline(storage.db, "request", request.id)
    ]
    return detail


def _get_request(storage: Storage, request_id: int):
    request = storage.get_extra_pay_request(request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    return request


def _require_status(request, expected: str, action: str):
    if request.status != expected:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot {action} a request with status '{request.status}'",
        )


@router.get("/requests", response_model=List[ExtraPayRequestResponse])
def list_requests(
    status: Optional[RequestStatus] = Query(None),
    contract_id: Optional[int] = Query(None),
    employee_id: Optional[int] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_extra_pay_requests(
        status=status.value if status else None,
        contract_id=contract_id,
        employee_id=employee_id,
    )


@router.get("/requests/{request_id}", response_model=ExtraPayRequestDetail)
def get_request(request_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return _request_detail(storage, _get_request(storage, request_id))


@router.post("/requests", response_model=ExtraPayRequestResponse, status_code=201)
def create_request(
    payload: ExtraPayRequestCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(get_current_user),
):
    if not storage.get_employee(payload.employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    if payload.contract_id is not None:
        contract = storage.get_extra_pay_contract(payload.contract_id)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        if contract.status != "active":
            raise HTTPException(status_code=409, detail="Contract is not active")
    data = payload.model_dump()
    if data.get("supporting_documents") is None:
        data["supporting_documents"] = []
    request = storage.create_extra_pay_request({**data, "requested_by": user.id})
    timeline.record_request_created(storage.db, request, user_id=user.id, user_role=primary_role(user))
    storage.db.refresh(request)
    return request


@router.patch("/requests/{request_id}/approve", response_model=ExtraPayRequestResponse)
def approve_request(
    request_id: int,
    payload: Optional[ApproveAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr", "payroll")),
):
    request = _get_request(storage, request_id)
    _require_status(request, "pending", "approve")
    data = {"status": "approved"}
    if request.approved_at is None:
        data.update(approved_by=user.id, approved_at=datetime.now(timezone.utc))
    request = storage.update_extra_pay_request(request, data)
    timeline.record_request_approved(
        storage.db, request.id, user_id=user.id, user_role=primary_role(user),
        comments=payload.comments if payload else None,
    )
    storage.db.refresh(request)
    return request


@router.patch("/requests/{request_id}/reject", response_model=ExtraPayRequestResponse)
def reject_request(
    request_id: int,
    payload: Optional[RejectRequestAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr", "payroll")),
):
    reason = (payload.reason or "").strip() if payload else ""
    if not reason:
        raise HTTPException(status_code=400, detail="Rejection reason is required")
    request = _get_request(storage, request_id)
    _require_status(request, "pending", "reject")
    data = {"status": "rejected"}
    if request.rejected_at is None:
        data.update(rejected_by=user.id, rejected_at=datetime.now(timezone.utc), rejection_reason=reason)
    request = storage.update_extra_pay_request(request, data)
    timeline.record_request_rejected(storage.db, request.id, reason, user_id=user.id, user_role=primary_role(user))
    storage.db.refresh(request)
    return request


@router.patch("/requests/{request_id}/mark-paid", response_model=ExtraPayRequestResponse)
def mark_request_paid(request_id: int, storage: Storage = Depends(get_storage), user=Depends(require_roles("payroll"))):
    request = _get_request(storage, request_id)
    _require_status(request, "approved", "mark as paid")
    data = {"status": "paid"}
    if request.paid_at is None:
        data["paid_at"] = datetime.now(timezone.utc)
    request = storage.update_extra_pay_request(request, data)
    timeline.record_request_paid(storage.db, request.id, user_id=user.id, user_role=primary_role(user))
    storage.db.refresh(request)
    return request


# ---------- TIMELINE / DASHBOARD ----------
@router.get("/timeline/{entity_type}/{entity_id}", response_model=List[TimelineEvent])
def get_timeline(
    entity_type: TimelineEntity,
    entity_id: int,
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return timeline.get_entity_timeline(storage.db, entity_type.value, entity_id)


@router.get("/dashboard-stats", response_model=ExtraPayDashboardStats)
def dashboard_stats(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_extra_pay_dashboard_stats()


# ---------- WORKFLOW TEMPLATES ----------
@router.get("/workflow-templates", response_model=List[WorkflowTemplateResponse])
def list_workflow_templates(
    category: Optional[str] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_workflow_templates(category)


@router.get("/workflow-templates/{template_id}", response_model=WorkflowTemplateResponse)
def get_workflow_template(template_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    template = storage.get_workflow_template(template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Workflow template not found")
    return template


@router.post("/workflow-templates", response_model=WorkflowTemplateResponse, status_code=201)
def create_workflow_template(
    payload: WorkflowTemplateCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    data = payload.model_dump(exclude={"steps"})
    data["steps"] = _sorted_steps(payload.steps)
    template = storage.create_workflow_template({**data, "created_by": user.id})
    create_activity_log(
        storage.db, "workflow_template_created", "workflow_template", template.id, user_id=user.id,
        description=f"Workflow template {template.name} created",
    )
    return template


@router.put("/workflow-templates/{template_id}", response_model=WorkflowTemplateResponse)
def update_workflow_template(
    template_id: int,
    payload: WorkflowTemplateUpdate,
    storage: Storage = Depends(get_storage),
    _=Depends(require_roles("hr")),
):
    template = storage.get_workflow_template(template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Workflow template not found")
    data = payload.model_dump(exclude_unset=True, exclude={"steps"})
    if payload.steps is not None:
        data["steps"] = _sorted_steps(payload.steps)
    return storage.update_workflow_template(template, data)


@router.delete("/workflow-templates/{template_id}", status_code=204)
def delete_workflow_template(template_id: int, storage: Storage = Depends(get_storage), user=Depends(require_roles("hr"))):
    if not storage.delete_workflow_template(template_id):
        raise HTTPException(status_code=404, detail="Workflow template not found")
    create_activity_log(storage.db, "workflow_template_deleted", "workflow_template", template_id, user_id=user.id)
    return Response(status_code=204)
