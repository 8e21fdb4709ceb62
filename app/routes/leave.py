from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..auth.security import get_current_user, require_roles
from ..schemas.employees import (
    LeaveTypeCreate,
    LeaveTypeResponse,
    LeaveRequestCreate,
    LeaveRequestUpdate,
    LeaveRequestResponse,
)
from ..services.activity import create_activity_log
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api", tags=["leave"])

DECIDED_STATUSES = ("approved", "rejected")


# ---------- LEAVE TYPES ----------
@router.get("/leave-types", response_model=List[LeaveTypeResponse])
def list_leave_types(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_leave_types()


@router.post("/leave-types", response_model=LeaveTypeResponse, status_code=201)
def create_leave_type(payload: LeaveTypeCreate, storage: Storage = Depends(get_storage), _=Depends(require_roles("hr"))):
    if storage.get_leave_type_by_name(payload.name):
        raise HTTPException(status_code=409, detail="Leave type already exists")
    return storage.create_leave_type(payload.model_dump())


# ---------- LEAVE REQUESTS ----------
@router.get("/leave-requests", response_model=List[LeaveRequestResponse])
def list_leave_requests(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_leave_requests()


@router.get("/leave-requests/pending", response_model=List[LeaveRequestResponse])
def list_pending_leave_requests(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_leave_requests(status="pending")


@router.get("/leave-requests/employee/{employee_id}", response_model=List[LeaveRequestResponse])
def list_employee_leave_requests(employee_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_leave_requests_by_employee(employee_id)


@router.post("/leave-requests", response_model=LeaveRequestResponse, status_code=201)
def create_leave_request(
    payload: LeaveRequestCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(get_current_user),
):
    if payload.end_date < payload.start_date:
        raise HTTPException(status_code=400, detail="End date cannot be before start date")
    employee = storage.get_employee(payload.employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    if not storage.get_leave_type(payload.leave_type_id):
        raise HTTPException(status_code=404, detail="Leave type not found")
    request = storage.create_leave_request(payload.model_dump())
    create_activity_log(
        storage.db, "leave_requested", "leave_request", request.id, user_id=user.id,
        description=f"Leave requested for {employee.full_name} ({request.start_date} - {request.end_date})",
    )
    return request


@router.put("/leave-requests/{request_id}", response_model=LeaveRequestResponse)
def update_leave_request(
    request_id: int,
    payload: LeaveRequestUpdate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    request = storage.get_leave_request(request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Leave request not found")
    data = payload.model_dump(exclude_unset=True)
    start = data.get("start_date") or request.start_date
    end = data.get("end_date") or request.end_date
    if end < start:
        raise HTTPException(status_code=400, detail="End date cannot be before start date")

    new_status = data["status"].value if data.get("status") else None
    decided = new_status in DECIDED_STATUSES and new_status != request.status
    if decided:
        data["approved_by"] = user.id
        data["approved_at"] = datetime.now(timezone.utc)

    request = storage.update_leave_request(request, data)
    if decided:
        create_activity_log(
            storage.db, f"leave_{new_status}", "leave_request", request.id, user_id=user.id,
            description=f"Leave request {new_status}",
        )
    return request
