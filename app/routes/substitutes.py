from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user, require_roles
from ..schemas.employees import (
    EmployeeResponse,
    SubstituteAssignmentCreate,
    SubstituteAssignmentUpdate,
    SubstituteAssignmentResponse,
)
from ..services.activity import create_activity_log
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/substitutes", tags=["substitutes"])


@router.get("/assignments", response_model=List[SubstituteAssignmentResponse])
def list_assignments(
    assigned_date: Optional[date] = Query(None, alias="date"),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_substitute_assignments(assigned_date)


@router.get("/available", response_model=List[EmployeeResponse])
def available_substitutes(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_available_substitutes()


@router.post("/assignments", response_model=SubstituteAssignmentResponse, status_code=201)
def create_assignment(
    payload: SubstituteAssignmentCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr", "secretary")),
):
    """Assign a substitute to a leave request and record it on the request."""
    leave = storage.get_leave_request(payload.leave_request_id)
    if not leave:
        raise HTTPException(status_code=404, detail="Leave request not found")
    substitute = storage.get_employee(payload.substitute_employee_id)
    if not substitute:
        raise HTTPException(status_code=404, detail="Substitute not found")
    if substitute.employee_type != "substitute":
        raise HTTPException(status_code=400, detail="Employee is not a substitute")

    assignment = storage.create_substitute_assignment(payload.model_dump())
    storage.update_leave_request(leave, {"substitute_assigned": substitute.id})
    create_activity_log(
        storage.db, "substitute_assigned", "substitute_assignment", assignment.id, user_id=user.id,
        description=f"{substitute.full_name} assigned for {assignment.assigned_date}",
        details={"leave_request_id": leave.id},
    )
    return assignment


@router.put("/assignments/{assignment_id}", response_model=SubstituteAssignmentResponse)
def update_assignment(
    assignment_id: int,
    payload: SubstituteAssignmentUpdate,
    storage: Storage = Depends(get_storage),
    _=Depends(require_roles("hr", "secretary")),
):
    assignment = storage.get_substitute_assignment(assignment_id)
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return storage.update_substitute_assignment(assignment, payload.model_dump(exclude_unset=True))
