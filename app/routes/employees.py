from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..auth.security import get_current_user, require_roles
from ..schemas.employees import EmployeeCreate, EmployeeUpdate, EmployeeResponse
from ..services.activity import create_activity_log, compute_diff
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/employees", tags=["employees"])


@router.get("", response_model=List[EmployeeResponse])
def list_employees(
    search: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    employee_type: Optional[str] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_employees(search=search, department=department, status=status, employee_type=employee_type)


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(employee_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    employee = storage.get_employee(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


@router.post("", response_model=EmployeeResponse, status_code=201)
def create_employee(
    payload: EmployeeCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    """Create an employee; a draft time card is opened for them at the same time."""
    if storage.get_employee_by_code(payload.employee_id):
        raise HTTPException(status_code=409, detail="Employee ID already exists")
    if storage.get_employee_by_email(payload.email):
        raise HTTPException(status_code=409, detail="Email already in use")
    if payload.supervisor_id is not None and not storage.get_employee(payload.supervisor_id):
        raise HTTPException(status_code=400, detail="Supervisor not found")
    data = payload.model_dump()
    if data.get("certifications") is None:
        data["certifications"] = []
    return storage.create_employee(data, user_id=user.id)


@router.put("/{employee_id}", response_model=EmployeeResponse)
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    employee = storage.get_employee(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("email") and data["email"] != employee.email:
        other = storage.get_employee_by_email(data["email"])
        if other and other.id != employee.id:
            raise HTTPException(status_code=409, detail="Email already in use")
    if data.get("supervisor_id") is not None:
        if data["supervisor_id"] == employee.id or not storage.get_employee(data["supervisor_id"]):
            raise HTTPException(status_code=400, detail="Invalid supervisor")
    before = {k: getattr(employee, k) for k in data}
    employee = storage.update_employee(employee, data)
    diff = compute_diff(before, {k: getattr(employee, k) for k in data})
    if diff:
        create_activity_log(
            storage.db, "employee_updated", "employee", employee.id, user_id=user.id,
            description=f"Updated employee {employee.full_name}", details={"changes": diff},
        )
    return employee


@router.delete("/{employee_id}", status_code=204)
def delete_employee(employee_id: int, storage: Storage = Depends(get_storage), user=Depends(require_roles("hr"))):
    employee = storage.get_employee(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    name = employee.full_name
    storage.delete_employee(employee)
    create_activity_log(
        storage.db, "employee_deleted", "employee", employee_id, user_id=user.id,
        description=f"Deleted employee {name}",
    )
    return Response(status_code=204)
