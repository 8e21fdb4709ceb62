from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..auth.router import find_available_username
from ..auth.security import get_password_hash, require_roles
from ..models.models import EmployeeAccount
from ..schemas.accounts import (
    EmployeeAccountCreate,
    EmployeeAccountUpdate,
    EmployeeAccountResponse,
    GrantAccess,
    RevokeAccess,
    ResetPassword,
)
from ..services.activity import create_activity_log
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/employee-accounts", tags=["employee-accounts"])


def _get_account(storage: Storage, account_id: int) -> EmployeeAccount:
    account = storage.get_employee_account(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Employee account not found")
    return account


@router.get("", response_model=List[EmployeeAccountResponse])
def list_accounts(storage: Storage = Depends(get_storage), _=Depends(require_roles("hr"))):
    return storage.get_employee_accounts()


@router.get("/{account_id}", response_model=EmployeeAccountResponse)
def get_account(account_id: int, storage: Storage = Depends(get_storage), _=Depends(require_roles("hr"))):
    return _get_account(storage, account_id)


@router.post("", response_model=EmployeeAccountResponse, status_code=201)
def create_account(
    payload: EmployeeAccountCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    """
    Create a portal account for an employee.

    Login stays disabled until access is granted. When no username is given one
    is derived from the employee's name (last name + first initial).
    """
    employee = storage.get_employee(payload.employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    if storage.get_employee_account_by_employee(employee.id):
        raise HTTPException(status_code=409, detail="Employee already has an account")
    if payload.username:
        username = payload.username
        if storage.get_employee_account_by_username(username):
            raise HTTPException(status_code=409, detail="Username already taken")
    else:
        username = find_available_username(storage.db, EmployeeAccount, employee.first_name, employee.last_name)

    account = storage.create_employee_account({
        "employee_id": employee.id,
        "username": username,
        "password_hash": get_password_hash(payload.password),
        "login_enabled": False,
        "requires_password_change": payload.temp_password,
    })
    create_activity_log(
        storage.db, "account_created", "employee_account", account.id, user_id=user.id,
        description=f"Portal account {username} created for {employee.full_name}",
    )
    return account


@router.put("/{account_id}", response_model=EmployeeAccountResponse)
def update_account(
    account_id: int,
    payload: EmployeeAccountUpdate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    account = _get_account(storage, account_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "username" in data and data["username"] != account.username:
        if storage.get_employee_account_by_username(data["username"]):
            raise HTTPException(status_code=409, detail="Username already taken")
    account = storage.update_employee_account(account, data)
    create_activity_log(
        storage.db, "account_updated", "employee_account", account.id, user_id=user.id,
        details={"fields": sorted(data)},
    )
    return account


@router.post("/{account_id}/grant-access", response_model=EmployeeAccountResponse)
def grant_access(
    account_id: int,
    payload: GrantAccess,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    account = _get_account(storage, account_id)
    account = storage.update_employee_account(account, {
        "login_enabled": True,
        "access_granted_at": datetime.now(timezone.utc),
        "access_granted_by": user.id,
        "temporary_until": payload.temporary_until,
        "access_notes": payload.notes,
        "revoked_at": None,
        "revoked_by": None,
    })
    create_activity_log(
        storage.db, "access_granted", "employee_account", account.id, user_id=user.id,
        details={"temporary_until": payload.temporary_until, "notes": payload.notes},
    )
    return account


@router.post("/{account_id}/revoke-access", response_model=EmployeeAccountResponse)
def revoke_access(
    account_id: int,
    payload: RevokeAccess,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    account = _get_account(storage, account_id)
    account = storage.update_employee_account(account, {
        "login_enabled": False,
        "revoked_at": datetime.now(timezone.utc),
        "revoked_by": user.id,
        "access_notes": payload.notes,
    })
    create_activity_log(
        storage.db, "access_revoked", "employee_account", account.id, user_id=user.id,
        details={"notes": payload.notes},
    )
    return account


@router.post("/{account_id}/reset-password", response_model=EmployeeAccountResponse)
def reset_password(
    account_id: int,
    payload: ResetPassword,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    account = _get_account(storage, account_id)
    account = storage.update_employee_account(account, {
        "password_hash": get_password_hash(payload.new_password),
        "requires_password_change": payload.require_password_change,
        "password_changed_at": datetime.now(timezone.utc),
    })
    create_activity_log(storage.db, "password_reset", "employee_account", account.id, user_id=user.id)
    return account
