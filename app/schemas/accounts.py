import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class EmployeeAccountCreate(BaseModel):
    employee_id: int
    # Derived from the employee's name when omitted
    username: Optional[str] = Field(default=None, min_length=3)
    password: str = Field(min_length=8)
    temp_password: bool = True


class EmployeeAccountUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3)
    login_enabled: Optional[bool] = None


class GrantAccess(BaseModel):
    temporary_until: Optional[datetime] = None
    notes: Optional[str] = None


class RevokeAccess(BaseModel):
    notes: Optional[str] = None


class ResetPassword(BaseModel):
    new_password: str = Field(min_length=8)
    require_password_change: bool = True


class EmployeeAccountResponse(BaseModel):
    id: int
    employee_id: int
    username: str
    login_enabled: bool
    requires_password_change: bool
    access_granted_at: Optional[datetime] = None
    access_granted_by: Optional[uuid.UUID] = None
    temporary_until: Optional[datetime] = None
    access_notes: Optional[str] = None
    revoked_at: Optional[datetime] = None
    revoked_by: Optional[uuid.UUID] = None
    last_login_at: Optional[datetime] = None
    password_changed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
