import uuid
from datetime import datetime
from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field


class TimeCardStatus(str, Enum):
    draft = "draft"
    secretary_submitted = "secretary_submitted"
    employee_approved = "employee_approved"
    admin_approved = "admin_approved"
    payroll_processed = "payroll_processed"
    rejected = "rejected"


class ApprovalStage(str, Enum):
    secretary = "secretary"
    employee = "employee"
    administrator = "administrator"
    payroll = "payroll"
    completed = "completed"


# Time Card Schemas
class TimeCardBase(BaseModel):
    employee_id: int
    date: datetime
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    total_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    notes: Optional[str] = None


class TimeCardCreate(TimeCardBase):
    pass


class TimeCardUpdate(BaseModel):
    date: Optional[datetime] = None
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    total_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    status: Optional[TimeCardStatus] = None
    current_approval_stage: Optional[ApprovalStage] = None
    notes: Optional[str] = None
    secretary_notes: Optional[str] = None
    employee_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    payroll_notes: Optional[str] = None


class TimeCardResponse(TimeCardBase):
    id: int
    status: TimeCardStatus
    current_approval_stage: ApprovalStage
    secretary_notes: Optional[str] = None
    employee_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    payroll_notes: Optional[str] = None
    submitted_by: Optional[uuid.UUID] = None
    approved_by_employee: Optional[uuid.UUID] = None
    approved_by_admin: Optional[uuid.UUID] = None
    processed_by_payroll: Optional[uuid.UUID] = None
    submitted_at: Optional[datetime] = None
    employee_approved_at: Optional[datetime] = None
    admin_approved_at: Optional[datetime] = None
    payroll_processed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StageAction(BaseModel):
    notes: Optional[str] = None


# Substitute Time Card Schemas
class SubstituteTimeCardBase(BaseModel):
    substitute_id: int
    assignment_id: Optional[int] = None
    date: datetime
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    total_hours: Optional[float] = None
    daily_rate: Optional[float] = Field(default=None, ge=0)
    total_pay: Optional[float] = None
    notes: Optional[str] = None


class SubstituteTimeCardCreate(SubstituteTimeCardBase):
    pass


class SubstituteTimeCardUpdate(BaseModel):
    date: Optional[datetime] = None
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    total_hours: Optional[float] = None
    daily_rate: Optional[float] = None
    total_pay: Optional[float] = None
    notes: Optional[str] = None
    secretary_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    payroll_notes: Optional[str] = None


class SubstituteTimeCardResponse(SubstituteTimeCardBase):
    id: int
    status: TimeCardStatus
    current_approval_stage: ApprovalStage
    secretary_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    payroll_notes: Optional[str] = None
    submitted_by: Optional[uuid.UUID] = None
    approved_by_admin: Optional[uuid.UUID] = None
    processed_by_payroll: Optional[uuid.UUID] = None
    submitted_at: Optional[datetime] = None
    admin_approved_at: Optional[datetime] = None
    payroll_processed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
