import uuid
from datetime import datetime, date
from typing import List, Optional, Dict, Any
from enum import Enum

from pydantic import BaseModel, EmailStr, Field, model_validator


# Enums
class EmployeeType(str, Enum):
    teacher = "teacher"
    administrator = "administrator"
    support_staff = "support_staff"
    substitute = "substitute"


class EmployeeStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    on_leave = "on_leave"
    terminated = "terminated"


class LeaveStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


class AssignmentStatus(str, Enum):
    assigned = "assigned"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class DocumentStatus(str, Enum):
    pending = "pending"
    processed = "processed"
    approved = "approved"
    rejected = "rejected"


class OnboardingStatus(str, Enum):
    started = "started"
    in_progress = "in_progress"
    completed = "completed"
    stalled = "stalled"


class FormSubmissionStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"
    approved = "approved"
    rejected = "rejected"


# Employee Schemas
class EmployeeBase(BaseModel):
    employee_id: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    department: str
    position: str
    employee_type: EmployeeType
    hire_date: date
    salary: Optional[float] = None
    pay_grade: Optional[str] = None
    education_level: Optional[str] = None
    certifications: Optional[List[str]] = None
    status: EmployeeStatus = EmployeeStatus.active
    supervisor_id: Optional[int] = None
    user_id: Optional[uuid.UUID] = None


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    employee_type: Optional[EmployeeType] = None
    salary: Optional[float] = None
    pay_grade: Optional[str] = None
    education_level: Optional[str] = None
    certifications: Optional[List[str]] = None
    status: Optional[EmployeeStatus] = None
    supervisor_id: Optional[int] = None


class EmployeeResponse(EmployeeBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Leave Schemas
class LeaveTypeBase(BaseModel):
    name: str
    description: Optional[str] = None
    max_days_per_year: Optional[int] = None
    is_paid: bool = True
    requires_approval: bool = True


class LeaveTypeCreate(LeaveTypeBase):
    pass


class LeaveTypeResponse(LeaveTypeBase):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True


class LeaveRequestBase(BaseModel):
    employee_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    reason: Optional[str] = None
    substitute_required: bool = False


class LeaveRequestCreate(LeaveRequestBase):
    pass


class LeaveRequestUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    status: Optional[LeaveStatus] = None
    substitute_required: Optional[bool] = None
    substitute_assigned: Optional[int] = None


class LeaveRequestResponse(LeaveRequestBase):
    id: int
    status: LeaveStatus
    approved_by: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    substitute_assigned: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Substitute Assignment Schemas
class SubstituteAssignmentCreate(BaseModel):
    leave_request_id: int
    substitute_employee_id: int
    assigned_date: date
    notes: Optional[str] = None


class SubstituteAssignmentUpdate(BaseModel):
    status: Optional[AssignmentStatus] = None
    notes: Optional[str] = None


class SubstituteAssignmentResponse(BaseModel):
    id: int
    leave_request_id: int
    substitute_employee_id: int
    assigned_date: date
    status: AssignmentStatus
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Payroll Schemas
class PayrollRecordCreate(BaseModel):
    employee_id: int
    pay_period_start: date
    pay_period_end: date
    gross_pay: float = Field(ge=0)
    deductions: float = Field(default=0, ge=0)
    net_pay: Optional[float] = None
    hours_worked: Optional[float] = None
    overtime_hours: Optional[float] = None
    payroll_details: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _period_order(self):
        if self.pay_period_end < self.pay_period_start:
            raise ValueError("pay_period_end must not be before pay_period_start")
        return self


class PayrollRecordResponse(BaseModel):
    id: int
    employee_id: int
    pay_period_start: date
    pay_period_end: date
    gross_pay: float
    deductions: float
    net_pay: float
    hours_worked: Optional[float] = None
    overtime_hours: Optional[float] = None
    payroll_details: Optional[Dict[str, Any]] = None
    processed: bool
    processed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PayrollSummary(BaseModel):
    record_count: int
    total_gross: float
    total_deductions: float
    total_net: float
    processed_count: int
    unprocessed_count: int


# Document Schemas
class DocumentBase(BaseModel):
    employee_id: Optional[int] = None
    document_type: str
    file_name: str
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    expiration_date: Optional[date] = None


class DocumentCreate(DocumentBase):
    pass


class DocumentUpdate(BaseModel):
    document_type: Optional[str] = None
    file_name: Optional[str] = None
    file_url: Optional[str] = None
    status: Optional[DocumentStatus] = None
    expiration_date: Optional[date] = None


class DocumentResponse(DocumentBase):
    id: int
    status: DocumentStatus
    uploaded_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Onboarding Schemas
class OnboardingWorkflowCreate(BaseModel):
    employee_id: int
    current_step: Optional[str] = None
    required_documents: Optional[List[str]] = None
    assigned_to: Optional[uuid.UUID] = None
    start_date: Optional[date] = None
    target_completion_date: Optional[date] = None
    notes: Optional[str] = None


class OnboardingWorkflowUpdate(BaseModel):
    status: Optional[OnboardingStatus] = None
    current_step: Optional[str] = None
    completed_steps: Optional[List[str]] = None
    required_documents: Optional[List[str]] = None
    submitted_documents: Optional[List[str]] = None
    assigned_to: Optional[uuid.UUID] = None
    target_completion_date: Optional[date] = None
    notes: Optional[str] = None


class OnboardingWorkflowResponse(BaseModel):
    id: int
    employee_id: int
    status: OnboardingStatus
    current_step: Optional[str] = None
    completed_steps: Optional[List[str]] = None
    required_documents: Optional[List[str]] = None
    submitted_documents: Optional[List[str]] = None
    assigned_to: Optional[uuid.UUID] = None
    start_date: Optional[date] = None
    target_completion_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OnboardingFormCreate(BaseModel):
    employee_id: int
    form_type: str
    form_data: Dict[str, Any] = {}


class OnboardingFormUpdate(BaseModel):
    form_type: Optional[str] = None
    form_data: Optional[Dict[str, Any]] = None


class OnboardingFormReview(BaseModel):
    approve: bool
    notes: Optional[str] = None


class OnboardingFormResponse(BaseModel):
    id: int
    employee_id: int
    form_type: str
    form_data: Optional[Dict[str, Any]] = None
    status: FormSubmissionStatus
    submitted_at: Optional[datetime] = None
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Retiree Schemas
class RetireeBase(BaseModel):
    first_name: str
    last_name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    retirement_date: date
    years_of_service: Optional[int] = None
    last_position: Optional[str] = None
    department: Optional[str] = None
    pension_plan: Optional[str] = None
    notes: Optional[str] = None


class RetireeCreate(RetireeBase):
    pass


class RetireeUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    retirement_date: Optional[date] = None
    years_of_service: Optional[int] = None
    last_position: Optional[str] = None
    department: Optional[str] = None
    pension_plan: Optional[str] = None
    notes: Optional[str] = None


class RetireeResponse(RetireeBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Dashboard / activity
class ActivityLogResponse(BaseModel):
    id: int
    user_id: Optional[uuid.UUID] = None
    action: str
    entity_type: str
    entity_id: Optional[int] = None
    description: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    total_employees: int
    teachers: int
    support_staff: int
    administrators: int
    substitutes: int
    pending_onboarding: int
    pending_leave_requests: int
    pending_documents: int
    todays_substitute_assignments: int
