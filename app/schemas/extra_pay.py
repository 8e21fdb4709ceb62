import uuid
from datetime import datetime, date
from typing import List, Optional, Dict, Any
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class ContractStatus(str, Enum):
    draft = "draft"
    active = "active"
    inactive = "inactive"
    expired = "expired"


class RequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    paid = "paid"


class TimelineEntity(str, Enum):
    contract = "contract"
    request = "request"


# Contract Schemas
class ContractBase(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    amount: float = Field(ge=0)
    start_date: date
    end_date: date
    status: ContractStatus = ContractStatus.active
    contract_type: Optional[str] = None
    department: Optional[str] = None
    requirements: Optional[str] = None
    document_url: Optional[str] = None


class ContractCreate(ContractBase):
    @model_validator(mode="after")
    def _date_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ContractUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ContractStatus] = None
    contract_type: Optional[str] = None
    department: Optional[str] = None
    requirements: Optional[str] = None
    document_url: Optional[str] = None


class ContractResponse(ContractBase):
    id: int
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Request Schemas
class ExtraPayRequestCreate(BaseModel):
    contract_id: Optional[int] = None
    employee_id: int
    amount: float = Field(gt=0)
    hours_worked: Optional[float] = None
    date_worked: Optional[date] = None
    description: str = Field(min_length=1)
    notes: Optional[str] = None
    supporting_documents: Optional[List[str]] = None

    @field_validator("description")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description is required")
        return v


class ExtraPayRequestResponse(BaseModel):
    id: int
    contract_id: Optional[int] = None
    employee_id: int
    requested_by: Optional[uuid.UUID] = None
    amount: float
    hours_worked: Optional[float] = None
    date_worked: Optional[date] = None
    description: str
    status: RequestStatus
    approved_by: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[uuid.UUID] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    supporting_documents: Optional[List[str]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApproveAction(BaseModel):
    comments: Optional[str] = None


class RejectRequestAction(BaseModel):
    reason: Optional[str] = None


# Timeline
class TimelineEvent(BaseModel):
    id: int
    entity_type: TimelineEntity
    entity_id: int
    event_type: str
    event_description: Optional[str] = None
    user_id: Optional[uuid.UUID] = None
    user_role: Optional[str] = None
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime

    class Config:
        from_attributes = True


class ContractDetail(ContractResponse):
    timeline: List[TimelineEvent] = []


class ExtraPayRequestDetail(ExtraPayRequestResponse):
    employee_name: Optional[str] = None
    contract_title: Optional[str] = None
    timeline: List[TimelineEvent] = []


class StatusCount(BaseModel):
    status: str
    count: int


class RecentRequest(BaseModel):
    id: int
    description: str
    amount: float
    status: str
    created_at: datetime
    employee_name: Optional[str] = None


class ExtraPayDashboardStats(BaseModel):
    contract_stats: List[StatusCount]
    request_stats: List[StatusCount]
    recent_requests: List[RecentRequest]


# Workflow Template Schemas
class WorkflowStep(BaseModel):
    role: str
    title: str
    required: bool = True
    order: int = Field(ge=1)


class WorkflowTemplateBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    steps: List[WorkflowStep] = []
    is_active: bool = True


class WorkflowTemplateCreate(WorkflowTemplateBase):
    pass


class WorkflowTemplateUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    steps: Optional[List[WorkflowStep]] = None
    is_active: Optional[bool] = None


class WorkflowTemplateResponse(WorkflowTemplateBase):
    id: int
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
