import uuid
from datetime import datetime, date
from typing import List, Optional, Dict, Any
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class PafStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"
    under_review = "under_review"
    approved = "approved"
    denied = "denied"


class StepStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ApprovalDecision(str, Enum):
    approve = "approve"
    reject = "reject"


class PafForm(BaseModel):
    """Fields pulled out of the online PAF form; the rest of the form is stored as-is."""

    employee_id: Optional[int] = Field(default=None, alias="employeeId")
    employee_name: Optional[str] = Field(default=None, alias="employeeName")
    position_title: str = Field(alias="positionTitle")
    effective_date: Optional[date] = Field(default=None, alias="effectiveDate")
    paf_type: str = Field(alias="pafType")
    position_type: Optional[str] = Field(default=None, alias="positionType")
    position_category: Optional[str] = Field(default=None, alias="positionCategory")
    reason: Optional[str] = None
    justification: str

    class Config:
        populate_by_name = True
        extra = "allow"

    @field_validator("position_title", "paf_type", "justification")
    @classmethod
    def _required_text(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("field is required")
        return v.strip()

    @field_validator("employee_id", "effective_date", mode="before")
    @classmethod
    def _empty_as_none(cls, v):
        return None if v == "" else v


class PafSubmissionUpdate(BaseModel):
    employee_name: Optional[str] = None
    position_title: Optional[str] = None
    effective_date: Optional[date] = None
    paf_type: Optional[str] = None
    position_type: Optional[str] = None
    position_category: Optional[str] = None
    reason: Optional[str] = None
    justification: Optional[str] = None
    form_data: Optional[Dict[str, Any]] = None


class PafApprovalStepResponse(BaseModel):
    id: int
    submission_id: int
    step: int
    approver_role: str
    status: StepStatus
    approver_user_id: Optional[uuid.UUID] = None
    signature: Optional[str] = None
    comments: Optional[str] = None
    signed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PafSubmissionResponse(BaseModel):
    id: int
    submitted_by: Optional[uuid.UUID] = None
    employee_id: Optional[int] = None
    workflow_template_id: Optional[int] = None
    status: PafStatus
    current_step: int
    form_data: Optional[Dict[str, Any]] = None
    employee_name: Optional[str] = None
    position_title: str
    effective_date: Optional[date] = None
    paf_type: str
    position_type: Optional[str] = None
    position_category: Optional[str] = None
    reason: Optional[str] = None
    justification: str
    requesting_admin_signature: Optional[Dict[str, Any]] = None
    business_official_signature: Optional[Dict[str, Any]] = None
    superintendent_signature: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PafTimelineEvent(BaseModel):
    id: int
    submission_id: int
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


class PafSubmitResponse(BaseModel):
    success: bool
    submission: PafSubmissionResponse
    message: str


class PafApproveRequest(BaseModel):
    step: int = Field(ge=1)
    action: ApprovalDecision
    signature: Optional[str] = None
    comments: Optional[str] = None


class PafWorkflowStep(BaseModel):
    role: str
    title: str
    required: bool
    order: int


class PafWorkflowTemplate(BaseModel):
    id: int
    name: str
    description: str
    steps: List[PafWorkflowStep]
    is_default: bool
