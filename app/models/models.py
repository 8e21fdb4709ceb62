import uuid
from datetime import datetime, date
from typing import Optional

from sqlalchemy import (
    Column,
    String,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Table,
    Integer,
    Numeric,
    JSON,
    UniqueConstraint,
    Text,
    Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ..db import Base


def uuid_pk() -> Mapped[uuid.UUID]:
    return mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)


def int_pk() -> Mapped[int]:
    return mapped_column(Integer, primary_key=True, autoincrement=True)


# Association table for many-to-many User<->Role
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", UUID(as_uuid=True), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    UniqueConstraint("user_id", "role_id", name="uq_user_role"),
)


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = uuid_pk()
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255))

    users = relationship("User", secondary=user_roles, back_populates="roles")


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = uuid_pk()
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    roles = relationship("Role", secondary=user_roles, back_populates="users")

    @property
    def role_names(self) -> list:
        return sorted(r.name for r in self.roles)


# =====================
# Core HR
# =====================

class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = int_pk()
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"))
    employee_id: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)  # District employee number
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    address: Mapped[Optional[str]] = mapped_column(Text)
    emergency_contact: Mapped[Optional[str]] = mapped_column(String(255))
    emergency_phone: Mapped[Optional[str]] = mapped_column(String(50))
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    employee_type: Mapped[str] = mapped_column(String(50), nullable=False)  # teacher|administrator|support_staff|substitute
    hire_date: Mapped[date] = mapped_column(Date, nullable=False)
    salary: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    pay_grade: Mapped[Optional[str]] = mapped_column(String(20))
    education_level: Mapped[Optional[str]] = mapped_column(String(100))
    certifications: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(50), default="active")  # active|inactive|on_leave|terminated
    supervisor_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_employee_type_status", "employee_type", "status"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class LeaveType(Base):
    __tablename__ = "leave_types"

    id: Mapped[int] = int_pk()
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    max_days_per_year: Mapped[Optional[int]] = mapped_column(Integer)
    is_paid: Mapped[bool] = mapped_column(Boolean, default=True)
    requires_approval: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id: Mapped[int] = int_pk()
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type_id: Mapped[int] = mapped_column(Integer, ForeignKey("leave_types.id"), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(50), default="pending")  # pending|approved|rejected|cancelled
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    substitute_required: Mapped[bool] = mapped_column(Boolean, default=False)
    substitute_assigned: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class SubstituteAssignment(Base):
    __tablename__ = "substitute_assignments"

    id: Mapped[int] = int_pk()
    leave_request_id: Mapped[int] = mapped_column(Integer, ForeignKey("leave_requests.id"), nullable=False)
    substitute_employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False)
    assigned_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="assigned")  # assigned|confirmed|completed|cancelled
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class PayrollRecord(Base):
    __tablename__ = "payroll_records"

    id: Mapped[int] = int_pk()
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    pay_period_start: Mapped[date] = mapped_column(Date, nullable=False)
    pay_period_end: Mapped[date] = mapped_column(Date, nullable=False)
    gross_pay: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    deductions: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    net_pay: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    hours_worked: Mapped[Optional[float]] = mapped_column(Numeric(5, 2))
    overtime_hours: Mapped[Optional[float]] = mapped_column(Numeric(5, 2), default=0)
    payroll_details: Mapped[Optional[dict]] = mapped_column(JSON)
    processed: Mapped[bool] = mapped_column(Boolean, default=False)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[int] = int_pk()
    employee_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id"), index=True)
    document_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[Optional[str]] = mapped_column(String(1000))
    file_size: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(50), default="pending")  # pending|processed|approved|rejected
    expiration_date: Mapped[Optional[date]] = mapped_column(Date)
    uploaded_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class OnboardingWorkflow(Base):
    __tablename__ = "onboarding_workflows"

    id: Mapped[int] = int_pk()
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(50), default="started")  # started|in_progress|completed|stalled
    current_step: Mapped[Optional[str]] = mapped_column(String(100))
    completed_steps: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    required_documents: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    submitted_documents: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    assigned_to: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    target_completion_date: Mapped[Optional[date]] = mapped_column(Date)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class OnboardingFormSubmission(Base):
    __tablename__ = "onboarding_form_submissions"

    id: Mapped[int] = int_pk()
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    form_type: Mapped[str] = mapped_column(String(100), nullable=False)  # w4|i9|direct_deposit|emergency_contact|...
    form_data: Mapped[Optional[dict]] = mapped_column(JSON, default=dict)
    status: Mapped[str] = mapped_column(String(50), default="draft")  # draft|submitted|approved|rejected
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    review_notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class Retiree(Base):
    __tablename__ = "retirees"

    id: Mapped[int] = int_pk()
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    retirement_date: Mapped[date] = mapped_column(Date, nullable=False)
    years_of_service: Mapped[Optional[int]] = mapped_column(Integer)
    last_position: Mapped[Optional[str]] = mapped_column(String(100))
    department: Mapped[Optional[str]] = mapped_column(String(100))
    pension_plan: Mapped[Optional[str]] = mapped_column(String(100))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id: Mapped[int] = int_pk()
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"))
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[Optional[int]] = mapped_column(Integer)
    description: Mapped[Optional[str]] = mapped_column(Text)
    # "metadata" is reserved on declarative classes
    details: Mapped[Optional[dict]] = mapped_column("metadata", JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, index=True)

    __table_args__ = (
        Index("idx_activity_entity", "entity_type", "entity_id"),
    )


# =====================
# Time cards
# =====================

class TimeCard(Base):
    __tablename__ = "time_cards"

    id: Mapped[int] = int_pk()
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    clock_in: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    clock_out: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    break_start: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    break_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    total_hours: Mapped[Optional[float]] = mapped_column(Numeric(5, 2), default=0)
    overtime_hours: Mapped[Optional[float]] = mapped_column(Numeric(5, 2), default=0)
    # draft|secretary_submitted|employee_approved|admin_approved|payroll_processed|rejected
    status: Mapped[str] = mapped_column(String(50), default="draft")
    # secretary|employee|administrator|payroll|completed
    current_approval_stage: Mapped[str] = mapped_column(String(50), default="secretary")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    secretary_notes: Mapped[Optional[str]] = mapped_column(Text)
    employee_notes: Mapped[Optional[str]] = mapped_column(Text)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text)
    payroll_notes: Mapped[Optional[str]] = mapped_column(Text)
    submitted_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    approved_by_employee: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    approved_by_admin: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    processed_by_payroll: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    employee_approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    admin_approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    payroll_processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_time_card_stage", "current_approval_stage", "status"),
    )


class SubstituteTimeCard(Base):
    __tablename__ = "substitute_time_cards"

    id: Mapped[int] = int_pk()
    substitute_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    assignment_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("substitute_assignments.id"))
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    clock_in: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    clock_out: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    total_hours: Mapped[Optional[float]] = mapped_column(Numeric(5, 2), default=0)
    daily_rate: Mapped[Optional[float]] = mapped_column(Numeric(8, 2))
    total_pay: Mapped[Optional[float]] = mapped_column(Numeric(8, 2))
    # draft|secretary_submitted|admin_approved|payroll_processed|rejected
    status: Mapped[str] = mapped_column(String(50), default="draft")
    # secretary|administrator|payroll|completed
    current_approval_stage: Mapped[str] = mapped_column(String(50), default="secretary")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    secretary_notes: Mapped[Optional[str]] = mapped_column(Text)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text)
    payroll_notes: Mapped[Optional[str]] = mapped_column(Text)
    submitted_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    approved_by_admin: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    processed_by_payroll: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    admin_approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    payroll_processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


# =====================
# Extra pay
# =====================

class ExtraPayContract(Base):
    __tablename__ = "extra_pay_contracts"

    id: Mapped[int] = int_pk()
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    amount: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="active")  # draft|active|inactive|expired
    contract_type: Mapped[Optional[str]] = mapped_column(String(100))  # coaching|tutoring|club_advisor|...
    department: Mapped[Optional[str]] = mapped_column(String(100))
    requirements: Mapped[Optional[str]] = mapped_column(Text)
    document_url: Mapped[Optional[str]] = mapped_column(String(1000))
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class ExtraPayRequest(Base):
    __tablename__ = "extra_pay_requests"

    id: Mapped[int] = int_pk()
    contract_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("extra_pay_contracts.id"), index=True)
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    requested_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    amount: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    hours_worked: Mapped[Optional[float]] = mapped_column(Numeric(5, 2))
    date_worked: Mapped[Optional[date]] = mapped_column(Date)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="pending")  # pending|approved|rejected|paid
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    rejected_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    supporting_documents: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class ExtraPayTimestamp(Base):
    __tablename__ = "extra_pay_timestamps"

    id: Mapped[int] = int_pk()
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)  # contract|request
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)  # created|status_change|approved|rejected|paid
    event_description: Mapped[Optional[str]] = mapped_column(Text)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"))
    user_role: Mapped[Optional[str]] = mapped_column(String(50))
    from_status: Mapped[Optional[str]] = mapped_column(String(50))
    to_status: Mapped[Optional[str]] = mapped_column(String(50))
    details: Mapped[Optional[dict]] = mapped_column("metadata", JSON)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (
        Index("idx_extra_pay_ts_entity", "entity_type", "entity_id"),
    )


class WorkflowTemplate(Base):
    __tablename__ = "workflow_templates"

    id: Mapped[int] = int_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(String(100))  # extra_pay|paf|timecard|...
    steps: Mapped[list] = mapped_column(JSON, default=list)  # [{role, title, required, order}]
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


# =====================
# Letters & signatures
# =====================

class Letter(Base):
    __tablename__ = "letters"

    id: Mapped[int] = int_pk()
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    template_content: Mapped[str] = mapped_column(Text, nullable=False)
    processed_content: Mapped[Optional[str]] = mapped_column(Text)
    employee_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id"))
    letter_type: Mapped[str] = mapped_column(String(100), nullable=False)  # offer|termination|promotion|general
    status: Mapped[str] = mapped_column(String(50), default="draft")  # draft|processed|sent|archived
    placeholders: Mapped[Optional[dict]] = mapped_column(JSON)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class SignatureRequest(Base):
    __tablename__ = "signature_requests"

    id: Mapped[int] = int_pk()
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    document_type: Mapped[str] = mapped_column(String(100), nullable=False)
    document_id: Mapped[int] = mapped_column(Integer, nullable=False)
    template_id: Mapped[Optional[int]] = mapped_column(Integer)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    due_date: Mapped[Optional[date]] = mapped_column(Date)
    email_notification: Mapped[bool] = mapped_column(Boolean, default=True)
    reminder_frequency: Mapped[str] = mapped_column(String(20), default="none")  # none|daily|weekly
    status: Mapped[str] = mapped_column(String(50), default="pending")  # pending|signed|declined
    signature_data: Mapped[Optional[str]] = mapped_column(Text)
    signed_by: Mapped[Optional[str]] = mapped_column(String(255))
    signed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    declined_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    reminder_count: Mapped[int] = mapped_column(Integer, default=0)
    last_reminder_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    requested_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_signature_document", "document_type", "document_id"),
    )


# =====================
# Personnel action forms
# =====================

class PafSubmission(Base):
    __tablename__ = "paf_submissions"

    id: Mapped[int] = int_pk()
    submitted_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), index=True)
    employee_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id"))
    workflow_template_id: Mapped[Optional[int]] = mapped_column(Integer, default=1)
    status: Mapped[str] = mapped_column(String(50), default="draft")  # draft|submitted|under_review|approved|denied
    current_step: Mapped[int] = mapped_column(Integer, default=0)
    form_data: Mapped[Optional[dict]] = mapped_column(JSON, default=dict)
    # Extracted for querying
    employee_name: Mapped[Optional[str]] = mapped_column(String(255))
    position_title: Mapped[str] = mapped_column(String(255), nullable=False)
    effective_date: Mapped[Optional[date]] = mapped_column(Date)
    paf_type: Mapped[str] = mapped_column(String(100), nullable=False)  # New Position|Vacant Position|Change Existing Position
    position_type: Mapped[Optional[str]] = mapped_column(String(100))
    position_category: Mapped[Optional[str]] = mapped_column(String(100))
    reason: Mapped[Optional[str]] = mapped_column(String(255))
    justification: Mapped[str] = mapped_column(Text, nullable=False)
    requesting_admin_signature: Mapped[Optional[dict]] = mapped_column(JSON)
    business_official_signature: Mapped[Optional[dict]] = mapped_column(JSON)
    superintendent_signature: Mapped[Optional[dict]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    approval_steps = relationship(
        "PafApprovalStep",
        back_populates="submission",
        order_by="PafApprovalStep.step",
        cascade="all, delete-orphan",
    )


class PafApprovalStep(Base):
    __tablename__ = "paf_approval_steps"

    id: Mapped[int] = int_pk()
    submission_id: Mapped[int] = mapped_column(Integer, ForeignKey("paf_submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    step: Mapped[int] = mapped_column(Integer, nullable=False)
    approver_role: Mapped[str] = mapped_column(String(50), nullable=False)  # requesting_admin|business_official|superintendent
    status: Mapped[str] = mapped_column(String(50), default="pending")  # pending|approved|rejected
    approver_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    signature: Mapped[Optional[str]] = mapped_column(Text)
    comments: Mapped[Optional[str]] = mapped_column(Text)
    signed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    submission = relationship("PafSubmission", back_populates="approval_steps")

    __table_args__ = (
        UniqueConstraint("submission_id", "step", name="uq_paf_submission_step"),
    )


class PafTimestamp(Base):
    __tablename__ = "paf_timestamps"

    id: Mapped[int] = int_pk()
    submission_id: Mapped[int] = mapped_column(Integer, ForeignKey("paf_submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)  # created|submitted|reviewed|approved|rejected
    event_description: Mapped[Optional[str]] = mapped_column(Text)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"))
    user_role: Mapped[Optional[str]] = mapped_column(String(50))
    from_status: Mapped[Optional[str]] = mapped_column(String(50))
    to_status: Mapped[Optional[str]] = mapped_column(String(50))
    details: Mapped[Optional[dict]] = mapped_column("metadata", JSON)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


# =====================
# Employee portal accounts
# =====================

class EmployeeAccount(Base):
    __tablename__ = "employee_accounts"

    id: Mapped[int] = int_pk()
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    login_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    requires_password_change: Mapped[bool] = mapped_column(Boolean, default=True)
    access_granted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    access_granted_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    temporary_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    access_notes: Mapped[Optional[str]] = mapped_column(Text)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    revoked_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"))
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    password_changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
