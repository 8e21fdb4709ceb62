"""
Storage layer.
One method per table per query shape; route handlers never build queries themselves.
Every mutating method commits on its own, so multi-step handlers are not atomic.
"""
from datetime import datetime, date, timezone, timedelta
from enum import Enum
from typing import Optional, List, Dict, Any, Type

from fastapi import Depends, HTTPException
from sqlalchemy import func, inspect as sa_inspect, or_
from sqlalchemy.orm import Session

from .db import get_db
from .models.models import (
    Employee,
    LeaveType,
    LeaveRequest,
    SubstituteAssignment,
    PayrollRecord,
    Document,
    OnboardingWorkflow,
    OnboardingFormSubmission,
    Retiree,
    ActivityLog,
    TimeCard,
    SubstituteTimeCard,
    ExtraPayContract,
    ExtraPayRequest,
    ExtraPayTimestamp,
    WorkflowTemplate,
    Letter,
    SignatureRequest,
    PafSubmission,
    PafApprovalStep,
    EmployeeAccount,
)
from .services.activity import create_activity_log


DEFAULT_TIME_CARD_NOTE = "Automatically created for new employee"

DEFAULT_LEAVE_TYPES = [
    {"name": "Sick Leave", "max_days_per_year": 10, "is_paid": True, "requires_approval": False},
    {"name": "Personal Leave", "max_days_per_year": 3, "is_paid": True, "requires_approval": True},
    {"name": "Bereavement", "max_days_per_year": 5, "is_paid": True, "requires_approval": False},
    {"name": "Jury Duty", "is_paid": True, "requires_approval": True},
    {"name": "Professional Development", "max_days_per_year": 5, "is_paid": True, "requires_approval": True},
    {"name": "Family Medical Leave", "max_days_per_year": 60, "is_paid": False, "requires_approval": True},
]

# Time card statuses that are no longer waiting on anyone
TERMINAL_TIME_CARD_STATUSES = ("payroll_processed", "rejected")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Storage:
    def __init__(self, db: Session):
        self.db = db

    # ---------- helpers ----------

    @staticmethod
    def _plain(data: Dict[str, Any]) -> Dict[str, Any]:
        return {k: (v.value if isinstance(v, Enum) else v) for k, v in data.items()}

    def _get(self, model: Type, obj_id: int):
        return self.db.query(model).filter(model.id == obj_id).first()

    def _create(self, model: Type, **data):
        obj = model(**self._plain(data))
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def _update(self, obj, data: Dict[str, Any]):
        columns = sa_inspect(obj).mapper.column_attrs
        nulled = sorted(
            key for key, value in data.items()
            if value is None and key in columns and not columns[key].columns[0].nullable
        )
        if nulled:
            raise HTTPException(status_code=400, detail=f"Fields cannot be null: {', '.join(nulled)}")
        for key, value in self._plain(data).items():
            setattr(obj, key, value)
        if hasattr(obj, "updated_at"):
            obj.updated_at = _now()
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def _delete(self, model: Type, obj_id: int) -> bool:
        obj = self._get(model, obj_id)
        if not obj:
            return False
        self.db.delete(obj)
        self.db.commit()
        return True

    # ---------- EMPLOYEES ----------

    def get_employees(
        self,
        search: Optional[str] = None,
        department: Optional[str] = None,
        status: Optional[str] = None,
        employee_type: Optional[str] = None,
    ) -> List[Employee]:
        query = self.db.query(Employee)
        if search:
            like = f"%{search}%"
            query = query.filter(
                or_(
                    Employee.first_name.ilike(like),
                    Employee.last_name.ilike(like),
                    Employee.email.ilike(like),
                    Employee.employee_id.ilike(like),
                )
            )
        if department:
            query = query.filter(Employee.department == department)
        if status:
            query = query.filter(Employee.status == status)
        if employee_type:
            query = query.filter(Employee.employee_type == employee_type)
        return query.order_by(Employee.last_name.asc(), Employee.first_name.asc()).all()

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        return self._get(Employee, employee_id)

    def get_employee_by_code(self, code: str) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.employee_id == code).first()

    def get_employee_by_email(self, email: str) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.email == email).first()

    def create_employee(self, data: Dict[str, Any], user_id=None) -> Employee:
        """Insert the employee, then its default draft time card, each in its own commit."""
        employee = self._create(Employee, **data)
        create_activity_log(
            self.db, "employee_created", "employee", employee.id, user_id=user_id,
            description=f"Created employee {employee.full_name}",
        )
        card = self._create(
            TimeCard,
            employee_id=employee.id,
            date=_now(),
            total_hours=0,
            status="draft",
            current_approval_stage="secretary",
            notes=DEFAULT_TIME_CARD_NOTE,
        )
        create_activity_log(
            self.db, "time_card_created", "time_card", card.id, user_id=user_id,
            description=f"Default time card created for {employee.full_name}",
            details={"employee_id": employee.id},
        )
        return employee

    def update_employee(self, employee: Employee, data: Dict[str, Any]) -> Employee:
        return self._update(employee, data)

    def delete_employee(self, employee: Employee) -> None:
        """
        Remove the employee together with the rows that reference it.

        Owned rows are deleted child-first; rows that only mention the
        employee (letters, PAF submissions, leave coverage) keep living
        with the reference cleared.
        """
        emp_id = employee.id
        leave_ids = [row.id for row in self.db.query(LeaveRequest.id).filter(LeaveRequest.employee_id == emp_id)]
        assignment_filter = SubstituteAssignment.substitute_employee_id == emp_id
        if leave_ids:
            assignment_filter = or_(assignment_filter, SubstituteAssignment.leave_request_id.in_(leave_ids))
        assignment_ids = [row.id for row in self.db.query(SubstituteAssignment.id).filter(assignment_filter)]
        request_ids = [row.id for row in self.db.query(ExtraPayRequest.id).filter(ExtraPayRequest.employee_id == emp_id)]

        self.db.query(TimeCard).filter(TimeCard.employee_id == emp_id).delete(synchronize_session=False)
        self.db.query(SubstituteTimeCard).filter(SubstituteTimeCard.substitute_id == emp_id).delete(
            synchronize_session=False
        )
        if assignment_ids:
            self.db.query(SubstituteTimeCard).filter(SubstituteTimeCard.assignment_id.in_(assignment_ids)).update(
                {SubstituteTimeCard.assignment_id: None}, synchronize_session=False
            )
            self.db.query(SubstituteAssignment).filter(SubstituteAssignment.id.in_(assignment_ids)).delete(
                synchronize_session=False
            )
        self.db.query(LeaveRequest).filter(LeaveRequest.substitute_assigned == emp_id).update(
            {LeaveRequest.substitute_assigned: None}, synchronize_session=False
        )
        if request_ids:
            self.db.query(ExtraPayTimestamp).filter(
                ExtraPayTimestamp.entity_type == "request", ExtraPayTimestamp.entity_id.in_(request_ids)
            ).delete(synchronize_session=False)

        for model, column in (
            (LeaveRequest, LeaveRequest.employee_id),
            (Document, Document.employee_id),
            (OnboardingWorkflow, OnboardingWorkflow.employee_id),
            (OnboardingFormSubmission, OnboardingFormSubmission.employee_id),
            (PayrollRecord, PayrollRecord.employee_id),
            (ExtraPayRequest, ExtraPayRequest.employee_id),
            (SignatureRequest, SignatureRequest.employee_id),
            (EmployeeAccount, EmployeeAccount.employee_id),
        ):
            self.db.query(model).filter(column == emp_id).delete(synchronize_session=False)
        for model, column in (
            (Letter, Letter.employee_id),
            (PafSubmission, PafSubmission.employee_id),
            (Employee, Employee.supervisor_id),
        ):
            self.db.query(model).filter(column == emp_id).update({column: None}, synchronize_session=False)
        self.db.delete(employee)
        self.db.commit()

    def get_available_substitutes(self) -> List[Employee]:
        return (
            self.db.query(Employee)
            .filter(Employee.employee_type == "substitute", Employee.status == "active")
            .order_by(Employee.last_name.asc())
            .all()
        )

    # ---------- LEAVE ----------

    def get_leave_types(self) -> List[LeaveType]:
        return self.db.query(LeaveType).order_by(LeaveType.name.asc()).all()

    def get_leave_type(self, leave_type_id: int) -> Optional[LeaveType]:
        return self._get(LeaveType, leave_type_id)

    def get_leave_type_by_name(self, name: str) -> Optional[LeaveType]:
        return self.db.query(LeaveType).filter(LeaveType.name == name).first()

    def create_leave_type(self, data: Dict[str, Any]) -> LeaveType:
        return self._create(LeaveType, **data)

    def ensure_default_leave_types(self) -> int:
        """Insert any missing DEFAULT_LEAVE_TYPES; returns how many were added."""
        added = 0
        for item in DEFAULT_LEAVE_TYPES:
            if not self.get_leave_type_by_name(item["name"]):
                self.db.add(LeaveType(**item))
                added += 1
        if added:
            self.db.commit()
        return added

    def get_leave_requests(self, status: Optional[str] = None) -> List[LeaveRequest]:
        query = self.db.query(LeaveRequest)
        if status:
            query = query.filter(LeaveRequest.status == status)
        return query.order_by(LeaveRequest.created_at.desc()).all()

    def get_leave_requests_by_employee(self, employee_id: int) -> List[LeaveRequest]:
        return (
            self.db.query(LeaveRequest)
            .filter(LeaveRequest.employee_id == employee_id)
            .order_by(LeaveRequest.start_date.desc())
            .all()
        )

    def get_leave_request(self, request_id: int) -> Optional[LeaveRequest]:
        return self._get(LeaveRequest, request_id)

    def create_leave_request(self, data: Dict[str, Any]) -> LeaveRequest:
        return self._create(LeaveRequest, status="pending", **data)

    def update_leave_request(self, request: LeaveRequest, data: Dict[str, Any]) -> LeaveRequest:
        return self._update(request, data)

    # ---------- SUBSTITUTES ----------

    def get_substitute_assignments(self, assigned_date: Optional[date] = None) -> List[SubstituteAssignment]:
        query = self.db.query(SubstituteAssignment)
        if assigned_date:
            query = query.filter(SubstituteAssignment.assigned_date == assigned_date)
        return query.order_by(SubstituteAssignment.assigned_date.desc()).all()

    def get_substitute_assignment(self, assignment_id: int) -> Optional[SubstituteAssignment]:
        return self._get(SubstituteAssignment, assignment_id)

    def create_substitute_assignment(self, data: Dict[str, Any]) -> SubstituteAssignment:
        return self._create(SubstituteAssignment, status="assigned", **data)

    def update_substitute_assignment(self, assignment: SubstituteAssignment, data: Dict[str, Any]) -> SubstituteAssignment:
        return self._update(assignment, data)

    # ---------- PAYROLL ----------

    def get_payroll_records(self, employee_id: Optional[int] = None) -> List[PayrollRecord]:
        query = self.db.query(PayrollRecord)
        if employee_id:
            query = query.filter(PayrollRecord.employee_id == employee_id)
        return query.order_by(PayrollRecord.pay_period_end.desc(), PayrollRecord.id.desc()).all()

    def get_payroll_record(self, record_id: int) -> Optional[PayrollRecord]:
        return self._get(PayrollRecord, record_id)

    def create_payroll_record(self, data: Dict[str, Any]) -> PayrollRecord:
        return self._create(PayrollRecord, **data)

    def update_payroll_record(self, record: PayrollRecord, data: Dict[str, Any]) -> PayrollRecord:
        return self._update(record, data)

    def get_payroll_summary(self) -> Dict[str, Any]:
        row = self.db.query(
            func.count(PayrollRecord.id),
            func.coalesce(func.sum(PayrollRecord.gross_pay), 0),
            func.coalesce(func.sum(PayrollRecord.deductions), 0),
            func.coalesce(func.sum(PayrollRecord.net_pay), 0),
        ).one()
        processed = self.db.query(func.count(PayrollRecord.id)).filter(PayrollRecord.processed.is_(True)).scalar() or 0
        return {
            "record_count": row[0],
            "total_gross": float(row[1] or 0),
            "total_deductions": float(row[2] or 0),
            "total_net": float(row[3] or 0),
            "processed_count": processed,
            "unprocessed_count": row[0] - processed,
        }

    # ---------- DOCUMENTS ----------

    def get_documents(self, status: Optional[str] = None) -> List[Document]:
        query = self.db.query(Document)
        if status:
            query = query.filter(Document.status == status)
        return query.order_by(Document.created_at.desc()).all()

    def get_documents_by_employee(self, employee_id: int) -> List[Document]:
        return self.db.query(Document).filter(Document.employee_id == employee_id).order_by(Document.created_at.desc()).all()

    def get_document(self, document_id: int) -> Optional[Document]:
        return self._get(Document, document_id)

    def create_document(self, data: Dict[str, Any]) -> Document:
        return self._create(Document, status="pending", **data)

    def update_document(self, document: Document, data: Dict[str, Any]) -> Document:
        return self._update(document, data)

    def delete_document(self, document_id: int) -> bool:
        return self._delete(Document, document_id)

    # ---------- ONBOARDING ----------

    def get_onboarding_workflows(self, status: Optional[str] = None) -> List[OnboardingWorkflow]:
        query = self.db.query(OnboardingWorkflow)
        if status:
            query = query.filter(OnboardingWorkflow.status == status)
        return query.order_by(OnboardingWorkflow.created_at.desc()).all()

    def get_onboarding_workflow(self, workflow_id: int) -> Optional[OnboardingWorkflow]:
        return self._get(OnboardingWorkflow, workflow_id)

    def create_onboarding_workflow(self, data: Dict[str, Any]) -> OnboardingWorkflow:
        data.setdefault("start_date", date.today())
        return self._create(
            OnboardingWorkflow,
            status="started",
            completed_steps=[],
            submitted_documents=[],
            **data,
        )

    def update_onboarding_workflow(self, workflow: OnboardingWorkflow, data: Dict[str, Any]) -> OnboardingWorkflow:
        return self._update(workflow, data)

    def get_onboarding_forms(self, employee_id: Optional[int] = None) -> List[OnboardingFormSubmission]:
        query = self.db.query(OnboardingFormSubmission)
        if employee_id:
            query = query.filter(OnboardingFormSubmission.employee_id == employee_id)
        return query.order_by(OnboardingFormSubmission.created_at.desc()).all()

    def get_onboarding_form(self, form_id: int) -> Optional[OnboardingFormSubmission]:
        return self._get(OnboardingFormSubmission, form_id)

    def create_onboarding_form(self, data: Dict[str, Any]) -> OnboardingFormSubmission:
        return self._create(OnboardingFormSubmission, status="draft", **data)

    def update_onboarding_form(self, form: OnboardingFormSubmission, data: Dict[str, Any]) -> OnboardingFormSubmission:
        return self._update(form, data)

    # ---------- RETIREES ----------

    def get_retirees(self) -> List[Retiree]:
        return self.db.query(Retiree).order_by(Retiree.retirement_date.desc()).all()

    def get_retiree(self, retiree_id: int) -> Optional[Retiree]:
        return self._get(Retiree, retiree_id)

    def create_retiree(self, data: Dict[str, Any]) -> Retiree:
        return self._create(Retiree, **data)

    def update_retiree(self, retiree: Retiree, data: Dict[str, Any]) -> Retiree:
        return self._update(retiree, data)

    def delete_retiree(self, retiree_id: int) -> bool:
        return self._delete(Retiree, retiree_id)

    # ---------- TIME CARDS ----------

    def get_time_cards(self) -> List[TimeCard]:
        return self.db.query(TimeCard).order_by(TimeCard.date.desc(), TimeCard.id.desc()).all()

    def get_time_card(self, card_id: int) -> Optional[TimeCard]:
        return self._get(TimeCard, card_id)

    def get_time_cards_by_employee(self, employee_id: int) -> List[TimeCard]:
        return self.db.query(TimeCard).filter(TimeCard.employee_id == employee_id).order_by(TimeCard.date.desc()).all()

    def get_pending_time_cards(self) -> List[TimeCard]:
        return (
            self.db.query(TimeCard)
            .filter(TimeCard.status.notin_(TERMINAL_TIME_CARD_STATUSES))
            .order_by(TimeCard.date.desc())
            .all()
        )

    def get_time_cards_by_date_range(self, start: date, end: date) -> List[TimeCard]:
        start_dt = datetime.combine(start, datetime.min.time())
        end_dt = datetime.combine(end + timedelta(days=1), datetime.min.time())
        return (
            self.db.query(TimeCard)
            .filter(TimeCard.date >= start_dt, TimeCard.date < end_dt)
            .order_by(TimeCard.date.asc())
            .all()
        )

    def get_time_cards_by_stage(self, stage: str) -> List[TimeCard]:
        return (
            self.db.query(TimeCard)
            .filter(TimeCard.current_approval_stage == stage)
            .order_by(TimeCard.date.desc())
            .all()
        )

    def create_time_card(self, data: Dict[str, Any]) -> TimeCard:
        return self._create(TimeCard, status="draft", current_approval_stage="secretary", **data)

    def update_time_card(self, card: TimeCard, data: Dict[str, Any]) -> TimeCard:
        return self._update(card, data)

    def delete_time_card(self, card_id: int) -> bool:
        return self._delete(TimeCard, card_id)

    # ---------- SUBSTITUTE TIME CARDS ----------

    def get_substitute_time_cards(self, substitute_id: Optional[int] = None) -> List[SubstituteTimeCard]:
        query = self.db.query(SubstituteTimeCard)
        if substitute_id:
            query = query.filter(SubstituteTimeCard.substitute_id == substitute_id)
        return query.order_by(SubstituteTimeCard.date.desc()).all()

    def get_substitute_time_card(self, card_id: int) -> Optional[SubstituteTimeCard]:
        return self._get(SubstituteTimeCard, card_id)

    def create_substitute_time_card(self, data: Dict[str, Any]) -> SubstituteTimeCard:
        return self._create(SubstituteTimeCard, status="draft", current_approval_stage="secretary", **data)

    def update_substitute_time_card(self, card: SubstituteTimeCard, data: Dict[str, Any]) -> SubstituteTimeCard:
        return self._update(card, data)

    def delete_substitute_time_card(self, card_id: int) -> bool:
        return self._delete(SubstituteTimeCard, card_id)

    # ---------- EXTRA PAY ----------

    def get_extra_pay_contracts(self, status: Optional[str] = None, search: Optional[str] = None) -> List[ExtraPayContract]:
        query = self.db.query(ExtraPayContract)
        if status:
            query = query.filter(ExtraPayContract.status == status)
        if search:
            like = f"%{search}%"
            query = query.filter(or_(ExtraPayContract.title.ilike(like), ExtraPayContract.description.ilike(like)))
        return query.order_by(ExtraPayContract.created_at.desc(), ExtraPayContract.id.desc()).all()

    def get_extra_pay_contract(self, contract_id: int) -> Optional[ExtraPayContract]:
        return self._get(ExtraPayContract, contract_id)

    def create_extra_pay_contract(self, data: Dict[str, Any]) -> ExtraPayContract:
        return self._create(ExtraPayContract, **data)

    def update_extra_pay_contract(self, contract: ExtraPayContract, data: Dict[str, Any]) -> ExtraPayContract:
        return self._update(contract, data)

    def delete_extra_pay_contract(self, contract_id: int) -> bool:
        return self._delete(ExtraPayContract, contract_id)

    def get_extra_pay_requests(
        self,
        status: Optional[str] = None,
        contract_id: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> List[ExtraPayRequest]:
        query = self.db.query(ExtraPayRequest)
        if status:
            query = query.filter(ExtraPayRequest.status == status)
        if contract_id:
            query = query.filter(ExtraPayRequest.contract_id == contract_id)
        if employee_id:
            query = query.filter(ExtraPayRequest.employee_id == employee_id)
        return query.order_by(ExtraPayRequest.created_at.desc(), ExtraPayRequest.id.desc()).all()

    def get_extra_pay_request(self, request_id: int) -> Optional[ExtraPayRequest]:
        return self._get(ExtraPayRequest, request_id)

    def create_extra_pay_request(self, data: Dict[str, Any]) -> ExtraPayRequest:
        return self._create(ExtraPayRequest, status="pending", **data)

    def update_extra_pay_request(self, request: ExtraPayRequest, data: Dict[str, Any]) -> ExtraPayRequest:
        return self._update(request, data)

    def get_extra_pay_dashboard_stats(self) -> Dict[str, Any]:
        contract_stats = (
            self.db.query(ExtraPayContract.status, func.count(ExtraPayContract.id))
            .group_by(ExtraPayContract.status)
            .all()
        )
        request_stats = (
            self.db.query(ExtraPayRequest.status, func.count(ExtraPayRequest.id))
            .group_by(ExtraPayRequest.status)
            .all()
        )
        recent = (
            self.db.query(ExtraPayRequest, Employee.first_name, Employee.last_name)
            .outerjoin(Employee, ExtraPayRequest.employee_id == Employee.id)
            .order_by(ExtraPayRequest.created_at.desc(), ExtraPayRequest.id.desc())
            .limit(10)
            .all()
        )
        return {
            "contract_stats": [{"status": s, "count": c} for s, c in contract_stats],
            "request_stats": [{"status": s, "count": c} for s, c in request_stats],
            "recent_requests": [
                {
                    "id": r.id,
                    "description": r.description,
                    "amount": float(r.amount),
                    "status": r.status,
                    "created_at": r.created_at,
                    "employee_name": f"{first} {last}" if first else None,
                }
                for r, first, last in recent
            ],
        }

    # ---------- WORKFLOW TEMPLATES ----------

    def get_workflow_templates(self, category: Optional[str] = None) -> List[WorkflowTemplate]:
        query = self.db.query(WorkflowTemplate)
        if category:
            query = query.filter(WorkflowTemplate.category == category)
        return query.order_by(WorkflowTemplate.name.asc()).all()

    def get_workflow_template(self, template_id: int) -> Optional[WorkflowTemplate]:
        return self._get(WorkflowTemplate, template_id)

    def create_workflow_template(self, data: Dict[str, Any]) -> WorkflowTemplate:
        return self._create(WorkflowTemplate, **data)

    def update_workflow_template(self, template: WorkflowTemplate, data: Dict[str, Any]) -> WorkflowTemplate:
        return self._update(template, data)

    def delete_workflow_template(self, template_id: int) -> bool:
        return self._delete(WorkflowTemplate, template_id)

    # ---------- LETTERS ----------

    def get_letters(self, employee_id: Optional[int] = None) -> List[Letter]:
        query = self.db.query(Letter)
        if employee_id:
            query = query.filter(Letter.employee_id == employee_id)
        return query.order_by(Letter.created_at.desc(), Letter.id.desc()).all()

    def get_letter(self, letter_id: int) -> Optional[Letter]:
        return self._get(Letter, letter_id)

    def create_letter(self, data: Dict[str, Any]) -> Letter:
        return self._create(Letter, status="draft", **data)

    def update_letter(self, letter: Letter, data: Dict[str, Any]) -> Letter:
        return self._update(letter, data)

    def delete_letter(self, letter_id: int) -> bool:
        return self._delete(Letter, letter_id)

    # ---------- SIGNATURE REQUESTS ----------

    def get_signature_requests(self, status: Optional[str] = None) -> List[SignatureRequest]:
        query = self.db.query(SignatureRequest)
        if status:
            query = query.filter(SignatureRequest.status == status)
        return query.order_by(SignatureRequest.created_at.desc(), SignatureRequest.id.desc()).all()

    def get_signature_requests_by_employee(self, employee_id: int) -> List[SignatureRequest]:
        return (
            self.db.query(SignatureRequest)
            .filter(SignatureRequest.employee_id == employee_id)
            .order_by(SignatureRequest.created_at.desc())
            .all()
        )

    def get_signature_requests_by_document(self, document_type: str, document_id: int) -> List[SignatureRequest]:
        return (
            self.db.query(SignatureRequest)
            .filter(SignatureRequest.document_type == document_type, SignatureRequest.document_id == document_id)
            .order_by(SignatureRequest.created_at.desc())
            .all()
        )

    def get_signature_request(self, request_id: int) -> Optional[SignatureRequest]:
        return self._get(SignatureRequest, request_id)

    def create_signature_request(self, data: Dict[str, Any]) -> SignatureRequest:
        return self._create(SignatureRequest, status="pending", reminder_count=0, **data)

    def update_signature_request(self, request: SignatureRequest, data: Dict[str, Any]) -> SignatureRequest:
        return self._update(request, data)

    # ---------- PAF ----------

    def get_paf_submissions(self, submitted_by=None) -> List[PafSubmission]:
        query = self.db.query(PafSubmission)
        if submitted_by:
            query = query.filter(PafSubmission.submitted_by == submitted_by)
        return query.order_by(PafSubmission.created_at.desc(), PafSubmission.id.desc()).all()

    def get_paf_submission(self, submission_id: int) -> Optional[PafSubmission]:
        return self._get(PafSubmission, submission_id)

    def create_paf_submission(self, data: Dict[str, Any]) -> PafSubmission:
        return self._create(PafSubmission, **data)

    def update_paf_submission(self, submission: PafSubmission, data: Dict[str, Any]) -> PafSubmission:
        return self._update(submission, data)

    def get_paf_approval_steps(self, submission_id: int) -> List[PafApprovalStep]:
        return (
            self.db.query(PafApprovalStep)
            .filter(PafApprovalStep.submission_id == submission_id)
            .order_by(PafApprovalStep.step.asc())
            .all()
        )

    def create_paf_approval_step(self, data: Dict[str, Any]) -> PafApprovalStep:
        return self._create(PafApprovalStep, **data)

    def update_paf_approval_step(self, step: PafApprovalStep, data: Dict[str, Any]) -> PafApprovalStep:
        return self._update(step, data)

    # ---------- EMPLOYEE ACCOUNTS ----------

    def get_employee_accounts(self) -> List[EmployeeAccount]:
        return self.db.query(EmployeeAccount).order_by(EmployeeAccount.created_at.desc()).all()

    def get_employee_account(self, account_id: int) -> Optional[EmployeeAccount]:
        return self._get(EmployeeAccount, account_id)

    def get_employee_account_by_employee(self, employee_id: int) -> Optional[EmployeeAccount]:
        return self.db.query(EmployeeAccount).filter(EmployeeAccount.employee_id == employee_id).first()

    def get_employee_account_by_username(self, username: str) -> Optional[EmployeeAccount]:
        return self.db.query(EmployeeAccount).filter(EmployeeAccount.username == username).first()

    def create_employee_account(self, data: Dict[str, Any]) -> EmployeeAccount:
        return self._create(EmployeeAccount, **data)

    def update_employee_account(self, account: EmployeeAccount, data: Dict[str, Any]) -> EmployeeAccount:
        return self._update(account, data)

    # ---------- DASHBOARD ----------

    def get_dashboard_stats(self) -> Dict[str, Any]:
        active_by_type = dict(
            self.db.query(Employee.employee_type, func.count(Employee.id))
            .filter(Employee.status == "active")
            .group_by(Employee.employee_type)
            .all()
        )
        pending_onboarding = (
            self.db.query(func.count(OnboardingWorkflow.id))
            .filter(OnboardingWorkflow.status.in_(("started", "in_progress")))
            .scalar()
        )
        pending_leave = self.db.query(func.count(LeaveRequest.id)).filter(LeaveRequest.status == "pending").scalar()
        pending_docs = self.db.query(func.count(Document.id)).filter(Document.status == "pending").scalar()
        todays_subs = (
            self.db.query(func.count(SubstituteAssignment.id))
            .filter(SubstituteAssignment.assigned_date == date.today())
            .scalar()
        )
        return {
            "total_employees": sum(active_by_type.values()),
            "teachers": active_by_type.get("teacher", 0),
            "support_staff": active_by_type.get("support_staff", 0),
            "administrators": active_by_type.get("administrator", 0),
            "substitutes": active_by_type.get("substitute", 0),
            "pending_onboarding": pending_onboarding or 0,
            "pending_leave_requests": pending_leave or 0,
            "pending_documents": pending_docs or 0,
            "todays_substitute_assignments": todays_subs or 0,
        }

    def get_recent_activity(self, limit: int = 20) -> List[ActivityLog]:
        return self.db.query(ActivityLog).order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return Storage(db)

