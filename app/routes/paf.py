from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from pydantic import ValidationError

from ..auth.security import get_current_user, has_role, primary_role, require_roles
from ..models.models import PafSubmission, User
from ..schemas.paf import (
    PafForm,
    PafSubmissionUpdate,
    PafSubmissionResponse,
    PafSubmitResponse,
    PafApproveRequest,
    PafApprovalStepResponse,
    PafTimelineEvent,
    PafWorkflowTemplate,
)
from ..services import paf_timeline as timeline
from ..services.activity import create_activity_log
from ..services.pdf import render_paf_pdf, pdf_filename
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/paf", tags=["paf"])

# Approval chain every submission goes through, in order
APPROVAL_CHAIN = ("requesting_admin", "business_official", "superintendent")

DEFAULT_WORKFLOW_TEMPLATES: List[Dict[str, Any]] = [
    {
        "id": 1,
        "name": "Standard Approval",
        "description": "Requesting administrator, business official, then superintendent",
        "steps": [
            {"role": "requesting_admin", "title": "Requesting Administrator", "required": True, "order": 1},
            {"role": "business_official", "title": "Business Official", "required": True, "order": 2},
            {"role": "superintendent", "title": "Superintendent", "required": True, "order": 3},
        ],
        "is_default": True,
    },
    {
        "id": 2,
        "name": "Fast Track",
        "description": "Business official sign-off for routine changes",
        "steps": [
            {"role": "requesting_admin", "title": "Requesting Administrator", "required": True, "order": 1},
            {"role": "business_official", "title": "Business Official", "required": True, "order": 2},
            {"role": "superintendent", "title": "Superintendent", "required": False, "order": 3},
        ],
        "is_default": False,
    },
    {
        "id": 3,
        "name": "Full Review",
        "description": "Adds an HR review ahead of the standard chain",
        "steps": [
            {"role": "hr", "title": "Human Resources Review", "required": True, "order": 1},
            {"role": "requesting_admin", "title": "Requesting Administrator", "required": True, "order": 2},
            {"role": "business_official", "title": "Business Official", "required": True, "order": 3},
            {"role": "superintendent", "title": "Superintendent", "required": True, "order": 4},
        ],
        "is_default": False,
    },
]


def parse_form(body: Dict[str, Any], storage: Storage) -> PafForm:
    """Validate the online form; missing required fields are a 400, not a 422."""
    try:
        form = PafForm.model_validate(body)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise HTTPException(status_code=400, detail=f"Missing or invalid fields: {', '.join(fields)}")
    if form.employee_id is not None and not storage.get_employee(form.employee_id):
        raise HTTPException(status_code=400, detail="Employee not found")
    return form


def _submission_data(form: PafForm, body: Dict[str, Any], user: User) -> Dict[str, Any]:
    return {
        "submitted_by": user.id,
        "employee_id": form.employee_id,
        "employee_name": form.employee_name,
        "position_title": form.position_title,
        "effective_date": form.effective_date,
        "paf_type": form.paf_type,
        "position_type": form.position_type,
        "position_category": form.position_category,
        "reason": form.reason,
        "justification": form.justification,
        "form_data": body,
        "status": "draft",
        "current_step": 0,
    }


def _create_approval_steps(storage: Storage, submission: PafSubmission) -> None:
    for i, role in enumerate(APPROVAL_CHAIN, start=1):
        storage.create_paf_approval_step({"submission_id": submission.id, "step": i, "approver_role": role})


def _can_see_all(user: User) -> bool:
    return has_role(user, "hr", "payroll", "secretary")


def _get_submission(storage: Storage, submission_id: int, user: User) -> PafSubmission:
    submission = storage.get_paf_submission(submission_id)
    if not submission or (not _can_see_all(user) and submission.submitted_by != user.id):
        raise HTTPException(status_code=404, detail="PAF submission not found")
    return submission


@router.post("/submit", response_model=PafSubmitResponse, status_code=201)
def submit_online_form(
    body: Dict[str, Any] = Body(...),
    storage: Storage = Depends(get_storage),
    user=Depends(get_current_user),
):
    form = parse_form(body, storage)
    submission = storage.create_paf_submission(_submission_data(form, body, user))
    timeline.record_created(storage.db, submission, user_id=user.id, user_role=primary_role(user))
    create_activity_log(
        storage.db, "paf_created", "paf_submission", submission.id, user_id=user.id,
        description=f"PAF drafted: {submission.paf_type} - {submission.position_title}",
    )
    return {
        "success": True,
        "submission": PafSubmissionResponse.model_validate(submission),
        "message": "PAF saved as draft",
    }


@router.get("/submissions", response_model=List[PafSubmissionResponse])
def list_submissions(storage: Storage = Depends(get_storage), user=Depends(get_current_user)):
    if _can_see_all(user):
        return storage.get_paf_submissions()
    return storage.get_paf_submissions(submitted_by=user.id)


@router.get("/submissions/{submission_id}", response_model=PafSubmissionResponse)
def get_submission(submission_id: int, storage: Storage = Depends(get_storage), user=Depends(get_current_user)):
    return _get_submission(storage, submission_id, user)


@router.post("/submissions", response_model=PafSubmissionResponse, status_code=201)
def create_submission(
    body: Dict[str, Any] = Body(...),
    storage: Storage = Depends(get_storage),
    user=Depends(get_current_user),
):
    form = parse_form(body, storage)
    submission = storage.create_paf_submission(_submission_data(form, body, user))
    _create_approval_steps(storage, submission)
    timeline.record_created(storage.db, submission, user_id=user.id, user_role=primary_role(user))
    create_activity_log(
        storage.db, "paf_created", "paf_submission", submission.id, user_id=user.id,
        description=f"PAF created: {submission.paf_type} - {submission.position_title}",
    )
    return submission


@router.put("/submissions/{submission_id}", response_model=PafSubmissionResponse)
def update_submission(
    submission_id: int,
    payload: PafSubmissionUpdate,
    storage: Storage = Depends(get_storage),
    user=Depends(get_current_user),
):
    submission = _get_submission(storage, submission_id, user)
    data = payload.model_dump(exclude_unset=True)
    for field in ("position_title", "paf_type", "justification"):
        if field in data and not (data[field] or "").strip():
            raise HTTPException(status_code=400, detail=f"{field} cannot be blank")
    return storage.update_paf_submission(submission, data)


@router.post("/submissions/{submission_id}/submit", response_model=PafSubmissionResponse)
def submit_submission(submission_id: int, storage: Storage = Depends(get_storage), user=Depends(get_current_user)):
    submission = _get_submission(storage, submission_id, user)
    if submission.status != "draft":
        raise HTTPException(status_code=409, detail=f"Only drafts can be submitted (status '{submission.status}')")
    if not storage.get_paf_approval_steps(submission.id):
        _create_approval_steps(storage, submission)
    submission = storage.update_paf_submission(submission, {"status": "submitted", "current_step": 1})
    timeline.record_submitted(storage.db, submission.id, "draft", user_id=user.id, user_role=primary_role(user))
    create_activity_log(storage.db, "paf_submitted", "paf_submission", submission.id, user_id=user.id)
    return submission


@router.post("/submissions/{submission_id}/approve", response_model=PafSubmissionResponse)
def approve_submission(
    submission_id: int,
    payload: PafApproveRequest,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    """
    Record one approver's decision.

    A rejection at any step denies the whole form; approving the last step
    approves it; anything else leaves it under review.
    """
    submission = _get_submission(storage, submission_id, user)
    if submission.status not in ("submitted", "under_review"):
        raise HTTPException(status_code=409, detail=f"PAF cannot be reviewed in status '{submission.status}'")
    steps = storage.get_paf_approval_steps(submission.id)
    step = next((s for s in steps if s.step == payload.step), None)
    if step is None:
        raise HTTPException(status_code=404, detail="Approval step not found")
    if step.status != "pending":
        raise HTTPException(status_code=409, detail=f"Step {step.step} already {step.status}")

    now = datetime.now(timezone.utc)
    approved = payload.action.value == "approve"
    storage.update_paf_approval_step(step, {
        "status": "approved" if approved else "rejected",
        "approver_user_id": user.id,
        "signature": payload.signature,
        "comments": payload.comments,
        "signed_at": now,
    })

    if not approved:
        new_status = "denied"
    elif step.step == max(s.step for s in steps):
        new_status = "approved"
    else:
        new_status = "under_review"
    data = {
        "status": new_status,
        "current_step": step.step,
        f"{step.approver_role}_signature": {
            "signature": payload.signature,
            "signed_by": str(user.id),
            "signed_at": now.isoformat(),
            "action": payload.action.value,
            "comments": payload.comments,
        },
    }
    previous = submission.status
    submission = storage.update_paf_submission(submission, data)
    timeline.record_decision(
        storage.db, submission.id, step.step, step.approver_role, previous, new_status,
        user_id=user.id, user_role=primary_role(user), comments=payload.comments,
    )
    create_activity_log(
        storage.db, f"paf_step_{step.status}", "paf_submission", submission.id, user_id=user.id,
        description=f"Step {step.step} ({step.approver_role}) {step.status}",
        details={"step": step.step, "status": new_status},
    )
    return submission


@router.get("/submissions/{submission_id}/approvals", response_model=List[PafApprovalStepResponse])
def list_approvals(submission_id: int, storage: Storage = Depends(get_storage), user=Depends(get_current_user)):
    submission = _get_submission(storage, submission_id, user)
    return storage.get_paf_approval_steps(submission.id)


@router.get("/submissions/{submission_id}/timeline", response_model=List[PafTimelineEvent])
def submission_timeline(submission_id: int, storage: Storage = Depends(get_storage), user=Depends(get_current_user)):
    submission = _get_submission(storage, submission_id, user)
    return timeline.get_submission_timeline(storage.db, submission.id)


@router.get("/submissions/{submission_id}/pdf")
def submission_pdf(submission_id: int, storage: Storage = Depends(get_storage), user=Depends(get_current_user)):
    submission = _get_submission(storage, submission_id, user)
    pdf = render_paf_pdf(submission, storage.get_paf_approval_steps(submission.id))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{pdf_filename("paf", submission.id)}"'},
    )


@router.get("/workflow-templates", response_model=List[PafWorkflowTemplate])
def list_paf_workflow_templates(_=Depends(get_current_user)):
    return DEFAULT_WORKFLOW_TEMPLATES
