from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
import structlog

from ..auth.security import get_current_user, require_roles
from ..schemas.letters import SignatureRequestCreate, SignAction, DeclineAction, SignatureRequestResponse
from ..services import mailer
from ..services.activity import create_activity_log
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/signature-requests", tags=["signature-requests"])
log = structlog.get_logger(__name__)


def _get_pending(storage: Storage, request_id: int, action: str):
    request = storage.get_signature_request(request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Signature request not found")
    if request.status != "pending":
        raise HTTPException(status_code=409, detail=f"Cannot {action} a request with status '{request.status}'")
    return request


@router.get("", response_model=List[SignatureRequestResponse])
def list_signature_requests(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_signature_requests()


@router.get("/pending", response_model=List[SignatureRequestResponse])
def list_pending_signature_requests(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_signature_requests("pending")


@router.get("/employee/{employee_id}", response_model=List[SignatureRequestResponse])
def list_employee_signature_requests(employee_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_signature_requests_by_employee(employee_id)


@router.get("/document/{document_type}/{document_id}", response_model=List[SignatureRequestResponse])
def list_document_signature_requests(
    document_type: str,
    document_id: int,
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_signature_requests_by_document(document_type, document_id)


@router.post("", response_model=SignatureRequestResponse, status_code=201)
def create_signature_request(
    payload: SignatureRequestCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    employee = storage.get_employee(payload.employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    request = storage.create_signature_request({**payload.model_dump(), "requested_by": user.id})
    create_activity_log(
        storage.db, "signature_requested", "signature_request", request.id, user_id=user.id,
        description=f"Signature requested from {employee.full_name}: {request.title}",
    )
    return request


@router.post("/{request_id}/sign", response_model=SignatureRequestResponse)
def sign_request(request_id: int, payload: SignAction, storage: Storage = Depends(get_storage), user=Depends(get_current_user)):
    request = _get_pending(storage, request_id, "sign")
    request = storage.update_signature_request(request, {
        "status": "signed",
        "signature_data": payload.signature_data,
        "signed_by": payload.signed_by,
        "signed_at": datetime.now(timezone.utc),
    })
    create_activity_log(
        storage.db, "document_signed", "signature_request", request.id, user_id=user.id,
        description=f"{request.title} signed by {payload.signed_by}",
    )
    return request


@router.post("/{request_id}/decline", response_model=SignatureRequestResponse)
def decline_request(
    request_id: int,
    payload: Optional[DeclineAction] = None,
    storage: Storage = Depends(get_storage),
    user=Depends(get_current_user),
):
    request = _get_pending(storage, request_id, "decline")
    request = storage.update_signature_request(request, {
        "status": "declined",
        "declined_at": datetime.now(timezone.utc),
        "notes": payload.notes if payload else None,
    })
    create_activity_log(storage.db, "signature_declined", "signature_request", request.id, user_id=user.id)
    return request


@router.post("/{request_id}/reminder", response_model=SignatureRequestResponse)
def send_reminder(request_id: int, storage: Storage = Depends(get_storage), user=Depends(require_roles("hr"))):
    request = _get_pending(storage, request_id, "remind")
    employee = storage.get_employee(request.employee_id)
    request = storage.update_signature_request(request, {
        "reminder_count": (request.reminder_count or 0) + 1,
        "last_reminder_at": datetime.now(timezone.utc),
    })
    emailed = False
    if request.email_notification and employee and employee.email:
        due = f" It is due {request.due_date.strftime('%m/%d/%Y')}." if request.due_date else ""
        emailed = mailer.send_email(
            [employee.email],
            f"Reminder: signature needed for {request.title}",
            f"Hello {employee.first_name},\n\nPlease sign \"{request.title}\".{due}\n",
        )
    log.info("signature_reminder", request_id=request.id, reminder_count=request.reminder_count, emailed=emailed)
    create_activity_log(
        storage.db, "signature_reminder_sent", "signature_request", request.id, user_id=user.id,
        details={"reminder_count": request.reminder_count, "emailed": emailed},
    )
    return request
