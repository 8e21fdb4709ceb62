from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..auth.security import get_current_user, require_roles
from ..schemas.letters import LetterCreate, LetterUpdate, LetterResponse
from ..services.activity import create_activity_log
from ..services.letters import employee_values, render_template
from ..services.pdf import render_letter_pdf, pdf_filename
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/letters", tags=["letters"])


def _get_letter(storage: Storage, letter_id: int):
    letter = storage.get_letter(letter_id)
    if not letter:
        raise HTTPException(status_code=404, detail="Letter not found")
    return letter


@router.get("", response_model=List[LetterResponse])
def list_letters(
    employee_id: Optional[int] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_letters(employee_id)


@router.get("/{letter_id}", response_model=LetterResponse)
def get_letter(letter_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return _get_letter(storage, letter_id)


@router.post("", response_model=LetterResponse, status_code=201)
def create_letter(payload: LetterCreate, storage: Storage = Depends(get_storage), user=Depends(require_roles("hr"))):
    if payload.employee_id is not None and not storage.get_employee(payload.employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    letter = storage.create_letter({**payload.model_dump(), "created_by": user.id})
    create_activity_log(
        storage.db, "letter_created", "letter", letter.id, user_id=user.id,
        description=f"Letter '{letter.title}' created",
    )
    return letter


@router.put("/{letter_id}", response_model=LetterResponse)
def update_letter(
    letter_id: int,
    payload: LetterUpdate,
    storage: Storage = Depends(get_storage),
    _=Depends(require_roles("hr")),
):
    letter = _get_letter(storage, letter_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("employee_id") is not None and not storage.get_employee(data["employee_id"]):
        raise HTTPException(status_code=404, detail="Employee not found")
    return storage.update_letter(letter, data)


@router.delete("/{letter_id}")
def delete_letter(letter_id: int, storage: Storage = Depends(get_storage), _=Depends(require_roles("hr"))):
    if not storage.delete_letter(letter_id):
        raise HTTPException(status_code=404, detail="Letter not found")
    return {"message": "Letter deleted successfully"}


@router.post("/{letter_id}/process", response_model=LetterResponse)
def process_letter(letter_id: int, storage: Storage = Depends(get_storage), user=Depends(require_roles("hr"))):
    """Fill the template's placeholders from the letter's employee."""
    letter = _get_letter(storage, letter_id)
    if letter.employee_id is None:
        raise HTTPException(status_code=400, detail="Letter has no employee to process against")
    employee = storage.get_employee(letter.employee_id)
    if not employee:
        raise HTTPException(status_code=400, detail="Letter employee no longer exists")

    content, used = render_template(letter.template_content, employee_values(employee))
    letter = storage.update_letter(letter, {
        "processed_content": content,
        "placeholders": used,
        "status": "processed",
        "processed_at": datetime.now(timezone.utc),
    })
    create_activity_log(
        storage.db, "letter_processed", "letter", letter.id, user_id=user.id,
        description=f"Letter '{letter.title}' processed for {employee.full_name}",
        details={"placeholders": sorted(used)},
    )
    return letter


@router.post("/{letter_id}/send", response_model=LetterResponse)
def send_letter(letter_id: int, storage: Storage = Depends(get_storage), user=Depends(require_roles("hr"))):
    letter = _get_letter(storage, letter_id)
    if letter.status != "processed":
        raise HTTPException(status_code=409, detail=f"Only processed letters can be sent (status '{letter.status}')")
    letter = storage.update_letter(letter, {"status": "sent", "sent_at": datetime.now(timezone.utc)})
    create_activity_log(storage.db, "letter_sent", "letter", letter.id, user_id=user.id)
    return letter


@router.get("/{letter_id}/pdf")
def letter_pdf(letter_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    letter = _get_letter(storage, letter_id)
    return Response(
        content=render_letter_pdf(letter),
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{pdf_filename("letter", letter.id)}"'},
    )
