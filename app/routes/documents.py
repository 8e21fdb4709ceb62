from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user, require_roles
from ..schemas.employees import DocumentCreate, DocumentUpdate, DocumentResponse
from ..services.activity import create_activity_log
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("", response_model=List[DocumentResponse])
def list_documents(
    status: Optional[str] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_documents(status)


@router.get("/pending", response_model=List[DocumentResponse])
def list_pending_documents(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_documents("pending")


@router.get("/employee/{employee_id}", response_model=List[DocumentResponse])
def list_employee_documents(employee_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_documents_by_employee(employee_id)


@router.post("", response_model=DocumentResponse, status_code=201)
def create_document(payload: DocumentCreate, storage: Storage = Depends(get_storage), user=Depends(get_current_user)):
    if payload.employee_id is not None and not storage.get_employee(payload.employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    document = storage.create_document({**payload.model_dump(), "uploaded_by": user.id})
    create_activity_log(
        storage.db, "document_uploaded", "document", document.id, user_id=user.id,
        description=f"Uploaded {document.document_type}: {document.file_name}",
    )
    return document


@router.put("/{document_id}", response_model=DocumentResponse)
def update_document(
    document_id: int,
    payload: DocumentUpdate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("hr")),
):
    document = storage.get_document(document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    data = payload.model_dump(exclude_unset=True)
    previous = document.status
    document = storage.update_document(document, data)
    if "status" in data and document.status != previous:
        create_activity_log(
            storage.db, f"document_{document.status}", "document", document.id, user_id=user.id,
            details={"from": previous, "to": document.status},
        )
    return document


@router.delete("/{document_id}")
def delete_document(document_id: int, storage: Storage = Depends(get_storage), _=Depends(require_roles("hr"))):
    if not storage.delete_document(document_id):
        raise HTTPException(status_code=404, detail="Document not found")
    return {"message": "Document deleted successfully"}
