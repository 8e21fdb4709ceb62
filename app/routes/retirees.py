from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..auth.security import get_current_user, require_roles
from ..schemas.employees import RetireeCreate, RetireeUpdate, RetireeResponse
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/retirees", tags=["retirees"])


@router.get("", response_model=List[RetireeResponse])
def list_retirees(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_retirees()


@router.get("/{retiree_id}", response_model=RetireeResponse)
def get_retiree(retiree_id: int, storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    retiree = storage.get_retiree(retiree_id)
    if not retiree:
        raise HTTPException(status_code=404, detail="Retiree not found")
    return retiree


@router.post("", response_model=RetireeResponse, status_code=201)
def create_retiree(payload: RetireeCreate, storage: Storage = Depends(get_storage), _=Depends(require_roles("hr"))):
    return storage.create_retiree(payload.model_dump())


@router.put("/{retiree_id}", response_model=RetireeResponse)
def update_retiree(
    retiree_id: int,
    payload: RetireeUpdate,
    storage: Storage = Depends(get_storage),
    _=Depends(require_roles("hr")),
):
    retiree = storage.get_retiree(retiree_id)
    if not retiree:
        raise HTTPException(status_code=404, detail="Retiree not found")
    return storage.update_retiree(retiree, payload.model_dump(exclude_unset=True))


@router.delete("/{retiree_id}")
def delete_retiree(retiree_id: int, storage: Storage = Depends(get_storage), _=Depends(require_roles("hr"))):
    if not storage.delete_retiree(retiree_id):
        raise HTTPException(status_code=404, detail="Retiree not found")
    return {"message": "Retiree deleted successfully"}
