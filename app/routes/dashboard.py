from typing import List

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from ..schemas.employees import DashboardStats, ActivityLogResponse
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(storage: Storage = Depends(get_storage), _=Depends(get_current_user)):
    return storage.get_dashboard_stats()


@router.get("/recent-activity", response_model=List[ActivityLogResponse])
def recent_activity(
    limit: int = Query(20, ge=1, le=200),
    storage: Storage = Depends(get_storage),
    _=Depends(get_current_user),
):
    return storage.get_recent_activity(limit)
