from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import require_roles
from ..schemas.employees import PayrollRecordCreate, PayrollRecordResponse, PayrollSummary
from ..services.activity import create_activity_log
from ..storage import Storage, get_storage


router = APIRouter(prefix="/api/payroll", tags=["payroll"])


@router.get("", response_model=List[PayrollRecordResponse])
def list_payroll(
    employee_id: Optional[int] = Query(None),
    storage: Storage = Depends(get_storage),
    _=Depends(require_roles("payroll", "hr")),
):
    return storage.get_payroll_records(employee_id)


@router.get("/summary", response_model=PayrollSummary)
def payroll_summary(storage: Storage = Depends(get_storage), _=Depends(require_roles("payroll", "hr"))):
    return storage.get_payroll_summary()


@router.post("", response_model=PayrollRecordResponse, status_code=201)
def create_payroll_record(
    payload: PayrollRecordCreate,
    storage: Storage = Depends(get_storage),
    user=Depends(require_roles("payroll")),
):
    if not storage.get_employee(payload.employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    data = payload.model_dump()
    if data.get("net_pay") is None:
        data["net_pay"] = round(data["gross_pay"] - (data.get("deductions") or 0), 2)
    record = storage.create_payroll_record(data)
    create_activity_log(
        storage.db, "payroll_record_created", "payroll_record", record.id, user_id=user.id,
        description=f"Payroll record for {record.pay_period_start} - {record.pay_period_end}",
    )
    return record


@router.post("/{record_id}/process", response_model=PayrollRecordResponse)
def process_payroll_record(record_id: int, storage: Storage = Depends(get_storage), user=Depends(require_roles("payroll"))):
    record = storage.get_payroll_record(record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Payroll record not found")
    if record.processed:
        raise HTTPException(status_code=409, detail="Payroll record already processed")
    record = storage.update_payroll_record(record, {"processed": True, "processed_at": datetime.now(timezone.utc)})
    create_activity_log(storage.db, "payroll_processed", "payroll_record", record.id, user_id=user.id)
    return record
