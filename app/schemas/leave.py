"""휴가 신청 Pydantic 스키마.

Leave request schemas.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field


class LeaveRequestCreate(BaseModel):
    """휴가 신청 생성 요청.

    ``personnel_id`` is required on the admin route and ignored on the
    personnel self-service route.
    """

    personnel_id: UUID | None = None
    leave_type: str  # annual | sick | maternity | paternity | unpaid | excuse
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=2000)


class LeaveRejectRequest(BaseModel):
    reason: str | None = None  # 반려 사유, 필수 (Required; checked by the service)


class LeaveRequestResponse(BaseModel):
    id: str
    personnel_id: str
    personnel_name: str | None = None
    leave_type: str
    start_date: date
    end_date: date
    total_days: int
    reason: str | None = None
    status: str
    requested_by: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime


class AnnualLeaveResponse(BaseModel):
    """연차 재계산 결과 — Recomputed annual leave ledger."""

    personnel_id: str
    hire_date: date | None = None
    annual_leave_entitlement: int
    used_annual_leave: int
    remaining_annual_leave: int
