"""휴가 신청 서비스 — 승인 워크플로와 일수 계산.

Leave Workflow. Three-state approval (pending → approved | rejected) with
inclusive day counting and the annual leave ledger on the personnel record.
"""

import logging
from datetime import date, datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.leave import LeaveRequest
from app.models.personnel import Personnel
from app.repositories.leave_repository import leave_request_repository
from app.repositories.personnel_repository import personnel_repository
from app.utils.datetime_utils import ensure_utc, local_date, utc_now
from app.utils.exceptions import BadRequestError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

LEAVE_TYPES: tuple[str, ...] = ("annual", "sick", "maternity", "paternity", "unpaid", "excuse")
ANNUAL_LEAVE_TYPE: str = "annual"


def calculate_total_days(start_date: date, end_date: date) -> int:
    """포함 범위 일수 — Inclusive day count; 2025-01-10..2025-01-12 is 3 days.

    Raises:
        ValidationError: 종료일이 시작일보다 빠름 (End before start)
    """
    if end_date < start_date:
        raise ValidationError("Bitiş tarihi başlangıç tarihinden önce olamaz (End date cannot be before start date)")
    return (end_date - start_date).days + 1


def calculate_annual_leave_entitlement(hire_date: date, today: date) -> int:
    """근속 연수 기준 연차 일수.

    Annual leave entitlement by completed years of service:
    under 1 year → 0, 1-5 → 15, 6-14 → 20, 15 or more → 26.
    """
    years: int = today.year - hire_date.year
    if (today.month, today.day) < (hire_date.month, hire_date.day):
        years -= 1
    if years < 1:
        return 0
    if years <= 5:
        return 15
    if years < 15:
        return 20
    return 26


class LeaveService:
    """휴가 신청 서비스 — Leave request workflow."""

    async def _get(self, db: AsyncSession, leave_id: UUID) -> LeaveRequest:
        leave: LeaveRequest | None = await leave_request_repository.get_by_id(db, leave_id)
        if leave is None:
            raise NotFoundError("İzin talebi bulunamadı (Leave request not found)")
        return leave

    async def create_request(
        self,
        db: AsyncSession,
        personnel_id: UUID,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str | None,
        requested_by: UUID | None,
    ) -> LeaveRequest:
        """휴가 신청을 생성합니다 (대기 상태).

        Create a pending leave request with the computed inclusive day count.

        Raises:
            ValidationError: 잘못된 휴가 유형 또는 날짜 범위 (Bad leave type or date range)
            NotFoundError: 직원 없음 (Unknown personnel)
        """
        if leave_type not in LEAVE_TYPES:
            raise ValidationError("Geçersiz izin türü (Invalid leave type)")
        total_days: int = calculate_total_days(start_date, end_date)

        personnel: Personnel | None = await personnel_repository.get_by_id(db, personnel_id)
        if personnel is None:
            raise NotFoundError("Personel bulunamadı (Personnel not found)")

        leave: LeaveRequest = await leave_request_repository.create(
            db,
            {
                "personnel_id": personnel_id,
                "leave_type": leave_type,
                "start_date": start_date,
                "end_date": end_date,
                "total_days": total_days,
                "reason": reason,
                "status": "pending",
                "requested_by": requested_by,
            },
        )
        logger.info("Leave request created id=%s personnel=%s days=%d", leave.id, personnel_id, total_days)
        return leave

    async def approve(
        self,
        db: AsyncSession,
        leave_id: UUID,
        approver_id: UUID,
        now: datetime | None = None,
    ) -> LeaveRequest:
        """휴가 신청을 승인합니다. 연차는 사용 일수에 반영됩니다.

        Approve a pending request. Approved annual leave is added to the
        personnel's used days and the remaining balance is recomputed.

        Raises:
            NotFoundError: 신청 없음 (Unknown request)
            BadRequestError: 대기 상태가 아님 (Not pending)
        """
        leave: LeaveRequest = await self._get(db, leave_id)
        if leave.status != "pending":
            raise BadRequestError("Sadece bekleyen talepler onaylanabilir (Only pending requests can be approved)")

        leave = await leave_request_repository.update(
            db,
            leave,
            {
                "status": "approved",
                "approved_by": approver_id,
                "approved_at": ensure_utc(now) if now is not None else utc_now(),
            },
        )

        if leave.leave_type == ANNUAL_LEAVE_TYPE:
            personnel: Personnel | None = await personnel_repository.get_by_id(db, leave.personnel_id)
            if personnel is not None:
                used: int = (personnel.used_annual_leave or 0) + leave.total_days
                await personnel_repository.update(
                    db,
                    personnel,
                    {
                        "used_annual_leave": used,
                        "remaining_annual_leave": max(0, (personnel.annual_leave_entitlement or 0) - used),
                    },
                )

        logger.info("Leave request approved id=%s by=%s", leave.id, approver_id)
        return leave

    async def reject(
        self,
        db: AsyncSession,
        leave_id: UUID,
        approver_id: UUID,
        reason: str | None,
        now: datetime | None = None,
    ) -> LeaveRequest:
        """휴가 신청을 반려합니다. 반려 사유는 필수입니다.

        Reject a pending request. A non-empty reason is required.

        Raises:
            ValidationError: 사유 누락 (Missing reason)
            NotFoundError: 신청 없음 (Unknown request)
            BadRequestError: 대기 상태가 아님 (Not pending)
        """
        if reason is None or not reason.strip():
            raise ValidationError("Ret nedeni gereklidir (Rejection reason is required)")
        leave: LeaveRequest = await self._get(db, leave_id)
        if leave.status != "pending":
            raise BadRequestError("Sadece bekleyen talepler reddedilebilir (Only pending requests can be rejected)")

        leave = await leave_request_repository.update(
            db,
            leave,
            {
                "status": "rejected",
                "approved_by": approver_id,
                "approved_at": ensure_utc(now) if now is not None else utc_now(),
                "rejection_reason": reason.strip(),
            },
        )
        logger.info("Leave request rejected id=%s by=%s", leave.id, approver_id)
        return leave

    async def list_requests(
        self,
        db: AsyncSession,
        status: str | None = None,
        personnel_id: UUID | None = None,
        branch_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[LeaveRequest], int]:
        return await leave_request_repository.get_by_filters(
            db, status=status, personnel_id=personnel_id, branch_id=branch_id, page=page, per_page=per_page
        )

    async def recalculate_entitlement(
        self,
        db: AsyncSession,
        personnel_id: UUID,
        today: date | None = None,
    ) -> Personnel:
        """근속 연수로 연차를 재계산해 저장합니다.

        Recompute and store a personnel's annual entitlement and remaining days.

        Raises:
            NotFoundError: 직원 없음 (Unknown personnel)
            BadRequestError: 입사일 없음 (No hire date on record)
        """
        personnel: Personnel | None = await personnel_repository.get_by_id(db, personnel_id)
        if personnel is None:
            raise NotFoundError("Personel bulunamadı (Personnel not found)")
        if personnel.hire_date is None:
            raise BadRequestError("Personelin işe giriş tarihi yok (Personnel has no hire date)")

        entitlement: int = calculate_annual_leave_entitlement(personnel.hire_date, today or local_date())
        return await personnel_repository.update(
            db,
            personnel,
            {
                "annual_leave_entitlement": entitlement,
                "remaining_annual_leave": max(0, entitlement - (personnel.used_annual_leave or 0)),
            },
        )

    async def build_responses(self, db: AsyncSession, leaves: Sequence[LeaveRequest]) -> list[dict]:
        """휴가 신청 응답 목록 (직원 이름 포함) — Response dicts with personnel names."""
        ids = {leave.personnel_id for leave in leaves}
        names: dict[UUID, str] = {}
        if ids:
            result = await db.execute(select(Personnel).where(Personnel.id.in_(ids)))
            names = {p.id: p.full_name for p in result.scalars().all()}
        return [
            {
                "id": str(leave.id),
                "personnel_id": str(leave.personnel_id),
                "personnel_name": names.get(leave.personnel_id),
                "leave_type": leave.leave_type,
                "start_date": leave.start_date,
                "end_date": leave.end_date,
                "total_days": leave.total_days,
                "reason": leave.reason,
                "status": leave.status,
                "requested_by": str(leave.requested_by) if leave.requested_by else None,
                "approved_by": str(leave.approved_by) if leave.approved_by else None,
                "approved_at": ensure_utc(leave.approved_at) if leave.approved_at else None,
                "rejection_reason": leave.rejection_reason,
                "created_at": ensure_utc(leave.created_at),
            }
            for leave in leaves
        ]


leave_service: LeaveService = LeaveService()
