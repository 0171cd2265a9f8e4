"""관리자 휴가 라우터 — 휴가 신청 승인/반려 API.

Admin Leave Router. Listing, approval, rejection, creation on behalf of
personnel and annual entitlement recalculation.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.schemas.leave import (
    AnnualLeaveResponse,
    LeaveRejectRequest,
    LeaveRequestCreate,
    LeaveRequestResponse,
)
from app.services.leave_service import leave_service
from app.services.permission_service import Permission
from app.utils.exceptions import ValidationError

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_leave_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.LEAVE_MANAGEMENT))],
    status: Annotated[str | None, Query()] = None,
    personnel_id: Annotated[UUID | None, Query()] = None,
    branch_id: Annotated[UUID | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=200)] = 20,
) -> dict:
    """휴가 신청 목록 — List leave requests with optional filters."""
    leaves, total = await leave_service.list_requests(
        db, status=status, personnel_id=personnel_id, branch_id=branch_id, page=page, per_page=per_page
    )
    return {
        "items": await leave_service.build_responses(db, leaves),
        "total": total,
        "page": page,
        "per_page": per_page,
    }


@router.get("/pending", response_model=PaginatedResponse)
async def list_pending_leave_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.LEAVE_MANAGEMENT))],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=200)] = 20,
) -> dict:
    leaves, total = await leave_service.list_requests(db, status="pending", page=page, per_page=per_page)
    return {
        "items": await leave_service.build_responses(db, leaves),
        "total": total,
        "page": page,
        "per_page": per_page,
    }


@router.post("", response_model=LeaveRequestResponse, status_code=201)
async def create_leave_request(
    data: LeaveRequestCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.LEAVE_MANAGEMENT))],
) -> dict:
    """직원 대신 휴가 신청 생성 — Create a request on behalf of a personnel."""
    if data.personnel_id is None:
        raise ValidationError("Personel ID gereklidir (personnel_id is required)")
    leave = await leave_service.create_request(
        db,
        personnel_id=data.personnel_id,
        leave_type=data.leave_type,
        start_date=data.start_date,
        end_date=data.end_date,
        reason=data.reason,
        requested_by=current_user.id,
    )
    await db.commit()

    return (await leave_service.build_responses(db, [leave]))[0]


@router.post("/{leave_id}/approve", response_model=LeaveRequestResponse)
async def approve_leave_request(
    leave_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.LEAVE_APPROVE))],
) -> dict:
    """휴가 신청을 승인합니다. 연차는 잔여 일수에서 차감됩니다.

    Approve a pending request. Annual leave is deducted from the balance.

    Args:
        leave_id: 휴가 신청 UUID (Leave request UUID)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 승인 권한 사용자 (User with leave_approve)

    Returns:
        dict: 승인된 신청 (Approved request)
    """
    leave = await leave_service.approve(db, leave_id, approver_id=current_user.id)
    await db.commit()

    return (await leave_service.build_responses(db, [leave]))[0]


@router.post("/{leave_id}/reject", response_model=LeaveRequestResponse)
async def reject_leave_request(
    leave_id: UUID,
    data: LeaveRejectRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.LEAVE_REJECT))],
) -> dict:
    """휴가 신청 반려 — 사유 필수 (A reason is required)."""
    leave = await leave_service.reject(db, leave_id, approver_id=current_user.id, reason=data.reason)
    await db.commit()

    return (await leave_service.build_responses(db, [leave]))[0]


@router.post("/personnel/{personnel_id}/annual-leave/recalculate", response_model=AnnualLeaveResponse)
async def recalculate_annual_leave(
    personnel_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.PERSONNEL_EDIT))],
) -> dict:
    """근속 연수로 연차 재계산 — Recompute entitlement from tenure."""
    personnel = await leave_service.recalculate_entitlement(db, personnel_id)
    await db.commit()

    return {
        "personnel_id": str(personnel.id),
        "hire_date": personnel.hire_date,
        "annual_leave_entitlement": personnel.annual_leave_entitlement,
        "used_annual_leave": personnel.used_annual_leave,
        "remaining_annual_leave": personnel.remaining_annual_leave,
    }
