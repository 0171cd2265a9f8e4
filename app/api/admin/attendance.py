"""관리자 출퇴근 라우터 — 출퇴근 기록 조회 API.

Admin Attendance Router. Filtered record listing and today's records.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.services.attendance_service import attendance_service
from app.services.permission_service import Permission

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_attendance_records(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.ATTENDANCE_VIEW))],
    branch_id: Annotated[UUID | None, Query()] = None,
    personnel_id: Annotated[UUID | None, Query()] = None,
    date_from: Annotated[date | None, Query()] = None,
    date_to: Annotated[date | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=200)] = 20,
) -> dict:
    """출퇴근 기록 목록을 필터링하여 조회합니다.

    List attendance records with optional filters.

    Args:
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 출퇴근 조회 권한 사용자 (User with attendance_view)
        branch_id: 지점 필터 (Optional branch filter)
        personnel_id: 직원 필터 (Optional personnel filter)
        date_from: 시작일 (Inclusive start date)
        date_to: 종료일 (Inclusive end date)
        status: 상태 필터 (Optional status filter)
        page: 페이지 번호 (Page number)
        per_page: 페이지당 항목 수 (Items per page)

    Returns:
        dict: 페이지네이션된 기록 목록 (Paginated record list)
    """
    records, total = await attendance_service.list_records(
        db,
        branch_id=branch_id,
        personnel_id=personnel_id,
        date_from=date_from,
        date_to=date_to,
        status=status,
        page=page,
        per_page=per_page,
    )

    return {
        "items": await attendance_service.build_responses(db, records),
        "total": total,
        "page": page,
        "per_page": per_page,
    }


@router.get("/today", response_model=PaginatedResponse)
async def list_today_records(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.ATTENDANCE_VIEW))],
    branch_id: Annotated[UUID | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=200)] = 50,
) -> dict:
    """오늘(업무 타임존) 기록 — Today's records in the business timezone."""
    records, total = await attendance_service.list_today(db, branch_id=branch_id, page=page, per_page=per_page)

    return {
        "items": await attendance_service.build_responses(db, records),
        "total": total,
        "page": page,
        "per_page": per_page,
    }
