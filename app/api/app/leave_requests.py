"""앱 휴가 라우터 — 내 휴가 신청 API.

App Leave Router. Personnel submit and follow their own leave requests.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_personnel, require_permission
from app.database import get_db
from app.models.personnel import Personnel
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.schemas.leave import LeaveRequestCreate, LeaveRequestResponse
from app.services.leave_service import leave_service
from app.services.permission_service import Permission

router: APIRouter = APIRouter()


@router.post("", response_model=LeaveRequestResponse, status_code=201)
async def create_my_leave_request(
    data: LeaveRequestCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.LEAVE_CREATE))],
    personnel: Annotated[Personnel, Depends(get_current_personnel)],
) -> dict:
    """내 휴가 신청 — 본인 기록으로만 생성 (Always filed for the caller).

    Args:
        data: 휴가 신청 데이터, personnel_id는 무시 (personnel_id is ignored)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 휴가 신청 권한 사용자 (User with leave_create)
        personnel: 호출자의 직원 기록 (Caller's personnel record)

    Returns:
        dict: 생성된 신청 (Created pending request)
    """
    leave = await leave_service.create_request(
        db,
        personnel_id=personnel.id,
        leave_type=data.leave_type,
        start_date=data.start_date,
        end_date=data.end_date,
        reason=data.reason,
        requested_by=current_user.id,
    )
    await db.commit()

    return (await leave_service.build_responses(db, [leave]))[0]


@router.get("", response_model=PaginatedResponse)
async def list_my_leave_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    personnel: Annotated[Personnel, Depends(get_current_personnel)],
    status: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    leaves, total = await leave_service.list_requests(
        db, status=status, personnel_id=personnel.id, page=page, per_page=per_page
    )
    return {
        "items": await leave_service.build_responses(db, leaves),
        "total": total,
        "page": page,
        "per_page": per_page,
    }
