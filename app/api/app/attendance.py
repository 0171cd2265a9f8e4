"""앱 출퇴근 라우터 — QR 스캔 및 내 기록 API.

App Attendance Router. QR scan, code validation and my own records.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_personnel, get_current_user, require_permission
from app.database import get_db
from app.models.personnel import Personnel
from app.models.user import User
from app.repositories.personnel_repository import personnel_repository
from app.schemas.attendance import ScanResponse
from app.schemas.common import PaginatedResponse
from app.schemas.qr import QRScanRequest, QRValidateRequest, QRValidateResponse
from app.services.attendance_service import attendance_service
from app.services.permission_service import Permission, permission_service
from app.services.qr_token_service import qr_token_service
from app.utils.datetime_utils import ensure_utc
from app.utils.exceptions import ForbiddenError

router: APIRouter = APIRouter()

_ACTION_MESSAGES: dict[str, str] = {
    "check_in": "Giriş kaydedildi",
    "check_out": "Çıkış kaydedildi",
}


@router.post("/attendance/scan", response_model=ScanResponse)
async def scan_attendance(
    data: QRScanRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """QR 코드를 스캔하여 출근 또는 퇴근을 기록합니다.

    Scan a QR code to record a check-in or check-out. Without
    ``personnel_id`` the caller's own personnel record is used; recording
    for someone else requires attendance_edit.

    Args:
        data: QR 스캔 요청 (Scan request)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 사용자 (Authenticated user)

    Returns:
        dict: {message, action, record}

    Raises:
        ForbiddenError: 직원 기록 없음 또는 타인 기록 권한 없음
                        (No linked personnel, or not allowed to scan for others)
    """
    own: Personnel | None = await personnel_repository.get_by_user_id(db, current_user.id)
    personnel_id = data.personnel_id or (own.id if own is not None else None)
    if personnel_id is None:
        raise ForbiddenError("Hesabınıza bağlı personel kaydı yok (No personnel record linked to this account)")
    if (own is None or personnel_id != own.id) and not permission_service.has_permission(
        current_user, Permission.ATTENDANCE_EDIT
    ):
        raise ForbiddenError()

    record, action = await attendance_service.record_scan(db, data.code, personnel_id)
    await db.commit()

    return {
        "message": _ACTION_MESSAGES[action],
        "action": action,
        "record": (await attendance_service.build_responses(db, [record]))[0],
    }


@router.post("/qr-codes/validate", response_model=QRValidateResponse)
async def validate_qr_code(
    data: QRValidateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.QR_VIEW))],
) -> dict:
    """코드 유효성 확인 (기록하지 않음) — Check a code without recording anything."""
    token = await qr_token_service.validate(db, data.code)
    return {"valid": True, "expires_at": ensure_utc(token.expires_at), "branch_id": str(token.branch_id)}


@router.get("/my/attendance", response_model=PaginatedResponse)
async def list_my_attendance(
    db: Annotated[AsyncSession, Depends(get_db)],
    personnel: Annotated[Personnel, Depends(get_current_personnel)],
    date_from: Annotated[date | None, Query()] = None,
    date_to: Annotated[date | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """내 출퇴근 기록 — My attendance history."""
    records, total = await attendance_service.list_records(
        db, personnel_id=personnel.id, date_from=date_from, date_to=date_to, page=page, per_page=per_page
    )
    return {
        "items": await attendance_service.build_responses(db, records),
        "total": total,
        "page": page,
        "per_page": per_page,
    }
