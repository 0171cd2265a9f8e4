"""관리자 QR 코드 라우터 — QR 토큰 발급 및 무효화 API.

Admin QR Code Router. Manual token issue, live token listing and the
bulk invalidation used when codes are believed to be compromised.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.user import User
from app.schemas.qr import QRCodeCreate, QRInvalidateResponse, QRTokenResponse
from app.services.permission_service import Permission
from app.services.qr_token_service import qr_token_service

router: APIRouter = APIRouter()


@router.post("", response_model=QRTokenResponse, status_code=201)
async def create_qr_code(
    data: QRCodeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.QR_CREATE))],
) -> dict:
    """지점용 QR 토큰을 수동 발급합니다. 기존 토큰은 유지됩니다.

    Issue a manual token for a branch. Existing tokens stay valid until
    they expire; expired ones are deactivated first.

    Args:
        data: 지점 및 유효 시간(분) (Branch and expiry minutes)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: QR 생성 권한 사용자 (User with qr_create)

    Returns:
        dict: 발급된 QR 토큰 (Issued token)
    """
    token = await qr_token_service.issue_manual(
        db,
        branch_id=data.branch_id,
        expiry_minutes=data.expiry_minutes,
        created_by=current_user.id,
    )
    await db.commit()

    return await qr_token_service.build_response(db, token)


@router.get("/active", response_model=list[QRTokenResponse])
async def list_active_qr_codes(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.QR_MANAGEMENT))],
    branch_id: Annotated[UUID | None, Query()] = None,
) -> list[dict]:
    """현재 유효한 QR 토큰 목록 — Tokens that are active and unexpired."""
    tokens = await qr_token_service.list_active(db, branch_id=branch_id)
    return [await qr_token_service.build_response(db, t) for t in tokens]


@router.delete("/all", response_model=QRInvalidateResponse)
async def invalidate_all_qr_codes(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.QR_MANAGEMENT))],
    branch_id: Annotated[UUID | None, Query()] = None,
) -> dict:
    """활성 QR 토큰을 모두 비활성화합니다 (되돌릴 수 없음).

    Deactivate every active token, optionally within one branch. Rows are
    kept for audit. Kiosks pick up a fresh token on their next poll.

    Returns:
        dict: {message, deleted_count}
    """
    count: int = await qr_token_service.invalidate_all(db, branch_id=branch_id)
    await db.commit()

    return {"message": "Tüm QR kodlar silindi", "deleted_count": count}
