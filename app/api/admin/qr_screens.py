"""관리자 QR 화면 라우터 — 키오스크 화면 관리 API.

Admin QR Screen Router. Screen CRUD, device unbinding and access code
regeneration. Responses include the access code, so every endpoint here
requires qr_management.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.qr import QRScreenCreate, QRScreenResponse, QRScreenUpdate
from app.services.permission_service import Permission
from app.services.qr_screen_service import qr_screen_service

router: APIRouter = APIRouter()

QRManager = Annotated[User, Depends(require_permission(Permission.QR_MANAGEMENT))]


@router.get("", response_model=list[QRScreenResponse])
async def list_qr_screens(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: QRManager,
    branch_id: Annotated[UUID | None, Query()] = None,
    is_active: Annotated[bool | None, Query()] = None,
) -> list[dict]:
    """화면 목록 조회 — List screens, optionally filtered."""
    screens = await qr_screen_service.list_screens(db, branch_id=branch_id, is_active=is_active)
    return [await qr_screen_service.build_response(db, s) for s in screens]


@router.post("", response_model=QRScreenResponse, status_code=201)
async def create_qr_screen(
    data: QRScreenCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: QRManager,
) -> dict:
    """키오스크 화면을 등록합니다.

    Register a kiosk screen. An access code is generated when none is given.

    Args:
        data: 화면 생성 데이터 (Screen creation data)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: QR 관리 권한 사용자 (User with qr_management)

    Returns:
        dict: 생성된 화면 (Created screen)
    """
    screen = await qr_screen_service.create_screen(
        db,
        screen_id=data.screen_id,
        branch_id=data.branch_id,
        name=data.name,
        access_code=data.access_code,
        is_active=data.is_active,
    )
    await db.commit()

    return await qr_screen_service.build_response(db, screen)


@router.get("/{screen_id}", response_model=QRScreenResponse)
async def get_qr_screen(
    screen_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: QRManager,
) -> dict:
    screen = await qr_screen_service.get_screen(db, screen_id)
    return await qr_screen_service.build_response(db, screen)


@router.put("/{screen_id}", response_model=QRScreenResponse)
async def update_qr_screen(
    screen_id: str,
    data: QRScreenUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: QRManager,
) -> dict:
    """화면 정보 부분 수정. ``device_id: null``은 바인딩 해제입니다.

    Partial update. Sending ``device_id: null`` unbinds the device.
    """
    screen = await qr_screen_service.update_screen(db, screen_id, data.model_dump(exclude_unset=True))
    await db.commit()

    return await qr_screen_service.build_response(db, screen)


@router.delete("/{screen_id}", response_model=MessageResponse)
async def delete_qr_screen(
    screen_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: QRManager,
) -> dict:
    """화면 삭제 — 마지막 화면은 삭제 불가 (The last screen cannot be deleted)."""
    await qr_screen_service.delete_screen(db, screen_id)
    await db.commit()

    return {"message": "QR ekranı silindi"}


@router.post("/{screen_id}/unbind", response_model=QRScreenResponse)
async def unbind_qr_screen(
    screen_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: QRManager,
) -> dict:
    """디바이스 바인딩 해제. 디바이스는 다음 재검증에서 페어링 해제됩니다.

    Unbind the paired device. The device notices on its next revalidation.
    """
    screen = await qr_screen_service.unbind(db, screen_id)
    await db.commit()

    return await qr_screen_service.build_response(db, screen)


@router.post("/{screen_id}/regenerate-code", response_model=QRScreenResponse)
async def regenerate_access_code(
    screen_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: QRManager,
) -> dict:
    """새 접근 코드 생성 — 현재 디바이스는 페어링 유지 (Current device stays paired)."""
    screen = await qr_screen_service.regenerate_access_code(db, screen_id)
    await db.commit()

    return await qr_screen_service.build_response(db, screen)
