"""키오스크 화면 라우터 — 페어링 및 재검증 API.

Kiosk Screen Router. Public screen info, device pairing by access code
and the revalidation status check polled by paired devices.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.qr import DeviceStatusResponse, PairRequest, PairResponse, QRScreenPublicResponse
from app.services.qr_screen_service import qr_screen_service
from app.utils.datetime_utils import ensure_utc

router: APIRouter = APIRouter()


@router.get("/{screen_id}", response_model=QRScreenPublicResponse)
async def get_public_screen(
    screen_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """화면 공개 정보 — Name and active flag, no secrets."""
    screen = await qr_screen_service.get_screen(db, screen_id)
    return await qr_screen_service.build_public_response(db, screen)


@router.post("/{screen_id}/pair", response_model=PairResponse)
async def pair_device(
    screen_id: str,
    data: PairRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """접근 코드로 디바이스를 페어링합니다.

    Pair a device with the screen. The code is compared case-insensitively
    after trimming. A previously bound device is displaced.

    Args:
        screen_id: 화면 식별자 (Human screen id)
        data: 접근 코드와 디바이스 ID (Access code and device id)
        db: 비동기 데이터베이스 세션 (Async database session)

    Returns:
        dict: 디바이스가 저장할 페어링 레코드 (Pairing record for the device)

    Raises:
        ForbiddenError: 잘못된 코드 또는 비활성 화면 (Wrong code or inactive screen)
    """
    screen = await qr_screen_service.pair(db, screen_id, data.access_code, data.device_id)
    await db.commit()

    return {
        "screen_id": screen.screen_id,
        "device_id": screen.device_id,
        "authorized_at": ensure_utc(screen.last_activity),
    }


@router.get("/{screen_id}/status", response_model=DeviceStatusResponse)
async def get_device_status(
    screen_id: str,
    device_id: Annotated[str, Query(min_length=1)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """디바이스 페어링 유효성 확인 — Revalidation check for a paired device."""
    status = await qr_screen_service.device_status(db, screen_id, device_id)
    await db.commit()

    return status
