"""키오스크 QR 코드 라우터 — 화면 현재 토큰 API.

Kiosk QR Code Router. A paired device polls its screen's current token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.qr import QRTokenResponse
from app.services.qr_screen_service import qr_screen_service
from app.services.qr_token_service import qr_token_service

router: APIRouter = APIRouter()


@router.get("/screen/{screen_id}", response_model=QRTokenResponse)
async def get_screen_token(
    screen_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    device_id: Annotated[str | None, Query()] = None,
) -> dict:
    """화면의 현재 토큰을 반환합니다.

    Current token for the screen. Only the paired device of an active
    screen is served; a token is issued on the spot when none is current.

    Raises:
        NotFoundError: 화면 없음 (Unknown screen)
        ForbiddenError: 비활성 화면 또는 미인증 디바이스 (Inactive screen or unpaired device)
    """
    screen = await qr_screen_service.require_paired(db, screen_id, device_id)
    token = await qr_token_service.ensure_current_for_screen(db, screen)
    await db.commit()

    return await qr_token_service.build_response(db, token)
