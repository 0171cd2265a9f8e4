"""키오스크 API 라우터 패키지 — 인증 없는 화면 디바이스 엔드포인트.

Kiosk API Router package. Endpoints called by display devices, which
hold no user session. Access is governed by the screen's access code and
the bound device id instead of a bearer token.

Included routers:
    - screens: 공개 정보, 페어링, 상태 확인 (Public info, pairing, status)
    - qr_codes: 현재 토큰 폴링 (Current token polling)
"""

from fastapi import APIRouter

from app.api.kiosk.screens import router as screens_router
from app.api.kiosk.qr_codes import router as qr_codes_router

kiosk_router: APIRouter = APIRouter()

kiosk_router.include_router(screens_router, prefix="/screens", tags=["Kiosk Screens"])
kiosk_router.include_router(qr_codes_router, prefix="/qr-codes", tags=["Kiosk QR Codes"])
