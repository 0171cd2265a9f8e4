"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - qr_codes: QR 토큰 발급/무효화 (Manual token issue and bulk invalidation)
    - qr_screens: 키오스크 화면 관리 (Kiosk screen registry)
    - attendance: 출퇴근 기록 조회 (Attendance records)
    - leave_requests: 휴가 승인/반려 (Leave approval workflow)
    - notifications: 알림 발송 (Notification broadcast)
    - sms: NetGSM SMS 발송 (Single and bulk SMS)
    - dashboard: 통계 및 보고서 (Counters and attendance report)
"""

from fastapi import APIRouter

from app.api.admin.qr_codes import router as qr_codes_router
from app.api.admin.qr_screens import router as qr_screens_router
from app.api.admin.attendance import router as attendances_router
from app.api.admin.leave_requests import router as leave_requests_router
from app.api.admin.notifications import router as notifications_router
from app.api.admin.sms import router as sms_router
from app.api.admin.dashboard import router as dashboard_router

admin_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# QR 라우터 등록 — Register QR routers
# ---------------------------------------------------------------------------
admin_router.include_router(qr_codes_router, prefix="/qr-codes", tags=["Admin QR Codes"])
admin_router.include_router(qr_screens_router, prefix="/qr-screens", tags=["Admin QR Screens"])

# ---------------------------------------------------------------------------
# 근태/휴가 라우터 등록 — Register attendance and leave routers
# ---------------------------------------------------------------------------
admin_router.include_router(attendances_router, prefix="/attendance", tags=["Admin Attendance"])
admin_router.include_router(leave_requests_router, prefix="/leave-requests", tags=["Admin Leave Requests"])

# ---------------------------------------------------------------------------
# 커뮤니케이션 라우터 등록 — Register communication routers
# ---------------------------------------------------------------------------
admin_router.include_router(notifications_router, prefix="/notifications", tags=["Admin Notifications"])
admin_router.include_router(sms_router, prefix="/sms", tags=["Admin SMS"])

admin_router.include_router(dashboard_router, prefix="/dashboard", tags=["Admin Dashboard"])
