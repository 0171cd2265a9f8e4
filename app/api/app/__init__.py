"""앱 API 라우터 패키지 — 모든 앱(직원용) 엔드포인트 통합.

App API Router package — Aggregates all app-facing (personnel) endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - attendance: QR 스캔, 코드 확인, 내 기록 (Scan, validate, my records)
    - leave_requests: 내 휴가 신청 (My leave requests)
    - notifications: 내 알림 (My notifications)
    - preferences: 내 환경설정 (My UI preferences)
"""

from fastapi import APIRouter

from app.api.app.attendance import router as attendance_router
from app.api.app.leave_requests import router as leave_requests_router
from app.api.app.notifications import router as notifications_router
from app.api.app.preferences import router as preferences_router

app_router: APIRouter = APIRouter()

# 출퇴근: /attendance/scan, /qr-codes/validate, /my/attendance
app_router.include_router(attendance_router, tags=["App Attendance"])
# 내 휴가: /my/leave-requests 하위 (My leave requests)
app_router.include_router(leave_requests_router, prefix="/my/leave-requests", tags=["App Leave Requests"])
# 내 알림: /my/notifications 하위 (My notifications)
app_router.include_router(notifications_router, prefix="/my/notifications", tags=["App Notifications"])
app_router.include_router(preferences_router, prefix="/my/preferences", tags=["App Preferences"])
