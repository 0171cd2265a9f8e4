"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package. Importing from this package registers every
model with the metadata, which Alembic and ``create_all`` rely on.

Modules:
    organization: 지점, 부서, 팀 (Branch, Department, Team)
    personnel: 직원 (Personnel)
    work: 교대 및 교대 배정 (Shift, ShiftAssignment)
    user: 사용자 계정 (User)
    attendance: QR 토큰, 키오스크 화면, 출퇴근 기록 (QRToken, QRScreen, AttendanceRecord)
    leave: 휴가 신청 (LeaveRequest)
    notification: 알림 및 읽음 기록 (Notification, NotificationRead)
    preference: 사용자 환경설정 (UserPreference)
"""

from app.models.organization import Branch, Department, Team
from app.models.user import User
from app.models.work import Shift, ShiftAssignment
from app.models.personnel import Personnel
from app.models.attendance import QRToken, QRScreen, AttendanceRecord
from app.models.leave import LeaveRequest
from app.models.notification import Notification, NotificationRead
from app.models.preference import UserPreference

__all__ = [
    "Branch", "Department", "Team",
    "User",
    "Shift", "ShiftAssignment",
    "Personnel",
    "QRToken", "QRScreen", "AttendanceRecord",
    "LeaveRequest",
    "Notification", "NotificationRead",
    "UserPreference",
]
