"""출퇴근 기록 Pydantic 스키마.

Attendance record response schemas.
"""

from datetime import date, datetime
from pydantic import BaseModel


class AttendanceRecordResponse(BaseModel):
    """출퇴근 기록 응답 — Attendance record."""

    id: str
    personnel_id: str
    personnel_name: str | None = None
    date: date
    check_in_time: datetime | None = None
    check_out_time: datetime | None = None
    qr_code_id: str | None = None
    qr_screen_id: str | None = None
    location: str | None = None
    status: str  # "present" | "late" | "early_leave" | "absent"
    notes: str | None = None


class ScanResponse(BaseModel):
    """스캔 결과 — Scan outcome."""

    message: str
    action: str  # "check_in" | "check_out"
    record: AttendanceRecordResponse
