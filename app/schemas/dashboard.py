"""대시보드 Pydantic 스키마.

Dashboard schemas.
"""

from datetime import date
from pydantic import BaseModel


class DashboardStatsResponse(BaseModel):
    """대시보드 통계 — Counters for one business day."""

    date: date
    total_personnel: int
    working_today: int
    on_leave: int
    late_arrivals: int
    today_qr_scans: int
    pending_leave_requests: int
    active_screens: int
