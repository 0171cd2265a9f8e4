"""대시보드 집계 및 출퇴근 보고서 테스트.

Dashboard aggregation and attendance report export tests.
"""

from datetime import date, timedelta
from io import BytesIO

import pytest
import pytest_asyncio
from httpx import AsyncClient
from openpyxl import load_workbook

from app.models.work import ShiftAssignment
from app.services.attendance_service import attendance_service
from app.services.dashboard_service import dashboard_service
from app.services.leave_service import leave_service
from app.services.qr_token_service import qr_token_service
from app.utils.exceptions import ValidationError
from tests.conftest import NOW, auth_header

TODAY = date(2025, 1, 10)


@pytest_asyncio.fixture
async def busy_day(db, branch, shift, screen, personnel, admin_user):
    """지각 1건, 승인 휴가 1건, 대기 휴가 1건, 교대 배정 1건."""
    token = await qr_token_service.issue(db, branch.id, 3600, screen_id="lobby-1", now=NOW - timedelta(minutes=5))
    await attendance_service.record_scan(db, token.code, personnel.id, now=NOW)

    approved = await leave_service.create_request(db, personnel.id, "sick", TODAY, TODAY, None, None)
    await leave_service.approve(db, approved.id, admin_user.id, now=NOW)
    await leave_service.create_request(db, personnel.id, "annual", TODAY + timedelta(days=7), TODAY + timedelta(days=8), None, None)

    db.add(ShiftAssignment(personnel_id=personnel.id, shift_id=shift.id, work_date=TODAY))
    await db.flush()
    return personnel


class TestStats:
    async def test_counts_for_day(self, db, busy_day):
        stats = await dashboard_service.get_stats(db, today=TODAY)
        assert stats == {
            "date": TODAY,
            "total_personnel": 1,
            "working_today": 1,
            "on_leave": 1,
            "late_arrivals": 1,
            "today_qr_scans": 1,
            "pending_leave_requests": 1,
            "active_screens": 1,
        }

    async def test_other_day_is_empty(self, db, busy_day):
        stats = await dashboard_service.get_stats(db, today=TODAY + timedelta(days=1))
        assert stats["today_qr_scans"] == 0
        assert stats["on_leave"] == 0
        assert stats["pending_leave_requests"] == 1

    async def test_branch_scope(self, db, busy_day, other_branch):
        stats = await dashboard_service.get_stats(db, today=TODAY, branch_id=other_branch.id)
        assert stats["total_personnel"] == 0
        assert stats["today_qr_scans"] == 0
        assert stats["active_screens"] == 0

    async def test_stats_endpoint(self, client: AsyncClient, admin_token, busy_day):
        res = await client.get("/api/v1/admin/dashboard/stats", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["total_personnel"] == 1


class TestAttendanceReport:
    async def test_workbook_rows(self, db, busy_day):
        content = await dashboard_service.export_attendance_report(db, date_from=TODAY, date_to=TODAY)
        ws = load_workbook(BytesIO(content)).active

        assert ws.title == "Yoklama"
        assert [c.value for c in ws[1]][:3] == ["Sicil No", "Personel", "Tarih"]
        row = [c.value for c in ws[2]]
        assert row[0] == "P-001"
        assert row[1] == "Ayşe Yılmaz"
        assert row[2] == "2025-01-10"
        assert row[3] == "09:00"
        assert row[5] == "Geç"
        assert row[6] == "Lobi"
        assert ws.max_row == 2

    async def test_bad_range(self, db):
        with pytest.raises(ValidationError):
            await dashboard_service.export_attendance_report(db, date_from=TODAY, date_to=TODAY - timedelta(days=1))

    async def test_report_endpoint(self, client: AsyncClient, admin_token, busy_day):
        res = await client.get(
            "/api/v1/admin/dashboard/attendance-report",
            params={"date_from": "2025-01-10", "date_to": "2025-01-10"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert "attendance_report.xlsx" in res.headers["content-disposition"]
        assert load_workbook(BytesIO(res.content)).active.max_row == 2

    async def test_personnel_cannot_export(self, client: AsyncClient, personnel_token):
        res = await client.get("/api/v1/admin/dashboard/attendance-report", headers=auth_header(personnel_token))
        assert res.status_code == 403
