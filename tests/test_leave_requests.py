"""휴가 신청 워크플로 테스트.

Leave workflow tests: day counting, approval ledger, rejection rules,
tenure-based entitlement and the admin/app endpoints.
"""

from datetime import date

import pytest
from httpx import AsyncClient

from app.services.leave_service import (
    calculate_annual_leave_entitlement,
    calculate_total_days,
    leave_service,
)
from app.utils.exceptions import BadRequestError, NotFoundError, ValidationError
from tests.conftest import NOW, auth_header


class TestDayCount:
    def test_inclusive_range(self):
        """2025-01-10..2025-01-12 → 3일."""
        assert calculate_total_days(date(2025, 1, 10), date(2025, 1, 12)) == 3

    def test_single_day(self):
        assert calculate_total_days(date(2025, 1, 10), date(2025, 1, 10)) == 1

    def test_end_before_start(self):
        with pytest.raises(ValidationError):
            calculate_total_days(date(2025, 1, 12), date(2025, 1, 10))


class TestEntitlement:
    """근속 연수별 연차."""

    @pytest.mark.parametrize(
        ("hire_date", "expected"),
        [
            (date(2024, 6, 1), 0),
            (date(2024, 1, 10), 15),
            (date(2020, 3, 1), 15),
            (date(2019, 1, 10), 20),
            (date(2010, 1, 11), 20),
            (date(2010, 1, 10), 26),
        ],
    )
    def test_thresholds(self, hire_date, expected):
        assert calculate_annual_leave_entitlement(hire_date, date(2025, 1, 10)) == expected

    async def test_recalculate_keeps_used_days(self, db, personnel):
        personnel.used_annual_leave = 4
        await db.flush()
        updated = await leave_service.recalculate_entitlement(db, personnel.id, today=date(2025, 1, 10))
        assert updated.annual_leave_entitlement == 15
        assert updated.remaining_annual_leave == 11

    async def test_recalculate_never_goes_negative(self, db, personnel):
        personnel.used_annual_leave = 18
        await db.flush()
        updated = await leave_service.recalculate_entitlement(db, personnel.id, today=date(2025, 1, 10))
        assert updated.remaining_annual_leave == 0

    async def test_recalculate_without_hire_date(self, db, personnel):
        personnel.hire_date = None
        await db.flush()
        with pytest.raises(BadRequestError):
            await leave_service.recalculate_entitlement(db, personnel.id)


class TestWorkflow:
    """대기 → 승인 | 반려."""

    async def _request(self, db, personnel, leave_type="annual"):
        return await leave_service.create_request(
            db, personnel.id, leave_type, date(2025, 1, 10), date(2025, 1, 12), "Aile ziyareti", None
        )

    async def test_create_is_pending(self, db, personnel):
        leave = await self._request(db, personnel)
        assert leave.status == "pending"
        assert leave.total_days == 3

    async def test_invalid_leave_type(self, db, personnel):
        with pytest.raises(ValidationError):
            await self._request(db, personnel, leave_type="vacation")

    async def test_approve_updates_annual_ledger(self, db, personnel, admin_user):
        leave = await self._request(db, personnel)
        approved = await leave_service.approve(db, leave.id, admin_user.id, now=NOW)

        assert approved.status == "approved"
        assert approved.approved_by == admin_user.id
        await db.refresh(personnel)
        assert personnel.used_annual_leave == 3
        assert personnel.remaining_annual_leave == 17

    async def test_approve_clamps_remaining_at_zero(self, db, personnel, admin_user):
        personnel.used_annual_leave = 19
        await db.flush()
        leave = await self._request(db, personnel)
        await leave_service.approve(db, leave.id, admin_user.id, now=NOW)
        await db.refresh(personnel)
        assert personnel.used_annual_leave == 22
        assert personnel.remaining_annual_leave == 0

    async def test_approving_sick_leave_keeps_ledger(self, db, personnel, admin_user):
        leave = await self._request(db, personnel, leave_type="sick")
        await leave_service.approve(db, leave.id, admin_user.id, now=NOW)
        await db.refresh(personnel)
        assert personnel.used_annual_leave == 0

    async def test_reject_requires_reason(self, db, personnel, admin_user):
        leave = await self._request(db, personnel)
        for reason in (None, "   "):
            with pytest.raises(ValidationError):
                await leave_service.reject(db, leave.id, admin_user.id, reason, now=NOW)

        rejected = await leave_service.reject(db, leave.id, admin_user.id, " Yoğun dönem ", now=NOW)
        assert rejected.status == "rejected"
        assert rejected.rejection_reason == "Yoğun dönem"

    async def test_decided_requests_are_final(self, db, personnel, admin_user):
        leave = await self._request(db, personnel)
        await leave_service.approve(db, leave.id, admin_user.id, now=NOW)
        with pytest.raises(BadRequestError):
            await leave_service.approve(db, leave.id, admin_user.id, now=NOW)
        with pytest.raises(BadRequestError):
            await leave_service.reject(db, leave.id, admin_user.id, "Geç kaldı", now=NOW)

    async def test_unknown_request(self, db, admin_user):
        import uuid
        with pytest.raises(NotFoundError):
            await leave_service.approve(db, uuid.uuid4(), admin_user.id)


class TestLeaveAPI:
    async def test_personnel_creates_own_request(self, client: AsyncClient, personnel, personnel_token):
        res = await client.post(
            "/api/v1/app/my/leave-requests",
            json={"leave_type": "annual", "start_date": "2025-01-10", "end_date": "2025-01-12"},
            headers=auth_header(personnel_token),
        )
        assert res.status_code == 201
        assert res.json()["total_days"] == 3
        assert res.json()["personnel_id"] == str(personnel.id)

        res = await client.get("/api/v1/app/my/leave-requests", headers=auth_header(personnel_token))
        assert res.json()["total"] == 1

    async def test_personnel_cannot_approve(self, client: AsyncClient, db, personnel, personnel_token):
        leave = await leave_service.create_request(
            db, personnel.id, "annual", date(2025, 1, 10), date(2025, 1, 10), None, None
        )
        res = await client.post(
            f"/api/v1/admin/leave-requests/{leave.id}/approve", headers=auth_header(personnel_token)
        )
        assert res.status_code == 403

    async def test_admin_approve_and_pending_list(self, client: AsyncClient, db, personnel, admin_token):
        leave = await leave_service.create_request(
            db, personnel.id, "annual", date(2025, 1, 10), date(2025, 1, 12), None, None
        )
        res = await client.get("/api/v1/admin/leave-requests/pending", headers=auth_header(admin_token))
        assert res.json()["total"] == 1

        res = await client.post(f"/api/v1/admin/leave-requests/{leave.id}/approve", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["status"] == "approved"
        assert res.json()["personnel_name"] == "Ayşe Yılmaz"

        res = await client.get("/api/v1/admin/leave-requests/pending", headers=auth_header(admin_token))
        assert res.json()["total"] == 0

    async def test_reject_without_reason_returns_422(self, client: AsyncClient, db, personnel, admin_token):
        leave = await leave_service.create_request(
            db, personnel.id, "annual", date(2025, 1, 10), date(2025, 1, 12), None, None
        )
        res = await client.post(
            f"/api/v1/admin/leave-requests/{leave.id}/reject", json={}, headers=auth_header(admin_token)
        )
        assert res.status_code == 422
        assert res.json()["code"] == "validation_error"

    async def test_admin_create_requires_personnel_id(self, client: AsyncClient, admin_token):
        res = await client.post(
            "/api/v1/admin/leave-requests",
            json={"leave_type": "sick", "start_date": "2025-01-10", "end_date": "2025-01-10"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 422
