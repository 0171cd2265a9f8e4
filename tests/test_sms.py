"""NetGSM SMS 서비스 테스트.

SMS service tests: phone normalization, NetGSM reply parsing, bulk
delivery with per-number results and recipient targeting. The provider
is replaced by an httpx MockTransport.
"""

import httpx
import pytest
from httpx import AsyncClient

from app.config import settings
from app.models.personnel import Personnel
from app.services.sms_service import (
    InvalidPhoneNumber,
    normalize_phone,
    parse_netgsm_response,
    sms_service,
)
from app.utils.exceptions import DownstreamError
from tests.conftest import auth_header


@pytest.fixture
def netgsm(monkeypatch) -> list[httpx.Request]:
    """NetGSM 모의 서버 — 5로 끝나는 번호는 "05" 오류로 응답합니다."""
    sent: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        body = request.content.decode("utf-8")
        if "<no>5550000005</no>" in body:
            return httpx.Response(200, text="05")
        return httpx.Response(200, text=f"00 {12345 + len(sent)}")

    monkeypatch.setattr(settings, "NETGSM_USERNAME", "8501234567")
    monkeypatch.setattr(settings, "NETGSM_PASSWORD", "secret")
    monkeypatch.setattr(settings, "NETGSM_HEADER", "FIRMA")
    monkeypatch.setattr(settings, "SMS_SEND_INTERVAL_SECONDS", 0)
    monkeypatch.setattr(sms_service, "transport", httpx.MockTransport(handler))
    return sent


class TestNormalizePhone:
    @pytest.mark.parametrize(
        "raw",
        ["+90 532 123 45 67", "905321234567", "05321234567", "5321234567", " 0532-123-45-67 "],
    )
    def test_national_formats(self, raw):
        assert normalize_phone(raw) == "5321234567"

    @pytest.mark.parametrize("raw", ["12345", "053212345678", ""])
    def test_invalid(self, raw):
        with pytest.raises(InvalidPhoneNumber):
            normalize_phone(raw)


class TestParseResponse:
    def test_success(self):
        assert parse_netgsm_response("00 12345") == (True, "12345")

    def test_cdata_wrapped(self):
        assert parse_netgsm_response("<xml><![CDATA[00 987]]></xml>") == (True, "987")

    def test_error_codes(self):
        assert parse_netgsm_response("30") == (False, "NetGSM API hatası: 30")
        assert parse_netgsm_response("02") == (False, "Kullanıcı adı veya şifre hatalı")


class TestSend:
    async def test_single_send_posts_xml(self, netgsm):
        result = await sms_service.send_sms("+90 532 123 45 67", "Toplantı 10:00 & <salon>")
        assert result["status"] == "success"
        assert result["job_id"] == "12346"

        body = netgsm[0].content.decode("utf-8")
        assert netgsm[0].url == settings.NETGSM_API_URL
        assert "<usercode>8501234567</usercode>" in body
        assert "<msgheader>FIRMA</msgheader>" in body
        assert "<no>5321234567</no>" in body
        assert "<![CDATA[Toplantı 10:00 & <salon>]]>" in body

    async def test_bulk_reports_each_number(self, netgsm):
        summary = await sms_service.send_bulk(["05321234567", "123", "05550000005"], "Duyuru")

        assert summary["total"] == 3
        assert summary["success_count"] == 1
        assert summary["error_count"] == 2
        statuses = [(r["phone"], r["status"]) for r in summary["results"]]
        assert statuses == [("05321234567", "success"), ("123", "error"), ("05550000005", "error")]
        assert summary["results"][2]["message"] == "Geçersiz numara"
        # 잘못된 번호는 전송하지 않음 — the malformed number never reaches the provider
        assert len(netgsm) == 2

    async def test_transport_failure_is_per_number(self, monkeypatch, netgsm):
        def broken(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        monkeypatch.setattr(sms_service, "transport", httpx.MockTransport(broken))
        summary = await sms_service.send_bulk(["05321234567"], "Duyuru")
        assert summary["error_count"] == 1

    async def test_missing_credentials(self, monkeypatch):
        monkeypatch.setattr(settings, "NETGSM_USERNAME", "")
        with pytest.raises(DownstreamError):
            await sms_service.send_bulk(["05321234567"], "Duyuru")


class TestRecipients:
    async def _staff(self, db, branch, other_branch, department, team):
        """10명 중 3명만 지점+부서 조건에 해당."""
        rows = [
            # 지점 + 부서 일치, 전화 있음
            (branch.id, department.id, "05320000001", True),
            (branch.id, department.id, "05320000002", True),
            (branch.id, department.id, "05320000003", True),
            # 일치하지만 제외: 전화 없음, 빈 전화, 비활성
            (branch.id, department.id, None, True),
            (branch.id, department.id, "  ", True),
            (branch.id, department.id, "05320000006", False),
            # 부서 없음 / 다른 지점
            (branch.id, None, "05320000007", True),
            (branch.id, None, "05320000008", True),
            (other_branch.id, None, "05320000009", True),
            (other_branch.id, None, "05320000010", True),
        ]
        for index, (branch_id, department_id, phone, active) in enumerate(rows, start=1):
            db.add(Personnel(
                branch_id=branch_id,
                department_id=department_id,
                employee_number=f"E-{index:03d}",
                first_name="Personel",
                last_name=f"{index:02d}",
                phone=phone,
                is_active=active,
            ))
        await db.flush()

    async def test_branch_and_department_filter(self, db, branch, other_branch, department, team):
        await self._staff(db, branch, other_branch, department, team)
        phones = await sms_service.resolve_recipients(db, branch_id=branch.id, department_id=department.id)
        assert sorted(phones) == ["05320000001", "05320000002", "05320000003"]

    async def test_branch_only(self, db, branch, other_branch, department, team):
        await self._staff(db, branch, other_branch, department, team)
        phones = await sms_service.resolve_recipients(db, branch_id=branch.id)
        assert len(phones) == 5

    async def test_preview_endpoint(self, client: AsyncClient, db, admin_token, branch, other_branch, department, team):
        await self._staff(db, branch, other_branch, department, team)
        res = await client.get(
            "/api/v1/admin/sms/recipients",
            params={"branch_id": str(branch.id), "department_id": str(department.id)},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json()["total"] == 3

    async def test_bulk_endpoint_by_filter(
        self, client: AsyncClient, db, admin_token, netgsm, branch, other_branch, department, team
    ):
        await self._staff(db, branch, other_branch, department, team)
        res = await client.post(
            "/api/v1/admin/sms/send-bulk",
            json={"message": "Yarın tatil", "branch_id": str(branch.id), "department_id": str(department.id)},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json()["success_count"] == 3
        assert len(netgsm) == 3

    async def test_bulk_without_recipients(self, client: AsyncClient, admin_token, netgsm, branch):
        res = await client.post(
            "/api/v1/admin/sms/send-bulk",
            json={"message": "Yarın tatil", "branch_id": str(branch.id)},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 422

    async def test_unconfigured_provider_returns_502(self, client: AsyncClient, admin_token, monkeypatch):
        monkeypatch.setattr(settings, "NETGSM_USERNAME", "")
        res = await client.post(
            "/api/v1/admin/sms/send",
            json={"phone_number": "05321234567", "message": "Test"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 502
        assert res.json()["code"] == "downstream_failure"

    async def test_personnel_cannot_send(self, client: AsyncClient, personnel_token):
        res = await client.post(
            "/api/v1/admin/sms/send",
            json={"phone_number": "05321234567", "message": "Test"},
            headers=auth_header(personnel_token),
        )
        assert res.status_code == 403
