"""QR 화면 레지스트리 및 페어링 프로토콜 테스트.

QR screen registry and server-side pairing protocol tests.
"""

import pytest
from httpx import AsyncClient

from app.services.qr_screen_service import qr_screen_service
from app.utils.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from tests.conftest import NOW, auth_header


class TestPairing:
    """접근 코드 페어링."""

    async def test_code_is_case_insensitive(self, db, branch):
        """소문자 "xj9k2p" 입력으로도 페어링 성공."""
        await qr_screen_service.create_screen(db, "gate", branch.id, "Kapı", access_code="XJ9K2P")

        screen = await qr_screen_service.pair(db, "gate", "xj9k2p", "device-a", now=NOW)
        assert screen.device_id == "device-a"

    async def test_code_is_trimmed(self, db, screen):
        paired = await qr_screen_service.pair(db, "lobby-1", "  abc123 ", "device-a", now=NOW)
        assert paired.device_id == "device-a"

    async def test_wrong_code_leaves_binding_untouched(self, db, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        with pytest.raises(ForbiddenError):
            await qr_screen_service.pair(db, "lobby-1", "WRONG1", "device-b", now=NOW)
        assert screen.device_id == "device-a"

    async def test_pairing_is_idempotent(self, db, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        again = await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        assert again.device_id == "device-a"
        status = await qr_screen_service.device_status(db, "lobby-1", "device-a", now=NOW)
        assert status["authorized"] is True

    async def test_last_pairing_wins(self, db, screen):
        """두 번째 디바이스가 페어링하면 첫 번째는 인증을 잃음."""
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-b", now=NOW)

        a = await qr_screen_service.device_status(db, "lobby-1", "device-a", now=NOW)
        b = await qr_screen_service.device_status(db, "lobby-1", "device-b", now=NOW)
        assert a == {"screen_id": "lobby-1", "authorized": False, "active": True, "reason": "device_mismatch"}
        assert b["authorized"] is True

    async def test_inactive_screen_cannot_be_paired(self, db, screen):
        screen.is_active = False
        await db.flush()
        with pytest.raises(ForbiddenError):
            await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)

    async def test_unknown_screen(self, db):
        with pytest.raises(NotFoundError):
            await qr_screen_service.pair(db, "ghost", "ABC123", "device-a", now=NOW)


class TestDeviceStatus:
    async def test_unbind_revokes(self, db, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        await qr_screen_service.unbind(db, "lobby-1")
        status = await qr_screen_service.device_status(db, "lobby-1", "device-a", now=NOW)
        assert status["reason"] == "unbound"
        assert status["authorized"] is False

    async def test_deactivation_revokes(self, db, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        await qr_screen_service.update_screen(db, "lobby-1", {"is_active": False})
        status = await qr_screen_service.device_status(db, "lobby-1", "device-a", now=NOW)
        assert status["reason"] == "inactive"
        assert status["active"] is False

    async def test_regenerating_code_keeps_device(self, db, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        updated = await qr_screen_service.regenerate_access_code(db, "lobby-1")
        assert updated.access_code != "ABC123"
        assert updated.device_id == "device-a"

    async def test_status_records_activity(self, db, screen):
        await qr_screen_service.device_status(db, "lobby-1", "device-a", now=NOW)
        assert screen.last_activity is not None


class TestScreenRegistry:
    async def test_generated_access_code(self, db, branch):
        created = await qr_screen_service.create_screen(db, "hall", branch.id, "Salon")
        assert created.access_code == created.access_code.upper()
        assert len(created.access_code) == 6

    async def test_duplicate_screen_id(self, db, branch, screen):
        with pytest.raises(ConflictError):
            await qr_screen_service.create_screen(db, "lobby-1", branch.id, "Kopya")

    async def test_last_screen_cannot_be_deleted(self, db, screen):
        with pytest.raises(BadRequestError):
            await qr_screen_service.delete_screen(db, "lobby-1")

    async def test_delete_when_others_remain(self, db, branch, screen):
        await qr_screen_service.create_screen(db, "hall", branch.id, "Salon")
        await qr_screen_service.delete_screen(db, "hall")
        with pytest.raises(NotFoundError):
            await qr_screen_service.get_screen(db, "hall")

    @pytest.mark.parametrize("field", ["name", "is_active", "screen_id", "branch_id"])
    async def test_required_fields_cannot_be_nulled(self, db, screen, field):
        with pytest.raises(ValidationError):
            await qr_screen_service.update_screen(db, "lobby-1", {field: None})

    async def test_update_may_clear_device(self, db, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        updated = await qr_screen_service.update_screen(db, "lobby-1", {"device_id": None})
        assert updated.device_id is None


class TestAdminScreenAPI:
    """관리자 화면 엔드포인트."""

    async def test_create_and_list(self, client: AsyncClient, admin_token, branch):
        res = await client.post(
            "/api/v1/admin/qr-screens",
            json={"screen_id": "hall", "branch_id": str(branch.id), "name": "Salon", "access_code": "  qw12er "},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 201
        assert res.json()["access_code"] == "QW12ER"
        assert res.json()["is_paired"] is False

        res = await client.get("/api/v1/admin/qr-screens", headers=auth_header(admin_token))
        assert [s["screen_id"] for s in res.json()] == ["hall"]

    async def test_duplicate_returns_409(self, client: AsyncClient, admin_token, branch, screen):
        res = await client.post(
            "/api/v1/admin/qr-screens",
            json={"screen_id": "lobby-1", "branch_id": str(branch.id), "name": "Lobi 2"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 409
        assert res.json()["code"] == "conflict"

    async def test_personnel_cannot_read_access_codes(self, client: AsyncClient, personnel_token, screen):
        res = await client.get("/api/v1/admin/qr-screens", headers=auth_header(personnel_token))
        assert res.status_code == 403

    async def test_unbind_endpoint(self, client: AsyncClient, db, admin_token, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        res = await client.post("/api/v1/admin/qr-screens/lobby-1/unbind", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["device_id"] is None
        assert res.json()["is_paired"] is False

    async def test_delete_last_screen_returns_400(self, client: AsyncClient, admin_token, screen):
        res = await client.delete("/api/v1/admin/qr-screens/lobby-1", headers=auth_header(admin_token))
        assert res.status_code == 400

    @pytest.mark.parametrize("body", [{"name": None}, {"is_active": None}, {"screen_id": None}])
    async def test_null_required_field_returns_422(self, client: AsyncClient, admin_token, screen, body):
        res = await client.put("/api/v1/admin/qr-screens/lobby-1", json=body, headers=auth_header(admin_token))
        assert res.status_code == 422
        assert res.json()["code"] == "validation_error"


class TestKioskAPI:
    """인증 없는 키오스크 엔드포인트."""

    async def test_public_info_hides_secrets(self, client: AsyncClient, screen):
        res = await client.get("/api/v1/kiosk/screens/lobby-1")
        assert res.status_code == 200
        assert res.json() == {"screen_id": "lobby-1", "name": "Lobi", "branch_name": "Merkez Şube", "is_active": True}

    async def test_pair_and_fetch_token(self, client: AsyncClient, screen):
        res = await client.post(
            "/api/v1/kiosk/screens/lobby-1/pair",
            json={"access_code": "abc123", "device_id": "device-a"},
        )
        assert res.status_code == 200
        assert res.json()["device_id"] == "device-a"

        res = await client.get("/api/v1/kiosk/qr-codes/screen/lobby-1", params={"device_id": "device-a"})
        assert res.status_code == 200
        first = res.json()
        assert first["screen_id"] == "lobby-1"

        # 현재 토큰이 살아 있으면 같은 토큰 — same token while it is live
        res = await client.get("/api/v1/kiosk/qr-codes/screen/lobby-1", params={"device_id": "device-a"})
        assert res.json()["code"] == first["code"]

    async def test_wrong_code_returns_403(self, client: AsyncClient, screen):
        res = await client.post(
            "/api/v1/kiosk/screens/lobby-1/pair",
            json={"access_code": "nope", "device_id": "device-a"},
        )
        assert res.status_code == 403

    async def test_token_refused_for_other_device(self, client: AsyncClient, db, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        res = await client.get("/api/v1/kiosk/qr-codes/screen/lobby-1", params={"device_id": "device-b"})
        assert res.status_code == 403

        res = await client.get("/api/v1/kiosk/qr-codes/screen/lobby-1")
        assert res.status_code == 403

    async def test_token_refused_for_inactive_screen(self, client: AsyncClient, db, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        screen.is_active = False
        await db.flush()
        res = await client.get("/api/v1/kiosk/qr-codes/screen/lobby-1", params={"device_id": "device-a"})
        assert res.status_code == 403

    async def test_status_endpoint(self, client: AsyncClient, db, screen):
        await qr_screen_service.pair(db, "lobby-1", "ABC123", "device-a", now=NOW)
        res = await client.get("/api/v1/kiosk/screens/lobby-1/status", params={"device_id": "device-b"})
        assert res.status_code == 200
        assert res.json()["reason"] == "device_mismatch"

    async def test_unknown_screen_returns_404(self, client: AsyncClient):
        res = await client.get("/api/v1/kiosk/screens/ghost")
        assert res.status_code == 404
        assert res.json()["code"] == "not_found"
