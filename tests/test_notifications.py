"""알림 전파 테스트.

Notification broadcaster tests: target validation, per-user visibility,
read receipts and SMS fan-out.
"""

import httpx
import pytest
from httpx import AsyncClient

from app.config import settings
from app.services.notification_service import notification_service
from app.services.sms_service import sms_service
from app.utils.exceptions import NotFoundError, ValidationError
from tests.conftest import auth_header


async def _notify(db, target_type="all", target_id=None, title="Duyuru", send_sms=False):
    notification, summary = await notification_service.create(
        db,
        title=title,
        message="Yarın bakım çalışması var",
        type="info",
        target_type=target_type,
        target_id=target_id,
        sender_user_id=None,
        send_sms=send_sms,
    )
    return notification, summary


class TestTargets:
    async def test_target_id_required(self, db):
        with pytest.raises(ValidationError):
            await _notify(db, target_type="branch")

    async def test_target_must_exist(self, db):
        import uuid
        with pytest.raises(NotFoundError):
            await _notify(db, target_type="team", target_id=uuid.uuid4())

    async def test_invalid_type(self, db):
        with pytest.raises(ValidationError):
            await notification_service.create(db, "T", "M", "urgent", "all", None, None)

    async def test_all_drops_target_id(self, db, branch):
        notification, summary = await _notify(db, target_type="all", target_id=branch.id)
        assert notification.target_id is None
        assert summary is None


class TestVisibility:
    """사용자별 가시성."""

    async def test_user_sees_all_own_branch_team_and_individual(
        self, db, personnel_user, personnel, branch, other_branch, team
    ):
        await _notify(db, "all", title="Herkes")
        await _notify(db, "branch", branch.id, title="Şube")
        await _notify(db, "team", team.id, title="Takım")
        await _notify(db, "individual", personnel.id, title="Kişisel")
        await _notify(db, "branch", other_branch.id, title="Başka şube")

        items, total = await notification_service.list_for_user(db, personnel_user.id)
        assert total == 4
        assert {n.title for n, _ in items} == {"Herkes", "Şube", "Takım", "Kişisel"}
        assert all(read is False for _, read in items)

    async def test_user_without_personnel_sees_only_broadcasts(self, db, admin_user, branch):
        await _notify(db, "all", title="Herkes")
        await _notify(db, "branch", branch.id, title="Şube")
        items, total = await notification_service.list_for_user(db, admin_user.id)
        assert total == 1
        assert items[0][0].title == "Herkes"

    async def test_mark_read_is_idempotent(self, db, personnel_user, personnel):
        notification, _ = await _notify(db)
        await _notify(db, title="İkinci")
        assert await notification_service.get_unread_count(db, personnel_user.id) == 2

        await notification_service.mark_read(db, notification.id, personnel_user.id)
        await notification_service.mark_read(db, notification.id, personnel_user.id)
        assert await notification_service.get_unread_count(db, personnel_user.id) == 1

    async def test_read_receipts_are_per_user(self, db, personnel_user, personnel, admin_user):
        notification, _ = await _notify(db)
        await notification_service.mark_read(db, notification.id, personnel_user.id)
        assert await notification_service.get_unread_count(db, admin_user.id) == 1

    async def test_cannot_mark_invisible_notification(self, db, personnel_user, personnel, other_branch):
        notification, _ = await _notify(db, "branch", other_branch.id)
        with pytest.raises(NotFoundError):
            await notification_service.mark_read(db, notification.id, personnel_user.id)


class TestSMSFanOut:
    async def test_send_sms_to_targets(self, db, branch, personnel, monkeypatch):
        sent: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request.content.decode("utf-8"))
            return httpx.Response(200, text="00 12345")

        monkeypatch.setattr(settings, "NETGSM_USERNAME", "8501234567")
        monkeypatch.setattr(settings, "NETGSM_PASSWORD", "secret")
        monkeypatch.setattr(settings, "SMS_SEND_INTERVAL_SECONDS", 0)
        monkeypatch.setattr(sms_service, "transport", httpx.MockTransport(handler))

        _, summary = await _notify(db, "branch", branch.id, send_sms=True)
        assert summary["total"] == 1
        assert summary["success_count"] == 1
        assert "<no>5321234567</no>" in sent[0]
        assert "Duyuru\nYarın bakım çalışması var" in sent[0]


class TestNotificationAPI:
    async def test_admin_creates_and_personnel_reads(
        self, client: AsyncClient, admin_token, personnel_token, branch, personnel
    ):
        res = await client.post(
            "/api/v1/admin/notifications",
            json={"title": "Toplantı", "message": "Saat 14:00", "target_type": "branch", "target_id": str(branch.id)},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 201
        assert res.json()["sms"] is None
        notification_id = res.json()["notification"]["id"]

        res = await client.get("/api/v1/app/my/notifications", headers=auth_header(personnel_token))
        assert res.json()["total"] == 1
        assert res.json()["items"][0]["is_read"] is False

        res = await client.get("/api/v1/app/my/notifications/unread-count", headers=auth_header(personnel_token))
        assert res.json() == {"unread_count": 1}

        res = await client.patch(
            f"/api/v1/app/my/notifications/{notification_id}/read", headers=auth_header(personnel_token)
        )
        assert res.status_code == 200

        res = await client.get("/api/v1/app/my/notifications/unread-count", headers=auth_header(personnel_token))
        assert res.json() == {"unread_count": 0}

    async def test_personnel_cannot_broadcast(self, client: AsyncClient, personnel_token):
        res = await client.post(
            "/api/v1/admin/notifications",
            json={"title": "Toplantı", "message": "Saat 14:00"},
            headers=auth_header(personnel_token),
        )
        assert res.status_code == 403

    async def test_bad_target_type_rejected(self, client: AsyncClient, admin_token):
        res = await client.post(
            "/api/v1/admin/notifications",
            json={"title": "T", "message": "M", "target_type": "department"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 422
