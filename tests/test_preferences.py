"""사용자 환경설정 테스트 — User preference store tests."""

import pytest
from httpx import AsyncClient

from app.services.preference_service import preference_service
from app.utils.exceptions import NotFoundError, ValidationError
from tests.conftest import auth_header


class TestPreferenceService:
    async def test_set_overwrites(self, db, admin_user):
        await preference_service.set(db, admin_user.id, "menu_order", ["qr", "leave"])
        await preference_service.set(db, admin_user.id, "menu_order", ["leave", "qr"])
        assert await preference_service.get_all(db, admin_user.id) == {"menu_order": ["leave", "qr"]}

    async def test_scoped_per_user(self, db, admin_user, super_admin_user):
        await preference_service.set(db, admin_user.id, "sidebar.collapsed", True)
        assert await preference_service.get_all(db, super_admin_user.id) == {}

    async def test_invalid_key(self, db, admin_user):
        with pytest.raises(ValidationError):
            await preference_service.set(db, admin_user.id, "bad key!", 1)

    async def test_delete_missing(self, db, admin_user):
        with pytest.raises(NotFoundError):
            await preference_service.delete(db, admin_user.id, "menu_order")


class TestPreferenceAPI:
    async def test_put_get_delete(self, client: AsyncClient, personnel_token):
        headers = auth_header(personnel_token)
        res = await client.put("/api/v1/app/my/preferences/theme", json={"value": {"mode": "dark"}}, headers=headers)
        assert res.status_code == 200
        assert res.json() == {"key": "theme", "value": {"mode": "dark"}}

        res = await client.get("/api/v1/app/my/preferences", headers=headers)
        assert res.json() == {"theme": {"mode": "dark"}}

        res = await client.delete("/api/v1/app/my/preferences/theme", headers=headers)
        assert res.json() == {"message": "Tercih silindi"}

        res = await client.get("/api/v1/app/my/preferences", headers=headers)
        assert res.json() == {}

    async def test_requires_auth(self, client: AsyncClient):
        res = await client.get("/api/v1/app/my/preferences")
        assert res.status_code == 401
