"""키오스크 디스플레이 상태 머신 테스트.

Display-side pairing state machine tests, driven against the real kiosk
API through the ASGI test client.
"""

import asyncio

import httpx
import pytest
from httpx import AsyncClient

from app.kiosk.device_store import DeviceStore
from app.kiosk.display import KioskDisplay, KioskState
from tests.conftest import auth_header


@pytest.fixture
def store_a(tmp_path) -> DeviceStore:
    return DeviceStore(tmp_path / "a.json")


@pytest.fixture
def store_b(tmp_path) -> DeviceStore:
    return DeviceStore(tmp_path / "b.json")


class TestDeviceStore:
    def test_device_id_is_stable(self, tmp_path):
        first = DeviceStore(tmp_path / "state.json").get_or_create_device_id()
        second = DeviceStore(tmp_path / "state.json").get_or_create_device_id()
        assert first == second

    def test_pairing_roundtrip_and_removal(self, store_a):
        store_a.save_pairing("lobby-1", "device-a", "2025-01-10T06:00:00+00:00")
        assert store_a.get_pairing("lobby-1")["device_id"] == "device-a"
        store_a.remove_pairing("lobby-1")
        assert store_a.get_pairing("lobby-1") is None

    def test_corrupt_file_starts_fresh(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        store = DeviceStore(path)
        assert store.get_pairing("lobby-1") is None
        assert store.get_or_create_device_id()


class TestPairingFlow:
    """페어링 상태 전이."""

    async def test_start_without_record_awaits_code(self, client: AsyncClient, screen, store_a):
        display = KioskDisplay("lobby-1", store_a, client)
        assert await display.start() is KioskState.AWAITING_CODE

    async def test_wrong_code_stays_awaiting(self, client: AsyncClient, screen, store_a):
        display = KioskDisplay("lobby-1", store_a, client)
        await display.start()

        assert await display.submit_code("WRONG1") is False
        assert display.state is KioskState.AWAITING_CODE
        assert display.last_error == "Geçersiz erişim kodu (Invalid access code)"
        assert store_a.get_pairing("lobby-1") is None

    async def test_lowercase_code_pairs_and_persists(self, client: AsyncClient, screen, store_a):
        display = KioskDisplay("lobby-1", store_a, client)
        await display.start()

        assert await display.submit_code("abc123") is True
        assert display.state is KioskState.PAIRED
        assert store_a.get_pairing("lobby-1")["device_id"] == display.device_id

        token = await display.fetch_token()
        assert token is not None and token["screen_id"] == "lobby-1"

    async def test_cached_pairing_resumes(self, client: AsyncClient, screen, store_a):
        """재시작 시 서버와 일치하는 캐시 인증은 그대로 PAIRED."""
        first = KioskDisplay("lobby-1", store_a, client)
        await first.start()
        await first.submit_code("ABC123")

        restarted = KioskDisplay("lobby-1", store_a, client)
        assert await restarted.start() is KioskState.PAIRED


class TestRevocation:
    """폴링으로 관찰되는 인증 취소."""

    async def _paired(self, client, store) -> KioskDisplay:
        display = KioskDisplay("lobby-1", store, client)
        await display.start()
        assert await display.submit_code("ABC123")
        return display

    async def test_second_device_revokes_first(self, client: AsyncClient, screen, store_a, store_b):
        a = await self._paired(client, store_a)
        b = await self._paired(client, store_b)

        assert await a.revalidate() is KioskState.REVOKED
        assert a.state is KioskState.UNPAIRED
        assert a.history[-2:] == [KioskState.REVOKED, KioskState.UNPAIRED]
        assert store_a.get_pairing("lobby-1") is None

        assert await b.revalidate() is KioskState.PAIRED

    async def test_stale_cache_is_discarded_on_start(self, client: AsyncClient, screen, store_a, store_b):
        await self._paired(client, store_a)
        await self._paired(client, store_b)

        restarted = KioskDisplay("lobby-1", store_a, client)
        assert await restarted.start() is KioskState.AWAITING_CODE
        assert store_a.get_pairing("lobby-1") is None

    async def test_admin_unbind_revokes(self, client: AsyncClient, screen, admin_token, store_a):
        display = await self._paired(client, store_a)
        res = await client.post("/api/v1/admin/qr-screens/lobby-1/unbind", headers=auth_header(admin_token))
        assert res.status_code == 200

        assert await display.revalidate() is KioskState.REVOKED

    async def test_deactivated_screen_refuses_token(self, client: AsyncClient, db, screen, store_a):
        display = await self._paired(client, store_a)
        screen.is_active = False
        await db.flush()

        assert await display.fetch_token() is None
        assert display.state is KioskState.UNPAIRED
        assert display.current_token is None

    async def test_local_record_removed(self, client: AsyncClient, screen, store_a):
        display = await self._paired(client, store_a)
        store_a.remove_pairing("lobby-1")
        assert await display.revalidate() is KioskState.REVOKED


class TestRunLoop:
    async def test_run_pairs_and_shows_token(self, client: AsyncClient, screen, store_a, monkeypatch):
        from app.config import settings
        monkeypatch.setattr(settings, "KIOSK_TOKEN_POLL_SECONDS", 0.01)

        display = KioskDisplay("lobby-1", store_a, client)
        stop = asyncio.Event()
        shown: list[str] = []

        async def read_code() -> str:
            return "abc123"

        def on_token(token: dict) -> None:
            shown.append(token["code"])
            stop.set()

        await asyncio.wait_for(display.run(read_code, on_token=on_token, stop=stop), timeout=5)
        assert display.state is KioskState.PAIRED
        assert len(shown) == 1

    async def test_server_errors_are_retried(self, store_a, monkeypatch):
        """503 응답에도 루프는 종료되지 않고 다음 주기에 재시도."""
        from app.config import settings
        monkeypatch.setattr(settings, "KIOSK_TOKEN_POLL_SECONDS", 0.01)

        stop = asyncio.Event()
        requests: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.url.path)
            if len(requests) >= 3:
                stop.set()
            return httpx.Response(503, json={"message": "Service Unavailable"})

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="http://kiosk.test"
        ) as http:
            display = KioskDisplay("lobby-1", store_a, http)
            display._set_state(KioskState.AWAITING_CODE)

            async def read_code() -> str:
                return "ABC123"

            await asyncio.wait_for(display.run(read_code, stop=stop), timeout=5)

        assert len(requests) >= 3
        assert all(path == "/api/v1/kiosk/screens/lobby-1/pair" for path in requests)
        assert display.state is KioskState.AWAITING_CODE
        assert store_a.get_pairing("lobby-1") is None
