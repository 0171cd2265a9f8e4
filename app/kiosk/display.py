"""키오스크 디스플레이 상태 머신.

Display-side pairing state machine::

    UNPAIRED -> AWAITING_CODE -> PAIRED -> REVOKED -> UNPAIRED

A paired display revalidates every ``KIOSK_REVALIDATE_SECONDS`` and polls
its screen's current token every ``KIOSK_TOKEN_POLL_SECONDS``. Revocation
(another device paired, unbind, screen deactivated, local record removed)
is only observed by polling.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import httpx

from app.config import settings
from app.kiosk.device_store import DeviceStore

logger = logging.getLogger(__name__)


class KioskState(str, Enum):
    UNPAIRED = "unpaired"
    AWAITING_CODE = "awaiting_code"
    PAIRED = "paired"
    REVOKED = "revoked"


class KioskDisplay:
    """하나의 화면을 표시하는 키오스크 디바이스.

    Args:
        screen_id: 화면 식별자 (Human screen id)
        store: 로컬 디바이스 저장소 (Local device store)
        http: 서버 기본 URL이 설정된 httpx 클라이언트 (Client bound to the server)
        base_path: 키오스크 API 경로 (Kiosk API prefix)
    """

    def __init__(
        self,
        screen_id: str,
        store: DeviceStore,
        http: httpx.AsyncClient,
        base_path: str = "/api/v1/kiosk",
    ) -> None:
        self.screen_id: str = screen_id
        self.store: DeviceStore = store
        self.http: httpx.AsyncClient = http
        self.base_path: str = base_path.rstrip("/")
        self.device_id: str = store.get_or_create_device_id()
        self.state: KioskState = KioskState.UNPAIRED
        self.history: list[KioskState] = [KioskState.UNPAIRED]
        self.current_token: dict[str, Any] | None = None
        self.last_error: str | None = None

    def _set_state(self, state: KioskState) -> None:
        if state is not self.state:
            logger.info("Kiosk %s: %s -> %s", self.screen_id, self.state.value, state.value)
            self.state = state
            self.history.append(state)

    def _revoke(self, reason: str) -> KioskState:
        """로컬 인증 삭제 후 미페어링으로 복귀 — Purge the local record and fall back to UNPAIRED."""
        logger.warning("Kiosk %s authorization revoked: %s", self.screen_id, reason)
        self.store.remove_pairing(self.screen_id)
        self.current_token = None
        self._set_state(KioskState.REVOKED)
        self._set_state(KioskState.UNPAIRED)
        return KioskState.REVOKED

    async def _server_status(self) -> dict[str, Any] | None:
        response = await self.http.get(
            f"{self.base_path}/screens/{self.screen_id}/status",
            params={"device_id": self.device_id},
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    async def start(self) -> KioskState:
        """로드 시 호출 — 캐시된 인증을 서버와 대조합니다.

        On load: a cached authorization that still matches server state
        resumes PAIRED; otherwise the display prompts for a code.
        """
        pairing = self.store.get_pairing(self.screen_id)
        if pairing is not None and pairing.get("device_id") == self.device_id:
            status = await self._server_status()
            if status is not None and status["authorized"]:
                self._set_state(KioskState.PAIRED)
                return self.state
            self.store.remove_pairing(self.screen_id)
        self._set_state(KioskState.AWAITING_CODE)
        return self.state

    async def submit_code(self, code: str) -> bool:
        """접근 코드 제출.

        Submit an access code. On success the pairing is cached locally and
        the display becomes PAIRED. A rejected code keeps AWAITING_CODE.

        Returns:
            bool: 페어링 성공 여부 (Whether pairing succeeded)
        """
        self._set_state(KioskState.AWAITING_CODE)
        response = await self.http.post(
            f"{self.base_path}/screens/{self.screen_id}/pair",
            json={"access_code": code, "device_id": self.device_id},
        )
        if response.status_code in (403, 404, 422):
            self.last_error = response.json().get("message")
            logger.warning("Kiosk %s pairing rejected (%s)", self.screen_id, response.status_code)
            return False
        response.raise_for_status()

        body: dict[str, Any] = response.json()
        self.store.save_pairing(self.screen_id, body["device_id"], body["authorized_at"])
        self.last_error = None
        self._set_state(KioskState.PAIRED)
        return True

    async def revalidate(self) -> KioskState:
        """주기적 재검증.

        Periodic revalidation while PAIRED. Returns REVOKED when the local
        record is gone, the server binds another device, the device was
        unbound or the screen is inactive; the display is then UNPAIRED.
        """
        if self.state is not KioskState.PAIRED:
            return self.state

        pairing = self.store.get_pairing(self.screen_id)
        if pairing is None:
            return self._revoke("local authorization removed")
        if pairing.get("device_id") != self.device_id:
            return self._revoke("local record belongs to another device")

        status = await self._server_status()
        if status is None:
            return self._revoke("screen no longer exists")
        if not status["authorized"]:
            return self._revoke(status["reason"])
        return self.state

    async def fetch_token(self) -> dict[str, Any] | None:
        """현재 토큰 조회 — Fetch the screen's current token while PAIRED."""
        if self.state is not KioskState.PAIRED:
            return None
        response = await self.http.get(
            f"{self.base_path}/qr-codes/screen/{self.screen_id}",
            params={"device_id": self.device_id},
        )
        if response.status_code in (403, 404):
            self._revoke(response.json().get("message") or "token refused")
            return None
        response.raise_for_status()
        self.current_token = response.json()
        return self.current_token

    async def run(
        self,
        read_code: Callable[[], Awaitable[str]],
        on_token: Callable[[dict[str, Any]], None] | None = None,
        stop: asyncio.Event | None = None,
    ) -> None:
        """디스플레이 메인 루프.

        Main loop. Prompts through ``read_code`` while unpaired, then
        revalidates and polls tokens on their intervals until ``stop`` is set.
        Transport failures and unexpected server statuses are logged and
        retried on the next tick without changing state.
        """
        stop = stop or asyncio.Event()
        loop = asyncio.get_running_loop()
        last_check: float = loop.time()
        shown: str | None = None

        while not stop.is_set():
            try:
                if self.state in (KioskState.UNPAIRED, KioskState.REVOKED):
                    await self.start()
                    continue
                if self.state is KioskState.AWAITING_CODE:
                    await self.submit_code(await read_code())
                    last_check = loop.time()
                    continue

                if loop.time() - last_check >= settings.KIOSK_REVALIDATE_SECONDS:
                    last_check = loop.time()
                    if await self.revalidate() is KioskState.REVOKED:
                        continue

                token = await self.fetch_token()
                if token is not None and on_token is not None and token["code"] != shown:
                    shown = token["code"]
                    on_token(token)
            except httpx.TransportError as exc:
                logger.warning("Kiosk %s cannot reach server: %s", self.screen_id, exc)
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    "Kiosk %s server returned %s, retrying", self.screen_id, exc.response.status_code
                )

            try:
                await asyncio.wait_for(stop.wait(), timeout=settings.KIOSK_TOKEN_POLL_SECONDS)
            except asyncio.TimeoutError:
                pass
