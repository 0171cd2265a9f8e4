"""QR 화면 레지스트리 및 키오스크 페어링 서비스.

QR Screen Registry and the server side of the kiosk pairing protocol.

Pairing model:
    - A display device proves possession of the screen's access code
      (trimmed, compared case-insensitively) and becomes the screen's
      ``device_id``. The last successful pairing wins.
    - ``device_id`` on the screen is the single source of truth. A device's
      cached pairing is honoured only while it equals ``device_id`` and the
      screen is active.
    - Unbinding clears ``device_id``; the device notices on its next
      revalidation poll. Nothing is pushed.
    - Changing the access code does not unbind the current device.
    - Pairing attempts are not rate limited.
"""

import logging
from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.attendance import QRScreen
from app.models.organization import Branch
from app.repositories.organization_repository import branch_repository
from app.repositories.qr_repository import qr_screen_repository
from app.utils.codes import generate_access_code, normalize_access_code
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class QRScreenService:
    """키오스크 화면 서비스 — Screen CRUD, pairing and device status."""

    async def get_screen(self, db: AsyncSession, screen_id: str) -> QRScreen:
        """화면 ID로 조회, 없으면 404 — Fetch a screen by its human id or raise 404."""
        screen: QRScreen | None = await qr_screen_repository.get_by_screen_id(db, screen_id)
        if screen is None:
            raise NotFoundError("QR ekranı bulunamadı (QR screen not found)")
        return screen

    async def list_screens(
        self,
        db: AsyncSession,
        branch_id: UUID | None = None,
        is_active: bool | None = None,
    ) -> Sequence[QRScreen]:
        return await qr_screen_repository.get_list(db, branch_id=branch_id, is_active=is_active)

    async def create_screen(
        self,
        db: AsyncSession,
        screen_id: str,
        branch_id: UUID,
        name: str,
        access_code: str | None = None,
        is_active: bool = True,
    ) -> QRScreen:
        """키오스크 화면을 등록합니다.

        Register a kiosk screen. When no access code is given one is generated.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            screen_id: 사람이 지정한 화면 식별자 (Human-assigned screen id)
            branch_id: 소속 지점 UUID (Owning branch)
            name: 표시 이름 (Display name)
            access_code: 접근 코드, 선택 (Access code, generated when omitted)
            is_active: 활성 여부 (Active flag)

        Returns:
            QRScreen: 생성된 화면 (Created screen)

        Raises:
            ValidationError: 빈 화면 ID 또는 접근 코드 (Blank screen id or access code)
            NotFoundError: 지점 없음 (Unknown branch)
            ConflictError: 화면 ID 중복 (Duplicate screen id)
        """
        screen_id = screen_id.strip()
        if not screen_id:
            raise ValidationError("Ekran ID gereklidir (Screen id is required)")
        if await branch_repository.get_by_id(db, branch_id) is None:
            raise NotFoundError("Şube bulunamadı (Branch not found)")
        if await qr_screen_repository.exists(db, {"screen_id": screen_id}):
            raise ConflictError("Bu ekran ID zaten kullanılıyor (Screen id already exists)")

        code: str = normalize_access_code(access_code) if access_code is not None else ""
        if access_code is not None and not code:
            raise ValidationError("Erişim kodu boş olamaz (Access code cannot be blank)")

        screen: QRScreen = await qr_screen_repository.create(
            db,
            {
                "screen_id": screen_id,
                "branch_id": branch_id,
                "name": name,
                "access_code": code or generate_access_code(settings.ACCESS_CODE_LENGTH),
                "is_active": is_active,
            },
        )
        logger.info("QR screen created screen_id=%s branch=%s", screen_id, branch_id)
        return screen

    async def update_screen(
        self,
        db: AsyncSession,
        screen_id: str,
        update_data: dict[str, Any],
    ) -> QRScreen:
        """화면 정보를 부분 수정합니다.

        Partial update of name, screen id, branch, access code, active flag
        or device id. ``device_id=None`` unbinds the current device.

        Raises:
            NotFoundError: 화면 또는 지점 없음 (Unknown screen or branch)
            ConflictError: 새 화면 ID 중복 (New screen id already taken)
            ValidationError: 빈 접근 코드 또는 null 필수 필드 (Blank access code or null required field)
        """
        screen: QRScreen = await self.get_screen(db, screen_id)
        data: dict[str, Any] = dict(update_data)

        # device_id 만 null 허용 (only device_id may be cleared)
        for field in ("screen_id", "branch_id", "name", "is_active"):
            if field in data and data[field] is None:
                raise ValidationError(f"{field} boş olamaz ({field} cannot be null)")

        new_screen_id = data.get("screen_id")
        if new_screen_id is not None:
            new_screen_id = new_screen_id.strip()
            if new_screen_id != screen.screen_id and await qr_screen_repository.exists(db, {"screen_id": new_screen_id}):
                raise ConflictError("Bu ekran ID zaten kullanılıyor (Screen id already exists)")
            data["screen_id"] = new_screen_id

        if data.get("branch_id") is not None and await branch_repository.get_by_id(db, data["branch_id"]) is None:
            raise NotFoundError("Şube bulunamadı (Branch not found)")

        if "access_code" in data:
            if data["access_code"] is None or not normalize_access_code(data["access_code"]):
                raise ValidationError("Erişim kodu boş olamaz (Access code cannot be blank)")
            data["access_code"] = normalize_access_code(data["access_code"])

        if "device_id" in data and data["device_id"] is None and screen.device_id is not None:
            logger.info("QR screen device unbound by update screen_id=%s", screen.screen_id)

        return await qr_screen_repository.update(db, screen, data)

    async def delete_screen(self, db: AsyncSession, screen_id: str) -> None:
        """화면을 삭제합니다. 마지막 화면은 삭제할 수 없습니다.

        Delete a screen. The last remaining screen cannot be deleted. Tokens
        issued for it stay as audit rows with the screen reference cleared.

        Raises:
            NotFoundError: 화면 없음 (Unknown screen)
            BadRequestError: 마지막 화면 (Last remaining screen)
        """
        screen: QRScreen = await self.get_screen(db, screen_id)
        if await qr_screen_repository.count(db) <= 1:
            raise BadRequestError("En az bir QR ekranı bulunmalıdır (At least one QR screen must remain)")
        await qr_screen_repository.delete(db, screen)
        logger.info("QR screen deleted screen_id=%s", screen_id)

    async def unbind(self, db: AsyncSession, screen_id: str) -> QRScreen:
        """디바이스 바인딩 해제 — Clear the bound device."""
        screen: QRScreen = await self.get_screen(db, screen_id)
        screen = await qr_screen_repository.update(db, screen, {"device_id": None})
        logger.info("QR screen device unbound screen_id=%s", screen_id)
        return screen

    async def regenerate_access_code(self, db: AsyncSession, screen_id: str) -> QRScreen:
        """새 접근 코드 생성, 현재 디바이스는 유지.

        Generate a new access code. The currently paired device stays paired.
        """
        screen: QRScreen = await self.get_screen(db, screen_id)
        return await qr_screen_repository.update(
            db, screen, {"access_code": generate_access_code(settings.ACCESS_CODE_LENGTH)}
        )

    async def pair(
        self,
        db: AsyncSession,
        screen_id: str,
        access_code: str,
        device_id: str,
        now: datetime | None = None,
    ) -> QRScreen:
        """접근 코드로 디바이스를 화면에 페어링합니다.

        Pair a display device with a screen. The submitted code is trimmed
        and uppercased before comparison. On success the device becomes the
        screen's ``device_id``, displacing any previous device.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            screen_id: 화면 식별자 (Human screen id)
            access_code: 입력된 접근 코드 (Submitted access code)
            device_id: 디바이스 식별자 (Opaque device id)
            now: 기준 시각 (Reference time)

        Returns:
            QRScreen: 페어링된 화면 (Paired screen)

        Raises:
            NotFoundError: 화면 없음 (Unknown screen)
            ValidationError: 빈 디바이스 ID (Blank device id)
            ForbiddenError: 비활성 화면 또는 코드 불일치 (Inactive screen or wrong code)
        """
        now = ensure_utc(now) if now is not None else utc_now()
        device_id = device_id.strip()
        if not device_id:
            raise ValidationError("Cihaz ID gereklidir (Device id is required)")

        screen: QRScreen = await self.get_screen(db, screen_id)
        if not screen.is_active:
            raise ForbiddenError("Bu ekran aktif değil (This screen is not active)")
        if normalize_access_code(access_code) != normalize_access_code(screen.access_code):
            logger.warning("QR screen pairing rejected screen_id=%s", screen_id)
            raise ForbiddenError("Geçersiz erişim kodu (Invalid access code)")

        previous: str | None = screen.device_id
        screen = await qr_screen_repository.update(db, screen, {"device_id": device_id, "last_activity": now})
        if previous is not None and previous != device_id:
            logger.info("QR screen rebound screen_id=%s (previous device displaced)", screen_id)
        else:
            logger.info("QR screen paired screen_id=%s", screen_id)
        return screen

    async def device_status(
        self,
        db: AsyncSession,
        screen_id: str,
        device_id: str,
        now: datetime | None = None,
    ) -> dict:
        """디바이스의 현재 페어링 유효성을 확인합니다.

        Revalidation check for a display device. Also records kiosk activity.

        Returns:
            dict: {screen_id, authorized, active, reason} where reason is one of
                  "paired" | "inactive" | "unbound" | "device_mismatch"
        """
        now = ensure_utc(now) if now is not None else utc_now()
        screen: QRScreen = await self.get_screen(db, screen_id)
        screen.last_activity = now
        await db.flush()

        if not screen.is_active:
            reason = "inactive"
        elif screen.device_id is None:
            reason = "unbound"
        elif screen.device_id != device_id:
            reason = "device_mismatch"
        else:
            reason = "paired"

        return {
            "screen_id": screen.screen_id,
            "authorized": reason == "paired",
            "active": screen.is_active,
            "reason": reason,
        }

    async def require_paired(self, db: AsyncSession, screen_id: str, device_id: str | None) -> QRScreen:
        """토큰 제공 전 검사 — Screen must be active and bound to this device.

        Raises:
            ForbiddenError: 비활성 화면 또는 미인증 디바이스 (Inactive screen or unpaired device)
        """
        screen: QRScreen = await self.get_screen(db, screen_id)
        if not screen.is_active:
            raise ForbiddenError("Bu ekran aktif değil (This screen is not active)")
        if not device_id or screen.device_id != device_id:
            raise ForbiddenError("Bu cihaz ekran için yetkili değil (Device is not authorized for this screen)")
        screen.last_activity = utc_now()
        await db.flush()
        return screen

    async def _branch_name(self, db: AsyncSession, branch_id: UUID) -> str | None:
        return (await db.execute(select(Branch.name).where(Branch.id == branch_id))).scalar()

    async def build_response(self, db: AsyncSession, screen: QRScreen) -> dict:
        """관리자용 화면 응답 — Admin view of a screen (includes the access code)."""
        return {
            "id": str(screen.id),
            "screen_id": screen.screen_id,
            "branch_id": str(screen.branch_id),
            "branch_name": await self._branch_name(db, screen.branch_id),
            "name": screen.name,
            "access_code": screen.access_code,
            "is_active": screen.is_active,
            "device_id": screen.device_id,
            "is_paired": screen.device_id is not None,
            "last_activity": ensure_utc(screen.last_activity) if screen.last_activity else None,
            "created_at": ensure_utc(screen.created_at),
        }

    async def build_public_response(self, db: AsyncSession, screen: QRScreen) -> dict:
        """키오스크용 공개 응답, 접근 코드와 디바이스 ID 제외.

        Public kiosk view. Never exposes the access code or bound device id.
        """
        return {
            "screen_id": screen.screen_id,
            "name": screen.name,
            "branch_name": await self._branch_name(db, screen.branch_id),
            "is_active": screen.is_active,
        }


qr_screen_service: QRScreenService = QRScreenService()
