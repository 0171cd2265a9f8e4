"""QR 토큰 발급 서비스 — 단기 회전 토큰의 발급, 조회, 무효화.

QR Token Issuer. Issues short-lived tokens scoped to a branch and optionally
to a kiosk screen, and governs their validity window.

Rules:
    - A token is valid only while ``is_active`` and ``now < expires_at``.
    - Issuing never invalidates earlier tokens. A screen's current token is
      the most recently created live one, so concurrent issuance needs no lock.
    - Rotation is time driven (``rotate_screen_tokens``); scanning a token
      never changes it.
"""

import logging
from datetime import datetime, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.attendance import QRScreen, QRToken
from app.models.organization import Branch
from app.repositories.organization_repository import branch_repository
from app.repositories.qr_repository import qr_screen_repository, qr_token_repository
from app.utils.codes import generate_token_code
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.exceptions import (
    BadRequestError,
    ExpiredQRTokenError,
    InvalidQRTokenError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# 코드 충돌 시 재시도 횟수 — Attempts before giving up on a unique code
_MAX_CODE_ATTEMPTS: int = 5


def is_token_live(token: QRToken, now: datetime) -> bool:
    """토큰 유효성 판정 — ``active && now < expires_at``."""
    return bool(token.is_active) and ensure_utc(now) < ensure_utc(token.expires_at)


class QRTokenService:
    """QR 토큰 발급 서비스.

    QR token issuer with manual issue, per-screen current lookup, bulk
    invalidation and the rotation job body.
    """

    async def _unique_code(self, db: AsyncSession) -> str:
        for _ in range(_MAX_CODE_ATTEMPTS):
            code: str = generate_token_code(settings.QR_CODE_LENGTH)
            if not await qr_token_repository.code_exists(db, code):
                return code
        raise BadRequestError("QR kod üretilemedi, tekrar deneyin (Could not generate a unique QR code, retry)")

    async def _get_screen(self, db: AsyncSession, screen_id: str) -> QRScreen:
        screen: QRScreen | None = await qr_screen_repository.get_by_screen_id(db, screen_id)
        if screen is None:
            raise NotFoundError("QR ekranı bulunamadı (QR screen not found)")
        return screen

    async def _create(
        self,
        db: AsyncSession,
        branch_id: UUID,
        screen_pk: UUID | None,
        ttl_seconds: int,
        now: datetime,
        created_by: UUID | None = None,
    ) -> QRToken:
        token: QRToken = await qr_token_repository.create(
            db,
            {
                "code": await self._unique_code(db),
                "branch_id": branch_id,
                "screen_id": screen_pk,
                "expires_at": now + timedelta(seconds=ttl_seconds),
                "is_active": True,
                "created_by": created_by,
                "created_at": now,
                "last_updated": now,
            },
        )
        logger.info("QR token issued branch=%s screen=%s ttl=%ss", branch_id, screen_pk, ttl_seconds)
        return token

    async def issue(
        self,
        db: AsyncSession,
        branch_id: UUID,
        ttl_seconds: int,
        screen_id: str | None = None,
        created_by: UUID | None = None,
        now: datetime | None = None,
    ) -> QRToken:
        """새 QR 토큰을 발급합니다.

        Issue a new active token with ``expires_at = now + ttl_seconds``.
        Earlier tokens are left untouched.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            branch_id: 소속 지점 UUID (Owning branch)
            ttl_seconds: 유효 시간(초) (Validity window in seconds)
            screen_id: 화면 식별자, 선택 (Human screen id, optional)
            created_by: 발급자 UUID, 선택 (Issuing user, optional)
            now: 기준 시각, 기본값 현재 UTC (Reference time, default now)

        Returns:
            QRToken: 발급된 토큰 (Issued token)

        Raises:
            ValidationError: ttl이 0 이하 (Non-positive TTL)
            NotFoundError: 지점 또는 화면 없음 (Unknown branch or screen)
            BadRequestError: 화면이 다른 지점 소속 (Screen belongs to another branch)
        """
        if ttl_seconds <= 0:
            raise ValidationError("Geçerlilik süresi pozitif olmalıdır (TTL must be positive)")
        now = ensure_utc(now) if now is not None else utc_now()

        branch: Branch | None = await branch_repository.get_by_id(db, branch_id)
        if branch is None:
            raise NotFoundError("Şube bulunamadı (Branch not found)")

        screen_pk: UUID | None = None
        if screen_id is not None:
            screen: QRScreen = await self._get_screen(db, screen_id)
            if screen.branch_id != branch_id:
                raise BadRequestError("Ekran bu şubeye ait değil (Screen does not belong to this branch)")
            screen_pk = screen.id

        return await self._create(db, branch_id, screen_pk, ttl_seconds, now, created_by)

    async def issue_manual(
        self,
        db: AsyncSession,
        branch_id: UUID,
        expiry_minutes: int,
        created_by: UUID | None = None,
        now: datetime | None = None,
    ) -> QRToken:
        """관리자 수동 발급 — 만료 토큰 정리 후 화면 없는 토큰 발급.

        Manual issue from the admin console. Expired tokens are deactivated first.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        await qr_token_repository.deactivate_expired(db, now)
        return await self.issue(db, branch_id, expiry_minutes * 60, created_by=created_by, now=now)

    async def get_current_for_screen(
        self,
        db: AsyncSession,
        screen_id: str,
        now: datetime | None = None,
    ) -> QRToken | None:
        """화면의 현재 표시 토큰을 조회합니다.

        Current token for a screen: the newest live token. An inactive screen
        never has a current token, whatever its tokens' state.

        Raises:
            NotFoundError: 화면 없음 (Unknown screen id)
        """
        now = ensure_utc(now) if now is not None else utc_now()
        screen: QRScreen = await self._get_screen(db, screen_id)
        if not screen.is_active:
            return None
        return await qr_token_repository.get_latest_live_for_screen(db, screen.id, now)

    async def ensure_current_for_screen(
        self,
        db: AsyncSession,
        screen: QRScreen,
        now: datetime | None = None,
    ) -> QRToken:
        """키오스크 폴링 경로 — 현재 토큰이 없으면 즉시 발급.

        Kiosk poll path: return the current token, or issue one, so a display
        never shows an expired code. The caller has already checked that the
        screen is active and the device is paired.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        current: QRToken | None = await qr_token_repository.get_latest_live_for_screen(db, screen.id, now)
        if current is not None:
            return current
        return await self._create(db, screen.branch_id, screen.id, settings.QR_SCREEN_TOKEN_TTL_SECONDS, now)

    async def list_active(
        self,
        db: AsyncSession,
        branch_id: UUID | None = None,
        now: datetime | None = None,
    ) -> Sequence[QRToken]:
        now = ensure_utc(now) if now is not None else utc_now()
        return await qr_token_repository.get_live(db, now, branch_id=branch_id)

    async def invalidate_all(self, db: AsyncSession, branch_id: UUID | None = None) -> int:
        """활성 토큰을 일괄 비활성화합니다 (되돌릴 수 없음).

        Bulk invalidation. Sets ``is_active = False`` on every active token,
        optionally within one branch. Confirmation is the caller's concern.

        Returns:
            int: 비활성화된 토큰 수 (Number of tokens deactivated)
        """
        count: int = await qr_token_repository.deactivate_active(db, branch_id)
        logger.warning("QR tokens invalidated count=%d branch=%s", count, branch_id or "*")
        return count

    async def validate(self, db: AsyncSession, code: str, now: datetime | None = None) -> QRToken:
        """코드가 현재 유효한지 확인 (읽기 전용).

        Read-only validity check for a scanned code.

        Raises:
            InvalidQRTokenError: 코드 없음 (Unknown code)
            ExpiredQRTokenError: 비활성 또는 만료 (Inactive or expired)
        """
        now = ensure_utc(now) if now is not None else utc_now()
        token: QRToken | None = await qr_token_repository.get_by_code(db, code.strip())
        if token is None:
            raise InvalidQRTokenError()
        if not is_token_live(token, now):
            raise ExpiredQRTokenError()
        return token

    async def rotate_screen_tokens(self, db: AsyncSession, now: datetime | None = None) -> int:
        """페어링된 활성 화면의 토큰을 회전합니다.

        Rotation job body. For every active screen with a bound device, issue
        a fresh token when there is no current one or the current one expires
        within ``QR_ROTATION_CHECK_SECONDS``. Expired tokens are deactivated.

        Returns:
            int: 새로 발급된 토큰 수 (Number of tokens issued)
        """
        now = ensure_utc(now) if now is not None else utc_now()
        await qr_token_repository.deactivate_expired(db, now)

        horizon: datetime = now + timedelta(seconds=settings.QR_ROTATION_CHECK_SECONDS)
        issued: int = 0
        for screen in await qr_screen_repository.get_rotation_targets(db):
            current = await qr_token_repository.get_latest_live_for_screen(db, screen.id, now)
            if current is not None and ensure_utc(current.expires_at) > horizon:
                continue
            await self._create(db, screen.branch_id, screen.id, settings.QR_SCREEN_TOKEN_TTL_SECONDS, now)
            issued += 1
        return issued

    async def build_response(self, db: AsyncSession, token: QRToken) -> dict:
        """QR 토큰 응답 딕셔너리를 구성합니다.

        Build a token response dict with resolved branch name and screen id.
        """
        branch_name: str | None = (
            await db.execute(select(Branch.name).where(Branch.id == token.branch_id))
        ).scalar()
        screen_ref: tuple[str, str] | None = None
        if token.screen_id is not None:
            row = (
                await db.execute(select(QRScreen.screen_id, QRScreen.name).where(QRScreen.id == token.screen_id))
            ).first()
            screen_ref = (row[0], row[1]) if row is not None else None

        return {
            "id": str(token.id),
            "code": token.code,
            "branch_id": str(token.branch_id),
            "branch_name": branch_name,
            "screen_id": screen_ref[0] if screen_ref else None,
            "screen_name": screen_ref[1] if screen_ref else None,
            "expires_at": ensure_utc(token.expires_at),
            "is_active": token.is_active,
            "created_at": ensure_utc(token.created_at),
            "last_updated": ensure_utc(token.last_updated),
        }


qr_token_service: QRTokenService = QRTokenService()
