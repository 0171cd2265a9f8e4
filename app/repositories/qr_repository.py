"""QR 토큰 및 키오스크 화면 레포지토리.

QR Repository: queries for QR tokens and kiosk screens.
Time comparisons take an explicit ``now`` (UTC) so callers control the clock.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import QRScreen, QRToken
from app.repositories.base import BaseRepository


class QRTokenRepository(BaseRepository[QRToken]):
    """QR 토큰 레포지토리.

    QR token repository. "Live" means ``is_active`` and ``expires_at > now``.
    """

    def __init__(self) -> None:
        super().__init__(QRToken)

    async def get_by_code(self, db: AsyncSession, code: str) -> QRToken | None:
        result = await db.execute(select(QRToken).where(QRToken.code == code))
        return result.scalar_one_or_none()

    async def get_latest_live_for_screen(
        self,
        db: AsyncSession,
        screen_pk: UUID,
        now: datetime,
    ) -> QRToken | None:
        """화면의 가장 최근 유효 토큰을 조회합니다.

        Most recently created live token for a screen. Ordering by creation time
        makes a newer issuance always win, without invalidating older tokens.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            screen_pk: 화면 내부 UUID (Screen primary key)
            now: 기준 시각 UTC (Reference time, UTC)

        Returns:
            QRToken | None: 현재 토큰 또는 None (Current token or None)
        """
        query: Select = (
            select(QRToken)
            .where(QRToken.screen_id == screen_pk)
            .where(QRToken.is_active.is_(True))
            .where(QRToken.expires_at > now)
            .order_by(QRToken.created_at.desc())
            .limit(1)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_live(
        self,
        db: AsyncSession,
        now: datetime,
        branch_id: UUID | None = None,
        screen_pk: UUID | None = None,
    ) -> Sequence[QRToken]:
        """유효 토큰 목록 — Live tokens, newest first, optionally by branch/screen."""
        query: Select = (
            select(QRToken)
            .where(QRToken.is_active.is_(True))
            .where(QRToken.expires_at > now)
        )
        if branch_id is not None:
            query = query.where(QRToken.branch_id == branch_id)
        if screen_pk is not None:
            query = query.where(QRToken.screen_id == screen_pk)
        result = await db.execute(query.order_by(QRToken.created_at.desc()))
        return result.scalars().all()

    async def deactivate_active(
        self,
        db: AsyncSession,
        branch_id: UUID | None = None,
    ) -> int:
        """활성 토큰을 모두 비활성화합니다 (삭제하지 않음).

        Clear ``is_active`` on every active token, optionally within one branch.
        Rows are kept for the audit trail.

        Returns:
            int: 비활성화된 토큰 수 (Number of tokens deactivated)
        """
        query: Select = select(QRToken).where(QRToken.is_active.is_(True))
        if branch_id is not None:
            query = query.where(QRToken.branch_id == branch_id)
        result = await db.execute(query)
        tokens: Sequence[QRToken] = result.scalars().all()
        for token in tokens:
            token.is_active = False
        await db.flush()
        return len(tokens)

    async def deactivate_expired(self, db: AsyncSession, now: datetime) -> int:
        """만료된 활성 토큰 정리 — Deactivate tokens whose expiry has passed."""
        query: Select = (
            select(QRToken)
            .where(QRToken.is_active.is_(True))
            .where(QRToken.expires_at <= now)
        )
        result = await db.execute(query)
        tokens: Sequence[QRToken] = result.scalars().all()
        for token in tokens:
            token.is_active = False
        await db.flush()
        return len(tokens)

    async def code_exists(self, db: AsyncSession, code: str) -> bool:
        return await self.exists(db, {"code": code})


class QRScreenRepository(BaseRepository[QRScreen]):
    """키오스크 화면 레포지토리 — Kiosk screen repository."""

    def __init__(self) -> None:
        super().__init__(QRScreen)

    async def get_by_screen_id(self, db: AsyncSession, screen_id: str) -> QRScreen | None:
        """사람이 지정한 화면 ID로 조회.

        Look up a screen by its human-assigned identifier.
        """
        result = await db.execute(select(QRScreen).where(QRScreen.screen_id == screen_id))
        return result.scalar_one_or_none()

    async def get_list(
        self,
        db: AsyncSession,
        branch_id: UUID | None = None,
        is_active: bool | None = None,
    ) -> Sequence[QRScreen]:
        query: Select = select(QRScreen)
        if branch_id is not None:
            query = query.where(QRScreen.branch_id == branch_id)
        if is_active is not None:
            query = query.where(QRScreen.is_active.is_(is_active))
        result = await db.execute(query.order_by(QRScreen.screen_id))
        return result.scalars().all()

    async def get_rotation_targets(self, db: AsyncSession) -> Sequence[QRScreen]:
        """회전 대상 화면 — Active screens that currently have a bound device."""
        result = await db.execute(
            select(QRScreen)
            .where(QRScreen.is_active.is_(True))
            .where(QRScreen.device_id.is_not(None))
        )
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instances
qr_token_repository: QRTokenRepository = QRTokenRepository()
qr_screen_repository: QRScreenRepository = QRScreenRepository()
