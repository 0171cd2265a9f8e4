"""알림 레포지토리 — 알림 관련 DB 쿼리 담당.

Notification Repository: target-visibility queries and per-user read receipts.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from app.models.notification import Notification, NotificationRead
from app.models.personnel import Personnel
from app.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """알림 레포지토리.

    Notification repository. A notification is visible to a user when it is
    addressed to everyone, or to the branch, team or personnel record linked
    to that user.

    Extends:
        BaseRepository[Notification]
    """

    def __init__(self) -> None:
        super().__init__(Notification)

    def _visible_to(self, personnel: Personnel | None) -> ColumnElement[bool]:
        clauses: list[ColumnElement[bool]] = [Notification.target_type == "all"]
        if personnel is not None:
            clauses.append(and_(Notification.target_type == "individual", Notification.target_id == personnel.id))
            if personnel.branch_id is not None:
                clauses.append(and_(Notification.target_type == "branch", Notification.target_id == personnel.branch_id))
            if personnel.team_id is not None:
                clauses.append(and_(Notification.target_type == "team", Notification.target_id == personnel.team_id))
        return or_(*clauses)

    async def get_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        personnel: Personnel | None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[tuple[Notification, bool]], int]:
        """사용자에게 보이는 알림을 읽음 여부와 함께 조회합니다.

        Retrieve notifications visible to a user, newest first, each paired
        with the user's read flag.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)
            personnel: 사용자에 연결된 직원, 선택 (Linked personnel, optional)
            page: 페이지 번호 (Page number, 1-based)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple: ([(알림, 읽음 여부)], 전체 개수) ([(notification, is_read)], total)
        """
        visible = self._visible_to(personnel)
        total: int = (
            await db.execute(select(func.count(Notification.id)).where(visible))
        ).scalar() or 0

        query: Select = (
            select(Notification, NotificationRead.id)
            .outerjoin(
                NotificationRead,
                and_(NotificationRead.notification_id == Notification.id, NotificationRead.user_id == user_id),
            )
            .where(visible)
            .order_by(Notification.created_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        rows = (await db.execute(query)).all()
        return [(notification, read_id is not None) for notification, read_id in rows], total

    async def get_unread_count(
        self,
        db: AsyncSession,
        user_id: UUID,
        personnel: Personnel | None,
    ) -> int:
        read_ids = select(NotificationRead.notification_id).where(NotificationRead.user_id == user_id)
        query: Select = (
            select(func.count(Notification.id))
            .where(self._visible_to(personnel))
            .where(Notification.id.not_in(read_ids))
        )
        return (await db.execute(query)).scalar() or 0

    async def is_visible_to(
        self,
        db: AsyncSession,
        notification_id: UUID,
        personnel: Personnel | None,
    ) -> bool:
        query: Select = (
            select(func.count(Notification.id))
            .where(Notification.id == notification_id)
            .where(self._visible_to(personnel))
        )
        return ((await db.execute(query)).scalar() or 0) > 0

    async def mark_read(self, db: AsyncSession, notification_id: UUID, user_id: UUID) -> None:
        """읽음 기록 생성, 이미 있으면 무시 — Record a read receipt once."""
        existing = await db.execute(
            select(NotificationRead.id)
            .where(NotificationRead.notification_id == notification_id)
            .where(NotificationRead.user_id == user_id)
        )
        if existing.scalar_one_or_none() is None:
            db.add(NotificationRead(notification_id=notification_id, user_id=user_id))
            await db.flush()

    async def get_recent(self, db: AsyncSession, limit: int = 50) -> Sequence[Notification]:
        result = await db.execute(select(Notification).order_by(Notification.created_at.desc()).limit(limit))
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
notification_repository: NotificationRepository = NotificationRepository()
