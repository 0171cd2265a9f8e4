"""알림 서비스 — 대상 집합으로의 알림 전파.

Notification Broadcaster. Stores a notification addressed to everyone,
a branch, a team or one personnel, serves each user the notifications
visible to them, and can fan the message out by SMS.
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.models.personnel import Personnel
from app.repositories.notification_repository import notification_repository
from app.repositories.organization_repository import branch_repository, team_repository
from app.repositories.personnel_repository import personnel_repository
from app.services.sms_service import sms_service
from app.utils.datetime_utils import ensure_utc
from app.utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES: tuple[str, ...] = ("info", "warning", "error", "success")
TARGET_TYPES: tuple[str, ...] = ("all", "branch", "team", "individual")


class NotificationService:
    """알림 서비스.

    Notification broadcaster with target validation, per-user visibility
    and read receipts.
    """

    async def _validate_target(self, db: AsyncSession, target_type: str, target_id: UUID | None) -> None:
        if target_type not in TARGET_TYPES:
            raise ValidationError("Geçersiz hedef türü (Invalid target type)")
        if target_type == "all":
            return
        if target_id is None:
            raise ValidationError("Hedef ID gereklidir (Target id is required for this target type)")

        if target_type == "branch":
            found = await branch_repository.get_by_id(db, target_id)
        elif target_type == "team":
            found = await team_repository.get_by_id(db, target_id)
        else:
            found = await personnel_repository.get_by_id(db, target_id)
        if found is None:
            raise NotFoundError("Bildirim hedefi bulunamadı (Notification target not found)")

    async def resolve_targets(
        self,
        db: AsyncSession,
        target_type: str,
        target_id: UUID | None,
    ) -> Sequence[Personnel]:
        """대상 집합의 활성 직원 — Active personnel addressed by a target."""
        if target_type == "all":
            return await personnel_repository.get_active(db)
        if target_type == "branch":
            return await personnel_repository.get_active(db, branch_id=target_id)
        if target_type == "team":
            return await personnel_repository.get_active(db, team_id=target_id)
        personnel: Personnel | None = await personnel_repository.get_by_id(db, target_id)
        return [personnel] if personnel is not None and personnel.is_active else []

    async def create(
        self,
        db: AsyncSession,
        title: str,
        message: str,
        type: str,
        target_type: str,
        target_id: UUID | None,
        sender_user_id: UUID | None,
        send_sms: bool = False,
    ) -> tuple[Notification, dict | None]:
        """알림을 생성하고 선택적으로 SMS로 전파합니다.

        Create a notification. With ``send_sms`` the message is also delivered
        by SMS to every addressed personnel with a phone number.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            title: 제목 (Title)
            message: 본문 (Body)
            type: "info" | "warning" | "error" | "success"
            target_type: "all" | "branch" | "team" | "individual"
            target_id: 대상 ID, all이 아니면 필수 (Required unless target_type is "all")
            sender_user_id: 발신자 UUID (Sender user)
            send_sms: SMS 전파 여부 (Also deliver by SMS)

        Returns:
            tuple[Notification, dict | None]: (알림, SMS 발송 요약 또는 None)

        Raises:
            ValidationError: 잘못된 유형 또는 대상 (Bad type or target)
            NotFoundError: 대상 없음 (Target does not exist)
            DownstreamError: SMS 설정 누락 (SMS provider not configured)
        """
        if type not in NOTIFICATION_TYPES:
            raise ValidationError("Geçersiz bildirim türü (Invalid notification type)")
        await self._validate_target(db, target_type, target_id)

        notification: Notification = await notification_repository.create(
            db,
            {
                "title": title,
                "message": message,
                "type": type,
                "target_type": target_type,
                "target_id": None if target_type == "all" else target_id,
                "sender_user_id": sender_user_id,
            },
        )
        logger.info("Notification created id=%s target=%s:%s", notification.id, target_type, target_id or "*")

        sms_summary: dict | None = None
        if send_sms:
            recipients = await self.resolve_targets(db, target_type, target_id)
            phones: list[str] = list(dict.fromkeys(p.phone.strip() for p in recipients if p.phone and p.phone.strip()))
            sms_summary = await sms_service.send_bulk(phones, f"{title}\n{message}")
        return notification, sms_summary

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[tuple[Notification, bool]], int]:
        """사용자에게 보이는 알림 목록 — Notifications visible to a user with read flags."""
        personnel: Personnel | None = await personnel_repository.get_by_user_id(db, user_id)
        return await notification_repository.get_for_user(db, user_id, personnel, page, per_page)

    async def get_unread_count(self, db: AsyncSession, user_id: UUID) -> int:
        personnel: Personnel | None = await personnel_repository.get_by_user_id(db, user_id)
        return await notification_repository.get_unread_count(db, user_id, personnel)

    async def mark_read(self, db: AsyncSession, notification_id: UUID, user_id: UUID) -> None:
        """알림을 읽음 처리합니다.

        Mark a notification as read for a user.

        Raises:
            NotFoundError: 알림이 없거나 사용자에게 보이지 않음 (Missing or not visible)
        """
        personnel: Personnel | None = await personnel_repository.get_by_user_id(db, user_id)
        if not await notification_repository.is_visible_to(db, notification_id, personnel):
            raise NotFoundError("Bildirim bulunamadı (Notification not found)")
        await notification_repository.mark_read(db, notification_id, user_id)

    def build_response(self, notification: Notification, is_read: bool | None = None) -> dict:
        return {
            "id": str(notification.id),
            "title": notification.title,
            "message": notification.message,
            "type": notification.type,
            "target_type": notification.target_type,
            "target_id": str(notification.target_id) if notification.target_id else None,
            "sender_user_id": str(notification.sender_user_id) if notification.sender_user_id else None,
            "is_read": is_read,
            "created_at": ensure_utc(notification.created_at),
        }


notification_service: NotificationService = NotificationService()
