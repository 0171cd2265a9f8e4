"""알림 관련 SQLAlchemy ORM 모델 정의.

Notification ORM models. A notification is addressed to a target set
(everyone, a branch, a team or a single personnel) and read state is tracked
per recipient user.

Tables:
    - notifications: 알림 (Broadcast notifications with target addressing)
    - notification_reads: 읽음 추적 (Per-user read receipts)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Notification(Base):
    """알림 모델 — 대상 집합에 전달되는 메시지.

    Notification addressed to a target set.

    Types (type): "info" | "warning" | "error" | "success"
    Target types (target_type): "all" | "branch" | "team" | "individual"
        - branch → target_id = branches.id
        - team → target_id = teams.id
        - individual → target_id = personnel.id
    """

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="info")
    target_type: Mapped[str] = mapped_column(String(20), nullable=False, default="all")
    # 대상 ID — 다형 참조이므로 FK 없음 (Polymorphic reference, no FK)
    target_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    sender_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class NotificationRead(Base):
    """알림 읽음 기록 — Per-user read receipt."""

    __tablename__ = "notification_reads"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    notification_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("notifications.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    read_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("notification_id", "user_id", name="uq_notification_read_user"),
    )
