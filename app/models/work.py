"""교대 근무 관련 SQLAlchemy ORM 모델 정의.

Shift ORM models.

Tables:
    - shifts: 지점별 교대 정의 (Shift definitions per branch, wall-clock start/end)
    - shift_assignments: 일자별 교대 배정 (Dated shift assignments per personnel)
"""

import uuid
from datetime import date, datetime, time, timezone
from sqlalchemy import String, Boolean, Date, DateTime, Time, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Shift(Base):
    """교대 모델 — 지각/조퇴 판정 기준 시각.

    Shift model. ``start_time``/``end_time`` are wall-clock times in the
    business timezone and drive late / early-leave status.
    """

    __tablename__ = "shifts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("branch_id", "name", name="uq_shift_branch_name"),
    )


class ShiftAssignment(Base):
    """교대 배정 모델 — 특정 날짜에 직원의 기본 교대를 대체.

    Dated shift assignment; overrides the personnel's default shift for that day.
    """

    __tablename__ = "shift_assignments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    personnel_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=False)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    # 상태 — "active" | "cancelled"
    status: Mapped[str] = mapped_column(String(20), default="active")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("personnel_id", "work_date", name="uq_shift_assignment_personnel_date"),
    )

    shift = relationship("Shift")
