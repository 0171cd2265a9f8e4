"""인사(직원) 기록 SQLAlchemy ORM 모델.

Personnel ORM model. A personnel record is the subject of attendance,
leave and notification targeting. It may be linked to a login ``User``.

Tables:
    - personnel: 직원 기록 (Employee records)
"""

import uuid
from datetime import date, datetime, timezone
from sqlalchemy import String, Boolean, Date, DateTime, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Personnel(Base):
    """직원 모델.

    Personnel model with organizational placement, default shift and the
    annual leave ledger (entitlement / used / remaining days).

    Attributes:
        employee_number: 사번, 전역 고유 (Employee number, globally unique)
        phone: 휴대폰 번호, SMS 대상 (Mobile number used for SMS)
        shift_id: 기본 교대 FK (Default shift used for late checks)
        annual_leave_entitlement: 연차 부여 일수 (Annual leave days granted)
        used_annual_leave: 사용 연차 일수 (Annual leave days used)
        remaining_annual_leave: 잔여 연차 일수 (Annual leave days remaining)
    """

    __tablename__ = "personnel"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 로그인 계정 FK, 선택 — Optional linked login account
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)
    branch_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True)
    department_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)
    team_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    shift_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="SET NULL"), nullable=True)
    employee_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # 연차 원장 — Annual leave ledger (days)
    annual_leave_entitlement: Mapped[int] = mapped_column(Integer, default=20)
    used_annual_leave: Mapped[int] = mapped_column(Integer, default=0)
    remaining_annual_leave: Mapped[int] = mapped_column(Integer, default=20)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    shift = relationship("Shift")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
