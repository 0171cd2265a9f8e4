"""근태 관리 관련 SQLAlchemy ORM 모델 정의.

Attendance ORM models: rotating QR tokens, kiosk screens and the attendance
records written from scans.

Tables:
    - qr_codes: 단기 QR 토큰 (Short-lived QR tokens, kept as audit trail)
    - qr_screens: 키오스크 화면 레지스트리 (Kiosk screen registry with device binding)
    - attendance_records: 출퇴근 기록 (Check-in / check-out records)
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Date, DateTime, String, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class QRToken(Base):
    """QR 토큰 모델 — 스캔용 단기 코드.

    Short-lived QR token. Valid only while ``is_active`` and ``now < expires_at``.
    Only ``is_active`` and ``expires_at`` ever change after creation; superseded
    tokens are left in place as an audit trail.

    Attributes:
        code: 불투명 고유 코드 (Opaque unique code rendered in the QR image)
        branch_id: 소속 지점 FK (Owning branch)
        screen_id: 소속 화면 FK, 선택 (Owning screen, null for manual tokens)
        expires_at: 만료 일시 UTC (Expiry timestamp)
        is_active: 활성 상태 (Active flag, cleared by bulk invalidation)
    """

    __tablename__ = "qr_codes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False)
    # 화면 FK — 화면 삭제 시에도 감사 기록 유지 (Audit row survives screen deletion)
    screen_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("qr_screens.id", ondelete="SET NULL"), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_qr_codes_screen_created", "screen_id", "created_at"),
    )


class QRScreen(Base):
    """키오스크 화면 모델.

    Kiosk screen. ``screen_id`` is the human-assigned identifier used in the
    kiosk URL. ``device_id`` is the single source of truth for which display
    device is currently paired; null means unbound.

    Attributes:
        screen_id: 사람이 지정한 화면 식별자, 고유 (Human-assigned identifier, unique)
        access_code: 대문자 접근 코드 (Uppercase access code, compared case-insensitively)
        is_active: 활성 상태, 비활성 화면은 토큰을 제공하지 않음
                   (Inactive screens never serve tokens)
        device_id: 바인딩된 디바이스 ID (Currently bound device id)
        last_activity: 마지막 키오스크 접근 시각 (Last kiosk contact)
    """

    __tablename__ = "qr_screens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    screen_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    access_code: Mapped[str] = mapped_column(String(32), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    device_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_activity: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))



class AttendanceRecord(Base):
    """출퇴근 기록 모델.

    Attendance record. A day may hold several records when the repeat-scan
    policy is ``new_cycle``, so there is no unique (personnel, date) constraint.

    Status: "present" | "late" | "early_leave" | "absent"
    """

    __tablename__ = "attendance_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    personnel_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=False)
    # 업무 타임존 기준 날짜 — Business-local date
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_in_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    qr_code_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("qr_codes.id", ondelete="SET NULL"), nullable=True)
    qr_screen_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("qr_screens.id", ondelete="SET NULL"), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="present")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_attendance_records_personnel_date", "personnel_id", "work_date"),
    )
