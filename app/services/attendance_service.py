"""근태 관리 서비스 — QR 스캔을 출퇴근 기록으로 변환.

Attendance Recorder. Converts a scanned QR token into a check-in or
check-out fact for one personnel. Token state is never modified by a scan.

Day cycle (per personnel, business-local date):
    no record        → create record with check-in (present | late)
    open record      → set check-out (early_leave when before shift end)
    closed record    → ATTENDANCE_REPEAT_SCAN_POLICY
                       new_cycle: create another record for the day
                       reject:    ConflictError
                       overwrite: move the check-out time
"""

import logging
from datetime import date, datetime, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.attendance import AttendanceRecord, QRScreen, QRToken
from app.models.personnel import Personnel
from app.models.work import Shift
from app.repositories.attendance_repository import attendance_repository
from app.repositories.personnel_repository import personnel_repository
from app.repositories.qr_repository import qr_token_repository
from app.repositories.shift_repository import shift_repository
from app.services.qr_token_service import is_token_live
from app.utils.datetime_utils import ensure_utc, local_date, local_datetime, to_local, utc_now
from app.utils.exceptions import ConflictError, ExpiredQRTokenError, InvalidQRTokenError, UnknownPersonnelError

logger = logging.getLogger(__name__)

MANUAL_LOCATION: str = "Manuel QR"
MANUAL_NOTE: str = "Manuel QR kod ile giriş"


def check_in_status(check_in: datetime, work_date: date, shift: Shift | None) -> str:
    """출근 상태 판정 — "late" after shift start plus the grace period, else "present"."""
    if shift is None:
        return "present"
    deadline: datetime = local_datetime(work_date, shift.start_time) + timedelta(
        minutes=settings.LATE_THRESHOLD_MINUTES
    )
    return "late" if to_local(check_in) > deadline else "present"


def check_out_status(current: str, check_out: datetime, work_date: date, shift: Shift | None) -> str:
    """퇴근 상태 판정 — 지각 상태는 유지, 교대 종료 전 퇴근은 조퇴.

    Keep "late"; mark "early_leave" when leaving before the shift ends.
    Overnight shifts (end <= start) end on the next day.
    """
    if shift is None or current != "present":
        return current
    end_day: date = work_date + timedelta(days=1) if shift.end_time <= shift.start_time else work_date
    shift_end: datetime = local_datetime(end_day, shift.end_time)
    return "early_leave" if to_local(check_out) < shift_end else current


class AttendanceService:
    """출퇴근 기록 서비스.

    Attendance recorder plus record listing.
    """

    async def _scan_context(self, db: AsyncSession, token: QRToken) -> tuple[str, str, UUID | None]:
        """스캔 위치와 메모 — Location and notes derived from the token's screen."""
        if token.screen_id is None:
            return MANUAL_LOCATION, MANUAL_NOTE, None
        screen: QRScreen | None = (
            await db.execute(select(QRScreen).where(QRScreen.id == token.screen_id))
        ).scalar_one_or_none()
        if screen is None:
            return MANUAL_LOCATION, MANUAL_NOTE, None
        return screen.name, f"QR Ekran: {screen.name} ({screen.screen_id})", screen.id

    async def record_scan(
        self,
        db: AsyncSession,
        token_code: str,
        personnel_id: UUID,
        now: datetime | None = None,
    ) -> tuple[AttendanceRecord, str]:
        """스캔된 QR 코드로 출퇴근을 기록합니다.

        Record a scan. Validates the token, resolves the personnel and writes
        a check-in or check-out for the business-local day.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            token_code: 스캔한 QR 코드 (Scanned token value)
            personnel_id: 직원 UUID (Personnel UUID)
            now: 기준 시각, 기본값 현재 UTC (Reference time, default now)

        Returns:
            tuple[AttendanceRecord, str]: (기록, "check_in" | "check_out")

        Raises:
            InvalidQRTokenError: 코드 없음 (Unknown code)
            ExpiredQRTokenError: 비활성 또는 now >= expires_at (Inactive or expired)
            UnknownPersonnelError: 직원 없음 또는 비활성 (Missing or inactive personnel)
            ConflictError: 재스캔 정책이 reject일 때 (Repeat scan with the reject policy)
        """
        now = ensure_utc(now) if now is not None else utc_now()

        token: QRToken | None = await qr_token_repository.get_by_code(db, token_code.strip())
        if token is None:
            raise InvalidQRTokenError()
        if not is_token_live(token, now):
            raise ExpiredQRTokenError()

        personnel: Personnel | None = await personnel_repository.get_by_id(db, personnel_id)
        if personnel is None or not personnel.is_active:
            raise UnknownPersonnelError()

        today: date = local_date(now)
        shift: Shift | None = await shift_repository.get_shift_for_day(db, personnel, today)
        location, notes, screen_pk = await self._scan_context(db, token)
        latest: AttendanceRecord | None = await attendance_repository.get_latest_for_day(db, personnel.id, today)

        if latest is not None and latest.check_in_time is not None and latest.check_out_time is None:
            record = await attendance_repository.update(
                db,
                latest,
                {
                    "check_out_time": now,
                    "status": check_out_status(latest.status, now, today, shift),
                },
            )
            logger.info("Check-out recorded personnel=%s token=%s", personnel.id, token.id)
            return record, "check_out"

        if latest is not None and latest.check_out_time is not None:
            policy: str = settings.ATTENDANCE_REPEAT_SCAN_POLICY
            if policy == "reject":
                raise ConflictError(
                    "Bugün için giriş ve çıkış zaten kaydedildi (Check-in and check-out already recorded today)"
                )
            if policy == "overwrite":
                record = await attendance_repository.update(
                    db,
                    latest,
                    {
                        "check_out_time": now,
                        "status": check_out_status(
                            "present" if latest.status == "early_leave" else latest.status, now, today, shift
                        ),
                    },
                )
                logger.info("Check-out overwritten personnel=%s token=%s", personnel.id, token.id)
                return record, "check_out"

        record = await attendance_repository.create(
            db,
            {
                "personnel_id": personnel.id,
                "work_date": today,
                "check_in_time": now,
                "qr_code_id": token.id,
                "qr_screen_id": screen_pk,
                "location": location,
                "notes": notes,
                "status": check_in_status(now, today, shift),
                "created_at": now,
            },
        )
        logger.info("Check-in recorded personnel=%s token=%s status=%s", personnel.id, token.id, record.status)
        return record, "check_in"

    async def list_records(
        self,
        db: AsyncSession,
        branch_id: UUID | None = None,
        personnel_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        return await attendance_repository.get_by_filters(
            db,
            branch_id=branch_id,
            personnel_id=personnel_id,
            date_from=date_from,
            date_to=date_to,
            status=status,
            page=page,
            per_page=per_page,
        )

    async def list_today(
        self,
        db: AsyncSession,
        branch_id: UUID | None = None,
        now: datetime | None = None,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        """오늘(업무 타임존) 기록 — Records for the business-local today."""
        today: date = local_date(now)
        return await self.list_records(
            db, branch_id=branch_id, date_from=today, date_to=today, page=page, per_page=per_page
        )

    def build_response(self, record: AttendanceRecord, personnel: Personnel | None = None) -> dict:
        """출퇴근 기록 응답 딕셔너리 — Attendance record response dict."""
        return {
            "id": str(record.id),
            "personnel_id": str(record.personnel_id),
            "personnel_name": personnel.full_name if personnel is not None else None,
            "date": record.work_date,
            "check_in_time": ensure_utc(record.check_in_time) if record.check_in_time else None,
            "check_out_time": ensure_utc(record.check_out_time) if record.check_out_time else None,
            "qr_code_id": str(record.qr_code_id) if record.qr_code_id else None,
            "qr_screen_id": str(record.qr_screen_id) if record.qr_screen_id else None,
            "location": record.location,
            "status": record.status,
            "notes": record.notes,
        }

    async def build_responses(self, db: AsyncSession, records: Sequence[AttendanceRecord]) -> list[dict]:
        """직원 이름을 한 번에 조회해 응답 목록 구성 — Batch-resolve personnel names."""
        ids = {r.personnel_id for r in records}
        people: dict[UUID, Personnel] = {}
        if ids:
            result = await db.execute(select(Personnel).where(Personnel.id.in_(ids)))
            people = {p.id: p for p in result.scalars().all()}
        return [self.build_response(r, people.get(r.personnel_id)) for r in records]


attendance_service: AttendanceService = AttendanceService()
