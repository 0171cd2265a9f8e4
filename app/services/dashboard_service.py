"""대시보드 서비스 — 읽기 전용 집계 및 Excel 보고서.

Dashboard Aggregator. Read-only counts for "today" in the business timezone
and the attendance report export (openpyxl).
"""

from datetime import date, timedelta
from io import BytesIO
from uuid import UUID

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.attendance_repository import attendance_repository
from app.repositories.leave_repository import leave_request_repository
from app.repositories.personnel_repository import personnel_repository
from app.repositories.qr_repository import qr_screen_repository
from app.repositories.shift_repository import shift_repository
from app.utils.datetime_utils import local_date, to_local
from app.utils.exceptions import ValidationError

# 보고서 최대 기간(일) — Longest report range accepted
MAX_REPORT_DAYS: int = 366

_STATUS_LABELS: dict[str, str] = {
    "present": "Mevcut",
    "late": "Geç",
    "early_leave": "Erken Çıkış",
    "absent": "Yok",
}


class DashboardService:
    """대시보드 집계 서비스.

    Dashboard aggregation service.
    """

    async def get_stats(
        self,
        db: AsyncSession,
        today: date | None = None,
        branch_id: UUID | None = None,
    ) -> dict:
        """오늘 기준 대시보드 통계.

        Dashboard counters for one business day, optionally for one branch.

        Returns:
            dict: total_personnel, working_today, on_leave, late_arrivals,
                  today_qr_scans, pending_leave_requests, active_screens
        """
        today = today or local_date()
        active_screens = await qr_screen_repository.count(db, {"is_active": True, "branch_id": branch_id})
        return {
            "date": today,
            "total_personnel": await personnel_repository.count_active(db, branch_id),
            "working_today": await shift_repository.count_assignments_for_day(db, today, branch_id),
            "on_leave": await leave_request_repository.count_approved_covering(db, today, branch_id),
            "late_arrivals": await attendance_repository.count_for_day(db, today, status="late", branch_id=branch_id),
            "today_qr_scans": await attendance_repository.count_for_day(db, today, branch_id=branch_id),
            "pending_leave_requests": await leave_request_repository.count_pending(db, branch_id),
            "active_screens": active_screens,
        }

    async def export_attendance_report(
        self,
        db: AsyncSession,
        date_from: date | None = None,
        date_to: date | None = None,
        branch_id: UUID | None = None,
    ) -> bytes:
        """출퇴근 기록을 Excel 파일로 내보내기.

        Export attendance records for a date range to an .xlsx workbook.
        Defaults to the last 7 days.

        Raises:
            ValidationError: 잘못된 기간 (Bad date range)
        """
        date_to = date_to or local_date()
        date_from = date_from or date_to - timedelta(days=7)
        if date_to < date_from:
            raise ValidationError("Bitiş tarihi başlangıç tarihinden önce olamaz (End date cannot be before start date)")
        if (date_to - date_from).days > MAX_REPORT_DAYS:
            raise ValidationError("Rapor aralığı çok uzun (Report range is too long)")

        wb = Workbook()
        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="2D3436", end_color="2D3436", fill_type="solid")

        ws = wb.active
        ws.title = "Yoklama"
        headers = ["Sicil No", "Personel", "Tarih", "Giriş", "Çıkış", "Durum", "Konum", "Not"]
        for col_idx, h in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col_idx, value=h)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        rows = await attendance_repository.get_rows_with_personnel(db, date_from, date_to, branch_id)
        for record, personnel in rows:
            ws.append([
                personnel.employee_number,
                personnel.full_name,
                record.work_date.isoformat(),
                to_local(record.check_in_time).strftime("%H:%M") if record.check_in_time else "",
                to_local(record.check_out_time).strftime("%H:%M") if record.check_out_time else "",
                _STATUS_LABELS.get(record.status, record.status),
                record.location or "",
                record.notes or "",
            ])

        for i, w in enumerate([12, 24, 12, 8, 8, 14, 20, 36], 1):
            ws.column_dimensions[ws.cell(row=1, column=i).column_letter].width = w

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()


dashboard_service: DashboardService = DashboardService()
