"""관리자 대시보드 라우터 — 통계 및 출퇴근 보고서 API.

Admin Dashboard Router. Today's counters and the attendance Excel export.
"""

from datetime import date
from io import BytesIO
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.user import User
from app.schemas.dashboard import DashboardStatsResponse
from app.services.dashboard_service import dashboard_service
from app.services.permission_service import Permission

router: APIRouter = APIRouter()


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.DASHBOARD))],
    branch_id: Annotated[UUID | None, Query()] = None,
) -> dict:
    """오늘(업무 타임존) 대시보드 통계 — Dashboard counters for today."""
    return await dashboard_service.get_stats(db, branch_id=branch_id)


@router.get("/attendance-report")
async def export_attendance_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.REPORTS_ATTENDANCE))],
    date_from: Annotated[date | None, Query()] = None,
    date_to: Annotated[date | None, Query()] = None,
    branch_id: Annotated[UUID | None, Query()] = None,
) -> StreamingResponse:
    """출퇴근 기록 Excel 내보내기 — Attendance report as .xlsx."""
    excel_bytes: bytes = await dashboard_service.export_attendance_report(
        db, date_from=date_from, date_to=date_to, branch_id=branch_id
    )
    return StreamingResponse(
        BytesIO(excel_bytes),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=attendance_report.xlsx"},
    )
