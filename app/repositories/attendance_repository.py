"""근태 관리 레포지토리 — 출퇴근 기록 관련 DB 쿼리 담당.

Attendance Repository: attendance record queries.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import AttendanceRecord
from app.models.personnel import Personnel
from app.repositories.base import BaseRepository


class AttendanceRepository(BaseRepository[AttendanceRecord]):
    """출퇴근 기록 레포지토리.

    Attendance record repository with filtering and per-day lookups.

    Extends:
        BaseRepository[AttendanceRecord]
    """

    def __init__(self) -> None:
        super().__init__(AttendanceRecord)

    async def get_latest_for_day(
        self,
        db: AsyncSession,
        personnel_id: UUID,
        work_date: date,
    ) -> AttendanceRecord | None:
        """직원의 해당 날짜 최신 기록 — Latest record of a personnel for a day.

        A day may hold several cycles; the most recent one decides the next action.
        """
        query: Select = (
            select(AttendanceRecord)
            .where(AttendanceRecord.personnel_id == personnel_id)
            .where(AttendanceRecord.work_date == work_date)
            .order_by(AttendanceRecord.created_at.desc())
            .limit(1)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_filters(
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
        """필터 조건에 맞는 출퇴근 기록을 페이지네이션하여 조회합니다.

        Retrieve paginated attendance records matching the given filters.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            branch_id: 직원 소속 지점 필터 (Filter by the personnel's branch)
            personnel_id: 직원 필터 (Filter by personnel)
            date_from: 시작일 (Inclusive range start)
            date_to: 종료일 (Inclusive range end)
            status: 상태 필터 (Status filter)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[AttendanceRecord], int]: (기록 목록, 전체 개수) (Records, total)
        """
        query: Select = select(AttendanceRecord)
        if branch_id is not None:
            query = query.join(Personnel, Personnel.id == AttendanceRecord.personnel_id).where(
                Personnel.branch_id == branch_id
            )
        if personnel_id is not None:
            query = query.where(AttendanceRecord.personnel_id == personnel_id)
        if date_from is not None:
            query = query.where(AttendanceRecord.work_date >= date_from)
        if date_to is not None:
            query = query.where(AttendanceRecord.work_date <= date_to)
        if status is not None:
            query = query.where(AttendanceRecord.status == status)

        query = query.order_by(AttendanceRecord.work_date.desc(), AttendanceRecord.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def get_rows_with_personnel(
        self,
        db: AsyncSession,
        date_from: date,
        date_to: date,
        branch_id: UUID | None = None,
    ) -> Sequence[tuple[AttendanceRecord, Personnel]]:
        """보고서용 기록+직원 조인 — Records joined with personnel for reports."""
        query: Select = (
            select(AttendanceRecord, Personnel)
            .join(Personnel, Personnel.id == AttendanceRecord.personnel_id)
            .where(AttendanceRecord.work_date >= date_from)
            .where(AttendanceRecord.work_date <= date_to)
        )
        if branch_id is not None:
            query = query.where(Personnel.branch_id == branch_id)
        query = query.order_by(AttendanceRecord.work_date, Personnel.last_name, AttendanceRecord.check_in_time)
        result = await db.execute(query)
        return [tuple(row) for row in result.all()]

    async def count_for_day(
        self,
        db: AsyncSession,
        work_date: date,
        status: str | None = None,
        branch_id: UUID | None = None,
    ) -> int:
        query: Select = select(func.count(AttendanceRecord.id)).where(AttendanceRecord.work_date == work_date)
        if status is not None:
            query = query.where(AttendanceRecord.status == status)
        if branch_id is not None:
            query = query.join(Personnel, Personnel.id == AttendanceRecord.personnel_id).where(
                Personnel.branch_id == branch_id
            )
        return (await db.execute(query)).scalar() or 0


# 싱글턴 인스턴스 — Singleton instance
attendance_repository: AttendanceRepository = AttendanceRepository()
