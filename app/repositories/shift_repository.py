"""근무조 레포지토리 — 교대 및 일자별 교대 배정 쿼리.

Shift Repository: shifts and dated shift assignments.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.personnel import Personnel
from app.models.work import Shift, ShiftAssignment
from app.repositories.base import BaseRepository


class ShiftRepository(BaseRepository[Shift]):
    """근무조 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository for shifts and their dated assignments.
    """

    def __init__(self) -> None:
        super().__init__(Shift)

    async def get_shift_for_day(
        self,
        db: AsyncSession,
        personnel: Personnel,
        work_date: date,
    ) -> Shift | None:
        """해당 날짜에 적용되는 교대를 조회합니다.

        Resolve the shift that applies to a personnel on a given day:
        an active dated assignment wins, otherwise the default shift.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            personnel: 직원 (Personnel)
            work_date: 업무 날짜 (Business-local date)

        Returns:
            Shift | None: 적용 교대 또는 None (Applicable shift or None)
        """
        query: Select = (
            select(Shift)
            .join(ShiftAssignment, ShiftAssignment.shift_id == Shift.id)
            .where(ShiftAssignment.personnel_id == personnel.id)
            .where(ShiftAssignment.work_date == work_date)
            .where(ShiftAssignment.status == "active")
        )
        assigned: Shift | None = (await db.execute(query)).scalar_one_or_none()
        if assigned is not None:
            return assigned
        if personnel.shift_id is None:
            return None
        return await self.get_by_id(db, personnel.shift_id)

    async def count_assignments_for_day(
        self,
        db: AsyncSession,
        work_date: date,
        branch_id: UUID | None = None,
    ) -> int:
        """해당 날짜 활성 교대 배정 수 — Active shift assignments on a day."""
        query: Select = (
            select(func.count(ShiftAssignment.id))
            .where(ShiftAssignment.work_date == work_date)
            .where(ShiftAssignment.status == "active")
        )
        if branch_id is not None:
            query = query.join(Shift, Shift.id == ShiftAssignment.shift_id).where(Shift.branch_id == branch_id)
        return (await db.execute(query)).scalar() or 0


# 싱글턴 인스턴스 — Singleton instance
shift_repository: ShiftRepository = ShiftRepository()
