"""직원 레포지토리 — 직원 조회 및 대상 집합 해석.

Personnel Repository: personnel lookups and target-set resolution used by
notifications and bulk SMS.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.personnel import Personnel
from app.repositories.base import BaseRepository


class PersonnelRepository(BaseRepository[Personnel]):
    """직원 레포지토리 — Personnel repository."""

    def __init__(self) -> None:
        super().__init__(Personnel)

    def _active_filtered(
        self,
        branch_id: UUID | None = None,
        department_id: UUID | None = None,
        team_id: UUID | None = None,
    ) -> Select:
        # 모든 필터는 AND 결합 — All given filters must match
        query: Select = select(Personnel).where(Personnel.is_active.is_(True))
        if branch_id is not None:
            query = query.where(Personnel.branch_id == branch_id)
        if department_id is not None:
            query = query.where(Personnel.department_id == department_id)
        if team_id is not None:
            query = query.where(Personnel.team_id == team_id)
        return query

    async def get_active(
        self,
        db: AsyncSession,
        branch_id: UUID | None = None,
        department_id: UUID | None = None,
        team_id: UUID | None = None,
    ) -> Sequence[Personnel]:
        """활성 직원 목록 — Active personnel matching every given filter."""
        query = self._active_filtered(branch_id, department_id, team_id)
        result = await db.execute(query.order_by(Personnel.last_name, Personnel.first_name))
        return result.scalars().all()

    async def get_active_with_phone(
        self,
        db: AsyncSession,
        branch_id: UUID | None = None,
        department_id: UUID | None = None,
        team_id: UUID | None = None,
    ) -> Sequence[Personnel]:
        """SMS 수신 가능 직원 — Active personnel with a non-empty phone number."""
        query = (
            self._active_filtered(branch_id, department_id, team_id)
            .where(Personnel.phone.is_not(None))
            .where(func.trim(Personnel.phone) != "")
        )
        result = await db.execute(query.order_by(Personnel.last_name, Personnel.first_name))
        return result.scalars().all()

    async def get_by_user_id(self, db: AsyncSession, user_id: UUID) -> Personnel | None:
        return await self.get_one_by(db, user_id=user_id)

    async def count_active(self, db: AsyncSession, branch_id: UUID | None = None) -> int:
        return await self.count(db, {"is_active": True, "branch_id": branch_id})


# 싱글턴 인스턴스 — Singleton instance
personnel_repository: PersonnelRepository = PersonnelRepository()
