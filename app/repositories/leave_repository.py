"""휴가 신청 레포지토리.

Leave Request Repository: listing and date-overlap queries.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.leave import LeaveRequest
from app.models.personnel import Personnel
from app.repositories.base import BaseRepository


class LeaveRequestRepository(BaseRepository[LeaveRequest]):
    """휴가 신청 레포지토리 — Leave request repository."""

    def __init__(self) -> None:
        super().__init__(LeaveRequest)

    async def get_by_filters(
        self,
        db: AsyncSession,
        status: str | None = None,
        personnel_id: UUID | None = None,
        branch_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[LeaveRequest], int]:
        """필터 조건으로 휴가 신청 목록을 조회합니다.

        Retrieve paginated leave requests, newest first.
        """
        query: Select = select(LeaveRequest)
        if branch_id is not None:
            query = query.join(Personnel, Personnel.id == LeaveRequest.personnel_id).where(
                Personnel.branch_id == branch_id
            )
        if status is not None:
            query = query.where(LeaveRequest.status == status)
        if personnel_id is not None:
            query = query.where(LeaveRequest.personnel_id == personnel_id)
        query = query.order_by(LeaveRequest.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def count_approved_covering(
        self,
        db: AsyncSession,
        day: date,
        branch_id: UUID | None = None,
    ) -> int:
        """해당 날짜를 포함하는 승인된 휴가 수 — Approved leaves covering a day."""
        query: Select = (
            select(func.count(LeaveRequest.id))
            .where(LeaveRequest.status == "approved")
            .where(LeaveRequest.start_date <= day)
            .where(LeaveRequest.end_date >= day)
        )
        if branch_id is not None:
            query = query.join(Personnel, Personnel.id == LeaveRequest.personnel_id).where(
                Personnel.branch_id == branch_id
            )
        return (await db.execute(query)).scalar() or 0

    async def count_pending(self, db: AsyncSession, branch_id: UUID | None = None) -> int:
        query: Select = select(func.count(LeaveRequest.id)).where(LeaveRequest.status == "pending")
        if branch_id is not None:
            query = query.join(Personnel, Personnel.id == LeaveRequest.personnel_id).where(
                Personnel.branch_id == branch_id
            )
        return (await db.execute(query)).scalar() or 0


# 싱글턴 인스턴스 — Singleton instance
leave_request_repository: LeaveRequestRepository = LeaveRequestRepository()
