"""조직 구조 레포지토리 — 지점, 부서, 팀.

Organization Repository: branches, departments and teams.
Only lookups are needed here; management CRUD lives with the identity/admin console.
"""

from app.models.organization import Branch, Department, Team
from app.repositories.base import BaseRepository


class BranchRepository(BaseRepository[Branch]):
    def __init__(self) -> None:
        super().__init__(Branch)


class DepartmentRepository(BaseRepository[Department]):
    def __init__(self) -> None:
        super().__init__(Department)


class TeamRepository(BaseRepository[Team]):
    def __init__(self) -> None:
        super().__init__(Team)


# 싱글턴 인스턴스 — Singleton instances
branch_repository: BranchRepository = BranchRepository()
department_repository: DepartmentRepository = DepartmentRepository()
team_repository: TeamRepository = TeamRepository()
