"""조직 구조 관련 SQLAlchemy ORM 모델 정의.

Organization structure ORM models: branches, and the departments and teams
that live under a branch.

Tables:
    - branches: 지점 (Branches / physical sites)
    - departments: 지점 내 부서 (Departments within a branch)
    - teams: 지점 내 팀 (Teams within a branch)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Branch(Base):
    """지점 모델 — 키오스크 화면과 인사 기록이 소속되는 물리적 사업장.

    Branch model. Screens, tokens and personnel are scoped to a branch.
    """

    __tablename__ = "branches"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 지점 이름 — Branch display name
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    departments = relationship("Department", back_populates="branch", cascade="all, delete-orphan")
    teams = relationship("Team", back_populates="branch", cascade="all, delete-orphan")


class Department(Base):
    """부서 모델 — 지점 내 이름 고유.

    Department model. Name is unique within a branch.
    """

    __tablename__ = "departments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("branch_id", "name", name="uq_department_branch_name"),
    )

    branch = relationship("Branch", back_populates="departments")


class Team(Base):
    """팀 모델 — 알림 대상(targetType=team)으로 사용됨.

    Team model, also a notification target.
    """

    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("branch_id", "name", name="uq_team_branch_name"),
    )

    branch = relationship("Branch", back_populates="teams")
