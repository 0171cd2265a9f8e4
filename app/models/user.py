"""사용자 계정 SQLAlchemy ORM 모델 정의.

User account ORM model. Credentials live with the external identity provider;
this table holds the principal's role and explicit permission list.

Tables:
    - users: 사용자 계정 (User accounts with role and permissions)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import JSON, String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """사용자 모델.

    User model. ``role`` is one of ``super_admin``, ``admin``, ``personnel``.
    ``permissions`` is an explicit permission list; an empty list means the
    role defaults apply (see ``app.services.permission_service``).
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 역할 — Role name (super_admin | admin | personnel)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="personnel")
    # 명시적 권한 목록 — Explicit permission strings, validated on read
    permissions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
