"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite (aiosqlite) database, session, and
httpx client fixtures. A single connection is shared through StaticPool so
the app and the test see the same data. The schema is created and dropped
around every test.
"""

from collections.abc import AsyncGenerator
from datetime import date, datetime, time, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.utils.jwt import create_access_token

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite+aiosqlite://"

# 고정 기준 시각 — 2025-01-10 09:00 Europe/Istanbul (UTC+3)
NOW = datetime(2025, 1, 10, 6, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 테스트마다 스키마를 새로 만듭니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def branch(db: AsyncSession):
    """테스트 지점을 생성합니다."""
    from app.models.organization import Branch
    b = Branch(name="Merkez Şube", address="İstanbul")
    db.add(b)
    await db.flush()
    await db.refresh(b)
    return b


@pytest_asyncio.fixture
async def other_branch(db: AsyncSession):
    from app.models.organization import Branch
    b = Branch(name="Ankara Şube")
    db.add(b)
    await db.flush()
    await db.refresh(b)
    return b


@pytest_asyncio.fixture
async def department(db: AsyncSession, branch):
    from app.models.organization import Department
    d = Department(branch_id=branch.id, name="Üretim")
    db.add(d)
    await db.flush()
    await db.refresh(d)
    return d


@pytest_asyncio.fixture
async def team(db: AsyncSession, branch):
    from app.models.organization import Team
    t = Team(branch_id=branch.id, name="A Takımı")
    db.add(t)
    await db.flush()
    await db.refresh(t)
    return t


@pytest_asyncio.fixture
async def shift(db: AsyncSession, branch):
    """08:30–17:30 교대."""
    from app.models.work import Shift
    s = Shift(branch_id=branch.id, name="Gündüz", start_time=time(8, 30), end_time=time(17, 30))
    db.add(s)
    await db.flush()
    await db.refresh(s)
    return s


async def _create_user(db: AsyncSession, username: str, role: str, permissions: list[str] | None = None):
    from app.models.user import User
    user = User(
        username=username,
        full_name=username.title(),
        email=f"{username}@test.com",
        role=role,
        permissions=permissions or [],
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def super_admin_user(db: AsyncSession):
    return await _create_user(db, "superadmin", "super_admin")


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession):
    return await _create_user(db, "admin", "admin")


@pytest_asyncio.fixture
async def personnel_user(db: AsyncSession):
    return await _create_user(db, "ayse", "personnel")


@pytest_asyncio.fixture
async def personnel(db: AsyncSession, branch, department, team, shift, personnel_user):
    """로그인 계정에 연결된 직원."""
    from app.models.personnel import Personnel
    p = Personnel(
        user_id=personnel_user.id,
        branch_id=branch.id,
        department_id=department.id,
        team_id=team.id,
        shift_id=shift.id,
        employee_number="P-001",
        first_name="Ayşe",
        last_name="Yılmaz",
        phone="05321234567",
        hire_date=date(2020, 3, 1),
    )
    db.add(p)
    await db.flush()
    await db.refresh(p)
    return p


@pytest_asyncio.fixture
async def screen(db: AsyncSession, branch):
    """접근 코드 ABC123을 가진 활성 화면."""
    from app.models.attendance import QRScreen
    s = QRScreen(screen_id="lobby-1", branch_id=branch.id, name="Lobi", access_code="ABC123")
    db.add(s)
    await db.flush()
    await db.refresh(s)
    return s


def make_token(user) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "role": user.role})


@pytest.fixture
def super_admin_token(super_admin_user) -> str:
    return make_token(super_admin_user)


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user)


@pytest.fixture
def personnel_token(personnel_user, personnel) -> str:
    return make_token(personnel_user)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
