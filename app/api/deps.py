"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module for authentication and authorization.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies the JWT and returns its payload)
    3. 페이로드의 "sub" 필드로 DB에서 사용자를 조회하고 활성 상태를 확인
       (User is loaded by "sub" and must be active)

Authorization Flow (require_permission):
    1. get_current_user로 사용자 인증 (User authenticated via get_current_user)
    2. permission_service가 유효 권한 집합에서 필요한 권한을 확인
       (permission_service checks membership in the effective permission set)
    3. 권한이 없으면 403 Forbidden (403 when the permission is missing)
"""

from typing import Annotated, Callable, Awaitable
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.personnel import Personnel
from app.models.user import User
from app.services.permission_service import Permission, permission_service
from app.utils.exceptions import ForbiddenError, UnauthorizedError
from app.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — 헤더가 없으면 None을 넘겨 401을 직접 발생
# (auto_error=False so a missing header maps to our 401 instead of FastAPI's 403)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode the bearer token and return the authenticated user.

    Raises:
        UnauthorizedError(401): 토큰 누락, 위조, 만료 또는 비활성 사용자
                                (Missing, invalid or expired token, or inactive user)
    """
    if credentials is None:
        raise UnauthorizedError()

    try:
        payload: dict = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            raise UnauthorizedError("Geçersiz token türü (Invalid token type)")
        user_id = UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError):
        raise UnauthorizedError("Geçersiz veya süresi dolmuş oturum (Invalid or expired token)")

    result = await db.execute(select(User).where(User.id == user_id))
    user: User | None = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise UnauthorizedError("Kullanıcı bulunamadı veya pasif (User not found or inactive)")

    return user


def require_permission(permission: Permission) -> Callable[..., Awaitable[User]]:
    """권한 기반 접근 검사 의존성 팩토리.

    Dependency factory enforcing a single permission from the closed set.

    Args:
        permission: 필요한 권한 (Required permission)

    Returns:
        FastAPI 의존성 함수 — 인증된 사용자 반환 또는 403 발생
        (Dependency returning the user or raising 403)
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if not permission_service.has_permission(current_user, permission):
            raise ForbiddenError()
        return current_user
    return _check


async def get_current_personnel(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Personnel:
    """로그인 사용자에 연결된 직원 기록 — Personnel record linked to the caller.

    Raises:
        ForbiddenError(403): 연결된 직원 기록이 없음 (No linked personnel record)
    """
    result = await db.execute(select(Personnel).where(Personnel.user_id == current_user.id))
    personnel: Personnel | None = result.scalar_one_or_none()
    if personnel is None:
        raise ForbiddenError("Hesabınıza bağlı personel kaydı yok (No personnel record linked to this account)")
    return personnel
