"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT token utilities. The identity provider issues bearer tokens; this service
only verifies them. ``create_access_token`` exists for operator tooling and tests.

JWT Payload Structure:
    {
        "sub": "user_uuid",            # 사용자 ID (User identifier)
        "role": "admin",               # 역할 (super_admin | admin | personnel)
        "permissions": ["qr_view"],    # 명시적 권한 목록, 선택 (Optional explicit permissions)
        "exp": 1234567890,             # 만료 시간 UNIX timestamp (Expiration)
        "type": "access"               # 토큰 유형 (Token type discriminator)
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any
import jwt

from app.config import settings


def create_access_token(data: dict[str, Any], expires_minutes: int | None = None) -> str:
    """JWT 액세스 토큰을 생성합니다.

    Generate a signed access token with the given claims.

    Args:
        data: JWT 페이로드 데이터, 보통 {"sub": user_id, "role": role} (Claims to encode)
        expires_minutes: 만료 시간(분), 기본값은 설정값 (TTL override in minutes)

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)
    """
    to_encode: dict[str, Any] = data.copy()
    minutes: int = expires_minutes if expires_minutes is not None else settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
    expire: datetime = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 검증합니다.

    Decode and verify a JWT token string.

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 (When token is invalid)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
