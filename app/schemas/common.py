"""공통 Pydantic 응답 스키마 정의.

Common Pydantic response schemas shared across API domains.
"""

from typing import Any
from pydantic import BaseModel


class PaginatedResponse(BaseModel):
    """페이지네이션 응답 스키마 — Generic paginated list envelope."""

    items: list[Any]  # 현재 페이지 항목 (Items on this page)
    total: int  # 전체 항목 수 (Total matching items)
    page: int
    per_page: int


class MessageResponse(BaseModel):
    """단순 메시지 응답 — Plain message response."""

    message: str
