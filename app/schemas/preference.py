"""사용자 환경설정 Pydantic 스키마.

Preference schemas.
"""

from typing import Any
from pydantic import BaseModel


class PreferenceSetRequest(BaseModel):
    value: Any = None


class PreferenceResponse(BaseModel):
    key: str
    value: Any = None
