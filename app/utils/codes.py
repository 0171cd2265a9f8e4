"""무작위 코드 생성기 — QR 토큰 코드와 화면 접근 코드.

Random code generators for QR token values and kiosk screen access codes.
"""

import secrets
import string

# URL 안전 알파벳 — URL-safe alphabet for token codes
_TOKEN_ALPHABET: str = string.ascii_letters + string.digits + "-_"
# 접근 코드는 대문자+숫자만 사용 (운영자가 읽고 입력하기 쉽게)
_ACCESS_CODE_ALPHABET: str = string.ascii_uppercase + string.digits


def generate_token_code(length: int) -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def generate_access_code(length: int) -> str:
    return "".join(secrets.choice(_ACCESS_CODE_ALPHABET) for _ in range(length))


def normalize_access_code(value: str) -> str:
    """접근 코드 정규화 (공백 제거 + 대문자) — Trim and uppercase an access code."""
    return value.strip().upper()
