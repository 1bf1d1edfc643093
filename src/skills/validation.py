"""입력 검증 스킬

승객 필드별 비즈니스 규칙을 검증한다.
실패 시 사용자에게 보여줄 문구를 담은 ValueError를 던지며,
호출 측(PassengerRoster)이 이를 필드 에러로 기록한다.
"""

from __future__ import annotations

import re

from src.skills import messages
from src.skills.messages import to_ascii_digits

# 페르시아 문자 + 공백 + ZWNJ (숫자 블록 U+0660~0669, U+06F0~06F9 제외)
_PERSIAN_NAME = re.compile(
    r"^[\u0600-\u065F\u066A-\u06EF\u06FA-\u06FF\u200C\s]+$"
)
_PERSIAN_BLOCK = re.compile(r"[\u0600-\u06FF]")
_MOBILE = re.compile(r"^09[0-9]{9}$")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NATIONAL_ID = re.compile(r"^[0-9]{10}$")
_YEAR = re.compile(r"^[0-9]{4}$")
_DAY_OR_MONTH = re.compile(r"^[0-9]{1,2}$")

MAX_NAME_LENGTH = 14


def is_valid_national_id(code: str) -> bool:
    """국가 신분번호 체크섬 검증

    s = Σ d_i·(10−i) (i=0..8) mod 11
    유효 조건: (s < 2 이고 d9 == s) 또는 (s ≥ 2 이고 d9 == 11 − s)
    같은 숫자 10개는 체크섬과 무관하게 무효.
    """
    if not _NATIONAL_ID.match(code):
        return False
    if len(set(code)) == 1:
        return False

    digits = [int(c) for c in code]
    s = sum(d * (10 - i) for i, d in enumerate(digits[:9])) % 11
    check = digits[9]
    return check == s if s < 2 else check == 11 - s


class ValidationSkill:
    """승객 입력 검증 스킬"""

    @staticmethod
    def validate_name(value: str, field: str = "name") -> str:
        """이름/성 검증 후 trim된 값 반환"""
        label = messages.NAME_LABELS.get(field, messages.NAME_LABELS["name"])
        trimmed = value.strip()
        if not trimmed:
            raise ValueError(messages.NAME_EMPTY.format(label=label))
        if len(trimmed) > MAX_NAME_LENGTH:
            raise ValueError(messages.NAME_TOO_LONG.format(label=label))
        if not _PERSIAN_NAME.match(trimmed):
            raise ValueError(messages.NAME_NOT_PERSIAN.format(label=label))
        return trimmed

    @staticmethod
    def validate_national_id(value: str) -> str:
        """신분번호 검증 (키보드 배열 → 형식 → 체크섬 순)"""
        code = value.strip()
        if _PERSIAN_BLOCK.search(code):
            raise ValueError(messages.KEYBOARD_LAYOUT)
        if not _NATIONAL_ID.match(code):
            raise ValueError(messages.NATIONAL_ID_LENGTH)
        if not is_valid_national_id(code):
            raise ValueError(messages.NATIONAL_ID_INVALID)
        return code

    @staticmethod
    def validate_phone(value: str, required: bool = False) -> str:
        """휴대폰 번호 검증. 빈 값은 required=False일 때 허용."""
        phone = to_ascii_digits(value.strip())
        if not phone and not required:
            return ""
        if not _MOBILE.match(phone):
            raise ValueError(messages.PHONE_INVALID)
        return phone

    @staticmethod
    def validate_email(value: str) -> str:
        email = value.strip()
        if not _EMAIL.match(email):
            raise ValueError(messages.EMAIL_INVALID)
        return email

    @staticmethod
    def validate_birth_date(year: str, month: str, day: str) -> str:
        """생년월일 검증 후 YYYYMMDD 반환 (모두 비어 있으면 빈 문자열)

        하나라도 입력되면 세 부분 모두 필요하다.
        """
        parts = [to_ascii_digits(p.strip()) for p in (year, month, day)]
        if not any(parts):
            return ""
        if not all(parts):
            raise ValueError(messages.BIRTH_DATE_INCOMPLETE)

        y, m, d = parts
        if not _YEAR.match(y):
            raise ValueError(messages.BIRTH_YEAR_INVALID)
        if not (_DAY_OR_MONTH.match(m) and 1 <= int(m) <= 12):
            raise ValueError(messages.BIRTH_MONTH_INVALID)
        if not (_DAY_OR_MONTH.match(d) and 1 <= int(d) <= 31):
            raise ValueError(messages.BIRTH_DAY_INVALID)
        return f"{y}{int(m):02d}{int(d):02d}"
