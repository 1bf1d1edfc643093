"""입력 파싱 스킬

CLI 인자와 파일/대화형 입력을 구조화된 값으로 변환한다.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from src.models.seat import Gender
from src.skills.messages import to_ascii_digits

# 입력 키 별칭 → 명단 필드명
_FIELD_ALIASES: dict[str, str] = {
    "name": "name",
    "fname": "name",
    "first_name": "name",
    "family": "family",
    "lname": "family",
    "last_name": "family",
    "national_id": "national_id",
    "nationalcode": "national_id",
    "national_code": "national_id",
    "phone": "phone",
    "phonenumber": "phone",
    "phone_number": "phone",
}

_GENDER_CODES: dict[str, Gender] = {
    "m": Gender.MALE,
    "male": Gender.MALE,
    "f": Gender.FEMALE,
    "female": Gender.FEMALE,
}


class ParserSkill:
    """입력 파싱 스킬"""

    @staticmethod
    def parse_seats(raw: str) -> list[tuple[str, Gender]]:
        """"12,14:f" → [("12", MALE), ("14", FEMALE)]

        성별 생략 시 남성. 중복 좌석은 첫 번째만 유지.
        """
        result: list[tuple[str, Gender]] = []
        seen: set[str] = set()
        for token in to_ascii_digits(raw).split(","):
            token = token.strip()
            if not token:
                continue
            seat_no, _, code = token.partition(":")
            seat_no = seat_no.strip()
            if not seat_no.isdigit():
                raise ValueError(f"좌석 번호 형식 오류: '{token}'")
            code = code.strip().lower() or "m"
            if code not in _GENDER_CODES:
                raise ValueError(f"성별 코드 오류: '{token}' (m/f)")
            if seat_no in seen:
                continue
            seen.add(seat_no)
            result.append((seat_no, _GENDER_CODES[code]))
        return result

    @staticmethod
    def parse_birth_date(raw: str) -> tuple[str, str, str]:
        """YYYY/MM/DD, YYYY-MM-DD, YYYYMMDD → (년, 월, 일)"""
        s = to_ascii_digits(raw.strip())
        if not s:
            return "", "", ""
        for sep in ("/", "-"):
            if sep in s:
                parts = s.split(sep)
                if len(parts) != 3:
                    raise ValueError(f"날짜 형식 오류: '{raw}'")
                return parts[0], parts[1], parts[2]
        if len(s) == 8 and s.isdigit():
            return s[:4], s[4:6], s[6:8]
        raise ValueError(f"날짜 형식 오류: '{raw}' (YYYY/MM/DD)")

    @classmethod
    def parse_passenger(cls, raw: dict[str, Any]) -> tuple[str, dict[str, str]]:
        """승객 입력 1건 → (좌석 번호, {필드명: 값})"""
        seat = raw.get("seat") or raw.get("seat_no") or raw.get("seatNo")
        if seat is None:
            raise ValueError("승객 항목에 seat 없음")

        fields: dict[str, str] = {}
        for key, value in raw.items():
            name = _FIELD_ALIASES.get(key.lower())
            if name is not None and value is not None:
                fields[name] = str(value)

        birth = raw.get("birth_date") or raw.get("dateOfBirth")
        if birth:
            y, m, d = cls.parse_birth_date(str(birth))
            fields.update(birth_year=y, birth_month=m, birth_day=d)
        return to_ascii_digits(str(seat)).strip(), fields

    @classmethod
    def load_passengers(cls, path: str | Path) -> list[tuple[str, dict[str, str]]]:
        """승객 JSON 파일 (리스트) 로드"""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("승객 파일은 JSON 배열이어야 합니다")
        return [cls.parse_passenger(item) for item in data]
