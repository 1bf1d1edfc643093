"""데이터 모델: 승객 레코드, 구매자 정보, 확정 승객 명단"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from src.models.seat import Gender

REQUIRED_FIELDS: tuple[str, ...] = ("name", "family", "national_id")


@dataclass(slots=True)
class PassengerRecord:
    """좌석 하나에 대응하는 승객 입력 레코드 (가변)

    좌석이 선택될 때 생성되고 선택 해제 시 폐기된다.
    errors/warnings는 필드명 → 현지화 메시지.
    """

    seat_id: int
    seat_no: str
    gender: Gender
    name: str = ""
    family: str = ""
    national_id: str = ""
    phone: str = ""
    birth_year: str = ""
    birth_month: str = ""
    birth_day: str = ""
    # 검증 통과한 YYYYMMDD (원본 달력, ASCII 숫자). 미입력/오류면 빈 문자열.
    birth_date: str = ""
    errors: dict[str, str] = field(default_factory=dict)
    warnings: dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return all(getattr(self, f).strip() for f in REQUIRED_FIELDS)

    @property
    def is_valid(self) -> bool:
        """필드 에러 0개 + 필수 필드 모두 입력"""
        return not self.errors and self.is_complete


@dataclass(frozen=True, slots=True)
class BuyerProfile:
    """로그인한 구매자 정보"""

    user_id: int = 0
    first_name: str = ""
    last_name: str = ""
    phone_number: str = ""
    email: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "BuyerProfile":  # type: ignore[type-arg]
        raw_id = data.get("userId") or data.get("userID") or 0
        return cls(
            user_id=int(raw_id) if str(raw_id).isdigit() else 0,
            first_name=data.get("firstName", "") or "",
            last_name=data.get("lastName", "") or "",
            phone_number=data.get("phoneNumber", "") or "",
            email=data.get("email", "") or "",
        )


@dataclass(slots=True)
class ContactOverride:
    """구매자 추가 연락처 (활성화 시 프로필 연락처 대신 사용)"""

    enabled: bool = False
    phone: str = ""
    email: str = ""
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.enabled or not self.errors


@dataclass(frozen=True, slots=True)
class ResolvedContact:
    """주문에 실릴 최종 연락처"""

    phone: str
    email: str


@dataclass(frozen=True, slots=True)
class FinalizedPassenger:
    """주문 생성에 쓰이는 확정 승객"""

    seat_id: int
    seat_no: str
    name: str
    family: str
    national_id: str
    gender: Gender
    birth_date: str = ""
    phone: str = ""
    passenger_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class SavedRoster:
    """commit() 결과: 확정 승객 명단 + 연락처"""

    passengers: tuple[FinalizedPassenger, ...]
    contact: ResolvedContact


@dataclass(frozen=True, slots=True)
class GateResult:
    """명단 검증 집계"""

    is_any_passenger_valid: bool = False
    all_passengers_valid: bool = False
