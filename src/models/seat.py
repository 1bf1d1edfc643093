"""데이터 모델: 좌석, 선택 좌석, 성별

좌석 클릭 순환(빈 좌석 → 남성 → 여성 → 빈 좌석)은 전이 테이블로 정의한다.
모든 모델은 frozen=True + slots=True로 불변성을 보장한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def api_value(self) -> bool:
        """주문 API 인코딩 (남성=True, 여성=False)"""
        return self is Gender.MALE

    @property
    def code(self) -> str:
        """승객 저장 API 인코딩 ("2"=남성, "1"=여성)"""
        return "2" if self is Gender.MALE else "1"


class SeatState(Enum):
    AVAILABLE = "available"
    SELECTED_MALE = "selected-male"
    SELECTED_FEMALE = "selected-female"
    RESERVED_MALE = "reserved-male"
    RESERVED_FEMALE = "reserved-female"
    BLOCKED = "blocked"

    @property
    def is_selected(self) -> bool:
        return self in (SeatState.SELECTED_MALE, SeatState.SELECTED_FEMALE)

    @property
    def is_selectable(self) -> bool:
        """클릭 순환에 참여하는 상태인지"""
        return self in _SEAT_CYCLE

    @property
    def gender(self) -> Optional[Gender]:
        return _STATE_GENDER.get(self)


# 클릭 순환 전이 맵: {현재상태: 다음상태}
# 예약/차단 좌석은 맵에 없으므로 클릭해도 변하지 않는다.
_SEAT_CYCLE: dict[SeatState, SeatState] = {
    SeatState.AVAILABLE: SeatState.SELECTED_MALE,
    SeatState.SELECTED_MALE: SeatState.SELECTED_FEMALE,
    SeatState.SELECTED_FEMALE: SeatState.AVAILABLE,
}

_STATE_GENDER: dict[SeatState, Gender] = {
    SeatState.SELECTED_MALE: Gender.MALE,
    SeatState.SELECTED_FEMALE: Gender.FEMALE,
    SeatState.RESERVED_MALE: Gender.MALE,
    SeatState.RESERVED_FEMALE: Gender.FEMALE,
}


def next_seat_state(current: SeatState) -> SeatState:
    """클릭 한 번에 대한 다음 좌석 상태"""
    return _SEAT_CYCLE.get(current, current)


@dataclass(frozen=True, slots=True)
class Seat:
    """좌석 배치도의 개별 좌석"""

    seat_id: int
    seat_no: str
    state: SeatState = SeatState.AVAILABLE

    @classmethod
    def from_api(cls, item: dict) -> "Seat":  # type: ignore[type-arg]
        """좌석 배치도 응답 항목 → Seat

        Status: E(빈 좌석) / OC(점유), Gender: M / F / UN
        """
        status = str(item.get("Status", "E")).upper()
        gender = str(item.get("Gender", "UN")).upper()
        available = bool(item.get("IsAvailable", status == "E"))

        if available and status == "E":
            state = SeatState.AVAILABLE
        elif gender == "F":
            state = SeatState.RESERVED_FEMALE
        elif gender == "M":
            state = SeatState.RESERVED_MALE
        else:
            state = SeatState.BLOCKED

        return cls(
            seat_id=int(item.get("Index", 0)),
            seat_no=str(item.get("SeatNo", "")),
            state=state,
        )


@dataclass(frozen=True, slots=True)
class SelectedSeat:
    """선택된 좌석 (승객 레코드와 1:1)"""

    seat_id: int
    seat_no: str
    gender: Gender
