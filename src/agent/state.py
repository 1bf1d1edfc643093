"""체크아웃 상태 머신

상태 전이 규칙을 정의하고 검증한다.
ERROR와 IDLE은 모든 상태에서 진입할 수 있다.
"""

from __future__ import annotations

from enum import Enum, auto


class CheckoutState(Enum):
    IDLE = auto()
    SELECTING_SEATS = auto()
    SAVING_PASSENGERS = auto()
    AWAITING_STEP2 = auto()
    PAYING = auto()
    REDIRECTED = auto()
    ERROR = auto()


_ALWAYS = frozenset({CheckoutState.ERROR, CheckoutState.IDLE})

# 허용된 상태 전이 맵: {현재상태: {허용되는 다음 상태들}}
_VALID_TRANSITIONS: dict[CheckoutState, frozenset[CheckoutState]] = {
    CheckoutState.IDLE: _ALWAYS | {CheckoutState.SELECTING_SEATS},
    CheckoutState.SELECTING_SEATS: _ALWAYS | {
        CheckoutState.SAVING_PASSENGERS,
    },
    CheckoutState.SAVING_PASSENGERS: _ALWAYS | {
        CheckoutState.AWAITING_STEP2,
    },
    CheckoutState.AWAITING_STEP2: _ALWAYS | {
        CheckoutState.PAYING, CheckoutState.SELECTING_SEATS,
    },
    CheckoutState.PAYING: _ALWAYS | {
        CheckoutState.REDIRECTED, CheckoutState.AWAITING_STEP2,
    },
    CheckoutState.REDIRECTED: _ALWAYS,
    CheckoutState.ERROR: _ALWAYS | {
        CheckoutState.SELECTING_SEATS, CheckoutState.AWAITING_STEP2,
    },
}

# 진행률 체크포인트
PROGRESS_STARTED = 10
PROGRESS_PRECONDITIONS = 20
PROGRESS_ORDER_SENT = 30
PROGRESS_ORDER_CREATED = 60
PROGRESS_REFERENCE = 70
PROGRESS_URL_REQUESTED = 80
PROGRESS_URL_RECEIVED = 90
PROGRESS_DONE = 100


def validate_transition(current: CheckoutState, target: CheckoutState) -> bool:
    """상태 전이가 유효한지 검증"""
    allowed = _VALID_TRANSITIONS.get(current, frozenset())
    return target in allowed
