"""컴포넌트 간 통신 이벤트 모델"""

from __future__ import annotations

from dataclasses import dataclass
from time import monotonic
from typing import Any, Callable


class CheckoutEvent:
    """체크아웃 이벤트 타입 상수"""

    SEAT_SELECTED = "seat.selected"
    SEAT_GENDER_CHANGED = "seat.gender_changed"
    SEAT_RELEASED = "seat.released"
    SELECTION_CLEARED = "selection.cleared"
    CAPACITY_REACHED = "selection.capacity_reached"
    ROSTER_CHANGED = "roster.changed"
    GATE_CHANGED = "gate.changed"


@dataclass(frozen=True, slots=True)
class CheckoutMessage:
    """컴포넌트 간 메시지"""

    event: str
    source: str
    target: str
    payload: Any
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        if self.timestamp == 0.0:
            object.__setattr__(self, "timestamp", monotonic())


MessageHandler = Callable[[CheckoutMessage], None]
