"""검증 게이트 (ValidationGate)

승객 명단 상태를 두 개의 불리언으로 집계한다.
  - is_any_passenger_valid: 1명 이상 유효 (진행 허용 기준)
  - all_passengers_valid: 전원 유효

명단 변경을 구독하고, 불리언 값이 바뀔 때만 리스너에게 알린다.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from src.models.events import CheckoutEvent, CheckoutMessage, MessageHandler
from src.models.passenger import ContactOverride, GateResult, PassengerRecord

logger = logging.getLogger("bilit.skill.validation_gate")


def aggregate(
    records: Iterable[PassengerRecord],
    contact: Optional[ContactOverride] = None,
) -> GateResult:
    """명단 → GateResult (순수 함수)

    활성화된 연락처가 유효하지 않으면 두 값 모두 False.
    """
    flags = [r.is_valid for r in records]
    if not flags:
        return GateResult()
    if contact is not None and not contact.is_valid:
        return GateResult()
    return GateResult(
        is_any_passenger_valid=any(flags),
        all_passengers_valid=all(flags),
    )


class ValidationGate:
    """명단 검증 결과 집계 + 변경 통지"""

    __slots__ = ("_roster", "_result", "_listeners", "_unsubscribe")

    SOURCE = "validation_gate"

    def __init__(self, roster: object) -> None:
        self._roster = roster
        self._result = GateResult()
        self._listeners: list[MessageHandler] = []
        self._unsubscribe: Optional[Callable[[], None]] = roster.subscribe(  # type: ignore[attr-defined]
            self._on_roster_changed
        )
        self._recompute()

    @property
    def result(self) -> GateResult:
        return self._result

    @property
    def is_any_passenger_valid(self) -> bool:
        return self._result.is_any_passenger_valid

    @property
    def all_passengers_valid(self) -> bool:
        return self._result.all_passengers_valid

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        self._listeners.append(handler)

        def _unsubscribe() -> None:
            if handler in self._listeners:
                self._listeners.remove(handler)

        return _unsubscribe

    def close(self) -> None:
        """명단 구독 해제"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_roster_changed(self, msg: CheckoutMessage) -> None:
        if msg.event == CheckoutEvent.ROSTER_CHANGED:
            self._recompute()

    def _recompute(self) -> None:
        new = aggregate(
            self._roster.records,  # type: ignore[attr-defined]
            self._roster.contact,  # type: ignore[attr-defined]
        )
        if new == self._result:
            return
        logger.debug(
            "게이트 변경: any=%s all=%s", new.is_any_passenger_valid,
            new.all_passengers_valid,
        )
        self._result = new
        msg = CheckoutMessage(
            event=CheckoutEvent.GATE_CHANGED,
            source=self.SOURCE,
            target="*",
            payload=new,
        )
        for handler in list(self._listeners):
            try:
                handler(msg)
            except Exception:
                logger.exception("게이트 리스너 처리 실패")
