"""좌석 선택 스킬 (SeatSelectionStore)

좌석 선택 상태의 단일 소유자. 좌석 클릭 순환과 최대 선택 수를 관리하고,
모든 변경을 구독자에게 CheckoutMessage로 발행한다.

구독자는 동기 호출되므로 발행 순서 = 변경 순서가 보장된다.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from src.models.events import CheckoutEvent, CheckoutMessage, MessageHandler
from src.models.seat import Seat, SeatState, SelectedSeat, next_seat_state

logger = logging.getLogger("bilit.skill.seat_selection")


class SeatSelectionStore:
    """좌석 선택 상태 저장소"""

    __slots__ = (
        "_max_selectable", "_seats", "_selected", "_subscribers", "_frozen",
    )

    SOURCE = "seat_selection"

    def __init__(self, max_selectable: int = 7) -> None:
        self._max_selectable = max_selectable
        self._seats: dict[int, Seat] = {}
        self._selected: dict[int, SelectedSeat] = {}   # 선택 순서 유지
        self._subscribers: list[MessageHandler] = []
        self._frozen = False

    # ── 조회 ──────────────────────────────────────────────

    @property
    def max_selectable(self) -> int:
        return self._max_selectable

    @property
    def seats(self) -> tuple[Seat, ...]:
        return tuple(self._seats.values())

    @property
    def selected_seats(self) -> tuple[SelectedSeat, ...]:
        return tuple(self._selected.values())

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    @property
    def is_full(self) -> bool:
        return len(self._selected) >= self._max_selectable

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def seat(self, seat_id: int) -> Optional[Seat]:
        return self._seats.get(seat_id)

    # ── 구독 ──────────────────────────────────────────────

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        """변경 구독. 반환값을 호출하면 구독 해제."""
        self._subscribers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return _unsubscribe

    def _publish(self, event: str, payload: object) -> None:
        msg = CheckoutMessage(
            event=event,
            source=self.SOURCE,
            target="*",
            payload=payload,
        )
        for handler in list(self._subscribers):
            try:
                handler(msg)
            except Exception:
                logger.exception("구독자 처리 실패: %s", event)

    # ── 변경 ──────────────────────────────────────────────

    def load_seats(self, seats: Iterable[Seat]) -> None:
        """좌석 배치도 설치 (기존 선택은 해제)"""
        if self._selected:
            self.clear()
        self._seats = {s.seat_id: s for s in seats}
        logger.info("좌석 배치도 로드: %d석", len(self._seats))

    def freeze(self) -> None:
        """클릭/해제 차단 (clear는 항상 허용)"""
        self._frozen = True

    def unfreeze(self) -> None:
        self._frozen = False

    def select_seat(self, seat_id: int) -> SeatState:
        """좌석 클릭 1회 처리 후 결과 상태 반환

        - 예약/차단 좌석: 변화 없음
        - 최대 선택 수 도달 시 새 좌석: 변화 없음 + CAPACITY_REACHED
        - 이미 선택된 좌석: 상한과 무관하게 순환
        """
        seat = self._seats.get(seat_id)
        if seat is None:
            logger.warning("알 수 없는 좌석: %s", seat_id)
            return SeatState.BLOCKED
        if self._frozen:
            logger.debug("선택 고정 중 - 클릭 무시: %s", seat.seat_no)
            return seat.state
        if not seat.state.is_selectable:
            return seat.state

        if seat.state is SeatState.AVAILABLE and self.is_full:
            logger.info(
                "최대 선택 수 도달 (%d) - 좌석 %s 무시",
                self._max_selectable, seat.seat_no,
            )
            self._publish(CheckoutEvent.CAPACITY_REACHED, self._max_selectable)
            return seat.state

        new_state = next_seat_state(seat.state)
        self._seats[seat_id] = Seat(seat.seat_id, seat.seat_no, new_state)

        if seat.state is SeatState.AVAILABLE:
            selected = SelectedSeat(seat.seat_id, seat.seat_no, new_state.gender)  # type: ignore[arg-type]
            self._selected[seat_id] = selected
            self._publish(CheckoutEvent.SEAT_SELECTED, selected)
        elif new_state is SeatState.AVAILABLE:
            released = self._selected.pop(seat_id)
            self._publish(CheckoutEvent.SEAT_RELEASED, released)
        else:
            changed = SelectedSeat(seat.seat_id, seat.seat_no, new_state.gender)  # type: ignore[arg-type]
            self._selected[seat_id] = changed
            self._publish(CheckoutEvent.SEAT_GENDER_CHANGED, changed)

        logger.debug(
            "좌석 %s: %s → %s", seat.seat_no, seat.state.value, new_state.value,
        )
        return new_state

    def remove_seat(self, seat_id: int) -> bool:
        """선택 좌석을 강제로 AVAILABLE로 되돌림. 선택되지 않은 좌석은 False."""
        if self._frozen or seat_id not in self._selected:
            return False
        released = self._selected.pop(seat_id)
        self._seats[seat_id] = Seat(
            released.seat_id, released.seat_no, SeatState.AVAILABLE,
        )
        self._publish(CheckoutEvent.SEAT_RELEASED, released)
        return True

    def clear(self) -> int:
        """모든 선택 해제 후 해제된 좌석 수 반환"""
        released = tuple(self._selected.values())
        for s in released:
            self._seats[s.seat_id] = Seat(s.seat_id, s.seat_no, SeatState.AVAILABLE)
        self._selected.clear()
        self._frozen = False
        if released:
            logger.info("선택 좌석 %d개 해제", len(released))
        self._publish(CheckoutEvent.SELECTION_CLEARED, released)
        return len(released)
