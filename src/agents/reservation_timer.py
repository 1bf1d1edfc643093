"""예약 타이머 (ReservationTimer)

좌석 홀드 마감까지 카운트다운하고, 만료 시 등록된 콜백을 1회 호출한다.
재시작하면 이전 카운트다운은 폐기되고 전체 시간으로 다시 시작한다.

라이프사이클: IDLE → RUNNING → (EXPIRED | CANCELLED)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from time import monotonic
from typing import Any, Awaitable, Callable, Optional, Union

from src.skills.messages import to_persian_digits

logger = logging.getLogger("bilit.agent.reservation_timer")

ExpireCallback = Callable[[], Union[None, Awaitable[Any]]]


class ReservationTimer:
    """asyncio 기반 1회성 카운트다운"""

    __slots__ = (
        "_callbacks", "_task", "_stop_event", "_deadline", "_duration",
        "_expired",
    )

    def __init__(self) -> None:
        self._callbacks: list[ExpireCallback] = []
        self._task: Optional[asyncio.Task[None]] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._deadline: Optional[float] = None
        self._duration: float = 0.0
        self._expired = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._expired

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def remaining_seconds(self) -> float:
        if self._deadline is None or not self.is_running:
            return 0.0
        return max(0.0, self._deadline - monotonic())

    def on_expire(self, callback: ExpireCallback) -> None:
        """만료 콜백 등록 (동기/비동기 모두 가능)"""
        self._callbacks.append(callback)

    def start(self, duration_seconds: float) -> None:
        """카운트다운 시작. 실행 중이면 전체 시간으로 재시작."""
        if duration_seconds <= 0:
            raise ValueError("duration_seconds는 0보다 커야 합니다")
        self._stop_current()

        self._expired = False
        self._duration = duration_seconds
        self._deadline = monotonic() + duration_seconds
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self._run(self._stop_event, duration_seconds),
            name="reservation_timer",
        )
        logger.info("예약 타이머 시작: %.0f초", duration_seconds)

    def cancel(self) -> None:
        """카운트다운 중지 (만료 콜백 호출 안 함)"""
        if self.is_running:
            logger.info("예약 타이머 취소 (남은 시간 %.0f초)", self.remaining_seconds)
        self._stop_current()
        self._deadline = None

    def _stop_current(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        self._stop_event = None
        self._task = None

    async def _run(self, stop_event: asyncio.Event, duration: float) -> None:
        try:
            await asyncio.wait_for(
                stop_event.wait(),
                timeout=duration,
            )
            # stop_event가 설정됨 → 취소/재시작
            return
        except asyncio.TimeoutError:
            pass

        if stop_event.is_set():
            return
        self._expired = True
        logger.warning("예약 시간 만료 (%.0f초)", duration)
        await self._fire()

    async def _fire(self) -> None:
        for callback in list(self._callbacks):
            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("만료 콜백 실행 실패")

    def format_remaining(self) -> str:
        """남은 시간 MM:SS (페르시아 숫자)"""
        total = int(self.remaining_seconds + 0.999) if self.is_running else 0
        minutes, seconds = divmod(total, 60)
        return to_persian_digits(f"{minutes:02d}:{seconds:02d}")

    async def wait(self) -> None:
        """현재 카운트다운이 끝날 때까지 대기 (만료 또는 취소)"""
        if self._task is not None:
            await asyncio.shield(self._task)
