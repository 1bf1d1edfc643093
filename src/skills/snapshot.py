"""티켓 스냅샷 스킬

서비스 정보(TicketSnapshot) 공급자와 도착 일시 계산을 담당한다.

날짜는 이란력(잘랄리) 문자열을 그대로 다루며, 도착 일시는
출발 일시 + 소요 시간(H:MM)으로 계산한다. 일반 달력 연산은 하지 않는다.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from src.models.order import TicketSnapshot
from src.skills.messages import to_ascii_digits

logger = logging.getLogger("bilit.skill.snapshot")

# 33년 주기 윤년 (나머지 기준)
_LEAP_REMAINDERS = frozenset({1, 5, 9, 13, 17, 22, 26, 30})


def is_leap_year(year: int) -> bool:
    return year % 33 in _LEAP_REMAINDERS


def month_length(year: int, month: int) -> int:
    """1~6월 31일, 7~11월 30일, 12월 29일(윤년 30일)"""
    if month <= 6:
        return 31
    if month <= 11:
        return 30
    return 30 if is_leap_year(year) else 29


def _parse_hm(value: str) -> tuple[int, int]:
    hours, _, minutes = to_ascii_digits(value.strip()).partition(":")
    return int(hours), int(minutes or 0)


def convert_date_format(date_str: str) -> str:
    """DD/MM/YYYY → YYYY/MM/DD (형식이 맞지 않으면 원문 반환)"""
    if not date_str:
        return ""
    parts = to_ascii_digits(date_str.strip()).split("/")
    if len(parts) != 3:
        return date_str
    day, month, year = parts
    return f"{year}/{month.zfill(2)}/{day.zfill(2)}"


def compute_arrival(
    depart_date: str,
    depart_time: str,
    duration: str,
) -> tuple[str, str]:
    """출발 일시 + 소요 시간 → (도착 날짜 YYYY/MM/DD, 도착 시각 HH:MM)

    입력이 없거나 형식이 잘못되면 계산 가능한 부분만 채우고 나머지는 빈 문자열.
    """
    if not depart_time or not duration:
        return "", ""
    try:
        d_h, d_m = _parse_hm(depart_time)
        dur_h, dur_m = _parse_hm(duration)
    except ValueError:
        logger.warning("시각 형식 오류: depart=%r duration=%r", depart_time, duration)
        return "", ""

    total = d_h * 60 + d_m + dur_h * 60 + dur_m
    day_offset, minute_of_day = divmod(total, 24 * 60)
    arrival_time = f"{minute_of_day // 60:02d}:{minute_of_day % 60:02d}"

    if not depart_date:
        return "", arrival_time
    try:
        day, month, year = (
            int(p) for p in to_ascii_digits(depart_date.strip()).split("/")
        )
    except ValueError:
        logger.warning("날짜 형식 오류: %r", depart_date)
        return "", arrival_time

    day += day_offset
    while day > month_length(year, month):
        day -= month_length(year, month)
        month += 1
        if month > 12:
            month = 1
            year += 1

    return f"{year}/{month:02d}/{day:02d}", arrival_time


class TicketSnapshotProvider(Protocol):
    def get_snapshot(self) -> Optional[TicketSnapshot]: ...


class StaticSnapshotProvider:
    """고정 스냅샷 공급자"""

    __slots__ = ("_snapshot",)

    def __init__(self, snapshot: Optional[TicketSnapshot] = None) -> None:
        self._snapshot = snapshot

    def get_snapshot(self) -> Optional[TicketSnapshot]:
        return self._snapshot

    def set_snapshot(self, snapshot: Optional[TicketSnapshot]) -> None:
        self._snapshot = snapshot

    @classmethod
    def from_file(cls, path: str | Path) -> "StaticSnapshotProvider":
        """서비스 상세 JSON 파일에서 로드"""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        snapshot = TicketSnapshot.from_service(data)
        logger.info("스냅샷 로드: %s", snapshot.summary())
        return cls(snapshot)
