"""경로 기록

예약 만료 시 돌아갈 화면 경로를 JSON 파일에 저장한다.
기록은 23시간 후 만료되며, 저장/조회 실패는 로그만 남기고 넘어간다.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger("bilit.route_history")

FALLBACK_ROUTE = "/"


class RouteHistory:
    """JSON 파일 기반 경로 저장소"""

    __slots__ = ("_path", "_ttl", "_navigate", "_clock")

    def __init__(
        self,
        path: str | Path,
        ttl_seconds: float = 82800.0,
        navigate: Optional[Callable[[str], object]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._path = Path(path)
        self._ttl = ttl_seconds
        self._navigate = navigate
        self._clock = clock

    def save_route(self, route: str) -> None:
        record = {"route": route, "expires_at": self._clock() + self._ttl}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(record), encoding="utf-8")
            logger.debug("경로 저장: %s", route)
        except OSError as e:
            logger.warning("경로 저장 실패: %s", e)

    def stored_route(self) -> str:
        """저장된 경로 (없음/만료/손상 시 '/')"""
        try:
            record = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return FALLBACK_ROUTE
        except (OSError, ValueError) as e:
            logger.warning("경로 기록 읽기 실패: %s", e)
            return FALLBACK_ROUTE

        if not isinstance(record, dict) or not record.get("route"):
            return FALLBACK_ROUTE
        if float(record.get("expires_at", 0)) <= self._clock():
            logger.debug("경로 기록 만료")
            self.clear()
            return FALLBACK_ROUTE
        return str(record["route"])

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("경로 기록 삭제 실패: %s", e)

    def navigate_to_stored_route(self) -> str:
        """저장된 경로로 이동하고 그 경로를 반환"""
        route = self.stored_route()
        logger.info("저장된 경로로 이동: %s", route)
        if self._navigate is not None:
            try:
                self._navigate(route)
            except Exception:
                logger.exception("경로 이동 실패: %s", route)
        return route
