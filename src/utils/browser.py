"""브라우저 이동 유틸리티

결제 게이트웨이/인보이스 URL을 기본 브라우저로 연다.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Callable, Optional

logger = logging.getLogger("bilit.browser")


def open_url(url: str) -> bool:
    """URL을 기본 브라우저 새 탭으로 열기

    Returns:
        True: 실행 요청 성공
        False: 브라우저 없음 또는 실행 실패
    """
    logger.info("URL 열기 시도: %s", url)
    try:
        opened = webbrowser.open_new_tab(url)
    except webbrowser.Error as exc:
        logger.error("URL 열기 실패: %s", exc)
        return False
    if not opened:
        logger.warning("사용 가능한 브라우저 없음: %s", url)
    return bool(opened)


class BrowserNavigator:
    """최종 이동 담당

    opener를 주입하면 실제 브라우저 대신 사용한다 (CLI 출력/테스트).
    """

    __slots__ = ("_opener", "_history")

    def __init__(self, opener: Optional[Callable[[str], bool]] = None) -> None:
        self._opener = opener or open_url
        self._history: list[str] = []

    @property
    def history(self) -> tuple[str, ...]:
        return tuple(self._history)

    def open(self, url: str) -> bool:
        self._history.append(url)
        return self._opener(url)
