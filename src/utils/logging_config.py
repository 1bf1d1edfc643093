"""로깅 설정

체크아웃 로그는 모두 "bilit.*" 네임스페이스를 쓴다.
콘솔은 레벨별 컬러, 파일은 UTF-8 평문 (토큰은 각 모듈에서 마스킹 후 기록).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAMESPACE = "bilit"

_CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s │ %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# ANSI 컬러 코드
_COLORS = {
    "DEBUG": "\033[36m",     # Cyan
    "INFO": "\033[32m",      # Green
    "WARNING": "\033[33m",   # Yellow
    "ERROR": "\033[31m",     # Red
    "CRITICAL": "\033[35m",  # Magenta
}
_RESET = "\033[0m"


class ColorFormatter(logging.Formatter):
    """레벨명에만 색을 입히는 포매터

    같은 레코드를 받는 파일 핸들러에 색상 코드가 섞이지 않도록
    포맷 후 levelname을 원래대로 되돌린다.
    """

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        color = _COLORS.get(original, "")
        record.levelname = f"{color}{original:<8}{_RESET}" if color else f"{original:<8}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _console_handler(color: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    formatter_cls = ColorFormatter if color else logging.Formatter
    handler.setFormatter(formatter_cls(fmt=_CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _file_handler(log_file: str | Path) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter(fmt=_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: str | Path | None = None,
    color: bool = True,
) -> logging.Logger:
    """로깅 초기화 후 체크아웃 최상위 로거 반환

    Args:
        level: bilit.* 로그 레벨 (DEBUG, INFO, WARNING, ERROR)
        log_file: 로그 파일 경로 (None이면 콘솔만)
        color: 콘솔 컬러 출력 여부
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.addHandler(_console_handler(color and sys.stdout.isatty()))
    if log_file:
        root.addHandler(_file_handler(log_file))

    app = logging.getLogger(LOGGER_NAMESPACE)
    app.setLevel(getattr(logging, level.upper(), logging.INFO))

    # 라이브러리 내부 로그는 경고 이상만
    for name in ("aiohttp", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)
    return app
