"""알림 스킬: Console / Webhook

사용자에게 보여줄 일시 알림(토스트)을 채널별로 병렬 발송한다.
개별 채널 실패는 격리된다. 최근 알림은 history에 남는다.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

import aiohttp

logger = logging.getLogger("bilit.skill.notifier")


@dataclass(frozen=True, slots=True)
class Notice:
    """사용자 알림"""

    title: str
    message: str
    level: str = "info"   # info | success | error

    @property
    def is_error(self) -> bool:
        return self.level == "error"


class NotifierSkill:
    """다채널 알림 스킬"""

    __slots__ = ("_methods", "_webhook_url", "_history")

    def __init__(
        self,
        methods: Optional[list[str]] = None,
        webhook_url: str = "",
        max_entries: int = 50,
    ) -> None:
        self._methods = methods if methods is not None else ["console"]
        self._webhook_url = webhook_url
        self._history: deque[Notice] = deque(maxlen=max_entries)

    @property
    def history(self) -> tuple[Notice, ...]:
        return tuple(self._history)

    @property
    def errors(self) -> tuple[Notice, ...]:
        return tuple(n for n in self._history if n.is_error)

    async def notify(self, title: str, message: str, level: str = "info") -> Notice:
        notice = Notice(title=title, message=message, level=level)
        await self.send(notice)
        return notice

    async def send(self, notice: Notice) -> None:
        """알림 발송 (채널 실패는 로그만 남김)"""
        self._history.append(notice)
        log = logger.warning if notice.is_error else logger.info
        log("알림 [%s] %s: %s", notice.level, notice.title, notice.message)

        tasks: list[asyncio.Task[None]] = []
        for method in self._methods:
            if method == "console":
                tasks.append(asyncio.ensure_future(self._console_notify(notice)))
            elif method == "webhook":
                tasks.append(
                    asyncio.ensure_future(
                        self._webhook_notify(notice, self._webhook_url)
                    )
                )

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @staticmethod
    async def _console_notify(notice: Notice) -> None:
        marker = {"error": "✖", "success": "✔"}.get(notice.level, "•")
        print(f"{marker} {notice.title}\n  {notice.message}")

    @staticmethod
    async def _webhook_notify(notice: Notice, webhook_url: str) -> None:
        """Webhook 알림 (Slack/Discord 호환 text 필드)"""
        if not webhook_url:
            return

        try:
            async with aiohttp.ClientSession() as session:
                await session.post(
                    webhook_url,
                    json={"text": f"*{notice.title}*\n{notice.message}"},
                    timeout=aiohttp.ClientTimeout(total=10),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Webhook 알림 실패: %s", e)
