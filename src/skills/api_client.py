"""HTTP JSON 클라이언트

주문/결제/승객 저장 엔드포인트에 JSON POST를 보낸다.
모든 실패(네트워크, 타임아웃, 4xx/5xx)는 ApiError로 통일한다.
재시도는 하지 않는다.
"""

from __future__ import annotations

import asyncio
import logging
from time import monotonic
from typing import Any, ClassVar, Optional, Sequence

import aiohttp

from src.models.errors import ApiError

logger = logging.getLogger("bilit.skill.api_client")


def extract_field(data: Any, keys: Sequence[str], label: str) -> Optional[str]:
    """응답 딕셔너리에서 후보 키 순서대로 첫 번째 값을 찾는다

    서버 응답 키 이름이 버전마다 달라서 조회를 이 함수 하나로 모은다.
    첫 번째 후보가 아닌 키로 찾았으면 로그를 남긴다.
    """
    if not isinstance(data, dict):
        return None
    for i, key in enumerate(keys):
        value = data.get(key)
        if value in (None, ""):
            continue
        if i > 0:
            logger.info("%s: 대체 키 '%s' 사용", label, key)
        return str(value)
    logger.warning("%s: 응답에 후보 키 없음 %s", label, list(keys))
    return None


class ApiClient:
    """aiohttp 기반 JSON POST 클라이언트"""

    HEADERS: ClassVar[dict[str, str]] = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }

    def __init__(
        self,
        request_timeout: float = 15.0,
        connect_timeout: float = 5.0,
        max_connections: int = 3,
        metrics: Optional[object] = None,
    ) -> None:
        self._request_timeout = request_timeout
        self._connect_timeout = connect_timeout
        self._max_connections = max_connections
        self._metrics = metrics
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(
                total=self._request_timeout,
                connect=self._connect_timeout,
            )
            connector = aiohttp.TCPConnector(
                limit=self._max_connections,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector,
                headers=self.HEADERS,
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def post_json(
        self,
        url: str,
        body: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """JSON POST 후 파싱된 응답 반환. 실패 시 ApiError."""
        session = await self._get_session()
        ts = monotonic()
        success = False
        try:
            async with session.post(url, json=body, headers=headers) as resp:
                if resp.status >= 400:
                    text = await resp.text()
                    raise ApiError(
                        f"HTTP {resp.status}: {url}",
                        status=resp.status,
                        response_data=text[:500],
                    )
                # 일부 엔드포인트가 text/plain으로 JSON을 돌려주므로 검사 생략
                data = await resp.json(content_type=None)
            success = True
            return data
        except ApiError:
            raise
        except asyncio.TimeoutError as e:
            raise ApiError(f"요청 타임아웃: {url}") from e
        except aiohttp.ClientError as e:
            raise ApiError(f"네트워크 오류: {e}") from e
        except ValueError as e:
            raise ApiError(f"응답 JSON 파싱 실패: {url}") from e
        finally:
            elapsed_ms = (monotonic() - ts) * 1000
            if self._metrics is not None:
                self._metrics.record_request(success, elapsed_ms)  # type: ignore[attr-defined]
            logger.debug(
                "POST %s → %s (%.0fms)", url, "OK" if success else "FAIL",
                elapsed_ms,
            )
