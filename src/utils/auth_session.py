"""인증 세션

로그인 후 발급된 액세스/리프레시 토큰을 보관한다.
토큰 값은 로그에 마스킹해서만 남긴다.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from src.models.passenger import BuyerProfile

logger = logging.getLogger("bilit.auth")


def mask_token(token: Optional[str]) -> str:
    """앞 4자리만 남기고 가림"""
    if not token:
        return "<없음>"
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}…({len(token)}자)"


class AuthSession:
    """토큰 보관소"""

    __slots__ = ("_access_token", "_refresh_token", "_profile")

    def __init__(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        profile: Optional[BuyerProfile] = None,
    ) -> None:
        self._access_token = access_token or None
        self._refresh_token = refresh_token or None
        self._profile = profile or BuyerProfile()

    def get_access_token(self) -> Optional[str]:
        return self._access_token

    def get_refresh_token(self) -> Optional[str]:
        return self._refresh_token

    @property
    def profile(self) -> BuyerProfile:
        return self._profile

    @property
    def has_credentials(self) -> bool:
        return bool(self._access_token and self._refresh_token)

    @classmethod
    def from_env(cls) -> "AuthSession":
        """BILIT_ACCESS_TOKEN / BILIT_REFRESH_TOKEN 환경변수에서 로드"""
        session = cls(
            access_token=os.environ.get("BILIT_ACCESS_TOKEN"),
            refresh_token=os.environ.get("BILIT_REFRESH_TOKEN"),
        )
        logger.debug("환경변수 인증 로드: %s", session)
        return session

    @classmethod
    def from_file(cls, path: str | Path) -> "AuthSession":
        """JSON 파일에서 로드

        {"access_token": ..., "refresh_token": ..., "user": {...}}
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        session = cls(
            access_token=data.get("access_token"),
            refresh_token=data.get("refresh_token"),
            profile=BuyerProfile.from_api(data.get("user") or {}),
        )
        logger.debug("파일 인증 로드 (%s): %s", path, session)
        return session

    def __repr__(self) -> str:
        return (
            f"AuthSession(access={mask_token(self._access_token)}, "
            f"refresh={mask_token(self._refresh_token)}, "
            f"user_id={self._profile.user_id})"
        )
