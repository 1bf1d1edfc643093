"""체크아웃 설정 모델"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal


@dataclass
class CheckoutConfig:
    """체크아웃 설정 - 좌석/타이머/HTTP 튜닝 파라미터"""

    # 좌석 선택
    max_selectable: int = 7

    # 예약 타이머
    reservation_seconds: float = 900.0   # 15분
    redirect_delay: float = 5.0

    # API 엔드포인트
    api_base_url: str = "https://api.bilit4u.com"
    order_path: str = "/order/api/v1/order/add"
    buy_path: str = "/order/api/v1/tickets/buy"
    passengers_path: str = "/admin/api/v1/admin/passengers/bulk"
    callback_base_url: str = "https://bilit4u.com"

    # 승객 검증 정책
    duplicate_national_id_policy: Literal["warn", "block"] = "warn"

    # 알림 설정
    notification_methods: list[str] = field(
        default_factory=lambda: ["console"]
    )
    webhook_url: str = ""
    max_notice_entries: int = 50

    # 경로 기록
    route_history_path: str = ".bilit/route.json"
    route_ttl_seconds: float = 82800.0   # 23시간

    # HTTP 설정
    request_timeout: float = 15.0
    connect_timeout: float = 5.0
    max_connections: int = 3

    def __post_init__(self) -> None:
        if self.max_selectable < 1:
            raise ValueError("max_selectable은 1 이상이어야 합니다")
        if self.reservation_seconds <= 0:
            raise ValueError("reservation_seconds는 0보다 커야 합니다")
        if self.redirect_delay < 0:
            raise ValueError("redirect_delay는 음수일 수 없습니다")
        if self.duplicate_national_id_policy not in ("warn", "block"):
            raise ValueError(
                f"알 수 없는 중복 코드 정책: {self.duplicate_national_id_policy}"
            )

    @property
    def order_url(self) -> str:
        return self.api_base_url.rstrip("/") + self.order_path

    @property
    def buy_url(self) -> str:
        return self.api_base_url.rstrip("/") + self.buy_path

    @property
    def passengers_url(self) -> str:
        if not self.passengers_path:
            return ""
        return self.api_base_url.rstrip("/") + self.passengers_path

    def callback_url(self, reference_number: str) -> str:
        """결제 완료 후 돌아올 인보이스 주소"""
        return f"{self.callback_base_url.rstrip('/')}/invoice/{reference_number}"

    @classmethod
    def from_env(cls, **overrides: object) -> "CheckoutConfig":
        """BILIT_* 환경변수로 기본값을 덮어쓴 설정 생성"""
        env = os.environ
        values: dict[str, object] = {}

        str_keys = {
            "BILIT_API_BASE_URL": "api_base_url",
            "BILIT_CALLBACK_BASE_URL": "callback_base_url",
            "BILIT_WEBHOOK_URL": "webhook_url",
            "BILIT_ROUTE_HISTORY_PATH": "route_history_path",
            "BILIT_DUPLICATE_NATIONAL_ID_POLICY": "duplicate_national_id_policy",
        }
        float_keys = {
            "BILIT_RESERVATION_SECONDS": "reservation_seconds",
            "BILIT_REDIRECT_DELAY": "redirect_delay",
            "BILIT_REQUEST_TIMEOUT": "request_timeout",
        }

        for name, attr in str_keys.items():
            if env.get(name):
                values[attr] = env[name]
        for name, attr in float_keys.items():
            if env.get(name):
                values[attr] = float(env[name])
        if env.get("BILIT_MAX_SELECTABLE"):
            values["max_selectable"] = int(env["BILIT_MAX_SELECTABLE"])
        if env.get("BILIT_NOTIFY"):
            values["notification_methods"] = [
                m.strip() for m in env["BILIT_NOTIFY"].split(",") if m.strip()
            ]

        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
