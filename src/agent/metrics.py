"""체크아웃 런타임 메트릭 수집"""

from __future__ import annotations

from time import monotonic


class CheckoutMetrics:
    """런타임 메트릭 수집"""

    __slots__ = (
        "total_requests", "successful_requests", "failed_requests",
        "orders_created", "payment_urls_issued", "expirations",
        "save_failures", "_response_times", "_start_time",
    )

    def __init__(self) -> None:
        self.total_requests: int = 0
        self.successful_requests: int = 0
        self.failed_requests: int = 0
        self.orders_created: int = 0
        self.payment_urls_issued: int = 0
        self.expirations: int = 0
        self.save_failures: int = 0
        self._response_times: list[float] = []
        self._start_time: float = monotonic()

    @property
    def avg_response_time_ms(self) -> float:
        if not self._response_times:
            return 0.0
        return sum(self._response_times) / len(self._response_times)

    @property
    def success_rate(self) -> float:
        return self.successful_requests / max(self.total_requests, 1) * 100

    @property
    def session_duration_s(self) -> float:
        return monotonic() - self._start_time

    def record_request(self, success: bool, elapsed_ms: float) -> None:
        self.total_requests += 1
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
        self._response_times.append(elapsed_ms)
        # 최근 100개만 유지
        if len(self._response_times) > 100:
            self._response_times = self._response_times[-50:]

    def record_order(self) -> None:
        self.orders_created += 1

    def record_payment_url(self) -> None:
        self.payment_urls_issued += 1

    def record_expiry(self) -> None:
        self.expirations += 1

    def record_save_failure(self) -> None:
        self.save_failures += 1

    def summary(self) -> str:
        return (
            f"=== 체크아웃 요약 ===\n"
            f"  경과 시간: {self.session_duration_s:.1f}초\n"
            f"  총 요청: {self.total_requests}회 "
            f"(성공률: {self.success_rate:.1f}%)\n"
            f"  주문 생성: {self.orders_created}회\n"
            f"  결제 URL 발급: {self.payment_urls_issued}회\n"
            f"  예약 만료: {self.expirations}회\n"
            f"  저장 실패: {self.save_failures}회\n"
            f"  평균 응답: {self.avg_response_time_ms:.0f}ms"
        )
