"""체크아웃 예외 계층

모든 예외는 CheckoutError를 상속하며, user_message는 사용자에게
그대로 보여줄 현지화 문구다.
"""

from __future__ import annotations

from typing import Any, Optional


class CheckoutError(Exception):
    """체크아웃 기본 예외"""

    def __init__(self, message: str, user_message: str = "") -> None:
        super().__init__(message)
        self.user_message = user_message or message


class PreconditionError(CheckoutError):
    """세션/스냅샷/명단 누락 - 네트워크 호출 전에 차단"""


class PassengerSaveError(CheckoutError):
    """승객 명단 저장 실패"""


class ApiError(CheckoutError):
    """HTTP 호출 실패 (네트워크, 상태 코드, success=false)"""

    def __init__(
        self,
        message: str,
        user_message: str = "",
        status: Optional[int] = None,
        response_data: Any = None,
    ) -> None:
        super().__init__(message, user_message)
        self.status = status
        self.response_data = response_data


class OrderCreationError(ApiError):
    """주문 생성 실패 - 서버에 남는 상태 없음"""


class PaymentUrlError(ApiError):
    """결제 URL 요청 실패 - 주문은 이미 서버에 존재"""

    def __init__(
        self,
        message: str,
        reference_number: str,
        user_message: str = "",
        status: Optional[int] = None,
        response_data: Any = None,
    ) -> None:
        super().__init__(message, user_message, status, response_data)
        self.reference_number = reference_number
