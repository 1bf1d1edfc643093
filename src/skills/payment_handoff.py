"""결제 이관 스킬 (PaymentHandoff)

두 번의 HTTP 호출로 체크아웃을 결제 게이트웨이에 넘긴다.
  1. create_order: 주문 생성 → 참조번호
  2. request_payment_url: 참조번호 + 홀드 토큰 → 결제 URL

두 호출 모두 재시도하지 않는다. 응답 키 이름이 일정하지 않아
후보 키 목록을 상수로 두고 extract_field()로만 조회한다.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from src.models.config import CheckoutConfig
from src.models.errors import ApiError, OrderCreationError, PaymentUrlError
from src.models.order import (
    PaymentIntent,
    PaymentMethod,
    ReservationSession,
    TicketSnapshot,
)
from src.models.passenger import SavedRoster
from src.skills import messages
from src.skills.api_client import ApiClient, extract_field
from src.skills.snapshot import compute_arrival, convert_date_format

logger = logging.getLogger("bilit.skill.payment_handoff")

REFERENCE_NUMBER_KEYS: tuple[str, ...] = ("refNum", "refNumber", "referenceNumber")
PAYMENT_URL_KEYS: tuple[str, ...] = ("paymentUrl", "redirectUrl", "url")

# 생년월일 미입력 승객에 주문 API가 요구하는 기본값
DEFAULT_BIRTH_DATE = "13720704"


def _server_message(data: Any) -> str:
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return ""


class PaymentHandoff:
    """주문 생성 + 결제 URL 요청"""

    __slots__ = ("_client", "_config")

    def __init__(self, client: ApiClient, config: CheckoutConfig) -> None:
        self._client = client
        self._config = config

    # ── 페이로드 ──────────────────────────────────────────

    @staticmethod
    def build_service_ticket(
        snapshot: TicketSnapshot,
        session: ReservationSession,
    ) -> dict[str, Any]:
        arrival_date, arrival_time = compute_arrival(
            snapshot.depart_date, snapshot.depart_time, snapshot.duration,
        )
        return {
            "logoUrl": snapshot.logo_url,
            "srvNo": snapshot.service_no or session.ticket_token,
            "srvName": snapshot.description or "Bus Service",
            "coToken": session.service_token,
            "departureTime": snapshot.depart_time,
            "arrivalTime": arrival_time,
            "departureCity": snapshot.src_city_name,
            "arrivalCity": snapshot.des_city_name,
            "departureDate": convert_date_format(snapshot.depart_date),
            "arrivalDate": arrival_date or convert_date_format(snapshot.depart_date),
            "price": snapshot.price,
            "companyName": snapshot.company_name,
            "isCharger": snapshot.is_charger,
            "isMonitor": snapshot.is_monitor,
            "isBed": snapshot.is_bed,
            "isVIP": snapshot.is_vip,
            "isSofa": snapshot.is_sofa,
            "isMono": snapshot.is_mono,
            "isAirConditionType": snapshot.is_air_condition,
            "srcCityCode": snapshot.src_city_code,
            "desCityCode": snapshot.des_city_code,
            "travelDuration": snapshot.duration,
        }

    def build_order_payload(
        self,
        snapshot: TicketSnapshot,
        roster: SavedRoster,
        session: ReservationSession,
        auth: Any,
        asset_id: Optional[str] = None,
    ) -> dict[str, Any]:
        profile = getattr(auth, "profile", None)
        user_id = getattr(profile, "user_id", 0)
        contact = roster.contact
        service_ticket = self.build_service_ticket(snapshot, session)

        passengers = [
            {
                "userID": user_id,
                "fName": p.name,
                "lName": p.family,
                "gender": p.gender.api_value,
                "nationalCode": p.national_id,
                "address": "",
                "dateOfBirth": p.birth_date or DEFAULT_BIRTH_DATE,
                "phoneNumber": contact.phone,
                "email": contact.email,
                "seatID": str(p.seat_id),
                "seatNo": str(p.seat_no),
            }
            for p in roster.passengers
        ]

        return {
            "order": {
                "userID": user_id,
                "description": (
                    f"Bus ticket from {service_ticket['departureCity']} "
                    f"to {service_ticket['arrivalCity']}"
                ),
                "addedPhone": contact.phone,
                "addedEmail": contact.email,
                "SrvTicket": service_ticket,
                "passengers": passengers,
                "OrderAssetId": asset_id or None,
            },
            "token": auth.get_access_token(),
            "refreshToken": auth.get_refresh_token() or "",
        }

    def build_intent(
        self,
        reference_number: str,
        session: ReservationSession,
        method: PaymentMethod = PaymentMethod.GATEWAY,
    ) -> PaymentIntent:
        return PaymentIntent(
            reference_number=reference_number,
            hold_token=session.hold_token,
            callback_url=self._config.callback_url(reference_number),
            payment_method=method,
        )

    @staticmethod
    def build_payment_payload(
        intent: PaymentIntent,
        snapshot: TicketSnapshot,
        session: ReservationSession,
        auth: Any,
        phone: str,
    ) -> dict[str, Any]:
        bus_ticket: dict[str, Any] = {
            "CoToken": session.service_token,
            "SrvNo": snapshot.service_no or session.ticket_token,
            "RefNum": intent.reference_number,
            "redisKey": intent.hold_token,
            "CallBackUrl": intent.callback_url,
            "PhoneNumber": phone,
        }
        if intent.payment_method is PaymentMethod.WALLET:
            bus_ticket["PaymentMethod"] = "wallet"
        return {
            "token": auth.get_access_token(),
            "refreshToken": auth.get_refresh_token() or "",
            "BusTicket": bus_ticket,
        }

    # ── 호출 ──────────────────────────────────────────────

    async def create_order(
        self,
        snapshot: TicketSnapshot,
        roster: SavedRoster,
        session: ReservationSession,
        auth: Any,
        asset_id: Optional[str] = None,
    ) -> str:
        """주문 생성 후 참조번호 반환

        Raises:
            OrderCreationError: 네트워크/HTTP 실패, success=false, 참조번호 없음
        """
        payload = self.build_order_payload(snapshot, roster, session, auth, asset_id)
        logger.info(
            "주문 생성 요청: %s, 승객 %d명", snapshot.summary(), len(roster.passengers),
        )
        try:
            data = await self._client.post_json(self._config.order_url, payload)
        except ApiError as e:
            raise OrderCreationError(
                f"주문 생성 실패: {e}",
                _server_message(e.response_data) or messages.ORDER_FAILED[1],
                status=e.status,
                response_data=e.response_data,
            ) from e

        if not isinstance(data, dict) or not data.get("success"):
            raise OrderCreationError(
                "주문 생성 실패: success=false",
                _server_message(data) or messages.ORDER_FAILED[1],
                response_data=data,
            )

        reference = extract_field(data, REFERENCE_NUMBER_KEYS, "참조번호")
        if not reference:
            raise OrderCreationError(
                "응답에 참조번호 없음",
                messages.ORDER_FAILED[1],
                response_data=data,
            )
        logger.info("주문 생성 완료: ref=%s", reference)
        return reference

    async def request_payment_url(
        self,
        intent: PaymentIntent,
        snapshot: TicketSnapshot,
        session: ReservationSession,
        auth: Any,
        phone: str,
    ) -> str:
        """결제 URL 요청

        지갑 결제는 URL 없이 success만 오면 인보이스 주소로 이동한다.

        Raises:
            PaymentUrlError: 네트워크/HTTP 실패, success=false, URL 없음
        """
        payload = self.build_payment_payload(intent, snapshot, session, auth, phone)
        ref = intent.reference_number
        logger.info(
            "결제 URL 요청: ref=%s method=%s", ref, intent.payment_method.value,
        )
        try:
            data = await self._client.post_json(self._config.buy_url, payload)
        except ApiError as e:
            raise PaymentUrlError(
                f"결제 URL 요청 실패: {e}",
                ref,
                _server_message(e.response_data) or messages.PAYMENT_FAILED[1],
                status=e.status,
                response_data=e.response_data,
            ) from e

        if isinstance(data, dict) and data.get("success") is False:
            raise PaymentUrlError(
                "결제 URL 요청 실패: success=false",
                ref,
                _server_message(data) or messages.PAYMENT_FAILED[1],
                response_data=data,
            )

        url = extract_field(data, PAYMENT_URL_KEYS, "결제 URL")
        if url:
            return url
        if (
            intent.payment_method is PaymentMethod.WALLET
            and isinstance(data, dict)
            and data.get("success")
        ):
            logger.info("지갑 결제 완료 - 인보이스로 이동: ref=%s", ref)
            return intent.callback_url
        raise PaymentUrlError(
            "응답에 결제 URL 없음", ref, messages.PAYMENT_FAILED[1],
            response_data=data,
        )
