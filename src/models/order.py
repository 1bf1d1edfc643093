"""데이터 모델: 티켓 스냅샷, 예약 세션, 결제 요청

TicketSnapshot은 서비스 조회 응답을 불변 객체로 고정한 것이다.
주문 생성 시점의 노선/시간/편의시설/가격 정보를 그대로 전달한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from time import monotonic
from typing import Optional


class PaymentMethod(Enum):
    GATEWAY = "gateway"
    WALLET = "wallet"


def _flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


@dataclass(frozen=True, slots=True)
class TicketSnapshot:
    """불변 운행 정보"""

    service_no: str
    company_name: str
    src_city_name: str
    des_city_name: str
    depart_date: str
    depart_time: str
    price: int = 0
    duration: str = ""
    src_city_code: str = ""
    des_city_code: str = ""
    request_token: str = ""
    description: str = ""
    logo_url: str = ""
    bus_type: str = ""
    is_charger: bool = False
    is_monitor: bool = False
    is_bed: bool = False
    is_vip: bool = False
    is_sofa: bool = False
    is_mono: bool = False
    is_air_condition: bool = False

    @classmethod
    def from_service(cls, data: dict) -> "TicketSnapshot":  # type: ignore[type-arg]
        """서비스 상세 응답 → TicketSnapshot

        가격은 FullPrice 우선, 없으면 Price.
        """
        raw_price = data.get("FullPrice") or data.get("Price") or 0
        try:
            price = int(float(str(raw_price).replace(",", "")))
        except ValueError:
            price = 0

        return cls(
            service_no=str(data.get("ServiceNo", "")),
            company_name=data.get("CoName", "") or "",
            src_city_name=data.get("SrcCityName", "") or "",
            des_city_name=data.get("DesCityName", "") or "",
            depart_date=data.get("DepartDate", "") or "",
            depart_time=data.get("DepartTime", "") or "",
            price=price,
            duration=(
                data.get("Duration")
                or data.get("TravelDuration")
                or data.get("duration")
                or ""
            ),
            src_city_code=str(data.get("SrcCityCode", "") or ""),
            des_city_code=str(data.get("DesCityCode", "") or ""),
            request_token=data.get("RequestToken", "") or "",
            description=data.get("Description", "") or "",
            logo_url=data.get("LogoUrl", "") or "",
            bus_type=data.get("BusType", "") or "",
            is_charger=_flag(data.get("IsCharger")),
            is_monitor=_flag(data.get("IsMonitor")),
            is_bed=_flag(data.get("IsBed")),
            is_vip=_flag(data.get("IsVIP")),
            is_sofa=_flag(data.get("IsSofa")),
            is_mono=_flag(data.get("IsMono")),
            is_air_condition=_flag(data.get("IsAirConditionType")),
        )

    def summary(self) -> str:
        return (
            f"{self.src_city_name}→{self.des_city_name} "
            f"{self.depart_date} {self.depart_time} "
            f"{self.company_name} #{self.service_no}"
        )


class ReservationSession:
    """체크아웃 시도 1회분의 예약 세션

    선택 좌석은 SeatSelectionStore를 통해 읽기만 한다.
    """

    __slots__ = (
        "ticket_token", "service_token", "hold_token",
        "expires_at", "_selection", "closed_reason", "reference_number",
    )

    def __init__(
        self,
        ticket_token: str,
        service_token: str,
        hold_token: str,
        duration_seconds: float,
        selection: object,
    ) -> None:
        self.ticket_token = ticket_token
        self.service_token = service_token
        self.hold_token = hold_token
        self.expires_at = monotonic() + duration_seconds
        self._selection = selection
        self.closed_reason: Optional[str] = None
        self.reference_number: Optional[str] = None

    @property
    def selected_seats(self) -> tuple:  # type: ignore[type-arg]
        return getattr(self._selection, "selected_seats", ())

    @property
    def is_open(self) -> bool:
        return self.closed_reason is None

    @property
    def remaining_seconds(self) -> float:
        return max(0.0, self.expires_at - monotonic())

    def close(self, reason: str) -> None:
        if self.closed_reason is None:
            self.closed_reason = reason


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    """결제 URL 요청 1회분 (일회용)"""

    reference_number: str
    hold_token: str
    callback_url: str
    payment_method: PaymentMethod = PaymentMethod.GATEWAY
