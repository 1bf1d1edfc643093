"""pytest 공통 픽스처

모든 테스트에서 공유하는 샘플 데이터와 Mock 객체를 제공한다.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.agents.orchestrator import CheckoutOrchestrator
from src.models.config import CheckoutConfig
from src.models.order import ReservationSession, TicketSnapshot
from src.models.passenger import BuyerProfile
from src.models.seat import Seat, SeatState
from src.skills.notifier import NotifierSkill
from src.skills.passenger_roster import PassengerRoster
from src.skills.seat_selection import SeatSelectionStore
from src.skills.snapshot import StaticSnapshotProvider
from src.utils.auth_session import AuthSession
from src.utils.browser import BrowserNavigator
from src.utils.route_history import RouteHistory

# 체크섬이 맞는 신분번호
VALID_NATIONAL_IDS = ("0012345679", "1234567891", "0023456787")


def fill_passenger(
    target: PassengerRoster | CheckoutOrchestrator,
    seat_id: int,
    national_id: str = VALID_NATIONAL_IDS[0],
    name: str = "علی",
    family: str = "رضایی",
) -> None:
    """필수 필드 3개 입력"""
    setter = (
        target.set_passenger_field
        if isinstance(target, CheckoutOrchestrator) else target.set_field
    )
    setter(seat_id, "name", name)
    setter(seat_id, "family", family)
    setter(seat_id, "national_id", national_id)


@pytest.fixture
def seat_map() -> list[Seat]:
    """좌석 1~10 빈 좌석, 11 여성 예약, 12 차단"""
    seats = [Seat(seat_id=i, seat_no=str(i)) for i in range(1, 11)]
    seats.append(Seat(seat_id=11, seat_no="11", state=SeatState.RESERVED_FEMALE))
    seats.append(Seat(seat_id=12, seat_no="12", state=SeatState.BLOCKED))
    return seats


@pytest.fixture
def store(seat_map: list[Seat]) -> SeatSelectionStore:
    s = SeatSelectionStore(max_selectable=7)
    s.load_seats(seat_map)
    return s


@pytest.fixture
def buyer() -> BuyerProfile:
    return BuyerProfile(
        user_id=42,
        first_name="سارا",
        last_name="محمدی",
        phone_number="09121234567",
        email="buyer@example.com",
    )


@pytest.fixture
def roster(store: SeatSelectionStore, buyer: BuyerProfile) -> PassengerRoster:
    return PassengerRoster(store, buyer=buyer)


@pytest.fixture
def auth(buyer: BuyerProfile) -> AuthSession:
    return AuthSession(
        access_token="access-token-0123456789",
        refresh_token="refresh-token-0123456789",
        profile=buyer,
    )


@pytest.fixture
def service_data() -> dict:  # type: ignore[type-arg]
    """서비스 상세 API 응답 mock"""
    return {
        "ServiceNo": "5501",
        "CoName": "همسفر",
        "SrcCityName": "تهران",
        "DesCityName": "مشهد",
        "SrcCityCode": "11320000",
        "DesCityCode": "21310000",
        "DepartDate": "29/12/1403",
        "DepartTime": "22:30",
        "Duration": "12:45",
        "FullPrice": "8500000",
        "Price": "8000000",
        "RequestToken": "co-token-abc",
        "Description": "VIP ۲۵ نفره",
        "LogoUrl": "https://cdn.example.com/logo.png",
        "IsCharger": True,
        "IsMonitor": 0,
        "IsBed": False,
        "IsVIP": "true",
        "IsSofa": False,
        "IsMono": True,
        "IsAirConditionType": 1,
    }


@pytest.fixture
def snapshot(service_data: dict) -> TicketSnapshot:  # type: ignore[type-arg]
    return TicketSnapshot.from_service(service_data)


@pytest.fixture
def session(store: SeatSelectionStore) -> ReservationSession:
    return ReservationSession(
        ticket_token="5501",
        service_token="co-token-abc",
        hold_token="redis-key-xyz",
        duration_seconds=900,
        selection=store,
    )


@pytest.fixture
def fast_config(tmp_path: Path) -> CheckoutConfig:
    """테스트용 설정 (짧은 리다이렉트 대기, 알림 채널 없음, 승객 저장 호출 없음)"""
    return CheckoutConfig(
        reservation_seconds=60.0,
        redirect_delay=0.01,
        passengers_path="",
        notification_methods=[],
        route_history_path=str(tmp_path / "route.json"),
    )


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.post_json = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def make_orchestrator(
    fast_config: CheckoutConfig,
    auth: AuthSession,
    snapshot: TicketSnapshot,
    seat_map: list[Seat],
    mock_client: MagicMock,
    tmp_path: Path,
) -> Callable[..., CheckoutOrchestrator]:
    """오케스트레이터 팩토리 (네트워크/브라우저 없음)"""

    def _make(**overrides: object) -> CheckoutOrchestrator:
        kwargs: dict[str, object] = {
            "auth": auth,
            "snapshot_provider": StaticSnapshotProvider(snapshot),
            "client": mock_client,
            "notifier": NotifierSkill(methods=[]),
            "navigator": BrowserNavigator(opener=lambda url: True),
            "route_history": RouteHistory(tmp_path / "route.json"),
        }
        kwargs.update(overrides)
        config = kwargs.pop("config", fast_config)
        orch = CheckoutOrchestrator(config, **kwargs)  # type: ignore[arg-type]
        orch.store.load_seats(seat_map)
        return orch

    return _make


@pytest.fixture
def order_response() -> dict:  # type: ignore[type-arg]
    return {"success": True, "refNum": "REF-1001", "message": "ok"}


@pytest.fixture
def payment_response() -> dict:  # type: ignore[type-arg]
    return {"success": True, "paymentUrl": "https://sep.example.com/pay/abc"}
