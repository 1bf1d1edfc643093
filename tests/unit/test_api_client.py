"""ApiClient / PassengerSyncSkill 단위 테스트"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from src.agent.metrics import CheckoutMetrics
from src.models.errors import ApiError
from src.models.passenger import FinalizedPassenger
from src.models.seat import Gender
from src.skills.api_client import ApiClient, extract_field
from src.skills.passenger_sync import PassengerSyncSkill


class _FakeResponse:
    def __init__(self, status: int = 200, data: Any = None, text: str = "") -> None:
        self.status = status
        self._data = data
        self._text = text

    async def json(self, content_type: Any = None) -> Any:
        if isinstance(self._data, Exception):
            raise self._data
        return self._data

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> "_FakeResponse":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


def _session_returning(response: Any) -> MagicMock:
    session = MagicMock()
    if isinstance(response, Exception):
        session.post = MagicMock(side_effect=response)
    else:
        session.post = MagicMock(return_value=response)
    return session


class TestExtractField:
    def test_first_key(self):
        assert extract_field({"refNum": "A"}, ("refNum", "refNumber"), "ref") == "A"

    def test_fallback_key(self):
        assert extract_field({"refNumber": 12}, ("refNum", "refNumber"), "ref") == "12"

    def test_empty_value_skipped(self):
        data = {"refNum": "", "refNumber": "B"}
        assert extract_field(data, ("refNum", "refNumber"), "ref") == "B"

    def test_missing(self):
        assert extract_field({"other": 1}, ("refNum",), "ref") is None

    def test_non_dict(self):
        assert extract_field(["refNum"], ("refNum",), "ref") is None


class TestApiClient:
    @pytest.mark.asyncio
    async def test_returns_json(self):
        metrics = CheckoutMetrics()
        client = ApiClient(metrics=metrics)
        session = _session_returning(_FakeResponse(data={"success": True}))

        with patch.object(client, "_get_session", new_callable=AsyncMock, return_value=session):
            data = await client.post_json("https://api.test/x", {"a": 1})

        assert data == {"success": True}
        session.post.assert_called_once_with(
            "https://api.test/x", json={"a": 1}, headers=None,
        )
        assert metrics.successful_requests == 1

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        metrics = CheckoutMetrics()
        client = ApiClient(metrics=metrics)
        session = _session_returning(_FakeResponse(status=500, text="server down"))

        with patch.object(client, "_get_session", new_callable=AsyncMock, return_value=session):
            with pytest.raises(ApiError) as exc:
                await client.post_json("https://api.test/x", {})

        assert exc.value.status == 500
        assert exc.value.response_data == "server down"
        assert metrics.failed_requests == 1

    @pytest.mark.asyncio
    async def test_timeout_mapped(self):
        client = ApiClient()
        session = _session_returning(asyncio.TimeoutError())

        with patch.object(client, "_get_session", new_callable=AsyncMock, return_value=session):
            with pytest.raises(ApiError):
                await client.post_json("https://api.test/x", {})

    @pytest.mark.asyncio
    async def test_network_error_mapped(self):
        client = ApiClient()
        session = _session_returning(aiohttp.ClientConnectionError("refused"))

        with patch.object(client, "_get_session", new_callable=AsyncMock, return_value=session):
            with pytest.raises(ApiError):
                await client.post_json("https://api.test/x", {})

    @pytest.mark.asyncio
    async def test_bad_json_mapped(self):
        client = ApiClient()
        session = _session_returning(_FakeResponse(data=ValueError("not json")))

        with patch.object(client, "_get_session", new_callable=AsyncMock, return_value=session):
            with pytest.raises(ApiError):
                await client.post_json("https://api.test/x", {})

    @pytest.mark.asyncio
    async def test_close_without_session(self):
        await ApiClient().close()


class TestPassengerSync:
    @pytest.fixture
    def passengers(self) -> tuple[FinalizedPassenger, ...]:
        return (
            FinalizedPassenger(
                seat_id=1, seat_no="1", name="علی", family="رضایی",
                national_id="0012345679", gender=Gender.MALE,
                birth_date="13720704", phone="09121234567",
            ),
            FinalizedPassenger(
                seat_id=2, seat_no="2", name="مریم", family="رضایی",
                national_id="1234567891", gender=Gender.FEMALE,
            ),
        )

    def test_payload(self, passengers):
        items = PassengerSyncSkill.build_payload(passengers)["Passengers"]
        assert items[0]["Gender"] == "2"
        assert items[0]["DateOfBirth"] == "13720704"
        assert items[0]["PhoneNumber"] == "09121234567"
        assert items[1]["Gender"] == "1"
        assert "DateOfBirth" not in items[1]
        assert "PhoneNumber" not in items[1]

    @pytest.mark.asyncio
    async def test_save_attaches_server_ids(self, mock_client, passengers):
        mock_client.post_json.return_value = {
            "passengers": [{"nationalCode": "1234567891", "id": 501}],
        }
        sync = PassengerSyncSkill(mock_client, "https://api.test/passengers")

        saved = await sync.save(passengers, "tok")
        assert saved[0].passenger_id is None
        assert saved[1].passenger_id == 501
        headers = mock_client.post_json.await_args.kwargs["headers"]
        assert headers == {"Authorization": "Bearer tok"}

    @pytest.mark.asyncio
    async def test_malformed_items_skipped(self, mock_client, passengers):
        mock_client.post_json.return_value = {
            "passengers": [
                "0012345679",
                {"nationalCode": "0012345679", "id": "p-17"},
                {"nationalCode": "1234567891", "id": "502"},
            ],
        }
        sync = PassengerSyncSkill(mock_client, "https://api.test/passengers")

        saved = await sync.save(passengers, "tok")
        assert saved[0].passenger_id is None
        assert saved[1].passenger_id == 502

    @pytest.mark.asyncio
    async def test_rejected_save_raises(self, mock_client, passengers):
        mock_client.post_json.return_value = {"success": False, "message": "denied"}
        sync = PassengerSyncSkill(mock_client, "https://api.test/passengers")

        with pytest.raises(ApiError) as exc:
            await sync.save(passengers, "tok")
        assert exc.value.user_message == "denied"
        assert exc.value.response_data == {"success": False, "message": "denied"}

    @pytest.mark.asyncio
    async def test_save_error_propagates(self, mock_client, passengers):
        mock_client.post_json.side_effect = ApiError("HTTP 401", status=401)
        sync = PassengerSyncSkill(mock_client, "https://api.test/passengers")
        with pytest.raises(ApiError):
            await sync.save(passengers, "tok")
