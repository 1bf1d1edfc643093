"""승객 저장 스킬

확정된 승객 명단을 일괄 저장 엔드포인트에 한 번에 보낸다.
응답에 서버 측 승객 ID가 있으면 신분번호로 매칭해 붙인다.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from src.models.errors import ApiError
from src.models.passenger import FinalizedPassenger
from src.skills.api_client import ApiClient

logger = logging.getLogger("bilit.skill.passenger_sync")


class PassengerSyncSkill:
    """승객 일괄 저장"""

    __slots__ = ("_client", "_url")

    def __init__(self, client: ApiClient, url: str) -> None:
        self._client = client
        self._url = url

    @staticmethod
    def build_payload(passengers: tuple[FinalizedPassenger, ...]) -> dict[str, Any]:
        items: list[dict[str, Any]] = []
        for p in passengers:
            item: dict[str, Any] = {
                "FName": p.name,
                "LName": p.family,
                "NationalCode": p.national_id,
                "Gender": p.gender.code,
                "SeatNo": p.seat_no,
                "SeatID": p.seat_id,
            }
            # 선택 필드는 값이 있을 때만
            if p.birth_date:
                item["DateOfBirth"] = p.birth_date
            if p.phone:
                item["PhoneNumber"] = p.phone
            items.append(item)
        return {"Passengers": items}

    async def save(
        self,
        passengers: tuple[FinalizedPassenger, ...],
        access_token: str,
    ) -> tuple[FinalizedPassenger, ...]:
        """일괄 저장 후 서버 ID가 반영된 명단 반환

        Raises:
            ApiError: HTTP 실패 또는 success=false 응답
        """
        data = await self._client.post_json(
            self._url,
            self.build_payload(passengers),
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if isinstance(data, dict) and data.get("success") is False:
            raise ApiError(
                "승객 저장 거부: success=false",
                str(data.get("message") or ""),
                response_data=data,
            )

        server_ids = self._server_ids(data)

        logger.info(
            "승객 %d명 저장 완료 (서버 ID %d개)", len(passengers), len(server_ids),
        )
        return tuple(
            replace(p, passenger_id=server_ids[p.national_id])
            if p.national_id in server_ids else p
            for p in passengers
        )

    @staticmethod
    def _server_ids(data: Any) -> dict[str, int]:
        """응답의 신분번호 → 서버 승객 ID. 형식이 맞지 않는 항목은 건너뛴다."""
        returned = data.get("passengers") if isinstance(data, dict) else None
        if not isinstance(returned, list):
            return {}

        server_ids: dict[str, int] = {}
        for item in returned:
            if not isinstance(item, dict):
                logger.warning("승객 응답 항목 형식 오류: %r", item)
                continue
            code = str(item.get("nationalCode") or "")
            raw_id = item.get("id")
            if not code or not str(raw_id).isdecimal():
                logger.warning("승객 응답 항목 무시: nationalCode=%s id=%r", code, raw_id)
                continue
            server_ids[code] = int(str(raw_id))
        return server_ids
