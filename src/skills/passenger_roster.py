"""승객 명단 스킬 (PassengerRoster)

선택 좌석 1개당 승객 레코드 1개를 유지한다.
좌석 상태는 SeatSelectionStore 메시지를 구독해서 따라가기만 하고
직접 변경하지 않는다.

필드 검증은 ValidationSkill이 담당하며, 검증 실패는 예외가 아니라
레코드의 errors에 기록된다.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from src.models.errors import ApiError, PassengerSaveError
from src.models.events import CheckoutEvent, CheckoutMessage, MessageHandler
from src.models.passenger import (
    BuyerProfile,
    ContactOverride,
    FinalizedPassenger,
    GateResult,
    PassengerRecord,
    ResolvedContact,
    SavedRoster,
)
from src.models.seat import SelectedSeat
from src.skills import messages
from src.skills.validation import ValidationSkill
from src.skills.validation_gate import aggregate

logger = logging.getLogger("bilit.skill.passenger_roster")

EDITABLE_FIELDS: frozenset[str] = frozenset({
    "name", "family", "national_id", "phone",
    "birth_year", "birth_month", "birth_day",
})

_BIRTH_FIELDS = ("birth_year", "birth_month", "birth_day")


def _error_key(field: str) -> str:
    """생년월일 3개 필드는 하나의 에러 키를 공유"""
    return "birth_date" if field in _BIRTH_FIELDS else field


class PassengerRoster:
    """좌석별 승객 레코드 관리 + 검증 + 확정"""

    SOURCE = "passenger_roster"

    def __init__(
        self,
        store: object,
        buyer: Optional[BuyerProfile] = None,
        duplicate_policy: str = "warn",
        sync: Optional[object] = None,
        auth: Optional[object] = None,
    ) -> None:
        self._store = store
        self._buyer = buyer or BuyerProfile()
        self._duplicate_policy = duplicate_policy
        self._sync = sync
        self._auth = auth
        self._validator = ValidationSkill()
        self._records: dict[int, PassengerRecord] = {}
        self._contact = ContactOverride()
        self._duplicate_blocked: set[int] = set()
        self._subscribers: list[MessageHandler] = []

        for seat in getattr(store, "selected_seats", ()):
            self._add(seat)
        self._unsubscribe: Optional[Callable[[], None]] = store.subscribe(  # type: ignore[attr-defined]
            self._on_selection_changed
        )

    # ── 조회 ──────────────────────────────────────────────

    @property
    def records(self) -> tuple[PassengerRecord, ...]:
        return tuple(self._records.values())

    @property
    def contact(self) -> ContactOverride:
        return self._contact

    @property
    def buyer(self) -> BuyerProfile:
        return self._buyer

    @buyer.setter
    def buyer(self, profile: BuyerProfile) -> None:
        self._buyer = profile

    def record(self, seat_id: int) -> PassengerRecord:
        try:
            return self._records[seat_id]
        except KeyError:
            raise KeyError(f"선택되지 않은 좌석: {seat_id}") from None

    def __len__(self) -> int:
        return len(self._records)

    # ── 구독 ──────────────────────────────────────────────

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        self._subscribers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return _unsubscribe

    def close(self) -> None:
        """좌석 저장소 구독 해제"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _publish(self) -> None:
        msg = CheckoutMessage(
            event=CheckoutEvent.ROSTER_CHANGED,
            source=self.SOURCE,
            target="*",
            payload=len(self._records),
        )
        for handler in list(self._subscribers):
            try:
                handler(msg)
            except Exception:
                logger.exception("명단 구독자 처리 실패")

    # ── 좌석 선택 추종 ─────────────────────────────────────

    def _on_selection_changed(self, msg: CheckoutMessage) -> None:
        if msg.event == CheckoutEvent.SEAT_SELECTED:
            self._add(msg.payload)
        elif msg.event == CheckoutEvent.SEAT_GENDER_CHANGED:
            rec = self._records.get(msg.payload.seat_id)
            if rec is None:
                self._add(msg.payload)
            else:
                rec.gender = msg.payload.gender
        elif msg.event == CheckoutEvent.SEAT_RELEASED:
            removed = self._records.pop(msg.payload.seat_id, None)
            self._duplicate_blocked.discard(msg.payload.seat_id)
            if removed is not None:
                logger.debug("승객 레코드 삭제: 좌석 %s", removed.seat_no)
            self._check_duplicates()
        elif msg.event == CheckoutEvent.SELECTION_CLEARED:
            self._records.clear()
            self._duplicate_blocked.clear()
        else:
            return
        self._publish()

    def _add(self, seat: SelectedSeat) -> None:
        self._records[seat.seat_id] = PassengerRecord(
            seat_id=seat.seat_id,
            seat_no=seat.seat_no,
            gender=seat.gender,
        )
        logger.debug("승객 레코드 생성: 좌석 %s", seat.seat_no)

    # ── 입력/검증 ─────────────────────────────────────────

    def set_field(self, seat_id: int, field: str, value: str) -> bool:
        """필드 1개 갱신 후 해당 필드 유효 여부 반환

        Raises:
            KeyError: 선택되지 않은 좌석
            ValueError: 편집할 수 없는 필드
        """
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"알 수 없는 필드: {field}")
        rec = self.record(seat_id)
        setattr(rec, field, value)

        self._validate_field(rec, field)
        if field == "national_id":
            self._check_duplicates()
        self._publish()
        return _error_key(field) not in rec.errors

    def set_contact(self, enabled: bool, phone: str = "", email: str = "") -> bool:
        """구매자 추가 연락처 설정 후 유효 여부 반환"""
        self._contact.enabled = enabled
        self._contact.phone = phone
        self._contact.email = email
        self._validate_contact()
        self._publish()
        return self._contact.is_valid

    def validate_all(self) -> GateResult:
        """전체 레코드 재검증 후 게이트 결과 반환"""
        for rec in self._records.values():
            for field in ("name", "family", "national_id", "phone", "birth_year"):
                self._validate_field(rec, field)
        self._check_duplicates()
        self._validate_contact()
        self._publish()
        return aggregate(self._records.values(), self._contact)

    def duplicate_national_ids(self) -> dict[str, list[str]]:
        """신분번호 → 좌석 번호 목록 (2개 이상인 것만)"""
        seen: dict[str, list[str]] = {}
        for rec in self._records.values():
            code = rec.national_id.strip()
            if code:
                seen.setdefault(code, []).append(rec.seat_no)
        return {k: v for k, v in seen.items() if len(v) > 1}

    def _validate_field(self, rec: PassengerRecord, field: str) -> None:
        key = _error_key(field)
        if field == "national_id":
            self._duplicate_blocked.discard(rec.seat_id)
        try:
            if field in ("name", "family"):
                self._validator.validate_name(getattr(rec, field), field)
            elif field == "national_id":
                self._validator.validate_national_id(rec.national_id)
            elif field == "phone":
                self._validator.validate_phone(rec.phone)
            else:
                rec.birth_date = ""
                rec.birth_date = self._validator.validate_birth_date(
                    rec.birth_year, rec.birth_month, rec.birth_day,
                )
        except ValueError as e:
            rec.errors[key] = str(e)
        else:
            rec.errors.pop(key, None)

    def _check_duplicates(self) -> None:
        """뒤에 입력된 레코드에 중복 표시 (warn: 경고, block: 에러)"""
        for rec in self._records.values():
            rec.warnings.pop("national_id", None)
            if rec.seat_id in self._duplicate_blocked:
                rec.errors.pop("national_id", None)
        self._duplicate_blocked.clear()

        first_seat: dict[str, str] = {}
        for rec in self._records.values():
            code = rec.national_id.strip()
            if not code or "national_id" in rec.errors:
                continue
            if code not in first_seat:
                first_seat[code] = rec.seat_no
                continue
            msg = messages.NATIONAL_ID_DUPLICATE.format(seat_no=first_seat[code])
            if self._duplicate_policy == "block":
                rec.errors["national_id"] = msg
                self._duplicate_blocked.add(rec.seat_id)
            else:
                rec.warnings["national_id"] = msg
            logger.info("중복 신분번호: 좌석 %s", rec.seat_no)

    def _validate_contact(self) -> None:
        c = self._contact
        c.errors.clear()
        if not c.enabled:
            return
        try:
            self._validator.validate_phone(c.phone, required=True)
        except ValueError as e:
            c.errors["phone"] = str(e)
        if c.email.strip():
            try:
                self._validator.validate_email(c.email)
            except ValueError as e:
                c.errors["email"] = str(e)

    # ── 확정 ──────────────────────────────────────────────

    def resolve_contact(self) -> ResolvedContact:
        """추가 연락처(활성 시) 또는 구매자 프로필 연락처"""
        if self._contact.enabled:
            return ResolvedContact(
                phone=messages.to_ascii_digits(self._contact.phone.strip()),
                email=self._contact.email.strip() or self._buyer.email,
            )
        return ResolvedContact(
            phone=self._buyer.phone_number,
            email=self._buyer.email,
        )

    def finalize(self) -> tuple[FinalizedPassenger, ...]:
        """현재 레코드 → 주문용 확정 승객 (trim/숫자 정규화 적용)"""
        return tuple(
            FinalizedPassenger(
                seat_id=rec.seat_id,
                seat_no=rec.seat_no,
                name=rec.name.strip(),
                family=rec.family.strip(),
                national_id=rec.national_id.strip(),
                gender=rec.gender,
                birth_date=rec.birth_date,
                phone=messages.to_ascii_digits(rec.phone.strip()),
            )
            for rec in self._records.values()
        )

    async def commit(self) -> SavedRoster:
        """명단 확정 + (인증 시) 서버 저장

        유효한 승객이 한 명 이상이면 저장한다. 미완성 레코드도 그대로
        싣고, 최종 완결성은 주문 생성 시 서버가 판단한다.

        Raises:
            PassengerSaveError: 명단 없음, 중복 차단, 유효 승객 없음, 저장 실패
        """
        result = self.validate_all()
        if not self._records:
            raise PassengerSaveError(
                "승객 명단이 비어 있음", messages.NO_PASSENGERS[1],
            )
        if self._duplicate_blocked:
            raise PassengerSaveError(
                "중복 신분번호로 저장 차단", messages.DUPLICATE_NATIONAL_IDS[1],
            )
        if not result.is_any_passenger_valid:
            raise PassengerSaveError(
                "유효한 승객 레코드 없음", messages.INCOMPLETE_PASSENGERS[1],
            )
        if not result.all_passengers_valid:
            logger.info("미완성 레코드 포함 저장 (%d명)", len(self._records))

        passengers = self.finalize()
        contact = self.resolve_contact()

        access_token = (
            self._auth.get_access_token()  # type: ignore[attr-defined]
            if self._auth is not None else None
        )
        if self._sync is not None and access_token:
            try:
                passengers = await self._sync.save(passengers, access_token)  # type: ignore[attr-defined]
            except ApiError as e:
                logger.error("승객 저장 실패: %s", e)
                raise PassengerSaveError(
                    f"승객 저장 실패: {e}", messages.SAVE_FAILED[1],
                ) from e

        logger.info("승객 명단 확정: %d명", len(passengers))
        return SavedRoster(passengers=passengers, contact=contact)
