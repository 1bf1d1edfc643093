"""PassengerRoster 단위 테스트"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.errors import ApiError, PassengerSaveError
from src.models.events import CheckoutEvent, CheckoutMessage
from src.models.seat import Gender
from src.skills import messages
from src.skills.passenger_roster import PassengerRoster
from tests.conftest import VALID_NATIONAL_IDS, fill_passenger


class TestRecordLifecycle:
    def test_record_created_on_select(self, store, roster):
        store.select_seat(3)
        rec = roster.record(3)
        assert rec.seat_no == "3"
        assert rec.gender is Gender.MALE

    def test_gender_follows_seat(self, store, roster):
        store.select_seat(3)
        store.select_seat(3)
        assert roster.record(3).gender is Gender.FEMALE

    def test_input_kept_on_gender_change(self, store, roster):
        store.select_seat(3)
        roster.set_field(3, "name", "علی")
        store.select_seat(3)
        assert roster.record(3).name == "علی"

    def test_record_dropped_on_release(self, store, roster):
        store.select_seat(3)
        store.remove_seat(3)
        assert len(roster) == 0
        with pytest.raises(KeyError):
            roster.record(3)

    def test_records_cleared(self, store, roster):
        store.select_seat(1)
        store.select_seat(2)
        store.clear()
        assert roster.records == ()

    def test_existing_selection_adopted(self, store, buyer):
        store.select_seat(5)
        late = PassengerRoster(store, buyer=buyer)
        assert [r.seat_id for r in late.records] == [5]

    def test_one_record_per_selected_seat(self, store, roster):
        for seat_id in (1, 2, 3):
            store.select_seat(seat_id)
        store.select_seat(2)
        assert sorted(r.seat_id for r in roster.records) == [1, 2, 3]

    def test_change_published(self, store, roster):
        received: list[CheckoutMessage] = []
        roster.subscribe(received.append)
        store.select_seat(1)
        roster.set_field(1, "name", "علی")
        assert [m.event for m in received] == [CheckoutEvent.ROSTER_CHANGED] * 2


class TestSetField:
    def test_valid_field(self, store, roster):
        store.select_seat(1)
        assert roster.set_field(1, "national_id", VALID_NATIONAL_IDS[0]) is True
        assert "national_id" not in roster.record(1).errors

    def test_invalid_field_records_error(self, store, roster):
        store.select_seat(1)
        assert roster.set_field(1, "national_id", "1111111111") is False
        assert roster.record(1).errors["national_id"] == messages.NATIONAL_ID_INVALID

    def test_error_cleared_after_fix(self, store, roster):
        store.select_seat(1)
        roster.set_field(1, "name", "Ali")
        roster.set_field(1, "name", "علی")
        assert roster.record(1).errors == {}

    def test_birth_parts_share_error_key(self, store, roster):
        store.select_seat(1)
        assert roster.set_field(1, "birth_year", "1372") is False
        assert "birth_date" in roster.record(1).errors
        roster.set_field(1, "birth_month", "7")
        assert roster.set_field(1, "birth_day", "4") is True
        assert roster.record(1).birth_date == "13720704"

    @pytest.mark.parametrize(
        "year,month,day",
        [("۱۳۷۲", "۷", "۴"), ("1372", " 7", "4 "), ("١٣٧٢", "07", "٤")],
    )
    def test_birth_date_normalized(self, store, roster, year, month, day):
        store.select_seat(1)
        fill_passenger(roster, 1)
        roster.set_field(1, "birth_year", year)
        roster.set_field(1, "birth_month", month)
        assert roster.set_field(1, "birth_day", day) is True

        assert roster.record(1).birth_date == "13720704"
        assert roster.finalize()[0].birth_date == "13720704"

    def test_birth_date_cleared_when_broken(self, store, roster):
        store.select_seat(1)
        roster.set_field(1, "birth_year", "1372")
        roster.set_field(1, "birth_month", "7")
        roster.set_field(1, "birth_day", "4")
        assert roster.set_field(1, "birth_month", "13") is False
        assert roster.record(1).birth_date == ""

    def test_unknown_field(self, store, roster):
        store.select_seat(1)
        with pytest.raises(ValueError):
            roster.set_field(1, "seat_id", "2")

    def test_unselected_seat(self, roster):
        with pytest.raises(KeyError):
            roster.set_field(1, "name", "علی")

    def test_record_validity(self, store, roster):
        store.select_seat(1)
        fill_passenger(roster, 1)
        assert roster.record(1).is_valid


class TestDuplicates:
    def test_warn_policy(self, store, roster):
        store.select_seat(1)
        store.select_seat(2)
        fill_passenger(roster, 1)
        fill_passenger(roster, 2)

        rec = roster.record(2)
        assert rec.is_valid
        assert rec.warnings["national_id"] == messages.NATIONAL_ID_DUPLICATE.format(seat_no="1")
        assert roster.duplicate_national_ids() == {VALID_NATIONAL_IDS[0]: ["1", "2"]}

    def test_block_policy(self, store, buyer):
        roster = PassengerRoster(store, buyer=buyer, duplicate_policy="block")
        store.select_seat(1)
        store.select_seat(2)
        fill_passenger(roster, 1)
        fill_passenger(roster, 2)

        assert roster.record(1).is_valid
        assert not roster.record(2).is_valid

    def test_block_lifted_when_first_released(self, store, buyer):
        roster = PassengerRoster(store, buyer=buyer, duplicate_policy="block")
        store.select_seat(1)
        store.select_seat(2)
        fill_passenger(roster, 1)
        fill_passenger(roster, 2)

        store.remove_seat(1)
        assert roster.record(2).is_valid


class TestContact:
    def test_disabled_uses_buyer(self, roster):
        contact = roster.resolve_contact()
        assert contact.phone == "09121234567"
        assert contact.email == "buyer@example.com"

    def test_enabled_override(self, roster):
        assert roster.set_contact(True, "۰۹۳۵۱۱۱۲۲۳۳", "other@example.com") is True
        contact = roster.resolve_contact()
        assert contact.phone == "09351112233"
        assert contact.email == "other@example.com"

    def test_enabled_requires_phone(self, roster):
        assert roster.set_contact(True, "", "") is False
        assert "phone" in roster.contact.errors

    def test_bad_email(self, roster):
        assert roster.set_contact(True, "09351112233", "bad") is False

    def test_disable_clears_errors(self, roster):
        roster.set_contact(True, "", "")
        assert roster.set_contact(False) is True


class TestValidateAll:
    def test_any_and_all(self, store, roster):
        store.select_seat(1)
        store.select_seat(2)
        fill_passenger(roster, 1)

        result = roster.validate_all()
        assert result.is_any_passenger_valid
        assert not result.all_passengers_valid

    def test_empty_roster(self, roster):
        result = roster.validate_all()
        assert not result.is_any_passenger_valid
        assert not result.all_passengers_valid


class TestCommit:
    @pytest.mark.asyncio
    async def test_commit_finalizes(self, store, roster):
        store.select_seat(1)
        store.select_seat(2)
        store.select_seat(2)
        fill_passenger(roster, 1, VALID_NATIONAL_IDS[0], name="  علی ")
        fill_passenger(roster, 2, VALID_NATIONAL_IDS[1], name="مریم")

        saved = await roster.commit()
        assert [p.seat_id for p in saved.passengers] == [1, 2]
        assert saved.passengers[0].name == "علی"
        assert saved.passengers[1].gender is Gender.FEMALE
        assert saved.contact.phone == "09121234567"

    @pytest.mark.asyncio
    async def test_commit_empty(self, roster):
        with pytest.raises(PassengerSaveError) as exc:
            await roster.commit()
        assert exc.value.user_message == messages.NO_PASSENGERS[1]

    @pytest.mark.asyncio
    async def test_commit_partial_roster(self, store, roster):
        """유효 승객 1명 + 빈 레코드 1개 → 둘 다 저장 (완결성은 서버 판단)"""
        store.select_seat(1)
        store.select_seat(2)
        fill_passenger(roster, 1)

        saved = await roster.commit()
        assert [p.seat_id for p in saved.passengers] == [1, 2]
        assert saved.passengers[1].national_id == ""

    @pytest.mark.asyncio
    async def test_commit_without_valid_passenger(self, store, roster):
        store.select_seat(1)
        roster.set_field(1, "name", "علی")
        with pytest.raises(PassengerSaveError) as exc:
            await roster.commit()
        assert exc.value.user_message == messages.INCOMPLETE_PASSENGERS[1]

    @pytest.mark.asyncio
    async def test_commit_blocked_duplicates(self, store, buyer):
        roster = PassengerRoster(store, buyer=buyer, duplicate_policy="block")
        store.select_seat(1)
        store.select_seat(2)
        fill_passenger(roster, 1)
        fill_passenger(roster, 2)
        with pytest.raises(PassengerSaveError) as exc:
            await roster.commit()
        assert exc.value.user_message == messages.DUPLICATE_NATIONAL_IDS[1]

    @pytest.mark.asyncio
    async def test_commit_syncs_when_authenticated(self, store, buyer, auth):
        sync = MagicMock()
        sync.save = AsyncMock(side_effect=lambda passengers, token: passengers)
        roster = PassengerRoster(store, buyer=buyer, sync=sync, auth=auth)
        store.select_seat(1)
        fill_passenger(roster, 1)

        await roster.commit()
        sync.save.assert_awaited_once()
        assert sync.save.await_args.args[1] == "access-token-0123456789"

    @pytest.mark.asyncio
    async def test_commit_skips_sync_without_token(self, store, buyer):
        sync = MagicMock()
        sync.save = AsyncMock()
        roster = PassengerRoster(store, buyer=buyer, sync=sync, auth=None)
        store.select_seat(1)
        fill_passenger(roster, 1)

        await roster.commit()
        sync.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sync_failure_raises_save_error(self, store, buyer, auth):
        sync = MagicMock()
        sync.save = AsyncMock(side_effect=ApiError("HTTP 500", status=500))
        roster = PassengerRoster(store, buyer=buyer, sync=sync, auth=auth)
        store.select_seat(1)
        fill_passenger(roster, 1)

        with pytest.raises(PassengerSaveError) as exc:
            await roster.commit()
        assert exc.value.user_message == messages.SAVE_FAILED[1]
