"""티켓 스냅샷 / 도착 일시 계산 테스트"""

import json

import pytest

from src.skills.snapshot import (
    StaticSnapshotProvider,
    compute_arrival,
    convert_date_format,
    is_leap_year,
    month_length,
)


class TestCalendar:
    @pytest.mark.parametrize("year", [1399, 1403, 1408])
    def test_leap_years(self, year):
        assert is_leap_year(year)

    @pytest.mark.parametrize("year", [1400, 1401, 1402, 1404])
    def test_common_years(self, year):
        assert not is_leap_year(year)

    def test_month_lengths(self):
        assert month_length(1402, 1) == 31
        assert month_length(1402, 6) == 31
        assert month_length(1402, 7) == 30
        assert month_length(1402, 12) == 29
        assert month_length(1403, 12) == 30


class TestConvertDateFormat:
    def test_reorders(self):
        assert convert_date_format("5/1/1403") == "1403/01/05"

    def test_persian_digits(self):
        assert convert_date_format("۰۵/۰۱/۱۴۰۳") == "1403/01/05"

    def test_unparseable_returned_as_is(self):
        assert convert_date_format("1403-01-05") == "1403-01-05"

    def test_empty(self):
        assert convert_date_format("") == ""


class TestComputeArrival:
    def test_same_day(self):
        assert compute_arrival("10/02/1403", "08:00", "6:30") == ("1403/02/10", "14:30")

    def test_next_day(self):
        assert compute_arrival("10/02/1403", "22:30", "3:45") == ("1403/02/11", "02:15")

    def test_month_rollover(self):
        assert compute_arrival("31/06/1403", "23:00", "2:00") == ("1403/07/01", "01:00")

    def test_leap_year_end(self):
        assert compute_arrival("29/12/1403", "22:30", "12:45") == ("1403/12/30", "11:15")

    def test_common_year_end(self):
        assert compute_arrival("29/12/1402", "22:30", "12:45") == ("1403/01/01", "11:15")

    def test_missing_duration(self):
        assert compute_arrival("10/02/1403", "08:00", "") == ("", "")

    def test_bad_time(self):
        assert compute_arrival("10/02/1403", "soon", "6:30") == ("", "")

    def test_bad_date_keeps_time(self):
        assert compute_arrival("tomorrow", "08:00", "1:00") == ("", "09:00")


class TestStaticSnapshotProvider:
    def test_empty_provider(self):
        assert StaticSnapshotProvider().get_snapshot() is None

    def test_set_snapshot(self, snapshot):
        provider = StaticSnapshotProvider()
        provider.set_snapshot(snapshot)
        assert provider.get_snapshot() is snapshot

    def test_from_file(self, tmp_path, service_data):
        path = tmp_path / "service.json"
        path.write_text(json.dumps(service_data, ensure_ascii=False), encoding="utf-8")

        snap = StaticSnapshotProvider.from_file(path).get_snapshot()
        assert snap is not None
        assert snap.service_no == "5501"
        assert snap.request_token == "co-token-abc"
