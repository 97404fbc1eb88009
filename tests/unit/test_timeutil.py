from datetime import UTC, datetime, timedelta

import pytest

from ett_sdk.utils.timeutil import (
    expiry_from_now,
    format_rfc3339,
    is_current_date,
    parse_offset,
    parse_rfc3339,
    ten_minutes_from_now,
    token_refresh_required,
    years_ago,
)

NOW = datetime(2024, 5, 10, 12, 0, 0, tzinfo=UTC)
MARGIN = timedelta(hours=1)


def test_expiry_exactly_margin_away_does_not_refresh():
    assert token_refresh_required(format_rfc3339(NOW + MARGIN), MARGIN, now=NOW) is False


def test_expiry_one_second_inside_margin_refreshes():
    expire_at = format_rfc3339(NOW + MARGIN - timedelta(seconds=1))
    assert token_refresh_required(expire_at, MARGIN, now=NOW) is True


def test_expired_token_refreshes():
    assert token_refresh_required("2024-05-10T10:00:00Z", timedelta(minutes=10), now=NOW) is True


def test_refresh_honours_offsets():
    # 15:00+03:00 is 12:00Z, exactly the margin away
    assert token_refresh_required("2024-05-10T16:00:00+03:00", MARGIN, now=NOW) is False


@pytest.mark.parametrize("value", ["", "not-a-date", "2024-05-10 12:00:00"])
def test_unparseable_expiry_raises(value):
    with pytest.raises(ValueError):
        token_refresh_required(value, MARGIN, now=NOW)


def test_parse_rfc3339_accepts_zulu():
    assert parse_rfc3339("2024-05-10T12:00:00Z") == NOW


def test_expiry_from_now():
    assert expiry_from_now(86400, now=NOW) == "2024-05-11T12:00:00Z"


@pytest.mark.parametrize(
    "offset, expected",
    [
        ("+05:00", timedelta(hours=5)),
        ("-03:30", -timedelta(hours=3, minutes=30)),
        ("00:00", timedelta(0)),
    ],
)
def test_parse_offset(offset, expected):
    assert parse_offset(offset) == expected


def test_is_current_date_uses_local_offset():
    late_evening = datetime(2024, 5, 10, 22, 0, 0, tzinfo=UTC)

    assert is_current_date("2024-05-11", "+05:00", now=late_evening) is True
    assert is_current_date("2024-05-10", "+05:00", now=late_evening) is False
    assert is_current_date("2024-05-10", "-03:00", now=late_evening) is True


@pytest.mark.parametrize("date, offset", [("10.05.2024", "+05:00"), ("2024-05-10", ""), ("2024-05-10", "bad")])
def test_is_current_date_is_false_on_bad_input(date, offset):
    assert is_current_date(date, offset, now=NOW) is False


def test_ten_minutes_from_now():
    assert ten_minutes_from_now("+05:00", now=NOW) == "2024-05-10 17:10:00"


def test_years_ago_handles_leap_day():
    assert years_ago(20, now=NOW) == datetime(2004, 5, 10, 12, 0, 0, tzinfo=UTC)
    leap_day = datetime(2024, 2, 29, tzinfo=UTC)
    assert years_ago(1, now=leap_day) == datetime(2023, 2, 28, tzinfo=UTC)
