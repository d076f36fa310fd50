from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from core.business_date import (
    business_date,
    dates_between,
    months_in_year,
    resolve_period,
    short_label,
    weeks_in_month,
)

IST = ZoneInfo("Asia/Kolkata")


def _bd(now):
    return business_date(now, tz_name="Asia/Kolkata", day_start="11:30")


def test_business_day_rolls_over_at_1130_ist():
    assert _bd(datetime(2025, 3, 5, 11, 29, tzinfo=IST)) == date(2025, 3, 4)
    assert _bd(datetime(2025, 3, 5, 11, 30, tzinfo=IST)) == date(2025, 3, 5)
    assert _bd(datetime(2025, 3, 6, 1, 0, tzinfo=IST)) == date(2025, 3, 5)


def test_naive_datetime_is_utc():
    # 05:59 UTC is 11:29 IST
    assert _bd(datetime(2025, 3, 5, 5, 59)) == date(2025, 3, 4)
    assert _bd(datetime(2025, 3, 5, 6, 0)) == date(2025, 3, 5)


def test_weeks_in_month():
    feb = weeks_in_month(2025, 2)
    assert len(feb) == 4
    assert feb[-1]["label"] == "Week 4 (22-28)"
    mar = weeks_in_month(2025, 3)
    assert len(mar) == 5
    assert (mar[-1]["start_date"], mar[-1]["end_date"]) == (date(2025, 3, 29), date(2025, 3, 31))


def test_months_in_year():
    months = months_in_year(2024)
    assert len(months) == 12
    assert months[1]["end_date"] == date(2024, 2, 29)
    assert months[0]["label"] == "January"


def test_resolve_period():
    today = date(2025, 3, 15)
    assert resolve_period("daily", today=today) == (today, today)
    assert resolve_period("weekly", year=2025, month=3, week=2, today=today) == (date(2025, 3, 8), date(2025, 3, 14))
    assert resolve_period("monthly", year=2025, month=2, today=today) == (date(2025, 2, 1), date(2025, 2, 28))
    assert resolve_period("yearly", year=2024, today=today) == (date(2024, 1, 1), date(2024, 12, 31))


def test_reversed_ranges_are_rejected():
    with pytest.raises(ValueError):
        resolve_period("custom", start=date(2025, 3, 5), end=date(2025, 3, 1))
    with pytest.raises(ValueError):
        dates_between(date(2025, 3, 5), date(2025, 3, 1))
    with pytest.raises(ValueError):
        resolve_period("hourly")


def test_dates_between_is_inclusive():
    assert dates_between(date(2025, 2, 27), date(2025, 3, 1)) == [date(2025, 2, 27), date(2025, 2, 28), date(2025, 3, 1)]


def test_short_label():
    assert short_label(date(2025, 3, 5)) == "05 Mar 25"


def test_week_outside_month_is_rejected():
    today = date(2025, 3, 15)
    with pytest.raises(ValueError, match="valid weeks are 1-4"):
        resolve_period("weekly", year=2025, month=2, week=5, today=today)
    assert resolve_period("weekly", year=2025, month=3, week=5, today=today) == (date(2025, 3, 29), date(2025, 3, 31))
