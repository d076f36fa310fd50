"""
Business day helpers.

A shop's business day starts at 11:30 IST, not at midnight: sales rung up
at 01:00 belong to the previous calendar day's sheet.
"""

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from core.config import settings

REPORT_TYPES = ("daily", "weekly", "monthly", "yearly", "custom")


def _parse_hhmm(value: str) -> time:
    hh, mm = (value or "11:30").split(":", 1)
    return time(int(hh), int(mm))


def business_date(
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None,
    day_start: Optional[str] = None,
) -> date:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(ZoneInfo(tz_name or settings.business_timezone))
    start = _parse_hhmm(day_start or settings.business_day_start)
    if local.time().replace(tzinfo=None) < start:
        return local.date() - timedelta(days=1)
    return local.date()


def short_label(d: date) -> str:
    # e.g. "05 Mar 25"
    return d.strftime("%d %b %y")


def dates_between(start: date, end: date) -> List[date]:
    if end < start:
        raise ValueError("end date must not be before start date")
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def weeks_in_month(year: int, month: int) -> List[dict]:
    """Seven-day chunks from the 1st; the last one is cut at month end."""
    first, last = month_bounds(year, month)
    weeks = []
    cur = first
    n = 1
    while cur <= last:
        end = min(cur + timedelta(days=6), last)
        weeks.append({
            "week_number": n,
            "start_date": cur,
            "end_date": end,
            "label": f"Week {n} ({cur.day}-{end.day})",
        })
        cur = cur + timedelta(days=7)
        n += 1
    return weeks


def months_in_year(year: int) -> List[dict]:
    out = []
    for m in range(1, 13):
        start, end = month_bounds(year, m)
        out.append({"month_number": m, "start_date": start, "end_date": end, "label": start.strftime("%B")})
    return out


def resolve_period(
    report_type: str,
    *,
    day: Optional[date] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    week: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    today = today or business_date()
    year = year or today.year
    month = month or today.month

    if report_type == "daily":
        d = day or today
        return d, d
    if report_type == "weekly":
        weeks = weeks_in_month(year, month)
        for w in weeks:
            if w["week_number"] == (week or 1):
                return w["start_date"], w["end_date"]
        raise ValueError(f"week {week} is not in {year}-{month:02d}; valid weeks are 1-{len(weeks)}")
    if report_type == "monthly":
        return month_bounds(year, month)
    if report_type == "yearly":
        return date(year, 1, 1), date(year, 12, 31)
    if report_type == "custom":
        s = start or today
        e = end or today
        if e < s:
            raise ValueError("end date must not be before start date")
        return s, e
    raise ValueError(f"unknown report type: {report_type}")
