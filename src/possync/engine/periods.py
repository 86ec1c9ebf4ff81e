"""Analytics windows and date-range validation."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from possync._constants import MAX_DATE_RANGE_DAYS
from possync.models._base import parse_instant
from possync.models.analytics import AnalyticsPeriod, AnalyticsPeriods
from possync.models.validation import DateRangeError, DateRangeValidation

_MAX_RANGE = timedelta(days=MAX_DATE_RANGE_DAYS)


def _midnight(day: date, reference: datetime) -> datetime:
    return datetime.combine(day, time.min, tzinfo=reference.tzinfo)


def get_analytics_periods(reference: datetime) -> AnalyticsPeriods:
    """Derive today/yesterday/week/month/year windows from *reference*.

    Midnights are taken in the reference's own timezone; a naive reference is
    treated as UTC. Weeks start on Sunday. The open-ended periods (week, month,
    year) end at *reference* itself.
    """
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=UTC)

    today = reference.date()
    # date.weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (today.weekday() + 1) % 7

    today_start = _midnight(today, reference)
    return AnalyticsPeriods(
        today=AnalyticsPeriod(start=today_start, end=_midnight(today + timedelta(days=1), reference)),
        yesterday=AnalyticsPeriod(start=_midnight(today - timedelta(days=1), reference), end=today_start),
        this_week=AnalyticsPeriod(
            start=_midnight(today - timedelta(days=days_since_sunday), reference),
            end=reference,
        ),
        this_month=AnalyticsPeriod(start=_midnight(today.replace(day=1), reference), end=reference),
        this_year=AnalyticsPeriod(start=_midnight(date(today.year, 1, 1), reference), end=reference),
    )


def _parse_bound(value: Any) -> datetime | None:
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    try:
        return parse_instant(value)
    except (TypeError, ValueError):
        return None


def validate_date_range(start: Any, end: Any) -> DateRangeValidation:
    """Validate a reporting range of at most one year (365 days inclusive)."""
    start_at = _parse_bound(start)
    end_at = _parse_bound(end)

    if start_at is None or end_at is None:
        return DateRangeValidation(
            is_valid=False,
            errors=["Invalid date format"],
            reason=DateRangeError.INVALID_FORMAT,
        )
    if start_at > end_at:
        return DateRangeValidation(
            is_valid=False,
            errors=["Start date cannot be after end date"],
            reason=DateRangeError.INVERTED_RANGE,
        )
    if end_at - start_at > _MAX_RANGE:
        return DateRangeValidation(
            is_valid=False,
            errors=["Date range cannot exceed 1 year"],
            reason=DateRangeError.RANGE_TOO_LARGE,
        )
    return DateRangeValidation(is_valid=True)
