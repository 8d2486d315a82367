import datetime

from models import RollingWeekWindow

from .timestamps import ONE_WEEK, format_timestamp, parse_timestamp


def rolling_week_window(current_iso: str, anchor_iso: str) -> RollingWeekWindow:
    """Return the seven-day window containing ``current_iso``.

    Weeks are counted from ``anchor_iso`` rather than from calendar
    boundaries. A current time before the anchor falls into week zero.
    Raises ``ValueError`` when either timestamp cannot be parsed.
    """
    current = parse_timestamp(current_iso)
    anchor = parse_timestamp(anchor_iso)
    elapsed = max(current - anchor, datetime.timedelta(0))
    week_number = elapsed // ONE_WEEK
    start = anchor + ONE_WEEK * week_number
    end = start + ONE_WEEK
    return RollingWeekWindow(
        week_number=int(week_number),
        start_iso=format_timestamp(start),
        end_iso=format_timestamp(end),
    )


def weeks_between(start_iso: str, end_iso: str) -> float:
    """Return the fractional number of weeks from ``start_iso`` to ``end_iso``.

    Negative spans are clamped to ``0.0``.
    """
    start = parse_timestamp(start_iso)
    end = parse_timestamp(end_iso)
    return max(0.0, (end - start) / ONE_WEEK)
