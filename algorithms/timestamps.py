import datetime

ONE_WEEK = datetime.timedelta(weeks=1)


def parse_timestamp(ts: str) -> datetime.datetime:
    """Return ``ts`` as a timezone-aware datetime in UTC.

    Accepts ISO-8601 strings with a ``Z`` suffix or an explicit offset.
    Naive values are interpreted as UTC. Raises ``ValueError`` when ``ts``
    cannot be parsed.
    """
    if not isinstance(ts, str) or not ts.strip():
        raise ValueError(f"invalid timestamp: {ts!r}")
    text = ts.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    dt = datetime.datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def format_timestamp(dt: datetime.datetime) -> str:
    """Format ``dt`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    dt = dt.astimezone(datetime.timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def normalize_timestamp(ts: str) -> str:
    """Return ``ts`` in the canonical persisted form."""
    return format_timestamp(parse_timestamp(ts))


def utc_now_iso() -> str:
    return format_timestamp(datetime.datetime.now(datetime.timezone.utc))
