"""Date and token-expiry helpers shared by the adapters."""

from datetime import UTC, datetime, timedelta

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Vendors reject bookings for the current instant
SAME_DAY_LEAD = timedelta(minutes=10)


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp. A timestamp without an offset is rejected."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no UTC offset")
    return parsed


def format_rfc3339(moment: datetime) -> str:
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def expiry_from_now(expires_in: int, now: datetime | None = None) -> str:
    """RFC3339 expiry for a token valid for `expires_in` seconds."""
    return format_rfc3339((now or utcnow()) + timedelta(seconds=expires_in))


def token_refresh_required(expire_at: str, margin: timedelta, now: datetime | None = None) -> bool:
    """
    True once `now` is past `expire_at - margin`.

    An expiry exactly `margin` away is still usable; one second less is not.

    Raises:
        ValueError: if `expire_at` is not RFC3339.
    """
    expiry = parse_rfc3339(expire_at)
    return (now or utcnow()) > expiry - margin


def parse_offset(offset: str) -> timedelta:
    """Parse a `+HH:MM` / `-HH:MM` UTC offset."""
    hours, minutes = offset.split(":")
    sign = -1 if hours.strip().startswith("-") else 1
    return sign * timedelta(hours=abs(int(hours)), minutes=int(minutes))


def is_current_date(service_date: str, offset: str, now: datetime | None = None) -> bool:
    """Whether `service_date` (YYYY-MM-DD) is today at the given offset. Unparseable input is never today."""
    try:
        date = datetime.strptime(service_date, DATE_FORMAT).date()
        delta = parse_offset(offset)
    except ValueError:
        return False
    return ((now or utcnow()) + delta).date() == date


def ten_minutes_from_now(offset: str, now: datetime | None = None) -> str:
    """Local wall-clock time at `offset`, ten minutes ahead, as `YYYY-MM-DD HH:MM:SS`."""
    delta = parse_offset(offset)
    return ((now or utcnow()) + delta + SAME_DAY_LEAD).strftime(DATETIME_FORMAT)


def years_ago(years: int, now: datetime | None = None) -> datetime:
    """Same calendar day `years` back; 29 February falls back to the 28th."""
    now = now or utcnow()
    try:
        return now.replace(year=now.year - years)
    except ValueError:
        return now.replace(year=now.year - years, day=28)
