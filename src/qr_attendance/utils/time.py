from __future__ import annotations

from datetime import date, datetime, time, timezone

DATE_FORMAT = "%Y-%m-%d"


class InvalidClockTime(ValueError):
    pass


def parse_clock_time(value: str) -> time:
    """Parse an ``HH:MM`` wall-clock value such as the class start time."""
    candidate = (value or "").strip()
    parts = candidate.split(":")
    if len(parts) != 2:
        raise InvalidClockTime("Time must be written as HH:MM.")

    try:
        hour = int(parts[0])
        minute = int(parts[1])
    except ValueError as exc:
        raise InvalidClockTime("Hour and minute must be integers.") from exc

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidClockTime("Hours must be between 00-23 and minutes between 00-59.")

    return time(hour=hour, minute=minute)


def to_local(moment: datetime) -> datetime:
    """Return ``moment`` as naive local time. Naive values are assumed local already."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def local_date(moment: datetime) -> str:
    return to_local(moment).strftime(DATE_FORMAT)


def isoformat_utc(moment: datetime) -> str:
    aware = moment if moment.tzinfo is not None else moment.astimezone()
    utc_moment = aware.astimezone(timezone.utc)
    return utc_moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


def _coerce_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value

    if isinstance(value, str):
        candidate = value.strip().replace(" ", "T", 1)
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(candidate)
        except ValueError:
            for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M:%S.%f"):
                try:
                    return datetime.strptime(value, fmt)
                except ValueError:
                    continue

    raise ValueError(f"Unsupported datetime value: {value!r}")


def format_scan_time(value: datetime | str) -> str:
    """Local ``HH:MM:SS, dd/mm/YYYY`` rendering of a stored scan timestamp."""
    return to_local(_coerce_datetime(value)).strftime("%H:%M:%S, %d/%m/%Y")


def format_relative_time(value: datetime | str, *, now: datetime | None = None) -> str:
    moment = to_local(_coerce_datetime(value))
    reference = to_local(now) if now is not None else datetime.now()

    total_seconds = int((reference - moment).total_seconds())

    if total_seconds < 60:
        return "just now"

    minutes = total_seconds // 60
    if minutes == 1:
        return "1 minute ago"
    if minutes < 60:
        return f"{minutes} minutes ago"

    hours = minutes // 60
    if hours == 1:
        return "1 hour ago"
    if hours < 24:
        return f"{hours} hours ago"

    days = hours // 24
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"

    weeks = days // 7
    if weeks == 1:
        return "1 week ago"
    if weeks < 5:
        return f"{weeks} weeks ago"

    months = days // 30
    if months == 1:
        return "1 month ago"
    if months < 12:
        return f"{months} months ago"

    years = days // 365
    if years == 1:
        return "1 year ago"
    return f"{years} years ago"
