from .time import (
    InvalidClockTime,
    format_relative_time,
    format_scan_time,
    isoformat_utc,
    local_date,
    parse_clock_time,
    parse_date,
    to_local,
)

__all__ = [
    "InvalidClockTime",
    "format_relative_time",
    "format_scan_time",
    "isoformat_utc",
    "local_date",
    "parse_clock_time",
    "parse_date",
    "to_local",
]
