"""Extractors for deriving event timestamps from parsed log fields."""

import re
import datetime
from typing import Any, Dict, Optional

# Fields searched for a timestamp when none is configured, in preference order.
DEFAULT_TIME_FIELDS = ("time", "timestamp", "Date", "DateTime")

RFC3339_NANO = "%Y-%m-%dT%H:%M:%S.%f%z"
DEFAULT_LAYOUT = "%Y-%m-%d %H:%M:%S.%f %z %Z"
RFC3339 = "%Y-%m-%dT%H:%M:%S%z"
RUBY_DATE = "%a %b %d %H:%M:%S.%f %z %Y"
UNIX_DATE = "%a %b %d %H:%M:%S %Z %Y"

DEFAULT_TIME_FORMATS = (RFC3339_NANO, DEFAULT_LAYOUT, RFC3339, RUBY_DATE, UNIX_DATE)

_CLOCK = r"(?<![\d:])(\d{1,2}:\d{2}:\d{2})"
_COMMA_FRACTION = re.compile(_CLOCK + r",(\d+)")
_FRACTION = re.compile(_CLOCK + r"(?:\.(\d+))?")
_ZONE_NAME = re.compile(r"\s*(?<![A-Za-z])[A-Z]{3,5}(?![A-Za-z])")


class SystemClock:
    """Source of the current time, replaceable in tests."""

    def now(self) -> datetime.datetime:
        return datetime.datetime.now(datetime.timezone.utc)


def _normalize(value: str, fmt: str):
    # A comma may separate the fractional seconds
    value = _COMMA_FRACTION.sub(r"\1.\2", value)
    fmt = fmt.replace("%S,%f", "%S.%f")

    # Zone abbreviations are ambiguous; only a numeric offset sets the instant.
    if "%Z" in fmt:
        fmt = re.sub(r"\s*%Z", "", fmt)
        value = _ZONE_NAME.sub("", value, count=1)

    match = _FRACTION.search(value)
    if match:
        clock, fraction = match.groups()
        if fraction is not None and "%f" not in fmt:
            fmt = fmt.replace("%S", "%S.%f", 1)
        if "%f" in fmt:
            # strptime only knows microseconds
            fraction = (fraction or "0")[:6]
            value = f"{value[:match.start()]}{clock}.{fraction}{value[match.end():]}"

    return value, fmt


def parse_time(value: str, fmt: str) -> datetime.datetime:
    """Parse a timestamp string with a strptime format.

    The value is normalized first: a comma fractional separator is read as a
    period, sub-microsecond digits are dropped, the fraction is optional, and
    zone abbreviations are ignored in favour of numeric offsets. Results
    without an offset are taken as UTC.

    Raises:
        ValueError: If the value does not match the format
    """
    value, fmt = _normalize(value.strip(), fmt)
    parsed = datetime.datetime.strptime(value, fmt)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


class TimestampExtractor:
    """Extracts the event time from a parsed record."""

    def __init__(
        self,
        time_field: Optional[str] = None,
        time_format: Optional[str] = None,
        nower=None,
    ):
        self.time_field = time_field
        self.time_format = time_format
        self.nower = nower or SystemClock()

    def _find_value(self, fields: Dict[str, Any]) -> Optional[Any]:
        candidates = (self.time_field,) if self.time_field else DEFAULT_TIME_FIELDS
        for name in candidates:
            if name in fields:
                return fields[name]
        return None

    def extract(self, fields: Dict[str, Any]) -> datetime.datetime:
        """Return the event time of a record, or the current time if there is none."""
        value = self._find_value(fields)
        if value is None:
            return self.nower.now()

        formats = (self.time_format,) if self.time_format else DEFAULT_TIME_FORMATS
        for fmt in formats:
            try:
                return parse_time(str(value), fmt)
            except ValueError:
                continue
        return self.nower.now()
