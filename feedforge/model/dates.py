"""
Feed Dates
==========

Syndication dates arrive as ISO-8601 (Atom, Dublin Core) or RFC-822 (RSS)
text, and real-world feeds carry plenty of values that are neither. A
``FeedDate`` keeps the three cases apart: absent, parsed, and present but
unparseable. Unparseable text is written back verbatim on encode.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from enum import Enum
from typing import Optional

from dateutil import parser as dateutil_parser


class DateState(str, Enum):
    """Which of the three date states a FeedDate is in."""
    ABSENT = "absent"
    PARSED = "parsed"
    UNPARSED = "unparsed"


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Two fill-ins differing in year, month and day; time of day defaults to midnight
_FILL_FIRST = datetime(2000, 1, 1)
_FILL_SECOND = datetime(2001, 2, 2)


def parse_datetime(text: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 or RFC-822 timestamp into an aware UTC datetime.

    Returns None for empty or unrecognizable input instead of raising.
    """
    if text is None:
        return None
    candidate = text.strip()
    if not candidate:
        return None

    try:
        iso = candidate[:-1] + "+00:00" if candidate[-1] in "zZ" else candidate
        return _to_utc(datetime.fromisoformat(iso))
    except ValueError:
        pass

    try:
        parsed = parsedate_to_datetime(candidate)
        if parsed is not None:
            return _to_utc(parsed)
    except (TypeError, ValueError, IndexError):
        pass

    # dateutil fills missing fields from its default; a date that changes
    # with the default was never fully present in the text
    try:
        first = dateutil_parser.parse(candidate, default=_FILL_FIRST)
        second = dateutil_parser.parse(candidate, default=_FILL_SECOND)
    except (ValueError, OverflowError):
        return None
    if first != second:
        return None
    return _to_utc(first)


def format_iso8601(value: datetime) -> str:
    """Atom form: ``2024-09-05T12:00:00Z``, with fractional seconds when present."""
    value = _to_utc(value).replace(tzinfo=None)
    if not value.microsecond:
        timespec = "seconds"
    elif value.microsecond % 1000 == 0:
        timespec = "milliseconds"
    else:
        timespec = "microseconds"
    return value.isoformat(timespec=timespec) + "Z"


def format_rfc822(value: datetime) -> str:
    """RSS form: ``Thu, 05 Sep 2024 12:00:00 GMT``."""
    return format_datetime(_to_utc(value), usegmt=True)


@dataclass(frozen=True)
class FeedDate:
    """An optional timestamp that remembers unparseable source text."""

    value: Optional[datetime] = None
    raw: Optional[str] = None

    @classmethod
    def absent(cls) -> "FeedDate":
        return cls()

    @classmethod
    def of(cls, value: Optional[datetime]) -> "FeedDate":
        if value is None:
            return cls()
        return cls(value=_to_utc(value))

    @classmethod
    def now(cls) -> "FeedDate":
        return cls(value=datetime.now(timezone.utc).replace(microsecond=0))

    @classmethod
    def parse(cls, text: Optional[str]) -> "FeedDate":
        """Build a FeedDate from element text.

        Empty or missing text is absent; text that does not parse keeps
        its raw form.
        """
        if text is None or not text.strip():
            return cls()
        parsed = parse_datetime(text)
        if parsed is None:
            return cls(raw=text)
        return cls(value=parsed, raw=text)

    @property
    def state(self) -> DateState:
        if self.value is not None:
            return DateState.PARSED
        if self.raw is not None:
            return DateState.UNPARSED
        return DateState.ABSENT

    @property
    def is_absent(self) -> bool:
        return self.state is DateState.ABSENT

    def to_iso8601(self) -> Optional[str]:
        if self.value is not None:
            return format_iso8601(self.value)
        return self.raw

    def to_rfc822(self) -> Optional[str]:
        if self.value is not None:
            return format_rfc822(self.value)
        return self.raw

    def __bool__(self) -> bool:
        return not self.is_absent
