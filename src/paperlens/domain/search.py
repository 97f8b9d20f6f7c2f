"""
Search filter value objects.

A SearchFilter is validated on construction; anything malformed raises
InvalidFilterError so the API answers with 400 before touching the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from paperlens.core.exceptions import InvalidFilterError
from paperlens.domain.paper import Paper, Platform
from paperlens.utils.timeutil import as_utc, utcnow

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class DateRange(str, Enum):
    LAST_24_HOURS = "24h"
    LAST_7_DAYS = "7d"
    LAST_MONTH = "1m"
    CUSTOM = "custom"


class SortBy(str, Enum):
    RELEVANCE = "relevance"
    CITATIONS = "citations"
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"


_RELATIVE_WINDOWS = {
    DateRange.LAST_24_HOURS: timedelta(hours=24),
    DateRange.LAST_7_DAYS: timedelta(days=7),
    DateRange.LAST_MONTH: timedelta(days=30),
}


def parse_filter_date(value: Any, *, end_of_day: bool = False) -> Optional[datetime]:
    """Parse an ISO date or datetime string into UTC.

    Bare dates (``2024-01-31``) expand to the start of the day, or to the last
    microsecond of the day when ``end_of_day`` is set, so custom windows stay
    inclusive at both ends.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return as_utc(datetime.combine(value, time.max if end_of_day else time.min))

    text = str(value).strip()
    if len(text) == 10:
        try:
            day = date.fromisoformat(text)
        except ValueError as exc:
            raise InvalidFilterError(f"Invalid date: {text}") from exc
        return as_utc(datetime.combine(day, time.max if end_of_day else time.min))

    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError as exc:
        raise InvalidFilterError(f"Invalid date: {value}") from exc


def _coerce_enum(enum_cls, value, label: str):
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidFilterError(f"Invalid {label}: {value} (expected one of {allowed})") from exc


@dataclass
class SearchFilter:
    """Criteria for a paper search, shared by the store and the source adapters."""

    query: Optional[str] = None
    platform: Optional[Platform] = None
    domain: Optional[str] = None
    author: Optional[str] = None
    journal: Optional[str] = None
    date_range: Optional[DateRange] = None
    custom_start_date: Optional[datetime] = None
    custom_end_date: Optional[datetime] = None
    sort_by: SortBy = SortBy.RELEVANCE
    page: int = 1
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        self.query = (self.query or "").strip() or None
        self.author = (self.author or "").strip() or None
        self.journal = (self.journal or "").strip() or None
        self.domain = (str(self.domain or "")).strip() or None

        if self.platform is not None and not isinstance(self.platform, Platform):
            parsed = Platform.parse(self.platform)
            if parsed is None:
                raise InvalidFilterError(f"Unknown platform: {self.platform}")
            self.platform = parsed

        self.date_range = _coerce_enum(DateRange, self.date_range, "dateRange")
        self.sort_by = _coerce_enum(SortBy, self.sort_by, "sortBy") or SortBy.RELEVANCE
        self.custom_start_date = parse_filter_date(self.custom_start_date)
        self.custom_end_date = parse_filter_date(self.custom_end_date, end_of_day=True)

        try:
            self.page = int(self.page)
            self.limit = int(self.limit)
        except (TypeError, ValueError) as exc:
            raise InvalidFilterError("page and limit must be integers") from exc
        if self.page < 1:
            raise InvalidFilterError("page must be a positive integer")
        if self.limit < 1:
            raise InvalidFilterError("limit must be a positive integer")
        if self.limit > MAX_LIMIT:
            raise InvalidFilterError(f"limit must not exceed {MAX_LIMIT}")

        if self.date_range is DateRange.CUSTOM:
            if self.custom_start_date is None:
                raise InvalidFilterError("customStartDate is required for a custom date range")
            if self.custom_end_date is not None and self.custom_end_date < self.custom_start_date:
                raise InvalidFilterError("customEndDate must not be before customStartDate")

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def date_window(self, now: Optional[datetime] = None) -> Optional[Tuple[datetime, datetime]]:
        """Inclusive (start, end) bounds for the date range, or None."""
        if self.date_range is None:
            return None
        now = as_utc(now) or utcnow()
        if self.date_range is DateRange.CUSTOM:
            return self.custom_start_date, self.custom_end_date or now
        return now - _RELATIVE_WINDOWS[self.date_range], now

    def to_snapshot(self) -> Dict[str, Any]:
        """JSON-safe view of the non-empty criteria (recent-search history)."""
        snapshot: Dict[str, Any] = {}
        if self.platform is not None:
            snapshot["platform"] = self.platform.value
        for key in ("domain", "author", "journal"):
            value = getattr(self, key)
            if value:
                snapshot[key] = value
        if self.date_range is not None:
            snapshot["dateRange"] = self.date_range.value
        if self.custom_start_date is not None:
            snapshot["customStartDate"] = self.custom_start_date.isoformat()
        if self.custom_end_date is not None:
            snapshot["customEndDate"] = self.custom_end_date.isoformat()
        if self.sort_by is not SortBy.RELEVANCE:
            snapshot["sortBy"] = self.sort_by.value
        return snapshot


@dataclass
class SearchOutcome:
    """Result of an orchestrated search."""

    papers: List[Paper] = field(default_factory=list)
    total: int = 0
    source: str = "database"
    error: Optional[str] = None
