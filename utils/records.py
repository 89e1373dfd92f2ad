from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional, Union

Moment = Union[date, datetime]


def parse_moment(value: Any) -> Optional[Moment]:
    """Parse a stored timestamp into a date or a UTC-aware datetime.

    Date-only strings stay dates. Naive datetimes are taken as UTC.
    Unparseable values yield None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_date(value: Any) -> Optional[date]:
    """Calendar date of a stored timestamp under the UTC policy."""
    moment = parse_moment(value)
    if moment is None:
        return None
    if isinstance(moment, datetime):
        return moment.date()
    return moment


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BookRecord:
    """Snapshot of one book, as read by the evaluators."""

    genre: str
    status: str = "to-read"
    rating: Optional[int] = None
    finish_date: Optional[Moment] = None
    id: Optional[int] = None

    @property
    def finished(self) -> bool:
        return self.status == "finished"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BookRecord":
        return cls(
            id=row["id"],
            genre=row["genre"],
            status=row["status"],
            rating=row["rating"],
            finish_date=parse_moment(row["finish_date"]),
        )


@dataclass(frozen=True)
class SessionRecord:
    """Snapshot of one reading session."""

    date: Moment
    minutes: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Optional["SessionRecord"]:
        moment = parse_moment(row["date"])
        if moment is None:
            return None
        return cls(date=moment, minutes=int(row["minutes"] or 0))
