from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from utils.achievements import finished_in_month
from utils.records import BookRecord, SessionRecord, utc_date

LEADERBOARD_PERIODS = ("week", "month", "year", "all")


def reading_streak(sessions: Iterable[SessionRecord], today: date) -> int:
    """Consecutive days with at least one session, counting back from today."""
    days = {utc_date(session.date) for session in sessions}
    streak = 0
    cursor = today
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def minutes_on(sessions: Iterable[SessionRecord], day: date) -> int:
    return sum(session.minutes for session in sessions if utc_date(session.date) == day)


def distinct_reading_days(sessions: Iterable[SessionRecord]) -> int:
    return len({utc_date(session.date) for session in sessions})


def total_hours(sessions: Iterable[SessionRecord]) -> int:
    minutes = sum(session.minutes for session in sessions)
    return int(minutes / 60 + 0.5)


def count_finished_in_month(books: Iterable[BookRecord], now: datetime) -> int:
    return sum(1 for book in books if finished_in_month(book, now))


def count_finished_in_year(books: Iterable[BookRecord], now: datetime) -> int:
    count = 0
    for book in books:
        finished_on = utc_date(book.finish_date)
        if finished_on is not None and finished_on.year == now.year:
            count += 1
    return count


def average_rating(books: Iterable[BookRecord]) -> Optional[float]:
    ratings: List[int] = [book.rating for book in books if book.rating is not None]
    if not ratings:
        return None
    return sum(ratings) / len(ratings)


def shift_months(day: date, months: int) -> date:
    """Move ``day`` by whole months, clamping to the last day of the target month."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def leaderboard_cutoff(period: Optional[str], now: datetime) -> Optional[datetime]:
    """Earliest finish time that counts for a leaderboard period; None means all time."""
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        shifted = shift_months(now.date(), -1)
        return now.replace(year=shifted.year, month=shifted.month, day=shifted.day)
    if period == "year":
        shifted = shift_months(now.date(), -12)
        return now.replace(year=shifted.year, month=shifted.month, day=shifted.day)
    return None


def monthly_finished_counts(books: Iterable[BookRecord], now: datetime, months: int = 6) -> List[dict]:
    """Finished-book counts for the last ``months`` calendar months, oldest first."""
    finished_on = [utc_date(book.finish_date) for book in books]
    stats = []
    for offset in range(months - 1, -1, -1):
        anchor = shift_months(now.date().replace(day=1), -offset)
        count = sum(
            1 for day in finished_on
            if day is not None and day.year == anchor.year and day.month == anchor.month
        )
        stats.append({"month": anchor.strftime("%Y-%m"), "count": count})
    return stats
