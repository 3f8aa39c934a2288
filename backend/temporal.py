"""
Date/time helpers pinned to Korean Standard Time (UTC+9).

All "today"/"tomorrow" style references and civil-date comparisons in the
backend go through this module so that every calculation agrees on the same
calendar day regardless of the server's local time zone.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

KST = timezone(timedelta(hours=9), "KST")

# Indexed 0=Sunday .. 6=Saturday
DAY_NAMES = ["일", "월", "화", "수", "목", "금", "토"]


@dataclass(frozen=True)
class TemporalReferences:
    now: datetime
    today: date
    tomorrow: date
    day_after_tomorrow: date
    this_friday: date
    next_monday: date

    @property
    def current_time(self) -> str:
        return self.now.strftime("%H:%M")

    @property
    def day_name(self) -> str:
        return DAY_NAMES[sunday_index(self.today)]


def now_kst() -> datetime:
    return datetime.now(KST)


def to_kst(value: datetime) -> datetime:
    """Attach KST to naive datetimes, convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=KST)
    return value.astimezone(KST)


def sunday_index(day: date) -> int:
    """Weekday number with Sunday=0, matching DAY_NAMES."""
    return (day.weekday() + 1) % 7


def resolve_references(now: Optional[datetime] = None) -> TemporalReferences:
    """
    Resolve relative date phrases to calendar dates in KST.

    "This Friday" on a Friday and "next Monday" on a Monday both mean a week
    ahead, never today.
    """
    current = to_kst(now) if now is not None else now_kst()
    today = current.date()
    weekday = sunday_index(today)

    days_until_friday = (5 - weekday) % 7 or 7
    days_until_monday = (8 - weekday) % 7 or 7

    return TemporalReferences(
        now=current,
        today=today,
        tomorrow=today + timedelta(days=1),
        day_after_tomorrow=today + timedelta(days=2),
        this_friday=today + timedelta(days=days_until_friday),
        next_monday=today + timedelta(days=days_until_monday),
    )


def parse_timestamp(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Normalize a timestamp into an aware KST datetime.

    - ISO datetime strings are parsed (a trailing 'Z' is accepted); naive
      values are taken as KST.
    - Date-only strings and date objects become KST midnight.
    - None and blank strings give None.
    Raises ValueError for anything else.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return to_kst(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=KST)

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return to_kst(datetime.fromisoformat(s))
        except ValueError:
            try:
                return datetime.combine(date.fromisoformat(s), time.min, tzinfo=KST)
            except ValueError as e:
                raise ValueError(
                    f"Invalid timestamp {value!r}. Use an ISO8601 date or datetime string."
                ) from e

    raise ValueError("Invalid timestamp type; expected date, datetime, or ISO8601 string.")


def civil_date(value: datetime) -> date:
    """Calendar day of a timestamp as seen in KST."""
    return to_kst(value).date()


def combine_due(due_date: Optional[str], due_time: Optional[str]) -> Optional[str]:
    """
    Merge a YYYY-MM-DD date and an optional HH:mm time into one ISO timestamp.
    Without a date there is nothing to merge and None is returned.
    """
    if not due_date:
        return None
    day = date.fromisoformat(due_date[:10])
    clock = time.fromisoformat(due_time) if due_time else time.min
    return datetime.combine(day, clock, tzinfo=KST).isoformat()
