"""
Statistics over a user's todos for the "today" and "week" summaries.

Todos are first narrowed to the requested period (created or due inside the
window), then counted. All day comparisons use KST civil dates.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from models import PRIORITIES, AnalysisTodo
from temporal import DAY_NAMES, KST, civil_date, sunday_index, to_kst

PERIODS = ("today", "week")
PREVIEW_LIMIT = 3

# Due-hour buckets: [start, end) in KST hours. Hours 0-5 fall in no bucket.
HOUR_BUCKETS = {
    "morning": (6, 12),
    "afternoon": (12, 18),
    "evening": (18, 24),
}


@dataclass
class PriorityStat:
    count: int = 0
    completed: int = 0

    @property
    def rate(self) -> float:
        return percent(self.completed, self.count, ".1")


@dataclass
class CategoryStat:
    count: int = 0
    completed: int = 0

    @property
    def rate(self) -> float:
        return percent(self.completed, self.count, ".1")


@dataclass
class TodoStatistics:
    period: str
    today: date
    todos: list[AnalysisTodo]
    total: int = 0
    completed: int = 0
    incomplete: int = 0
    completion_rate: int = 0
    completion_rate_detail: float = 0.0
    incomplete_by_priority: dict[str, list[AnalysisTodo]] = field(default_factory=dict)
    urgent: list[AnalysisTodo] = field(default_factory=list)
    priority_stats: dict[str, PriorityStat] = field(default_factory=dict)
    with_due_date_count: int = 0
    overdue_count: int = 0
    due_today_count: int = 0
    due_this_week_count: int = 0
    category_stats: dict[str, CategoryStat] = field(default_factory=dict)
    weekday_distribution: dict[str, int] = field(default_factory=dict)
    due_hour_buckets: dict[str, int] = field(default_factory=dict)

    def priority_preview(self, priority: str, limit: int = PREVIEW_LIMIT) -> tuple[list[AnalysisTodo], int]:
        """First `limit` incomplete todos of a priority and how many were left out."""
        items = self.incomplete_by_priority.get(priority, [])
        return items[:limit], max(len(items) - limit, 0)


def percent(part: int, whole: int, places: str = "1") -> float:
    """Percentage rounded half-up; 0 when `whole` is 0."""
    if whole <= 0:
        return 0
    value = (Decimal(part) * 100 / Decimal(whole)).quantize(Decimal(places), rounding=ROUND_HALF_UP)
    return float(value) if places != "1" else int(value)


def week_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Monday 00:00:00 through Sunday 23:59:59.999 (KST) of the week containing `now`."""
    today = civil_date(now)
    weekday = sunday_index(today)
    monday_offset = -6 if weekday == 0 else 1 - weekday
    monday = today + timedelta(days=monday_offset)
    sunday = monday + timedelta(days=6)
    start = datetime.combine(monday, time.min, tzinfo=KST)
    end = datetime.combine(sunday, time(23, 59, 59, 999000), tzinfo=KST)
    return start, end


def in_window(todo: AnalysisTodo, period: str, now: datetime) -> bool:
    if period == "today":
        today = civil_date(now)
        return any(
            stamp is not None and civil_date(stamp) == today
            for stamp in (todo.created_date, todo.due_date)
        )
    if period == "week":
        start, end = week_bounds(now)
        return any(
            stamp is not None and start <= to_kst(stamp) <= end
            for stamp in (todo.created_date, todo.due_date)
        )
    raise ValueError(f"Unsupported period: {period}")


def select_window(todos: Iterable[AnalysisTodo], period: str, now: datetime) -> list[AnalysisTodo]:
    return [todo for todo in todos if in_window(todo, period, now)]


def _due_day(todo: AnalysisTodo) -> Optional[date]:
    return civil_date(todo.due_date) if todo.due_date is not None else None


def _hour_bucket(stamp: datetime) -> Optional[str]:
    hour = to_kst(stamp).hour
    for name, (start, end) in HOUR_BUCKETS.items():
        if start <= hour < end:
            return name
    return None


def aggregate(todos: Iterable[AnalysisTodo], period: str, now: datetime) -> TodoStatistics:
    """Window `todos` to `period` and compute every metric the summary needs."""
    now = to_kst(now)
    today = now.date()
    week_end = today + timedelta(days=7)
    selected = select_window(todos, period, now)

    stats = TodoStatistics(period=period, today=today, todos=selected)
    stats.total = len(selected)
    stats.completed = sum(1 for t in selected if t.completed)
    stats.incomplete = stats.total - stats.completed
    stats.completion_rate = percent(stats.completed, stats.total)
    stats.completion_rate_detail = percent(stats.completed, stats.total, ".1")

    stats.incomplete_by_priority = {p: [] for p in PRIORITIES}
    stats.priority_stats = {p: PriorityStat() for p in PRIORITIES}
    stats.weekday_distribution = {name: 0 for name in DAY_NAMES}
    stats.due_hour_buckets = {name: 0 for name in HOUR_BUCKETS}

    for todo in selected:
        priority_stat = stats.priority_stats[todo.priority]
        priority_stat.count += 1
        if todo.completed:
            priority_stat.completed += 1
        else:
            stats.incomplete_by_priority[todo.priority].append(todo)

        # One todo counts once in each of its categories
        for category in todo.category:
            category_stat = stats.category_stats.setdefault(category, CategoryStat())
            category_stat.count += 1
            if todo.completed:
                category_stat.completed += 1

        if todo.created_date is not None:
            stats.weekday_distribution[DAY_NAMES[sunday_index(civil_date(todo.created_date))]] += 1

        due_day = _due_day(todo)
        if due_day is None:
            continue

        stats.with_due_date_count += 1
        bucket = _hour_bucket(todo.due_date)
        if bucket:
            stats.due_hour_buckets[bucket] += 1

        if todo.completed:
            continue
        if due_day <= today:
            stats.urgent.append(todo)
        if due_day < today:
            stats.overdue_count += 1
        if due_day == today:
            stats.due_today_count += 1
        if today <= due_day <= week_end:
            stats.due_this_week_count += 1

    return stats
