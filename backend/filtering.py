from datetime import datetime
from typing import Iterable, Optional

from models import Todo
from temporal import parse_timestamp

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def filter_todos(
    todos: Iterable[Todo],
    search: Optional[str] = None,
    status: str = "all",
    priorities: Optional[Iterable[str]] = None,
) -> list[Todo]:
    """Case-insensitive search over title/description, then status and priority filters."""
    result = list(todos)

    if search:
        query = search.lower()
        result = [
            t for t in result
            if query in t.title.lower() or (t.description and query in t.description.lower())
        ]

    if status == "active":
        result = [t for t in result if not t.completed]
    elif status == "completed":
        result = [t for t in result if t.completed]

    wanted = set(priorities or [])
    if wanted:
        result = [t for t in result if t.priority in wanted]

    return result


def _timestamp(value: Optional[str]) -> Optional[datetime]:
    try:
        return parse_timestamp(value)
    except ValueError:
        return None


def sort_todos(todos: Iterable[Todo], sort_by: str = "created_date", direction: Optional[str] = None) -> list[Todo]:
    """
    Stable sort of todos.

    Default directions: created_date newest first, priority high first,
    due_date earliest first. Todos without a due date always go last when
    sorting by due_date, whichever direction is asked for.
    """
    items = list(todos)

    if sort_by == "priority":
        reverse = direction == "desc"
        return sorted(items, key=lambda t: PRIORITY_ORDER.get(t.priority, len(PRIORITY_ORDER)), reverse=reverse)

    if sort_by == "due_date":
        reverse = direction == "desc"
        dated = [(t, _timestamp(t.due_date)) for t in items]
        with_due = sorted((pair for pair in dated if pair[1] is not None), key=lambda pair: pair[1], reverse=reverse)
        without_due = [t for t, stamp in dated if stamp is None]
        return [t for t, _ in with_due] + without_due

    reverse = direction != "asc"
    return sorted(items, key=_created_key, reverse=reverse)


def _created_key(todo: Todo) -> float:
    stamp = _timestamp(todo.created_date)
    return stamp.timestamp() if stamp else 0.0
