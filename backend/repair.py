"""
Post-processing of model output for /api/ai/generate-todo.

The tool schema only guarantees the shape of what the model returns. Every
value is checked again here and replaced with a safe default when it is out
of range, so this step never raises.
"""
import logging
import re
from datetime import date
from typing import Any, Optional

from models import DEFAULT_CATEGORY, PRIORITIES, GeneratedTodo

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100
MIN_TITLE_LENGTH = 2
FALLBACK_TITLE = "할 일"
DEFAULT_TIME = "09:00"

TIME_PATTERN = re.compile(r"([0-1][0-9]|2[0-3]):[0-5][0-9]")


def _repair_title(value: Any) -> str:
    if not isinstance(value, str):
        return FALLBACK_TITLE
    title = value.strip()
    if len(title) > MAX_TITLE_LENGTH:
        title = title[:MAX_TITLE_LENGTH - 3] + "..."
    if len(title) < MIN_TITLE_LENGTH:
        return FALLBACK_TITLE
    return title


def _repair_description(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _repair_due_date(value: Any, today: date) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        due = date.fromisoformat(value.strip()[:10])
    except ValueError:
        logger.warning("Dropping unparseable due_date from model output: %r", value)
        return None
    if due < today:
        logger.warning("Generated due_date %s is in the past, using today (%s)", due, today)
        due = today
    return due.isoformat()


def _repair_priority(value: Any) -> str:
    return value if value in PRIORITIES else "medium"


def _repair_category(value: Any) -> list[str]:
    categories: list[str] = []
    if isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, str) and item.strip() and item.strip() not in categories:
                categories.append(item.strip())
    return categories or [DEFAULT_CATEGORY]


def _repair_due_time(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, str) and TIME_PATTERN.fullmatch(value):
        return value
    logger.warning("Invalid due_time from model output: %r", value)
    return DEFAULT_TIME


def repair_generated_todo(raw: Any, today: date) -> GeneratedTodo:
    """
    Turn a raw model object into a GeneratedTodo that satisfies:
    - title is 2..100 characters
    - description is absent rather than empty
    - due_date, when present, is not before `today`
    - priority is one of low/medium/high
    - category has at least one entry
    - due_time, when present, is HH:mm (24-hour)
    """
    if not isinstance(raw, dict):
        raw = {}

    return GeneratedTodo(
        title=_repair_title(raw.get("title")),
        description=_repair_description(raw.get("description")),
        due_date=_repair_due_date(raw.get("due_date"), today),
        priority=_repair_priority(raw.get("priority")),
        category=_repair_category(raw.get("category")),
        due_time=_repair_due_time(raw.get("due_time")),
    )
