from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from temporal import combine_due, parse_timestamp

Priority = Literal["low", "medium", "high"]

PRIORITIES = ("high", "medium", "low")
CATEGORIES = ("업무", "개인", "건강", "학습")
DEFAULT_CATEGORY = "개인"


def _strip_title(value: str) -> str:
    s = value.strip()
    if not s:
        raise ValueError("title must not be blank")
    return s


class Todo(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    created_date: str  # ISO format datetime string
    due_date: Optional[str] = None  # ISO format datetime string
    priority: Priority = "medium"
    category: list[str] = []
    completed: bool = False
    updated_at: Optional[str] = None


class TodoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[str] = None  # YYYY-MM-DD or full ISO datetime
    due_time: Optional[str] = None  # HH:mm, merged into due_date
    priority: Priority = "medium"
    category: list[str] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return _strip_title(v)

    @model_validator(mode="after")
    def merge_due_time(self):
        # A bare date with a separate time (as produced by /api/ai/generate-todo)
        if self.due_date and self.due_time and len(self.due_date) == 10:
            self.due_date = combine_due(self.due_date, self.due_time)
        elif self.due_date:
            self.due_date = parse_timestamp(self.due_date).isoformat()
        self.due_time = None
        return self


class TodoUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[str] = None
    priority: Optional[Priority] = None
    category: Optional[list[str]] = None
    completed: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _strip_title(v)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        parsed = parse_timestamp(v)
        return parsed.isoformat() if parsed else None


class GeneratedTodo(BaseModel):
    """Structured todo produced from free text; not persisted until the caller saves it."""
    title: str
    description: Optional[str] = None
    due_date: Optional[str] = None  # YYYY-MM-DD
    due_time: Optional[str] = None  # HH:mm, 24-hour
    priority: Priority = "medium"
    category: list[str] = [DEFAULT_CATEGORY]


class TodoAnalysis(BaseModel):
    summary: str
    urgentTasks: list[str] = Field(default_factory=list, max_length=5)
    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class AnalysisTodo(BaseModel):
    """A todo as submitted for analysis; timestamps are normalized to KST."""
    id: Union[str, int, None] = None
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Priority = "medium"
    category: list[str] = []
    completed: bool = False
    created_date: Optional[datetime] = None

    @field_validator("due_date", "created_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Any) -> Any:
        return [] if v is None else v


class GenerateTodoRequest(BaseModel):
    # Left untyped so the sanitizer, not pydantic, decides what is acceptable
    prompt: Any = None


class AnalyzeTodosRequest(BaseModel):
    todos: Any = None
    period: Any = None
