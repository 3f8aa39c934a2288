"""
Tests for repair.py - post-processing of model output.
"""
import pytest
import sys
import os
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from repair import FALLBACK_TITLE, repair_generated_todo

TODAY = date(2026, 1, 4)


class TestTitle:
    """Tests for title clean-up."""

    def test_trims(self):
        todo = repair_generated_todo({"title": "  팀 회의 준비  "}, TODAY)
        assert todo.title == "팀 회의 준비"

    def test_long_title_is_truncated(self):
        todo = repair_generated_todo({"title": "가" * 150}, TODAY)
        assert len(todo.title) == 100
        assert todo.title.endswith("...")
        assert todo.title[:97] == "가" * 97

    def test_exactly_100_is_kept(self):
        todo = repair_generated_todo({"title": "a" * 100}, TODAY)
        assert todo.title == "a" * 100

    @pytest.mark.parametrize("title", [None, "", " ", "a", 42])
    def test_missing_or_short_title_falls_back(self, title):
        todo = repair_generated_todo({"title": title}, TODAY)
        assert todo.title == FALLBACK_TITLE


class TestDescription:
    """Tests for description clean-up."""

    def test_blank_becomes_absent(self):
        todo = repair_generated_todo({"title": "장보기", "description": "   "}, TODAY)
        assert todo.description is None
        assert "description" not in todo.model_dump(exclude_none=True)

    def test_trims(self):
        todo = repair_generated_todo({"title": "장보기", "description": " 우유, 계란 "}, TODAY)
        assert todo.description == "우유, 계란"


class TestDueDate:
    """Tests for due date correction."""

    def test_past_date_becomes_today(self):
        todo = repair_generated_todo({"title": "보고서", "due_date": "2000-01-01"}, TODAY)
        assert todo.due_date == "2026-01-04"

    def test_today_is_kept(self):
        todo = repair_generated_todo({"title": "보고서", "due_date": "2026-01-04"}, TODAY)
        assert todo.due_date == "2026-01-04"

    def test_future_date_is_kept(self):
        todo = repair_generated_todo({"title": "보고서", "due_date": "2026-01-09"}, TODAY)
        assert todo.due_date == "2026-01-09"

    def test_time_part_is_ignored_in_comparison(self):
        todo = repair_generated_todo({"title": "보고서", "due_date": "2026-01-04T00:00:00"}, TODAY)
        assert todo.due_date == "2026-01-04"

    def test_unparseable_date_is_dropped(self):
        todo = repair_generated_todo({"title": "보고서", "due_date": "다음 주"}, TODAY)
        assert todo.due_date is None

    def test_absent_date_stays_absent(self):
        todo = repair_generated_todo({"title": "보고서"}, TODAY)
        assert todo.due_date is None


class TestPriorityAndCategory:
    """Tests for enum defaults."""

    @pytest.mark.parametrize("priority", [None, "", "urgent", "HIGH", 3])
    def test_invalid_priority_defaults_to_medium(self, priority):
        todo = repair_generated_todo({"title": "운동", "priority": priority}, TODAY)
        assert todo.priority == "medium"

    def test_valid_priority_is_kept(self):
        todo = repair_generated_todo({"title": "운동", "priority": "low"}, TODAY)
        assert todo.priority == "low"

    @pytest.mark.parametrize("category", [None, [], "업무", [None, ""]])
    def test_empty_category_defaults_to_personal(self, category):
        todo = repair_generated_todo({"title": "운동", "category": category}, TODAY)
        assert todo.category == ["개인"]

    def test_multiple_categories_are_kept_in_order(self):
        todo = repair_generated_todo({"title": "요가 강의", "category": ["건강", "학습", "건강"]}, TODAY)
        assert todo.category == ["건강", "학습"]


class TestDueTime:
    """Tests for time format repair."""

    def test_invalid_time_defaults(self):
        todo = repair_generated_todo({"title": "회의", "due_time": "25:99"}, TODAY)
        assert todo.due_time == "09:00"

    def test_valid_time_is_kept(self):
        todo = repair_generated_todo({"title": "회의", "due_time": "14:30"}, TODAY)
        assert todo.due_time == "14:30"

    @pytest.mark.parametrize("value", ["3pm", "9:00", "24:00", "12:60", "14:30\n", " 14:30", "14:30 "])
    def test_non_hhmm_defaults(self, value):
        todo = repair_generated_todo({"title": "회의", "due_time": value}, TODAY)
        assert todo.due_time == "09:00"

    def test_absent_time_stays_absent(self):
        todo = repair_generated_todo({"title": "회의"}, TODAY)
        assert todo.due_time is None


class TestInvariants:
    """The repaired record is always valid, whatever came in."""

    @pytest.mark.parametrize("raw", [
        {},
        None,
        "not an object",
        {"title": "x", "priority": "none", "category": [], "due_date": "1999-12-31", "due_time": "99:99"},
        {"title": "   ", "description": "", "due_date": "", "due_time": ""},
        {"title": "b" * 300, "category": ["업무"], "priority": "high", "due_date": "2030-05-01"},
    ])
    def test_repaired_record_is_valid(self, raw):
        todo = repair_generated_todo(raw, TODAY)

        assert 2 <= len(todo.title) <= 100
        assert todo.priority in ("low", "medium", "high")
        assert len(todo.category) >= 1
        if todo.due_date is not None:
            assert date.fromisoformat(todo.due_date) >= TODAY
        if todo.due_time is not None:
            assert len(todo.due_time) == 5
