"""
Filtering and summary statistics over an in-memory set of todos.

Everything here is a pure function of (todos, criteria, now): nothing is
cached or persisted, and the whole set is rescanned on every call.
Calendar buckets (today / this week / this month) use the configured
local timezone.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from taskboard.models import (
    Priority, PriorityCounts, StatusFilter, Todo, TodoAnalytics, TodoView,
)
from taskboard.utils.datetime_utils import local_now, start_of_day, start_of_week, to_local

ALL = "all"


@dataclass(frozen=True)
class TodoFilter:
    search: str = ""
    status: StatusFilter = StatusFilter.ALL
    priority: str = ALL
    category: str = ALL

    def matches(self, todo: Todo) -> bool:
        if self.search:
            needle = self.search.lower()
            if needle not in todo.title.lower() and needle not in todo.description.lower():
                return False

        if self.status == StatusFilter.COMPLETED and not todo.completed:
            return False
        if self.status == StatusFilter.PENDING and todo.completed:
            return False

        if self.priority != ALL and todo.priority.value != self.priority:
            return False

        if self.category != ALL and todo.category != self.category:
            return False

        return True


def as_todo(record: Union[Todo, Mapping[str, Any]]) -> Todo:
    if isinstance(record, Todo):
        return record
    return Todo.model_validate(record)


def filter_todos(todos: Iterable[Todo], criteria: Optional[TodoFilter] = None) -> List[Todo]:
    """Keep todos passing every predicate, in input order"""
    criteria = criteria or TodoFilter()
    return [todo for todo in todos if criteria.matches(todo)]


def list_categories(todos: Iterable[Todo]) -> List[str]:
    return list(dict.fromkeys(todo.category for todo in todos if todo.category))


def is_overdue(todo: Todo, now: datetime, tz=None) -> bool:
    """Due date has started before ``now`` and the todo is still open"""
    if todo.completed or todo.due_date is None:
        return False
    return start_of_day(todo.due_date, tz) < to_local(now, tz)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_analytics(todos: Sequence[Todo], now: Optional[datetime] = None,
                      tz=None, week_start: int = 6) -> TodoAnalytics:
    now = to_local(now, tz) if now else local_now(tz)
    today = now.date()
    week_start_day = start_of_week(today, week_start)

    def local_date(dt: datetime):
        return to_local(dt, tz).date()

    def is_today(dt: datetime) -> bool:
        return local_date(dt) == today

    def is_this_week(dt: datetime) -> bool:
        return 0 <= (local_date(dt) - week_start_day).days < 7

    def is_this_month(dt: datetime) -> bool:
        day = local_date(dt)
        return (day.year, day.month) == (today.year, today.month)

    total = len(todos)
    completed = sum(1 for t in todos if t.completed)
    completion_rate = _round_half_up(completed / total * 100) if total else 0

    priorities = PriorityCounts(
        low=sum(1 for t in todos if t.priority == Priority.LOW),
        medium=sum(1 for t in todos if t.priority == Priority.MEDIUM),
        high=sum(1 for t in todos if t.priority == Priority.HIGH),
    )

    recent_completions = sum(1 for t in todos if t.completed and is_this_week(t.updated_at))
    productivity_score = min(100, _round_half_up(completion_rate * 0.7 + recent_completions * 5))

    categories: Dict[str, int] = {}
    for todo in todos:
        if todo.category:
            categories[todo.category] = categories.get(todo.category, 0) + 1

    return TodoAnalytics(
        total=total,
        completed=completed,
        pending=total - completed,
        completion_rate=completion_rate,
        overdue=sum(1 for t in todos if is_overdue(t, now, tz)),
        priorities=priorities,
        created_today=sum(1 for t in todos if is_today(t.created_at)),
        created_this_week=sum(1 for t in todos if is_this_week(t.created_at)),
        created_this_month=sum(1 for t in todos if is_this_month(t.created_at)),
        completed_today=sum(1 for t in todos if t.completed and is_today(t.updated_at)),
        recent_completions=recent_completions,
        productivity_score=productivity_score,
        categories=categories,
    )


@dataclass(frozen=True)
class TodoSnapshot:
    """Immutable record set; changes produce a new snapshot"""

    todos: Tuple[Todo, ...] = field(default_factory=tuple)

    @classmethod
    def from_records(cls, records: Iterable[Union[Todo, Mapping[str, Any]]]) -> "TodoSnapshot":
        return cls(tuple(as_todo(record) for record in records))

    def with_added(self, todo: Todo) -> "TodoSnapshot":
        # Newest first, like the list endpoint
        return TodoSnapshot((todo,) + self.todos)

    def with_replaced(self, todo: Todo) -> "TodoSnapshot":
        return TodoSnapshot(tuple(todo if t.id == todo.id else t for t in self.todos))

    def without(self, todo_id: str) -> "TodoSnapshot":
        return TodoSnapshot(tuple(t for t in self.todos if t.id != todo_id))

    def project(self, criteria: Optional[TodoFilter] = None, now: Optional[datetime] = None,
                tz=None, week_start: int = 6) -> TodoView:
        return TodoView(
            todos=filter_todos(self.todos, criteria),
            categories=list_categories(self.todos),
            analytics=compute_analytics(self.todos, now=now, tz=tz, week_start=week_start),
        )
