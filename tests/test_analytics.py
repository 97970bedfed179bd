from datetime import date

import pytz

from taskboard.core.analytics import (
    TodoFilter, TodoSnapshot, compute_analytics, filter_todos, is_overdue, list_categories,
)
from taskboard.models import StatusFilter

from conftest import make_todo, utc

NOW = utc(2024, 5, 15, 12, 0)  # Wednesday


def _sample():
    return [
        make_todo(title="Write report", description="Quarterly numbers", priority="high", category="work"),
        make_todo(title="Groceries", description="Milk and BREAD", completed=True, priority="low", category="home"),
        make_todo(title="Call mom", description="Sunday call", priority="medium"),
        make_todo(title="Fix bike", description="Report flat tire", completed=True, priority="high", category="home"),
    ]


def test_default_filter_returns_everything_in_order():
    todos = _sample()
    assert filter_todos(todos, TodoFilter()) == todos
    assert filter_todos(todos) == todos


def test_search_is_case_insensitive_over_title_and_description():
    todos = _sample()
    result = filter_todos(todos, TodoFilter(search="REPORT"))
    assert [t.title for t in result] == ["Write report", "Fix bike"]

    result = filter_todos(todos, TodoFilter(search="bread"))
    assert [t.title for t in result] == ["Groceries"]


def test_status_priority_and_category_combine():
    todos = _sample()
    assert [t.title for t in filter_todos(todos, TodoFilter(status=StatusFilter.PENDING))] == [
        "Write report", "Call mom"]
    assert [t.title for t in filter_todos(todos, TodoFilter(status="completed"))] == [
        "Groceries", "Fix bike"]

    criteria = TodoFilter(status=StatusFilter.COMPLETED, priority="high", category="home")
    assert [t.title for t in filter_todos(todos, criteria)] == ["Fix bike"]

    assert filter_todos(todos, TodoFilter(category="garden")) == []


def test_filter_is_idempotent():
    todos = _sample()
    criteria = TodoFilter(search="o", status=StatusFilter.PENDING)
    once = filter_todos(todos, criteria)
    assert filter_todos(once, criteria) == once


def test_list_categories_keeps_first_seen_order():
    assert list_categories(_sample()) == ["work", "home"]


def test_overdue_requires_past_due_date_and_open_todo():
    assert is_overdue(make_todo(due_date=date(2000, 1, 1)), NOW)
    assert not is_overdue(make_todo(due_date=date(2000, 1, 1), completed=True), NOW)
    assert not is_overdue(make_todo(due_date=date(2024, 5, 16)), NOW)
    assert not is_overdue(make_todo(), NOW)
    # The due day counts from its first instant
    assert is_overdue(make_todo(due_date=date(2024, 5, 15)), NOW)
    assert not is_overdue(make_todo(due_date=date(2024, 5, 15)), utc(2024, 5, 15, 0, 0))


def test_empty_set_has_zero_rates():
    stats = compute_analytics([], now=NOW)
    assert stats.total == 0
    assert stats.completion_rate == 0
    assert stats.productivity_score == 0
    assert stats.categories == {}


def test_counts_and_histograms():
    todos = _sample() + [make_todo(due_date=date(2024, 5, 1), category="")]
    stats = compute_analytics(todos, now=NOW)

    assert stats.total == 5
    assert stats.completed == 2
    assert stats.pending == 3
    assert stats.completion_rate == 40
    assert stats.overdue == 1
    assert (stats.priorities.low, stats.priorities.medium, stats.priorities.high) == (1, 2, 2)
    assert stats.categories == {"work": 1, "home": 2}


def test_completion_rate_rounds_half_up():
    todos = [make_todo(completed=True)] + [make_todo() for _ in range(7)]
    assert compute_analytics(todos, now=NOW).completion_rate == 13


def test_calendar_buckets_use_week_start():
    todos = [
        make_todo(created_at=utc(2024, 5, 15, 8, 0)),   # today
        make_todo(created_at=utc(2024, 5, 12, 0, 30)),  # Sunday, this week
        make_todo(created_at=utc(2024, 5, 11, 23, 0)),  # Saturday, last week
        make_todo(created_at=utc(2024, 4, 30, 10, 0)),  # last month
    ]
    stats = compute_analytics(todos, now=NOW, week_start=6)
    assert stats.created_today == 1
    assert stats.created_this_week == 2
    assert stats.created_this_month == 3

    monday_weeks = compute_analytics(todos, now=NOW, week_start=0)
    assert monday_weeks.created_this_week == 1


def test_buckets_follow_local_timezone():
    tz = pytz.timezone("America/New_York")
    now = utc(2024, 5, 15, 2, 0)  # still May 14 in New York
    todo = make_todo(created_at=utc(2024, 5, 14, 23, 0))

    assert compute_analytics([todo], now=now, tz=tz).created_today == 1
    assert compute_analytics([todo], now=now).created_today == 0


def test_completed_today_and_productivity_score():
    todos = [
        make_todo(completed=True, updated_at=utc(2024, 5, 15, 9, 0)),
        make_todo(completed=False, updated_at=utc(2024, 5, 15, 9, 0)),
    ]
    stats = compute_analytics(todos, now=NOW)
    assert stats.completed_today == 1
    assert stats.recent_completions == 1
    assert stats.productivity_score == 40  # 50 * 0.7 + 1 * 5


def test_productivity_score_is_clamped():
    todos = [make_todo(completed=True, updated_at=utc(2024, 5, 14, 9, 0)) for _ in range(10)]
    stats = compute_analytics(todos, now=NOW)
    assert stats.completion_rate == 100
    assert stats.productivity_score == 100


def test_old_completions_do_not_count_as_recent():
    todos = [make_todo(completed=True, updated_at=utc(2024, 4, 1, 9, 0))]
    stats = compute_analytics(todos, now=NOW)
    assert stats.recent_completions == 0
    assert stats.productivity_score == 70


def test_snapshot_changes_return_new_snapshots():
    first, second = make_todo(title="one"), make_todo(title="two")
    snapshot = TodoSnapshot.from_records([first])

    grown = snapshot.with_added(second)
    assert [t.title for t in grown.todos] == ["two", "one"]
    assert [t.title for t in snapshot.todos] == ["one"]

    done = first.model_copy(update={"completed": True})
    replaced = grown.with_replaced(done)
    assert replaced.todos[1].completed is True
    assert grown.todos[1].completed is False

    assert [t.title for t in replaced.without(second.id).todos] == ["one"]


def test_snapshot_projection():
    records = [t.to_wire() for t in _sample()]
    view = TodoSnapshot.from_records(records).project(TodoFilter(category="home"), now=NOW)

    assert [t.title for t in view.todos] == ["Groceries", "Fix bike"]
    assert view.categories == ["work", "home"]
    assert view.analytics.total == 4
