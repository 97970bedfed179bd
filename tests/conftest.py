import os

os.environ.setdefault("ENVIRONMENT", "testing")

from datetime import datetime
from typing import Optional

import pytest
import pytz
from fastapi.testclient import TestClient

from taskboard.app import app
from taskboard.core.service import TodoService
from taskboard.core.store import TodoStore
from taskboard.dependencies import get_todo_service, get_todo_service_if_ready
from taskboard.models import Todo


@pytest.fixture
def store(tmp_path):
    return TodoStore(tmp_path / "todos.json")


@pytest.fixture
def service(store):
    return TodoService(store)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_todo_service] = lambda: service
    app.dependency_overrides[get_todo_service_if_ready] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def utc(*args) -> datetime:
    return pytz.utc.localize(datetime(*args))


_counter = 0


def make_todo(title: str = "Task", description: str = "Details", completed: bool = False,
              priority: str = "medium", category: Optional[str] = None, due_date=None,
              created_at: Optional[datetime] = None, updated_at: Optional[datetime] = None,
              todo_id: Optional[str] = None) -> Todo:
    global _counter
    _counter += 1
    created_at = created_at or utc(2024, 5, 1, 9, 0)
    return Todo(
        id=todo_id or f"{_counter:032x}",
        title=title,
        description=description,
        completed=completed,
        priority=priority,
        category=category,
        due_date=due_date,
        created_at=created_at,
        updated_at=updated_at or created_at,
    )
