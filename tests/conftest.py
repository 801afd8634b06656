from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from todo_dashboard.exceptions import ApiError
from todo_dashboard.models import (
    BulkDeleteResult,
    Category,
    Priority,
    Role,
    Status,
    Todo,
    TodoPage,
    User,
)
from todo_dashboard.session_store import MemorySessionStore
from todo_dashboard.views import compute_stats


FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_todo(todo_id: str = "t1", **overrides) -> Todo:
    base = Todo(
        id=todo_id,
        title=f"Todo {todo_id}",
        category=Category.PERSONAL,
        priority=Priority.MEDIUM,
        status=Status.PENDING,
        created_at=datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc),
    )
    return replace(base, **overrides)


def todo_payload(todo_id: str = "t1", **overrides) -> Dict[str, Any]:
    data = {
        "id": todo_id,
        "title": f"Todo {todo_id}",
        "category": "Personal",
        "priority": "medium",
        "status": "pending",
        "createdAt": "2024-06-01T09:00:00.000Z",
    }
    data.update(overrides)
    return data


@pytest.fixture
def admin() -> User:
    return User(id="u-admin", email="admin@x.com", name="Ada Admin", role=Role.ADMIN)


@pytest.fixture
def member() -> User:
    return User(id="u-alice", email="alice@x.com", name="Alice", role=Role.USER)


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, raw: Optional[bytes] = None) -> None:
        self.status_code = status_code
        self._body = body
        if raw is not None:
            self.content = raw
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode("utf-8")
        self.headers = {"Content-Type": "application/json"}

    def json(self) -> Any:
        return json.loads(self.content.decode("utf-8"))


@pytest.fixture
def http_session() -> MagicMock:
    session = MagicMock()
    session.request.return_value = FakeResponse(200, {})
    return session


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


class FakeTodoApi:
    """In-memory stand-in for TodoApiClient used by state tests."""

    def __init__(self, todos: Optional[List[Todo]] = None) -> None:
        self.server: List[Todo] = list(todos or [])
        self.fail_with: Optional[Exception] = None
        self.fail_stats = False
        self.calls: List[tuple] = []
        self._seq = 100

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def get_todos(self, filters=None) -> TodoPage:
        self.calls.append(("get_todos", filters))
        self._maybe_fail()
        return TodoPage(todos=list(self.server), total=len(self.server))

    def get_stats(self):
        self.calls.append(("get_stats",))
        if self.fail_stats:
            raise ApiError("stats down", 500)
        return compute_stats(self.server, FIXED_NOW)

    def create_todo(self, new_todo) -> Todo:
        self.calls.append(("create_todo", new_todo))
        self._maybe_fail()
        self._seq += 1
        created = make_todo(
            f"t{self._seq}",
            title=new_todo.title.strip(),
            category=Category(new_todo.category),
            priority=Priority(new_todo.priority),
            description=new_todo.description,
            due_date=new_todo.due_date,
            assigned_to=new_todo.assigned_to,
        )
        self.server.insert(0, created)
        return created

    def _find(self, todo_id: str) -> Todo:
        for t in self.server:
            if t.id == todo_id:
                return t
        raise ApiError("Todo not found", 404)

    def update_todo(self, todo_id: str, patch) -> Todo:
        self.calls.append(("update_todo", todo_id, dict(patch)))
        self._maybe_fail()
        current = self._find(todo_id)
        changes = {k: v for k, v in patch.items()}
        if "status" in changes:
            changes["status"] = Status(changes["status"])
        updated = replace(current, **changes)
        self.server = [updated if t.id == todo_id else t for t in self.server]
        return updated

    def complete_todo(self, todo_id: str, completion_note=None) -> Todo:
        self.calls.append(("complete_todo", todo_id, completion_note))
        self._maybe_fail()
        current = self._find(todo_id)
        done = replace(current, status=Status.COMPLETED, completion_note=completion_note, completed_at=FIXED_NOW)
        self.server = [done if t.id == todo_id else t for t in self.server]
        return done

    def delete_todo(self, todo_id: str) -> str:
        self.calls.append(("delete_todo", todo_id))
        self._maybe_fail()
        self._find(todo_id)
        self.server = [t for t in self.server if t.id != todo_id]
        return "Todo deleted"

    def bulk_delete_todos(self, todo_ids) -> BulkDeleteResult:
        ids = list(todo_ids)
        self.calls.append(("bulk_delete_todos", ids))
        self._maybe_fail()
        before = len(self.server)
        self.server = [t for t in self.server if t.id not in set(ids)]
        return BulkDeleteResult(deleted_count=before - len(self.server), message="ok")


@pytest.fixture
def fake_api() -> FakeTodoApi:
    return FakeTodoApi([
        make_todo("t1", title="Buy milk", category=Category.SHOPPING),
        make_todo("t2", title="Write report", category=Category.WORK, status=Status.IN_PROCESS),
        make_todo("t3", title="Gym", category=Category.HEALTH, status=Status.COMPLETED, completed_at=FIXED_NOW),
    ])
