"""Per-session todo cache.

``TodoState`` owns the loaded todo list and the stats snapshot for the
signed-in user. Local data only changes after the API acknowledges a
mutation, so a failed call leaves ``todos`` exactly as it was. Mutations
record a readable message in ``error`` and re-raise, which lets the page
keep a form or dialog open.

Two overlapping mutations on the same todo are not sequenced: whichever
response arrives last is what the cache shows.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from todo_dashboard.exceptions import TodoDashboardError, ValidationError
from todo_dashboard.models import (
    COMPLETE_VIA_ENDPOINT,
    NewTodo,
    Status,
    Todo,
    TodoFilters,
    TodoStats,
    can_transition,
)


logger = logging.getLogger(__name__)


class TodoState:
    def __init__(self, api: Any) -> None:
        self.api = api
        self.todos: List[Todo] = []
        self.stats: Optional[TodoStats] = None
        self.loading = False
        self.error: Optional[str] = None
        # filter selection the current list was loaded for
        self.loaded_key: Optional[Any] = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_todos(self, filters: Union[TodoFilters, Mapping[str, Any], None] = None) -> None:
        """Replace the local list with the server's filtered result.

        Failures are recorded in ``error`` and keep the previous list.
        """
        self.loading = True
        self.error = None
        try:
            page = self.api.get_todos(filters)
            self.todos = list(page.todos)
        except TodoDashboardError as exc:
            self.error = str(exc) or "Failed to fetch todos"
            logger.warning("Failed to fetch todos: %s", exc)
        finally:
            self.loading = False

    def fetch_stats(self) -> None:
        try:
            self.stats = self.api.get_stats()
        except TodoDashboardError as exc:
            logger.warning("Failed to fetch stats: %s", exc)

    def refresh(self, filters: Union[TodoFilters, Mapping[str, Any], None] = None) -> None:
        self.fetch_todos(filters)
        self.fetch_stats()

    def ensure_loaded(self, key: Any, filters: Union[TodoFilters, Mapping[str, Any], None] = None,
                      force: bool = False) -> bool:
        """Refresh unless the list was already loaded for ``key``. Returns True when it fetched."""
        if not force and self.loaded_key is not None and self.loaded_key == key:
            return False
        self.refresh(filters)
        self.loaded_key = key
        return True

    def get(self, todo_id: str) -> Optional[Todo]:
        for todo in self.todos:
            if todo.id == todo_id:
                return todo
        return None

    def clear(self) -> None:
        self.todos = []
        self.stats = None
        self.loading = False
        self.error = None
        self.loaded_key = None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _fail(self, exc: TodoDashboardError, fallback: str) -> None:
        self.error = str(exc) or fallback
        logger.warning("%s: %s", fallback, exc)

    def create_todo(self, new_todo: NewTodo) -> Todo:
        self.error = None
        try:
            new_todo.validate()
            created = self.api.create_todo(new_todo)
        except TodoDashboardError as exc:
            self._fail(exc, "Failed to create todo")
            raise
        self.todos = [created] + self.todos
        self.fetch_stats()
        return created

    def update_todo(self, todo_id: str, patch: Mapping[str, Any]) -> Todo:
        self.error = None
        try:
            if "status" in patch:
                self._check_transition(todo_id, patch["status"])
            updated = self.api.update_todo(todo_id, patch)
        except TodoDashboardError as exc:
            self._fail(exc, "Failed to update todo")
            raise
        self._replace(todo_id, updated)
        self.fetch_stats()
        return updated

    def set_in_progress(self, todo_id: str, in_progress: bool = True) -> Todo:
        target = Status.IN_PROCESS if in_progress else Status.PENDING
        return self.update_todo(todo_id, {"status": target})

    def complete_todo(self, todo_id: str, completion_note: Optional[str] = None) -> Todo:
        self.error = None
        try:
            current = self.get(todo_id)
            if current is not None and current.is_completed:
                raise ValidationError(f"'{current.title}' is already completed")
            completed = self.api.complete_todo(todo_id, completion_note)
        except TodoDashboardError as exc:
            self._fail(exc, "Failed to complete todo")
            raise
        self._replace(todo_id, completed)
        self.fetch_stats()
        return completed

    def delete_todo(self, todo_id: str) -> None:
        self.error = None
        try:
            self.api.delete_todo(todo_id)
        except TodoDashboardError as exc:
            self._fail(exc, "Failed to delete todo")
            raise
        self.todos = [t for t in self.todos if t.id != todo_id]
        self.fetch_stats()

    def bulk_delete_todos(self, todo_ids: Iterable[str]) -> int:
        ids = list(dict.fromkeys(todo_ids))
        if not ids:
            return 0
        self.error = None
        try:
            result = self.api.bulk_delete_todos(ids)
        except TodoDashboardError as exc:
            self._fail(exc, "Failed to delete todos")
            raise
        doomed = set(ids)
        self.todos = [t for t in self.todos if t.id not in doomed]
        self.fetch_stats()
        return result.deleted_count

    # ------------------------------------------------------------------

    def _check_transition(self, todo_id: str, target: Any) -> None:
        try:
            target_status = Status(target)
        except ValueError:
            raise ValidationError(f"Invalid status {target!r}") from None
        if target_status == Status.COMPLETED:
            raise ValidationError(COMPLETE_VIA_ENDPOINT)
        current = self.get(todo_id)
        if current is None:
            return
        if not can_transition(current.status, target_status):
            raise ValidationError(
                f"Cannot move '{current.title}' from {current.status.value} to {target_status.value}"
            )

    def _replace(self, todo_id: str, replacement: Todo) -> None:
        self.todos = [replacement if t.id == todo_id else t for t in self.todos]
