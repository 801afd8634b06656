from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import quote

import requests

from todo_dashboard.exceptions import ApiError, AuthError, ServerUnreachableError, ValidationError
from todo_dashboard.models import (
    AuthResult,
    BulkDeleteResult,
    NewTodo,
    Todo,
    TodoFilters,
    TodoPage,
    TodoStats,
    User,
    encode_patch,
)
from todo_dashboard.session_store import SessionStore


logger = logging.getLogger(__name__)


def _todo_path(todo_id: str, suffix: str = "") -> str:
    if not str(todo_id or "").strip():
        raise ValidationError("Todo id is required")
    return f"/api/todos/{quote(str(todo_id), safe='')}{suffix}"


def _as_count(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Field {field!r} is not a number")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Field {field!r} is not a number") from None


class TodoApiClient:
    """Typed wrapper over the remote todo API.

    The bearer token is read from ``store`` on every call; ``login`` and
    ``register`` write it. Transport failures raise
    :class:`ServerUnreachableError`, non-2xx answers raise :class:`ApiError`
    (or :class:`AuthError` for the credential endpoints).
    """

    def __init__(
        self,
        *,
        base_url: str,
        store: SessionStore,
        timeout_seconds: float = 15.0,
        verify_ssl: bool = True,
        http_session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.store = store
        self.timeout_seconds = float(timeout_seconds)
        self.verify_ssl = bool(verify_ssl)
        self._session = http_session or requests.Session()

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        token = self.store.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        error_cls: type = ApiError,
    ) -> Any:
        method_u = (method or "GET").upper().strip()
        if not path.startswith("/"):
            path = "/" + path
        url = f"{self.base_url}{path}"

        try:
            resp = self._session.request(
                method_u,
                url,
                params=params or None,
                json=json_body,
                headers=self._build_headers(),
                verify=self.verify_ssl,
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as exc:
            logger.error("Network error on %s %s: %s", method_u, url, exc)
            raise ServerUnreachableError(endpoint=path, cause=exc) from exc

        logger.debug("API request %s %s -> %s", method_u, url, resp.status_code)

        parsed: Any = None
        if resp.content:
            try:
                parsed = resp.json()
            except ValueError:
                parsed = None

        if 200 <= int(resp.status_code) < 300:
            return parsed

        message = None
        if isinstance(parsed, dict):
            message = parsed.get("message") or parsed.get("error")
        if not message:
            message = f"HTTP {resp.status_code}"
        logger.warning("API error on %s %s: %s %s", method_u, path, resp.status_code, message)
        raise error_cls(str(message), int(resp.status_code), endpoint=path)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def _store_auth(self, payload: Any) -> AuthResult:
        if not isinstance(payload, dict) or not payload.get("token"):
            raise ValidationError("Authentication response is missing a token")
        result = AuthResult(token=str(payload["token"]), user=User.from_dict(payload.get("user") or {}))
        self.store.set_token(result.token)
        self.store.set_user(result.user)
        return result

    def login(self, email: str, password: str) -> AuthResult:
        payload = self.request(
            "POST",
            "/api/auth/login",
            json_body={"email": email, "password": password},
            error_cls=AuthError,
        )
        return self._store_auth(payload)

    def register(self, name: str, email: str, password: str) -> AuthResult:
        payload = self.request(
            "POST",
            "/api/auth/register",
            json_body={"name": name, "email": email, "password": password},
            error_cls=AuthError,
        )
        return self._store_auth(payload)

    def logout(self) -> None:
        """Sign out remotely (best effort) and always drop local credentials."""
        try:
            self.request("POST", "/api/auth/logout")
        except ApiError as exc:
            logger.warning("Remote logout failed, clearing local session anyway: %s", exc)
        finally:
            self.store.clear()

    def get_current_user(self) -> User:
        return User.from_dict(self.request("GET", "/api/auth/me"))

    def get_all_users(self) -> List[User]:
        payload = self.request("GET", "/api/auth/users")
        if isinstance(payload, dict):
            payload = payload.get("users")
        if not isinstance(payload, list):
            raise ValidationError("Users response must be a list")
        return [User.from_dict(u) for u in payload]

    # ------------------------------------------------------------------
    # Todos
    # ------------------------------------------------------------------

    def get_todos(self, filters: Union[TodoFilters, Mapping[str, Any], None] = None) -> TodoPage:
        if filters is None:
            filters = TodoFilters()
        elif not isinstance(filters, TodoFilters):
            filters = TodoFilters.from_selection(**dict(filters))
        payload = self.request("GET", "/api/todos", params=filters.to_params())
        if not isinstance(payload, dict) or not isinstance(payload.get("todos"), list):
            raise ValidationError("Todo list response must contain a 'todos' array")
        todos = [Todo.from_dict(t) for t in payload["todos"]]
        total = payload.get("total")
        return TodoPage(todos=todos, total=_as_count(total, "total") if total is not None else len(todos))

    def create_todo(self, new_todo: NewTodo) -> Todo:
        new_todo.validate()
        return Todo.from_dict(self.request("POST", "/api/todos", json_body=new_todo.to_dict()))

    def update_todo(self, todo_id: str, patch: Mapping[str, Any]) -> Todo:
        body = encode_patch(patch)
        return Todo.from_dict(self.request("PUT", _todo_path(todo_id), json_body=body))

    def delete_todo(self, todo_id: str) -> str:
        payload = self.request("DELETE", _todo_path(todo_id))
        if isinstance(payload, dict):
            return str(payload.get("message") or "")
        return ""

    def complete_todo(self, todo_id: str, completion_note: Optional[str] = None) -> Todo:
        body: Dict[str, Any] = {}
        if completion_note is not None and completion_note.strip():
            body["completionNote"] = completion_note.strip()
        return Todo.from_dict(self.request("PATCH", _todo_path(todo_id, "/complete"), json_body=body))

    def bulk_delete_todos(self, todo_ids: Iterable[str]) -> BulkDeleteResult:
        ids = [str(i) for i in todo_ids]
        payload = self.request("DELETE", "/api/todos/bulk", json_body={"todoIds": ids})
        if not isinstance(payload, dict):
            payload = {}
        # a 2xx means the rows are gone even when the count is unusable
        deleted = payload.get("deletedCount")
        try:
            deleted_count = len(ids) if deleted is None else _as_count(deleted, "deletedCount")
        except ValidationError:
            logger.warning("Bulk delete returned a malformed count %r; assuming %d", deleted, len(ids))
            deleted_count = len(ids)
        return BulkDeleteResult(deleted_count=deleted_count, message=str(payload.get("message") or ""))

    def get_stats(self) -> TodoStats:
        return TodoStats.from_dict(self.request("GET", "/api/todos/stats"))
