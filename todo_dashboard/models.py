"""Typed records for the todo API contract.

The enums inherit from ``str`` so their values compare directly against the
plain strings the API returns. Every ``from_dict`` rejects payloads that do
not fit the contract with :class:`~todo_dashboard.exceptions.ValidationError`,
so malformed server data never reaches the session state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

import pandas as pd

from todo_dashboard.exceptions import ValidationError


E = TypeVar("E", bound=Enum)

ALL = "all"


class Category(str, Enum):
    PERSONAL = "Personal"
    WORK = "Work"
    SHOPPING = "Shopping"
    HEALTH = "Health"
    OTHER = "Other"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Status(str, Enum):
    PENDING = "pending"
    IN_PROCESS = "in-process"
    COMPLETED = "completed"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


# Completed is terminal; pause/resume flips between pending and in-process.
ALLOWED_TRANSITIONS: Dict[Status, frozenset] = {
    Status.PENDING: frozenset({Status.IN_PROCESS, Status.COMPLETED}),
    Status.IN_PROCESS: frozenset({Status.PENDING, Status.COMPLETED}),
    Status.COMPLETED: frozenset(),
}


def can_transition(current: Status, target: Status) -> bool:
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(Status(current), frozenset())


# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------


def _coerce_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name} {value!r}; expected one of: {allowed}") from None


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def parse_datetime(value: Any, field_name: str = "timestamp") -> Optional[datetime]:
    """Parse an ISO-ish timestamp into an aware UTC datetime.

    Naive values are taken as UTC, matching how the API serialises dates.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        raw = str(value).strip()
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            ts = pd.to_datetime(raw, errors="coerce", utc=True)
            if pd.isna(ts):
                raise ValidationError(f"Invalid {field_name} {value!r}") from None
            parsed = ts.to_pydatetime()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: Any, field_name: str = "date") -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_datetime(value, field_name)
    return parsed.date() if parsed else None


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class User:
    id: str
    email: str
    name: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "User":
        if not isinstance(payload, Mapping):
            raise ValidationError("User payload must be an object")
        user_id = _opt_str(payload.get("id") or payload.get("_id"))
        email = _opt_str(payload.get("email"))
        if not user_id or not email:
            raise ValidationError("User payload requires 'id' and 'email'")
        return cls(
            id=user_id,
            email=email,
            name=_opt_str(payload.get("name")) or email,
            role=_coerce_enum(Role, payload.get("role") or Role.USER.value, "role"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "name": self.name, "role": self.role.value}


@dataclass(frozen=True)
class Todo:
    id: str
    title: str
    category: Category
    priority: Priority
    status: Status
    created_at: datetime
    description: Optional[str] = None
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None
    completion_note: Optional[str] = None
    completed_at: Optional[datetime] = None

    @property
    def is_personal(self) -> bool:
        return not self.assigned_to

    @property
    def is_completed(self) -> bool:
        return self.status == Status.COMPLETED

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Todo":
        if not isinstance(payload, Mapping):
            raise ValidationError("Todo payload must be an object")
        todo_id = _opt_str(payload.get("id") or payload.get("_id"))
        title = _opt_str(payload.get("title"))
        if not todo_id:
            raise ValidationError("Todo payload is missing 'id'")
        if not title:
            raise ValidationError(f"Todo {todo_id} has an empty title")
        created_at = parse_datetime(payload.get("createdAt"), "createdAt")
        if created_at is None:
            raise ValidationError(f"Todo {todo_id} is missing 'createdAt'")
        return cls(
            id=todo_id,
            title=title,
            description=_opt_str(payload.get("description")),
            category=_coerce_enum(Category, payload.get("category"), "category"),
            priority=_coerce_enum(Priority, payload.get("priority"), "priority"),
            status=_coerce_enum(Status, payload.get("status") or Status.PENDING.value, "status"),
            due_date=parse_date(payload.get("dueDate"), "dueDate"),
            assigned_to=_opt_str(payload.get("assignedTo")),
            completion_note=_opt_str(payload.get("completionNote")),
            created_at=created_at,
            completed_at=parse_datetime(payload.get("completedAt"), "completedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "assignedTo": self.assigned_to,
            "completionNote": self.completion_note,
            "createdAt": _iso(self.created_at),
            "completedAt": _iso(self.completed_at),
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class NewTodo:
    """Payload for POST /api/todos."""

    title: str
    category: Category = Category.PERSONAL
    priority: Priority = Priority.MEDIUM
    description: Optional[str] = None
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None

    def validate(self) -> None:
        if not (self.title or "").strip():
            raise ValidationError("Title is required")
        _coerce_enum(Category, self.category, "category")
        _coerce_enum(Priority, self.priority, "priority")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "title": self.title.strip(),
            "category": Category(self.category).value,
            "priority": Priority(self.priority).value,
        }
        if _opt_str(self.description):
            data["description"] = self.description.strip()
        if self.due_date:
            data["dueDate"] = self.due_date.isoformat()
        if _opt_str(self.assigned_to):
            data["assignedTo"] = self.assigned_to.strip()
        return data


COMPLETE_VIA_ENDPOINT = "Todos are completed with complete_todo, not a status update"

# snake_case field -> wire name for PUT /api/todos/{id}
PATCH_FIELDS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "category": "category",
    "priority": "priority",
    "status": "status",
    "due_date": "dueDate",
    "assigned_to": "assignedTo",
}


def encode_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a partial update and convert it to the wire shape."""
    out: Dict[str, Any] = {}
    for key, value in patch.items():
        wire = PATCH_FIELDS.get(key)
        if wire is None:
            raise ValidationError(f"Field {key!r} cannot be updated")
        if key == "title":
            if not _opt_str(value):
                raise ValidationError("Title is required")
            value = str(value).strip()
        elif key == "category":
            value = _coerce_enum(Category, value, "category").value
        elif key == "priority":
            value = _coerce_enum(Priority, value, "priority").value
        elif key == "status":
            status = _coerce_enum(Status, value, "status")
            if status == Status.COMPLETED:
                raise ValidationError(COMPLETE_VIA_ENDPOINT)
            value = status.value
        elif key == "due_date":
            parsed = parse_date(value, "dueDate")
            value = parsed.isoformat() if parsed else None
        elif key in ("description", "assigned_to"):
            value = "" if value is None else str(value).strip()
        out[wire] = value
    return out


@dataclass(frozen=True)
class TodoStats:
    total: int = 0
    completed: int = 0
    pending: int = 0
    in_process: int = 0
    overdue: int = 0
    categories: Dict[str, int] = field(default_factory=dict)
    priorities: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "TodoStats":
        return cls(
            categories={c.value: 0 for c in Category},
            priorities={p.value: 0 for p in Priority},
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TodoStats":
        if not isinstance(payload, Mapping):
            raise ValidationError("Stats payload must be an object")

        def _count(name: str, *aliases: str) -> int:
            for key in (name,) + aliases:
                if key in payload and payload[key] is not None:
                    try:
                        return int(payload[key])
                    except (TypeError, ValueError):
                        raise ValidationError(f"Stats field {key!r} is not a number") from None
            return 0

        def _counts(name: str) -> Dict[str, int]:
            raw = payload.get(name) or {}
            if not isinstance(raw, Mapping):
                raise ValidationError(f"Stats field {name!r} must be an object")
            try:
                return {str(k): int(v) for k, v in raw.items()}
            except (TypeError, ValueError):
                raise ValidationError(f"Stats field {name!r} has non-numeric counts") from None

        return cls(
            total=_count("total"),
            completed=_count("completed"),
            pending=_count("pending"),
            in_process=_count("inProcess", "in_process"),
            overdue=_count("overdue"),
            categories=_counts("categories"),
            priorities=_counts("priorities"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "pending": self.pending,
            "inProcess": self.in_process,
            "overdue": self.overdue,
            "categories": dict(self.categories),
            "priorities": dict(self.priorities),
        }


@dataclass(frozen=True)
class TodoFilters:
    """Partial server-side filter for GET /api/todos."""

    status: Optional[Status] = None
    category: Optional[Category] = None
    priority: Optional[Priority] = None
    overdue: Optional[bool] = None

    @classmethod
    def from_selection(
        cls,
        status: Optional[str] = ALL,
        category: Optional[str] = ALL,
        priority: Optional[str] = ALL,
        overdue: Optional[bool] = None,
    ) -> "TodoFilters":
        def _pick(enum_cls, value, name):
            if value is None or value == ALL:
                return None
            return _coerce_enum(enum_cls, value, name)

        return cls(
            status=_pick(Status, status, "status"),
            category=_pick(Category, category, "category"),
            priority=_pick(Priority, priority, "priority"),
            overdue=overdue,
        )

    def to_params(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.status is not None:
            params["status"] = Status(self.status).value
        if self.category is not None:
            params["category"] = Category(self.category).value
        if self.priority is not None:
            params["priority"] = Priority(self.priority).value
        if self.overdue is not None:
            params["overdue"] = "true" if self.overdue else "false"
        return params


@dataclass(frozen=True)
class TodoPage:
    todos: List[Todo]
    total: int


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: User


@dataclass(frozen=True)
class BulkDeleteResult:
    deleted_count: int
    message: str = ""
