"""Role-aware tab visibility, filtering and derived statistics.

Everything here is a pure function of the loaded todo list, so the page
script only wires widgets to these helpers.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from todo_dashboard.models import ALL, Category, Priority, Role, Status, Todo, TodoStats, User


Predicate = Callable[[Todo], bool]

SECONDS_PER_DAY = 24 * 60 * 60
SOON_DAYS = 3


class Tab(str, Enum):
    CREATE = "create"
    LIST = "list"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ASSIGNMENTS = "assignments"
    ANALYTICS = "analytics"


TAB_LABELS: Dict[Tab, str] = {
    Tab.CREATE: "➕ Create",
    Tab.LIST: "📋 List",
    Tab.IN_PROGRESS: "⏳ In Progress",
    Tab.COMPLETED: "✅ Completed",
    Tab.ASSIGNMENTS: "👥 Assigned Tasks",
    Tab.ANALYTICS: "📊 Analytics",
}

ROLE_TABS: Dict[Role, List[Tab]] = {
    Role.ADMIN: [Tab.CREATE, Tab.LIST, Tab.ASSIGNMENTS, Tab.ANALYTICS],
    Role.USER: [Tab.LIST, Tab.IN_PROGRESS, Tab.COMPLETED, Tab.ANALYTICS],
}

# Status shown by each of a regular user's work tabs.
USER_TAB_STATUS: Dict[Tab, Status] = {
    Tab.LIST: Status.PENDING,
    Tab.IN_PROGRESS: Status.IN_PROCESS,
    Tab.COMPLETED: Status.COMPLETED,
}


def tabs_for_role(role: Role) -> List[Tab]:
    return list(ROLE_TABS[Role(role)])


def tab_label(tab: Tab) -> str:
    return TAB_LABELS[Tab(tab)]


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


def _is_own(todo: Todo, email: str) -> bool:
    """Personal, or assigned to ``email``."""
    return todo.is_personal or todo.assigned_to == email


def is_visible_to(todo: Todo, user: User) -> bool:
    if user.is_admin:
        return True
    return _is_own(todo, user.email)


def tab_predicate(role: Role, tab: Tab, email: str) -> Predicate:
    """Map (role, tab) to the predicate deciding which todos the tab lists."""
    role = Role(role)
    tab = Tab(tab)

    if role == Role.USER:
        wanted = USER_TAB_STATUS.get(tab)
        if wanted is not None:
            return lambda t: t.status == wanted and _is_own(t, email)
        return lambda t: _is_own(t, email)

    if tab in (Tab.CREATE, Tab.LIST):
        return lambda t: _is_own(t, email)
    if tab == Tab.ASSIGNMENTS:
        return lambda t: bool(t.assigned_to) and t.assigned_to != email
    return lambda t: True


def filter_todos(
    todos: Iterable[Todo],
    user: User,
    tab: Tab,
    status: Optional[str] = ALL,
    category: Optional[str] = ALL,
) -> List[Todo]:
    visible = tab_predicate(user.role, tab, user.email)
    out: List[Todo] = []
    for todo in todos:
        if status not in (None, ALL) and todo.status != status:
            continue
        if category not in (None, ALL) and todo.category != category:
            continue
        if visible(todo):
            out.append(todo)
    return out


def can_delete(todo: Todo, user: User) -> bool:
    return user.is_admin or todo.is_personal


def toggle_target(status: Status) -> Optional[Status]:
    """Start/pause target for the list buttons; None once completed."""
    status = Status(status)
    if status == Status.PENDING:
        return Status.IN_PROCESS
    if status == Status.IN_PROCESS:
        return Status.PENDING
    return None


# ---------------------------------------------------------------------------
# Due dates
# ---------------------------------------------------------------------------


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _due_instant(due: date) -> datetime:
    if isinstance(due, datetime):
        return due if due.tzinfo else due.replace(tzinfo=timezone.utc)
    return datetime(due.year, due.month, due.day, tzinfo=timezone.utc)


def remaining_days(due: Optional[date], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days until ``due``: negative overdue, 0 due today, positive ahead."""
    if due is None:
        return None
    delta = (_due_instant(due) - _now(now)).total_seconds()
    return int(math.ceil(delta / SECONDS_PER_DAY))


def describe_remaining(days: Optional[int]) -> str:
    if days is None:
        return "No due date"
    if days < 0:
        return f"{abs(days)} days overdue"
    if days == 0:
        return "Due today"
    return f"{days} days left"


def urgency(days: Optional[int]) -> Optional[str]:
    if days is None:
        return None
    if days < 0:
        return "overdue"
    if days <= SOON_DAYS:
        return "soon"
    return "ok"


def is_overdue(todo: Todo, now: Optional[datetime] = None) -> bool:
    if todo.due_date is None or todo.is_completed:
        return False
    return _due_instant(todo.due_date) < _now(now)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


def compute_stats(todos: Iterable[Todo], now: Optional[datetime] = None) -> TodoStats:
    todos = list(todos)
    at = _now(now)
    return TodoStats(
        total=len(todos),
        completed=sum(1 for t in todos if t.status == Status.COMPLETED),
        pending=sum(1 for t in todos if t.status == Status.PENDING),
        in_process=sum(1 for t in todos if t.status == Status.IN_PROCESS),
        overdue=sum(1 for t in todos if is_overdue(t, at)),
        categories={c.value: sum(1 for t in todos if t.category == c) for c in Category},
        priorities={p.value: sum(1 for t in todos if t.priority == p) for p in Priority},
    )


def stats_for_user(todos: Iterable[Todo], user: User, now: Optional[datetime] = None) -> TodoStats:
    """Stats cards: admins count everything loaded, users only what they can see."""
    return compute_stats((t for t in todos if is_visible_to(t, user)), now)


def assignment_split(todos: Iterable[Todo], user: User) -> Dict[str, int]:
    assigned = personal = 0
    for t in todos:
        if t.assigned_to and t.assigned_to != user.email:
            assigned += 1
        else:
            personal += 1
    return {"assigned": assigned, "personal": personal}
