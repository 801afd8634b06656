from __future__ import annotations

import logging
from typing import Any, MutableMapping, Optional

from todo_dashboard.exceptions import ApiError, ValidationError
from todo_dashboard.models import User


logger = logging.getLogger(__name__)

LOGGED_IN_KEY = "logged_in"
USER_KEY = "current_user"
STATE_KEY = "todo_state"
# per-user page data dropped on sign-out
SCRATCH_KEYS = ("selected_todos", "assignable_users")


def is_logged_in(session_state: MutableMapping[str, Any]) -> bool:
    return bool(session_state.get(LOGGED_IN_KEY, False)) and session_state.get(USER_KEY) is not None


def set_login_state(session_state: MutableMapping[str, Any], user: Optional[User]) -> None:
    session_state[LOGGED_IN_KEY] = user is not None
    session_state[USER_KEY] = user


def current_user(session_state: MutableMapping[str, Any]) -> Optional[User]:
    return session_state.get(USER_KEY) if is_logged_in(session_state) else None


def sign_in(session_state: MutableMapping[str, Any], client: Any, email: str, password: str) -> User:
    if not (email or "").strip() or not password:
        raise ValidationError("Email and password are required")
    result = client.login(email.strip(), password)
    set_login_state(session_state, result.user)
    return result.user


def sign_up(session_state: MutableMapping[str, Any], client: Any, name: str, email: str, password: str) -> User:
    if not (name or "").strip() or not (email or "").strip() or not password:
        raise ValidationError("Name, email and password are required")
    result = client.register(name.strip(), email.strip(), password)
    set_login_state(session_state, result.user)
    return result.user


def sign_out(session_state: MutableMapping[str, Any], client: Any) -> None:
    client.logout()
    state = session_state.get(STATE_KEY)
    if state is not None:
        state.clear()
    for key in SCRATCH_KEYS:
        session_state.pop(key, None)
    set_login_state(session_state, None)


def restore_session(session_state: MutableMapping[str, Any], client: Any) -> Optional[User]:
    """Rebuild login state from a stored token; drop the token if the API rejects it."""
    if is_logged_in(session_state):
        return current_user(session_state)
    if not client.store.get_token():
        return None
    try:
        user = client.get_current_user()
    except ApiError as exc:
        if exc.status_code in (401, 403):
            logger.info("Stored session is no longer valid; clearing it")
            client.store.clear()
            return None
        fallback = client.store.get_user()
        if fallback is None:
            raise
        logger.warning("Could not verify stored session (%s); using cached profile", exc)
        user = fallback
    set_login_state(session_state, user)
    return user
