"""Per-browser-session wiring of config, session store, API client and state."""

from __future__ import annotations

from typing import Any, MutableMapping, Optional

from todo_dashboard.api_client import TodoApiClient
from todo_dashboard.auth import STATE_KEY
from todo_dashboard.config import DashboardConfig, configure_logging, get_config
from todo_dashboard.session_store import MemorySessionStore, SessionStore, SqlSessionStore
from todo_dashboard.todo_state import TodoState


CLIENT_KEY = "todo_api_client"


def build_store(config: DashboardConfig, session_state: MutableMapping[str, Any]) -> SessionStore:
    if config.session_backend == "sql" and config.session_database_url:
        return SqlSessionStore(config.session_database_url)
    return MemorySessionStore(session_state)


def get_client(
    session_state: MutableMapping[str, Any],
    config: Optional[DashboardConfig] = None,
) -> TodoApiClient:
    client = session_state.get(CLIENT_KEY)
    if client is None:
        config = config or get_config()
        configure_logging(config.log_level)
        client = TodoApiClient(
            base_url=config.api_base_url,
            store=build_store(config, session_state),
            timeout_seconds=config.timeout_seconds,
            verify_ssl=config.verify_ssl,
        )
        session_state[CLIENT_KEY] = client
    return client


def get_todo_state(session_state: MutableMapping[str, Any], client: Optional[TodoApiClient] = None) -> TodoState:
    state = session_state.get(STATE_KEY)
    if state is None:
        state = TodoState(client or get_client(session_state))
        session_state[STATE_KEY] = state
    return state
