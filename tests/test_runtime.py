from todo_dashboard import runtime
from todo_dashboard.api_client import TodoApiClient
from todo_dashboard.config import DashboardConfig
from todo_dashboard.session_store import MemorySessionStore, SqlSessionStore
from todo_dashboard.todo_state import TodoState


def _config(**overrides):
    values = dict(
        api_base_url="http://api.test",
        timeout_seconds=3.0,
        verify_ssl=False,
        session_backend="memory",
        session_database_url=None,
        log_level="INFO",
    )
    values.update(overrides)
    return DashboardConfig(**values)


def test_client_and_state_are_built_once_per_session():
    session = {}
    client = runtime.get_client(session, _config())
    assert isinstance(client, TodoApiClient)
    assert client.base_url == "http://api.test"
    assert isinstance(client.store, MemorySessionStore)
    assert runtime.get_client(session) is client

    state = runtime.get_todo_state(session)
    assert isinstance(state, TodoState)
    assert state.api is client
    assert runtime.get_todo_state(session) is state


def test_memory_store_writes_into_session_state():
    session = {}
    client = runtime.get_client(session, _config())
    client.store.set_token("tok")
    assert session["todo_dashboard.token"] == "tok"


def test_sql_backend(tmp_path):
    url = f"sqlite:///{(tmp_path / 's.db').as_posix()}"
    store = runtime.build_store(_config(session_backend="sql", session_database_url=url), {})
    assert isinstance(store, SqlSessionStore)
    store.dispose()
