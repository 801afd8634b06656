from pathlib import Path

from streamlit.testing.v1 import AppTest

from todo_dashboard.auth import STATE_KEY
from todo_dashboard.models import Role, TodoPage, User
from todo_dashboard.runtime import CLIENT_KEY
from todo_dashboard.session_store import MemorySessionStore
from todo_dashboard.views import compute_stats

from conftest import FIXED_NOW, make_todo


PAGE = Path(__file__).resolve().parents[1] / "pages" / "1_Todo_Dashboard.py"
ALICE = User(id="u1", email="alice@x.com", name="Alice", role=Role.USER)
ADMIN = User(id="u0", email="admin@x.com", name="Ada", role=Role.ADMIN)


class PageClient:
    def __init__(self, user=ALICE, todos=None):
        self.user = user
        self.store = MemorySessionStore()
        self.store.set_token("tok")
        self.todos = todos if todos is not None else [make_todo("t1", title="Buy milk")]
        self.get_todos_calls = 0

    def get_current_user(self):
        return self.user

    def get_all_users(self):
        return [ALICE, self.user]

    def get_todos(self, filters=None):
        self.get_todos_calls += 1
        return TodoPage(todos=list(self.todos), total=len(self.todos))

    def get_stats(self):
        return compute_stats(self.todos, FIXED_NOW)

    def logout(self):
        self.store.clear()


def _page(client):
    at = AppTest.from_file(str(PAGE), default_timeout=30)
    at.session_state[CLIENT_KEY] = client
    return at


def test_page_loads_todos_once_per_filter():
    client = PageClient()
    at = _page(client).run()
    assert not at.exception
    assert client.get_todos_calls == 1
    at.run()
    assert client.get_todos_calls == 1


def test_signing_back_in_reloads_the_list():
    client = PageClient()
    at = _page(client).run()
    assert [t.id for t in at.session_state[STATE_KEY].todos] == ["t1"]

    at.button(key="sign-out").click().run()
    assert client.store.get_token() is None
    assert at.session_state[STATE_KEY].todos == []

    client.store.set_token("tok")
    at.run()
    assert not at.exception
    assert client.get_todos_calls == 2
    assert [t.id for t in at.session_state[STATE_KEY].todos] == ["t1"]


def test_assignment_rows_offer_only_edit_and_delete():
    client = PageClient(ADMIN, [
        make_todo("mine", title="Plan sprint"),
        make_todo("theirs", title="Fix login", assigned_to="alice@x.com"),
    ])
    at = _page(client).run()
    assert not at.exception
    keys = {b.key for b in at.button}
    assert "list-mine-complete" in keys and "list-mine-toggle" in keys
    assert "assignments-theirs-delete" in keys
    assert "assignments-theirs-complete" not in keys
    assert "assignments-theirs-toggle" not in keys
