import streamlit as st
from datetime import date

from todo_dashboard import analytics, views
from todo_dashboard.auth_ui import render_user_sidebar, require_login
from todo_dashboard.exceptions import TodoDashboardError
from todo_dashboard.models import ALL, Category, NewTodo, Priority, Status, TodoFilters
from todo_dashboard.runtime import get_client, get_todo_state
from todo_dashboard.theme import (
    assignee_badge,
    kpi_block,
    priority_badge,
    remaining_html,
    set_theme,
    status_badge,
)

set_theme(page_title="Todo Dashboard", page_icon="📋")

client = get_client(st.session_state)
user = require_login(client)
render_user_sidebar(client, user)
state = get_todo_state(st.session_state, client)

st.title("📋 Todo Dashboard")
st.caption(f"Welcome, {user.name}")

CATEGORIES = [c.value for c in Category]
PRIORITIES = [p.value for p in Priority]
STATUSES = [s.value for s in Status]

if "selected_todos" not in st.session_state:
    st.session_state.selected_todos = set()

# ----- Sidebar filters -----
with st.sidebar:
    st.header("🔎 Filters")
    status_filter = st.selectbox("Status", [ALL] + STATUSES, key="status-filter")
    category_filter = st.selectbox("Category", [ALL] + CATEGORIES, key="category-filter")
    refresh = st.button("🔄 Refresh", width="stretch")

# ----- Load (only when the server-side filter changes or on demand) -----
with st.spinner("Loading todos..."):
    state.ensure_loaded(
        (user.id, status_filter, category_filter),
        TodoFilters.from_selection(status_filter, category_filter),
        force=refresh,
    )

if user.is_admin and "assignable_users" not in st.session_state:
    try:
        st.session_state.assignable_users = [u.email for u in client.get_all_users()]
    except TodoDashboardError as exc:
        st.warning(f"Could not load users for assignment: {exc}")
        st.session_state.assignable_users = []

if state.error:
    st.error(state.error)


# ----- Actions -----
def _run(action, success_msg=None):
    try:
        action()
    except TodoDashboardError:
        # state.error already holds the message; keep the current widgets open
        return False
    if success_msg:
        st.toast(success_msg)
    return True


@st.dialog("Complete todo")
def complete_dialog(todo_id: str, title: str):
    st.markdown(f"**{title}**")
    note = st.text_area("Completion note (optional)", key=f"complete-note-{todo_id}")
    c1, c2 = st.columns(2)
    with c1:
        if st.button("✅ Complete", width="stretch", key=f"complete-go-{todo_id}"):
            if _run(lambda: state.complete_todo(todo_id, note), "Todo completed"):
                st.rerun()
            else:
                st.error(state.error)
    with c2:
        if st.button("Cancel", width="stretch", key=f"complete-cancel-{todo_id}"):
            st.rerun()


def render_edit_popover(todo, key_prefix: str):
    with st.popover("✏️ Edit", width="stretch"):
        with st.form(f"{key_prefix}-edit-form"):
            new_title = st.text_input("Title", value=todo.title)
            new_desc = st.text_area("Description", value=todo.description or "")
            new_category = st.selectbox("Category", CATEGORIES, index=CATEGORIES.index(todo.category.value))
            new_priority = st.selectbox("Priority", PRIORITIES, index=PRIORITIES.index(todo.priority.value))
            saved = st.form_submit_button("Save")
        if saved:
            if not new_title.strip():
                st.error("Title is required")
            elif _run(lambda: state.update_todo(todo.id, {
                "title": new_title,
                "description": new_desc,
                "category": new_category,
                "priority": new_priority,
            }), "Todo updated"):
                st.rerun()
            else:
                st.error(state.error)


def render_todo_row(todo, tab, selectable: bool, progress_actions: bool = True):
    key_prefix = f"{tab.value}-{todo.id}"
    days = views.remaining_days(todo.due_date)
    cols = st.columns([0.4, 4, 2, 2.2, 3.4] if selectable else [4, 2, 2.2, 3.4])
    if selectable:
        with cols[0]:
            picked = st.checkbox("select", value=todo.id in st.session_state.selected_todos,
                                 key=f"{key_prefix}-pick", label_visibility="collapsed")
            if picked:
                st.session_state.selected_todos.add(todo.id)
            else:
                st.session_state.selected_todos.discard(todo.id)
        cols = cols[1:]

    with cols[0]:
        st.markdown(f"**{todo.title}**")
        if todo.description:
            st.caption(todo.description)
    with cols[1]:
        st.markdown(
            status_badge(todo.status) + priority_badge(todo.priority) + f"<br><small>{todo.category.value}</small>",
            unsafe_allow_html=True,
        )
    with cols[2]:
        due = todo.due_date.isoformat() if todo.due_date else "—"
        extra = remaining_html(days) if todo.status == Status.IN_PROCESS or tab == views.Tab.IN_PROGRESS else ""
        st.markdown(f"📅 {due}<br>{extra}<br>{assignee_badge(todo.assigned_to)}", unsafe_allow_html=True)
    with cols[3]:
        b1, b2, b3, b4 = st.columns(4)
        if progress_actions and not todo.is_completed:
            with b1:
                if st.button("✅", key=f"{key_prefix}-complete", help="Complete"):
                    complete_dialog(todo.id, todo.title)
            target = views.toggle_target(todo.status)
            with b2:
                label = "▶️" if target == Status.IN_PROCESS else "⏸"
                if st.button(label, key=f"{key_prefix}-toggle", help="Start" if target == Status.IN_PROCESS else "Pause"):
                    if _run(lambda: state.set_in_progress(todo.id, target == Status.IN_PROCESS)):
                        st.rerun()
        with b3:
            render_edit_popover(todo, key_prefix)
        if views.can_delete(todo, user):
            with b4:
                if st.button("🗑", key=f"{key_prefix}-delete", help="Delete"):
                    if _run(lambda: state.delete_todo(todo.id), "Todo deleted"):
                        st.session_state.selected_todos.discard(todo.id)
                        st.rerun()


def render_todo_list(todos, tab, *, selectable: bool = False, progress_actions: bool = True,
                     empty_msg: str = "No todos found."):
    if not todos:
        st.info(empty_msg)
        return
    if selectable:
        visible_ids = {t.id for t in todos}
        deletable = [i for i in st.session_state.selected_todos if i in visible_ids]
        c1, c2, c3 = st.columns([1, 1, 3])
        with c1:
            if st.button("Select all", key=f"{tab.value}-select-all"):
                st.session_state.selected_todos |= visible_ids
                st.rerun()
        with c2:
            if st.button(f"🗑 Delete selected ({len(deletable)})", key=f"{tab.value}-bulk-delete", disabled=not deletable):
                if _run(lambda: state.bulk_delete_todos(deletable), f"Deleted {len(deletable)} todos"):
                    st.session_state.selected_todos -= set(deletable)
                    st.rerun()
        with c3:
            st.download_button("⬇️ Export CSV", analytics.todos_to_csv(todos), file_name="todos.csv",
                               mime="text/csv", key=f"{tab.value}-export")
    for todo in todos:
        render_todo_row(todo, tab, selectable, progress_actions)
        st.divider()


def render_create_tab():
    st.subheader("Create New Todo")
    assignees = ["(personal)"] + [e for e in st.session_state.get("assignable_users", []) if e != user.email]
    with st.form("create-todo", clear_on_submit=True):
        c1, c2 = st.columns(2)
        with c1:
            title = st.text_input("Title *", placeholder="Enter todo title")
            category = st.selectbox("Category", CATEGORIES)
            has_due = st.checkbox("Set a due date")
            due = st.date_input("Due date", value=date.today())
        with c2:
            description = st.text_area("Description", placeholder="Optional details")
            priority = st.selectbox("Priority", PRIORITIES, index=1)
            assigned = st.selectbox("Assign to", assignees)
        submitted = st.form_submit_button("➕ Create Todo", width="stretch")
    if submitted:
        new_todo = NewTodo(
            title=title,
            description=description or None,
            category=Category(category),
            priority=Priority(priority),
            due_date=due if has_due else None,
            assigned_to=None if assigned == "(personal)" else assigned,
        )
        if _run(lambda: state.create_todo(new_todo), "Todo created"):
            st.rerun()
        else:
            st.error(state.error)


def render_completed_tab(todos):
    if not todos:
        st.info("No completed todos yet.")
        return
    for todo in todos:
        c1, c2, c3 = st.columns([4, 3, 3])
        with c1:
            st.markdown(f"**{todo.title}**")
            if todo.description:
                st.caption(todo.description)
        with c2:
            st.markdown(priority_badge(todo.priority) + f" {todo.category.value}", unsafe_allow_html=True)
            done_at = todo.completed_at.strftime("%Y-%m-%d %H:%M") if todo.completed_at else "—"
            st.caption(f"Completed {done_at}")
        with c3:
            st.markdown(f"📝 {todo.completion_note or 'No notes'}")
        st.divider()


def render_analytics_tab():
    stats = views.stats_for_user(state.todos, user)
    k1, k2, k3, k4, k5 = st.columns(5)
    k1.markdown(kpi_block("Total Created" if user.is_admin else "Total Todos", stats.total), unsafe_allow_html=True)
    k2.markdown(kpi_block("Completed", stats.completed, "good"), unsafe_allow_html=True)
    k3.markdown(kpi_block("Pending", stats.pending), unsafe_allow_html=True)
    k4.markdown(kpi_block("In Progress", stats.in_process), unsafe_allow_html=True)
    k5.markdown(kpi_block("Overdue", stats.overdue, "bad" if stats.overdue else ""), unsafe_allow_html=True)
    st.progress(analytics.completion_rate(stats) / 100.0, text=f"Completion rate {analytics.completion_rate(stats)}%")

    if user.is_admin:
        split = views.assignment_split(state.todos, user)
        a1, a2 = st.columns(2)
        a1.metric("Assigned to team", split["assigned"])
        a2.metric("Personal", split["personal"])
        if state.stats is not None:
            st.caption(f"Server totals: {state.stats.total} todos, {state.stats.overdue} overdue")

    st.plotly_chart(analytics.status_chart(stats), width="stretch")
    c1, c2 = st.columns(2)
    with c1:
        st.markdown("##### " + ("Created Todos by Category" if user.is_admin else "Todos by Category"))
        st.plotly_chart(analytics.category_chart(stats), width="stretch")
    with c2:
        st.markdown("##### " + ("Created Todos by Priority" if user.is_admin else "Todos by Priority"))
        st.plotly_chart(analytics.priority_chart(stats), width="stretch")


# ----- Tabs -----
tabs = views.tabs_for_role(user.role)
for tab, container in zip(tabs, st.tabs([views.tab_label(t) for t in tabs])):
    with container:
        shown = views.filter_todos(state.todos, user, tab, status_filter, category_filter)
        if tab == views.Tab.CREATE:
            render_create_tab()
        elif tab == views.Tab.LIST:
            st.subheader("My Todos" if user.is_admin else "Pending Todos")
            render_todo_list(shown, tab, selectable=True)
        elif tab == views.Tab.IN_PROGRESS:
            st.subheader("In Progress")
            st.caption("Your active tasks with remaining time")
            render_todo_list(shown, tab, empty_msg="Nothing in progress.")
        elif tab == views.Tab.COMPLETED:
            st.subheader("Completed")
            render_completed_tab(shown)
        elif tab == views.Tab.ASSIGNMENTS:
            st.subheader("Assigned Tasks")
            st.caption("Tasks assigned to team members")
            render_todo_list(shown, tab, progress_actions=False, empty_msg="No assigned tasks found.")
        elif tab == views.Tab.ANALYTICS:
            render_analytics_tab()
