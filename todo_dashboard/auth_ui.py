"""Login / register forms shared by the entry script and the dashboard page."""

from __future__ import annotations

import streamlit as st

from todo_dashboard import auth
from todo_dashboard.config import get_config
from todo_dashboard.exceptions import TodoDashboardError
from todo_dashboard.models import User


def render_auth_forms(client) -> None:
    login_tab, register_tab = st.tabs(["🔐 Sign in", "🆕 Create account"])

    with login_tab:
        with st.form("login-form", clear_on_submit=False):
            email = st.text_input("Email", key="login-email")
            password = st.text_input("Password", type="password", key="login-password")
            submitted = st.form_submit_button("Sign in", width="stretch")
        if submitted:
            try:
                with st.spinner("Signing in..."):
                    auth.sign_in(st.session_state, client, email, password)
            except TodoDashboardError as exc:
                st.error(str(exc))
            else:
                st.rerun()

    with register_tab:
        with st.form("register-form", clear_on_submit=False):
            name = st.text_input("Name", key="register-name")
            email = st.text_input("Email", key="register-email")
            password = st.text_input("Password", type="password", key="register-password")
            submitted = st.form_submit_button("Create account", width="stretch")
        if submitted:
            try:
                with st.spinner("Creating account..."):
                    auth.sign_up(st.session_state, client, name, email, password)
            except TodoDashboardError as exc:
                st.error(str(exc))
            else:
                st.rerun()


def require_login(client) -> User:
    """Return the signed-in user, or render the auth forms and stop the run."""
    try:
        user = auth.restore_session(st.session_state, client)
    except TodoDashboardError as exc:
        st.warning(f"Could not restore your session: {exc}")
        user = None
    if user is None:
        render_auth_forms(client)
        st.stop()
    return user


def render_user_sidebar(client, user: User) -> None:
    with st.sidebar:
        st.markdown(f"**{user.name}**  \n{user.email}")
        st.caption(f"Role: {user.role.value}")
        if st.button("🚪 Sign out", width="stretch", key="sign-out"):
            auth.sign_out(st.session_state, client)
            st.rerun()
        with st.expander("⚙️ Connection settings"):
            st.json(get_config().to_dict())
