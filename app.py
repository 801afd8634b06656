import streamlit as st

from todo_dashboard.auth_ui import render_user_sidebar, require_login
from todo_dashboard.runtime import get_client
from todo_dashboard.theme import set_theme

set_theme()

st.markdown(
    """
    <style>
    .main-hero {
        background: linear-gradient(120deg, #e0eafc 0%, #cfdef3 100%);
        border-radius: 18px;
        box-shadow: 0 8px 32px 0 rgba(31, 38, 135, 0.15);
        padding: 2rem 2rem 1.5rem 2rem;
        max-width: 900px;
        margin: 1.5rem auto 1.5rem auto;
        text-align: center;
    }
    .main-hero h2 { font-size: 2.4rem; font-weight: 800; color: #0b63d6; margin-bottom: 0.4rem; }
    .main-hero .desc { color: #3a4a6b; font-size: 1.1rem; }
    </style>
    """,
    unsafe_allow_html=True,
)

st.markdown(
    '<div class="main-hero"><h2>📝 Todo Dashboard</h2>'
    '<div class="desc">Plan, track and finish your work. Admins assign tasks to the team; '
    'everyone tracks progress from pending to done.</div></div>',
    unsafe_allow_html=True,
)

client = get_client(st.session_state)
user = require_login(client)
render_user_sidebar(client, user)

st.success(f"Welcome back, {user.name}!")
st.page_link("pages/1_Todo_Dashboard.py", label="Open the dashboard", icon="📋")
