import html
import os

import streamlit as st
from streamlit.errors import StreamlitAPIException

from todo_dashboard.views import urgency, describe_remaining


def set_theme(
    page_title: str = "Todo Dashboard",
    page_icon: str = "📝",
    layout: str = "wide",
    initial_sidebar_state: str = "expanded",
):
    """Configure the Streamlit page & inject the dashboard CSS.

    Safe to call once at the top of each page. Subsequent calls will be
    ignored by Streamlit for page_config but CSS will still be (re)injected.
    """
    try:
        st.set_page_config(
            page_title=page_title,
            page_icon=page_icon,
            layout=layout,
            initial_sidebar_state=initial_sidebar_state,
        )
    except StreamlitAPIException:
        # set_page_config can only be called once per run.
        pass

    theme_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets", "todo_theme.css")
    try:
        with open(theme_file, "r", encoding="utf-8") as f:
            st.markdown(f"<style>{f.read()}</style>", unsafe_allow_html=True)
    except FileNotFoundError:
        st.error(f"Theme file not found at {theme_file}. Please check the file path.")


def badge(text: str, css_class: str) -> str:
    return f'<span class="td-badge {css_class}">{html.escape(text)}</span>'


def priority_badge(priority) -> str:
    value = getattr(priority, "value", priority)
    return badge(value, f"td-priority-{value}")


def status_badge(status) -> str:
    value = getattr(status, "value", status)
    return badge(value.replace("-", " "), f"td-status-{value}")


def assignee_badge(assigned_to) -> str:
    if assigned_to:
        return badge(assigned_to, "td-assignee")
    return badge("Personal", "td-personal")


def remaining_html(days) -> str:
    level = urgency(days)
    if level is None:
        return '<span class="td-remaining">No due date</span>'
    return f'<span class="td-remaining td-remaining-{level}">{describe_remaining(days)}</span>'


def kpi_block(label: str, value, tone: str = "") -> str:
    tone_cls = f" td-kpi-{tone}" if tone else ""
    return (
        f'<div class="td-kpi-box"><div class="td-kpi-label">{html.escape(label)}</div>'
        f'<div class="td-kpi-value{tone_cls}">{value}</div></div>'
    )
