from __future__ import annotations

from typing import Iterable

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from todo_dashboard.models import Category, Priority, Status, Todo, TodoStats


TODO_COLUMNS = [
    "id", "title", "description", "category", "priority", "status",
    "due_date", "assigned_to", "completion_note", "created_at", "completed_at",
]

STATUS_COLORS = {"pending": "#fdcb6e", "in-process": "#0984e3", "completed": "#00b894"}
PRIORITY_COLORS = {"low": "#55efc4", "medium": "#74b9ff", "high": "#e17055"}


def todos_to_df(todos: Iterable[Todo]) -> pd.DataFrame:
    rows = []
    for t in todos:
        rows.append({
            "id": t.id,
            "title": t.title,
            "description": t.description or "",
            "category": t.category.value,
            "priority": t.priority.value,
            "status": t.status.value,
            "due_date": t.due_date,
            "assigned_to": t.assigned_to or "Personal",
            "completion_note": t.completion_note or "",
            "created_at": t.created_at,
            "completed_at": t.completed_at,
        })
    if not rows:
        return pd.DataFrame(columns=TODO_COLUMNS)
    return pd.DataFrame(rows, columns=TODO_COLUMNS)


def todos_to_csv(todos: Iterable[Todo]) -> bytes:
    return todos_to_df(todos).to_csv(index=False).encode("utf-8")


def completion_rate(stats: TodoStats) -> float:
    if not stats.total:
        return 0.0
    return round(100.0 * stats.completed / stats.total, 1)


def _counts_frame(counts: dict, order: list, label: str) -> pd.DataFrame:
    total = sum(counts.get(k, 0) for k in order)
    return pd.DataFrame({
        label: order,
        "count": [int(counts.get(k, 0)) for k in order],
        "percent": [round(100.0 * counts.get(k, 0) / total, 1) if total else 0.0 for k in order],
    })


def category_chart(stats: TodoStats) -> go.Figure:
    df = _counts_frame(stats.categories, [c.value for c in Category], "category")
    fig = px.bar(df, x="category", y="count", text="count", color="count",
                 color_continuous_scale="Blues", hover_data=["percent"])
    fig.update_layout(template="plotly_white", margin=dict(l=6, r=6, t=30, b=10), height=320,
                      coloraxis_showscale=False)
    return fig


def priority_chart(stats: TodoStats) -> go.Figure:
    order = [p.value for p in Priority]
    df = _counts_frame(stats.priorities, order, "priority")
    fig = go.Figure(data=go.Pie(
        labels=df["priority"],
        values=df["count"],
        hole=0.45,
        marker=dict(colors=[PRIORITY_COLORS[p] for p in order]),
        sort=False,
    ))
    fig.update_layout(template="plotly_white", margin=dict(l=6, r=6, t=30, b=10), height=320)
    return fig


def status_chart(stats: TodoStats) -> go.Figure:
    counts = {
        Status.PENDING.value: stats.pending,
        Status.IN_PROCESS.value: stats.in_process,
        Status.COMPLETED.value: stats.completed,
    }
    fig = go.Figure()
    for status, count in counts.items():
        fig.add_bar(x=[count], y=["Todos"], name=status, orientation="h",
                    marker_color=STATUS_COLORS[status])
    fig.update_layout(barmode="stack", template="plotly_white", margin=dict(l=6, r=6, t=30, b=10),
                      height=180, legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1))
    return fig
