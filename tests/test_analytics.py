from datetime import date

from todo_dashboard import analytics
from todo_dashboard.models import Category, Priority, Status, TodoStats
from todo_dashboard.views import compute_stats

from conftest import FIXED_NOW, make_todo


def test_todos_to_df_columns_and_empty():
    empty = analytics.todos_to_df([])
    assert list(empty.columns) == analytics.TODO_COLUMNS
    assert empty.empty

    df = analytics.todos_to_df([make_todo("a", category=Category.WORK, due_date=date(2024, 6, 20))])
    assert df.loc[0, "category"] == "Work"
    assert df.loc[0, "assigned_to"] == "Personal"


def test_csv_export_has_header_and_rows():
    csv = analytics.todos_to_csv([make_todo("a"), make_todo("b")]).decode("utf-8")
    lines = csv.strip().splitlines()
    assert lines[0].startswith("id,title")
    assert len(lines) == 3


def test_completion_rate():
    assert analytics.completion_rate(TodoStats.empty()) == 0.0
    assert analytics.completion_rate(TodoStats(total=3, completed=1)) == 33.3


def test_charts_cover_every_bucket():
    stats = compute_stats([
        make_todo("a", priority=Priority.HIGH),
        make_todo("b", status=Status.COMPLETED),
    ], FIXED_NOW)
    cat_fig = analytics.category_chart(stats)
    assert list(cat_fig.data[0].x) == [c.value for c in Category]
    pie = analytics.priority_chart(stats)
    assert list(pie.data[0].values) == [0, 1, 1]
    status_fig = analytics.status_chart(stats)
    assert [trace.name for trace in status_fig.data] == ["pending", "in-process", "completed"]
