from todo_dashboard import theme
from todo_dashboard.models import Priority, Status


def test_set_theme():
    try:
        theme.set_theme(page_title="Todo Dashboard Test")
    except Exception as e:
        assert False, f"set_theme raised an exception: {e}"


def test_badges_escape_and_classify():
    assert 'td-priority-high' in theme.priority_badge(Priority.HIGH)
    assert '>in process<' in theme.status_badge(Status.IN_PROCESS)
    assert '&lt;b&gt;' in theme.assignee_badge("<b>")
    assert 'Personal' in theme.assignee_badge(None)


def test_remaining_html_levels():
    assert "td-remaining-overdue" in theme.remaining_html(-2)
    assert "Due today" in theme.remaining_html(0)
    assert "No due date" in theme.remaining_html(None)
