import logging

from todo_dashboard import config


def test_defaults(monkeypatch):
    for name in ("TODO_API_BASE_URL", "TODO_API_TIMEOUT_SECONDS", "TODO_API_VERIFY_SSL",
                 "TODO_SESSION_BACKEND", "TODO_SESSION_DATABASE_URL", "TODO_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    cfg = config.DashboardConfig.from_env()
    assert cfg.api_base_url == "https://todo-backend-95t0.onrender.com"
    assert cfg.timeout_seconds == 15.0
    assert cfg.verify_ssl is True
    assert cfg.session_backend == "memory"
    assert cfg.session_database_url is None
    assert cfg.log_level == "INFO"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TODO_API_BASE_URL", "http://localhost:5000/")
    monkeypatch.setenv("TODO_API_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.setenv("TODO_API_VERIFY_SSL", "off")
    monkeypatch.setenv("TODO_SESSION_BACKEND", "sql")
    monkeypatch.setenv("TODO_SESSION_DATABASE_URL", "sqlite:///tmp/x.db")
    monkeypatch.setenv("TODO_LOG_LEVEL", "debug")
    cfg = config.DashboardConfig.from_env()
    assert cfg.api_base_url == "http://localhost:5000"
    assert cfg.timeout_seconds == 15.0
    assert cfg.verify_ssl is False
    assert cfg.session_backend == "sql"
    assert cfg.session_database_url == "sqlite:///tmp/x.db"
    assert cfg.log_level == "DEBUG"
    assert cfg.to_dict()["has_session_database"] is True


def test_unknown_backend_falls_back_to_memory(monkeypatch):
    monkeypatch.setenv("TODO_SESSION_BACKEND", "redis")
    assert config.DashboardConfig.from_env().session_backend == "memory"


def test_get_config_is_cached(monkeypatch):
    config.reset_config()
    first = config.get_config()
    monkeypatch.setenv("TODO_API_BASE_URL", "http://changed")
    assert config.get_config() is first
    config.reset_config()


def test_configure_logging_adds_single_handler():
    logger = config.configure_logging("DEBUG")
    config.configure_logging("DEBUG")
    ours = [h for h in logger.handlers if getattr(h, "_todo_dashboard", False)]
    assert len(ours) == 1
    assert logger.level == logging.DEBUG
