"""Runtime configuration for the dashboard."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional


_TRUTHY = {"1", "true", "yes", "y", "on"}
_FALSY = {"0", "false", "no", "n", "off"}


def env_str(name: str, default: str, *, strip: bool = True) -> str:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() if strip else value


def env_optional_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() or default


def env_bool(name: str, default: bool) -> bool:
    raw = (os.environ.get(name) or "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _default_session_db_url() -> str:
    repo_root = Path(__file__).resolve().parents[1]
    data_dir = repo_root / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(data_dir / 'session.db').as_posix()}"


@dataclass(frozen=True)
class DashboardConfig:
    """Dashboard settings resolved from the environment.

    Env vars:
    - TODO_API_BASE_URL (default https://todo-backend-95t0.onrender.com)
    - TODO_API_TIMEOUT_SECONDS (default 15)
    - TODO_API_VERIFY_SSL (default true)
    - TODO_SESSION_BACKEND: memory|sql (default memory)
    - TODO_SESSION_DATABASE_URL (default SQLite at data/session.db)
    - TODO_LOG_LEVEL (default INFO)

    ``memory`` keeps the token in the browser session only. ``sql`` survives
    restarts of the Streamlit server, which suits a single-user desktop run.
    """

    api_base_url: str
    timeout_seconds: float
    verify_ssl: bool
    session_backend: str
    session_database_url: Optional[str]
    log_level: str

    DEFAULT_API_BASE_URL: str = "https://todo-backend-95t0.onrender.com"
    DEFAULT_TIMEOUT_SECONDS: float = 15.0
    DEFAULT_SESSION_BACKEND: str = "memory"
    DEFAULT_LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        backend = env_str("TODO_SESSION_BACKEND", cls.DEFAULT_SESSION_BACKEND).lower()
        if backend not in {"memory", "sql"}:
            backend = cls.DEFAULT_SESSION_BACKEND

        db_url = env_optional_str("TODO_SESSION_DATABASE_URL")
        if backend == "sql" and not db_url:
            db_url = _default_session_db_url()

        return cls(
            api_base_url=env_str("TODO_API_BASE_URL", cls.DEFAULT_API_BASE_URL).rstrip("/"),
            timeout_seconds=max(1.0, env_float("TODO_API_TIMEOUT_SECONDS", cls.DEFAULT_TIMEOUT_SECONDS)),
            verify_ssl=env_bool("TODO_API_VERIFY_SSL", True),
            session_backend=backend,
            session_database_url=db_url,
            log_level=env_str("TODO_LOG_LEVEL", cls.DEFAULT_LOG_LEVEL).upper(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "api_base_url": self.api_base_url,
            "timeout_seconds": self.timeout_seconds,
            "verify_ssl": self.verify_ssl,
            "session_backend": self.session_backend,
            "has_session_database": bool(self.session_database_url),
            "log_level": self.log_level,
        }


_config: Optional[DashboardConfig] = None


def get_config() -> DashboardConfig:
    """Get the dashboard configuration (cached)."""
    global _config
    if _config is None:
        _config = DashboardConfig.from_env()
    return _config


def reset_config() -> None:
    global _config
    _config = None


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the package logger."""
    logger = logging.getLogger("todo_dashboard")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not any(getattr(h, "_todo_dashboard", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handler._todo_dashboard = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
