"""Client-local storage for the session token and user profile.

The API client never reaches for process-wide state: it is handed one of
these stores and reads the bearer token from it on every request.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, MutableMapping, Optional, Protocol

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from todo_dashboard.exceptions import ValidationError
from todo_dashboard.models import User


logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class SessionStore(Protocol):
    def get_token(self) -> Optional[str]: ...

    def set_token(self, token: str) -> None: ...

    def get_user(self) -> Optional[User]: ...

    def set_user(self, user: User) -> None: ...

    def clear(self) -> None: ...


def _decode_user(raw: Optional[str]) -> Optional[User]:
    if not raw:
        return None
    try:
        return User.from_dict(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        logger.warning("Discarding unreadable stored user profile: %s", exc)
        return None


class MemorySessionStore:
    """Store backed by a mutable mapping (``st.session_state`` in the app)."""

    def __init__(self, backing: Optional[MutableMapping[str, Any]] = None, *, prefix: str = "todo_dashboard.") -> None:
        self._data: MutableMapping[str, Any] = backing if backing is not None else {}
        self._prefix = prefix

    def _key(self, name: str) -> str:
        return f"{self._prefix}{name}"

    def get_token(self) -> Optional[str]:
        return self._data.get(self._key(TOKEN_KEY)) or None

    def set_token(self, token: str) -> None:
        self._data[self._key(TOKEN_KEY)] = token

    def get_user(self) -> Optional[User]:
        return _decode_user(self._data.get(self._key(USER_KEY)))

    def set_user(self, user: User) -> None:
        self._data[self._key(USER_KEY)] = json.dumps(user.to_dict())

    def clear(self) -> None:
        for name in (TOKEN_KEY, USER_KEY):
            self._data.pop(self._key(name), None)


Base = declarative_base()


class StoredValue(Base):
    __tablename__ = "local_storage"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class SqlSessionStore:
    """Store persisted through SQLAlchemy (SQLite by default).

    Each store owns its engine, so two stores pointed at different URLs never
    share state.
    """

    def __init__(self, database_url: str, *, engine: Optional[Engine] = None) -> None:
        connect_args = {}
        if database_url.startswith("sqlite:"):
            connect_args = {"check_same_thread": False}
        self.engine = engine or create_engine(
            database_url,
            future=True,
            echo=False,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        self._sessionmaker = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False, future=True)
        Base.metadata.create_all(self.engine)

    def _get(self, key: str) -> Optional[str]:
        with self._sessionmaker() as s:
            row = s.get(StoredValue, key)
            return row.value if row else None

    def _put(self, key: str, value: str) -> None:
        with self._sessionmaker() as s:
            row = s.get(StoredValue, key)
            if row is None:
                s.add(StoredValue(key=key, value=value))
            else:
                row.value = value
            s.commit()

    def get_token(self) -> Optional[str]:
        return self._get(TOKEN_KEY) or None

    def set_token(self, token: str) -> None:
        self._put(TOKEN_KEY, token)

    def get_user(self) -> Optional[User]:
        return _decode_user(self._get(USER_KEY))

    def set_user(self, user: User) -> None:
        self._put(USER_KEY, json.dumps(user.to_dict()))

    def clear(self) -> None:
        with self._sessionmaker() as s:
            for key in (TOKEN_KEY, USER_KEY):
                row = s.get(StoredValue, key)
                if row is not None:
                    s.delete(row)
            s.commit()

    def dispose(self) -> None:
        self.engine.dispose()
