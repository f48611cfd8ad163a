from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

DEFAULT_DB_URL = "sqlite:///data/cloudstore.db"


def get_db_url() -> str:
    return os.getenv("CLOUDSTORE_DB_URL") or DEFAULT_DB_URL


def _sqlite_path(db_url: str) -> Optional[str]:
    if not db_url.startswith("sqlite:"):
        return None
    if db_url.startswith("sqlite:////"):
        return db_url.replace("sqlite:////", "/", 1)
    if db_url.startswith("sqlite:///"):
        return db_url.replace("sqlite:///", "", 1)
    # sqlite:// is an in-memory database
    return ":memory:"


def _ensure_sqlite_parent_dir(db_url: str) -> None:
    path = _sqlite_path(db_url)
    if path in (None, "", ":memory:"):
        return
    Path(path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def create_db_engine(db_url: Optional[str] = None) -> Engine:
    url = db_url or get_db_url()
    _ensure_sqlite_parent_dir(url)
    if _sqlite_path(url) in ("", ":memory:"):
        # one shared connection, otherwise every session sees an empty database
        return create_engine(
            url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    connect_args = {"check_same_thread": False} if url.startswith("sqlite:") else {}
    return create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)


class SessionProvider:
    """Light wrapper to create/close SQLAlchemy sessions."""

    def __init__(self, db_url: Optional[str] = None):
        self.engine = create_db_engine(db_url)
        self._factory = sessionmaker(bind=self.engine, autoflush=False, autocommit=False, future=True)

    def session(self) -> Session:
        return self._factory()

    def dispose(self) -> None:
        self.engine.dispose()
