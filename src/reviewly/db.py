"""
Database handle shared by the Reviewly API and its CLI commands.

A ``Database`` owns one engine and one session factory. It is built
explicitly by the application factory, stored on ``app.extensions`` and
disposed on shutdown; nothing here is module-level state.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from flask import Flask, current_app
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .logging_config import get_logger
from .models import Base

logger = get_logger(__name__)

EXTENSION_KEY = "reviewly_db"
SLOW_QUERY_SECONDS = 1.0


class Database:
    """Engine plus session factory with a transactional ``session()`` scope."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        engine_kwargs: dict[str, Any] = {
            "pool_pre_ping": True,
            "future": True,
            "echo": echo,
        }

        if database_url.startswith("sqlite"):
            engine_kwargs.update(
                {
                    "connect_args": {"check_same_thread": False},
                    "poolclass": StaticPool,
                    "pool_pre_ping": False,
                }
            )
        else:
            engine_kwargs.update(
                {
                    "pool_size": 10,
                    "max_overflow": 20,
                    # Recycle connections hourly to avoid server-side timeouts
                    "pool_recycle": 3600,
                }
            )

        self.engine: Engine = create_engine(database_url, **engine_kwargs)
        self._install_slow_query_logging(self.engine)
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, autocommit=False, expire_on_commit=False
        )

    @staticmethod
    def _install_slow_query_logging(engine: Engine) -> None:
        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("query_start_time", []).append(time.time())

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            total = time.time() - conn.info["query_start_time"].pop(-1)
            if total > SLOW_QUERY_SECONDS:
                logger.warning(f"Slow query detected ({total:.2f}s): {statement[:200]}...")

    def create_all(self) -> None:
        """Ensure all tables declared on the models exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Database schema created successfully")

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Commits when the block exits normally, rolls back when an exception
        escapes and always closes the session.
        """
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def init_app(app: Flask, database: Database) -> None:
    """Attach ``database`` to the app so request handlers can reach it."""
    app.extensions[EXTENSION_KEY] = database


def get_database() -> Database:
    """Return the Database bound to the current Flask app."""
    try:
        return current_app.extensions[EXTENSION_KEY]
    except KeyError:
        raise RuntimeError("Database not initialized. Call init_app first.") from None
