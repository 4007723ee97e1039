# medicontrol/database.py

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, CursorResult, Engine, Row, make_url
from sqlalchemy.exc import SQLAlchemyError

from medicontrol.core.exceptions import StorageError
from medicontrol.db.queries import QueryRegistry

logger = logging.getLogger("app")


def _icontains(value: str | None, term: str | None) -> int:
    if value is None or term is None:
        return 0
    return int(term.casefold() in value.casefold())


def _configure_sqlite(engine: Engine, busy_timeout: float) -> None:
    # pysqlite's implicit BEGIN is turned off so every transaction is opened
    # by the "begin" hook below, with the mode requested by the caller.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.create_function("icontains", 2, _icontains, deterministic=True)
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.execute(f"PRAGMA busy_timeout = {int(busy_timeout * 1000)}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get("sqlite_begin", "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


class DbSession:
    """A connection inside an open transaction, addressed by query name."""

    def __init__(self, connection: Connection, queries: QueryRegistry):
        self.connection = connection
        self.queries = queries

    def execute(self, name: str, params: dict[str, Any] | None = None) -> CursorResult:
        return self.connection.execute(text(self.queries.require(name)), params or {})

    def fetch_one(self, name: str, params: dict[str, Any] | None = None) -> Row | None:
        return self.execute(name, params).first()

    def fetch_all(self, name: str, params: dict[str, Any] | None = None) -> list[Row]:
        return list(self.execute(name, params).all())

    def scalar(self, name: str, params: dict[str, Any] | None = None) -> Any:
        return self.execute(name, params).scalar()


class Storage:
    """
    Process-wide handle to the embedded store.

    Built once at startup and shared by every request handler. ``connect``
    opens an ordinary transaction for reads and simple writes;
    ``transaction`` takes the store's write lock up front so read, validate
    and write steps on stock quantities cannot interleave with another
    writer.
    """

    def __init__(self, url: str, queries: QueryRegistry, busy_timeout: float = 30.0):
        self.url = make_url(url)
        self.queries = queries
        self.is_sqlite = self.url.get_backend_name() == "sqlite"

        connect_args = {}
        if self.is_sqlite:
            connect_args = {"check_same_thread": False, "timeout": busy_timeout}
            database = self.url.database
            if database and database != ":memory:" and not database.startswith("file:"):
                Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(self.url, connect_args=connect_args)

        if self.is_sqlite:
            _configure_sqlite(self.engine, busy_timeout)

    @contextmanager
    def connect(self) -> Iterator[DbSession]:
        with self._session("DEFERRED") as db:
            yield db

    @contextmanager
    def transaction(self) -> Iterator[DbSession]:
        with self._session("IMMEDIATE") as db:
            yield db

    @contextmanager
    def _session(self, begin_mode: str) -> Iterator[DbSession]:
        try:
            with self.engine.connect() as conn:
                conn.execution_options(sqlite_begin=begin_mode)
                with conn.begin():
                    yield DbSession(conn, self.queries)
        except SQLAlchemyError as exc:
            logger.error(f"Storage failure: {type(exc).__name__}: {exc}", exc_info=True)
            raise StorageError() from exc

    def dispose(self) -> None:
        self.engine.dispose()


def get_storage(request: Request) -> Storage:
    return request.app.state.storage
