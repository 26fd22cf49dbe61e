# workforce/database.py
"""
Persistence gateway

One Database object per application owns the engine and the session factory.
It is created by the app factory, stored on app.state and handed to request
handlers through get_db, so nothing in the code base holds a module-level
connection.
"""

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def mask_url(url: str) -> str:
    return re.sub(r"//[^@/]*@", "//***@", url)


@dataclass
class QueryResult:
    """Uniform shape of a raw query, whatever the driver returns"""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0
    lastrowid: Optional[int] = None

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None

    def scalar(self) -> Any:
        row = self.first()
        if row is None:
            return None
        return next(iter(row.values()), None)


# A quoted literal, or a positional placeholder outside of one
_PLACEHOLDER = re.compile(r"'(?:[^']|'')*'|\?")


def bind_positional(sql: str, params: Sequence[Any] = ()) -> Tuple[TextClause, Dict[str, Any]]:
    """Turn ? placeholders into named binds so any driver's paramstyle works"""
    values = list(params)
    names: List[str] = []

    def substitute(match):
        if match.group(0) != "?":
            return match.group(0)
        name = f"p{len(names)}"
        names.append(name)
        return f":{name}"

    statement = _PLACEHOLDER.sub(substitute, sql)
    if len(names) != len(values):
        raise ValueError(f"SQL has {len(names)} placeholders but {len(values)} parameters were given")
    return text(statement), dict(zip(names, values))


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _is_memory_url(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """Engine, sessions and lifecycle for the relational store"""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine = self._create_engine(url, echo)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    @staticmethod
    def _create_engine(url: str, echo: bool):
        kwargs: Dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory_url(url):
                # a private in-memory database only lives as long as its connection
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True

        engine = create_engine(url, **kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    # Raw SQL

    def execute(self, sql: str, params: Sequence[Any] = (), connection: Optional[Connection] = None) -> QueryResult:
        """Run SQL text with positional (?) parameters

        Outside a transaction() block the statement runs in its own
        transaction and is committed immediately.
        """
        if connection is not None:
            return self._run(connection, sql, params)
        with self.engine.begin() as conn:
            return self._run(conn, sql, params)

    @staticmethod
    def _run(conn: Connection, sql: str, params: Sequence[Any]) -> QueryResult:
        statement, bound = bind_positional(sql, params)
        result = conn.execute(statement, bound)
        if result.returns_rows:
            rows = [dict(row._mapping) for row in result]
            return QueryResult(rows=rows, rowcount=len(rows))
        return QueryResult(rowcount=result.rowcount, lastrowid=result.lastrowid)

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Connection whose statements commit together or not at all"""
        with self.engine.begin() as conn:
            yield conn

    # ORM

    @contextmanager
    def session(self) -> Iterator[Session]:
        """ORM session committed on success and rolled back on any error"""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # Lifecycle

    def health_check(self) -> bool:
        return self.execute("SELECT 1 AS ok").scalar() == 1

    def initialize(self) -> None:
        """Verify connectivity and bring the schema up to date

        Errors propagate, so startup fails against a store that cannot be
        reached.
        """
        logger.info("Connecting to database %s", mask_url(self.url))
        if not self.health_check():
            raise RuntimeError("Database health check failed")

        # Import here so every model is registered on Base.metadata
        import workforce.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema is up to date")

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connection closed")


def get_db(request: Request) -> Iterator[Session]:
    """Request-scoped session, closed (and rolled back if uncommitted) afterwards"""
    db: Session = request.app.state.db.SessionLocal()
    try:
        yield db
    finally:
        db.close()
