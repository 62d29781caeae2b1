from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from floorsvc.application.ports.transactions import TransactionManager
from floorsvc.application.use_cases.context import current_deadline
from floorsvc.domain.common.errors import DeadlineExceededError, StoreUnavailableError

logger = logging.getLogger(__name__)

_ambient_session: ContextVar[Session | None] = ContextVar("db_session", default=None)


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


def _statement_timeout_ms() -> int:
    return int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "5000"))


@lru_cache(maxsize=8)
def _build_engine(database_url: str, connect_timeout: int) -> Engine:
    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args={"connect_timeout": connect_timeout},
    )


def get_engine(timeout_seconds: float = 1.0) -> Engine:
    connect_timeout = max(1, int(timeout_seconds))
    return _build_engine(_database_url(), connect_timeout)


def ping_database(timeout_seconds: float = 1.0) -> bool:
    try:
        with get_engine(timeout_seconds).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def _apply_statement_budget(session: Session, operation: str) -> None:
    deadline = current_deadline()
    timeout_ms = _statement_timeout_ms()
    if deadline is not None:
        deadline.check(operation)
        timeout_ms = min(timeout_ms, max(int(deadline.remaining() * 1000), 1))

    if session.get_bind().dialect.name != "postgresql":
        return
    # Transaction-local, so pooled connections never keep a stale budget.
    session.execute(
        text("select set_config('statement_timeout', :timeout, true)"),
        {"timeout": str(timeout_ms)},
    )


def _store_error(operation: str, exc: SQLAlchemyError) -> StoreUnavailableError:
    deadline = current_deadline()
    if deadline is not None and deadline.expired:
        return DeadlineExceededError(f"deadline exceeded during {operation}")
    logger.error("store_operation_failed", extra={"operation": operation}, exc_info=exc)
    return StoreUnavailableError(f"{operation} failed")


@contextmanager
def session_scope(engine: Engine, operation: str) -> Iterator[Session]:
    """Yield the ambient transaction's session, or a short-lived one of our own.

    SQLAlchemy failures leave as ``StoreUnavailableError`` naming ``operation``.
    """
    ambient = _ambient_session.get()
    try:
        if ambient is not None:
            _apply_statement_budget(ambient, operation)
            yield ambient
            return

        with Session(engine) as session, session.begin():
            _apply_statement_budget(session, operation)
            yield session
    except SQLAlchemyError as exc:
        raise _store_error(operation, exc) from exc


class SqlAlchemyTransactionManager(TransactionManager):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if _ambient_session.get() is not None:
            yield
            return

        session = Session(self._engine)
        token = _ambient_session.set(session)
        try:
            session.begin()
            yield
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise _store_error("transaction", exc) from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            _ambient_session.reset(token)
            session.close()
