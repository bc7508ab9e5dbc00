"""Driver adapter over a SQLAlchemy engine.

Statements go through ``exec_driver_sql`` so the text reaches the DBAPI
cursor without SQLAlchemy bind processing; bind parameters use the DBAPI
paramstyle of the engine's driver (``?`` for SQLite, ``%s`` for psycopg).

``format``/``pyformat`` drivers interpolate ``%`` across the whole statement
when parameters are given, so the ``%XX`` escapes of a trailing comment are
doubled for them.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from opentelemetry.context import Context
from sqlalchemy.engine import Connection, CursorResult, Engine, RootTransaction

from sqlcomment.driver import TxOptions

logger = logging.getLogger(__name__)

_PERCENT_PARAMSTYLES = ("format", "pyformat")


def _escape_comment_percent(query: str) -> str:
    # Encoded tags never contain " /*", so the last one opens the appended comment.
    if not query.endswith("*/"):
        return query
    start = query.rfind(" /*")
    if start == -1:
        return query
    return query[:start] + query[start:].replace("%", "%%")


def _is_single_row(args: List[Any]) -> bool:
    return not any(isinstance(arg, (tuple, list, Mapping)) for arg in args)


def _run(conn: Connection, query: str, args: Optional[Any]) -> CursorResult:
    if args is None or (isinstance(args, (list, tuple)) and not args):
        return conn.exec_driver_sql(query)
    if isinstance(args, list) and _is_single_row(args):
        args = tuple(args)
    if conn.dialect.paramstyle in _PERCENT_PARAMSTYLES:
        query = _escape_comment_percent(query)
    return conn.exec_driver_sql(query, args)


def _rows(result: CursorResult) -> List[Dict[str, Any]]:
    return [dict(row) for row in result.mappings()]


class EngineTx:
    """A transaction on a dedicated engine connection."""

    def __init__(self, conn: Connection, transaction: RootTransaction) -> None:
        """Track the connection and its open transaction."""
        self._conn = conn
        self._transaction = transaction

    @property
    def connection(self) -> Connection:
        """Return the connection the transaction runs on."""
        return self._conn

    def execute(self, ctx: Context, query: str, args: Optional[Sequence[Any]] = None) -> int:
        """Run a statement and return the affected row count."""
        _ = ctx
        return _run(self._conn, query, args).rowcount

    def query(
        self, ctx: Context, query: str, args: Optional[Sequence[Any]] = None
    ) -> List[Dict[str, Any]]:
        """Run a query and return all rows as dicts."""
        _ = ctx
        return _rows(_run(self._conn, query, args))

    def execute_context(self, ctx: Context, query: str, *args: Any) -> CursorResult:
        """Run a statement and return the raw cursor result."""
        _ = ctx
        return _run(self._conn, query, args or None)

    def query_context(self, ctx: Context, query: str, *args: Any) -> CursorResult:
        """Run a query and return the unconsumed cursor result."""
        _ = ctx
        return _run(self._conn, query, args or None)

    def commit(self) -> None:
        """Commit and release the connection."""
        try:
            self._transaction.commit()
        finally:
            self._conn.close()

    def rollback(self) -> None:
        """Roll back and release the connection."""
        try:
            self._transaction.rollback()
        finally:
            self._conn.close()


class EngineDriver:
    """Exposes a SQLAlchemy engine through the driver interface.

    ``execute`` and ``query`` run in their own short transaction. The
    driver-level ``execute_context``/``query_context`` are not offered since
    their cursor result would outlive the connection.
    """

    driver_package = "sqlalchemy"

    def __init__(self, engine: Engine) -> None:
        """Wrap ``engine``."""
        self._engine = engine

    @property
    def engine(self) -> Engine:
        """Return the wrapped engine."""
        return self._engine

    def dialect(self) -> str:
        """Return the engine dialect name."""
        return self._engine.dialect.name

    def execute(self, ctx: Context, query: str, args: Optional[Sequence[Any]] = None) -> int:
        """Run a statement in its own transaction and return the row count."""
        _ = ctx
        with self._engine.begin() as conn:
            return _run(conn, query, args).rowcount

    def query(
        self, ctx: Context, query: str, args: Optional[Sequence[Any]] = None
    ) -> List[Dict[str, Any]]:
        """Run a query and return all rows as dicts."""
        _ = ctx
        with self._engine.connect() as conn:
            return _rows(_run(conn, query, args))

    def tx(self, ctx: Context) -> EngineTx:
        """Begin a transaction with the engine defaults."""
        return self.begin_tx(ctx, TxOptions())

    def begin_tx(self, ctx: Context, options: TxOptions) -> EngineTx:
        """Begin a transaction applying ``options`` to its connection."""
        _ = ctx
        conn = self._engine.connect()
        try:
            execution_options: Dict[str, Any] = {}
            if options.isolation_level:
                execution_options["isolation_level"] = options.isolation_level
            if options.read_only:
                execution_options["postgresql_readonly"] = True
            if execution_options:
                conn.execution_options(**execution_options)
            transaction = conn.begin()
        except Exception:
            conn.close()
            raise
        logger.debug(
            "Began %s transaction (isolation=%s, read_only=%s)",
            self._engine.dialect.name,
            options.isolation_level or "default",
            options.read_only,
        )
        return EngineTx(conn, transaction)

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self._engine.dispose()
