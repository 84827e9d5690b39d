"""
QUERY EXECUTOR MODULE
=====================

Runs parameterized SQL on the active DatabaseConnection and records every
execution in an ExecutionLog.

EXECUTION FLOW:
==============
┌──────────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐
│   Classify   │───▶│ Bind/Execute │───▶│  Log entry   │───▶│    Return    │
│              │    │              │    │              │    │              │
│ • ValueKind  │    │ • text()     │    │ • always one │    │ • rows       │
│   per param  │    │ • rowcount   │    │ • literal    │    │ • True       │
│              │    │ • lastrowid  │    │   SQL        │    │ • False      │
└──────────────┘    └──────────────┘    └──────────────┘    └──────────────┘

Driver errors (any SQLAlchemyError) are captured into the log entry and
reported as a False return; they are not raised from here. A call made on a
closed connection is logged and reported the same way.

```python
set_connection(connect("shop", user="app", password="secret"))

rows = execute("SELECT * FROM users WHERE id = :id", {"id": 7}, User)
ok = execute("UPDATE users SET bio = :bio WHERE id = :id", {"bio*": "<b>hi</b>", "id": 7})
```
"""

import re
from typing import Any, List, Mapping, Optional, Type, Union

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .binding import build_parameters, literalize
from .engine import DatabaseConnection
from .execution_log import ExecutionLog, ExecutionLogEntry, execution_log
from .models import instantiate_from_row
from ..exceptions import UsageError
from ..utils.logger import logger, log_performance

INSERT_PATTERN = re.compile(r"^\s*(insert|replace)", re.IGNORECASE)
ROWS_PATTERN = re.compile(r"^\s*(select|show|with)", re.IGNORECASE)

CLOSED_CONNECTION_MESSAGE = "Connection is closed"

RowSet = List[Any]


def returns_rows(sql: str) -> bool:
    return bool(ROWS_PATTERN.match(sql))


def reports_insert_id(sql: str) -> bool:
    return bool(INSERT_PATTERN.match(sql))


def materialize(rows: List[Mapping[str, Any]], model: Optional[type]) -> RowSet:
    if model is None:
        return [dict(row) for row in rows]
    return [instantiate_from_row(model, row) for row in rows]


class QueryExecutor:
    """
    Executes statements against one DatabaseConnection

    INSTANCE ATTRIBUTES:
    ===================
    • connection: Active DatabaseConnection or None
    • log: ExecutionLog receiving one entry per execute() call
    """

    def __init__(self, connection: Optional[DatabaseConnection] = None,
                 log: Optional[ExecutionLog] = None):
        self._connection = connection
        self._log = log if log is not None else ExecutionLog()

    @property
    def connection(self) -> Optional[DatabaseConnection]:
        return self._connection

    @property
    def log(self) -> ExecutionLog:
        return self._log

    def set_connection(self, connection: DatabaseConnection) -> None:
        """Make connection the active one. The previous one is left open."""
        self._connection = connection

    def last_log(self) -> Optional[ExecutionLogEntry]:
        return self._log.last()

    def _reset_handle(self) -> None:
        # A failed statement can leave SQLAlchemy's implicit transaction open
        handle = self._connection.handle
        if handle.in_transaction():
            try:
                handle.rollback()
            except SQLAlchemyError as e:
                logger.warning(f"Rollback after failed query raised: {e}")

    @log_performance("query.execute")
    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None,
                model: Optional[Type] = None) -> Union[RowSet, bool]:
        """
        Run one statement

        Args:
            sql: Template with :name placeholders
            params: name -> raw value; a trailing '*' on a name disables sanitizing
            model: Class to materialize SELECT rows into

        Returns:
            Rows for SELECT/SHOW/WITH statements, True for anything else that
            succeeded, False when the driver reported an error or the
            connection was already closed

        Raises:
            UsageError: No connection has been set
        """
        if self._connection is None:
            raise UsageError("No connection set", "Call set_connection() before executing queries")

        parameters = build_parameters(params)
        wants_rows = returns_rows(sql)

        error = None
        rows = None
        rows_affected = None
        last_id = None
        if not self._connection.is_alive:
            error = CLOSED_CONNECTION_MESSAGE
        else:
            try:
                # Step 1: Prepare and bind
                statement = text(sql)
                if parameters:
                    statement = statement.bindparams(*[p.to_bindparam() for p in parameters])

                # Step 2: Execute
                result = self._connection.handle.execute(statement)

                # Step 3: Outcome
                if wants_rows:
                    rows = result.mappings().all()
                    rows_affected = len(rows)
                else:
                    rows_affected = result.rowcount
                    if reports_insert_id(sql):
                        last_id = result.lastrowid

            except SQLAlchemyError as e:
                error = str(getattr(e, "orig", None) or e)
                self._reset_handle()

        # Step 4: Always log
        entry = ExecutionLogEntry(
            sql_template=sql,
            literalized_sql=literalize(sql, parameters),
            rows_affected=rows_affected,
            last_insert_id=last_id,
            is_error=error is not None,
            error_message=error,
            params=dict(params or {}),
            connection=self._connection
        )
        self._log.append(entry)

        if error is not None:
            logger.warning(f"Query failed: {error} | {entry.literalized_sql}")
            return False

        logger.debug(f"Query executed: {rows_affected} row(s) | {entry.literalized_sql}")

        if wants_rows:
            return materialize(rows, model)
        return True


# =============================================================================
# PROCESS-WIDE EXECUTOR
# =============================================================================

default_executor = QueryExecutor(log=execution_log)


def set_connection(connection: DatabaseConnection) -> None:
    default_executor.set_connection(connection)


def execute(sql: str, params: Optional[Mapping[str, Any]] = None,
            model: Optional[Type] = None) -> Union[RowSet, bool]:
    return default_executor.execute(sql, params, model)


def get_last_log() -> Optional[ExecutionLogEntry]:
    return default_executor.last_log()


def get_logs():
    return default_executor.log.all()
