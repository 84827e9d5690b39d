"""
BASE CRUD MODULE
================

Get / list / search / insert / update / delete operations for any mapped
model type, built only from the MetadataResolver and the QueryExecutor.

CRUD ARCHITECTURE:
==================
┌─────────────────────────────────────────────────────────┐
│                        Crud                             │
├─────────────────────────────────────────────────────────┤
│  READ OPERATIONS:                                       │
│  • get(model, pk_value) → instance | None               │
│  • get_all(model, limit, offset, order_by) → [instance] │
│  • search(model, field, pattern) → [instance]           │
│  • search_custom(model, where, params) → [instance]     │
├─────────────────────────────────────────────────────────┤
│  WRITE OPERATIONS:                                      │
│  • insert(model, instance) → last insert id | None      │
│  • update(model, instance) → None                       │
│  • delete(model, pk_value) → None                       │
│  • delete_any(model, field, value) → rows deleted       │
└─────────────────────────────────────────────────────────┘
         │                              │
         ▼                              ▼
 MetadataResolver                QueryExecutor
 (table, primary key)            (bind, execute, log)

ERROR HANDLING PATTERNS:
========================
• MetadataError: table or primary key not declared (raised before any SQL)
• UsageError: model is not a class, instance of the wrong type, bad field name
• CrudError: executor reported a failure, or a write affected zero rows

Every error raised from a Crud method carries the newest entries of the
executor's log (err.query_logs / err.last_query_log).

USAGE:
=====
```python
crud = Crud()
user_id = crud.insert(User, User(name="Ann", email="a@x.com"))
user = crud.get(User, user_id)
crud.update(User, user)
crud.delete(User, user_id)
```
"""

import re
from functools import wraps
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..metadata import MetadataResolver, default_resolver
from ..models import Model, model_to_dict
from ..query import QueryExecutor, default_executor
from ...exceptions import SlimOrmException, CrudError, UsageError
from ...utils.logger import logger

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

# Newest log entries attached to a raised error
ERROR_LOG_TAIL = 20


def operation_context(operation_name: str):
    """Debug-log the operation and attach the execution log to raised errors."""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                logger.debug(f"Starting operation: {operation_name}")
                result = func(self, *args, **kwargs)
                logger.debug(f"Completed operation: {operation_name}")
                return result

            except SlimOrmException as e:
                if not e.query_logs:
                    e.attach_logs(self.executor.log.tail(ERROR_LOG_TAIL))
                logger.warning(f"{e.error_code} in {operation_name}: {e.message}")
                raise

        return wrapper
    return decorator


class Crud:
    """
    CRUD facade over one QueryExecutor and one MetadataResolver

    INSTANCE ATTRIBUTES:
    ===================
    • executor: QueryExecutor running the statements
    • resolver: MetadataResolver answering table / primary key questions
    """

    def __init__(self, executor: Optional[QueryExecutor] = None,
                 resolver: Optional[MetadataResolver] = None):
        self.executor = executor or default_executor
        self.resolver = resolver or default_resolver

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def _table(self, model: type, instance: Any = None) -> str:
        if not isinstance(model, type):
            raise UsageError(f"Invalid table model: {model!r}", "A class is required")
        if instance is not None and not isinstance(instance, model):
            raise UsageError(
                f"Instance does not match model {model.__name__}",
                f"Got {type(instance).__name__}"
            )
        return self.resolver.resolve_table_name(model)

    def _serialize(self, instance: Any) -> Dict[str, Any]:
        if isinstance(instance, Model):
            return instance.to_dict(resolver=self.resolver)
        return model_to_dict(instance, resolver=self.resolver)

    @staticmethod
    def _check_identifier(name: str) -> str:
        if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
            raise UsageError(f"Invalid field name: {name!r}")
        return name

    def _run(self, sql: str, params: Optional[Mapping[str, Any]], model: Optional[type],
             failure_message: str):
        result = self.executor.execute(sql, params, model)
        if result is False:
            last = self.executor.last_log()
            raise CrudError(
                failure_message,
                last.error_message if last is not None else None,
                query_logs=self.executor.log.tail(ERROR_LOG_TAIL)
            )
        return result

    def _rows_affected(self) -> int:
        last = self.executor.last_log()
        if last is None:
            return 0
        return last.rows_affected or 0

    # ==========================================================================
    # READ OPERATIONS
    # ==========================================================================

    @operation_context("crud.get")
    def get(self, model: type, pk_value: Any) -> Optional[Any]:
        """First row whose primary key equals pk_value, or None."""
        table = self._table(model)
        primary_key = self.resolver.resolve_primary_key(model)

        rows = self._run(
            f"SELECT * FROM {table} WHERE {primary_key} = :value",
            {"value": pk_value},
            model,
            f"Could not read {model.__name__} {pk_value}"
        )
        return rows[0] if rows else None

    @operation_context("crud.get_all")
    def get_all(self, model: type, limit: int = 0, offset: int = 0, order_by: str = "") -> List[Any]:
        """
        Every row of the table

        Args:
            limit: 0 means no LIMIT clause; offset is then ignored
            offset: Rows to skip when limit > 0
            order_by: Raw ORDER BY expression, e.g. "created_at DESC"
        """
        table = self._table(model)

        sql = f"SELECT * FROM {table}"
        if order_by:
            sql += f" ORDER BY {order_by}"
        if int(limit) > 0:
            sql += f" LIMIT {int(offset)},{int(limit)}"

        return self._run(sql, None, model, f"Could not list {model.__name__}") or []

    @operation_context("crud.search")
    def search(self, model: type, field: str, pattern: Any) -> List[Any]:
        """Rows where field LIKE pattern; the caller supplies % / _ wildcards."""
        table = self._table(model)
        self._check_identifier(field)

        return self._run(
            f"SELECT * FROM {table} WHERE {field} LIKE :value",
            {"value": pattern},
            model,
            f"Could not search {model.__name__} by {field}"
        ) or []

    @operation_context("crud.search_custom")
    def search_custom(self, model: type, where: str, params: Optional[Mapping[str, Any]] = None) -> List[Any]:
        """Rows matching a caller-written WHERE fragment with named parameters."""
        table = self._table(model)

        sql = f"SELECT * FROM {table}"
        if where and where.strip():
            sql += f" WHERE {where}"

        return self._run(sql, params, model, f"Could not search {model.__name__}") or []

    # ==========================================================================
    # WRITE OPERATIONS
    # ==========================================================================

    @operation_context("crud.insert")
    def insert(self, model: type, instance: Any) -> Optional[int]:
        """
        Insert instance as a new row

        An auto-increment primary key is left out of the column list.

        Returns:
            The new row id, or None when the key is not auto-increment or the
            driver reports none
        """
        table = self._table(model, instance)
        data = self._serialize(instance)

        primary_key = self.resolver.resolve_primary_key(model, allow_empty=True)
        auto_increment = bool(primary_key) and self.resolver.is_primary_key_auto_increment(model)
        if auto_increment:
            data.pop(primary_key, None)

        fields = ", ".join(data)
        placeholders = ", ".join(f":{name}" for name in data)

        self._run(
            f"INSERT INTO {table} ({fields}) VALUES ({placeholders})",
            data,
            None,
            f"Could not insert {model.__name__}"
        )
        if self._rows_affected() == 0:
            raise CrudError(f"Could not insert {model.__name__}", "No row was inserted")

        if not auto_increment:
            return None
        return self.executor.last_log().last_insert_id or None

    @operation_context("crud.update")
    def update(self, model: type, instance: Any) -> None:
        """Write every non-key field of instance to the row with its primary key."""
        table = self._table(model, instance)
        primary_key = self.resolver.resolve_primary_key(model)
        data = self._serialize(instance)

        if primary_key not in data:
            raise UsageError(f"{model.__name__} instance has no {primary_key} field")

        assignments = ", ".join(f"{name}=:{name}" for name in data if name != primary_key)

        self._run(
            f"UPDATE {table} SET {assignments} WHERE {primary_key}=:{primary_key}",
            data,
            None,
            f"Could not update {model.__name__} {data[primary_key]}"
        )
        if self._rows_affected() == 0:
            raise CrudError(
                f"Could not update {model.__name__} {data[primary_key]}",
                "No row matched the primary key"
            )

    @operation_context("crud.delete")
    def delete(self, model: type, pk_value: Any) -> None:
        table = self._table(model)
        primary_key = self.resolver.resolve_primary_key(model)

        self._run(
            f"DELETE FROM {table} WHERE {primary_key} = :{primary_key}",
            {primary_key: pk_value},
            None,
            f"Could not delete {model.__name__} {pk_value}"
        )
        if self._rows_affected() == 0:
            raise CrudError(
                f"Could not delete {model.__name__} {pk_value}",
                "No row matched the primary key"
            )

    @operation_context("crud.delete_any")
    def delete_any(self, model: type, field: str, value: Any) -> int:
        """Delete every row where field equals value. Returns the number deleted."""
        table = self._table(model)
        self._check_identifier(field)

        self._run(
            f"DELETE FROM {table} WHERE {field} = :value",
            {"value": value},
            None,
            f"Could not delete {model.__name__} by {field}"
        )
        deleted = self._rows_affected()
        if deleted == 0:
            raise CrudError(
                f"Could not delete {model.__name__} by {field}",
                f"No row has {field} = {value!r}"
            )
        return deleted


# Process-wide facade over the default executor and resolver
default_crud = Crud()
