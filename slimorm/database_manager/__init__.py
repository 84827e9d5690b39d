"""
SLIMORM DATABASE MANAGER MODULE
===============================

Everything needed to map plain model types to table rows and run
parameterized SQL against a single MySQL-flavored database handle.

MODULE RESPONSIBILITIES:
=======================
1. Database Configuration - config.py
2. Connection Ownership - engine.py
3. Table Metadata - metadata.py
4. Model Base - models.py
5. Parameter Binding - binding.py
6. Query Execution - query.py
7. Execution Log - execution_log.py
8. CRUD Operations - crud/

ARCHITECTURE OVERVIEW:
=====================
┌─────────────────┐    ┌─────────────────┐    ┌─────────────────┐
│   Metadata      │    │  QueryExecutor  │    │  Connection     │
│                 │    │                 │    │                 │
│ • Table name    │    │ • Binding       │────│ • One handle    │
│ • Primary key   │    │ • Execution     │    │ • Autocommit    │
│ • Ignored flds  │    │ • Logging       │    │                 │
└─────────────────┘    └─────────────────┘    └─────────────────┘
         │                       │
         └───────────┬───────────┘
                     │
            ┌─────────────────┐     ┌─────────────────┐
            │      Crud       │     │  ExecutionLog   │
            │                 │     │                 │
            │ • get/get_all   │     │ • append only   │
            │ • search        │     │ • last()/all()  │
            │ • insert/update │     │                 │
            │ • delete        │     │                 │
            └─────────────────┘     └─────────────────┘
"""

from .config import DatabaseType, EngineConfig, DatabaseConfig
from .config import (
                    get_mysql_config,
                    get_sqlite_config,
                    get_database_config,
                    load_config_from_env
                    )

from .engine import DatabaseConnection, create_connection, connect

from .metadata import (
                    TableDescriptor,
                    MetadataResolver,
                    default_resolver,
                    primary_key,
                    ignored,
                    register_table,
                    resolve_table_name,
                    resolve_primary_key,
                    is_primary_key_auto_increment,
                    is_field_ignored
                    )

from .models import Model, model_to_dict, instantiate_from_row

from .binding import QueryParameter, ValueKind, PASSTHROUGH_MARKER

from .execution_log import ExecutionLog, ExecutionLogEntry, execution_log

from .query import (
                    QueryExecutor,
                    default_executor,
                    set_connection,
                    execute,
                    get_last_log,
                    get_logs
                    )

from .crud import Crud, default_crud

__all__ = [
    # Configuration
    "DatabaseType",
    "EngineConfig",
    "DatabaseConfig",
    "get_mysql_config",
    "get_sqlite_config",
    "get_database_config",
    "load_config_from_env",

    # Connection
    "DatabaseConnection",
    "create_connection",
    "connect",

    # Metadata
    "TableDescriptor",
    "MetadataResolver",
    "default_resolver",
    "primary_key",
    "ignored",
    "register_table",
    "resolve_table_name",
    "resolve_primary_key",
    "is_primary_key_auto_increment",
    "is_field_ignored",

    # Models
    "Model",
    "model_to_dict",
    "instantiate_from_row",

    # Binding
    "QueryParameter",
    "ValueKind",
    "PASSTHROUGH_MARKER",

    # Execution
    "ExecutionLog",
    "ExecutionLogEntry",
    "execution_log",
    "QueryExecutor",
    "default_executor",
    "set_connection",
    "execute",
    "get_last_log",
    "get_logs",

    # CRUD
    "Crud",
    "default_crud"
]
