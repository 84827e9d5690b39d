"""
DATABASE ENGINE MODULE
======================

This module wraps the SQLAlchemy engine behind slimorm's single database
handle. A DatabaseConnection opens exactly one live connection when it is
constructed and keeps it until close() is called.

MODULE RESPONSIBILITIES:
=======================
1. SQLAlchemy Engine Management - Engine creation and disposal
2. Handle Ownership - One long-lived connection, no reconnect per call
3. Connection Testing - Database health check
4. Connection Info - Diagnostics without leaking the password

CONNECTION LIFECYCLE:
====================
┌─────────────┐    ┌─────────────┐    ┌─────────────┐
│   Opened    │───▶│   In use    │───▶│   Closed    │
│             │    │             │    │             │
│ • Engine    │    │ • Queries   │    │ • Handle    │
│ • Handle    │    │   executed  │    │   closed    │
│   connected │    │             │    │ • Disposed  │
└─────────────┘    └─────────────┘    └─────────────┘

USAGE:
=====
```python
conn = connect("shop", host="db.internal", user="app", password="secret")
set_connection(conn)
...
conn.close()

# or scoped
with create_connection(get_sqlite_config()) as conn:
    ...
```

A connection that cannot be opened raises DatabaseConnectionError; the caller
decides whether to abort.
"""

from typing import Optional, Dict, Any

from sqlalchemy import create_engine, Engine, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from .config import DatabaseConfig, get_mysql_config
from ..exceptions import DatabaseConnectionError, UsageError
from ..utils.logger import logger

# =============================================================================
# DATABASE CONNECTION TESTING UTILITIES
# =============================================================================

def check_database_connection(handle: Connection, db_type: str = "mysql") -> bool:
    """
    Run a trivial query on an open handle

    - MySQL: SELECT VERSION()
    - SQLite: SELECT 1

    Returns:
        bool: True when the query succeeded
    """
    try:
        if db_type.lower() == 'mysql':
            handle.execute(text("SELECT VERSION()"))
        else:
            handle.execute(text("SELECT 1"))
        logger.debug("Database connection test successful")
        return True

    except SQLAlchemyError as e:
        logger.warning(f"Database connection test failed: {e}")
        return False

# =============================================================================
# DATABASE CONNECTION CLASS
# =============================================================================

class DatabaseConnection:
    """
    Owner of one live database handle

    INSTANCE ATTRIBUTES:
    ===================
    • __config: DatabaseConfig instance (private)
    • __engine: SQLAlchemy Engine instance (private)
    • __handle: Open SQLAlchemy Connection (private)
    • is_alive: True between construction and close()

    The handle is configured for autocommit, so every statement executed on it
    is committed by the driver on its own.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        """
        Create the engine and open the handle

        Raises:
            DatabaseConnectionError: Engine creation or connect failed
        """
        self.__config: DatabaseConfig = config
        self.__engine: Optional[Engine] = None
        self.__handle: Optional[Connection] = None
        self.is_alive: bool = False

        url = config.get_url()
        try:
            # Step 1: Engine
            self.__engine = create_engine(url, **config.engine_config.to_dict())

            # Step 2: The one handle this object owns
            self.__handle = self.__engine.connect()
            self.is_alive = True
            logger.info(f"Connected to database {config.db_name}")

        except SQLAlchemyError as e:
            logger.error(f"Error connecting to database {config.db_name}: {e}")
            if self.__engine is not None:
                self.__engine.dispose()
            self.__engine = None
            raise DatabaseConnectionError(
                f"Could not connect to database {config.db_name}",
                str(e)
            ) from e

    @property
    def handle(self) -> Connection:
        """
        The live SQLAlchemy connection

        Raises:
            UsageError: The connection was already closed
        """
        if not self.is_alive or self.__handle is None:
            raise UsageError("Connection is closed")
        return self.__handle

    @property
    def database_name(self) -> str:
        return self.__config.db_name

    @property
    def config(self) -> DatabaseConfig:
        return self.__config

    def close(self) -> None:
        """Close the handle and dispose of the engine. Safe to call twice."""
        if self.__handle is not None:
            self.__handle.close()
        if self.__engine is not None:
            self.__engine.dispose()

        self.__handle = None
        self.__engine = None
        if self.is_alive:
            logger.info(f"Disconnected from database {self.__config.db_name}")
        self.is_alive = False

    def test_connection(self) -> bool:
        if not self.is_alive:
            return False
        return check_database_connection(self.__handle, self.__config.db_type.value)

    def get_connection_info(self) -> Dict[str, Any]:
        """
        Diagnostics snapshot of the connection

        Returns:
            Dict[str, Any]: URL with password masked, type, name and state
        """
        return {
            'connection_string': self.__config.get_url().render_as_string(hide_password=True),
            'database_type': self.__config.db_type.value,
            'database_name': self.__config.db_name,
            'is_alive': self.is_alive,
        }

    def __enter__(self) -> "DatabaseConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (f"DatabaseConnection("
                f"db_type={self.__config.db_type.value}, "
                f"db_name={self.__config.db_name}, "
                f"is_alive={self.is_alive})")

# =============================================================================
# CONNECTION FACTORY FUNCTIONS
# =============================================================================

def create_connection(config: DatabaseConfig) -> DatabaseConnection:
    return DatabaseConnection(config)


def connect(
    database: str,
    host: str = "localhost",
    user: str = "root",
    password: str = "",
    port: int = 3306
) -> DatabaseConnection:
    """
    Open a MySQL connection from plain credentials

    Example:
        >>> conn = connect("shop", host="127.0.0.1", user="app", password="secret")
        >>> conn.database_name
        'shop'
    """
    config = get_mysql_config(
        db_name=database,
        host=host,
        port=port,
        username=user,
        password=password
    )
    return DatabaseConnection(config)
