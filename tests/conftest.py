import pytest
from sqlalchemy import text

from slimorm import (
    Crud,
    DatabaseConnection,
    ExecutionLog,
    MetadataResolver,
    QueryExecutor,
    get_sqlite_config,
)

SCHEMA = [
    """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        email TEXT
    )
    """,
    """
    CREATE TABLE articles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT,
        body TEXT,
        published BOOLEAN,
        views INTEGER
    )
    """,
    """
    CREATE TABLE tags (
        code TEXT PRIMARY KEY,
        label TEXT
    )
    """,
    """
    CREATE TABLE audit_entries (
        message TEXT
    )
    """,
    """
    CREATE TABLE accounts (
        account_id INTEGER PRIMARY KEY AUTOINCREMENT,
        owner TEXT
    )
    """,
]


@pytest.fixture
def connection():
    conn = DatabaseConnection(get_sqlite_config())
    for statement in SCHEMA:
        conn.handle.execute(text(statement))
    yield conn
    conn.close()


@pytest.fixture
def log():
    return ExecutionLog()


@pytest.fixture
def executor(connection, log):
    return QueryExecutor(connection, log)


@pytest.fixture
def resolver():
    return MetadataResolver()


@pytest.fixture
def crud(executor, resolver):
    return Crud(executor, resolver)
