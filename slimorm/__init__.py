__version__ = "1.0.0"

from .database_manager import *  # noqa: F401,F403
from .database_manager import __all__ as _database_manager_all
from .exceptions import (
    SlimOrmException,
    MetadataError,
    UsageError,
    CrudError,
    DatabaseConnectionError,
    ConfigurationError,
    create_error_response
)
from .utils import setup_logging

__all__ = list(_database_manager_all) + [
    "SlimOrmException",
    "MetadataError",
    "UsageError",
    "CrudError",
    "DatabaseConnectionError",
    "ConfigurationError",
    "create_error_response",
    "setup_logging"
]
