from typing import Dict, Any, Iterable, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class SlimOrmException(Exception):
    """Base exception for every error raised by slimorm"""
    def __init__(self, message: str, error_code: str = None, details: str = None,
                 query_logs: Optional[Iterable] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "GENERAL_ERROR"
        self.details = details
        self.query_logs = tuple(query_logs or ())

    def attach_logs(self, query_logs: Iterable) -> None:
        """Snapshot the execution history at the moment the error surfaced"""
        self.query_logs = tuple(query_logs)

    @property
    def last_query_log(self):
        return self.query_logs[-1] if self.query_logs else None

    def __str__(self) -> str:
        return self.message


class MetadataError(SlimOrmException):
    """Table name or primary key could not be resolved for a model type"""
    def __init__(self, message: str, details: str = None, error_code: str = None):
        super().__init__(message, error_code or "METADATA_ERROR", details)


class UsageError(SlimOrmException):
    """The library was called in a way it cannot honour"""
    def __init__(self, message: str, details: str = None, error_code: str = None):
        super().__init__(message, error_code or "USAGE_ERROR", details)


class CrudError(SlimOrmException):
    """A CRUD statement failed or did not affect the expected rows"""
    def __init__(self, message: str, details: str = None, error_code: str = None,
                 query_logs: Optional[Iterable] = None):
        super().__init__(message, error_code or "CRUD_ERROR", details, query_logs)


class DatabaseConnectionError(SlimOrmException):
    """The database handle could not be opened"""
    def __init__(self, message: str, details: str = None, error_code: str = None):
        super().__init__(message, error_code or "CONNECTION_ERROR", details)


class ConfigurationError(SlimOrmException):
    """Invalid or incomplete database configuration"""
    def __init__(self, message: str, details: str = None, error_code: str = None):
        super().__init__(message, error_code or "CONFIGURATION_ERROR", details)


def create_error_response(exception: SlimOrmException) -> Dict[str, Any]:
    # 1. Log the error
    logger.error(f"Error: {exception.error_code} - {exception.message}")
    if exception.details:
        logger.error(f"Details: {exception.details}")

    last_log = exception.last_query_log

    # 2. Build the response payload
    return {
        "status": "error",
        "timestamp": datetime.now().isoformat(),
        "error_code": exception.error_code,
        "message": exception.message,
        "details": exception.details,
        "last_query": str(last_log) if last_log is not None else None,
    }
