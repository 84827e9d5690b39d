import logging
import os
import sys
from datetime import datetime
from functools import wraps


class OrmLogger:
    """
    slimorm logger wrapper
    Level comes from SLIMORM_LOG_LEVEL unless given explicitly
    """

    def __init__(self, name='slimorm', level=None):
        self.name = name
        self.level = level or os.getenv('SLIMORM_LOG_LEVEL', 'WARNING')
        self.setup_logger()

    def setup_logger(self):
        """Bind to the named logger; give it a stdout handler unless it has one"""
        self.logger = logging.getLogger(self.name)

        # Level methods go straight to the stdlib logger
        self.debug = self.logger.debug
        self.info = self.logger.info
        self.warning = self.logger.warning
        self.error = self.logger.error

        if self.logger.handlers:
            return

        log_level = getattr(logging, self.level.upper(), logging.WARNING)
        self.logger.setLevel(log_level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        ))
        self.logger.addHandler(handler)

    def is_debug_enabled(self):
        return self.logger.isEnabledFor(logging.DEBUG)

    def performance(self, operation, duration_ms, details=None):
        """Timing line for a single operation"""
        msg = f"PERF: {operation} took {duration_ms:.2f}ms"
        if details:
            msg += f" - {details}"
        self.debug(msg)


# Global logger instance
logger = OrmLogger()


def log_performance(operation_name):
    """Decorator to log how long the wrapped call took"""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not logger.is_debug_enabled():
                return func(*args, **kwargs)

            start_time = datetime.now()
            try:
                result = func(*args, **kwargs)
                duration = (datetime.now() - start_time).total_seconds() * 1000
                logger.performance(operation_name, duration)
                return result
            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds() * 1000
                logger.performance(f"{operation_name}_FAILED", duration, str(e))
                raise
        return wrapper
    return decorator
