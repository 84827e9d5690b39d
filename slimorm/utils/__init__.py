from .logger import logger, log_performance
from .logging_config import setup_logging
from .utility_functions import strip_tags, safe_json_dumps, generate_timestamp

__all__ = [
    "logger",
    "log_performance",
    "setup_logging",
    "strip_tags",
    "safe_json_dumps",
    "generate_timestamp"
]
