"""
EXECUTION LOG MODULE
====================

Append-only history of every statement the query executor ran, successful or
not. Entries are never edited or removed; the log is unbounded unless it is
created with max_entries, in which case the oldest entries fall off.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from itertools import islice
from typing import Any, Dict, Iterator, Optional, Tuple

from ..utils.utility_functions import generate_timestamp


@dataclass(frozen=True)
class ExecutionLogEntry:
    """One executed statement."""
    sql_template: str
    literalized_sql: str
    rows_affected: Optional[int] = None
    last_insert_id: Any = None
    is_error: bool = False
    error_message: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)
    # Non-owning back-reference for diagnostics
    connection: Any = field(default=None, repr=False, compare=False)
    timestamp: datetime = field(default_factory=generate_timestamp)

    def __str__(self) -> str:
        stamp = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        if self.is_error:
            return f"{stamp}: {self.error_message} | {self.literalized_sql}"
        return f"{stamp}: {self.rows_affected} row(s) affected | {self.literalized_sql}"


class ExecutionLog:
    """Ordered sequence of ExecutionLogEntry objects."""

    def __init__(self, max_entries: Optional[int] = None):
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be a positive integer or None")
        self.max_entries = max_entries
        self._entries = deque(maxlen=max_entries)

    def append(self, entry: ExecutionLogEntry) -> None:
        self._entries.append(entry)

    def all(self) -> Tuple[ExecutionLogEntry, ...]:
        return tuple(self._entries)

    def last(self) -> Optional[ExecutionLogEntry]:
        return self._entries[-1] if self._entries else None

    def tail(self, count: int) -> Tuple[ExecutionLogEntry, ...]:
        """The newest count entries, oldest first."""
        if count <= 0:
            return ()
        newest = list(islice(reversed(self._entries), count))
        newest.reverse()
        return tuple(newest)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ExecutionLogEntry]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"ExecutionLog(entries={len(self._entries)}, max_entries={self.max_entries})"


# Process-wide log shared by the default executor
execution_log = ExecutionLog()
