"""
PARAMETER BINDING MODULE
========================

Every raw parameter handed to the query executor is classified exactly once
into a QueryParameter. Its ValueKind decides both how the value is bound to
the statement and how it is written into the literalized SQL of the
execution log, so the two can never disagree.

CLASSIFICATION ORDER:
====================
1. None, or empty by truthiness (but not int 0 / bool False) → NULL / EMPTY
2. bool                                                        → BOOL
3. int                                                         → INT
4. name ends with PASSTHROUGH_MARKER                           → RAW_TEXT
5. anything else                                               → TEXT (trimmed, tags stripped)

| kind     | bound as        | literalized as   |
|----------|-----------------|------------------|
| NULL     | SQL NULL        | NULL             |
| EMPTY    | SQL NULL        | ""               |
| BOOL     | Boolean         | 1 / 0            |
| INT      | Integer         | 42               |
| RAW_TEXT | String, as is   | "<b>as is</b>"   |
| TEXT     | String, cleaned | "cleaned"        |
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import bindparam, Boolean, Integer, String
from sqlalchemy.sql.elements import BindParameter

from ..utils.utility_functions import strip_tags, safe_json_dumps

PASSTHROUGH_MARKER = "*"

PLACEHOLDER_PATTERN = re.compile(r"(?<![:\w]):(\w+)")


class ValueKind(Enum):
    NULL = "null"
    EMPTY = "empty"
    BOOL = "bool"
    INT = "int"
    TEXT = "text"
    RAW_TEXT = "raw_text"


def _is_empty(value: Any) -> bool:
    # bool is an int subclass, so 0 and False are both excluded here
    if isinstance(value, int):
        return False
    try:
        return not value
    except (TypeError, ValueError):
        return False


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return safe_json_dumps(list(value) if isinstance(value, (set, frozenset)) else value)
    if hasattr(value, "to_dict"):
        return safe_json_dumps(value.to_dict())
    return str(value)


@dataclass(frozen=True)
class QueryParameter:
    """A named parameter together with the one classification it gets."""
    name: str
    raw_value: Any
    passthrough: bool
    kind: ValueKind

    @classmethod
    def from_item(cls, key: str, value: Any) -> "QueryParameter":
        passthrough = key.endswith(PASSTHROUGH_MARKER)
        name = key.replace(PASSTHROUGH_MARKER, "")

        if value is None:
            kind = ValueKind.NULL
        elif _is_empty(value):
            kind = ValueKind.EMPTY
        elif isinstance(value, bool):
            kind = ValueKind.BOOL
        elif isinstance(value, int):
            kind = ValueKind.INT
        elif passthrough:
            kind = ValueKind.RAW_TEXT
        else:
            kind = ValueKind.TEXT

        return cls(name=name, raw_value=value, passthrough=passthrough, kind=kind)

    @property
    def value(self) -> Any:
        """Value that is actually sent to the driver."""
        if self.kind in (ValueKind.NULL, ValueKind.EMPTY):
            return None
        if self.kind in (ValueKind.BOOL, ValueKind.INT):
            return self.raw_value
        if self.kind == ValueKind.RAW_TEXT:
            return _as_text(self.raw_value)
        return strip_tags(_as_text(self.raw_value).strip())

    def to_bindparam(self) -> BindParameter:
        if self.kind == ValueKind.BOOL:
            return bindparam(self.name, self.value, type_=Boolean())
        if self.kind == ValueKind.INT:
            return bindparam(self.name, self.value, type_=Integer())
        if self.kind in (ValueKind.TEXT, ValueKind.RAW_TEXT):
            return bindparam(self.name, self.value, type_=String())
        return bindparam(self.name, None)

    def literal(self) -> str:
        """Human-readable literal for the execution log. Never executed."""
        if self.kind == ValueKind.NULL:
            return "NULL"
        if self.kind == ValueKind.EMPTY:
            return '""'
        if self.kind == ValueKind.BOOL:
            return "1" if self.raw_value else "0"
        if self.kind == ValueKind.INT:
            return str(self.raw_value)
        escaped = self.value.replace('"', '\\"')
        return f'"{escaped}"'


def build_parameters(params: Optional[Mapping[str, Any]]) -> List[QueryParameter]:
    if not params:
        return []
    return [QueryParameter.from_item(str(key), value) for key, value in params.items()]


def literalize(sql: str, parameters: List[QueryParameter]) -> str:
    """Substitute each :name placeholder with its parameter's literal."""
    if not parameters:
        return sql

    literals: Dict[str, str] = {parameter.name: parameter.literal() for parameter in parameters}

    def _replace(match):
        return literals.get(match.group(1), match.group(0))

    return PLACEHOLDER_PATTERN.sub(_replace, sql)
