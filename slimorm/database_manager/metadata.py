"""
TABLE METADATA MODULE
=====================

Declarative table metadata for model types and the resolver that reads it.

DECLARING METADATA:
==================
```python
@dataclass
class User(Model):
    __tablename__ = "users"

    id: int = primary_key()                 # auto-increment by default
    name: str = None
    email: str = None
    password_hash: str = ignored(default=None)
```

or, without touching the class, at startup:

```python
register_table(User, TableDescriptor("users", "id", auto_increment=True))
```

A registered descriptor wins over whatever the class declares. Resolved
descriptors are cached per type for the lifetime of the resolver; metadata is
a static property of a type and is never re-read.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Tuple

from ..exceptions import MetadataError
from ..utils.logger import logger

# Keys used in dataclasses.field(metadata=...)
PRIMARY_KEY = "slimorm.primary_key"
AUTO_INCREMENT = "slimorm.auto_increment"
IGNORED = "slimorm.ignored"

TABLE_NAME_ATTRIBUTE = "__tablename__"

_MISSING = dataclasses.MISSING


# =============================================================================
# FIELD TAGS
# =============================================================================

def primary_key(auto_increment: bool = True, default: Any = None, **kwargs) -> Any:
    """Tag a dataclass field as the table's primary key."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata.update({PRIMARY_KEY: True, AUTO_INCREMENT: auto_increment})
    return field(default=default, metadata=metadata, **kwargs)


def ignored(default: Any = _MISSING, default_factory: Any = _MISSING, **kwargs) -> Any:
    """Tag a dataclass field as excluded from persistence."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[IGNORED] = True
    if default is _MISSING and default_factory is _MISSING:
        default = None
    if default_factory is not _MISSING:
        return field(default_factory=default_factory, metadata=metadata, **kwargs)
    return field(default=default, metadata=metadata, **kwargs)


# =============================================================================
# TABLE DESCRIPTOR
# =============================================================================

@dataclass(frozen=True)
class TableDescriptor:
    """Resolved metadata for one model type."""
    table_name: str
    primary_key_field: str = ""
    auto_increment: bool = True
    ignored_fields: FrozenSet[str] = frozenset()

    def __post_init__(self):
        # Accept any iterable of names
        object.__setattr__(self, "ignored_fields", frozenset(self.ignored_fields))


# =============================================================================
# METADATA RESOLVER
# =============================================================================

class MetadataResolver:
    """
    Reads table metadata from model types and memoizes it.

    Lookups are cached per type (table name, primary key, descriptor) and per
    (type, field) for ignored-field checks. Nothing is ever evicted.
    """

    def __init__(self):
        self._registry: Dict[type, TableDescriptor] = {}
        self._descriptors: Dict[type, TableDescriptor] = {}
        self._table_names: Dict[type, str] = {}
        self._primary_keys: Dict[type, str] = {}
        self._ignored: Dict[Tuple[type, str], bool] = {}

    def register(self, model: type, descriptor: TableDescriptor) -> None:
        """Supply the descriptor for a type explicitly."""
        if not isinstance(model, type):
            raise MetadataError(f"Only classes can be registered, got {model!r}")
        self._registry[model] = descriptor
        self._forget(model)
        logger.debug(f"Registered table metadata for {model.__name__}: {descriptor.table_name}")

    def is_registered(self, model: type) -> bool:
        return model in self._registry

    def _forget(self, model: type) -> None:
        self._descriptors.pop(model, None)
        self._table_names.pop(model, None)
        self._primary_keys.pop(model, None)
        for key in [key for key in self._ignored if key[0] is model]:
            del self._ignored[key]

    def describe(self, model: type) -> TableDescriptor:
        """Full descriptor for a type, introspected on first use."""
        descriptor = self._descriptors.get(model)
        if descriptor is None:
            descriptor = self._registry.get(model) or self._introspect(model)
            self._descriptors[model] = descriptor
        return descriptor

    def _introspect(self, model: type) -> TableDescriptor:
        logger.debug(f"Introspecting table metadata for {getattr(model, '__name__', model)}")

        table_name = getattr(model, TABLE_NAME_ATTRIBUTE, "") or ""
        if not isinstance(table_name, str):
            raise MetadataError(f"{TABLE_NAME_ATTRIBUTE} of {model.__name__} must be a string")

        primary_keys = []
        auto_increment = True
        ignored_fields = set()

        if dataclasses.is_dataclass(model):
            for model_field in dataclasses.fields(model):
                if model_field.metadata.get(PRIMARY_KEY):
                    primary_keys.append(model_field.name)
                    auto_increment = bool(model_field.metadata.get(AUTO_INCREMENT, True))
                if model_field.metadata.get(IGNORED):
                    ignored_fields.add(model_field.name)

        if len(primary_keys) > 1:
            raise MetadataError(
                f"More than one primary key declared on {model.__name__}",
                ", ".join(primary_keys)
            )

        return TableDescriptor(
            table_name=table_name,
            primary_key_field=primary_keys[0] if primary_keys else "",
            auto_increment=auto_increment,
            ignored_fields=frozenset(ignored_fields)
        )

    def resolve_table_name(self, model: type) -> str:
        table_name = self._table_names.get(model)
        if table_name is None:
            table_name = self.describe(model).table_name
            if not table_name:
                raise MetadataError(f"Table not declared for {model.__name__}")
            self._table_names[model] = table_name
        return table_name

    def resolve_primary_key(self, model: type, allow_empty: bool = False) -> str:
        """
        Name of the primary-key field.

        With allow_empty an undeclared key resolves to "" instead of raising,
        for callers that only need to know whether to exclude a field.
        """
        primary_key_field = self._primary_keys.get(model)
        if primary_key_field is None:
            primary_key_field = self.describe(model).primary_key_field
            self._primary_keys[model] = primary_key_field

        if not primary_key_field and not allow_empty:
            raise MetadataError(f"Primary key not declared for {model.__name__}")
        return primary_key_field

    def is_primary_key_auto_increment(self, model: type) -> bool:
        return self.describe(model).auto_increment

    def is_field_ignored(self, model: type, field_name: str) -> bool:
        key = (model, field_name)
        result = self._ignored.get(key)
        if result is None:
            result = field_name in self.describe(model).ignored_fields
            self._ignored[key] = result
        return result


# Process-wide resolver
default_resolver = MetadataResolver()


def register_table(model: type, descriptor: TableDescriptor) -> None:
    default_resolver.register(model, descriptor)


def resolve_table_name(model: type) -> str:
    return default_resolver.resolve_table_name(model)


def resolve_primary_key(model: type, allow_empty: bool = False) -> str:
    return default_resolver.resolve_primary_key(model, allow_empty)


def is_primary_key_auto_increment(model: type) -> bool:
    return default_resolver.is_primary_key_auto_increment(model)


def is_field_ignored(model: type, field_name: str) -> bool:
    return default_resolver.is_field_ignored(model, field_name)
