"""
MODEL BASE MODULE
=================

Base class for plain data-holding model types mapped to table rows.

Models are ordinary dataclasses (or any class registered with a
TableDescriptor). slimorm never mutates a model: it reads one into a
field -> value map for INSERT/UPDATE and builds fresh instances from
result rows.

```python
@dataclass
class User(Model):
    __tablename__ = "users"

    id: int = primary_key()
    name: str = None
    email: str = None
```
"""

import dataclasses
from typing import Any, ClassVar, Dict, Mapping, Optional

from .metadata import MetadataResolver, default_resolver


def _field_items(instance: Any):
    if dataclasses.is_dataclass(instance):
        for model_field in dataclasses.fields(instance):
            yield model_field.name, getattr(instance, model_field.name)
    else:
        yield from vars(instance).items()


def model_to_dict(instance: Any, full: bool = False,
                  resolver: Optional[MetadataResolver] = None) -> Dict[str, Any]:
    """
    Field name -> value map of a model instance

    Fields tagged as ignored are left out unless full is True. Nested models
    are serialized the same way.
    """
    resolver = resolver or default_resolver
    model = type(instance)

    data = {}
    for name, value in _field_items(instance):
        if not full and resolver.is_field_ignored(model, name):
            continue
        if isinstance(value, Model):
            value = model_to_dict(value, full=full, resolver=resolver)
        data[name] = value
    return data


class Model:
    """Base class for mapped model types."""

    __tablename__: ClassVar[str] = ""

    def to_dict(self, full: bool = False,
                resolver: Optional[MetadataResolver] = None) -> Dict[str, Any]:
        return model_to_dict(self, full=full, resolver=resolver)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        return instantiate_from_row(cls, row)


def instantiate_from_row(cls: type, row: Mapping[str, Any]) -> Any:
    """
    Materialize a result row into cls without calling __init__

    Works for Model subclasses and for any registered plain class. Declared
    dataclass defaults are applied first, then every column of the row is set
    as an attribute, including columns the class does not declare.
    """
    instance = cls.__new__(cls)
    if dataclasses.is_dataclass(cls):
        for model_field in dataclasses.fields(cls):
            if model_field.default is not dataclasses.MISSING:
                setattr(instance, model_field.name, model_field.default)
            elif model_field.default_factory is not dataclasses.MISSING:
                setattr(instance, model_field.name, model_field.default_factory())
            else:
                setattr(instance, model_field.name, None)

    for column, value in row.items():
        setattr(instance, column, value)
    return instance
