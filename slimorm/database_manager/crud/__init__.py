"""
DATABASE CRUD MODULE
====================

Generic CRUD facade for mapped model types.

```python
from slimorm.database_manager.crud import Crud

crud = Crud(executor, resolver)
users = crud.get_all(User, limit=10, order_by="id DESC")
```
"""

from .base_crud import Crud, default_crud, operation_context

__all__ = [
    "Crud",
    "default_crud",
    "operation_context"
]
