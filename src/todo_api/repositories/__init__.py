"""存储层导出集合。"""

from todo_api.repositories.base import CredentialStore, DuplicateIdentityError, StoreError, TaskStore
from todo_api.repositories.tasks import SqlTaskStore
from todo_api.repositories.users import SqlUserStore

__all__ = [
    "CredentialStore",
    "DuplicateIdentityError",
    "SqlTaskStore",
    "SqlUserStore",
    "StoreError",
    "TaskStore",
]
