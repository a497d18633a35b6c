"""服务层能力导出集合。"""

from todo_api.services.local_auth import IdentityIssuer, IssuedIdentity, normalize_email
from todo_api.services.ownership import authorize, load_owned_task

__all__ = [
    "IdentityIssuer",
    "IssuedIdentity",
    "authorize",
    "load_owned_task",
    "normalize_email",
]
