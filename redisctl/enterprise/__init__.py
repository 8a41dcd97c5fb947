"""Redis Enterprise cluster API client, action tracking and workflows."""

from .actions import ENTERPRISE_HANDLE_KEYS, EnterpriseActionSource
from .client import EnterpriseClient, RedisEnterpriseConfig
from .workflows import (
    backup_database_and_wait,
    import_database_and_wait,
    upgrade_database_and_wait,
    upgrade_module_and_wait,
)

__all__ = [
    "ENTERPRISE_HANDLE_KEYS",
    "EnterpriseActionSource",
    "EnterpriseClient",
    "RedisEnterpriseConfig",
    "backup_database_and_wait",
    "import_database_and_wait",
    "upgrade_database_and_wait",
    "upgrade_module_and_wait",
]
