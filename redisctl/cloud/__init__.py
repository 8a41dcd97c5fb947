"""Redis Cloud API client, task tracking and workflows."""

from .client import CloudClient, RedisCloudConfig
from .params import (
    BackupDatabaseParams,
    CreateDatabaseParams,
    ImportDatabaseParams,
    UpdateDatabaseParams,
    build_params,
)
from .tasks import CLOUD_HANDLE_KEYS, CloudTaskSource
from .workflows import (
    backup_database_and_wait,
    create_database_and_wait,
    create_subscription_and_wait,
    delete_database_and_wait,
    delete_subscription_and_wait,
    flush_database_and_wait,
    import_database_and_wait,
    update_database_and_wait,
    update_subscription_and_wait,
)

__all__ = [
    "BackupDatabaseParams",
    "CLOUD_HANDLE_KEYS",
    "CloudClient",
    "CloudTaskSource",
    "CreateDatabaseParams",
    "ImportDatabaseParams",
    "RedisCloudConfig",
    "UpdateDatabaseParams",
    "backup_database_and_wait",
    "build_params",
    "create_database_and_wait",
    "create_subscription_and_wait",
    "delete_database_and_wait",
    "delete_subscription_and_wait",
    "flush_database_and_wait",
    "import_database_and_wait",
    "update_database_and_wait",
    "update_subscription_and_wait",
]
