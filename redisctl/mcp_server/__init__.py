"""MCP server for redisctl.

Exposes the wait-for-completion workflows as MCP tools.

Mutating tools (refused in read-only mode):
- cloud_create_database, cloud_update_database, cloud_delete_database
- cloud_backup_database, cloud_import_database, cloud_delete_subscription
- enterprise_upgrade_database, enterprise_backup_database, enterprise_import_database

Wait tools:
- cloud_wait_task: Wait on an existing Redis Cloud task
- enterprise_wait_action: Wait on an existing Redis Enterprise action
"""

from redisctl.mcp_server.server import mcp

__all__ = ["mcp"]
