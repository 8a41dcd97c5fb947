"""CLI interface for redisctl."""

import importlib
import logging

import click

from redisctl.core.config import settings

# Map command names to their module:attribute for lazy import
_COMMANDS = {
    "cloud": "redisctl.cli.cloud:cloud",
    "enterprise": "redisctl.cli.enterprise:enterprise",
    "profile": "redisctl.cli.profile:profile",
    "mcp": "redisctl.cli.mcp:mcp",
}


class LazyGroup(click.Group):
    """
    Lazy loading of CLI commands to avoid hard dependencies at top level.

    The MCP server in particular is only imported when ``redisctl mcp`` runs.
    """

    def list_commands(self, ctx):
        # Keep stable ordering for help output
        return list(_COMMANDS.keys())

    def get_command(self, ctx, name):
        target = _COMMANDS.get(name)
        if not target:
            return None
        module_path, attr = target.split(":", 1)
        mod = importlib.import_module(module_path)
        return getattr(mod, attr)


@click.command(cls=LazyGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """redisctl - track Redis Cloud and Redis Enterprise operations to completion."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from redisctl import __version__
    from redisctl.observability.tracing import setup_tracing

    setup_tracing("redisctl", __version__)


if __name__ == "__main__":
    main()
