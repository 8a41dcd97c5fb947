"""`redisctl mcp` - serve the workflow tools over the Model Context Protocol."""

import click

from redisctl.core.config import settings


@click.group()
def mcp():
    """Serve redisctl workflows to MCP clients."""
    pass


@mcp.command("serve")
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http"]),
    default="stdio",
    help="stdio for local clients, http for Streamable HTTP",
)
@click.option("--host", default="127.0.0.1", help="Bind address (http only)")
@click.option("--port", default=8081, type=int, help="Bind port (http only)")
def serve(transport: str, host: str, port: int):
    """Start the MCP server.

    Mutating tools are refused unless REDISCTL_MCP_READ_ONLY=false.

    \b
    Examples:
      redisctl mcp serve
      REDISCTL_MCP_READ_ONLY=false redisctl mcp serve --transport http --port 8081
    """
    from redisctl.mcp_server.server import run_http, run_stdio

    if transport == "stdio":
        # stdout carries the JSON-RPC stream
        run_stdio()
        return

    mode = "read-only" if settings.mcp_read_only else "read-write"
    click.echo(f"Serving redisctl MCP tools ({mode}) in HTTP mode at http://{host}:{port}/mcp")
    run_http(host=host, port=port)


@mcp.command("list-tools")
def list_tools():
    """List the MCP tools and whether they change remote state."""
    from redisctl.mcp_server.server import mcp as mcp_server

    for tool in sorted(mcp_server._tool_manager.list_tools(), key=lambda t: t.name):
        marker = "read" if "_wait_" in tool.name else "write"
        summary = (tool.description or "").strip().split("\n")[0]
        click.echo(f"{tool.name:<30} [{marker}] {summary}")
