"""Shared helpers for the redisctl CLI commands."""

from __future__ import annotations

import asyncio
import json as _json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

import click
from rich.console import Console
from rich.table import Table

from redisctl.core.config import settings
from redisctl.core.errors import CoreError, ValidationError
from redisctl.core.progress import ProgressObserver, create_observer


def wait_options(fn):
    """Attach the common --timeout/--interval/--json/--no-color options."""
    fn = click.option(
        "--no-color", "no_color", is_flag=True, help="Disable colored progress output"
    )(fn)
    fn = click.option("--json", "as_json", is_flag=True, help="Output JSON")(fn)
    fn = click.option(
        "--interval",
        type=float,
        default=None,
        help=f"Seconds between status checks (default: {settings.cli_wait_interval:g})",
    )(fn)
    fn = click.option(
        "--timeout",
        type=float,
        default=None,
        help=f"Seconds to wait for completion (default: {settings.cli_wait_timeout:g})",
    )(fn)
    return fn


def resolve_wait(timeout: Optional[float], interval: Optional[float]) -> Dict[str, float]:
    return {
        "timeout": settings.cli_wait_timeout if timeout is None else timeout,
        "interval": settings.cli_wait_interval if interval is None else interval,
    }


def progress_observer(as_json: bool, no_color: bool) -> Optional[ProgressObserver]:
    # JSON output goes to stdout; keep it free of progress lines.
    if as_json:
        return None
    return create_observer(cli=True, cli_colors=not no_color)


def load_json_body(data: str) -> Dict[str, Any]:
    """Parse ``--data``: inline JSON or ``@path/to/file.json``."""
    try:
        if data.startswith("@"):
            text = Path(data[1:]).read_text(encoding="utf-8")
        else:
            text = data
        body = _json.loads(text)
    except (OSError, ValueError) as e:
        raise ValidationError(f"Invalid --data: {e}") from e
    if not isinstance(body, dict):
        raise ValidationError("--data must be a JSON object")
    return body


def print_resource(resource: Dict[str, Any], title: str) -> None:
    console = Console()
    table = Table(title=title, show_lines=False)
    table.add_column("Field", no_wrap=True)
    table.add_column("Value")
    for key, value in resource.items():
        if isinstance(value, (dict, list)):
            value = _json.dumps(value)
        table.add_row(str(key), str(value))
    console.print(table)


def run_command(
    action: Callable[[], Awaitable[Optional[Dict[str, Any]]]],
    *,
    as_json: bool,
    success_message: str,
    title: str = "Result",
) -> None:
    """Run an async workflow command, render its result, exit 1 on failure."""

    async def _run() -> bool:
        try:
            result = await action()
        except CoreError as e:
            if as_json:
                print(_json.dumps({"status": "failed", "error": e.to_error_dict()}, indent=2))
            else:
                click.echo(f"❌ Error: {e}", err=True)
            return False

        if as_json:
            print(_json.dumps({"status": "success", "result": result}, indent=2, default=str))
            return True

        click.echo(f"✅ {success_message}")
        if result:
            print_resource(result, title)
        return True

    if not asyncio.run(_run()):
        sys.exit(1)
