"""
CLI commands that talk to the proxy server (query, ping).

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

# mypy: ignore-errors

import click
import functools
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from ..core.bridge_client import BridgeSession, Row
from ..core.config import BridgeConfig, load_config
from ..core.exceptions import BridgeError, CommandError
from ..logging import setup_logging

logger = logging.getLogger(__name__)


def connection_options(func):
    """Attach the shared connection options to a command."""

    @click.option(
        "--config",
        "-C",
        "config_path",
        default=None,
        help="Path to config.json with connection settings",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
    )
    @click.option("--host", "-H", help="Proxy server host (default: localhost)")
    @click.option("--port", type=int, help="Proxy server port (default: 4444)")
    @click.option("--wire-encoding", help="Charset on the wire (default: ascii)")
    @click.option("--local-encoding", help="Charset of local text (default: ascii)")
    @click.option(
        "--timeout",
        type=float,
        help="Socket timeout in seconds (default: wait forever)",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose output",
    )
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def _build_config(
    config_path: Optional[Path],
    host: Optional[str],
    port: Optional[int],
    wire_encoding: Optional[str],
    local_encoding: Optional[str],
    timeout: Optional[float],
) -> BridgeConfig:
    base = load_config(config_path) if config_path else BridgeConfig()
    return base.merged(
        host=host,
        port=port,
        wire_encoding=wire_encoding,
        local_encoding=local_encoding,
        timeout=timeout,
    )


def _setup_cli_logging(config: BridgeConfig, verbose: bool) -> None:
    setup_logging(
        level=logging.DEBUG if verbose else logging.WARNING,
        log_path=config.log,
        endpoint=f"{config.host}:{config.port}",
    )


def _print_rows(rows: List[Row], output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps(rows, indent=2, ensure_ascii=False))
        return

    if not rows:
        click.echo("(no rows)")
        return
    columns: List[str] = []
    for row in rows:
        for name in row:
            if name not in columns:
                columns.append(name)
    widths = [
        max([len(name)] + [len(row.get(name, "")) for row in rows])
        for name in columns
    ]
    click.echo(" | ".join(name.ljust(w) for name, w in zip(columns, widths)))
    click.echo("-+-".join("-" * w for w in widths))
    for row in rows:
        click.echo(
            " | ".join(row.get(name, "").ljust(w) for name, w in zip(columns, widths))
        )
    click.echo(f"\n{len(rows)} row(s)")


@click.command()
@click.argument("url")
@click.argument("user")
@click.argument("sql")
@click.option(
    "--password",
    "-P",
    prompt=True,
    hide_input=True,
    default="",
    help="Database password (prompted when omitted)",
)
@click.option(
    "--param",
    "-p",
    "params",
    multiple=True,
    help="Bound parameter, repeat for several (in order)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format",
)
@connection_options
def query(
    url: str,
    user: str,
    sql: str,
    password: str,
    params: Tuple[str, ...],
    output_format: str,
    config_path: Optional[Path],
    host: Optional[str],
    port: Optional[int],
    wire_encoding: Optional[str],
    local_encoding: Optional[str],
    timeout: Optional[float],
    verbose: bool,
) -> None:
    """
    Run SQL through the proxy server and print the rows.

    Example:
        pjbridge query jdbc:mysql://db/test user "SELECT * FROM t WHERE id = ?" -p 42
    """
    try:
        config = _build_config(
            config_path, host, port, wire_encoding, local_encoding, timeout
        )
        _setup_cli_logging(config, verbose)
        with BridgeSession(config=config) as session:
            if not session.connect(url, user, password):
                click.echo("❌ Error: server refused the database connection", err=True)
                raise SystemExit(1)
            rows = session.query(sql, list(params))
        _print_rows(rows, output_format)
    except CommandError as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)
    except BridgeError as e:
        logger.debug("Bridge error: %s", e, exc_info=True)
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(2)


@click.command()
@click.argument("url")
@click.argument("user")
@click.option(
    "--password",
    "-P",
    prompt=True,
    hide_input=True,
    default="",
    help="Database password (prompted when omitted)",
)
@connection_options
def ping(
    url: str,
    user: str,
    password: str,
    config_path: Optional[Path],
    host: Optional[str],
    port: Optional[int],
    wire_encoding: Optional[str],
    local_encoding: Optional[str],
    timeout: Optional[float],
    verbose: bool,
) -> None:
    """
    Check that the proxy server accepts a database connection.

    Example:
        pjbridge ping jdbc:mysql://db/test user -P secret
    """
    try:
        config = _build_config(
            config_path, host, port, wire_encoding, local_encoding, timeout
        )
        _setup_cli_logging(config, verbose)
        with BridgeSession(config=config) as session:
            accepted = session.connect(url, user, password)
    except BridgeError as e:
        logger.debug("Bridge error: %s", e, exc_info=True)
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(2)

    if not accepted:
        click.echo("❌ Connection refused by server", err=True)
        raise SystemExit(1)
    click.echo(f"✅ Connected via {config.host}:{config.port}")
