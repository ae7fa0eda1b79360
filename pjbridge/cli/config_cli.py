"""
CLI commands for configuration generation and validation.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import click
import json
from pathlib import Path
from typing import Optional

from ..core.config import generate_config, save_config, validate_config
from ..core.constants import (
    DEFAULT_HOST,
    DEFAULT_LOCAL_ENCODING,
    DEFAULT_PORT,
    DEFAULT_WIRE_ENCODING,
)
from ..core.exceptions import ConfigurationError


@click.group()
def config():
    """Configuration management commands."""
    pass


@config.command()
@click.option(
    "--out",
    default="config.json",
    help="Output config path (default: config.json)",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option("--host", default=DEFAULT_HOST, help="Proxy server host")
@click.option("--port", type=int, default=DEFAULT_PORT, help="Proxy server port")
@click.option(
    "--wire-encoding", default=DEFAULT_WIRE_ENCODING, help="Charset on the wire"
)
@click.option(
    "--local-encoding", default=DEFAULT_LOCAL_ENCODING, help="Charset of local text"
)
@click.option("--timeout", type=float, help="Socket timeout in seconds")
@click.option("--log", "log_path", help="Path to log file")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def generate(
    out: Path,
    host: str,
    port: int,
    wire_encoding: str,
    local_encoding: str,
    timeout: Optional[float],
    log_path: Optional[str],
    force: bool,
) -> None:
    """Generate a configuration file."""
    if out.exists() and not force:
        click.echo(f"❌ Error: {out} already exists (use --force)", err=True)
        raise SystemExit(1)
    try:
        data = generate_config(
            host=host,
            port=port,
            wire_encoding=wire_encoding,
            local_encoding=local_encoding,
            timeout=timeout,
            log=log_path,
        )
    except ConfigurationError as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)
    save_config(data, out)
    click.echo(f"✅ Configuration written to {out}")


@config.command()
@click.argument(
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format",
)
def validate(config_path: Path, output_format: str) -> None:
    """Validate a configuration file."""
    is_valid, error, cfg = validate_config(config_path)
    if output_format == "json":
        payload = {"valid": is_valid, "error": error}
        if cfg is not None:
            payload["config"] = cfg.model_dump()
        click.echo(json.dumps(payload, indent=2))
    elif is_valid:
        click.echo(f"✅ {config_path} is valid")
    else:
        click.echo(f"❌ {error}", err=True)
    if not is_valid:
        raise SystemExit(1)
