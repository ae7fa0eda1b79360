"""
Main CLI entry point for the bridge.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

# mypy: ignore-errors

import click
import importlib
from typing import Dict

_COMMANDS: Dict[str, str] = {
    "query": "pjbridge.cli.session_cli:query",
    "ping": "pjbridge.cli.session_cli:ping",
    "config": "pjbridge.cli.config_cli:config",
}


def _load_click_command(import_path: str) -> click.Command:
    module_path, obj_name = import_path.split(":", 1)
    mod = importlib.import_module(module_path)
    return getattr(mod, obj_name)


class LazyGroup(click.Group):
    """
    Click group that lazy-loads subcommands on demand.

    Config commands do not need the socket layer, so it is imported only
    when a session command runs.
    """

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(_COMMANDS.keys())

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        target = _COMMANDS.get(cmd_name)
        if not target:
            return None
        return _load_click_command(target)


@click.group(cls=LazyGroup)
def cli() -> None:
    """PJBridge - run statements through a remote JDBC proxy server."""
    pass


if __name__ == "__main__":
    cli()
