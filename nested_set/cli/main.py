"""
Main CLI entry point for nested set tooling.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

# mypy: ignore-errors

import importlib
from typing import Dict, List, Optional

import click

_COMMANDS: Dict[str, str] = {
    "tree": "nested_set.cli.tree_cli:tree",
    "config": "nested_set.cli.config_cli:config",
}


def _load_click_command(import_path: str) -> click.Command:
    module_path, obj_name = import_path.split(":", 1)
    mod = importlib.import_module(module_path)
    return getattr(mod, obj_name)


class LazyGroup(click.Group):
    """Click group that imports subcommand modules only when they are invoked."""

    def list_commands(self, ctx: click.Context) -> List[str]:
        return sorted(_COMMANDS.keys())

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        target = _COMMANDS.get(cmd_name)
        if not target:
            return None
        return _load_click_command(target)


@click.group(cls=LazyGroup)
def cli() -> None:
    """Nested set tree tool - build, move, inspect and verify trees."""
    pass


if __name__ == "__main__":
    cli()
