"""
CLI commands for building and inspecting nested set trees.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

# mypy: ignore-errors

import json
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import click

from ..core.config import NestedSetConfig, StoreConfig, load_config
from ..core.constants import DEFAULT_DB_FILENAME, MOVE_POSITIONS
from ..core.db_driver.exceptions import DriverError
from ..core.exceptions import NestedSetError
from ..core.hierarchy import HierarchyNode
from ..core.integrity import check_store
from ..core.table import NestedSetTable
from ..logging import setup_logging


def _build_config(
    db_path: Optional[Path], config_path: Optional[Path]
) -> NestedSetConfig:
    """Config file settings with ``--db-path`` taking precedence."""
    if config_path is not None:
        config = load_config(config_path)
        if db_path is not None:
            config = config.model_copy(
                update={"store": config.store.model_copy(update={"path": str(db_path)})}
            )
        return config
    return NestedSetConfig(store=StoreConfig(path=str(db_path or DEFAULT_DB_FILENAME)))


@contextmanager
def _open_table(ctx_obj: Dict[str, Any]) -> Iterator[NestedSetTable]:
    """Open the table, report domain errors and always close the connection."""
    table = None
    try:
        table = NestedSetTable.from_config(ctx_obj["config"])
        yield table
    except (NestedSetError, DriverError) as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)
    finally:
        if table is not None:
            table.close()


def _parse_fields(fields: Tuple[str, ...]) -> Dict[str, str]:
    payload = {}
    for item in fields:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(
                f"expected KEY=VALUE, got {item!r}", param_hint="--set"
            )
        payload[key] = value
    return payload


def _label(node: Any) -> str:
    name = node.get("name")
    bounds = f"({node.left}, {node.right})"
    if name is None:
        return f"#{node.id} {bounds}"
    return f"{name} #{node.id} {bounds}"


def _render(forest: List[HierarchyNode], indent: int = 0) -> Iterator[str]:
    for item in forest:
        yield "  " * indent + _label(item.node)
        yield from _render(item.children, indent + 1)


def _echo_node(node: Any, verb: str) -> None:
    click.echo(f"✅ {verb} {_label(node)} depth={node.depth} parent={node.parent_id}")


@click.group()
@click.option(
    "--db-path",
    "-d",
    help=f"Path to SQLite database (default: ./{DEFAULT_DB_FILENAME})",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "--config",
    "-c",
    "config_path",
    help="Path to JSON configuration file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Console log level (default: WARNING, or log_level from config)",
)
@click.pass_context
def tree(
    ctx: click.Context,
    db_path: Optional[Path],
    config_path: Optional[Path],
    log_level: Optional[str],
) -> None:
    """Nested set tree commands."""
    try:
        config = _build_config(db_path, config_path)
    except NestedSetError as e:
        click.echo(f"❌ Error loading configuration: {e}", err=True)
        sys.exit(1)

    if log_level is None:
        log_level = config.log_level if config_path is not None else "WARNING"
    setup_logging(log_level, config.log_file)
    ctx.obj = {"config": config}


@tree.command()
@click.pass_obj
def init(obj: Dict[str, Any]) -> None:
    """Create the hosted table if it does not exist."""
    with _open_table(obj) as table:
        path = obj["config"].store.path
        click.echo(f"✅ Table '{table.columns.table}' ready at {path}")


@tree.command()
@click.argument("name", required=False)
@click.option("--parent", "-p", type=int, help="Parent node id (default: new root)")
@click.option("--set", "fields", multiple=True, help="Payload value as KEY=VALUE")
@click.pass_obj
def add(
    obj: Dict[str, Any],
    name: Optional[str],
    parent: Optional[int],
    fields: Tuple[str, ...],
) -> None:
    """Add a node, as a root or as the last child of --parent."""
    payload = _parse_fields(fields)
    if name is not None:
        payload["name"] = name
    with _open_table(obj) as table:
        node = table.new_node(parent, **payload)
        if parent is not None:
            table.get(parent)
        table.save(node)
        _echo_node(node, "Added")


@tree.command()
@click.argument("node_id", type=int)
@click.argument("target_id", type=int)
@click.option(
    "--position",
    "-p",
    type=click.Choice(list(MOVE_POSITIONS)),
    default=MOVE_POSITIONS[0],
    help="Where to place the node relative to the target (default: child)",
)
@click.pass_obj
def move(obj: Dict[str, Any], node_id: int, target_id: int, position: str) -> None:
    """Move a node with its subtree relative to a target node."""
    with _open_table(obj) as table:
        node = table.behavior.move_to(table.get(node_id), target_id, position)
        _echo_node(node, "Moved")


@tree.command(name="make-root")
@click.argument("node_id", type=int)
@click.pass_obj
def make_root(obj: Dict[str, Any], node_id: int) -> None:
    """Detach a node from its parent and make it a root."""
    with _open_table(obj) as table:
        node = table.behavior.make_root(table.get(node_id))
        _echo_node(node, "Moved")


@tree.command(name="move-left")
@click.argument("node_id", type=int)
@click.pass_obj
def move_left(obj: Dict[str, Any], node_id: int) -> None:
    """Swap a node with its left sibling."""
    with _open_table(obj) as table:
        node = table.behavior.move_left(table.get(node_id))
        _echo_node(node, "Moved")


@tree.command(name="move-right")
@click.argument("node_id", type=int)
@click.pass_obj
def move_right(obj: Dict[str, Any], node_id: int) -> None:
    """Swap a node with its right sibling."""
    with _open_table(obj) as table:
        node = table.behavior.move_right(table.get(node_id))
        _echo_node(node, "Moved")


@tree.command()
@click.argument("node_id", type=int)
@click.pass_obj
def delete(obj: Dict[str, Any], node_id: int) -> None:
    """Delete a node together with its subtree."""
    with _open_table(obj) as table:
        node = table.get(node_id)
        removed = table.behavior.descendants(node, include_self=True).count()
        table.delete(node)
        click.echo(f"✅ Deleted {removed} node(s)")


@tree.command()
@click.option("--root", "-r", "root_id", type=int, help="Show only this node's subtree")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_obj
def show(obj: Dict[str, Any], root_id: Optional[int], format: str) -> None:
    """Print the tree (or one subtree) in preorder."""
    with _open_table(obj) as table:
        if root_id is None:
            forest = table.behavior.get_nested()
        else:
            query = table.behavior.descendants_and_self(table.get(root_id))
            forest = table.behavior.get_nested(query)

        if format == "json":
            data = [item.to_dict() for item in forest]
            click.echo(json.dumps(data, indent=2, default=str))
            return

        if not forest:
            click.echo("Tree is empty")
            return
        for line in _render(forest):
            click.echo(line)


@tree.command()
@click.pass_obj
def check(obj: Dict[str, Any]) -> None:
    """Verify the nested set invariants of the whole table."""
    with _open_table(obj) as table:
        report = check_store(table.store)
        if report.ok:
            click.echo(f"✅ Integrity OK ({report.node_count} nodes)")
            return
        click.echo(f"❌ Integrity check failed ({report.node_count} nodes):")
        for problem in report.problems:
            click.echo(f"   - {problem}")
        sys.exit(1)


if __name__ == "__main__":
    tree()
