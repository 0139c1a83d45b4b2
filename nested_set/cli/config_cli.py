"""
CLI commands for configuration generation and validation.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from ..core.config import (
    ColumnConfig,
    NestedSetConfig,
    StoreConfig,
    save_config,
    validate_config,
)
from ..core.constants import (
    DEFAULT_DB_FILENAME,
    DEFAULT_DEPTH_COLUMN,
    DEFAULT_KEY_COLUMN,
    DEFAULT_LEFT_COLUMN,
    DEFAULT_PARENT_COLUMN,
    DEFAULT_RIGHT_COLUMN,
    DEFAULT_TABLE_NAME,
)


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
@click.option(
    "--db-path",
    default=DEFAULT_DB_FILENAME,
    help=f"Database path (default: {DEFAULT_DB_FILENAME})",
)
@click.option("--table", default=DEFAULT_TABLE_NAME, help="Hosted table name")
@click.option("--key-column", default=DEFAULT_KEY_COLUMN, help="Primary key column")
@click.option("--parent-column", default=DEFAULT_PARENT_COLUMN, help="Parent column")
@click.option("--left-column", default=DEFAULT_LEFT_COLUMN, help="Left bound column")
@click.option("--right-column", default=DEFAULT_RIGHT_COLUMN, help="Right bound column")
@click.option("--depth-column", default=DEFAULT_DEPTH_COLUMN, help="Depth column")
@click.option(
    "--payload",
    "payload",
    multiple=True,
    help="Payload column as NAME=TYPE (default: name=TEXT)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default="INFO",
    help="Log level (default: INFO)",
)
@click.option("--log-file", help="Rotating log file path")
def generate(
    out: Path,
    db_path: str,
    table: str,
    key_column: str,
    parent_column: str,
    left_column: str,
    right_column: str,
    depth_column: str,
    payload: Tuple[str, ...],
    log_level: str,
    log_file: Optional[str],
) -> None:
    """Generate configuration file for a nested set table."""
    try:
        columns = {
            "table": table,
            "key_column": key_column,
            "parent_column": parent_column,
            "left_column": left_column,
            "right_column": right_column,
            "depth_column": depth_column,
        }
        if payload:
            payload_columns = {}
            for item in payload:
                name, sep, sql_type = item.partition("=")
                if not sep:
                    raise ValueError(f"Payload column must be NAME=TYPE, got {item!r}")
                payload_columns[name] = sql_type
            columns["payload_columns"] = payload_columns

        settings = NestedSetConfig(
            store=StoreConfig(path=db_path),
            columns=ColumnConfig(**columns),
            log_level=log_level,
            log_file=log_file,
        )
        save_config(settings.model_dump(), out)
        click.echo(f"✅ Configuration generated: {out}")
    except (ValueError, OSError) as e:
        click.echo(f"❌ Error generating configuration: {e}", err=True)
        sys.exit(1)


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate configuration file."""
    is_valid, error_message, settings = validate_config(config_file)
    if not is_valid:
        click.echo("❌ Validation failed:")
        click.echo(f"   - {error_message}")
        sys.exit(1)

    columns = settings.columns
    click.echo("✅ Validation OK")
    click.echo(f"   table: {columns.table} ({settings.store.type}: {settings.store.path})")
    click.echo(
        "   columns: "
        f"{columns.left_column}/{columns.right_column}/{columns.depth_column}, "
        f"parent {columns.parent_column}"
    )


if __name__ == "__main__":
    config()
