"""
Schema for a hosted nested set table.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from typing import List

from .config import ColumnConfig
from .sql import quote_identifier


def build_schema_sql(columns: ColumnConfig) -> List[str]:
    """
    Build CREATE statements for the table described by a column config.

    Args:
        columns: Column naming of the hosted table

    Returns:
        List of SQL statements (table first, then indexes)
    """
    table = quote_identifier(columns.table)
    definitions = [
        f"{quote_identifier(columns.key_column)} INTEGER PRIMARY KEY AUTOINCREMENT",
        f"{quote_identifier(columns.parent_column)} INTEGER NULL",
        f"{quote_identifier(columns.left_column)} INTEGER NULL",
        f"{quote_identifier(columns.right_column)} INTEGER NULL",
        f"{quote_identifier(columns.depth_column)} INTEGER NULL",
    ]
    for name, sql_type in columns.payload_columns.items():
        definitions.append(f"{quote_identifier(name)} {sql_type}")

    statements = [
        f"CREATE TABLE IF NOT EXISTS {table} (\n    "
        + ",\n    ".join(definitions)
        + "\n)"
    ]
    for column in (columns.left_column, columns.right_column, columns.parent_column):
        index_name = quote_identifier(f"idx_{columns.table}_{column}")
        statements.append(
            f"CREATE INDEX IF NOT EXISTS {index_name} "
            f"ON {table}({quote_identifier(column)})"
        )
    return statements
