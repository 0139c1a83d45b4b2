"""
Configuration management for nested set tables.

Provides configuration schema, validation, loading and saving.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    DEFAULT_DEPTH_COLUMN,
    DEFAULT_DRIVER_TYPE,
    DEFAULT_KEY_COLUMN,
    DEFAULT_LEFT_COLUMN,
    DEFAULT_PARENT_COLUMN,
    DEFAULT_RIGHT_COLUMN,
    DEFAULT_TABLE_NAME,
)
from .exceptions import ConfigurationError
from .sql import is_identifier

PAYLOAD_TYPES = ("TEXT", "INTEGER", "REAL", "BLOB", "NUMERIC")


class ColumnConfig(BaseModel):
    """Column naming for one hosted table.

    Every nested set operation reads its column names from here, so a table
    with ``lft``/``rgt`` columns only needs a different ``ColumnConfig``.
    """

    model_config = {"extra": "forbid", "frozen": True}

    table: str = Field(default=DEFAULT_TABLE_NAME, description="Table name")
    key_column: str = Field(default=DEFAULT_KEY_COLUMN, description="Primary key")
    parent_column: str = Field(
        default=DEFAULT_PARENT_COLUMN, description="Nullable parent reference"
    )
    left_column: str = Field(default=DEFAULT_LEFT_COLUMN, description="Left bound")
    right_column: str = Field(default=DEFAULT_RIGHT_COLUMN, description="Right bound")
    depth_column: str = Field(default=DEFAULT_DEPTH_COLUMN, description="Depth")
    payload_columns: Dict[str, str] = Field(
        default_factory=lambda: {"name": "TEXT"},
        description="Opaque payload columns: name -> SQL type",
    )

    @field_validator(
        "table",
        "key_column",
        "parent_column",
        "left_column",
        "right_column",
        "depth_column",
    )
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Validate plain SQL identifier."""
        if not is_identifier(v):
            raise ValueError(f"Invalid SQL identifier: {v!r}")
        return v

    @field_validator("payload_columns")
    @classmethod
    def validate_payload_columns(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Validate payload column names and types."""
        result = {}
        for name, sql_type in v.items():
            if not is_identifier(name):
                raise ValueError(f"Invalid payload column name: {name!r}")
            type_upper = str(sql_type).strip().upper()
            if type_upper not in PAYLOAD_TYPES:
                raise ValueError(
                    f"Payload column {name!r} has unsupported type {sql_type!r}; "
                    f"expected one of {', '.join(PAYLOAD_TYPES)}"
                )
            result[name] = type_upper
        return result

    @model_validator(mode="after")
    def validate_distinct_columns(self) -> "ColumnConfig":
        """Structural columns must be distinct and not shadowed by payload."""
        structural = self.structural_columns
        if len(set(structural)) != len(structural):
            raise ValueError(f"Structural columns must be distinct: {structural}")
        clash = set(structural) & set(self.payload_columns)
        if clash:
            raise ValueError(
                f"Payload columns clash with structural columns: {sorted(clash)}"
            )
        return self

    @property
    def structural_columns(self) -> Tuple[str, ...]:
        return (
            self.key_column,
            self.parent_column,
            self.left_column,
            self.right_column,
            self.depth_column,
        )

    @property
    def all_columns(self) -> Tuple[str, ...]:
        return self.structural_columns + tuple(self.payload_columns)


class StoreConfig(BaseModel):
    """Database driver selection."""

    model_config = {"extra": "forbid"}

    type: str = Field(default=DEFAULT_DRIVER_TYPE, description="Registered driver name")
    path: str = Field(..., description="Database path (':memory:' for in-memory)")
    timeout: float = Field(default=30.0, description="Lock wait timeout in seconds")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate positive timeout."""
        if v <= 0:
            raise ValueError(f"timeout must be positive, got: {v}")
        return v

    def driver_config(self) -> Dict[str, Any]:
        """Config dict passed to the driver's connect()."""
        return {"path": self.path, "timeout": self.timeout}


class NestedSetConfig(BaseModel):
    """Top-level configuration file."""

    model_config = {"extra": "forbid"}

    store: StoreConfig
    columns: ColumnConfig = Field(default_factory=ColumnConfig)
    log_level: str = Field(default="INFO", description="Root log level")
    log_file: Optional[str] = Field(default=None, description="Optional log file")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        v_upper = v.upper()
        if v_upper not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v_upper


def validate_config(
    config_path: Path,
) -> Tuple[bool, Optional[str], Optional[NestedSetConfig]]:
    """
    Validate configuration file.

    Args:
        config_path: Path to configuration file

    Returns:
        Tuple of (is_valid, error_message, config_object)
    """
    try:
        if not config_path.exists():
            return False, f"Configuration file not found: {config_path}", None

        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)

        return True, None, NestedSetConfig(**config_data)

    except json.JSONDecodeError as e:
        return False, f"Invalid JSON: {str(e)}", None
    except ValueError as e:
        return False, f"Validation error: {str(e)}", None
    except TypeError as e:
        return False, f"Unexpected structure: {str(e)}", None


def load_config(config_path: Path) -> NestedSetConfig:
    """
    Load and validate configuration.

    Args:
        config_path: Path to configuration file

    Returns:
        NestedSetConfig object

    Raises:
        ConfigurationError: If configuration is invalid
    """
    is_valid, error, config = validate_config(config_path)
    if not is_valid or config is None:
        raise ConfigurationError(
            error or "Invalid configuration",
            details={"path": str(config_path)},
        )
    return config


def save_config(config: Dict[str, Any], config_path: Path) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)
