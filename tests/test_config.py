"""
Tests for configuration models and loaders.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import json

import pytest
from pydantic import ValidationError

from nested_set.core.config import (
    ColumnConfig,
    NestedSetConfig,
    StoreConfig,
    load_config,
    save_config,
    validate_config,
)
from nested_set.core.exceptions import ConfigurationError


class TestColumnConfig:
    """Test column naming validation."""

    def test_defaults(self):
        """Defaults describe the standard table."""
        columns = ColumnConfig()
        assert columns.table == "nodes"
        assert columns.structural_columns == (
            "id",
            "parent_id",
            "nest_left",
            "nest_right",
            "nest_depth",
        )
        assert columns.all_columns[-1] == "name"

    def test_invalid_identifier(self):
        """Column names must be plain identifiers."""
        with pytest.raises(ValidationError, match="Invalid SQL identifier"):
            ColumnConfig(left_column="left; DROP TABLE nodes")

    def test_structural_columns_distinct(self):
        """Left and right cannot share a column."""
        with pytest.raises(ValidationError, match="distinct"):
            ColumnConfig(left_column="bound", right_column="bound")

    def test_payload_clash(self):
        """Payload columns cannot shadow structural ones."""
        with pytest.raises(ValidationError, match="clash"):
            ColumnConfig(payload_columns={"nest_left": "TEXT"})

    def test_payload_type_normalized(self):
        """Payload types are upper-cased."""
        columns = ColumnConfig(payload_columns={"title": "text", "weight": "integer"})
        assert columns.payload_columns == {"title": "TEXT", "weight": "INTEGER"}

    def test_payload_type_rejected(self):
        """Only SQLite storage classes are accepted."""
        with pytest.raises(ValidationError, match="unsupported type"):
            ColumnConfig(payload_columns={"title": "VARCHAR(20)"})

    def test_extra_fields_forbidden(self):
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError):
            ColumnConfig(lft="x")

    def test_frozen(self):
        """Column configs are immutable."""
        columns = ColumnConfig()
        with pytest.raises(ValidationError):
            columns.table = "other"


class TestStoreAndRootConfig:
    """Test store selection and top-level settings."""

    def test_store_defaults(self):
        """sqlite is the default driver."""
        store = StoreConfig(path="tree.db")
        assert store.type == "sqlite"
        assert store.driver_config() == {"path": "tree.db", "timeout": 30.0}

    def test_store_requires_path(self):
        """path has no default."""
        with pytest.raises(ValidationError):
            StoreConfig()

    def test_timeout_positive(self):
        """Timeouts must be positive."""
        with pytest.raises(ValidationError, match="timeout must be positive"):
            StoreConfig(path="tree.db", timeout=0)

    def test_log_level_normalized(self):
        """Log level names are upper-cased and checked."""
        config = NestedSetConfig(store={"path": "tree.db"}, log_level="debug")
        assert config.log_level == "DEBUG"
        with pytest.raises(ValidationError, match="Unknown log level"):
            NestedSetConfig(store={"path": "tree.db"}, log_level="LOUD")


class TestConfigFiles:
    """Test loading, validating and saving JSON files."""

    def test_validate_missing_file(self, tmp_path):
        """Missing files are reported, not raised."""
        ok, error, config = validate_config(tmp_path / "missing.json")
        assert not ok
        assert "not found" in error
        assert config is None

    def test_validate_invalid_json(self, tmp_path):
        """Broken JSON is reported."""
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        ok, error, _ = validate_config(path)
        assert not ok
        assert error.startswith("Invalid JSON")

    def test_validate_schema_error(self, tmp_path):
        """Schema violations are reported."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"store": {"path": "x.db", "timeout": -1}}))
        ok, error, _ = validate_config(path)
        assert not ok
        assert error.startswith("Validation error")

    def test_validate_wrong_structure(self, tmp_path):
        """A JSON list is not a configuration."""
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        ok, error, _ = validate_config(path)
        assert not ok
        assert error.startswith("Unexpected structure")

    def test_load_invalid_raises(self, tmp_path):
        """load_config raises ConfigurationError with the path."""
        path = tmp_path / "missing.json"
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)
        assert exc_info.value.code == "CONFIGURATION_ERROR"
        assert exc_info.value.details == {"path": str(path)}

    def test_save_and_load(self, tmp_path):
        """Saved configs load back unchanged."""
        config = NestedSetConfig(
            store=StoreConfig(path="tree.db"),
            columns=ColumnConfig(table="menu", left_column="lft", right_column="rgt"),
        )
        path = tmp_path / "nested" / "config.json"
        save_config(config.model_dump(), path)
        loaded = load_config(path)
        assert loaded == config
        assert loaded.columns.left_column == "lft"
