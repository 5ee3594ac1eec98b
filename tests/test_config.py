"""Tests for discovery configuration."""

import pytest

from catalog_graph.config import DSN_ENV_VAR, DiscoveryConfig
from catalog_graph.errors import ValidationError


class TestDiscoveryConfig:
    """Tests for DiscoveryConfig."""

    def test_from_dict_section(self):
        config = DiscoveryConfig.from_dict({
            "discovery": {
                "connection_string": "postgresql://reader@localhost/shop",
                "database": "shop",
                "strict_types": False,
            }
        })

        assert config.connection_string == "postgresql://reader@localhost/shop"
        assert config.database == "shop"
        assert config.strict_types is False

    def test_from_dict_top_level(self):
        config = DiscoveryConfig.from_dict({"database": "shop"})

        assert config.database == "shop"
        assert config.strict_types is True

    def test_unknown_keys(self):
        with pytest.raises(ValidationError, match="include_views"):
            DiscoveryConfig.from_dict({"database": "shop", "include_views": True})

    def test_strict_types_must_be_bool(self):
        with pytest.raises(ValidationError):
            DiscoveryConfig.from_dict({"strict_types": "yes"})

    def test_not_a_mapping(self):
        with pytest.raises(ValidationError):
            DiscoveryConfig.from_dict(["shop"])

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "discovery.yaml"
        path.write_text("discovery:\n  database: shop\n  strict_types: true\n")

        config = DiscoveryConfig.from_yaml(path)
        assert config.database == "shop"

    def test_from_yaml_missing(self, tmp_path):
        with pytest.raises(ValidationError, match="not found"):
            DiscoveryConfig.from_yaml(tmp_path / "missing.yaml")

    def test_environment_fills_connection_string(self, monkeypatch):
        monkeypatch.setenv(DSN_ENV_VAR, "postgresql://env@localhost/shop")

        assert DiscoveryConfig().with_environment().connection_string == "postgresql://env@localhost/shop"
        explicit = DiscoveryConfig(connection_string="postgresql://cfg@localhost/shop")
        assert explicit.with_environment().connection_string == "postgresql://cfg@localhost/shop"

    def test_overrides_skip_none(self):
        config = DiscoveryConfig(database="shop").with_overrides(database=None, strict_types=False)

        assert config.database == "shop"
        assert config.strict_types is False

    def test_validate(self, monkeypatch):
        monkeypatch.delenv(DSN_ENV_VAR, raising=False)

        with pytest.raises(ValidationError, match="connection string"):
            DiscoveryConfig(database="shop").validate()
        with pytest.raises(ValidationError, match="database name"):
            DiscoveryConfig(connection_string="postgresql://localhost/shop", database=" ").validate()

        config = DiscoveryConfig(connection_string="postgresql://localhost/shop", database="shop")
        assert config.validate() is config
