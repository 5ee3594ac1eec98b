"""
Discovery configuration.

Settings may come from a YAML file, the environment, and CLI options (in
increasing order of precedence). Validation runs before any catalog query.

Example YAML:

    discovery:
      connection_string: postgresql://reader@localhost:5432/shop
      database: shop
      strict_types: true
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from catalog_graph.errors import ValidationError

logger = logging.getLogger(__name__)

DSN_ENV_VAR = "CATALOG_GRAPH_DSN"


@dataclass
class DiscoveryConfig:
    """Settings for one discovery run."""
    connection_string: Optional[str] = None
    database: Optional[str] = None
    strict_types: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DiscoveryConfig:
        """
        Create from dictionary, rejecting unknown keys.

        Accepts either the settings at top level or under a ``discovery`` key.
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Configuration must be a mapping, got {type(data).__name__}")

        if "discovery" in data:
            data = data["discovery"]
            if not isinstance(data, dict):
                raise ValidationError("'discovery' section must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(f"Unknown configuration keys: {', '.join(unknown)}")

        strict_types = data.get("strict_types", True)
        if not isinstance(strict_types, bool):
            raise ValidationError(f"strict_types must be true or false, got {strict_types!r}")

        return cls(
            connection_string=data.get("connection_string"),
            database=data.get("database"),
            strict_types=strict_types,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> DiscoveryConfig:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise ValidationError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        config = cls.from_dict(data)
        logger.debug(f"Loaded discovery configuration from {path}")
        return config

    def with_environment(self) -> DiscoveryConfig:
        """Fill the connection string from the environment if unset."""
        if self.connection_string:
            return self
        return replace(self, connection_string=os.environ.get(DSN_ENV_VAR))

    def with_overrides(self, **overrides: Any) -> DiscoveryConfig:
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    def validate(self) -> DiscoveryConfig:
        """
        Check required settings.

        Raises:
            ValidationError: If the connection string or database is missing
        """
        if not self.connection_string or not str(self.connection_string).strip():
            raise ValidationError(
                f"A connection string is required (config file, --dsn or ${DSN_ENV_VAR})"
            )
        if not self.database or not str(self.database).strip():
            raise ValidationError("A database name is required (config file or --database)")
        return self
