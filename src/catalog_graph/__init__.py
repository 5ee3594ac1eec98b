"""
Catalog Graph - Relational Catalog Discovery

Discovers the structural metadata of a PostgreSQL database by querying its
system catalogs and assembles it into an in-memory, cross-referenced graph
of schemas, tables, views, columns, keys and indexes.

Features:
- Ordered catalog passes with fail-fast reference resolution
- Composite key, constraint and index reconstruction in catalog order
- Vendor store type to portable type mapping
- Graph export to JSON or YAML
"""

__version__ = "0.1.0"

from catalog_graph.models import (
    CatalogGraph,
    Column,
    Database,
    ForeignKey,
    Index,
    MatchOption,
    PortableType,
    PortableTypeTag,
    PrimaryKey,
    ReferentialAction,
    Schema,
    Table,
    UniqueConstraint,
    ValueGenerated,
    View,
)
from catalog_graph.errors import (
    CatalogGraphError,
    DiscoveryCancelled,
    InconsistentError,
    NotFoundError,
    UnsupportedTypeError,
    ValidationError,
)
from catalog_graph.config import DiscoveryConfig
from catalog_graph.gateway import CatalogGateway, PsycopgGateway, TransactionInfo
from catalog_graph.metadata import CatalogDialect, POSTGRESQL, map_store_type
from catalog_graph.discovery import CatalogDiscovery, discover, discover_with_gateway

__all__ = [
    # Models
    "CatalogGraph",
    "Column",
    "Database",
    "ForeignKey",
    "Index",
    "MatchOption",
    "PortableType",
    "PortableTypeTag",
    "PrimaryKey",
    "ReferentialAction",
    "Schema",
    "Table",
    "UniqueConstraint",
    "ValueGenerated",
    "View",
    # Errors
    "CatalogGraphError",
    "DiscoveryCancelled",
    "InconsistentError",
    "NotFoundError",
    "UnsupportedTypeError",
    "ValidationError",
    # Discovery
    "CatalogDialect",
    "CatalogDiscovery",
    "CatalogGateway",
    "DiscoveryConfig",
    "POSTGRESQL",
    "PsycopgGateway",
    "TransactionInfo",
    "discover",
    "discover_with_gateway",
    "map_store_type",
]
