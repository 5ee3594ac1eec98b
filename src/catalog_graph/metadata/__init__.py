"""
Vendor catalog definitions and type mapping.

Provides the dialect shape consumed by discovery, the PostgreSQL catalog
queries, and the store-type to portable-type mapper.
"""

from catalog_graph.metadata.dialect import CatalogDialect
from catalog_graph.metadata.postgresql import POSTGRESQL, POSTGRES_TYPE_MAP, SYSTEM_SCHEMAS
from catalog_graph.metadata.types import map_store_type, normalize_store_type

__all__ = [
    "CatalogDialect",
    "POSTGRESQL",
    "POSTGRES_TYPE_MAP",
    "SYSTEM_SCHEMAS",
    "map_store_type",
    "normalize_store_type",
]
