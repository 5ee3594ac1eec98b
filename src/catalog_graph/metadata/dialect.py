"""
Vendor dialect definition.

A dialect bundles everything vendor-specific that discovery needs: the
catalog query texts and the store-type mapping table. System schemas are
excluded inside the query texts themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from catalog_graph.models import PortableType


@dataclass(frozen=True)
class CatalogDialect:
    """Query texts and type table for one database vendor."""
    name: str
    type_map: Dict[str, PortableType]
    databases_query: str
    schemas_query: str
    tables_query: str
    views_query: str
    columns_query: str
    primary_keys_query: str
    unique_constraints_query: str
    foreign_keys_query: str
    indexes_query: str
    # Optional creation date lookup, guarded by a privilege check
    creation_date_privilege_query: Optional[str] = None
    creation_date_query: Optional[str] = None
    default_schema: str = "public"
