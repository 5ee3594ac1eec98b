"""
Store type to portable type mapping.

Normalizes a vendor store-type spelling and looks it up in a dialect's type
table. Unknown spellings are an error, never a silent default.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, Optional, Tuple

from catalog_graph.errors import UnsupportedTypeError
from catalog_graph.metadata.postgresql import POSTGRES_TYPE_MAP
from catalog_graph.models import PortableType, PortableTypeTag


_MODIFIER_RE = re.compile(r"\(\s*\d+\s*(?:,\s*\d+\s*)?\)")
_WHITESPACE_RE = re.compile(r"\s+")


@lru_cache(maxsize=1024)
def normalize_store_type(store_type: str) -> Tuple[str, bool]:
    """
    Normalize a store type spelling.

    Lowercases, strips quotes and type modifiers such as ``(10,2)``,
    collapses whitespace, and folds trailing ``[]`` into an array flag.

    Args:
        store_type: Vendor spelling, e.g. ``"character varying(255)[]"``

    Returns:
        Tuple of (normalized base spelling, is_array)
    """
    text = store_type.replace('"', "").lower()
    text = _MODIFIER_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()

    is_array = False
    while text.endswith("[]"):
        is_array = True
        text = text[:-2].rstrip()

    return text, is_array


def map_store_type(
    store_type: str,
    type_map: Optional[Dict[str, PortableType]] = None,
) -> PortableTypeTag:
    """
    Map a vendor store type to its portable type tag.

    Args:
        store_type: Vendor spelling as reported by the catalog
        type_map: Dialect type table (defaults to PostgreSQL)

    Returns:
        PortableTypeTag for the store type

    Raises:
        UnsupportedTypeError: If the spelling matches no known mapping
    """
    if not store_type or not store_type.strip():
        raise UnsupportedTypeError(store_type or "")

    base, is_array = normalize_store_type(store_type)
    table = POSTGRES_TYPE_MAP if type_map is None else type_map

    portable = table.get(base)
    if portable is None:
        raise UnsupportedTypeError(store_type)

    return PortableTypeTag(portable, is_array=is_array)
