"""
Constraint assembly.

Catalogs report composite keys, constraints and indexes as one row per
participating column. The assemblers here fold such row streams back into
one entity per (owner, name), appending columns in row-arrival order. Rows
are expected pre-sorted by the catalog query; they are never re-sorted.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from catalog_graph.errors import InconsistentError
from catalog_graph.models import ForeignKey

logger = logging.getLogger(__name__)

E = TypeVar("E")


def _is_blank(name: Optional[str]) -> bool:
    return name is None or not name.strip()


class ConstraintAssembler(Generic[E]):
    """
    Fold per-column rows into composite entities.

    The first row for a given (owner_key, name) creates the entity; later
    rows with the same key append their column to it. A blank name is never
    used as a dedup key: each such row becomes its own entity.

    Entities must expose a mutable ``columns`` list.
    """

    def __init__(self, kind: str = "constraint"):
        self.kind = kind
        self._by_key: Dict[Tuple[Any, str], E] = {}
        self._entities: List[Tuple[Any, E]] = []

    def add(
        self,
        owner_key: Any,
        name: Optional[str],
        column: str,
        create: Callable[[], E],
    ) -> Tuple[E, bool]:
        """
        Feed one row.

        Args:
            owner_key: Key of the owning table
            name: Constraint name as reported by the catalog
            column: Column participating at this row's ordinal position
            create: Factory for a new, column-less entity

        Returns:
            Tuple of (entity, created)
        """
        entity, created = self._get_or_create(owner_key, name, create)
        entity.columns.append(column)
        return entity, created

    def _get_or_create(
        self,
        owner_key: Any,
        name: Optional[str],
        create: Callable[[], E],
    ) -> Tuple[E, bool]:
        if not _is_blank(name):
            existing = self._by_key.get((owner_key, name))
            if existing is not None:
                return existing, False

        entity = create()
        if _is_blank(name):
            logger.debug(f"Blank {self.kind} name on {owner_key}; keeping row as its own entity")
        else:
            self._by_key[(owner_key, name)] = entity
        self._entities.append((owner_key, entity))
        return entity, True

    def entities(self) -> List[Tuple[Any, E]]:
        """Return (owner_key, entity) pairs in first-seen order."""
        return list(self._entities)

    def __len__(self) -> int:
        return len(self._entities)


class ForeignKeyAssembler(ConstraintAssembler[ForeignKey]):
    """
    Constraint assembler with a target-side column list.

    Each row contributes one local column and the target column at the same
    position. All rows of one key must reference the same target table.
    """

    def __init__(self) -> None:
        super().__init__(kind="foreign key")

    def add_pair(
        self,
        owner_key: Any,
        name: Optional[str],
        column: str,
        target: Tuple[str, str],
        target_column: str,
        create: Callable[[], ForeignKey],
    ) -> Tuple[ForeignKey, bool]:
        """
        Feed one foreign key row.

        Args:
            owner_key: Key of the referencing table
            name: Constraint name
            column: Local column at this position
            target: (schema, table) of the referenced table
            target_column: Referenced column at this position
            create: Factory for a new, column-less ForeignKey

        Returns:
            Tuple of (foreign key, created)
        """
        fk, created = self._get_or_create(owner_key, name, create)

        if (fk.target_schema, fk.target_table) != tuple(target):
            raise InconsistentError(
                f"Foreign key spans several target tables | owner = {owner_key} | "
                f"constraint = {name} | expected = {fk.target_schema}.{fk.target_table} | "
                f"actual = {target[0]}.{target[1]}"
            )

        fk.columns.append(column)
        fk.target_columns.append(target_column)
        return fk, created

    def verify(self) -> None:
        """
        Check that every foreign key pairs local and target columns one to one.

        Raises:
            InconsistentError: On a column-count mismatch
        """
        for owner_key, fk in self._entities:
            if len(fk.columns) != len(fk.target_columns):
                raise InconsistentError(
                    f"Foreign key column count mismatch | owner = {owner_key} | "
                    f"constraint = {fk.name} | local = {len(fk.columns)} | "
                    f"target = {len(fk.target_columns)}"
                )
