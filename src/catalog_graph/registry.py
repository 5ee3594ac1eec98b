"""
Entity registry for one discovery run.

An indexed, append-only store of every entity discovered so far. Passes
resolve owners through it by (scope, name) or by numeric catalog id and
fail with NotFoundError when an owner is missing.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, NamedTuple, Tuple, Type, TypeVar

from catalog_graph.errors import InconsistentError, NotFoundError


T = TypeVar("T")


class RegistryKey(NamedTuple):
    """Composite key: entity kind, owner scope and name (or catalog id)."""
    kind: str
    scope: Tuple[str, ...]
    name: Any

    def __str__(self) -> str:
        parts = [*self.scope, str(self.name)]
        return f"{self.kind} {'.'.join(parts)}"


def database_key(name: str) -> RegistryKey:
    return RegistryKey("database", (), name)


def database_id_key(database_id: int) -> RegistryKey:
    return RegistryKey("database_id", (), database_id)


def schema_key(name: str) -> RegistryKey:
    return RegistryKey("schema", (), name)


def schema_id_key(schema_id: int) -> RegistryKey:
    return RegistryKey("schema_id", (), schema_id)


def relation_key(schema_name: str, relation_name: str) -> RegistryKey:
    """Tables and views share one namespace per schema."""
    return RegistryKey("relation", (schema_name,), relation_name)


def column_key(schema_name: str, relation_name: str, column_name: str) -> RegistryKey:
    return RegistryKey("column", (schema_name, relation_name), column_name)


class EntityRegistry:
    """
    Append-only store of discovered entities.

    Each discovery run owns exactly one registry; nothing is ever removed
    from it and it is never handed to the caller.
    """

    def __init__(self) -> None:
        self._entities: Dict[RegistryKey, Any] = {}

    def __contains__(self, key: RegistryKey) -> bool:
        return key in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def put(self, key: RegistryKey, entity: Any) -> None:
        """
        Register an entity under a key.

        Raises:
            InconsistentError: If the key is already taken (duplicate name
                within its scope)
        """
        if key in self._entities:
            raise InconsistentError(f"Duplicate entity | key = {key}")
        self._entities[key] = entity

    def get(self, key: RegistryKey) -> Any:
        """
        Look up an entity.

        Raises:
            NotFoundError: If nothing is registered under the key
        """
        try:
            return self._entities[key]
        except KeyError:
            raise NotFoundError(f"Entity not found | key = {key}", key=key) from None

    def get_as(self, key: RegistryKey, entity_type: Type[T]) -> T:
        """Look up an entity and check its type."""
        entity = self.get(key)
        if not isinstance(entity, entity_type):
            raise InconsistentError(
                f"Unexpected entity type | key = {key} | "
                f"expected = {entity_type.__name__} | actual = {type(entity).__name__}"
            )
        return entity

    def get_or_create(self, key: RegistryKey, factory: Callable[[], T]) -> Tuple[T, bool]:
        """
        Look up an entity, creating and registering it if absent.

        Returns:
            Tuple of (entity, created)
        """
        if key in self._entities:
            return self._entities[key], False

        entity = factory()
        self._entities[key] = entity
        return entity, True
