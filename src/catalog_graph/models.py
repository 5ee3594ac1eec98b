"""
Core data models for the catalog_graph package.

Defines the entities of a discovered catalog graph (database, schemas,
relations, columns, keys and indexes) and the portable type tags that
columns are classified with.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml

from catalog_graph.errors import InconsistentError


class PortableType(str, Enum):
    """Vendor-neutral value domains a store type maps to."""
    BOOLEAN = "boolean"
    INTEGER_64 = "integer_64"
    INTEGER_32 = "integer_32"
    INTEGER_16 = "integer_16"
    DECIMAL = "decimal"
    FLOAT_64 = "float_64"
    FLOAT_32 = "float_32"
    TEXT = "text"
    BYTES = "bytes"
    DATE = "date"
    TIMESTAMP = "timestamp"
    UUID = "uuid"
    XML = "xml"


@dataclass(frozen=True)
class PortableTypeTag:
    """A portable type plus the array-of modifier."""
    type: PortableType
    is_array: bool = False

    def __str__(self) -> str:
        return f"{self.type.value}[]" if self.is_array else self.type.value

    @classmethod
    def parse(cls, text: str) -> PortableTypeTag:
        """Parse the string form produced by ``str(tag)``."""
        if text.endswith("[]"):
            return cls(PortableType(text[:-2]), is_array=True)
        return cls(PortableType(text))


class ReferentialAction(str, Enum):
    """ON UPDATE / ON DELETE behaviour of a foreign key."""
    NO_ACTION = "no_action"
    CASCADE = "cascade"
    SET_NULL = "set_null"
    SET_DEFAULT = "set_default"
    RESTRICT = "restrict"

    @classmethod
    def from_catalog(cls, rule: Optional[str]) -> ReferentialAction:
        """Convert an information_schema rule such as ``SET NULL``."""
        if not rule:
            return cls.NO_ACTION
        try:
            return cls(rule.strip().lower().replace(" ", "_"))
        except ValueError:
            raise InconsistentError(f"Unknown referential action | rule = {rule!r}") from None


class MatchOption(str, Enum):
    """MATCH option of a foreign key."""
    SIMPLE = "simple"
    PARTIAL = "partial"
    FULL = "full"

    @classmethod
    def from_catalog(cls, option: Optional[str]) -> MatchOption:
        """Convert an information_schema match option; PostgreSQL reports SIMPLE as NONE."""
        if not option or option.strip().upper() == "NONE":
            return cls.SIMPLE
        try:
            return cls(option.strip().lower())
        except ValueError:
            raise InconsistentError(f"Unknown match option | match_option = {option!r}") from None


class ValueGenerated(str, Enum):
    """Whether a column value is computed by the database."""
    NEVER = "never"
    ALWAYS = "always"

    @classmethod
    def from_catalog(cls, flag: Optional[str]) -> ValueGenerated:
        if flag and flag.strip().upper() == "ALWAYS":
            return cls.ALWAYS
        return cls.NEVER


@dataclass
class Column:
    """Metadata for a single column of a table or view."""
    name: str
    ordinal_position: int
    store_type: str
    portable_type: Optional[PortableTypeTag] = None
    nullable: bool = True
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    is_identity: bool = False
    identity_start: Optional[int] = None
    identity_increment: Optional[int] = None
    last_identity: Optional[int] = None
    default_value: Optional[str] = None
    generated: ValueGenerated = ValueGenerated.NEVER

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "ordinal_position": self.ordinal_position,
            "store_type": self.store_type,
            "portable_type": str(self.portable_type) if self.portable_type else None,
            "nullable": self.nullable,
            "max_length": self.max_length,
            "precision": self.precision,
            "scale": self.scale,
            "is_identity": self.is_identity,
            "identity_start": self.identity_start,
            "identity_increment": self.identity_increment,
            "last_identity": self.last_identity,
            "default_value": self.default_value,
            "generated": self.generated.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Column:
        """Create from dictionary."""
        portable = data.get("portable_type")
        return cls(
            name=data["name"],
            ordinal_position=data["ordinal_position"],
            store_type=data["store_type"],
            portable_type=PortableTypeTag.parse(portable) if portable else None,
            nullable=data.get("nullable", True),
            max_length=data.get("max_length"),
            precision=data.get("precision"),
            scale=data.get("scale"),
            is_identity=data.get("is_identity", False),
            identity_start=data.get("identity_start"),
            identity_increment=data.get("identity_increment"),
            last_identity=data.get("last_identity"),
            default_value=data.get("default_value"),
            generated=ValueGenerated(data.get("generated", "never")),
        )


@dataclass
class PrimaryKey:
    """Primary key; columns are in key ordinal order."""
    name: str
    columns: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "columns": list(self.columns)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PrimaryKey:
        return cls(name=data["name"], columns=list(data.get("columns", [])))


@dataclass
class UniqueConstraint:
    """Unique constraint; columns are in key ordinal order."""
    name: str
    columns: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "columns": list(self.columns)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UniqueConstraint:
        return cls(name=data["name"], columns=list(data.get("columns", [])))


@dataclass
class ForeignKey:
    """
    Foreign key constraint.

    ``columns`` and ``target_columns`` are paired by position: the n-th local
    column references the n-th target column.
    """
    name: str
    target_schema: str
    target_table: str
    columns: List[str] = field(default_factory=list)
    target_columns: List[str] = field(default_factory=list)
    on_update: ReferentialAction = ReferentialAction.NO_ACTION
    on_delete: ReferentialAction = ReferentialAction.NO_ACTION
    match_option: MatchOption = MatchOption.SIMPLE

    @property
    def column_pairs(self) -> List[Tuple[str, str]]:
        """Return (local, target) column pairs."""
        return list(zip(self.columns, self.target_columns))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "columns": list(self.columns),
            "target_schema": self.target_schema,
            "target_table": self.target_table,
            "target_columns": list(self.target_columns),
            "on_update": self.on_update.value,
            "on_delete": self.on_delete.value,
            "match_option": self.match_option.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ForeignKey:
        """Create from dictionary."""
        return cls(
            name=data["name"],
            target_schema=data["target_schema"],
            target_table=data["target_table"],
            columns=list(data.get("columns", [])),
            target_columns=list(data.get("target_columns", [])),
            on_update=ReferentialAction(data.get("on_update", "no_action")),
            on_delete=ReferentialAction(data.get("on_delete", "no_action")),
            match_option=MatchOption(data.get("match_option", "simple")),
        )


@dataclass
class Index:
    """Non-unique, non-primary index."""
    name: Optional[str]
    columns: List[str] = field(default_factory=list)
    is_unique: bool = False
    is_partial: bool = False
    is_functional: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": list(self.columns),
            "is_unique": self.is_unique,
            "is_partial": self.is_partial,
            "is_functional": self.is_functional,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Index:
        return cls(
            name=data.get("name"),
            columns=list(data.get("columns", [])),
            is_unique=data.get("is_unique", False),
            is_partial=data.get("is_partial", False),
            is_functional=data.get("is_functional", False),
        )


@dataclass
class Table:
    """Metadata for a database table."""
    id: int
    name: str
    schema_name: str
    columns: List[Column] = field(default_factory=list)
    primary_key: Optional[PrimaryKey] = None
    unique_constraints: List[UniqueConstraint] = field(default_factory=list)
    foreign_keys: List[ForeignKey] = field(default_factory=list)
    indexes: List[Index] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        """Return schema-qualified table name."""
        return f"{self.schema_name}.{self.name}"

    @property
    def column_names(self) -> List[str]:
        """Return list of column names in ordinal order."""
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[Column]:
        """Get column by exact name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "schema_name": self.schema_name,
            "columns": [c.to_dict() for c in self.columns],
            "primary_key": self.primary_key.to_dict() if self.primary_key else None,
            "unique_constraints": [u.to_dict() for u in self.unique_constraints],
            "foreign_keys": [fk.to_dict() for fk in self.foreign_keys],
            "indexes": [i.to_dict() for i in self.indexes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Table:
        """Create from dictionary."""
        pk = data.get("primary_key")
        return cls(
            id=data["id"],
            name=data["name"],
            schema_name=data["schema_name"],
            columns=[Column.from_dict(c) for c in data.get("columns", [])],
            primary_key=PrimaryKey.from_dict(pk) if pk else None,
            unique_constraints=[UniqueConstraint.from_dict(u) for u in data.get("unique_constraints", [])],
            foreign_keys=[ForeignKey.from_dict(fk) for fk in data.get("foreign_keys", [])],
            indexes=[Index.from_dict(i) for i in data.get("indexes", [])],
        )


@dataclass
class View:
    """Metadata for a database view."""
    id: int
    name: str
    schema_name: str
    definition: Optional[str] = None
    columns: List[Column] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.schema_name}.{self.name}"

    def get_column(self, name: str) -> Optional[Column]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "schema_name": self.schema_name,
            "definition": self.definition,
            "columns": [c.to_dict() for c in self.columns],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> View:
        return cls(
            id=data["id"],
            name=data["name"],
            schema_name=data["schema_name"],
            definition=data.get("definition"),
            columns=[Column.from_dict(c) for c in data.get("columns", [])],
        )


@dataclass
class Schema:
    """A namespace owning tables and views."""
    id: int
    name: str
    alias: Optional[str] = None
    tables: List[Table] = field(default_factory=list)
    views: List[View] = field(default_factory=list)

    def __post_init__(self):
        if self.alias is None:
            self.alias = self.name

    def get_table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def get_view(self, name: str) -> Optional[View]:
        for view in self.views:
            if view.name == name:
                return view
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "alias": self.alias,
            "tables": [t.to_dict() for t in self.tables],
            "views": [v.to_dict() for v in self.views],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Schema:
        return cls(
            id=data["id"],
            name=data["name"],
            alias=data.get("alias"),
            tables=[Table.from_dict(t) for t in data.get("tables", [])],
            views=[View.from_dict(v) for v in data.get("views", [])],
        )


@dataclass
class Database:
    """Root entity of a discovered graph."""
    id: int
    name: str
    default_schema: str = "public"
    collation: Optional[str] = None
    created_at: Optional[datetime] = None
    schemas: List[Schema] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "default_schema": self.default_schema,
            "collation": self.collation,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "schemas": [s.to_dict() for s in self.schemas],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Database:
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            id=data["id"],
            name=data["name"],
            default_schema=data.get("default_schema", "public"),
            collation=data.get("collation"),
            created_at=created_at,
            schemas=[Schema.from_dict(s) for s in data.get("schemas", [])],
        )


@dataclass
class CatalogGraph:
    """
    The result of one discovery run.

    Wraps the Database root and offers lookups across schemas. A graph is
    built once and never merged with another run's output.
    """
    database: Database

    @property
    def schemas(self) -> List[Schema]:
        return self.database.schemas

    def get_schema(self, name: str) -> Optional[Schema]:
        """Get schema by exact name."""
        for schema in self.database.schemas:
            if schema.name == name:
                return schema
        return None

    def get_table(self, schema_name: str, table_name: str) -> Optional[Table]:
        """Get table by schema and table name."""
        schema = self.get_schema(schema_name)
        return schema.get_table(table_name) if schema else None

    def get_view(self, schema_name: str, view_name: str) -> Optional[View]:
        """Get view by schema and view name."""
        schema = self.get_schema(schema_name)
        return schema.get_view(view_name) if schema else None

    def iter_tables(self) -> Iterator[Table]:
        """Iterate all tables across schemas."""
        for schema in self.database.schemas:
            yield from schema.tables

    def iter_views(self) -> Iterator[View]:
        """Iterate all views across schemas."""
        for schema in self.database.schemas:
            yield from schema.views

    def iter_foreign_keys(self) -> Iterator[Tuple[Table, ForeignKey]]:
        """Iterate (owning table, foreign key) pairs."""
        for table in self.iter_tables():
            for fk in table.foreign_keys:
                yield table, fk

    def get_referencing_foreign_keys(
        self,
        schema_name: str,
        table_name: str,
    ) -> List[Tuple[Table, ForeignKey]]:
        """Get all foreign keys that target the given table."""
        return [
            (table, fk) for table, fk in self.iter_foreign_keys()
            if fk.target_schema == schema_name and fk.target_table == table_name
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {"database": self.database.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CatalogGraph:
        return cls(database=Database.from_dict(data["database"]))

    def save(self, path: Path) -> None:
        """Save graph to disk as YAML (.yaml/.yml) or JSON (anything else)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> CatalogGraph:
        """Load a graph saved with ``save``."""
        path = Path(path)

        with open(path, "r") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        return cls.from_dict(data)
