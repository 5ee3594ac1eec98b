"""
PostgreSQL catalog dialect.

Query texts against pg_catalog and information_schema, plus the store-type
mapping table. Every query's ORDER BY is part of its contract: composite
keys and indexes are assembled in row-arrival order.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from catalog_graph.metadata.dialect import CatalogDialect
from catalog_graph.models import PortableType


SYSTEM_SCHEMAS: FrozenSet[str] = frozenset({
    "pg_toast",
    "pg_temp_1",
    "pg_toast_temp_1",
    "pg_catalog",
    "information_schema",
})


# PostgreSQL store type spellings (normalized: lowercase, single spaces,
# no quotes, no modifiers, no array suffix)
POSTGRES_TYPE_MAP: Dict[str, PortableType] = {
    "boolean": PortableType.BOOLEAN,
    "bool": PortableType.BOOLEAN,
    "bigint": PortableType.INTEGER_64,
    "int8": PortableType.INTEGER_64,
    "bigserial": PortableType.INTEGER_64,
    "serial8": PortableType.INTEGER_64,
    "integer": PortableType.INTEGER_32,
    "int": PortableType.INTEGER_32,
    "int4": PortableType.INTEGER_32,
    "serial": PortableType.INTEGER_32,
    "serial4": PortableType.INTEGER_32,
    "smallint": PortableType.INTEGER_16,
    "int2": PortableType.INTEGER_16,
    "smallserial": PortableType.INTEGER_16,
    "serial2": PortableType.INTEGER_16,
    "numeric": PortableType.DECIMAL,
    "decimal": PortableType.DECIMAL,
    "double precision": PortableType.FLOAT_64,
    "float8": PortableType.FLOAT_64,
    "real": PortableType.FLOAT_32,
    "float4": PortableType.FLOAT_32,
    "text": PortableType.TEXT,
    "character varying": PortableType.TEXT,
    "varchar": PortableType.TEXT,
    "character": PortableType.TEXT,
    "char": PortableType.TEXT,
    "bpchar": PortableType.TEXT,
    "name": PortableType.TEXT,
    "json": PortableType.TEXT,
    "jsonb": PortableType.TEXT,
    "bytea": PortableType.BYTES,
    "date": PortableType.DATE,
    "timestamp without time zone": PortableType.TIMESTAMP,
    "timestamp with time zone": PortableType.TIMESTAMP,
    "timestamp": PortableType.TIMESTAMP,
    "timestamptz": PortableType.TIMESTAMP,
    "uuid": PortableType.UUID,
    "xml": PortableType.XML,
}


def _excluded(schemas: FrozenSet[str]) -> str:
    """Render the system schema set as a SQL list literal."""
    return ", ".join(f"'{name}'" for name in sorted(schemas))


_EXCLUDED = _excluded(SYSTEM_SCHEMAS)


DATABASES_QUERY = """
    SELECT d.oid AS database_id,
        d.datname AS database_name,
        d.datcollate AS collation_name,
        current_database() AS current_database
    FROM pg_database AS d
    WHERE d.datistemplate = false
    ORDER BY d.datname
"""

# pg_stat_file is not executable by PUBLIC; the creation date is only read
# when the session holds the privilege.
CREATION_DATE_PRIVILEGE_QUERY = """
    SELECT has_function_privilege('pg_catalog.pg_stat_file(text)', 'EXECUTE') AS allowed
"""

CREATION_DATE_QUERY = """
    SELECT d.oid AS database_id,
        (pg_stat_file('base/' || d.oid || '/PG_VERSION')).creation AS creation_date
    FROM pg_database AS d
    WHERE d.datname = current_database()
"""

SCHEMAS_QUERY = f"""
    SELECT ns.oid AS schema_id,
        ns.nspname AS schema_name
    FROM pg_namespace AS ns
    WHERE ns.nspname NOT IN ({_EXCLUDED})
    ORDER BY ns.nspname
"""

TABLES_QUERY = f"""
    SELECT cls.oid AS object_id,
        cls.relname AS object_name,
        ns.oid AS schema_id,
        cls.relkind AS object_kind
    FROM pg_class AS cls
    JOIN pg_namespace AS ns ON cls.relnamespace = ns.oid
    WHERE cls.relkind = 'r'
        AND ns.nspname NOT IN ({_EXCLUDED})
    ORDER BY ns.oid, cls.relname
"""

VIEWS_QUERY = f"""
    SELECT cls.oid AS object_id,
        cls.relname AS object_name,
        ns.oid AS schema_id,
        cls.relkind AS object_kind,
        vw.definition AS definition
    FROM pg_class AS cls
    JOIN pg_namespace AS ns ON cls.relnamespace = ns.oid
    JOIN pg_views AS vw ON vw.viewname = cls.relname AND vw.schemaname = ns.nspname
    WHERE cls.relkind = 'v'
        AND ns.nspname NOT IN ({_EXCLUDED})
    ORDER BY ns.oid, cls.relname
"""

# Arrays and user-defined types report a generic data_type; format_type
# gives the concrete spelling (e.g. "integer[]").
COLUMNS_QUERY = f"""
    SELECT c.table_catalog AS database_name,
        c.table_schema AS schema_name,
        c.table_name AS table_name,
        c.column_name AS column_name,
        c.ordinal_position AS ordinal_position,
        c.column_default AS default_value,
        c.is_nullable AS is_nullable,
        CASE WHEN c.data_type IN ('ARRAY', 'USER-DEFINED')
            THEN format_type(a.atttypid, NULL)
            ELSE c.data_type
        END AS data_type,
        c.character_maximum_length AS character_maximum_length,
        COALESCE(c.numeric_precision, c.datetime_precision) AS numeric_precision,
        c.numeric_scale AS numeric_scale,
        c.is_identity AS is_identity,
        c.identity_start AS identity_start,
        c.identity_increment AS identity_increment,
        c.identity_maximum AS last_identity,
        c.is_generated AS is_generated
    FROM information_schema.columns AS c
    JOIN pg_namespace AS ns ON ns.nspname = c.table_schema
    JOIN pg_class AS cls ON cls.relnamespace = ns.oid
        AND cls.relname = c.table_name
        AND cls.relkind IN ('r', 'v')
    JOIN pg_attribute AS a ON a.attrelid = cls.oid AND a.attname = c.column_name
    WHERE c.table_schema NOT IN ({_EXCLUDED})
    ORDER BY c.table_schema, c.table_name, c.ordinal_position
"""

# Only ordinary tables own keys in the graph; constraints on partitioned
# parents (relkind 'p') are skipped, as in the tables pass.
_KEY_QUERY_TEMPLATE = """
    SELECT kc.table_schema AS table_schema,
        kc.table_name AS table_name,
        kc.constraint_schema AS constraint_schema,
        kc.constraint_name AS constraint_name,
        kc.column_name AS column_name,
        kc.ordinal_position AS ordinal_position
    FROM information_schema.table_constraints AS tc
    JOIN information_schema.key_column_usage AS kc
        ON kc.table_name = tc.table_name
        AND kc.table_schema = tc.table_schema
        AND kc.constraint_name = tc.constraint_name
    JOIN pg_namespace AS ns ON ns.nspname = tc.table_schema
    JOIN pg_class AS cls ON cls.relnamespace = ns.oid
        AND cls.relname = tc.table_name
    WHERE tc.constraint_type = '{constraint_type}'
        AND cls.relkind = 'r'
        AND kc.constraint_schema NOT IN ({excluded})
    ORDER BY tc.table_schema,
        tc.table_name,
        tc.constraint_name,
        kc.ordinal_position
"""

PRIMARY_KEYS_QUERY = _KEY_QUERY_TEMPLATE.format(constraint_type="PRIMARY KEY", excluded=_EXCLUDED)

UNIQUE_CONSTRAINTS_QUERY = _KEY_QUERY_TEMPLATE.format(constraint_type="UNIQUE", excluded=_EXCLUDED)

# Local and target columns come from pg_constraint's conkey/confkey pair, so a
# key that references a bare unique index still reports its target columns.
# Rule codes are rendered in information_schema spelling.
FOREIGN_KEYS_QUERY = f"""
    SELECT ns.nspname AS table_schema,
        cls.relname AS table_name,
        ns.nspname AS constraint_schema,
        con.conname AS constraint_name,
        a.attname AS column_name,
        k.ordinality AS ordinal_position,
        fns.nspname AS foreign_table_schema,
        fcls.relname AS foreign_table_name,
        fa.attname AS foreign_column_name,
        CASE con.confmatchtype
            WHEN 'f' THEN 'FULL'
            WHEN 'p' THEN 'PARTIAL'
            ELSE 'NONE'
        END AS match_option,
        CASE con.confupdtype
            WHEN 'c' THEN 'CASCADE'
            WHEN 'n' THEN 'SET NULL'
            WHEN 'd' THEN 'SET DEFAULT'
            WHEN 'r' THEN 'RESTRICT'
            ELSE 'NO ACTION'
        END AS update_rule,
        CASE con.confdeltype
            WHEN 'c' THEN 'CASCADE'
            WHEN 'n' THEN 'SET NULL'
            WHEN 'd' THEN 'SET DEFAULT'
            WHEN 'r' THEN 'RESTRICT'
            ELSE 'NO ACTION'
        END AS delete_rule
    FROM pg_constraint AS con
    JOIN pg_class AS cls ON cls.oid = con.conrelid
    JOIN pg_namespace AS ns ON ns.oid = cls.relnamespace
    JOIN pg_class AS fcls ON fcls.oid = con.confrelid
    JOIN pg_namespace AS fns ON fns.oid = fcls.relnamespace
    CROSS JOIN LATERAL unnest(con.conkey, con.confkey) WITH ORDINALITY AS k(attnum, fattnum, ordinality)
    LEFT JOIN pg_attribute AS a ON a.attrelid = con.conrelid AND a.attnum = k.attnum
    LEFT JOIN pg_attribute AS fa ON fa.attrelid = con.confrelid AND fa.attnum = k.fattnum
    WHERE con.contype = 'f'
        AND cls.relkind = 'r'
        AND fcls.relkind = 'r'
        AND ns.nspname NOT IN ({_EXCLUDED})
    ORDER BY ns.nspname,
        cls.relname,
        con.conname,
        k.ordinality
"""

# Expression key columns have attnum 0 and no pg_attribute row; their text
# comes from pg_get_indexdef. INCLUDE columns are skipped.
INDEXES_QUERY = f"""
    SELECT tnsp.nspname AS table_schema,
        trel.relname AS table_name,
        irel.relname AS index_name,
        COALESCE(a.attname, pg_get_indexdef(i.indexrelid, k.ordinality::int, true)) AS column_name,
        k.ordinality AS ordinal_position,
        i.indisunique AS is_unique,
        i.indisprimary AS is_primary,
        (i.indexprs IS NOT NULL) OR (i.indkey::int[] @> array[0]) AS is_functional,
        i.indpred IS NOT NULL AS is_partial
    FROM pg_index AS i
    JOIN pg_class AS trel ON trel.oid = i.indrelid
    JOIN pg_namespace AS tnsp ON trel.relnamespace = tnsp.oid
    JOIN pg_class AS irel ON irel.oid = i.indexrelid
    CROSS JOIN LATERAL unnest(i.indkey) WITH ORDINALITY AS k(colnum, ordinality)
    LEFT JOIN pg_attribute AS a ON a.attrelid = trel.oid AND a.attnum = k.colnum
    WHERE i.indisunique <> true
        AND i.indisprimary <> true
        AND trel.relkind = 'r'
        AND k.ordinality <= i.indnkeyatts
        AND tnsp.nspname NOT IN ({_EXCLUDED})
    ORDER BY tnsp.nspname,
        trel.relname,
        irel.relname,
        k.ordinality
"""


POSTGRESQL = CatalogDialect(
    name="postgresql",
    type_map=POSTGRES_TYPE_MAP,
    databases_query=DATABASES_QUERY,
    schemas_query=SCHEMAS_QUERY,
    tables_query=TABLES_QUERY,
    views_query=VIEWS_QUERY,
    columns_query=COLUMNS_QUERY,
    primary_keys_query=PRIMARY_KEYS_QUERY,
    unique_constraints_query=UNIQUE_CONSTRAINTS_QUERY,
    foreign_keys_query=FOREIGN_KEYS_QUERY,
    indexes_query=INDEXES_QUERY,
    creation_date_privilege_query=CREATION_DATE_PRIVILEGE_QUERY,
    creation_date_query=CREATION_DATE_QUERY,
    default_schema="public",
)
