# ============================================================================
# CATALOG INTROSPECTION
# ============================================================================
# STATUS: Infrastructure - Existing schema from pg_catalog
# PURPOSE: Read schemas, relations, columns, primary keys and enum types
# CREATED: 18 OCT 2026
# EXPORTS: CatalogIntrospector, apply_primary_keys, field_from_row
# DEPENDENCIES: psycopg
# ============================================================================
"""
Catalog Introspection.

Builds the EXISTING side of a comparison from the PostgreSQL catalog:

1. Schemas from information_schema.schemata (minus the deny-list)
2. Base tables and views per schema
3. Columns per relation (pg_attribute + pg_type + information_schema.columns)
4. Primary keys per table (tables only, never views)
5. Enum types with their labels

All queries are read-only and use bound parameters.

Usage:
    from infrastructure.postgresql import PostgreSQLRepository
    from infrastructure.catalog import CatalogIntrospector

    with PostgreSQLRepository().get_connection() as conn:
        introspector = CatalogIntrospector(conn)
        tables = introspector.introspect()
        enums = introspector.get_enum_types()
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from psycopg.rows import dict_row

from core.config.defaults import IntrospectionConfig
from core.contracts import ConstraintType, TableType
from core.errors import CatalogLookupError
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.enum_type import EnumTypeInfo
from core.models.table_info import ConstraintInfo, FieldInfo, TableInfo
from core.schema.type_map import db_to_host, resolve_length, resolve_scale

logger = get_logger(__name__, ComponentType.INTROSPECTOR)


# ============================================================================
# QUERIES
# ============================================================================

SCHEMAS_SQL = """
SELECT schema_name
FROM information_schema.schemata
WHERE schema_name::text <> ALL(%(excluded)s::text[])
ORDER BY schema_name
"""

RELATIONS_SQL = """
SELECT table_name, 'table' AS type
FROM information_schema.tables
WHERE table_schema = %(schema)s AND table_type = 'BASE TABLE'
UNION ALL
SELECT table_name, 'view' AS type
FROM information_schema.views
WHERE table_schema = %(schema)s
ORDER BY type, table_name
"""

# Arrays (typcategory 'A') resolve to their element type one level deep.
COLUMNS_SQL = """
SELECT a.oid,
       c.attnum AS num,
       c.attname AS field,
       c.attnotnull AS notnull,
       d.description AS comment,
       CASE WHEN e.typcategory = 'A' THEN e2.typname ELSE e.typname END AS type,
       CASE WHEN e.typcategory = 'A' THEN e2.typtype ELSE e.typtype END AS data_type,
       CASE WHEN e.typcategory = 'A' THEN n2.nspname ELSE n.nspname END AS type_schema,
       e.typcategory,
       f.character_maximum_length,
       f.numeric_precision,
       f.numeric_scale,
       f.datetime_precision
FROM pg_class a
JOIN pg_namespace b ON a.relnamespace = b.oid
JOIN pg_attribute c ON c.attrelid = a.oid
LEFT JOIN pg_description d ON d.objoid = c.attrelid AND d.objsubid = c.attnum
JOIN pg_type e ON e.oid = c.atttypid
JOIN pg_namespace n ON n.oid = e.typnamespace
LEFT JOIN pg_type e2 ON e2.oid = e.typelem
LEFT JOIN pg_namespace n2 ON n2.oid = e2.typnamespace
JOIN information_schema.columns f
  ON f.table_schema = b.nspname AND f.table_name = a.relname AND f.column_name = c.attname
WHERE b.nspname = %(schema)s
  AND a.relname = %(table)s
  AND c.attnum > 0
  AND NOT c.attisdropped
ORDER BY c.attnum
"""

PRIMARY_KEYS_SQL = """
SELECT tc.constraint_name, kcu.column_name
FROM information_schema.table_constraints tc
JOIN information_schema.key_column_usage kcu
  ON kcu.constraint_schema = tc.constraint_schema
 AND kcu.constraint_name = tc.constraint_name
 AND kcu.table_schema = tc.table_schema
 AND kcu.table_name = tc.table_name
WHERE tc.table_schema = %(schema)s
  AND tc.table_name = %(table)s
  AND tc.constraint_type = 'PRIMARY KEY'
ORDER BY kcu.ordinal_position
"""

ENUM_TYPES_SQL = """
SELECT t.oid, t.typname, n.nspname
FROM pg_type t
JOIN pg_namespace n ON t.typnamespace = n.oid
WHERE t.typtype = 'e'
ORDER BY t.oid
"""

ENUM_LABELS_SQL = """
SELECT enumtypid, enumlabel
FROM pg_enum
ORDER BY enumtypid, enumsortorder
"""


# ============================================================================
# ROW CONVERSION
# ============================================================================

def field_from_row(row: Mapping[str, Any]) -> FieldInfo:
    """
    Build an existing-state FieldInfo from one COLUMNS_SQL row.

    Enum types are qualified with their namespace; arrays carry the element
    type plus is_array. Length and scale are picked per type family.
    """
    base_type = row["type"]
    is_enum = row["data_type"] == "e"
    db_type = f"{row['type_schema']}.{base_type}" if is_enum else base_type

    return FieldInfo(
        name=row["field"],
        db_type=db_type,
        host_type=db_to_host(db_type),
        not_null=bool(row["notnull"]),
        is_array=row["typcategory"] == "A",
        length=resolve_length(
            base_type,
            character_length=row.get("character_maximum_length"),
            numeric_precision=row.get("numeric_precision"),
            datetime_precision=row.get("datetime_precision"),
        ),
        numeric_scale=resolve_scale(base_type, row.get("numeric_scale")),
        comment=row.get("comment"),
        oid=row.get("oid"),
    )


def apply_primary_keys(
    table: str,
    fields: Sequence[FieldInfo],
    rows: Sequence[Mapping[str, Any]],
) -> Tuple[List[FieldInfo], List[ConstraintInfo]]:
    """
    Record primary key constraints and mark their columns as identity.

    Args:
        table: Qualified table name (for error messages)
        fields: Columns already read for the table
        rows: PRIMARY_KEYS_SQL rows (constraint_name, column_name)

    Returns:
        (fields with identity set, constraints)

    Raises:
        CatalogLookupError: If a constraint names a column not in `fields`
    """
    updated = list(fields)
    index = {fi.name: i for i, fi in enumerate(updated)}
    constraints: List[ConstraintInfo] = []

    for row in rows:
        column = row["column_name"]
        if column not in index:
            raise CatalogLookupError(
                f"Constraint {row['constraint_name']} on {table} references unknown column {column}",
                table=table,
                name=column,
            )
        constraints.append(ConstraintInfo(
            name=row["constraint_name"],
            field=column,
            constraint_type=ConstraintType.PRIMARY_KEY,
        ))
        i = index[column]
        updated[i] = updated[i].model_copy(update={"identity": True})

    return updated, constraints


# ============================================================================
# INTROSPECTOR
# ============================================================================

class CatalogIntrospector:
    """
    Read the existing schema from a PostgreSQL connection.

    The connection is borrowed; the caller opens and closes it.
    """

    def __init__(self, conn, config: Optional[IntrospectionConfig] = None):
        """
        Args:
            conn: psycopg connection
            config: Introspection settings (schema deny-list)
        """
        self.conn = conn
        self.config = config or IntrospectionConfig()

    def _fetch_all(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        with self.conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            return cur.fetchall()

    # =========================================================================
    # SCHEMAS AND RELATIONS
    # =========================================================================

    def list_schemas(self) -> List[str]:
        """Schema names not on the deny-list, ordered by name."""
        rows = self._fetch_all(SCHEMAS_SQL, {"excluded": list(self.config.excluded_schemas)})
        return [row["schema_name"] for row in rows]

    def list_relations(self, schema: str) -> List[Tuple[str, TableType]]:
        """Base tables, then views, of one schema."""
        rows = self._fetch_all(RELATIONS_SQL, {"schema": schema})
        return [
            (row["table_name"], TableType.TABLE if row["type"] == "table" else TableType.VIEW)
            for row in rows
        ]

    # =========================================================================
    # COLUMNS AND CONSTRAINTS
    # =========================================================================

    def get_fields(self, schema: str, table: str) -> List[FieldInfo]:
        """Columns of one relation in attribute order."""
        rows = self._fetch_all(COLUMNS_SQL, {"schema": schema, "table": table})
        return [field_from_row(row) for row in rows]

    def get_primary_keys(
        self,
        schema: str,
        table: str,
        fields: Sequence[FieldInfo],
    ) -> Tuple[List[FieldInfo], List[ConstraintInfo]]:
        """Primary key pass for a table; see apply_primary_keys."""
        rows = self._fetch_all(PRIMARY_KEYS_SQL, {"schema": schema, "table": table})
        return apply_primary_keys(f"{schema}.{table}", fields, rows)

    def get_table(self, schema: str, name: str, table_type: TableType = TableType.TABLE) -> TableInfo:
        """Build the existing TableInfo for one relation."""
        with log_context(schema=schema, table=name, operation="introspect"):
            fields = self.get_fields(schema, name)
            constraints: List[ConstraintInfo] = []
            if table_type == TableType.TABLE:
                fields, constraints = self.get_primary_keys(schema, name, fields)

            logger.debug(f"Read {len(fields)} column(s), {len(constraints)} key column(s)")
            return TableInfo(
                schema_name=schema,
                name=name,
                table_type=table_type,
                fields=fields,
                constraints=constraints,
            )

    # =========================================================================
    # WHOLE CATALOG
    # =========================================================================

    def introspect(self) -> List[TableInfo]:
        """
        Read every table and view outside the excluded schemas.

        Returns:
            TableInfo list ordered by schema, then tables before views
        """
        tables: List[TableInfo] = []
        for schema in self.list_schemas():
            for name, table_type in self.list_relations(schema):
                table = self.get_table(schema, name, table_type)
                logger.info(f"[{table_type.value}] {table.qualified_name}")
                tables.append(table)

        log_checkpoint("introspection_complete", {"tables": len(tables)})
        return tables

    def get_enum_types(self) -> List[EnumTypeInfo]:
        """Enum types ordered by oid, each with labels in sort order."""
        labels: Dict[int, List[str]] = {}
        for row in self._fetch_all(ENUM_LABELS_SQL):
            labels.setdefault(int(row["enumtypid"]), []).append(row["enumlabel"])

        return [
            EnumTypeInfo(
                oid=int(row["oid"]),
                type_name=row["typname"],
                namespace=row["nspname"],
                labels=labels.get(int(row["oid"]), []),
            )
            for row in self._fetch_all(ENUM_TYPES_SQL)
        ]


__all__ = [
    "CatalogIntrospector",
    "field_from_row",
    "apply_primary_keys",
]
