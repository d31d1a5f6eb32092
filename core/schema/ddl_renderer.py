# ============================================================================
# DDL RENDERER
# ============================================================================
# STATUS: Core - Statement model to PostgreSQL DDL
# PURPOSE: Render CREATE/ALTER statements using psycopg.sql composition
# CREATED: 18 OCT 2026
# EXPORTS: PostgresDDLRenderer
# DEPENDENCIES: psycopg
# ============================================================================
"""
PostgreSQL DDL Renderer.

Turns the structured plan from the diff engine into psycopg.sql.Composed
statements. Identifiers are composed, never concatenated; type names come
from the type map or from explicit model overrides.

Column clause format (CREATE TABLE):
    "name" type[(length[,scale])][[]] [PRIMARY KEY] {NOT NULL|NULL}

Usage:
    renderer = PostgresDDLRenderer()
    for stmt in renderer.render_all(plan):
        cursor.execute(stmt)

    print(renderer.render_text(plan))
"""

from typing import Callable, Dict, List, Optional, Sequence

from psycopg import sql

from core.config.defaults import DDLDefaults
from core.logging import ComponentType, get_logger
from core.models.table_info import FieldInfo
from core.schema.statements import (
    AddColumn,
    AddConstraint,
    AlterColumnType,
    CreateTable,
    DropConstraint,
    SetNullability,
    Statement,
    StatementKind,
)
from core.schema.type_map import has_type_modifier, is_enum_type, length_clause

logger = get_logger(__name__, ComponentType.RENDERER)


class PostgresDDLRenderer:
    """
    Render Statement objects as PostgreSQL DDL.

    The renderer is stateless apart from its DDLDefaults and may be swapped
    for another dialect without touching the diff engine.
    """

    def __init__(self, defaults: Optional[DDLDefaults] = None):
        self.defaults = defaults or DDLDefaults()
        self._renderers: Dict[StatementKind, Callable[[Statement], sql.Composed]] = {
            StatementKind.CREATE_TABLE: self._render_create_table,
            StatementKind.ADD_COLUMN: self._render_add_column,
            StatementKind.ALTER_COLUMN_TYPE: self._render_alter_column_type,
            StatementKind.SET_NULLABILITY: self._render_set_nullability,
            StatementKind.ADD_CONSTRAINT: self._render_add_constraint,
            StatementKind.DROP_CONSTRAINT: self._render_drop_constraint,
        }

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def render(self, statement: Statement) -> sql.Composed:
        """Render one statement."""
        return self._renderers[statement.kind](statement)

    def render_all(self, statements: Sequence[Statement]) -> List[sql.Composed]:
        """Render a plan, preserving order."""
        rendered = [self.render(stmt) for stmt in statements]
        logger.debug(f"Rendered {len(rendered)} statement(s)")
        return rendered

    def render_text(self, statements: Sequence[Statement]) -> str:
        """
        Render a plan as a SQL script, one statement per line.

        Returns:
            Script text; "" for an empty plan
        """
        return "\n".join(
            f"{stmt.as_string(None)};" for stmt in self.render_all(statements)
        )

    # =========================================================================
    # COLUMN FRAGMENTS
    # =========================================================================

    def length_clause(self, fi: FieldInfo) -> str:
        """"(length[,scale])" for a column, or ""."""
        return length_clause(
            fi.host_type,
            fi.length,
            fi.numeric_scale,
            default_char_length=self.defaults.default_char_length,
        )

    def column_type(self, fi: FieldInfo) -> sql.Composable:
        """
        Full column type: name, length clause and array suffix.

        Enum types are composed as qualified identifiers. An explicit type
        that already has "(...)" keeps it and gets no length clause.
        """
        if is_enum_type(fi.db_type):
            namespace, type_name = fi.db_type.split(".", 1)
            type_sql: sql.Composable = sql.Identifier(namespace, type_name)
        else:
            type_sql = sql.SQL(fi.db_type)

        length = "" if has_type_modifier(fi.db_type) else self.length_clause(fi)
        suffix = length + ("[]" if fi.is_array else "")
        if suffix:
            return sql.Composed([type_sql, sql.SQL(suffix)])
        return type_sql

    def column_definition(self, fi: FieldInfo) -> sql.Composed:
        """Column clause of a CREATE TABLE statement."""
        parts = [sql.Identifier(fi.name), sql.SQL(" "), self.column_type(fi)]
        if fi.identity:
            parts.append(sql.SQL(" PRIMARY KEY"))
        parts.append(sql.SQL(" NOT NULL" if fi.identity or fi.not_null else " NULL"))
        return sql.Composed(parts)

    def _table(self, statement: Statement) -> sql.Identifier:
        return sql.Identifier(statement.schema_name, statement.table_name)

    # =========================================================================
    # STATEMENT RENDERERS
    # =========================================================================

    def _render_create_table(self, statement: CreateTable) -> sql.Composed:
        columns = sql.SQL(", ").join(
            self.column_definition(fi) for fi in statement.table.fields
        )
        stmt = sql.SQL("CREATE TABLE {table} ({columns})").format(
            table=self._table(statement),
            columns=columns,
        )
        if self.defaults.with_oids_clause:
            stmt = sql.SQL("{} WITH (OIDS=FALSE)").format(stmt)
        return stmt

    def _render_add_column(self, statement: AddColumn) -> sql.Composed:
        return sql.SQL("ALTER TABLE {table} ADD COLUMN {column} {type}").format(
            table=self._table(statement),
            column=sql.Identifier(statement.column.name),
            type=self.column_type(statement.column),
        )

    def _render_alter_column_type(self, statement: AlterColumnType) -> sql.Composed:
        return sql.SQL("ALTER TABLE {table} ALTER COLUMN {column} TYPE {type}").format(
            table=self._table(statement),
            column=sql.Identifier(statement.column.name),
            type=self.column_type(statement.column),
        )

    def _render_set_nullability(self, statement: SetNullability) -> sql.Composed:
        action = "SET NOT NULL" if statement.not_null else "DROP NOT NULL"
        return sql.SQL("ALTER TABLE {table} ALTER COLUMN {column} {action}").format(
            table=self._table(statement),
            column=sql.Identifier(statement.column_name),
            action=sql.SQL(action),
        )

    def _render_add_constraint(self, statement: AddConstraint) -> sql.Composed:
        return sql.SQL(
            "ALTER TABLE {table} ADD CONSTRAINT {name} {constraint_type} ({column})"
        ).format(
            table=self._table(statement),
            name=sql.Identifier(statement.constraint_name),
            constraint_type=sql.SQL(statement.constraint_type.value),
            column=sql.Identifier(statement.column_name),
        )

    def _render_drop_constraint(self, statement: DropConstraint) -> sql.Composed:
        return sql.SQL("ALTER TABLE {table} DROP CONSTRAINT {name}").format(
            table=self._table(statement),
            name=sql.Identifier(statement.constraint_name),
        )


__all__ = ["PostgresDDLRenderer"]
