# ============================================================================
# DDL STATEMENT MODEL
# ============================================================================
# STATUS: Core - Structured DDL plan
# PURPOSE: Tagged statement variants produced by the diff engine
# CREATED: 18 OCT 2026
# EXPORTS: StatementKind, Statement, CreateTable, AddColumn, AlterColumnType,
#          SetNullability, AddConstraint, DropConstraint
# DEPENDENCIES: dataclasses
# ============================================================================
"""
DDL Statement Model.

The diff engine returns a list of these; rendering to SQL text is a
separate step (see core.schema.ddl_renderer). Tests can compare plans
structurally without parsing SQL.

Usage:
    plan = reconcile(desired, existing)
    kinds = [stmt.kind for stmt in plan]
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from core.contracts import ConstraintType
from core.models.table_info import FieldInfo, TableInfo


class StatementKind(str, Enum):
    """Statement variants, in the order a single table's plan emits them."""
    CREATE_TABLE = "create_table"
    ADD_COLUMN = "add_column"
    ALTER_COLUMN_TYPE = "alter_column_type"
    SET_NULLABILITY = "set_nullability"
    DROP_CONSTRAINT = "drop_constraint"
    ADD_CONSTRAINT = "add_constraint"


@dataclass(frozen=True)
class Statement:
    """Base for all statements: every statement targets one table."""
    kind: ClassVar[StatementKind]

    schema_name: str
    table_name: str

    @property
    def qualified_table(self) -> str:
        return f"{self.schema_name}.{self.table_name}"


@dataclass(frozen=True)
class CreateTable(Statement):
    """Create a table that has no existing counterpart."""
    kind: ClassVar[StatementKind] = StatementKind.CREATE_TABLE

    table: TableInfo

    @classmethod
    def for_table(cls, table: TableInfo) -> "CreateTable":
        return cls(schema_name=table.schema_name, table_name=table.name, table=table)


@dataclass(frozen=True)
class AddColumn(Statement):
    """Add a column; always added nullable, tightened by SetNullability."""
    kind: ClassVar[StatementKind] = StatementKind.ADD_COLUMN

    column: FieldInfo


@dataclass(frozen=True)
class AlterColumnType(Statement):
    """Change the type (and length/scale) of an existing column."""
    kind: ClassVar[StatementKind] = StatementKind.ALTER_COLUMN_TYPE

    column: FieldInfo


@dataclass(frozen=True)
class SetNullability(Statement):
    """Set or drop NOT NULL on a column."""
    kind: ClassVar[StatementKind] = StatementKind.SET_NULLABILITY

    column_name: str
    not_null: bool


@dataclass(frozen=True)
class AddConstraint(Statement):
    """Add a single-column constraint (primary keys only)."""
    kind: ClassVar[StatementKind] = StatementKind.ADD_CONSTRAINT

    constraint_name: str
    column_name: str
    constraint_type: ConstraintType = ConstraintType.PRIMARY_KEY


@dataclass(frozen=True)
class DropConstraint(Statement):
    """Drop a named constraint."""
    kind: ClassVar[StatementKind] = StatementKind.DROP_CONSTRAINT

    constraint_name: str


__all__ = [
    "StatementKind",
    "Statement",
    "CreateTable",
    "AddColumn",
    "AlterColumnType",
    "SetNullability",
    "AddConstraint",
    "DropConstraint",
]
