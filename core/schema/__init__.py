# ============================================================================
# SCHEMA MODULE
# ============================================================================
# STATUS: Core - Type mapping, descriptors, diff and DDL rendering
# PURPOSE: Compare Python table models with PostgreSQL and emit DDL
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from core.schema.type_map import (
    TYPE_TABLE,
    db_to_host,
    host_to_db,
    host_annotation,
    length_clause,
)
from core.schema.host_types import NotNull
from core.schema.descriptors import (
    TableDescriptor,
    PydanticTableDescriptor,
    DataclassTableDescriptor,
    describe_models,
    load_model_classes,
)
from core.schema.statements import (
    Statement,
    StatementKind,
    CreateTable,
    AddColumn,
    AlterColumnType,
    SetNullability,
    AddConstraint,
    DropConstraint,
)
from core.schema.diff import SchemaDiff, reconcile, reconcile_all
from core.schema.ddl_renderer import PostgresDDLRenderer

__all__ = [
    # Type mapping
    "TYPE_TABLE",
    "db_to_host",
    "host_to_db",
    "host_annotation",
    "length_clause",
    "NotNull",
    # Descriptors
    "TableDescriptor",
    "PydanticTableDescriptor",
    "DataclassTableDescriptor",
    "describe_models",
    "load_model_classes",
    # Statements
    "Statement",
    "StatementKind",
    "CreateTable",
    "AddColumn",
    "AlterColumnType",
    "SetNullability",
    "AddConstraint",
    "DropConstraint",
    # Diff and rendering
    "SchemaDiff",
    "reconcile",
    "reconcile_all",
    "PostgresDDLRenderer",
]
