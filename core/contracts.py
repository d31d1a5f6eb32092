# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums shared by catalog and model descriptors
# PURPOSE: Relation kinds, constraint kinds and sync modes
# CREATED: 18 OCT 2026
# EXPORTS: TableType, ConstraintType, SyncMode
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for schema synchronization.

These enums cross the boundaries between:
- PostgreSQL catalog (existing state)
- Python table models (desired state)
- DDL statements (the plan between them)
"""

from enum import Enum


class TableType(str, Enum):
    """Kind of relation found in the catalog."""
    TABLE = "table"
    VIEW = "view"


class ConstraintType(str, Enum):
    """
    Constraint kinds tracked on existing tables.

    Only primary keys are modeled; foreign keys and indexes are ignored.
    """
    PRIMARY_KEY = "PRIMARY KEY"


class SyncMode(str, Enum):
    """
    Direction of a synchronization run.

    DB    - read the catalog and render Python models (reverse engineering)
    CODE  - read Python models and alter the database (forward engineering)
    """
    DB = "db"
    CODE = "code"

    def requires_output_dir(self) -> bool:
        """Only the DB-first direction writes files."""
        return self is SyncMode.DB


__all__ = ["TableType", "ConstraintType", "SyncMode"]
