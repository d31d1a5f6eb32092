# ============================================================================
# SCHEMA DIFF ENGINE
# ============================================================================
# STATUS: Core - Desired vs existing table reconciliation
# PURPOSE: Produce the ordered DDL plan that moves existing -> desired
# CREATED: 18 OCT 2026
# EXPORTS: SchemaDiff, reconcile, reconcile_all
# DEPENDENCIES: none
# ============================================================================
"""
Schema Diff Engine.

Compares a DESIRED table (from Python models) with its EXISTING counterpart
(from the catalog) and returns Statement objects. Neither input is mutated.

Plan order for an existing table:
    1. New columns: AddColumn, then SetNullability
    2. Shared columns: AlterColumnType (type, array flag, or length change
       with a non-empty length clause), SetNullability (independently)
    3. DropConstraint for primary keys whose column is no longer desired
    4. AddConstraint "pk_<table>" for identity columns without a primary key

Columns that exist only in the database are left alone: the diff is
additive and never drops columns.

Usage:
    plan = reconcile(desired, existing)   # existing may be None
"""

from typing import Dict, Iterable, List, Optional, Tuple

from core.config.defaults import DDLDefaults
from core.logging import ComponentType, get_logger
from core.models.table_info import FieldInfo, TableInfo
from core.schema.statements import (
    AddColumn,
    AddConstraint,
    AlterColumnType,
    CreateTable,
    DropConstraint,
    SetNullability,
    Statement,
)
from core.schema.type_map import length_clause, split_type_modifier

logger = get_logger(__name__, ComponentType.DIFF)


class SchemaDiff:
    """
    Reconcile desired tables against existing ones.

    Stateless apart from DDLDefaults (constraint naming, default width).
    """

    def __init__(self, defaults: Optional[DDLDefaults] = None):
        self.defaults = defaults or DDLDefaults()

    def reconcile(self, desired: TableInfo, existing: Optional[TableInfo]) -> List[Statement]:
        """
        Plan the statements that bring `existing` in line with `desired`.

        Args:
            desired: Table described by Python models
            existing: Table read from the catalog, or None if absent

        Returns:
            Ordered statements; empty when the tables already agree
        """
        if existing is None:
            logger.debug(f"{desired.qualified_name}: not in catalog, planning CREATE TABLE")
            return [CreateTable.for_table(desired)]

        plan: List[Statement] = []
        plan.extend(self._column_changes(desired, existing))
        plan.extend(self._dropped_constraints(desired, existing))
        plan.extend(self._added_constraints(desired, existing))

        logger.debug(f"{desired.qualified_name}: {len(plan)} statement(s) planned")
        return plan

    def reconcile_all(
        self,
        desired_tables: Iterable[TableInfo],
        existing_tables: Iterable[TableInfo],
    ) -> List[Statement]:
        """
        Reconcile every desired table, pairing by (schema, name).

        Existing tables without a desired counterpart are ignored.
        """
        existing_by_key: Dict[Tuple[str, str], TableInfo] = {t.key: t for t in existing_tables}
        plan: List[Statement] = []
        for desired in desired_tables:
            plan.extend(self.reconcile(desired, existing_by_key.get(desired.key)))
        return plan

    # =========================================================================
    # COLUMNS
    # =========================================================================

    def _column_changes(self, desired: TableInfo, existing: TableInfo) -> List[Statement]:
        plan: List[Statement] = []
        for new_fi in desired.fields:
            old_fi = existing.get_field(new_fi.name)

            if old_fi is None:
                plan.append(AddColumn(desired.schema_name, desired.name, column=new_fi))
                plan.append(SetNullability(
                    desired.schema_name, desired.name,
                    column_name=new_fi.name, not_null=new_fi.not_null,
                ))
                continue

            if self._type_changed(new_fi, old_fi):
                plan.append(AlterColumnType(desired.schema_name, desired.name, column=new_fi))
            if new_fi.not_null != old_fi.not_null:
                plan.append(SetNullability(
                    desired.schema_name, desired.name,
                    column_name=new_fi.name, not_null=new_fi.not_null,
                ))
        return plan

    def _type_changed(self, new_fi: FieldInfo, old_fi: FieldInfo) -> bool:
        """
        Type, array flag, or a length change that is visible in DDL.

        Length alone differs for most non-character types (e.g. int4 reports
        precision 32), so it only counts when the new length clause is
        non-empty. An explicit type such as varchar(20) is compared by name
        and by the length and scale it spells out.
        """
        type_name, length, scale = split_type_modifier(new_fi.db_type)
        if length is not None:
            return (
                type_name != old_fi.db_type
                or new_fi.is_array != old_fi.is_array
                or length != old_fi.length
                or (scale or 0) != old_fi.numeric_scale
            )
        if new_fi.db_type != old_fi.db_type or new_fi.is_array != old_fi.is_array:
            return True
        if new_fi.length != old_fi.length or new_fi.numeric_scale != old_fi.numeric_scale:
            return self._length_clause(new_fi) != ""
        return False

    def _length_clause(self, fi: FieldInfo) -> str:
        return length_clause(
            fi.host_type,
            fi.length,
            fi.numeric_scale,
            default_char_length=self.defaults.default_char_length,
        )

    # =========================================================================
    # CONSTRAINTS
    # =========================================================================

    def _dropped_constraints(self, desired: TableInfo, existing: TableInfo) -> List[Statement]:
        # A composite key lists one row per column under the same name
        plan: List[Statement] = []
        dropped = set()
        for c in existing.constraints:
            if desired.has_field(c.field) or c.name in dropped:
                continue
            dropped.add(c.name)
            plan.append(DropConstraint(desired.schema_name, desired.name, constraint_name=c.name))
        return plan

    def _added_constraints(self, desired: TableInfo, existing: TableInfo) -> List[Statement]:
        return [
            AddConstraint(
                desired.schema_name, desired.name,
                constraint_name=self.defaults.primary_key_name(desired.name),
                column_name=fi.name,
            )
            for fi in desired.identity_fields
            if existing.primary_key_constraint_for(fi.name) is None
        ]


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def reconcile(desired: TableInfo, existing: Optional[TableInfo]) -> List[Statement]:
    """Reconcile one table with default DDL settings."""
    return SchemaDiff().reconcile(desired, existing)


def reconcile_all(
    desired_tables: Iterable[TableInfo],
    existing_tables: Iterable[TableInfo],
) -> List[Statement]:
    """Reconcile many tables with default DDL settings."""
    return SchemaDiff().reconcile_all(desired_tables, existing_tables)


__all__ = ["SchemaDiff", "reconcile", "reconcile_all"]
