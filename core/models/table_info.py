# ============================================================================
# TABLE METADATA MODELS
# ============================================================================
# STATUS: Core model - In-memory schema description
# PURPOSE: Tables, columns and constraints shared by catalog and code models
# CREATED: 18 OCT 2026
# EXPORTS: TableInfo, FieldInfo, ConstraintInfo
# DEPENDENCIES: pydantic
# ============================================================================
"""
Table Metadata Models

One shape describes both sides of a comparison:
- EXISTING state: built by CatalogIntrospector from pg_catalog
- DESIRED state: built by a TableDescriptor from Python table models

All models are frozen. Introspection "updates" (e.g. marking a primary key
column) produce new instances via model_copy(update=...).
"""

from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, model_validator

from core.contracts import ConstraintType, TableType


class FieldInfo(BaseModel):
    """
    One column.

    db_type is the catalog type name of the element (arrays set is_array);
    enum types are qualified with their namespace, e.g. "public.mood".
    """

    name: str
    db_type: str
    host_type: str
    not_null: bool = False
    is_array: bool = False
    length: int = 0
    numeric_scale: int = 0
    identity: bool = False
    comment: Optional[str] = None
    oid: Optional[int] = Field(default=None, description="pg_class oid, existing state only")

    model_config = {"frozen": True}

    @computed_field
    @property
    def host_annotation(self) -> str:
        """Annotation a model renderer writes for this column."""
        from core.schema.type_map import host_annotation
        return host_annotation(self.host_type, self.not_null, self.is_array)

    @property
    def is_enum(self) -> bool:
        from core.schema.type_map import is_enum_type
        return is_enum_type(self.db_type)


class ConstraintInfo(BaseModel):
    """A primary key constraint on one column of an existing table."""

    name: str
    field: str
    constraint_type: ConstraintType = ConstraintType.PRIMARY_KEY

    model_config = {"frozen": True}


class TableInfo(BaseModel):
    """
    One relation (table or view).

    Field order is catalog attribute order and is kept when rendering.
    """

    schema_name: str
    name: str
    table_type: TableType = TableType.TABLE
    fields: List[FieldInfo] = Field(default_factory=list)
    constraints: List[ConstraintInfo] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_unique_field_names(self) -> "TableInfo":
        seen = set()
        for fi in self.fields:
            if fi.name in seen:
                raise ValueError(f"Duplicate field '{fi.name}' in {self.schema_name}.{self.name}")
            seen.add(fi.name)
        return self

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.name}"

    @property
    def key(self) -> tuple:
        """(schema, name) identity used to pair desired and existing tables."""
        return (self.schema_name, self.name)

    def get_field(self, name: str) -> Optional[FieldInfo]:
        """Field with the given name, or None."""
        for fi in self.fields:
            if fi.name == name:
                return fi
        return None

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    @property
    def identity_fields(self) -> List[FieldInfo]:
        return [fi for fi in self.fields if fi.identity]

    def primary_key_constraint_for(self, field_name: str) -> Optional[ConstraintInfo]:
        """Primary key constraint covering the given column, or None."""
        for c in self.constraints:
            if c.field == field_name and c.constraint_type == ConstraintType.PRIMARY_KEY:
                return c
        return None


__all__ = ["TableInfo", "FieldInfo", "ConstraintInfo"]
