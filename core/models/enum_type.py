# ============================================================================
# ENUM TYPE MODEL
# ============================================================================
# STATUS: Core model - PostgreSQL enum types
# PURPOSE: Enum types read from pg_type/pg_enum for model rendering
# CREATED: 18 OCT 2026
# EXPORTS: EnumTypeInfo
# DEPENDENCIES: pydantic
# ============================================================================
"""
Enum Type Model

Produced only by catalog introspection. Columns of an enum type carry the
qualified name ("<namespace>.<type_name>") as their db_type and host_type.
"""

from typing import List

from pydantic import BaseModel, Field


class EnumTypeInfo(BaseModel):
    """A PostgreSQL enum type and its ordered labels."""

    oid: int
    type_name: str
    namespace: str
    labels: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.type_name}"

    @property
    def class_name(self) -> str:
        """Python class name for the rendered Enum."""
        from core.schema.type_map import pascal_case
        return pascal_case(self.type_name)


__all__ = ["EnumTypeInfo"]
