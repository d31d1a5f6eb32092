# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for schema description models
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Frozen pydantic models describing tables, columns, constraints and enum
types. The same shapes carry both the desired state (from Python table
models) and the existing state (from the PostgreSQL catalog).
"""

from core.models.table_info import TableInfo, FieldInfo, ConstraintInfo
from core.models.enum_type import EnumTypeInfo

__all__ = [
    # Tables
    "TableInfo",
    "FieldInfo",
    "ConstraintInfo",
    # Enums
    "EnumTypeInfo",
]
