# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export contracts, schema models and errors
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from core.contracts import ConstraintType, SyncMode, TableType
from core.errors import (
    CatalogLookupError,
    ConfigurationError,
    ModelModuleNotFoundError,
    SchemaSyncError,
    TypeMappingError,
)
from core.models import ConstraintInfo, EnumTypeInfo, FieldInfo, TableInfo

__all__ = [
    # Enums
    "ConstraintType",
    "SyncMode",
    "TableType",
    # Models
    "TableInfo",
    "FieldInfo",
    "ConstraintInfo",
    "EnumTypeInfo",
    # Errors
    "SchemaSyncError",
    "ConfigurationError",
    "TypeMappingError",
    "CatalogLookupError",
    "ModelModuleNotFoundError",
]
