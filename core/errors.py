# ============================================================================
# SCHEMA SYNC EXCEPTIONS
# ============================================================================
# STATUS: Core - Error taxonomy
# PURPOSE: Exceptions raised by introspection, extraction and planning
# CREATED: 18 OCT 2026
# ============================================================================
"""
Exceptions for schema synchronization.

- ConfigurationError: bad project settings or model metadata (fails fast)
- TypeMappingError: a host type has no database type and no override
- CatalogLookupError: the catalog references something that was not extracted
- ModelModuleNotFoundError: a module holding table models cannot be imported

Unknown database types are not errors: they degrade to the untyped "object"
host type. Database errors raised while executing DDL are psycopg errors and
propagate unchanged.
"""

from typing import Optional


class SchemaSyncError(Exception):
    """Base exception for schema synchronization errors."""
    pass


class ConfigurationError(SchemaSyncError, ValueError):
    """Raised when project settings or model metadata are invalid."""

    def __init__(self, message: str, setting: Optional[str] = None):
        self.setting = setting
        super().__init__(message)


class TypeMappingError(ConfigurationError):
    """Raised when a host type cannot be mapped to a database type."""

    def __init__(self, host_type: str, field: Optional[str] = None):
        self.host_type = host_type
        self.field = field
        where = f" for field {field}" if field else ""
        super().__init__(
            f"No database type for host type '{host_type}'{where}. "
            f"Declare it in __sql_column_types__.",
            setting="__sql_column_types__",
        )


class CatalogLookupError(SchemaSyncError, LookupError):
    """Raised when catalog metadata references an unknown object."""

    def __init__(self, message: str, table: Optional[str] = None, name: Optional[str] = None):
        self.table = table
        self.name = name
        super().__init__(message)


class ModelModuleNotFoundError(SchemaSyncError, LookupError):
    """Raised when a module with table models cannot be imported."""

    def __init__(self, module_name: str):
        self.module_name = module_name
        super().__init__(f"Model module not found: {module_name}")


__all__ = [
    "SchemaSyncError",
    "ConfigurationError",
    "TypeMappingError",
    "CatalogLookupError",
    "ModelModuleNotFoundError",
]
