# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Database access and file output
# PURPOSE: Catalog introspection, DDL execution and model writing
# CREATED: 18 OCT 2026
# ============================================================================
"""
Infrastructure module for pgstaging.

Provides:
- PostgreSQLRepository: Connection handling
- CatalogIntrospector: Existing tables, keys and enum types
- ModelWriter: Pydantic model modules from a catalog snapshot
- SchemaSynchronizer: DB-first and code-first runs

Usage:
    from infrastructure import SchemaSynchronizer

    result = SchemaSynchronizer(config).code_first(dry_run=True)
    print(result.sql)
"""

from infrastructure.postgresql import PostgreSQLRepository
from infrastructure.catalog import CatalogIntrospector
from infrastructure.model_writer import ModelWriter
from infrastructure.schema_sync import (
    CatalogSnapshot,
    SchemaSynchronizer,
    SyncResult,
)

__all__ = [
    # PostgreSQL
    'PostgreSQLRepository',
    # Introspection
    'CatalogIntrospector',
    # Model output
    'ModelWriter',
    # Synchronization
    'SchemaSynchronizer',
    'CatalogSnapshot',
    'SyncResult',
]
