# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides immutable configuration values for introspection, DDL rendering
and synchronization runs.
"""

from core.config.defaults import (
    DEFAULT_EXCLUDED_SCHEMAS,
    IntrospectionConfig,
    DDLDefaults,
    ProjectConfig,
)

__all__ = [
    "DEFAULT_EXCLUDED_SCHEMAS",
    "IntrospectionConfig",
    "DDLDefaults",
    "ProjectConfig",
]
