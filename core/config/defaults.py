# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Immutable settings for introspection, DDL rendering and runs
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides immutable settings for schema synchronization.
Values can be overridden via environment variables or CLI arguments.

Design:
- Frozen dataclasses, passed explicitly into the components that use them
- Environment variable overrides via from_env()
- ProjectConfig.validate() fails fast before any database work
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from core.contracts import SyncMode
from core.errors import ConfigurationError


# System and extension schemas never synchronized
DEFAULT_EXCLUDED_SCHEMAS: Tuple[str, ...] = (
    "geometry_columns",
    "raster_columns",
    "spatial_ref_sys",
    "raster_overviews",
    "us_gaz",
    "topology",
    "zip_lookup_all",
    "pg_toast",
    "pg_temp_1",
    "pg_toast_temp_1",
    "pg_catalog",
    "information_schema",
    "tiger",
    "tiger_data",
)


def _split_env_list(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class IntrospectionConfig:
    """
    Settings for reading the catalog.

    excluded_schemas is a deny-list; every other schema is introspected.
    """
    excluded_schemas: Tuple[str, ...] = DEFAULT_EXCLUDED_SCHEMAS

    @classmethod
    def from_env(cls) -> "IntrospectionConfig":
        """Create from environment variables (extra schemas are appended)."""
        extra = _split_env_list(os.getenv("PGSTAGING_EXCLUDED_SCHEMAS"))
        return cls(excluded_schemas=DEFAULT_EXCLUDED_SCHEMAS + extra)


@dataclass(frozen=True)
class DDLDefaults:
    """
    Defaults for DDL rendering.

    default_char_length: width at which character columns omit "(n)"
    with_oids_clause: append "WITH (OIDS=FALSE)" to CREATE TABLE
    primary_key_prefix: constraint names are "<prefix><table>"
    """
    default_char_length: int = 255
    with_oids_clause: bool = True
    primary_key_prefix: str = "pk_"

    def primary_key_name(self, table: str) -> str:
        return f"{self.primary_key_prefix}{table}"

    @classmethod
    def from_env(cls) -> "DDLDefaults":
        """Create from environment variables."""
        return cls(
            default_char_length=int(os.getenv("PGSTAGING_DEFAULT_CHAR_LENGTH", 255)),
            with_oids_clause=os.getenv("PGSTAGING_WITH_OIDS_CLAUSE", "true").lower() == "true",
        )


@dataclass(frozen=True)
class ProjectConfig:
    """
    Settings for one synchronization run.

    DB mode writes models to output_dir; CODE mode imports model_modules.
    """
    project_name: str
    connection_string: Optional[str] = None
    mode: SyncMode = SyncMode.CODE
    output_dir: Optional[str] = None
    model_modules: Tuple[str, ...] = ()
    introspection: IntrospectionConfig = field(default_factory=IntrospectionConfig)
    ddl: DDLDefaults = field(default_factory=DDLDefaults)

    @property
    def model_path(self) -> Optional[str]:
        """Directory that receives rendered model modules."""
        if not self.output_dir:
            return None
        return os.path.join(self.output_dir, "models")

    def validate(self) -> "ProjectConfig":
        """
        Check required settings for the configured mode.

        Raises:
            ConfigurationError: If a required setting is missing
        """
        if not self.project_name or not self.project_name.strip():
            raise ConfigurationError("project_name is required", setting="project_name")
        if self.mode.requires_output_dir() and not self.output_dir:
            raise ConfigurationError(
                "output_dir is required in db mode", setting="output_dir"
            )
        if self.mode is SyncMode.CODE and not self.model_modules:
            raise ConfigurationError(
                "model_modules is required in code mode", setting="model_modules"
            )
        return self

    @classmethod
    def from_env(cls) -> "ProjectConfig":
        """
        Create from environment variables.

        Not validated; callers override fields and then call validate().

        Raises:
            ConfigurationError: If PGSTAGING_MODE is not a known mode
        """
        mode = os.getenv("PGSTAGING_MODE", SyncMode.CODE.value)
        try:
            sync_mode = SyncMode(mode)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown mode {mode!r} in PGSTAGING_MODE", setting="mode"
            ) from e
        return cls(
            project_name=os.getenv("PGSTAGING_PROJECT", ""),
            connection_string=os.getenv("DATABASE_URL"),
            mode=sync_mode,
            output_dir=os.getenv("PGSTAGING_OUTPUT_DIR"),
            model_modules=_split_env_list(os.getenv("PGSTAGING_MODEL_MODULES")),
            introspection=IntrospectionConfig.from_env(),
            ddl=DDLDefaults.from_env(),
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DEFAULT_EXCLUDED_SCHEMAS",
    "IntrospectionConfig",
    "DDLDefaults",
    "ProjectConfig",
]
