# ============================================================================
# SCHEMA SYNCHRONIZER
# ============================================================================
# STATUS: Infrastructure - DB-first and code-first orchestration
# PURPOSE: Introspect, describe, diff, render and execute in one run
# CREATED: 18 OCT 2026
# ============================================================================
"""
SchemaSynchronizer - keeps Python table models and PostgreSQL in step.

Two directions:

DB-first (catalog -> models):
1. Introspect tables, views and enum types
2. Write one pydantic model module per relation (ModelWriter)

Code-first (models -> catalog):
1. Import model modules and describe their table models
2. Introspect the existing tables
3. Reconcile desired against existing (SchemaDiff)
4. Render the plan (PostgresDDLRenderer)
5. Execute it, one statement at a time, committed once

Database errors propagate unchanged; nothing is retried.

Usage:
    from core.config import ProjectConfig
    from core.contracts import SyncMode
    from infrastructure.schema_sync import SchemaSynchronizer

    config = ProjectConfig(
        project_name="shop",
        mode=SyncMode.CODE,
        model_modules=("shop.models",),
    ).validate()

    result = SchemaSynchronizer(config).code_first(dry_run=True)
    print(result.sql)
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.config.defaults import ProjectConfig
from core.contracts import TableType
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.enum_type import EnumTypeInfo
from core.models.table_info import TableInfo
from core.schema.ddl_renderer import PostgresDDLRenderer
from core.schema.descriptors import describe_models, load_model_classes
from core.schema.diff import SchemaDiff
from core.schema.statements import Statement
from infrastructure.catalog import CatalogIntrospector
from infrastructure.model_writer import ModelWriter
from infrastructure.postgresql import PostgreSQLRepository

logger = get_logger(__name__, ComponentType.EXECUTOR)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class CatalogSnapshot:
    """Existing tables and enum types read in one introspection pass."""
    tables: List[TableInfo] = field(default_factory=list)
    enums: List[EnumTypeInfo] = field(default_factory=list)

    def get_table(self, schema_name: str, name: str) -> Optional[TableInfo]:
        for table in self.tables:
            if table.key == (schema_name, name):
                return table
        return None


@dataclass
class SyncResult:
    """Outcome of a code-first run."""
    project: str
    timestamp: str
    statements: List[Statement] = field(default_factory=list)
    sql: str = ""
    executed: bool = False
    skipped_views: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.statements

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "project": self.project,
            "timestamp": self.timestamp,
            "executed": self.executed,
            "statements": [
                {
                    "kind": s.kind.value,
                    "table": s.qualified_table,
                }
                for s in self.statements
            ],
            "sql": self.sql,
            "skipped_views": self.skipped_views,
            "summary": {
                "total_statements": len(self.statements),
                "tables_touched": len({s.qualified_table for s in self.statements}),
            },
        }


# ============================================================================
# SYNCHRONIZER
# ============================================================================

class SchemaSynchronizer:
    """
    Orchestrates one synchronization run for a ProjectConfig.

    A single connection is used per public call and closed afterwards.
    """

    def __init__(
        self,
        config: ProjectConfig,
        repository: Optional[PostgreSQLRepository] = None,
        renderer: Optional[PostgresDDLRenderer] = None,
    ):
        self.config = config
        self.repository = repository or PostgreSQLRepository(config.connection_string)
        self.renderer = renderer or PostgresDDLRenderer(config.ddl)
        self.diff = SchemaDiff(config.ddl)

    @contextmanager
    def _connection(self, conn=None):
        if conn is not None:
            yield conn
        else:
            with self.repository.get_connection() as new_conn:
                yield new_conn

    # ========================================================================
    # INTROSPECTION
    # ========================================================================

    def initialize(self, conn=None) -> CatalogSnapshot:
        """
        Read the existing schema.

        Args:
            conn: Optional open connection; one is opened otherwise

        Returns:
            CatalogSnapshot with tables (and views) and enum types
        """
        with self._connection(conn) as conn:
            introspector = CatalogIntrospector(conn, self.config.introspection)
            snapshot = CatalogSnapshot(
                tables=introspector.introspect(),
                enums=introspector.get_enum_types(),
            )

        logger.info(
            f"Catalog: {len(snapshot.tables)} relation(s), {len(snapshot.enums)} enum type(s)"
        )
        return snapshot

    # ========================================================================
    # DB-FIRST
    # ========================================================================

    def db_first(self, writer: Optional[ModelWriter] = None) -> List[str]:
        """
        Write model modules for every introspected relation.

        Args:
            writer: Optional ModelWriter; defaults to one on config.output_dir

        Returns:
            Paths written
        """
        writer = writer or ModelWriter(self.config.output_dir, self.config.project_name)

        with log_context(project=self.config.project_name, mode="db", operation="db_first"):
            snapshot = self.initialize()
            paths = writer.write_all(snapshot.tables, snapshot.enums)
            log_checkpoint("models_written", {"files": len(paths)})

        return paths

    # ========================================================================
    # CODE-FIRST
    # ========================================================================

    def plan(
        self,
        model_classes: Iterable[type],
        snapshot: Optional[CatalogSnapshot] = None,
    ) -> List[Statement]:
        """
        Plan the statements that bring the database in line with the models.

        Args:
            model_classes: Classes to describe (non-table classes are skipped)
            snapshot: Existing state; introspected when omitted

        Returns:
            Ordered statements, empty when nothing changes
        """
        desired = describe_models(model_classes)
        if snapshot is None:
            snapshot = self.initialize()
        plan, _ = self._plan(desired, snapshot)
        return plan

    def _plan(self, desired: Sequence[TableInfo], snapshot: CatalogSnapshot):
        plan: List[Statement] = []
        skipped_views: List[str] = []
        for table in desired:
            existing = snapshot.get_table(table.schema_name, table.name)
            if existing is not None and existing.table_type == TableType.VIEW:
                logger.warning(f"{table.qualified_name} is a view; not altered")
                skipped_views.append(table.qualified_name)
                continue
            with log_context(schema=table.schema_name, table=table.name, operation="plan"):
                plan.extend(self.diff.reconcile(table, existing))

        log_checkpoint("plan_ready", {"tables": len(desired), "statements": len(plan)})
        return plan, skipped_views

    def code_first(self, dry_run: bool = False) -> SyncResult:
        """
        Run the code-first direction for the configured model modules.

        Args:
            dry_run: If True, render the plan but don't execute

        Returns:
            SyncResult with statements, SQL text and the executed flag

        Raises:
            ModelModuleNotFoundError: A model module cannot be imported
            ConfigurationError: A model is missing metadata or has a bad type
            psycopg.Error: Introspection or execution failed
        """
        result = SyncResult(
            project=self.config.project_name,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

        with log_context(project=self.config.project_name, mode="code", operation="code_first"):
            logger.info("=" * 70)
            logger.info(f"CODE-FIRST SYNC - {self.config.project_name}")
            logger.info(f"   Modules: {', '.join(self.config.model_modules)}")
            logger.info(f"   Mode: {'DRY RUN' if dry_run else 'EXECUTE'}")
            logger.info("=" * 70)

            desired = describe_models(load_model_classes(self.config.model_modules))

            with self._connection() as conn:
                snapshot = self.initialize(conn)
                result.statements, result.skipped_views = self._plan(desired, snapshot)
                result.sql = self.renderer.render_text(result.statements)

                if result.is_empty:
                    logger.info("Schema is up to date")
                elif dry_run:
                    logger.info(f"[DRY RUN] Would execute {len(result.statements)} statement(s)")
                else:
                    self.execute(result.statements, conn)
                    result.executed = True

        return result

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def execute(self, statements: Sequence[Statement], conn=None) -> int:
        """
        Execute a plan and commit once.

        Args:
            statements: Plan from plan()/reconcile()
            conn: Optional open connection (committed here)

        Returns:
            Number of statements executed
        """
        composed = self.renderer.render_all(statements)
        if not composed:
            return 0

        with self._connection(conn) as conn:
            with conn.cursor() as cur:
                for i, stmt in enumerate(composed, 1):
                    logger.debug(f"[{i}/{len(composed)}] {statements[i - 1].kind.value}")
                    cur.execute(stmt)
            conn.commit()

        log_checkpoint("batch_executed", {"statements": len(composed)})
        logger.info(f"Executed {len(composed)} statement(s)")
        return len(composed)


__all__ = [
    "SchemaSynchronizer",
    "CatalogSnapshot",
    "SyncResult",
]
