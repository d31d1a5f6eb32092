# ============================================================================
# SCHEMA SYNCHRONIZER TESTS
# ============================================================================
# STATUS: Tests - DB-first and code-first orchestration
# PURPOSE: Verify planning, dry run, execution, view skipping and db-first
# CREATED: 18 OCT 2026
# ============================================================================
"""
Schema Synchronizer Tests

Covers:
1. Catalog snapshot from the introspector
2. Code-first: dry run vs execute (one execute per statement, one commit)
3. Code-first: up-to-date schema, modules without table models, database errors, views
4. DB-first: writer receives the snapshot
5. SyncResult serialization

Run with:
    pytest tests/test_schema_sync.py -v
"""

import sys
from typing import ClassVar
from unittest.mock import MagicMock, patch

import psycopg
import pytest
from pydantic import BaseModel, Field

from core.config.defaults import DDLDefaults, ProjectConfig
from core.contracts import SyncMode, TableType
from core.errors import ConfigurationError
from core.models.enum_type import EnumTypeInfo
from core.models.table_info import ConstraintInfo, FieldInfo, TableInfo
from core.schema.statements import StatementKind
from infrastructure.schema_sync import CatalogSnapshot, SchemaSynchronizer, SyncResult


# ============================================================================
# FIXTURES
# ============================================================================


class Customer(BaseModel):
    __sql_table__: ClassVar[str] = "customers"
    __sql_primary_key__: ClassVar[str] = "id"

    id: int
    email: str = Field(..., max_length=120)


class ActiveCustomer(BaseModel):
    __sql_table__: ClassVar[str] = "active_customers"

    id: int


def customers_in_db(*extra_fields) -> TableInfo:
    return TableInfo(
        schema_name="public",
        name="customers",
        fields=[
            FieldInfo(name="id", db_type="int4", host_type="int", not_null=True,
                      identity=True, length=32),
            *extra_fields,
        ],
        constraints=[ConstraintInfo(name="customers_pkey", field="id")],
    )


EMAIL = FieldInfo(name="email", db_type="varchar", host_type="str", not_null=True, length=120)


@pytest.fixture
def config():
    return ProjectConfig(
        project_name="shop",
        mode=SyncMode.CODE,
        model_modules=("shop.models",),
    )


@pytest.fixture
def conn():
    connection = MagicMock()
    connection.cursor.return_value.__enter__.return_value = MagicMock()
    return connection


@pytest.fixture
def repository(conn):
    repo = MagicMock()
    repo.get_connection.return_value.__enter__.return_value = conn
    return repo


@pytest.fixture
def catalog():
    """Patch the introspector; set catalog.tables / catalog.enums per test."""
    with patch("infrastructure.schema_sync.CatalogIntrospector") as introspector_cls:
        state = MagicMock(tables=[], enums=[])
        introspector_cls.return_value.introspect.side_effect = lambda: state.tables
        introspector_cls.return_value.get_enum_types.side_effect = lambda: state.enums
        state.introspector_cls = introspector_cls
        yield state


@pytest.fixture
def models():
    with patch("infrastructure.schema_sync.load_model_classes") as load:
        load.return_value = [Customer]
        yield load


def executed_statements(conn):
    cur = conn.cursor.return_value.__enter__.return_value
    return [c.args[0].as_string(None) for c in cur.execute.call_args_list]


# ============================================================================
# INTROSPECTION
# ============================================================================


class TestInitialize:
    def test_snapshot_uses_config_and_repository(self, config, repository, conn, catalog):
        catalog.tables = [customers_in_db()]
        catalog.enums = [EnumTypeInfo(oid=1, type_name="mood", namespace="public")]

        snapshot = SchemaSynchronizer(config, repository=repository).initialize()

        assert snapshot.tables == catalog.tables
        assert snapshot.enums == catalog.enums
        catalog.introspector_cls.assert_called_once_with(conn, config.introspection)
        repository.get_connection.assert_called_once()

    def test_borrowed_connection_is_not_reopened(self, config, repository, catalog):
        borrowed = MagicMock()
        SchemaSynchronizer(config, repository=repository).initialize(borrowed)

        repository.get_connection.assert_not_called()
        catalog.introspector_cls.assert_called_once_with(borrowed, config.introspection)

    def test_snapshot_lookup(self):
        snapshot = CatalogSnapshot(tables=[customers_in_db()])
        assert snapshot.get_table("public", "customers").name == "customers"
        assert snapshot.get_table("audit", "customers") is None


# ============================================================================
# CODE-FIRST
# ============================================================================


class TestCodeFirst:
    def test_dry_run_renders_without_executing(self, config, repository, conn, catalog, models):
        catalog.tables = [customers_in_db()]

        result = SchemaSynchronizer(config, repository=repository).code_first(dry_run=True)

        assert [s.kind for s in result.statements] == [
            StatementKind.ADD_COLUMN,
            StatementKind.SET_NULLABILITY,
        ]
        assert result.sql == (
            'ALTER TABLE "public"."customers" ADD COLUMN "email" varchar(120);\n'
            'ALTER TABLE "public"."customers" ALTER COLUMN "email" SET NOT NULL;'
        )
        assert not result.executed
        assert executed_statements(conn) == []
        conn.commit.assert_not_called()
        models.assert_called_once_with(("shop.models",))

    def test_execute_runs_each_statement_and_commits_once(
        self, config, repository, conn, catalog, models
    ):
        catalog.tables = []

        result = SchemaSynchronizer(config, repository=repository).code_first()

        assert result.executed
        assert executed_statements(conn) == [
            'CREATE TABLE "public"."customers" ("id" int4 PRIMARY KEY NOT NULL, '
            '"email" varchar(120) NOT NULL) WITH (OIDS=FALSE)'
        ]
        conn.commit.assert_called_once()
        # one connection for introspection and execution
        repository.get_connection.assert_called_once()

    def test_up_to_date_schema(self, config, repository, conn, catalog, models):
        catalog.tables = [customers_in_db(EMAIL)]

        result = SchemaSynchronizer(config, repository=repository).code_first()

        assert result.is_empty
        assert result.sql == ""
        assert not result.executed
        conn.commit.assert_not_called()

    def test_modules_without_table_models_fail_before_connecting(
        self, repository, tmp_path, monkeypatch
    ):
        (tmp_path / "plain_models_fixture.py").write_text(
            "from pydantic import BaseModel\n\n\nclass Helper(BaseModel):\n    value: int\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        config = ProjectConfig(
            project_name="shop", mode=SyncMode.CODE, model_modules=("plain_models_fixture",)
        )
        try:
            with pytest.raises(ConfigurationError):
                SchemaSynchronizer(config, repository=repository).code_first()
        finally:
            sys.modules.pop("plain_models_fixture", None)

        repository.get_connection.assert_not_called()

    def test_database_error_propagates_without_commit(
        self, config, repository, conn, catalog, models
    ):
        catalog.tables = [customers_in_db()]
        cur = conn.cursor.return_value.__enter__.return_value
        cur.execute.side_effect = [None, psycopg.errors.NotNullViolation("column contains nulls")]

        with pytest.raises(psycopg.errors.NotNullViolation):
            SchemaSynchronizer(config, repository=repository).code_first()

        assert cur.execute.call_count == 2
        conn.commit.assert_not_called()

    def test_views_are_skipped(self, config, repository, conn, catalog, models):
        models.return_value = [ActiveCustomer]
        catalog.tables = [TableInfo(
            schema_name="public",
            name="active_customers",
            table_type=TableType.VIEW,
            fields=[FieldInfo(name="id", db_type="int4", host_type="int")],
        )]

        result = SchemaSynchronizer(config, repository=repository).code_first()

        assert result.statements == []
        assert result.skipped_views == ["public.active_customers"]
        assert executed_statements(conn) == []

    def test_renderer_follows_ddl_settings(self, repository, conn, catalog, models):
        config = ProjectConfig(
            project_name="shop",
            model_modules=("shop.models",),
            ddl=DDLDefaults(with_oids_clause=False),
        )

        result = SchemaSynchronizer(config, repository=repository).code_first(dry_run=True)

        assert "OIDS" not in result.sql


class TestPlanAndExecute:
    def test_plan_with_snapshot_does_not_connect(self, config, repository):
        synchronizer = SchemaSynchronizer(config, repository=repository)

        plan = synchronizer.plan([Customer], CatalogSnapshot(tables=[customers_in_db(EMAIL)]))

        assert plan == []
        repository.get_connection.assert_not_called()

    def test_empty_plan_executes_nothing(self, config, repository):
        assert SchemaSynchronizer(config, repository=repository).execute([]) == 0
        repository.get_connection.assert_not_called()

    def test_execute_returns_count(self, config, repository, conn):
        synchronizer = SchemaSynchronizer(config, repository=repository)
        plan = synchronizer.plan([Customer], CatalogSnapshot(tables=[customers_in_db()]))

        assert synchronizer.execute(plan) == 2
        conn.commit.assert_called_once()


# ============================================================================
# DB-FIRST
# ============================================================================


class TestDbFirst:
    def test_writer_receives_snapshot(self, repository, catalog):
        config = ProjectConfig(project_name="shop", mode=SyncMode.DB, output_dir="out")
        catalog.tables = [customers_in_db(EMAIL)]
        catalog.enums = [EnumTypeInfo(oid=1, type_name="mood", namespace="public")]
        writer = MagicMock()
        writer.write_all.return_value = ["out/models/customers.py", "out/models/__init__.py"]

        paths = SchemaSynchronizer(config, repository=repository).db_first(writer)

        assert paths == writer.write_all.return_value
        writer.write_all.assert_called_once_with(catalog.tables, catalog.enums)

    def test_default_writer_targets_output_dir(self, repository, catalog, tmp_path):
        config = ProjectConfig(project_name="shop", mode=SyncMode.DB, output_dir=str(tmp_path))
        catalog.tables = [customers_in_db(EMAIL)]

        paths = SchemaSynchronizer(config, repository=repository).db_first()

        assert (tmp_path / "models" / "customers.py").exists()
        assert paths[-1] == str(tmp_path / "models" / "__init__.py")


# ============================================================================
# RESULT
# ============================================================================


class TestSyncResult:
    def test_to_dict(self, config, repository, catalog):
        synchronizer = SchemaSynchronizer(config, repository=repository)
        plan = synchronizer.plan([Customer], CatalogSnapshot())
        result = SyncResult(project="shop", timestamp="2026-10-18T00:00:00+00:00",
                            statements=plan, sql="...")

        data = result.to_dict()

        assert data["statements"] == [{"kind": "create_table", "table": "public.customers"}]
        assert data["summary"] == {"total_statements": 1, "tables_touched": 1}
        assert data["executed"] is False
