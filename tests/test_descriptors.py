# ============================================================================
# TABLE DESCRIPTOR TESTS
# ============================================================================
# STATUS: Tests - Desired schema from Python table models
# PURPOSE: Verify pydantic and dataclass extraction, metadata and failures
# CREATED: 18 OCT 2026
# ============================================================================
"""
Table Descriptor Tests

Covers:
1. Pydantic models: nullability, lengths, arrays, enums, primary keys
2. Dataclass models: field metadata and Annotated extras
3. Explicit database type overrides
4. Configuration failures (missing table, empty override, bad keys)
5. Loading table models from modules

Run with:
    pytest tests/test_descriptors.py -v
"""

import sys
import textwrap
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, ClassVar, Dict, List, Optional

import pytest
from pydantic import BaseModel, Field

from core.errors import ConfigurationError, ModelModuleNotFoundError, TypeMappingError
from core.models.table_info import ConstraintInfo, FieldInfo, TableInfo
from core.schema.descriptors import (
    DataclassTableDescriptor,
    PydanticTableDescriptor,
    describe_models,
    descriptor_for,
    get_model_metadata,
    is_table_model,
    load_model_classes,
    resolve_annotation,
)
from core.schema.host_types import BigInt, JsonDocument, NotNull, Text
from infrastructure.model_writer import ModelWriter


# ============================================================================
# MODELS
# ============================================================================


class Mood(str, Enum):
    HAPPY = "happy"
    SAD = "sad"


class InvoiceStatus(str, Enum):
    __sql_type__ = "billing.invoice_status"

    OPEN = "open"
    PAID = "paid"


class User(BaseModel):
    __sql_table__: ClassVar[str] = "users"
    __sql_schema__: ClassVar[str] = "public"
    __sql_primary_key__: ClassVar[str] = "id"

    id: int
    name: str = Field(..., max_length=50)
    nickname: Optional[str] = None
    bio: Annotated[Optional[Text], NotNull()] = None
    balance: Decimal = Field(..., max_digits=10, decimal_places=2)
    created_at: datetime
    tags: List[str] = Field(default_factory=list)
    mood: Optional[Mood] = None
    visits: BigInt = 0


class Invoice(BaseModel):
    __sql_table__: ClassVar[str] = "invoices"
    __sql_schema__: ClassVar[str] = "billing"
    __sql_primary_key__: ClassVar[List[str]] = ["invoice_id"]
    __sql_column_types__: ClassVar[Dict[str, str]] = {"amount": "money"}

    invoice_id: BigInt
    status: InvoiceStatus
    amount: Optional[Decimal] = None


@dataclass
class Event:
    __sql_table__: ClassVar[str] = "events"
    __sql_schema__: ClassVar[str] = "audit"
    __sql_primary_key__: ClassVar[str] = "event_id"

    event_id: BigInt
    kind: str = field(metadata={"max_length": 20})
    payload: Optional[JsonDocument] = None
    note: Optional[str] = field(default=None, metadata={"not_null": True, "max_length": 200})


class NotATable(BaseModel):
    value: int


# ============================================================================
# METADATA
# ============================================================================


class TestModelMetadata:
    def test_reads_sql_attributes(self):
        meta = get_model_metadata(Invoice)
        assert meta["table"] == "invoices"
        assert meta["schema"] == "billing"
        assert meta["primary_key"] == ["invoice_id"]
        assert meta["column_types"] == {"amount": "money"}

    def test_string_primary_key_becomes_list(self):
        assert get_model_metadata(User)["primary_key"] == ["id"]

    def test_schema_defaults_to_public(self):
        class Plain(BaseModel):
            __sql_table__: ClassVar[str] = "plain"
            value: int

        assert get_model_metadata(Plain)["schema"] == "public"

    def test_is_table_model(self):
        assert is_table_model(User)
        assert is_table_model(Event)
        assert not is_table_model(NotATable)
        assert not is_table_model(User(id=1, name="a", balance=Decimal("1"), created_at=datetime.now()))


class TestResolveAnnotation:
    def test_plain(self):
        resolved = resolve_annotation(int)
        assert resolved.host_type == "int"
        assert not resolved.optional

    def test_optional_and_pipe_union(self):
        assert resolve_annotation(Optional[str]).optional
        assert resolve_annotation(str | None).optional

    def test_list_becomes_array(self):
        resolved = resolve_annotation(Optional[List[Text]])
        assert resolved.is_array
        assert resolved.element == "Text"
        assert resolved.optional

    def test_enum_class_is_kept(self):
        assert resolve_annotation(Mood).enum_type is Mood


# ============================================================================
# PYDANTIC DESCRIPTOR
# ============================================================================


class TestPydanticDescriptor:
    @pytest.fixture
    def table(self):
        return PydanticTableDescriptor(User).describe()

    def test_table_identity(self, table):
        assert table.schema_name == "public"
        assert table.name == "users"
        assert [f.name for f in table.fields] == [
            "id", "name", "nickname", "bio", "balance",
            "created_at", "tags", "mood", "visits",
        ]

    def test_primary_key(self, table):
        id_field = table.get_field("id")
        assert id_field.identity
        assert id_field.not_null
        assert id_field.db_type == "int4"
        assert [f.name for f in table.identity_fields] == ["id"]

    def test_required_string_is_not_null_with_length(self, table):
        name = table.get_field("name")
        assert name.db_type == "varchar"
        assert name.not_null
        assert name.length == 50

    def test_optional_string_is_nullable(self, table):
        nickname = table.get_field("nickname")
        assert not nickname.not_null
        assert nickname.length == 0

    def test_not_null_marker_overrides_optional(self, table):
        bio = table.get_field("bio")
        assert bio.db_type == "text"
        assert bio.not_null

    def test_decimal_precision_and_scale(self, table):
        balance = table.get_field("balance")
        assert balance.db_type == "numeric"
        assert (balance.length, balance.numeric_scale) == (10, 2)
        assert balance.not_null

    def test_value_types_are_not_null_even_with_default(self, table):
        assert table.get_field("created_at").db_type == "timestamptz"
        assert table.get_field("created_at").not_null
        visits = table.get_field("visits")
        assert visits.db_type == "int8"
        assert visits.not_null

    def test_list_is_array_and_nullable_without_required_marker(self, table):
        tags = table.get_field("tags")
        assert tags.is_array
        assert tags.db_type == "varchar"
        assert not tags.not_null

    def test_enum_named_after_schema_and_class(self, table):
        mood = table.get_field("mood")
        assert mood.db_type == "public.mood"
        assert mood.host_type == "public.mood"
        assert mood.is_enum
        assert not mood.not_null

    def test_enum_with_explicit_type_and_override(self):
        table = PydanticTableDescriptor(Invoice).describe()
        status = table.get_field("status")
        assert status.db_type == "billing.invoice_status"
        assert status.not_null
        assert table.get_field("amount").db_type == "money"
        assert table.get_field("invoice_id").identity


# ============================================================================
# DATACLASS DESCRIPTOR
# ============================================================================


class TestDataclassDescriptor:
    @pytest.fixture
    def table(self):
        return DataclassTableDescriptor(Event).describe()

    def test_table_identity(self, table):
        assert table.qualified_name == "audit.events"
        assert [f.name for f in table.fields] == ["event_id", "kind", "payload", "note"]

    def test_field_metadata(self, table):
        kind = table.get_field("kind")
        assert kind.db_type == "varchar"
        assert kind.length == 20
        assert kind.not_null

    def test_document_type(self, table):
        payload = table.get_field("payload")
        assert payload.db_type == "json"
        assert not payload.not_null

    def test_not_null_metadata(self, table):
        note = table.get_field("note")
        assert note.not_null
        assert note.length == 200

    def test_annotated_extras(self):
        @dataclass
        class Tagged:
            __sql_table__: ClassVar[str] = "tagged"

            label: Annotated[Optional[str], NotNull()] = None

        label = DataclassTableDescriptor(Tagged).describe().get_field("label")
        assert label.not_null


# ============================================================================
# FAILURES
# ============================================================================


class TestDescriptorFailures:
    def test_missing_table_name(self):
        with pytest.raises(ConfigurationError) as exc_info:
            PydanticTableDescriptor(NotATable).describe()
        assert exc_info.value.setting == "__sql_table__"

    def test_empty_explicit_type(self):
        class Broken(BaseModel):
            __sql_table__: ClassVar[str] = "broken"
            __sql_column_types__: ClassVar[Dict[str, str]] = {"payload": ""}

            payload: str

        with pytest.raises(ConfigurationError) as exc_info:
            descriptor_for(Broken).describe()
        assert exc_info.value.setting == "__sql_column_types__"

    def test_unmapped_host_type(self):
        @dataclass
        class Points:
            __sql_table__: ClassVar[str] = "points"

            value: complex

        with pytest.raises(TypeMappingError) as exc_info:
            descriptor_for(Points).describe()
        assert exc_info.value.field == "points.value"

    def test_unmapped_host_type_with_override(self):
        @dataclass
        class Points:
            __sql_table__: ClassVar[str] = "points"
            __sql_column_types__: ClassVar[Dict[str, str]] = {"value": "point"}

            value: complex

        assert descriptor_for(Points).describe().get_field("value").db_type == "point"

    def test_composite_primary_key_rejected(self):
        class Pair(BaseModel):
            __sql_table__: ClassVar[str] = "pairs"
            __sql_primary_key__: ClassVar[List[str]] = ["a", "b"]

            a: int
            b: int

        with pytest.raises(ConfigurationError, match="multi-column"):
            descriptor_for(Pair).describe()

    def test_primary_key_must_be_a_field(self):
        class Orphan(BaseModel):
            __sql_table__: ClassVar[str] = "orphans"
            __sql_primary_key__: ClassVar[str] = "missing"

            a: int

        with pytest.raises(ConfigurationError, match="not a field"):
            descriptor_for(Orphan).describe()

    def test_unsupported_class(self):
        class Legacy:
            __sql_table__ = "legacy"

        with pytest.raises(ConfigurationError):
            descriptor_for(Legacy)


# ============================================================================
# MODULE LOADING
# ============================================================================


class TestLoadModelClasses:
    def test_describe_models_skips_plain_classes(self):
        tables = describe_models([User, NotATable, Event])
        assert [t.qualified_name for t in tables] == ["public.users", "audit.events"]

    def test_missing_module(self):
        with pytest.raises(ModelModuleNotFoundError) as exc_info:
            load_model_classes(["pgstaging_missing_models"])
        assert exc_info.value.module_name == "pgstaging_missing_models"

    def test_collects_only_models_defined_in_module(self, tmp_path, monkeypatch):
        (tmp_path / "base_models_fixture.py").write_text(textwrap.dedent("""
            from typing import ClassVar
            from pydantic import BaseModel


            class Category(BaseModel):
                __sql_table__: ClassVar[str] = "categories"

                name: str
        """))
        (tmp_path / "shop_models_fixture.py").write_text(textwrap.dedent("""
            from typing import ClassVar
            from pydantic import BaseModel
            from base_models_fixture import Category


            class Product(BaseModel):
                __sql_table__: ClassVar[str] = "products"
                __sql_primary_key__: ClassVar[str] = "sku"

                sku: str


            class Helper(BaseModel):
                value: int
        """))
        monkeypatch.syspath_prepend(str(tmp_path))
        try:
            classes = load_model_classes(["shop_models_fixture"])
        finally:
            sys.modules.pop("shop_models_fixture", None)
            sys.modules.pop("base_models_fixture", None)

        assert [c.__name__ for c in classes] == ["Product"]

    def test_loads_generated_models_package(self, tmp_path, monkeypatch):
        users = TableInfo(
            schema_name="public",
            name="users",
            fields=[
                FieldInfo(name="id", db_type="int4", host_type="int",
                          not_null=True, identity=True, length=32),
                FieldInfo(name="name", db_type="varchar", host_type="str", length=50),
            ],
            constraints=[ConstraintInfo(name="users_pkey", field="id")],
        )
        ModelWriter(str(tmp_path), project_name="shop").write_all([users], [])
        monkeypatch.syspath_prepend(str(tmp_path))
        for name in [m for m in sys.modules if m == "models" or m.startswith("models.")]:
            monkeypatch.delitem(sys.modules, name)
        try:
            classes = load_model_classes(["models"])
        finally:
            for name in [m for m in sys.modules if m == "models" or m.startswith("models.")]:
                sys.modules.pop(name, None)

        assert [c.__name__ for c in classes] == ["Users"]
        assert [t.qualified_name for t in describe_models(classes)] == ["public.users"]

    def test_package_reexports_without_registry(self, tmp_path, monkeypatch):
        package = tmp_path / "catalog_pkg_fixture"
        package.mkdir()
        (package / "orders.py").write_text(textwrap.dedent("""
            from typing import ClassVar
            from pydantic import BaseModel


            class Order(BaseModel):
                __sql_table__: ClassVar[str] = "orders"
                __sql_primary_key__: ClassVar[str] = "order_id"

                order_id: int
        """))
        (package / "__init__.py").write_text(
            "from catalog_pkg_fixture.orders import Order\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        try:
            classes = load_model_classes(["catalog_pkg_fixture", "catalog_pkg_fixture.orders"])
        finally:
            sys.modules.pop("catalog_pkg_fixture.orders", None)
            sys.modules.pop("catalog_pkg_fixture", None)

        assert [c.__name__ for c in classes] == ["Order"]

    def test_modules_without_table_models_raise(self, tmp_path, monkeypatch):
        (tmp_path / "empty_models_fixture.py").write_text(textwrap.dedent("""
            from pydantic import BaseModel


            class Helper(BaseModel):
                value: int
        """))
        monkeypatch.syspath_prepend(str(tmp_path))
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                load_model_classes(["empty_models_fixture"])
        finally:
            sys.modules.pop("empty_models_fixture", None)

        assert exc_info.value.setting == "model_modules"
        assert "empty_models_fixture" in str(exc_info.value)
