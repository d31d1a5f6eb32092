# ============================================================================
# TYPE MAPPING TESTS
# ============================================================================
# STATUS: Tests - PostgreSQL <-> Python type translation
# PURPOSE: Verify mapping tables, aliases, length clauses and annotations
# CREATED: 18 OCT 2026
# ============================================================================
"""
Type Mapping Tests

Covers:
1. Round trip of every TYPE_TABLE pair
2. One-way aliases in both directions
3. Arrays and enum pass-through
4. Unknown types (degrade vs. raise)
5. Length/scale resolution and the length clause
6. Host annotations with nullability suppression

Run with:
    pytest tests/test_type_map.py -v
"""

import pytest

from core.errors import ConfigurationError, TypeMappingError
from core.schema.type_map import (
    DB_ALIASES,
    TYPE_TABLE,
    UNTYPED_HOST_TYPE,
    db_to_host,
    default_length,
    element_host_type,
    has_type_modifier,
    host_annotation,
    host_to_db,
    is_array_host_type,
    is_enum_type,
    is_numeric_host_type,
    length_clause,
    pascal_case,
    resolve_length,
    resolve_scale,
    snake_case,
    split_type_modifier,
    suppresses_not_null,
)


# ============================================================================
# MAPPING TABLE
# ============================================================================


class TestRoundTrip:
    @pytest.mark.parametrize("db_type,host_type", TYPE_TABLE)
    def test_pair_round_trips(self, db_type, host_type):
        assert db_to_host(db_type) == host_type
        assert host_to_db(db_to_host(db_type)) == db_type

    def test_table_is_bijective(self):
        db_types = [db for db, _ in TYPE_TABLE]
        host_types = [host for _, host in TYPE_TABLE]
        assert len(set(db_types)) == len(db_types)
        assert len(set(host_types)) == len(host_types)

    def test_distinct_widths_keep_distinct_names(self):
        assert db_to_host("int2") == "SmallInt"
        assert db_to_host("int4") == "int"
        assert db_to_host("int8") == "BigInt"
        assert db_to_host("timestamp") == "Timestamp"
        assert db_to_host("timestamptz") == "datetime"


class TestAliases:
    def test_db_aliases_map_one_way(self):
        assert db_to_host("citext") == "str"
        assert db_to_host("money") == "Decimal"
        assert host_to_db("str") == "varchar"
        assert host_to_db("Decimal") == "numeric"

    def test_aliases_never_shadow_table_entries(self):
        table_db_types = {db for db, _ in TYPE_TABLE}
        assert not table_db_types & set(DB_ALIASES)

    def test_host_aliases(self):
        assert host_to_db("Dict") == "jsonb"
        assert host_to_db("IPv4Address") == "inet"
        assert host_to_db("IPv6Network") == "cidr"
        assert host_to_db("datetime.datetime") == "timestamptz"


# ============================================================================
# ARRAYS, ENUMS, UNKNOWN TYPES
# ============================================================================


class TestArraysAndEnums:
    def test_array_host_type_maps_to_element(self):
        assert host_to_db("List[int]") == "int4"
        assert host_to_db("list[Text]") == "text"

    def test_array_shape_helpers(self):
        assert is_array_host_type("List[str]")
        assert not is_array_host_type("str")
        assert element_host_type("List[BigInt]") == "BigInt"
        assert element_host_type("BigInt") == "BigInt"

    def test_enum_names_pass_through(self):
        assert is_enum_type("public.mood")
        assert not is_enum_type("varchar")
        assert db_to_host("public.mood") == "public.mood"
        assert host_to_db("public.mood") == "public.mood"
        assert host_to_db("List[billing.status]") == "billing.status"


class TestUnknownTypes:
    def test_unknown_db_type_degrades_to_object(self):
        assert db_to_host("tsvector") == UNTYPED_HOST_TYPE

    def test_unknown_host_type_raises(self):
        with pytest.raises(TypeMappingError) as exc_info:
            host_to_db("complex", field="points.value")

        err = exc_info.value
        assert err.host_type == "complex"
        assert err.field == "points.value"
        assert "__sql_column_types__" in str(err)

    def test_mapping_error_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            host_to_db(UNTYPED_HOST_TYPE)


# ============================================================================
# LENGTH AND SCALE
# ============================================================================


class TestResolveLength:
    def test_character_length(self):
        assert resolve_length("varchar", character_length=50) == 50

    def test_numeric_precision(self):
        assert resolve_length("int4", character_length=None, numeric_precision=32) == 32
        assert resolve_length("numeric", numeric_precision=10) == 10

    def test_datetime_precision(self):
        assert resolve_length("timestamptz", datetime_precision=6) == 6

    def test_other_types_are_zero(self):
        assert resolve_length("uuid") == 0
        assert resolve_length("text", character_length=None) == 0

    def test_scale_only_for_numeric(self):
        assert resolve_scale("numeric", 2) == 2
        assert resolve_scale("numeric", None) == 0
        assert resolve_scale("int4", 0) == 0
        assert resolve_scale("float8", 5) == 0


class TestLengthClause:
    @pytest.mark.parametrize("host_type,length,scale,expected", [
        ("str", 50, 0, "(50)"),
        ("Text", 100, 0, "(100)"),
        ("str", 255, 0, ""),
        ("str", 0, 0, ""),
        ("Decimal", 10, 2, "(10,2)"),
        ("Decimal", 10, 0, ""),
        ("int", 32, 0, ""),
        ("datetime", 6, 0, ""),
    ])
    def test_clause(self, host_type, length, scale, expected):
        assert length_clause(host_type, length, scale) == expected

    def test_default_length(self):
        assert default_length("str") == 255
        assert default_length("Char", default_char_length=10) == 10
        assert default_length("int") == 0

    def test_scale_only_for_numeric_hosts(self):
        assert is_numeric_host_type("Decimal")
        assert not is_numeric_host_type("datetime")
        assert length_clause("datetime", 6, 2) == ""

    def test_custom_default_width(self):
        assert length_clause("str", 255, default_char_length=100) == "(255)"
        assert length_clause("str", 100, default_char_length=100) == ""

    @pytest.mark.parametrize("db_type,expected", [
        ("varchar(20)", ("varchar", 20, None)),
        ("numeric(12, 4)", ("numeric", 12, 4)),
        ("text", ("text", None, None)),
        ("timestamp(3) with time zone", ("timestamp(3) with time zone", None, None)),
    ])
    def test_split_type_modifier(self, db_type, expected):
        assert split_type_modifier(db_type) == expected

    def test_has_type_modifier(self):
        assert has_type_modifier("varchar(20)")
        assert not has_type_modifier("varchar")
        assert not has_type_modifier("public.mood")


# ============================================================================
# ANNOTATIONS AND NAMING
# ============================================================================


class TestHostAnnotation:
    def test_value_types_carry_nullability(self):
        assert host_annotation("int", True) == "int"
        assert host_annotation("int", False) == "Optional[int]"
        assert host_annotation("datetime", True) == "datetime"

    def test_suppressed_types_are_always_optional(self):
        for host_type in ("str", "bytes", "dict", "JsonDocument", "IPvAnyAddress",
                          "XmlDocument", "BitString", UNTYPED_HOST_TYPE):
            assert host_annotation(host_type, True) == f"Optional[{host_type}]"

    def test_arrays_are_always_optional(self):
        assert suppresses_not_null("int", is_array=True)
        assert host_annotation("int", True, is_array=True) == "Optional[List[int]]"

    def test_enum_annotation_uses_class_name(self):
        assert host_annotation("public.order_status", True) == "OrderStatus"
        assert host_annotation("public.order_status", False) == "Optional[OrderStatus]"


class TestNaming:
    def test_snake_case(self):
        assert snake_case("OrderStatus") == "order_status"
        assert snake_case("Mood") == "mood"

    def test_pascal_case(self):
        assert pascal_case("order_status") == "OrderStatus"
        assert pascal_case("public.order_status") == "OrderStatus"
        assert pascal_case("user-accounts") == "UserAccounts"
