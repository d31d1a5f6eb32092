# ============================================================================
# TYPE MAPPING
# ============================================================================
# STATUS: Core - PostgreSQL <-> Python type translation
# PURPOSE: Map catalog type names to host type names and back
# CREATED: 18 OCT 2026
# EXPORTS: TYPE_TABLE, db_to_host, host_to_db, length_clause, host_annotation
# DEPENDENCIES: none
# ============================================================================
"""
Type Mapping.

Pure, stateless translation between PostgreSQL type names (as stored in
pg_type.typname) and Python host type names (as written in annotations).

Rules:
    - TYPE_TABLE pairs round-trip: host_to_db(db_to_host(t)) == t
    - Aliases map one way only (several catalog names share one host type)
    - Arrays are element type + array flag; host arrays read "List[<elem>]"
    - Enum types pass through by their namespace-qualified name
    - Unknown database types degrade to "object"
    - Unknown host types raise TypeMappingError

Usage:
    from core.schema.type_map import db_to_host, host_to_db

    db_to_host("int8")       # "BigInt"
    host_to_db("str")        # "varchar"
    host_to_db("List[int]")  # "int4"
"""

import logging
import re
from typing import Dict, FrozenSet, Optional, Tuple

from core.errors import TypeMappingError

logger = logging.getLogger(__name__)


# ============================================================================
# MAPPING TABLES
# ============================================================================

UNTYPED_HOST_TYPE = "object"
DEFAULT_CHAR_LENGTH = 255

# (database type, host type) - bijective
TYPE_TABLE: Tuple[Tuple[str, str], ...] = (
    # Integers
    ("int2", "SmallInt"),
    ("int4", "int"),
    ("int8", "BigInt"),
    # Floating point and decimal
    ("float4", "Real"),
    ("float8", "float"),
    ("numeric", "Decimal"),
    # Boolean
    ("bool", "bool"),
    # Character
    ("bpchar", "Char"),
    ("varchar", "str"),
    ("text", "Text"),
    # Temporal
    ("date", "date"),
    ("time", "time"),
    ("timetz", "TimeTZ"),
    ("timestamp", "Timestamp"),
    ("timestamptz", "datetime"),
    ("interval", "timedelta"),
    # Identifiers and blobs
    ("uuid", "UUID"),
    ("bytea", "bytes"),
    # Documents
    ("json", "JsonDocument"),
    ("jsonb", "dict"),
    ("xml", "XmlDocument"),
    # Network
    ("inet", "IPvAnyAddress"),
    ("cidr", "IPvAnyNetwork"),
    ("macaddr", "MacAddress"),
    # Bit strings
    ("bit", "BitString"),
)

# Catalog names that share a host type with a TYPE_TABLE entry
DB_ALIASES: Dict[str, str] = {
    "char": "str",
    "name": "str",
    "citext": "str",
    "money": "Decimal",
    "varbit": "BitString",
    "macaddr8": "MacAddress",
    "oid": "BigInt",
}

# Host spellings that resolve to a TYPE_TABLE database type
HOST_ALIASES: Dict[str, str] = {
    "Dict": "jsonb",
    "datetime.datetime": "timestamptz",
    "IPv4Address": "inet",
    "IPv6Address": "inet",
    "IPv4Network": "cidr",
    "IPv6Network": "cidr",
}

DB_TO_HOST: Dict[str, str] = {**DB_ALIASES, **dict(TYPE_TABLE)}
HOST_TO_DB: Dict[str, str] = {**HOST_ALIASES, **{host: db for db, host in TYPE_TABLE}}


# ============================================================================
# TYPE FAMILIES
# ============================================================================

CHARACTER_HOST_TYPES: FrozenSet[str] = frozenset({"str", "Text", "Char"})

NUMERIC_HOST_TYPES: FrozenSet[str] = frozenset({
    "int", "SmallInt", "BigInt", "float", "Real", "Decimal",
})

# Host types that hold a value even when the column is NOT NULL
VALUE_HOST_TYPES: FrozenSet[str] = frozenset({
    "int", "SmallInt", "BigInt",
    "float", "Real", "Decimal",
    "bool",
    "date", "time", "TimeTZ", "Timestamp", "datetime", "timedelta",
    "UUID",
})

# Host types always rendered Optional, regardless of column nullability
NULLABLE_HOST_TYPES: FrozenSet[str] = frozenset({
    "bytes",
    "dict", "JsonDocument",
    "IPvAnyAddress", "IPvAnyNetwork", "MacAddress",
    "XmlDocument",
    "BitString",
    UNTYPED_HOST_TYPE,
}) | CHARACTER_HOST_TYPES

NUMERIC_PRECISION_DB_TYPES: FrozenSet[str] = frozenset({
    "numeric", "int2", "int4", "int8", "float4", "float8",
})
DATETIME_PRECISION_DB_TYPES: FrozenSet[str] = frozenset({
    "timestamp", "timestamptz", "interval", "time", "date", "timetz",
})
SCALED_DB_TYPES: FrozenSet[str] = frozenset({"numeric"})

_ARRAY_PATTERN = re.compile(r"^(?:List|list)\[(.+)\]$")


# ============================================================================
# DIRECTIONAL MAPPING
# ============================================================================

def is_enum_type(type_name: str) -> bool:
    """Enum types are the only namespace-qualified type names."""
    return "." in type_name


def db_to_host(db_type: str) -> str:
    """
    Map a catalog type name to a host type name.

    Args:
        db_type: pg_type.typname, or "<namespace>.<typname>" for enums

    Returns:
        Host type name; "object" when the type is not mapped
    """
    if is_enum_type(db_type):
        return db_type

    host_type = DB_TO_HOST.get(db_type)
    if host_type is None:
        logger.debug(f"No host type for database type '{db_type}', using {UNTYPED_HOST_TYPE}")
        return UNTYPED_HOST_TYPE
    return host_type


def host_to_db(host_type: str, field: Optional[str] = None) -> str:
    """
    Map a host type name to a catalog type name.

    Array shapes map to their element's type (the array flag is separate).

    Args:
        host_type: Host type name, e.g. "str", "BigInt", "List[int]"
        field: Optional field name for the error message

    Returns:
        Database type name

    Raises:
        TypeMappingError: If the host type has no database type
    """
    if is_array_host_type(host_type):
        host_type = element_host_type(host_type)

    if is_enum_type(host_type):
        return host_type

    db_type = HOST_TO_DB.get(host_type)
    if db_type is None:
        raise TypeMappingError(host_type, field=field)
    return db_type


# ============================================================================
# ARRAYS
# ============================================================================

def array_host_type(element: str) -> str:
    """Host type name of an array of `element`."""
    return f"List[{element}]"


def is_array_host_type(host_type: str) -> bool:
    return _ARRAY_PATTERN.match(host_type) is not None


def element_host_type(host_type: str) -> str:
    """Element of an array host type; non-arrays are returned unchanged."""
    match = _ARRAY_PATTERN.match(host_type)
    return match.group(1) if match else host_type


# ============================================================================
# FAMILIES AND FORMATTING
# ============================================================================

def is_character_host_type(host_type: str) -> bool:
    return host_type in CHARACTER_HOST_TYPES


def is_numeric_host_type(host_type: str) -> bool:
    return host_type in NUMERIC_HOST_TYPES


def default_length(host_type: str, default_char_length: int = DEFAULT_CHAR_LENGTH) -> int:
    """Width a column of this host type has when no length is declared."""
    if is_character_host_type(host_type):
        return default_char_length
    return 0


def is_value_host_type(host_type: str) -> bool:
    """Value types are NOT NULL unless wrapped in Optional."""
    return host_type in VALUE_HOST_TYPES or is_enum_type(host_type)


def suppresses_not_null(host_type: str, is_array: bool = False) -> bool:
    """
    Check whether a host type is always rendered Optional.

    These types have no natural non-null sentinel, so generated models
    never declare them as required even for NOT NULL columns.
    """
    return is_array or host_type in NULLABLE_HOST_TYPES


def resolve_length(
    db_type: str,
    character_length: Optional[int] = None,
    numeric_precision: Optional[int] = None,
    datetime_precision: Optional[int] = None,
) -> int:
    """
    Pick the length/precision value that applies to a type family.

    Numeric types report numeric precision, temporal types report datetime
    precision, everything else reports its character length (or 0).
    """
    if db_type in NUMERIC_PRECISION_DB_TYPES:
        value = numeric_precision
    elif db_type in DATETIME_PRECISION_DB_TYPES:
        value = datetime_precision
    else:
        value = character_length
    return int(value or 0)


def resolve_scale(db_type: str, numeric_scale: Optional[int] = None) -> int:
    """Numeric scale; only the decimal family carries one."""
    if db_type in SCALED_DB_TYPES:
        return int(numeric_scale or 0)
    return 0


def length_clause(
    host_type: str,
    length: int,
    scale: int = 0,
    default_char_length: int = DEFAULT_CHAR_LENGTH,
) -> str:
    """
    Format the "(length[,scale])" suffix of a column type.

    Character types show (length) when it differs from the default width.
    Other types show (length,scale) only when a scale is declared.

    Returns:
        The clause, or "" when the type needs none
    """
    if length <= 0:
        return ""
    if is_character_host_type(host_type):
        if length != default_length(host_type, default_char_length):
            return f"({length})"
        return ""
    if scale > 0 and is_numeric_host_type(host_type):
        return f"({length},{scale})"
    return ""


TYPE_MODIFIER_PATTERN = re.compile(r"^\s*([^()]+?)\s*\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\)\s*$")


def has_type_modifier(db_type: str) -> bool:
    """True for explicit types that already carry "(...)", e.g. varchar(20)."""
    return "(" in db_type


def split_type_modifier(db_type: str) -> Tuple[str, Optional[int], Optional[int]]:
    """
    Split an explicit "name(length[,scale])" type into its parts.

    Examples:
        split_type_modifier("varchar(20)")   -> ("varchar", 20, None)
        split_type_modifier("numeric(12,4)") -> ("numeric", 12, 4)
        split_type_modifier("text")          -> ("text", None, None)
    """
    match = TYPE_MODIFIER_PATTERN.match(db_type)
    if not match:
        return db_type, None, None
    name, length, scale = match.groups()
    return name, int(length), int(scale) if scale is not None else None


def host_annotation(host_type: str, not_null: bool, is_array: bool = False) -> str:
    """
    Python annotation text for a column, as a model renderer writes it.

    Examples:
        host_annotation("int", True)          # "int"
        host_annotation("int", False)         # "Optional[int]"
        host_annotation("str", True)          # "Optional[str]"
        host_annotation("int", True, True)    # "Optional[List[int]]"
        host_annotation("public.mood", True)  # "Mood"
    """
    annotation = pascal_case(host_type) if is_enum_type(host_type) else host_type
    if is_array:
        annotation = array_host_type(annotation)
    if suppresses_not_null(host_type, is_array) or not not_null:
        annotation = f"Optional[{annotation}]"
    return annotation


# ============================================================================
# NAMING
# ============================================================================

def snake_case(name: str) -> str:
    """CamelCase -> snake_case."""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def pascal_case(name: str) -> str:
    """snake_case (optionally schema-qualified) -> PascalCase."""
    name = name.rsplit(".", 1)[-1]
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[_\W]+", name) if part)


__all__ = [
    "UNTYPED_HOST_TYPE",
    "DEFAULT_CHAR_LENGTH",
    "TYPE_TABLE",
    "DB_ALIASES",
    "HOST_ALIASES",
    "is_enum_type",
    "db_to_host",
    "host_to_db",
    "array_host_type",
    "is_array_host_type",
    "element_host_type",
    "is_character_host_type",
    "is_numeric_host_type",
    "default_length",
    "is_value_host_type",
    "suppresses_not_null",
    "resolve_length",
    "resolve_scale",
    "length_clause",
    "has_type_modifier",
    "split_type_modifier",
    "host_annotation",
    "snake_case",
    "pascal_case",
]
