# ============================================================================
# HOST TYPE ALIASES
# ============================================================================
# STATUS: Core - Python types for PostgreSQL types without a builtin twin
# PURPOSE: Give every mapped PostgreSQL type a distinct Python type name
# CREATED: 18 OCT 2026
# EXPORTS: SmallInt, BigInt, Real, Char, Text, TimeTZ, Timestamp, ...
# DEPENDENCIES: typing, pydantic
# ============================================================================
"""
Host Type Aliases.

Python has one `int`, one `str` and one `datetime`, while PostgreSQL has
several widths and flavors of each. The aliases below are NewTypes, so they
validate exactly like their base type in pydantic models, but they carry a
distinct `__name__` that the type map resolves to a specific database type.

Usage:
    from core.schema.host_types import BigInt, Text

    class Event(BaseModel):
        __sql_table__: ClassVar[str] = "events"

        event_id: BigInt
        payload: Annotated[Optional[Text], NotNull()] = None
"""

from datetime import datetime, time
from typing import Any, Dict, NewType

from pydantic import IPvAnyAddress, IPvAnyNetwork

# Integers and floats
SmallInt = NewType("SmallInt", int)
BigInt = NewType("BigInt", int)
Real = NewType("Real", float)

# Character strings
Char = NewType("Char", str)
Text = NewType("Text", str)

# Temporal
TimeTZ = NewType("TimeTZ", time)
Timestamp = NewType("Timestamp", datetime)

# Documents and special strings
JsonDocument = NewType("JsonDocument", Dict[str, Any])
XmlDocument = NewType("XmlDocument", str)
BitString = NewType("BitString", str)
MacAddress = NewType("MacAddress", str)


class NotNull:
    """
    Required marker for columns whose host type is always Optional.

    Text, binary, document and array columns are annotated Optional in
    models even when the column is NOT NULL; the marker keeps the
    constraint:

        name: Annotated[Optional[str], NotNull()] = Field(default=None, max_length=50)
    """

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NotNull)

    def __hash__(self) -> int:
        return hash(NotNull)

    def __repr__(self) -> str:
        return "NotNull()"


def is_not_null_marker(value: object) -> bool:
    return value is NotNull or isinstance(value, NotNull)


__all__ = [
    "NotNull",
    "is_not_null_marker",
    "SmallInt",
    "BigInt",
    "Real",
    "Char",
    "Text",
    "TimeTZ",
    "Timestamp",
    "JsonDocument",
    "XmlDocument",
    "BitString",
    "MacAddress",
    "IPvAnyAddress",
    "IPvAnyNetwork",
]
