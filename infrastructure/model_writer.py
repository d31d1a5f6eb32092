# ============================================================================
# MODEL WRITER
# ============================================================================
# STATUS: Infrastructure - Catalog snapshot to pydantic model modules
# PURPOSE: DB-first output: one module per relation plus enums and registry
# CREATED: 18 OCT 2026
# EXPORTS: ModelWriter, class_name_for, module_name_for
# DEPENDENCIES: none (generated code depends on pydantic)
# ============================================================================
"""
Model Writer.

Renders introspected tables as pydantic table models that the code-first
path reads back without changes:

    <output_dir>/models/
        __init__.py      registry (TABLE_MODELS) and re-exports
        _enums.py        one Enum class per database enum type
        <table>.py       one BaseModel per table or view

Generated conventions:
    - __sql_table__ / __sql_schema__ / __sql_primary_key__ class variables
    - Optional[...] for nullable columns and for host types that are always
      Optional; the latter carry Annotated[..., NotNull()] when NOT NULL
    - __sql_column_types__ for catalog types the host type cannot express
      (aliases such as money or citext, and unmapped types)
    - Enum classes carry __sql_type__ with their qualified database type

Usage:
    writer = ModelWriter("out", project_name="shop")
    paths = writer.write_all(tables, enums)
"""

import keyword
import os
import re
from typing import Dict, Iterable, List, Sequence, Set

from core.contracts import TableType
from core.logging import ComponentType, get_logger
from core.models.enum_type import EnumTypeInfo
from core.models.table_info import FieldInfo, TableInfo
from core.schema.type_map import (
    HOST_TO_DB,
    UNTYPED_HOST_TYPE,
    is_character_host_type,
    pascal_case,
)

logger = get_logger(__name__, ComponentType.WRITER)

ENUMS_MODULE = "_enums"
MODELS_DIR = "models"

# Import line per host type that is not a builtin
_HOST_IMPORTS: Dict[str, str] = {
    "date": "datetime",
    "time": "datetime",
    "datetime": "datetime",
    "timedelta": "datetime",
    "Decimal": "decimal",
    "UUID": "uuid",
    "IPvAnyAddress": "pydantic",
    "IPvAnyNetwork": "pydantic",
    "SmallInt": "core.schema.host_types",
    "BigInt": "core.schema.host_types",
    "Real": "core.schema.host_types",
    "Char": "core.schema.host_types",
    "Text": "core.schema.host_types",
    "TimeTZ": "core.schema.host_types",
    "Timestamp": "core.schema.host_types",
    "JsonDocument": "core.schema.host_types",
    "XmlDocument": "core.schema.host_types",
    "BitString": "core.schema.host_types",
    "MacAddress": "core.schema.host_types",
}

_IDENTIFIER = re.compile(r"\W+")


# ============================================================================
# NAMING
# ============================================================================

def class_name_for(table: TableInfo) -> str:
    """Model class name; non-public schemas prefix the table name."""
    if table.schema_name == "public":
        return pascal_case(table.name)
    return pascal_case(table.schema_name) + pascal_case(table.name)


def module_name_for(table: TableInfo) -> str:
    """Module (file) name for a table's model."""
    base = table.name if table.schema_name == "public" else f"{table.schema_name}_{table.name}"
    return _python_identifier(base.lower())


def _python_identifier(name: str, upper: bool = False) -> str:
    ident = _IDENTIFIER.sub("_", name).strip("_") or "value"
    if upper:
        ident = ident.upper()
    if ident[0].isdigit():
        ident = f"v_{ident}" if not upper else f"V_{ident}"
    if keyword.iskeyword(ident):
        ident = f"{ident}_"
    return ident


def _enum_member_names(labels: Sequence[str]) -> List[str]:
    names: List[str] = []
    for label in labels:
        name = _python_identifier(label, upper=True)
        candidate, n = name, 2
        while candidate in names:
            candidate = f"{name}_{n}"
            n += 1
        names.append(candidate)
    return names


# ============================================================================
# WRITER
# ============================================================================

class ModelWriter:
    """
    Render and write model modules for a catalog snapshot.

    Rendering methods return source text and never touch the filesystem;
    write_all() is the only method with side effects.
    """

    def __init__(
        self,
        output_dir: str,
        project_name: str = "",
    ):
        self.output_dir = output_dir
        self.project_name = project_name

    @property
    def model_path(self) -> str:
        return os.path.join(self.output_dir, MODELS_DIR)

    # =========================================================================
    # ENUMS
    # =========================================================================

    def render_enums(self, enums: Sequence[EnumTypeInfo]) -> str:
        """Source of the _enums module."""
        lines = [
            '"""Database enum types."""',
            "",
            "from enum import Enum",
        ]
        for enum in enums:
            lines.extend(["", "", f"class {enum.class_name}(str, Enum):"])
            lines.append(f"    __sql_type__ = {enum.qualified_name!r}")
            if enum.labels:
                lines.append("")
            for member, label in zip(_enum_member_names(enum.labels), enum.labels):
                lines.append(f"    {member} = {label!r}")
        lines.extend(["", "", "__all__ = ["])
        lines.extend(f"    {enum.class_name!r}," for enum in enums)
        lines.append("]")
        return "\n".join(lines) + "\n"

    # =========================================================================
    # TABLES
    # =========================================================================

    def render_table(self, table: TableInfo) -> str:
        """Source of one table module."""
        class_name = class_name_for(table)
        kind = "View" if table.table_type == TableType.VIEW else "Table"

        typing_names: Set[str] = {"ClassVar"}
        module_imports: Dict[str, Set[str]] = {}
        used_enums: Set[str] = set()
        needs_field = False
        needs_not_null = False

        body: List[str] = []
        for fi in table.fields:
            annotation, default, uses = self._field_parts(fi)
            typing_names.update(uses["typing"])
            for host in uses["hosts"]:
                if host in _HOST_IMPORTS:
                    module_imports.setdefault(_HOST_IMPORTS[host], set()).add(host)
            used_enums.update(uses["enums"])
            needs_field = needs_field or default.startswith("Field(")
            needs_not_null = needs_not_null or uses["not_null"]
            body.append(f"    {fi.name}: {annotation}{' = ' + default if default else ''}")

        overrides = {fi.name: fi.db_type for fi in table.fields if self._needs_type_override(fi)}
        if overrides:
            typing_names.add("Dict")
        if needs_not_null:
            typing_names.add("Annotated")
            module_imports.setdefault("core.schema.host_types", set()).add("NotNull")

        header = [
            '"""',
            f"{kind} {table.qualified_name}.",
            "",
            f"Generated from the database catalog{' for ' + self.project_name if self.project_name else ''}.",
            '"""',
            "",
        ]
        header.extend(self._import_lines(typing_names, module_imports, needs_field, used_enums))

        class_lines = ["", "", f"class {class_name}(BaseModel):"]
        class_lines.append(f"    __sql_table__: ClassVar[str] = {table.name!r}")
        class_lines.append(f"    __sql_schema__: ClassVar[str] = {table.schema_name!r}")

        identity = [fi.name for fi in table.identity_fields]
        if len(identity) == 1:
            class_lines.append(f"    __sql_primary_key__: ClassVar[str] = {identity[0]!r}")
        elif identity:
            class_lines.append(f"    # Composite primary key ({', '.join(identity)}) is not managed")

        if overrides:
            class_lines.append("    __sql_column_types__: ClassVar[Dict[str, str]] = {")
            class_lines.extend(f"        {name!r}: {db_type!r}," for name, db_type in overrides.items())
            class_lines.append("    }")

        class_lines.append("")
        class_lines.extend(body or ["    pass"])

        return "\n".join(header + class_lines) + "\n"

    def _field_parts(self, fi: FieldInfo):
        """Annotation text, default expression and the names they use."""
        uses = {"typing": set(), "hosts": set(), "enums": set(), "not_null": False}

        host = fi.host_type
        if fi.is_enum:
            uses["enums"].add(pascal_case(host))
        else:
            uses["hosts"].add(host)

        annotation = fi.host_annotation
        if "List[" in annotation:
            uses["typing"].add("List")
        optional = annotation.startswith("Optional[")
        if optional:
            uses["typing"].add("Optional")
        if optional and fi.not_null:
            annotation = f"Annotated[{annotation}, NotNull()]"
            uses["not_null"] = True

        kwargs: List[str] = []
        if is_character_host_type(host) and fi.length > 0:
            kwargs.append(f"max_length={fi.length}")
        elif host == "Decimal" and fi.length > 0:
            kwargs.append(f"max_digits={fi.length}")
            if fi.numeric_scale > 0:
                kwargs.append(f"decimal_places={fi.numeric_scale}")
        if fi.comment:
            kwargs.append(f"description={fi.comment!r}")

        if kwargs:
            first = "default=None" if optional else "..."
            default = f"Field({', '.join([first] + kwargs)})"
        else:
            default = "None" if optional else ""
        return annotation, default, uses

    @staticmethod
    def _needs_type_override(fi: FieldInfo) -> bool:
        """Catalog type differs from what the host type maps back to."""
        if fi.is_enum:
            return False
        if fi.host_type == UNTYPED_HOST_TYPE:
            return True
        return HOST_TO_DB.get(fi.host_type) != fi.db_type

    @staticmethod
    def _import_lines(
        typing_names: Set[str],
        module_imports: Dict[str, Set[str]],
        needs_field: bool,
        used_enums: Set[str],
    ) -> List[str]:
        stdlib = [m for m in ("datetime", "decimal", "uuid") if m in module_imports]
        lines = [f"from {m} import {', '.join(sorted(module_imports[m]))}" for m in stdlib]
        lines.append(f"from typing import {', '.join(sorted(typing_names))}")

        pydantic_names = {"BaseModel"} | module_imports.get("pydantic", set())
        if needs_field:
            pydantic_names.add("Field")
        lines.extend(["", f"from pydantic import {', '.join(sorted(pydantic_names))}"])

        if "core.schema.host_types" in module_imports:
            names = ", ".join(sorted(module_imports["core.schema.host_types"]))
            lines.extend(["", f"from core.schema.host_types import {names}"])
        if used_enums:
            lines.append(f"from .{ENUMS_MODULE} import {', '.join(sorted(used_enums))}")
        return lines

    # =========================================================================
    # REGISTRY
    # =========================================================================

    def render_registry(self, tables: Sequence[TableInfo], enums: Sequence[EnumTypeInfo]) -> str:
        """Source of the models package __init__."""
        lines = [
            '"""',
            f"Table models{' for ' + self.project_name if self.project_name else ''}.",
            "",
            "Generated from the database catalog; TABLE_MODELS lists every model.",
            '"""',
            "",
        ]
        names: List[str] = []
        if enums:
            enum_names = [e.class_name for e in enums]
            lines.append(f"from .{ENUMS_MODULE} import {', '.join(enum_names)}")
            names.extend(enum_names)
        model_names = []
        for table in tables:
            lines.append(f"from .{module_name_for(table)} import {class_name_for(table)}")
            model_names.append(class_name_for(table))
        names.extend(model_names)

        lines.extend(["", f"PROJECT = {self.project_name!r}", "", "TABLE_MODELS = ["])
        lines.extend(f"    {name}," for name in model_names)
        lines.extend(["]", "", "__all__ = ["])
        lines.extend(f"    {name!r}," for name in ["PROJECT", "TABLE_MODELS"] + names)
        lines.append("]")
        return "\n".join(lines) + "\n"

    # =========================================================================
    # FILES
    # =========================================================================

    def write_all(self, tables: Iterable[TableInfo], enums: Iterable[EnumTypeInfo] = ()) -> List[str]:
        """
        Write the models package.

        Existing files with the same names are overwritten.

        Returns:
            Paths written, registry last
        """
        tables = list(tables)
        enums = list(enums)
        os.makedirs(self.model_path, exist_ok=True)

        written: List[str] = []
        if enums:
            written.append(self._write(f"{ENUMS_MODULE}.py", self.render_enums(enums)))
        for table in tables:
            written.append(self._write(f"{module_name_for(table)}.py", self.render_table(table)))
            logger.info(f"Wrote model {class_name_for(table)} for {table.qualified_name}")
        written.append(self._write("__init__.py", self.render_registry(tables, enums)))

        logger.info(f"Wrote {len(tables)} model(s) and {len(enums)} enum(s) to {self.model_path}")
        return written

    def _write(self, filename: str, source: str) -> str:
        path = os.path.join(self.model_path, filename)
        with open(path, "w", encoding="utf-8") as f:
            f.write(source)
        return path


__all__ = [
    "ModelWriter",
    "class_name_for",
    "module_name_for",
]
