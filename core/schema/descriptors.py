# ============================================================================
# TABLE DESCRIPTORS
# ============================================================================
# STATUS: Core - Desired schema from annotated Python classes
# PURPOSE: Build TableInfo from pydantic models and dataclasses
# CREATED: 18 OCT 2026
# EXPORTS: TableDescriptor, PydanticTableDescriptor, DataclassTableDescriptor,
#          describe_models, load_model_classes
# DEPENDENCIES: pydantic
# ============================================================================
"""
Table Descriptors.

Python classes are the SOURCE OF TRUTH for the desired schema. A
TableDescriptor reads one class and produces a TableInfo; the diff engine
never touches the reflection details.

Model Metadata Convention (ClassVar attributes, both variants):
    - __sql_table__: Table name (required)
    - __sql_schema__: Schema name (default "public")
    - __sql_primary_key__: Primary key column - string or single-item list
    - __sql_column_types__: Dict of {field: database type} overrides

Field rules:
    - Optional[...] -> NULL, unless marked Annotated[..., NotNull()]
    - value types (int, Decimal, datetime, UUID, enums ...) -> NOT NULL
    - other types (str, bytes, dict, lists ...) -> NOT NULL when required
      (no default) or part of the primary key
    - max_length -> character length; max_digits/decimal_places -> numeric
    - List[T] -> array of T
    - Enum subclasses -> their __sql_type__, else "<schema>.<snake_case name>"

Usage:
    class User(BaseModel):
        __sql_table__: ClassVar[str] = "users"
        __sql_schema__: ClassVar[str] = "public"
        __sql_primary_key__: ClassVar[str] = "id"

        id: int
        name: str = Field(..., max_length=50)

    table = PydanticTableDescriptor(User).describe()
"""

import dataclasses
import importlib
import inspect
import typing
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import UnionType
from typing import (
    Annotated,
    Any,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
)

from pydantic import BaseModel

from core.errors import ConfigurationError, ModelModuleNotFoundError
from core.logging import ComponentType, get_logger
from core.models.table_info import FieldInfo, TableInfo
from core.schema.host_types import is_not_null_marker
from core.schema.type_map import (
    UNTYPED_HOST_TYPE,
    array_host_type,
    element_host_type,
    host_to_db,
    is_array_host_type,
    is_character_host_type,
    is_value_host_type,
    snake_case,
)

logger = get_logger(__name__, ComponentType.EXTRACTOR)

DEFAULT_SCHEMA = "public"

_UNION_ORIGINS: Tuple[Any, ...] = (Union, UnionType)


# ============================================================================
# METADATA
# ============================================================================

def get_model_metadata(model: type) -> Dict[str, Any]:
    """
    Extract SQL metadata from a table model class.

    Looks for __sql_* attributes (mangled or plain).

    Returns:
        Dict with table, schema, primary_key (list), column_types (dict)
    """
    def get_attr(name: str, default=None):
        mangled = f"_{model.__name__}__{name}"
        return getattr(model, mangled, getattr(model, f"__{name}", default))

    metadata = {
        "table": get_attr("sql_table__"),
        "schema": get_attr("sql_schema__") or DEFAULT_SCHEMA,
        "primary_key": get_attr("sql_primary_key__", []),
        "column_types": dict(get_attr("sql_column_types__", {}) or {}),
    }

    if isinstance(metadata["primary_key"], str):
        metadata["primary_key"] = [metadata["primary_key"]]
    else:
        metadata["primary_key"] = list(metadata["primary_key"] or [])

    return metadata


def is_table_model(obj: Any) -> bool:
    """Check whether a class is marked as a table model."""
    return inspect.isclass(obj) and bool(get_model_metadata(obj)["table"])


# ============================================================================
# ANNOTATION RESOLUTION
# ============================================================================

@dataclass(frozen=True)
class ResolvedType:
    """A field annotation reduced to what the schema needs."""
    host_type: str
    optional: bool = False
    enum_type: Optional[Type[Enum]] = None

    @property
    def is_array(self) -> bool:
        return is_array_host_type(self.host_type)

    @property
    def element(self) -> str:
        return element_host_type(self.host_type)


def _strip_annotated(annotation: Any) -> Any:
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def _type_name(annotation: Any) -> Tuple[str, Optional[Type[Enum]]]:
    """Host type name of a non-Optional, non-list annotation."""
    annotation = _strip_annotated(annotation)

    if annotation is Any or annotation is object:
        return UNTYPED_HOST_TYPE, None

    # NewType aliases keep their own name (BigInt, Text, ...)
    if hasattr(annotation, "__supertype__"):
        return annotation.__name__, None

    origin = get_origin(annotation)
    if origin in (dict, Dict):
        return "dict", None

    if inspect.isclass(annotation):
        if issubclass(annotation, Enum):
            return annotation.__name__, annotation
        return annotation.__name__, None

    return str(annotation), None


def resolve_annotation(annotation: Any) -> ResolvedType:
    """
    Reduce a field annotation to host type name, optionality and enum class.

    Examples:
        int                   -> ResolvedType("int")
        Optional[str]         -> ResolvedType("str", optional=True)
        List[int]             -> ResolvedType("List[int]")
        Annotated[str, ...]   -> ResolvedType("str")
    """
    annotation = _strip_annotated(annotation)
    optional = False

    if get_origin(annotation) in _UNION_ORIGINS:
        args = get_args(annotation)
        non_none = [a for a in args if a is not type(None)]
        optional = len(non_none) < len(args)
        if len(non_none) != 1:
            return ResolvedType(UNTYPED_HOST_TYPE, optional=optional)
        annotation = _strip_annotated(non_none[0])

    if get_origin(annotation) in (list, List, tuple, set, frozenset):
        args = get_args(annotation)
        element = args[0] if args else Any
        name, enum_type = _type_name(element)
        return ResolvedType(array_host_type(name), optional=optional, enum_type=enum_type)

    name, enum_type = _type_name(annotation)
    return ResolvedType(name, optional=optional, enum_type=enum_type)


def enum_db_type(enum_type: Type[Enum], schema_name: str) -> str:
    """Qualified database type of an Enum class."""
    explicit = getattr(enum_type, "__sql_type__", None)
    if explicit:
        return str(explicit)
    return f"{schema_name}.{snake_case(enum_type.__name__)}"


# ============================================================================
# COLUMN SPECS
# ============================================================================

@dataclass(frozen=True)
class ColumnSpec:
    """Reflection-neutral view of one persisted attribute."""
    name: str
    annotation: Any
    required: bool
    max_length: Optional[int] = None
    max_digits: Optional[int] = None
    decimal_places: Optional[int] = None
    description: Optional[str] = None
    not_null_marker: bool = False


def _constraint_value(metadata: Iterable[Any], name: str) -> Optional[int]:
    """First `name` attribute found on constraint metadata objects."""
    for item in metadata:
        value = getattr(item, name, None)
        if value is not None:
            return value
    return None


# ============================================================================
# DESCRIPTORS
# ============================================================================

class TableDescriptor(ABC):
    """
    Builds the desired TableInfo for one table model class.

    Subclasses adapt a reflection mechanism (pydantic, dataclasses)
    by implementing supports() and columns().
    """

    def __init__(self, model: type):
        self.model = model
        self.metadata = get_model_metadata(model)

    @classmethod
    @abstractmethod
    def supports(cls, model: type) -> bool:
        """Check whether this descriptor can read the given class."""

    @abstractmethod
    def columns(self) -> List[ColumnSpec]:
        """Persisted attributes, in declaration order."""

    # =========================================================================
    # TABLE
    # =========================================================================

    def describe(self) -> TableInfo:
        """
        Build the desired TableInfo.

        Raises:
            ConfigurationError: Missing table name, bad primary key, or an
                empty explicit database type
            TypeMappingError: A field type has no database type
        """
        table_name = self.metadata["table"]
        schema_name = self.metadata["schema"]
        if not table_name:
            raise ConfigurationError(
                f"Model {self.model.__name__} missing __sql_table__ attribute",
                setting="__sql_table__",
            )

        columns = self.columns()
        self._check_primary_key(columns)

        logger.debug(f"Describing {schema_name}.{table_name} from {self.model.__name__}")
        fields = [self.describe_column(spec, schema_name) for spec in columns]
        return TableInfo(schema_name=schema_name, name=table_name, fields=fields)

    def _check_primary_key(self, columns: Sequence[ColumnSpec]) -> None:
        primary_key = self.metadata["primary_key"]
        if len(primary_key) > 1:
            raise ConfigurationError(
                f"Model {self.model.__name__}: multi-column primary keys are not supported "
                f"({', '.join(primary_key)})",
                setting="__sql_primary_key__",
            )
        names = {spec.name for spec in columns}
        for column in primary_key:
            if column not in names:
                raise ConfigurationError(
                    f"Model {self.model.__name__}: primary key '{column}' is not a field",
                    setting="__sql_primary_key__",
                )

    # =========================================================================
    # COLUMNS
    # =========================================================================

    def describe_column(self, spec: ColumnSpec, schema_name: str) -> FieldInfo:
        """Build the desired FieldInfo for one attribute."""
        resolved = resolve_annotation(spec.annotation)
        identity = spec.name in self.metadata["primary_key"]

        host_type = resolved.element
        if resolved.enum_type is not None:
            host_type = enum_db_type(resolved.enum_type, schema_name)

        db_type = self._db_type(spec, host_type)
        length, scale = self._length_and_scale(spec, host_type)

        return FieldInfo(
            name=spec.name,
            db_type=db_type,
            host_type=host_type,
            not_null=self._not_null(spec, resolved, identity),
            is_array=resolved.is_array,
            length=length,
            numeric_scale=scale,
            identity=identity,
            comment=spec.description,
        )

    def _db_type(self, spec: ColumnSpec, host_type: str) -> str:
        column_types = self.metadata["column_types"]
        if spec.name in column_types:
            explicit = column_types[spec.name]
            if not explicit or not str(explicit).strip():
                raise ConfigurationError(
                    f"Explicit database type for {self.metadata['table']}.{spec.name} is empty; "
                    f"set a value in __sql_column_types__",
                    setting="__sql_column_types__",
                )
            return str(explicit).strip()
        return host_to_db(host_type, field=f"{self.metadata['table']}.{spec.name}")

    @staticmethod
    def _not_null(spec: ColumnSpec, resolved: ResolvedType, identity: bool) -> bool:
        if identity or spec.not_null_marker:
            return True
        if resolved.optional:
            return False
        if not resolved.is_array and is_value_host_type(resolved.element):
            return True
        if resolved.enum_type is not None and not resolved.is_array:
            return True
        return spec.required

    @staticmethod
    def _length_and_scale(spec: ColumnSpec, host_type: str) -> Tuple[int, int]:
        if is_character_host_type(host_type):
            return int(spec.max_length or 0), 0
        if host_type == "Decimal":
            return int(spec.max_digits or 0), int(spec.decimal_places or 0)
        return 0, 0


class PydanticTableDescriptor(TableDescriptor):
    """Reads pydantic BaseModel subclasses via model_fields."""

    @classmethod
    def supports(cls, model: type) -> bool:
        return inspect.isclass(model) and issubclass(model, BaseModel)

    def columns(self) -> List[ColumnSpec]:
        specs = []
        for name, field_info in self.model.model_fields.items():
            metadata = list(field_info.metadata or [])
            specs.append(ColumnSpec(
                name=name,
                annotation=field_info.annotation,
                required=field_info.is_required(),
                max_length=_constraint_value(metadata, "max_length"),
                max_digits=_constraint_value(metadata, "max_digits"),
                decimal_places=_constraint_value(metadata, "decimal_places"),
                description=field_info.description,
                not_null_marker=any(is_not_null_marker(m) for m in metadata),
            ))
        return specs


class DataclassTableDescriptor(TableDescriptor):
    """
    Reads standard-library dataclasses.

    Length constraints and the NOT NULL marker come from field metadata
    or Annotated extras:
        name: str = field(metadata={"max_length": 50})
        bio: Optional[str] = field(default=None, metadata={"not_null": True})
    """

    @classmethod
    def supports(cls, model: type) -> bool:
        return inspect.isclass(model) and dataclasses.is_dataclass(model)

    def columns(self) -> List[ColumnSpec]:
        hints = typing.get_type_hints(self.model, include_extras=True)
        specs = []
        for f in dataclasses.fields(self.model):
            required = f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
            annotation = hints.get(f.name, f.type)
            extras = get_args(annotation)[1:] if get_origin(annotation) is Annotated else ()
            sources = [f.metadata, *extras]
            specs.append(ColumnSpec(
                name=f.name,
                annotation=annotation,
                required=required,
                max_length=_mapping_or_attr(sources, "max_length"),
                max_digits=_mapping_or_attr(sources, "max_digits"),
                decimal_places=_mapping_or_attr(sources, "decimal_places"),
                description=f.metadata.get("description"),
                not_null_marker=bool(f.metadata.get("not_null")) or any(is_not_null_marker(m) for m in extras),
            ))
        return specs


def _mapping_or_attr(sources: Iterable[Any], name: str) -> Optional[int]:
    for source in sources:
        if isinstance(source, Mapping):
            value = source.get(name)
        else:
            value = getattr(source, name, None)
        if value is not None:
            return value
    return None


# ============================================================================
# REGISTRY / CONVENIENCE FUNCTIONS
# ============================================================================

DESCRIPTOR_TYPES: List[Type[TableDescriptor]] = [
    PydanticTableDescriptor,
    DataclassTableDescriptor,
]


def descriptor_for(model: type) -> TableDescriptor:
    """
    Pick the descriptor variant that can read a class.

    Raises:
        ConfigurationError: If no variant supports the class
    """
    for descriptor_type in DESCRIPTOR_TYPES:
        if descriptor_type.supports(model):
            return descriptor_type(model)
    raise ConfigurationError(
        f"{model.__name__} is neither a pydantic model nor a dataclass",
        setting="model_modules",
    )


def describe_models(classes: Iterable[type]) -> List[TableInfo]:
    """Describe every table model in `classes`, skipping other classes."""
    return [descriptor_for(cls).describe() for cls in classes if is_table_model(cls)]


def load_model_classes(module_names: Iterable[str]) -> List[type]:
    """
    Import modules and collect their table models.

    A module that defines TABLE_MODELS (the registry of a generated models
    package) contributes exactly that list. Otherwise a package contributes
    every table model its __init__ exposes, and a plain module contributes
    the classes defined in it, in declaration order. A class reached
    through several modules is collected once.

    Raises:
        ModelModuleNotFoundError: If a module cannot be imported
        ConfigurationError: If the modules hold no table models
    """
    module_names = list(module_names)
    classes: List[type] = []
    for module_name in module_names:
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            if e.name and module_name.startswith(e.name):
                raise ModelModuleNotFoundError(module_name) from e
            raise

        found = [cls for cls in _module_table_models(module) if cls not in classes]
        logger.info(f"Loaded {len(found)} table model(s) from {module_name}")
        classes.extend(found)

    if module_names and not classes:
        raise ConfigurationError(
            f"No table models found in {', '.join(module_names)}; "
            f"classes need a __sql_table__ attribute",
            setting="model_modules",
        )
    return classes


def _module_table_models(module) -> List[type]:
    registry = getattr(module, "TABLE_MODELS", None)
    if registry is not None:
        return [cls for cls in registry if is_table_model(cls)]

    is_package = hasattr(module, "__path__")
    return [
        obj for obj in vars(module).values()
        if is_table_model(obj) and (is_package or obj.__module__ == module.__name__)
    ]


__all__ = [
    "DEFAULT_SCHEMA",
    "ColumnSpec",
    "ResolvedType",
    "TableDescriptor",
    "PydanticTableDescriptor",
    "DataclassTableDescriptor",
    "DESCRIPTOR_TYPES",
    "get_model_metadata",
    "is_table_model",
    "resolve_annotation",
    "enum_db_type",
    "descriptor_for",
    "describe_models",
    "load_model_classes",
]
