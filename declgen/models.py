"""Read-only metadata graph consumed by the declaration renderers.

Entities are identity-hashed (``eq=False``) so renderers can keep sets of
members, for example the accessor methods already consumed by a property.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .constants import (
    COMPILER_GENERATED_ATTRIBUTE,
    DEFAULT_MEMBER_ATTRIBUTE,
    EXTENSION_ATTRIBUTE,
    FIXED_BUFFER_ATTRIBUTE,
)


class MemberAccess(IntEnum):
    """Member access levels, ordered from most to least restrictive."""

    COMPILER_CONTROLLED = 0
    PRIVATE = 1
    FAMILY_AND_ASSEMBLY = 2
    ASSEMBLY = 3
    FAMILY = 4
    FAMILY_OR_ASSEMBLY = 5
    PUBLIC = 6


class MarkerRole(Enum):
    """Structural roles an attribute can play for the renderers."""

    NONE = "none"
    COMPILER_GENERATED = "compiler_generated"
    FIXED_BUFFER = "fixed_buffer"
    EXTENSION = "extension"
    DEFAULT_MEMBER = "default_member"

    @classmethod
    def for_attribute_type(cls, full_name: str) -> "MarkerRole":
        return _MARKER_ROLES.get(full_name, cls.NONE)


_MARKER_ROLES: Dict[str, MarkerRole] = {
    COMPILER_GENERATED_ATTRIBUTE: MarkerRole.COMPILER_GENERATED,
    FIXED_BUFFER_ATTRIBUTE: MarkerRole.FIXED_BUFFER,
    EXTENSION_ATTRIBUTE: MarkerRole.EXTENSION,
    DEFAULT_MEMBER_ATTRIBUTE: MarkerRole.DEFAULT_MEMBER,
}


@dataclass(eq=False)
class CustomAttributeData:
    """An attribute instance attached to an assembly, type or member."""

    attribute_type: "TypeInfo"
    arguments: List[Any] = field(default_factory=list)
    named_arguments: Dict[str, Any] = field(default_factory=dict)
    virtual_address: int = 0
    role: MarkerRole = field(init=False)

    def __post_init__(self) -> None:
        # Resolved once here so render sites never compare type names.
        self.role = MarkerRole.for_attribute_type(self.attribute_type.full_name)


class _AttributeOwner:
    custom_attributes: List[CustomAttributeData]

    def get_custom_attributes(self, role: MarkerRole) -> List[CustomAttributeData]:
        return [attribute for attribute in self.custom_attributes if attribute.role is role]

    def has_marker(self, role: MarkerRole) -> bool:
        return any(attribute.role is role for attribute in self.custom_attributes)


@dataclass(eq=False)
class GenericParameter:
    """Generic type or method parameter and its constraint set."""

    name: str
    position: int = 0
    constraints: List["TypeInfo"] = field(default_factory=list)
    reference_type_constraint: bool = False
    value_type_constraint: bool = False
    default_constructor_constraint: bool = False
    variance: Optional[str] = None
    declaring_type: Optional["TypeInfo"] = field(default=None, repr=False)
    declaring_method: Optional["MethodInfo"] = field(default=None, repr=False)

    @property
    def has_constraints(self) -> bool:
        return bool(
            self.constraints
            or self.reference_type_constraint
            or self.value_type_constraint
            or self.default_constructor_constraint
        )


@dataclass(eq=False)
class ParameterInfo(_AttributeOwner):
    """Declared parameter of a method, constructor or accessor."""

    name: str
    parameter_type: "TypeInfo"
    position: int = 0
    is_out: bool = False
    is_in: bool = False
    is_params: bool = False
    has_default_value: bool = False
    default_value: Any = None
    custom_attributes: List[CustomAttributeData] = field(default_factory=list)
    member: Optional["MethodInfo"] = field(default=None, repr=False)


@dataclass(eq=False)
class MethodInfo(_AttributeOwner):
    """Method, constructor or accessor.

    ``virtual_address`` of zero means no native code was emitted or resolved.
    """

    name: str
    return_type: "TypeInfo"
    parameters: List[ParameterInfo] = field(default_factory=list)
    access: MemberAccess = MemberAccess.PRIVATE
    is_static: bool = False
    is_abstract: bool = False
    is_virtual: bool = False
    is_final: bool = False
    is_new_slot: bool = False
    is_pinvoke: bool = False
    returns_by_ref: bool = False
    requires_unsafe_context: bool = False
    virtual_address: int = 0
    generic_parameters: List[GenericParameter] = field(default_factory=list)
    custom_attributes: List[CustomAttributeData] = field(default_factory=list)
    declaring_type: Optional["TypeInfo"] = field(default=None, repr=False)

    @property
    def is_extension(self) -> bool:
        return self.has_marker(MarkerRole.EXTENSION)


@dataclass(eq=False)
class FieldInfo(_AttributeOwner):
    """Declared field. ``offset`` is meaningless for constants."""

    name: str
    field_type: "TypeInfo"
    offset: int = 0
    access: MemberAccess = MemberAccess.PRIVATE
    is_static: bool = False
    is_literal: bool = False
    is_init_only: bool = False
    is_not_serialized: bool = False
    has_default_value: bool = False
    default_value: Any = None
    custom_attributes: List[CustomAttributeData] = field(default_factory=list)
    declaring_type: Optional["TypeInfo"] = field(default=None, repr=False)

    @property
    def requires_unsafe_context(self) -> bool:
        return self.field_type.is_pointer


@dataclass(eq=False)
class PropertyInfo(_AttributeOwner):
    """Declared property or indexer; either accessor may be absent."""

    name: str
    property_type: "TypeInfo"
    get_method: Optional[MethodInfo] = None
    set_method: Optional[MethodInfo] = None
    custom_attributes: List[CustomAttributeData] = field(default_factory=list)
    declaring_type: Optional["TypeInfo"] = field(default=None, repr=False)

    @property
    def index_parameters(self) -> List[ParameterInfo]:
        if self.get_method is not None:
            return list(self.get_method.parameters)
        if self.set_method is not None:
            return list(self.set_method.parameters[:-1])
        return []


@dataclass(eq=False)
class EventInfo(_AttributeOwner):
    """Declared event and its optional accessors."""

    name: str
    event_handler_type: "TypeInfo"
    add_method: Optional[MethodInfo] = None
    remove_method: Optional[MethodInfo] = None
    raise_method: Optional[MethodInfo] = None
    custom_attributes: List[CustomAttributeData] = field(default_factory=list)
    declaring_type: Optional["TypeInfo"] = field(default=None, repr=False)

    def accessors(self) -> List[Tuple[str, MethodInfo]]:
        pairs = (("add", self.add_method), ("remove", self.remove_method), ("raise", self.raise_method))
        return [(keyword, method) for keyword, method in pairs if method is not None]


@dataclass(eq=False, repr=False)
class TypeInfo(_AttributeOwner):
    """A type definition or a reference to one.

    References to constructed types (arrays, pointers, by-ref, generic
    instances, generic parameters) reuse this class with the matching
    ``element_type``/``generic_type_arguments``/``generic_parameter`` set.
    """

    name: str
    namespace: str = ""
    index: int = -1
    access: MemberAccess = MemberAccess.PUBLIC
    is_class: bool = True
    is_interface: bool = False
    is_enum: bool = False
    is_value_type: bool = False
    is_abstract: bool = False
    is_sealed: bool = False
    is_import: bool = False
    is_serializable: bool = False
    base_type: Optional["TypeInfo"] = None
    implemented_interfaces: List["TypeInfo"] = field(default_factory=list)
    enum_underlying_type: Optional["TypeInfo"] = None
    assembly: Optional["Assembly"] = None
    declaring_type: Optional["TypeInfo"] = field(default=None, repr=False)
    fields: List[FieldInfo] = field(default_factory=list)
    properties: List[PropertyInfo] = field(default_factory=list)
    events: List[EventInfo] = field(default_factory=list)
    nested_types: List["TypeInfo"] = field(default_factory=list)
    constructors: List[MethodInfo] = field(default_factory=list)
    methods: List[MethodInfo] = field(default_factory=list)
    generic_parameters: List[GenericParameter] = field(default_factory=list)
    custom_attributes: List[CustomAttributeData] = field(default_factory=list)
    element_type: Optional["TypeInfo"] = None
    array_rank: int = 0
    is_pointer: bool = False
    is_by_ref: bool = False
    generic_type_definition: Optional["TypeInfo"] = None
    generic_type_arguments: List["TypeInfo"] = field(default_factory=list)
    generic_parameter: Optional[GenericParameter] = None

    @property
    def full_name(self) -> str:
        if self.generic_type_definition is not None:
            return self.generic_type_definition.full_name
        if self.declaring_type is not None:
            return f"{self.declaring_type.full_name}+{self.name}"
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name

    @property
    def is_nested(self) -> bool:
        return self.declaring_type is not None

    @property
    def is_generic_parameter(self) -> bool:
        return self.generic_parameter is not None

    def get_field(self, name: str) -> Optional[FieldInfo]:
        return next((candidate for candidate in self.fields if candidate.name == name), None)

    def get_method(self, name: str) -> Optional[MethodInfo]:
        return next((candidate for candidate in self.methods if candidate.name == name), None)

    def __repr__(self) -> str:
        return f"TypeInfo({self.full_name!r})"

    def enum_members(self) -> List[Tuple[str, Any]]:
        """Return ``(name, value)`` pairs of an enum's named constants."""
        return [(item.name, item.default_value) for item in self.fields if item.is_literal]


@dataclass
class ImageDefinition:
    """Origin of an assembly inside the binary metadata."""

    name: str = ""
    type_start: int = 0
    type_count: int = 0


@dataclass(eq=False, repr=False)
class Assembly(_AttributeOwner):
    """An assembly and the top-level types it defines."""

    index: int
    full_name: str
    image: ImageDefinition = field(default_factory=ImageDefinition)
    custom_attributes: List[CustomAttributeData] = field(default_factory=list)
    types: List[TypeInfo] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.full_name.split(",", 1)[0].strip()

    def __repr__(self) -> str:
        return f"Assembly({self.full_name!r})"

    @property
    def defined_types(self) -> Iterator[TypeInfo]:
        """Yield every defined type, nested types included, depth first."""
        stack = list(reversed(self.types))
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.nested_types))


__all__ = [
    "Assembly",
    "CustomAttributeData",
    "EventInfo",
    "FieldInfo",
    "GenericParameter",
    "ImageDefinition",
    "MarkerRole",
    "MemberAccess",
    "MethodInfo",
    "ParameterInfo",
    "PropertyInfo",
    "TypeInfo",
]
