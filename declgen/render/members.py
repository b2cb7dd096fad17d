"""Per-kind member renderers.

Each ``render_*`` function turns one declared member into a block of text.
Block renderers walk a type's members of one kind and omit any member that
raises :class:`~declgen.errors.RenderError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Set, TypeVar

from ..config import DumpOptions
from ..errors import MalformedGraphError, RenderError
from ..logging import get_logger
from ..models import (
    EventInfo,
    FieldInfo,
    MarkerRole,
    MethodInfo,
    PropertyInfo,
    TypeInfo,
)
from ..constants import CONVERSION_OPERATORS, FIXED_ELEMENT_FIELD
from .attributes import render_attributes
from .modifiers import (
    access_modifier,
    field_modifier_tokens,
    method_modifier_tokens,
    render_modifiers,
)
from .naming import (
    constraint_clause,
    csharp_name,
    format_address,
    format_literal,
    format_offset,
    method_display_name,
    parameters_string,
    return_type_string,
    type_parameters_string,
    unmangled_base_name,
)

_LOGGER = get_logger("render.members")

M = TypeVar("M")


class MemberKind(Enum):
    """Member groups of a type body, in output order."""

    FIELDS = "Fields"
    PROPERTIES = "Properties"
    EVENTS = "Events"
    NESTED_TYPES = "Nested types"
    CONSTRUCTORS = "Constructors"
    METHODS = "Methods"
    EXTENSION_METHODS = "Extension methods"

    @property
    def label(self) -> str:
        return self.value


@dataclass
class RenderContext:
    """State threaded through the renderers of a single type."""

    options: DumpOptions
    prefix: str = ""
    consumed: Set[MethodInfo] = field(default_factory=set)

    @property
    def indent(self) -> str:
        return self.prefix + "\t"

    def consume(self, *methods: Optional[MethodInfo]) -> None:
        self.consumed.update(method for method in methods if method is not None)

    def is_suppressed(self, owner: FieldInfo | MethodInfo | TypeInfo) -> bool:
        return self.options.suppress_compiler_generated and owner.has_marker(MarkerRole.COMPILER_GENERATED)

    def accessor_exclusions(self) -> tuple[MarkerRole, ...]:
        if self.options.suppress_compiler_generated:
            return (MarkerRole.COMPILER_GENERATED,)
        return ()


def _address_comment(method: MethodInfo) -> str:
    return f" // {format_address(method.virtual_address)}" if method.virtual_address else ""


def render_field(item: FieldInfo, ctx: RenderContext) -> str:
    if ctx.is_suppressed(item):
        return ""
    parts: List[str] = []
    if item.is_not_serialized:
        parts.append(f"{ctx.indent}[NonSerialized]\n")
    parts.append(render_attributes(item.custom_attributes, line_prefix=ctx.indent, exclude=(MarkerRole.FIXED_BUFFER,)))

    line = ctx.indent + render_modifiers(field_modifier_tokens(item))
    buffers = item.get_custom_attributes(MarkerRole.FIXED_BUFFER)
    element = item.field_type.get_field(FIXED_ELEMENT_FIELD) if buffers else None
    if buffers and element is not None:
        line += f"/* {format_address(buffers[0].virtual_address)} */ {csharp_name(element.field_type)} {item.name}[0]"
    else:
        if buffers:
            _LOGGER.debug("Fixed buffer %s has no element field; rendering as a plain field", item.name)
        line += f"{csharp_name(item.field_type)} {item.name}"
    if item.has_default_value:
        line += f" = {format_literal(item.default_value)}"
    line += ";"
    # Constants have no storage.
    if not item.is_literal:
        line += f" // {format_offset(item.offset)}"
    parts.append(line + "\n")
    return "".join(parts)


def is_indexer(prop: PropertyInfo) -> bool:
    """A property is an indexer when its accessors take index parameters."""
    if prop.get_method is not None and prop.get_method.parameters:
        return True
    # The setter's trailing parameter is the assigned value.
    return prop.set_method is not None and len(prop.set_method.parameters) > 1


def render_property(prop: PropertyInfo, ctx: RenderContext) -> str:
    getter, setter = prop.get_method, prop.set_method
    get_access = getter.access if getter is not None else 0
    set_access = setter.access if setter is not None else 0
    # The more permissive accessor supplies the property's own modifiers.
    primary = getter if getter is not None and get_access >= set_access else setter
    if primary is None:
        raise MalformedGraphError(f"Property {prop.name} has neither accessor")
    ctx.consume(getter, setter)

    line = f"{ctx.indent}{render_modifiers(method_modifier_tokens(primary))}{csharp_name(prop.property_type)} "
    if is_indexer(prop):
        line += f"this[{parameters_string(prop.index_parameters)}] {{ "
    else:
        line += f"{prop.name} {{ "

    exclusions = ctx.accessor_exclusions()
    if getter is not None:
        line += render_attributes(getter.custom_attributes, inline=True, exclude=exclusions)
        if get_access < set_access:
            line += access_modifier(getter.access)
        line += "get; "
    if setter is not None:
        line += render_attributes(setter.custom_attributes, inline=True, exclude=exclusions)
        if set_access < get_access:
            line += access_modifier(setter.access)
        line += "set; "
    line += "}"

    addresses = [
        format_address(accessor.virtual_address)
        for accessor in (getter, setter)
        if accessor is not None and accessor.virtual_address
    ]
    if addresses:
        line += " // " + " ".join(addresses)

    return render_attributes(prop.custom_attributes, line_prefix=ctx.indent) + line + "\n"


def render_event(event: EventInfo, ctx: RenderContext) -> str:
    accessors = event.accessors()
    if not accessors:
        raise MalformedGraphError(f"Event {event.name} has no accessors")
    ctx.consume(*(method for _, method in accessors))

    modifiers = render_modifiers(method_modifier_tokens(event.add_method)) if event.add_method is not None else ""
    lines = [f"{ctx.indent}{modifiers}event {csharp_name(event.event_handler_type)} {event.name} {{"]
    for keyword, method in accessors:
        lines.append(f"{ctx.indent}\t{keyword};{_address_comment(method)}")
    lines.append(f"{ctx.indent}}}")
    return render_attributes(event.custom_attributes, line_prefix=ctx.indent) + "\n".join(lines) + "\n"


def render_constructor(method: MethodInfo, ctx: RenderContext) -> str:
    if ctx.is_suppressed(method):
        return ""
    if method.declaring_type is None:
        raise MalformedGraphError(f"Constructor {method.name} has no declaring type")
    name = unmangled_base_name(method.declaring_type) + type_parameters_string(method.generic_parameters)
    return (
        render_attributes(method.custom_attributes, line_prefix=ctx.indent)
        + f"{ctx.indent}{render_modifiers(method_modifier_tokens(method))}{name}({parameters_string(method.parameters)});"
        + _address_comment(method)
        + "\n"
    )


def render_method(method: MethodInfo, ctx: RenderContext) -> str:
    if ctx.is_suppressed(method):
        return ""
    line = ctx.indent + render_modifiers(method_modifier_tokens(method))
    if method.name in CONVERSION_OPERATORS:
        line += method_display_name(method) + csharp_name(method.return_type)
    else:
        line += f"{return_type_string(method)} {method_display_name(method)}{type_parameters_string(method.generic_parameters)}"
    line += f"({parameters_string(method.parameters)})"
    for parameter in method.generic_parameters:
        clause = constraint_clause(parameter)
        if clause:
            line += f"\n{ctx.indent}\t{clause}"
    line += ";" + _address_comment(method)
    return (
        render_attributes(method.custom_attributes, line_prefix=ctx.indent, exclude=(MarkerRole.EXTENSION,))
        + line
        + "\n"
    )


def render_each(members: Iterable[M], renderer: Callable[[M, RenderContext], str], ctx: RenderContext) -> str:
    """Render members in graph order, omitting any that cannot be rendered."""
    chunks: List[str] = []
    for member in members:
        try:
            chunks.append(renderer(member, ctx))
        except RenderError as exc:
            _LOGGER.debug("Omitting %s: %s", getattr(member, "name", member), exc)
    return "".join(chunks)


def render_fields_block(type_info: TypeInfo, ctx: RenderContext) -> str:
    # Enum backing fields are implicit in the grammar.
    if type_info.is_enum:
        return ""
    return render_each(type_info.fields, render_field, ctx)


def render_properties_block(type_info: TypeInfo, ctx: RenderContext) -> str:
    return render_each(type_info.properties, render_property, ctx)


def render_events_block(type_info: TypeInfo, ctx: RenderContext) -> str:
    return render_each(type_info.events, render_event, ctx)


def render_constructors_block(type_info: TypeInfo, ctx: RenderContext) -> str:
    return render_each(type_info.constructors, render_constructor, ctx)


def _unconsumed(methods: Sequence[MethodInfo], ctx: RenderContext, *, extension: bool) -> List[MethodInfo]:
    return [method for method in methods if method not in ctx.consumed and method.is_extension is extension]


def render_methods_block(type_info: TypeInfo, ctx: RenderContext) -> str:
    methods = _unconsumed(type_info.methods, ctx, extension=False)
    ctx.consume(*methods)
    return render_each(methods, render_method, ctx)


def render_extension_methods_block(type_info: TypeInfo, ctx: RenderContext) -> str:
    methods = _unconsumed(type_info.methods, ctx, extension=True)
    ctx.consume(*methods)
    return render_each(methods, render_method, ctx)


__all__ = [
    "MemberKind",
    "RenderContext",
    "is_indexer",
    "render_constructor",
    "render_constructors_block",
    "render_each",
    "render_event",
    "render_events_block",
    "render_extension_methods_block",
    "render_field",
    "render_fields_block",
    "render_method",
    "render_methods_block",
    "render_properties_block",
    "render_property",
]
