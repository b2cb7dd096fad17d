"""Type declaration rendering: headers, member blocks, enums and delegates."""

from __future__ import annotations

from typing import Callable, Dict, List

from ..config import DumpOptions
from ..constants import DEFAULT_ENUM_UNDERLYING_TYPE, IMPLICIT_BASE_TYPES, MULTICAST_DELEGATE
from ..logging import get_logger
from ..models import MarkerRole, MethodInfo, TypeInfo
from .attributes import render_attributes
from .members import (
    MemberKind,
    RenderContext,
    render_constructors_block,
    render_events_block,
    render_extension_methods_block,
    render_fields_block,
    render_methods_block,
    render_properties_block,
)
from .modifiers import render_modifiers, type_access_tokens, type_modifier_tokens
from .naming import (
    constraint_clause,
    csharp_name,
    declaration_name,
    format_address,
    format_literal,
    parameters_string,
    return_type_string,
)

_LOGGER = get_logger("render.types")

# Markers consumed structurally rather than printed on the type header.
# DefaultMember is dropped even when the type has no indexer.
_TYPE_ATTRIBUTE_EXCLUSIONS = (MarkerRole.DEFAULT_MEMBER, MarkerRole.EXTENSION)


def _render_nested_types_block(type_info: TypeInfo, ctx: RenderContext) -> str:
    rendered = (render_type(nested, ctx.options, prefix=ctx.indent) for nested in type_info.nested_types)
    return "\n".join(text for text in rendered if text)


BlockRenderer = Callable[[TypeInfo, RenderContext], str]

_BLOCK_RENDERERS: Dict[MemberKind, BlockRenderer] = {
    MemberKind.FIELDS: render_fields_block,
    MemberKind.PROPERTIES: render_properties_block,
    MemberKind.EVENTS: render_events_block,
    MemberKind.NESTED_TYPES: _render_nested_types_block,
    MemberKind.CONSTRUCTORS: render_constructors_block,
    MemberKind.METHODS: render_methods_block,
    MemberKind.EXTENSION_METHODS: render_extension_methods_block,
}

_missing_kinds = set(MemberKind) - set(_BLOCK_RENDERERS)
if _missing_kinds:  # pragma: no cover - import-time guard
    raise RuntimeError(f"No block renderer for member kinds: {sorted(kind.name for kind in _missing_kinds)}")


def is_multicast_delegate(type_info: TypeInfo) -> bool:
    return (
        type_info.is_class
        and type_info.is_sealed
        and type_info.base_type is not None
        and type_info.base_type.full_name == MULTICAST_DELEGATE
    )


def base_list(type_info: TypeInfo) -> List[str]:
    """Return the inheritance list of a type header, base type first."""
    bases: List[str] = []
    if type_info.is_enum:
        underlying = type_info.enum_underlying_type
        if underlying is not None and underlying.full_name != DEFAULT_ENUM_UNDERLYING_TYPE:
            bases.append(csharp_name(underlying))
    elif type_info.base_type is not None and type_info.base_type.full_name not in IMPLICIT_BASE_TYPES:
        bases.append(csharp_name(type_info.base_type))
    bases.extend(csharp_name(interface) for interface in type_info.implemented_interfaces)
    return bases


def render_delegate(type_info: TypeInfo, invoke: MethodInfo, prefix: str = "") -> str:
    """Collapse multicast delegate infrastructure into one ``delegate`` line."""
    line = prefix + render_modifiers(type_access_tokens(type_info))
    if invoke.requires_unsafe_context:
        line += "unsafe "
    line += (
        f"delegate {return_type_string(invoke)} {declaration_name(type_info)}"
        f"({parameters_string(invoke.parameters)});"
    )
    line += f" // TypeDefIndex: {type_info.index}"
    if invoke.virtual_address:
        line += f"; {format_address(invoke.virtual_address)}"
    return line + "\n"


def render_enum_body(type_info: TypeInfo, prefix: str = "") -> str:
    """Render enum constants ordered by ascending value."""
    entries = sorted(type_info.enum_members(), key=lambda entry: entry[1])
    if not entries:
        return ""
    return ",\n".join(f"{prefix}\t{name} = {format_literal(value)}" for name, value in entries) + "\n"


def render_type(type_info: TypeInfo, options: DumpOptions, prefix: str = "") -> str:
    """Render a type declaration, or an empty string when it is suppressed."""
    ctx = RenderContext(options=options, prefix=prefix)
    if ctx.is_suppressed(type_info):
        _LOGGER.debug("Suppressing compiler-generated type %s", type_info.full_name)
        return ""

    parts: List[str] = []
    if type_info.is_import:
        parts.append(f"{prefix}[ComImport]\n")
    if type_info.is_serializable:
        parts.append(f"{prefix}[Serializable]\n")
    parts.append(render_attributes(type_info.custom_attributes, line_prefix=prefix, exclude=_TYPE_ATTRIBUTE_EXCLUSIONS))

    if is_multicast_delegate(type_info):
        invoke = type_info.get_method("Invoke")
        if invoke is not None:
            parts.append(render_delegate(type_info, invoke, prefix))
            return "".join(parts)
        _LOGGER.debug("Delegate %s has no Invoke method; rendering as a class", type_info.full_name)

    bases = base_list(type_info)
    base_text = " : " + ", ".join(bases) if bases else ""
    parts.append(
        f"{prefix}{render_modifiers(type_modifier_tokens(type_info))}"
        f"{declaration_name(type_info)}{base_text} // TypeDefIndex: {type_info.index}\n"
    )
    for parameter in type_info.generic_parameters:
        clause = constraint_clause(parameter)
        if clause:
            parts.append(f"{prefix}\t{clause}\n")

    parts.append(prefix + "{\n")
    if type_info.is_enum:
        parts.append(render_enum_body(type_info, prefix))
    else:
        blocks = []
        for kind in MemberKind:
            text = _BLOCK_RENDERERS[kind](type_info, ctx)
            if text:
                blocks.append(f"{prefix}\t// {kind.label}\n{text}")
        parts.append("\n".join(blocks))
    parts.append(prefix + "}\n")
    return "".join(parts)


__all__ = [
    "base_list",
    "is_multicast_delegate",
    "render_delegate",
    "render_enum_body",
    "render_type",
]
