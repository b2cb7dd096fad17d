"""Modifier resolution for types, fields and methods.

Tokens come back in source-grammar order: access, then ``static``/``const``/
``readonly``, then ``abstract``/``virtual``/``override``/``sealed``, then
``extern``/``unsafe``. Unknown combinations resolve to no tokens.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from ..models import FieldInfo, MarkerRole, MemberAccess, MethodInfo, TypeInfo

_ACCESS_TOKENS: Dict[MemberAccess, str] = {
    MemberAccess.PRIVATE: "private",
    MemberAccess.FAMILY_AND_ASSEMBLY: "private protected",
    MemberAccess.ASSEMBLY: "internal",
    MemberAccess.FAMILY: "protected",
    MemberAccess.FAMILY_OR_ASSEMBLY: "protected internal",
    MemberAccess.PUBLIC: "public",
}


def render_modifiers(tokens: Sequence[str]) -> str:
    """Join tokens into a declaration prefix (``"public static "``)."""
    return "".join(f"{token} " for token in tokens)


def access_tokens(access: MemberAccess) -> Tuple[str, ...]:
    token = _ACCESS_TOKENS.get(access)
    return (token,) if token else ()


def access_modifier(access: MemberAccess) -> str:
    return render_modifiers(access_tokens(access))


def method_modifier_tokens(method: MethodInfo) -> Tuple[str, ...]:
    # Interface members are implicitly public abstract.
    if method.declaring_type is not None and method.declaring_type.is_interface:
        return ()
    tokens: List[str] = list(access_tokens(method.access))
    if method.is_static:
        tokens.append("static")
    if method.is_abstract:
        tokens.append("abstract")
    elif method.is_virtual:
        if method.is_final:
            # final + new slot is a plain interface implementation
            if not method.is_new_slot:
                tokens.extend(("sealed", "override"))
        elif method.is_new_slot:
            tokens.append("virtual")
        else:
            tokens.append("override")
    if method.is_pinvoke:
        tokens.append("extern")
    if method.requires_unsafe_context:
        tokens.append("unsafe")
    return tuple(tokens)


def field_modifier_tokens(field: FieldInfo) -> Tuple[str, ...]:
    tokens: List[str] = list(access_tokens(field.access))
    if field.is_literal:
        tokens.append("const")
    else:
        if field.is_static:
            tokens.append("static")
        if field.is_init_only:
            tokens.append("readonly")
    if field.requires_unsafe_context:
        tokens.append("unsafe")
    if field.has_marker(MarkerRole.FIXED_BUFFER):
        tokens.append("fixed")
    return tuple(tokens)


def type_access_tokens(type_info: TypeInfo) -> Tuple[str, ...]:
    if type_info.is_nested:
        return access_tokens(type_info.access)
    return ("public",) if type_info.access is MemberAccess.PUBLIC else ("internal",)


def type_keyword(type_info: TypeInfo) -> str:
    if type_info.is_interface:
        return "interface"
    if type_info.is_enum:
        return "enum"
    if type_info.is_value_type:
        return "struct"
    return "class"


def type_modifier_tokens(type_info: TypeInfo) -> Tuple[str, ...]:
    """Access and inheritance modifiers followed by the type keyword."""
    tokens: List[str] = list(type_access_tokens(type_info))
    is_reference_class = type_info.is_class and not (
        type_info.is_interface or type_info.is_value_type or type_info.is_enum
    )
    if is_reference_class:
        if type_info.is_abstract and type_info.is_sealed:
            tokens.append("static")
        elif type_info.is_abstract:
            tokens.append("abstract")
        elif type_info.is_sealed:
            tokens.append("sealed")
    tokens.append(type_keyword(type_info))
    return tuple(tokens)


__all__ = [
    "access_modifier",
    "access_tokens",
    "field_modifier_tokens",
    "method_modifier_tokens",
    "render_modifiers",
    "type_access_tokens",
    "type_keyword",
    "type_modifier_tokens",
]
