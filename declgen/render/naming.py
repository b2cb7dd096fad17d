"""C# names, parameter lists, constraint clauses and literal formatting."""

from __future__ import annotations

import math
from typing import Any, Iterable, List

from ..constants import (
    BUILTIN_TYPE_ALIASES,
    CONVERSION_OPERATORS,
    NULLABLE_DEFINITION,
    OPERATOR_NAMES,
)
from ..errors import UnsupportedConstructError
from ..models import GenericParameter, MethodInfo, ParameterInfo, TypeInfo

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\0": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def format_address(address: int) -> str:
    """Render a runtime address, widening to 64 bits only when needed."""
    if address <= 0xFFFFFFFF:
        return f"0x{address:08X}"
    return f"0x{address:016X}"


def format_offset(offset: int) -> str:
    return f"0x{offset & 0xFFFFFFFF:02X}"


def format_literal(value: Any) -> str:
    """Render a metadata constant as a C# literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return repr(value)
    if isinstance(value, str):
        return '"' + "".join(_ESCAPES.get(char, char) for char in value) + '"'
    if isinstance(value, TypeInfo):
        return f"typeof({csharp_name(value)})"
    if isinstance(value, (list, tuple)):
        return "new[] { " + ", ".join(format_literal(item) for item in value) + " }"
    raise UnsupportedConstructError(f"No literal syntax for {type(value).__name__} value")


def unmangled_base_name(type_info: TypeInfo) -> str:
    """Return the type name without its generic arity suffix (``List`1`` -> ``List``)."""
    return type_info.name.split("`", 1)[0]


def csharp_name(type_info: TypeInfo) -> str:
    """Return the name used when referencing ``type_info`` in C# source."""
    if type_info.element_type is not None:
        element = csharp_name(type_info.element_type)
        if type_info.is_by_ref:
            return element
        if type_info.is_pointer:
            return element + "*"
        return element + "[" + "," * (max(type_info.array_rank, 1) - 1) + "]"
    if type_info.generic_parameter is not None:
        return type_info.generic_parameter.name
    alias = BUILTIN_TYPE_ALIASES.get(type_info.full_name)
    if alias is not None:
        return alias
    if type_info.generic_type_arguments:
        if type_info.full_name == NULLABLE_DEFINITION and len(type_info.generic_type_arguments) == 1:
            return csharp_name(type_info.generic_type_arguments[0]) + "?"
        arguments = ", ".join(csharp_name(argument) for argument in type_info.generic_type_arguments)
        return f"{unmangled_base_name(type_info)}<{arguments}>"
    if type_info.generic_parameters:
        return unmangled_base_name(type_info) + type_parameters_string(type_info.generic_parameters)
    return unmangled_base_name(type_info)


def declaration_name(type_info: TypeInfo) -> str:
    """Name used in a type's own declaration, with variance annotations."""
    if not type_info.generic_parameters:
        return unmangled_base_name(type_info)
    names = []
    for parameter in type_info.generic_parameters:
        variance = f"{parameter.variance} " if parameter.variance else ""
        names.append(variance + parameter.name)
    return f"{unmangled_base_name(type_info)}<{', '.join(names)}>"


def type_parameters_string(parameters: Iterable[GenericParameter]) -> str:
    names = [parameter.name for parameter in parameters]
    return f"<{', '.join(names)}>" if names else ""


def constraint_clause(parameter: GenericParameter) -> str:
    """Return ``where T : ...`` for a constrained parameter, else an empty string."""
    items: List[str] = []
    if parameter.reference_type_constraint:
        items.append("class")
    if parameter.value_type_constraint:
        items.append("struct")
    for constraint in parameter.constraints:
        # A struct constraint is recorded as an implicit System.ValueType base.
        if parameter.value_type_constraint and constraint.full_name == "System.ValueType":
            continue
        items.append(csharp_name(constraint))
    if parameter.default_constructor_constraint and not parameter.value_type_constraint:
        items.append("new()")
    if not items:
        return ""
    return f"where {parameter.name} : {', '.join(items)}"


def method_display_name(method: MethodInfo) -> str:
    conversion = CONVERSION_OPERATORS.get(method.name)
    if conversion is not None:
        return conversion
    return OPERATOR_NAMES.get(method.name, method.name)


def parameter_string(parameter: ParameterInfo) -> str:
    tokens: List[str] = []
    method = parameter.member
    if method is not None and method.is_extension and parameter.position == 0:
        tokens.append("this")
    if parameter.is_params:
        tokens.append("params")
    if parameter.parameter_type.is_by_ref:
        if parameter.is_out:
            tokens.append("out")
        elif parameter.is_in:
            tokens.append("in")
        else:
            tokens.append("ref")
    tokens.append(csharp_name(parameter.parameter_type))
    tokens.append(parameter.name)
    text = " ".join(tokens)
    if parameter.has_default_value:
        text += f" = {format_literal(parameter.default_value)}"
    return text


def parameters_string(parameters: Iterable[ParameterInfo]) -> str:
    return ", ".join(parameter_string(parameter) for parameter in parameters)


def return_type_string(method: MethodInfo) -> str:
    prefix = "ref " if method.returns_by_ref else ""
    return prefix + csharp_name(method.return_type)


__all__ = [
    "constraint_clause",
    "csharp_name",
    "declaration_name",
    "format_address",
    "format_literal",
    "format_offset",
    "method_display_name",
    "parameter_string",
    "parameters_string",
    "return_type_string",
    "type_parameters_string",
    "unmangled_base_name",
]
