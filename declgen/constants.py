"""Shared constants for declaration rendering."""

from __future__ import annotations

COMPILER_GENERATED_ATTRIBUTE = "System.Runtime.CompilerServices.CompilerGeneratedAttribute"
FIXED_BUFFER_ATTRIBUTE = "System.Runtime.CompilerServices.FixedBufferAttribute"
EXTENSION_ATTRIBUTE = "System.Runtime.CompilerServices.ExtensionAttribute"
DEFAULT_MEMBER_ATTRIBUTE = "System.Reflection.DefaultMemberAttribute"

MULTICAST_DELEGATE = "System.MulticastDelegate"
IMPLICIT_BASE_TYPES: frozenset[str] = frozenset({"System.Object", "System.ValueType"})
DEFAULT_ENUM_UNDERLYING_TYPE = "System.Int32"
FIXED_ELEMENT_FIELD = "FixedElementField"

CONVERSION_OPERATORS: dict[str, str] = {
    "op_Implicit": "implicit operator ",
    "op_Explicit": "explicit operator ",
}

OPERATOR_NAMES: dict[str, str] = {
    "op_UnaryPlus": "operator +",
    "op_UnaryNegation": "operator -",
    "op_LogicalNot": "operator !",
    "op_OnesComplement": "operator ~",
    "op_Increment": "operator ++",
    "op_Decrement": "operator --",
    "op_True": "operator true",
    "op_False": "operator false",
    "op_Addition": "operator +",
    "op_Subtraction": "operator -",
    "op_Multiply": "operator *",
    "op_Division": "operator /",
    "op_Modulus": "operator %",
    "op_BitwiseAnd": "operator &",
    "op_BitwiseOr": "operator |",
    "op_ExclusiveOr": "operator ^",
    "op_LeftShift": "operator <<",
    "op_RightShift": "operator >>",
    "op_Equality": "operator ==",
    "op_Inequality": "operator !=",
    "op_LessThan": "operator <",
    "op_GreaterThan": "operator >",
    "op_LessThanOrEqual": "operator <=",
    "op_GreaterThanOrEqual": "operator >=",
}

BUILTIN_TYPE_ALIASES: dict[str, str] = {
    "System.Object": "object",
    "System.String": "string",
    "System.Boolean": "bool",
    "System.Char": "char",
    "System.Byte": "byte",
    "System.SByte": "sbyte",
    "System.Int16": "short",
    "System.UInt16": "ushort",
    "System.Int32": "int",
    "System.UInt32": "uint",
    "System.Int64": "long",
    "System.UInt64": "ulong",
    "System.Single": "float",
    "System.Double": "double",
    "System.Decimal": "decimal",
    "System.Void": "void",
}

NULLABLE_DEFINITION = "System.Nullable`1"

GLOBAL_NAMESPACE_LABEL = "<global namespace>"

DEFAULT_EXCLUDED_NAMESPACES: tuple[str, ...] = (
    "System",
    "Mono",
    "Microsoft.Reflection",
    "Microsoft.Win32",
    "Internal.Runtime",
    "Unity",
    "UnityEditor",
    "UnityEngine",
    "UnityEngineInternal",
    "AOT",
    "JetBrains.Annotations",
)


__all__ = [
    "BUILTIN_TYPE_ALIASES",
    "COMPILER_GENERATED_ATTRIBUTE",
    "CONVERSION_OPERATORS",
    "DEFAULT_ENUM_UNDERLYING_TYPE",
    "DEFAULT_EXCLUDED_NAMESPACES",
    "DEFAULT_MEMBER_ATTRIBUTE",
    "EXTENSION_ATTRIBUTE",
    "FIXED_BUFFER_ATTRIBUTE",
    "FIXED_ELEMENT_FIELD",
    "GLOBAL_NAMESPACE_LABEL",
    "IMPLICIT_BASE_TYPES",
    "MULTICAST_DELEGATE",
    "NULLABLE_DEFINITION",
    "OPERATOR_NAMES",
]
