"""Tests for declgen.render.types."""

from __future__ import annotations

from declgen.config import DumpOptions
from declgen.models import MemberAccess
from declgen.render.types import base_list, render_type
from tests._fixtures.graph_factory import (
    attr,
    field,
    generic_param,
    method,
    new_type,
    param,
    prop,
    ref,
)


def _enum(name: str, members: dict, *, underlying: str = "System.Int32", index: int = 0):
    fields = [field("value__", underlying, access=MemberAccess.PUBLIC, offset=0x10)]
    for member_name, value in members.items():
        fields.append(
            field(
                member_name,
                name,
                access=MemberAccess.PUBLIC,
                is_static=True,
                is_literal=True,
                has_default_value=True,
                default_value=value,
            )
        )
    return new_type(
        name,
        index=index,
        is_class=False,
        is_enum=True,
        is_value_type=True,
        is_sealed=True,
        base_type=ref("System.Enum"),
        enum_underlying_type=ref(underlying),
        fields=fields,
    )


def test_class_body_groups_members_in_order(options: DumpOptions) -> None:
    player = new_type(
        "Player",
        index=1,
        fields=[field("health", "System.Int32", offset=0x10)],
        properties=[prop("Health", "System.Int32", getter=method("get_Health", "System.Int32", virtual_address=0x1000))],
        methods=[method("Heal", parameters=[param("amount", "System.Int32")], virtual_address=0x2000)],
    )
    expected = (
        "public class Player // TypeDefIndex: 1\n"
        "{\n"
        "\t// Fields\n"
        "\tprivate int health; // 0x10\n"
        "\n"
        "\t// Properties\n"
        "\tpublic int Health { get; } // 0x00001000\n"
        "\n"
        "\t// Methods\n"
        "\tpublic void Heal(int amount); // 0x00002000\n"
        "}\n"
    )
    assert render_type(player, options) == expected


def test_empty_class_has_empty_body(options: DumpOptions) -> None:
    assert render_type(new_type("Marker", index=4), options) == "public class Marker // TypeDefIndex: 4\n{\n}\n"


def test_delegate_collapses_to_single_line(options: DumpOptions) -> None:
    invoke = method(
        "Invoke",
        "System.Boolean",
        parameters=[param("a", "System.Int32"), param("b", "System.String")],
        is_virtual=True,
        is_new_slot=True,
        virtual_address=0xABC,
    )
    ctor = method(".ctor", parameters=[param("object", "System.Object"), param("method", "System.IntPtr")])
    callback = new_type(
        "Callback",
        index=7,
        is_sealed=True,
        base_type=ref("System.MulticastDelegate"),
        constructors=[ctor],
        methods=[invoke, method("BeginInvoke", "System.IAsyncResult")],
    )
    expected = "public delegate bool Callback(int a, string b); // TypeDefIndex: 7; 0x00000ABC\n"
    assert render_type(callback, options) == expected


def test_delegate_without_invoke_renders_as_class(options: DumpOptions) -> None:
    broken = new_type("Broken", index=2, is_sealed=True, base_type=ref("System.MulticastDelegate"))
    expected = "public sealed class Broken : MulticastDelegate // TypeDefIndex: 2\n{\n}\n"
    assert render_type(broken, options) == expected


def test_enum_members_sorted_by_value(options: DumpOptions) -> None:
    color = _enum("Color", {"A": 2, "B": 0, "C": 1}, index=3)
    expected = "public enum Color // TypeDefIndex: 3\n{\n\tB = 0,\n\tC = 1,\n\tA = 2\n}\n"
    assert render_type(color, options) == expected


def test_enum_with_explicit_underlying_type_and_no_members(options: DumpOptions) -> None:
    flags = _enum("Flags", {}, underlying="System.Byte")
    assert render_type(flags, options) == "public enum Flags : byte // TypeDefIndex: 0\n{\n}\n"


def test_nested_types_are_indented_inside_their_owner(options: DumpOptions) -> None:
    inner = new_type("Inner", index=1, fields=[field("x", "System.Int32", offset=0x10)])
    outer = new_type("Outer", nested=[inner])
    expected = (
        "public class Outer // TypeDefIndex: 0\n"
        "{\n"
        "\t// Nested types\n"
        "\tpublic class Inner // TypeDefIndex: 1\n"
        "\t{\n"
        "\t\t// Fields\n"
        "\t\tprivate int x; // 0x10\n"
        "\t}\n"
        "}\n"
    )
    assert render_type(outer, options) == expected


def test_generic_type_constraints_follow_header(options: DumpOptions) -> None:
    t_param, _ = generic_param("T", reference_type_constraint=True)
    pool = new_type("Pool`1", generic_parameters=[t_param])
    assert render_type(pool, options) == "public class Pool<T> // TypeDefIndex: 0\n\twhere T : class\n{\n}\n"


def test_base_list_skips_implicit_bases() -> None:
    entity = new_type("Player", base_type=ref("Game.Entity"), implemented_interfaces=[ref("System.IDisposable")])
    assert base_list(entity) == ["Entity", "IDisposable"]
    point = new_type("Point", is_class=False, is_value_type=True, base_type=ref("System.ValueType"))
    assert base_list(point) == []


def test_default_member_is_dropped_even_without_an_indexer(options: DumpOptions) -> None:
    bag = new_type(
        "Bag",
        is_serializable=True,
        attributes=[attr("System.Reflection.DefaultMemberAttribute", "Item"), attr("Game.IconAttribute")],
    )
    assert render_type(bag, options) == "[Serializable]\n[Icon]\npublic class Bag // TypeDefIndex: 0\n{\n}\n"


def test_compiler_generated_type_is_suppressed_when_requested() -> None:
    closure = new_type("<>c", attributes=[attr("System.Runtime.CompilerServices.CompilerGeneratedAttribute")])
    assert render_type(closure, DumpOptions(suppress_compiler_generated=True)) == ""
    assert render_type(closure, DumpOptions()).startswith("[CompilerGenerated]\npublic class <>c")
