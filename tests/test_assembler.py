from __future__ import annotations

from declgen.config import DumpOptions
from declgen.render.assembler import FileAssembler, namespace_sort_key
from tests._fixtures.graph_factory import attr, field, method, new_assembly, new_type, param, ref


def test_single_type_file_layout() -> None:
    player = new_type("Player", fields=[field("hp", "System.Int32", offset=0x10)])
    new_assembly(types=[player])

    text = FileAssembler().assemble([player])

    assert text == (
        "using System;\n"
        "\n"
        "// Image 0: Assembly-CSharp.dll - 0\n"
        "\n"
        "// Namespace: Game\n"
        "public class Player // TypeDefIndex: 0\n"
        "{\n"
        "\t// Fields\n"
        "\tprivate int hp; // 0x10\n"
        "}\n"
        "\n"
    )


def test_using_block_sorts_system_namespaces_first() -> None:
    handler = method(
        "Handle",
        parameters=[
            param("a", "Alpha.Thing"),
            param("b", "System.Collections.Generic.Dictionary"),
            param("c", "Zed.Other"),
            param("d", "System.Text.StringBuilder"),
        ],
    )
    owner = new_type("Handler", methods=[handler])
    new_assembly(types=[owner])

    text = FileAssembler().assemble([owner])

    usings = [line for line in text.splitlines() if line.startswith("using ")]
    assert usings == [
        "using System;",
        "using System.Collections.Generic;",
        "using System.Text;",
        "using Alpha;",
        "using Zed;",
    ]


def test_namespace_sort_key_orders_system_before_others() -> None:
    names = ["Zed", "System.Linq", "Alpha", "System", "Systemic"]
    assert sorted(names, key=namespace_sort_key) == ["System", "System.Linq", "Alpha", "Systemic", "Zed"]


def test_own_namespace_is_not_imported() -> None:
    owner = new_type("Player", fields=[field("friend", ref("Game.Friend"))])
    new_assembly(types=[owner])
    text = FileAssembler().assemble([owner])
    assert not text.startswith("using")
    assert text.startswith("// Image 0: Assembly-CSharp.dll - 0\n\n// Namespace: Game\n")


def test_global_namespace_label() -> None:
    loose = new_type("Loose", namespace="")
    new_assembly(types=[loose])
    text = FileAssembler().assemble([loose])
    assert "// Namespace: <global namespace>\npublic class Loose" in text


def test_assembly_attributes_render_and_contribute_usings() -> None:
    player = new_type("Player")
    new_assembly(
        types=[player],
        type_start=12,
        attributes=[
            attr("System.Reflection.AssemblyTitleAttribute", "Game", address=0x500),
            attr("System.Runtime.CompilerServices.ExtensionAttribute"),
        ],
    )

    text = FileAssembler().assemble([player])

    assert text.startswith(
        "using System.Reflection;\n"
        "using System.Runtime.CompilerServices;\n"
        "\n"
        "// Image 0: Assembly-CSharp.dll - 12\n"
        '[assembly: AssemblyTitle("Game")] // 0x00000500\n'
        "\n"
        "// Namespace: Game\n"
    )


def test_only_assemblies_with_rendered_types_are_listed() -> None:
    first = new_type("First")
    second = new_type("Second", namespace="Hidden")
    new_assembly("First.dll", types=[first])
    new_assembly("Second.dll", index=1, types=[second])

    text = FileAssembler(DumpOptions(excluded_namespaces=("Hidden",))).assemble([first, second])

    assert "// Image 0: First.dll - 0" in text
    assert "Second.dll" not in text
    assert "class Second" not in text


def test_nested_types_are_rendered_once_through_their_owner() -> None:
    inner = new_type("Inner", index=1)
    outer = new_type("Outer", nested=[inner])
    assembly = new_assembly(types=[outer])

    accumulator = FileAssembler().collect(assembly.defined_types)

    assert len(accumulator.bodies) == 1
    assert "\tpublic class Inner // TypeDefIndex: 1\n" in accumulator.bodies[0]


def test_collect_counts_skipped_types() -> None:
    closure = new_type("<>c", attributes=[attr("System.Runtime.CompilerServices.CompilerGeneratedAttribute")])
    excluded = new_type("Engine", namespace="UnityEngine")
    kept = new_type("Player")
    new_assembly(types=[closure, excluded, kept])
    options = DumpOptions(excluded_namespaces=("UnityEngine",), suppress_compiler_generated=True)

    accumulator = FileAssembler(options).collect([closure, excluded, kept])

    assert accumulator.skipped == 2
    assert len(accumulator.bodies) == 1


def test_rendering_is_deterministic() -> None:
    player = new_type(
        "Player",
        attributes=[attr("Game.ZAttribute"), attr("Game.AAttribute")],
        fields=[field("pos", "UnityEngine.Vector3", offset=0x18)],
        methods=[method("Tick", parameters=[param("dt", "System.Single")], virtual_address=0x44)],
    )
    new_assembly(types=[player])
    assembler = FileAssembler()

    assert assembler.assemble([player]) == assembler.assemble([player])


def test_excluded_types_do_not_contribute_usings() -> None:
    tool = new_type("Tool", namespace="Game.Editor", fields=[field("window", "UnityEditor.EditorWindow")])
    player = new_type("Player")
    new_assembly(types=[tool, player])

    text = FileAssembler(DumpOptions(excluded_namespaces=("Game.Editor",))).assemble([tool, player])

    assert "UnityEditor" not in text
    assert "Tool" not in text


def test_suppressing_compiler_generated_is_idempotent() -> None:
    generated = attr("System.Runtime.CompilerServices.CompilerGeneratedAttribute")
    closure = new_type(
        "<>c",
        attributes=[generated],
        methods=[method("<Run>b__0_0", attributes=[attr("System.Runtime.CompilerServices.CompilerGeneratedAttribute")])],
    )
    player = new_type("Player")
    new_assembly(types=[closure, player])
    assembler = FileAssembler(DumpOptions(suppress_compiler_generated=True))

    once = assembler.assemble([closure, player])

    assert "<>c" not in once
    assert "CompilerServices" not in once
    assert assembler.assemble([closure, player]) == once
