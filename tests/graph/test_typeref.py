from __future__ import annotations

import pytest

from declgen.graph.typeref import TypeRefSpec, TypeRefSyntaxError, parse_type_ref, split_full_name


def test_plain_name() -> None:
    assert parse_type_ref("System.Int32") == TypeRefSpec(name="System.Int32")


def test_generic_arguments_and_suffixes() -> None:
    spec = parse_type_ref("System.Collections.Generic.Dictionary`2<System.String, T[]>[,]")
    assert spec.name == "System.Collections.Generic.Dictionary`2"
    assert spec.arguments == (
        TypeRefSpec(name="System.String"),
        TypeRefSpec(name="T", suffixes=("[]",)),
    )
    assert spec.suffixes == ("[,]",)


def test_pointer_and_by_ref_suffixes_keep_order() -> None:
    assert parse_type_ref("System.Byte*&").suffixes == ("*", "&")


@pytest.mark.parametrize("text", ["", "List`1<", "Foo[", "Foo>", "A<B,>"])
def test_malformed_references_raise(text: str) -> None:
    with pytest.raises(TypeRefSyntaxError):
        parse_type_ref(text)


def test_split_full_name_handles_nested_and_global_types() -> None:
    assert split_full_name("Game.Outer+Inner") == ("Game", "Outer+Inner")
    assert split_full_name("Loose") == ("", "Loose")
    assert split_full_name("A.B.C") == ("A.B", "C")
