from __future__ import annotations

import io
from pathlib import Path

import pytest

from declgen.config import DumpOptions
from declgen.dumper import Dumper, all_types
from declgen.errors import SinkFailure
from tests._fixtures.graph_factory import field, new_assembly, new_type


def _sample_assemblies():
    player = new_type("Player", index=0, fields=[field("hp", "System.Int32", offset=0x10)])
    inner = new_type("State", index=2)
    enemy = new_type("Enemy", namespace="Game.AI", index=1, nested=[inner])
    loose = new_type("Loose", namespace="", index=3)
    game = new_assembly("Assembly-CSharp.dll", types=[player, enemy])
    plugins = new_assembly("Plugins.dll", index=1, types=[loose], type_start=3)
    return [game, plugins]


def test_all_types_includes_nested_types() -> None:
    names = [type_info.name for type_info in all_types(_sample_assemblies())]
    assert names == ["Player", "Enemy", "State", "Loose"]


def test_write_to_stream_matches_render() -> None:
    dumper = Dumper()
    types = all_types(_sample_assemblies())
    sink = io.StringIO()

    dumper.write(types, sink)

    assert sink.getvalue() == dumper.render(types)
    assert sink.getvalue().count("// Namespace:") == 3


def test_single_layout_writes_one_file(tmp_path: Path) -> None:
    out_path = tmp_path / "out" / "types.cs"

    written = Dumper().dump(_sample_assemblies(), out_path)

    assert written == [out_path]
    text = out_path.read_text(encoding="utf-8")
    assert "// Image 0: Assembly-CSharp.dll - 0" in text
    assert "// Image 1: Plugins.dll - 3" in text


def test_namespace_layout_writes_file_per_namespace(tmp_path: Path) -> None:
    written = Dumper().dump(_sample_assemblies(), tmp_path, layout="namespace")

    assert sorted(path.name for path in written) == ["-.cs", "Game.AI.cs", "Game.cs"]
    assert "class State" in (tmp_path / "Game.AI.cs").read_text(encoding="utf-8")


def test_assembly_layout_skips_fully_excluded_assemblies(tmp_path: Path) -> None:
    dumper = Dumper(DumpOptions(excluded_namespaces=("Game",)))

    written = dumper.dump(_sample_assemblies(), tmp_path, layout="assembly")

    assert [path.name for path in written] == ["Plugins.cs"]


def test_unknown_layout_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        Dumper().dump(_sample_assemblies(), tmp_path, layout="flat")


def test_unwritable_destination_raises_sink_failure(tmp_path: Path) -> None:
    blocked = tmp_path / "blocked"
    blocked.mkdir()

    with pytest.raises(SinkFailure):
        Dumper().write_file(all_types(_sample_assemblies()), blocked)


def test_failed_render_leaves_existing_file_untouched(tmp_path: Path) -> None:
    out_path = tmp_path / "types.cs"
    out_path.write_text("previous dump\n", encoding="utf-8")

    def broken_types():
        yield from all_types(_sample_assemblies())
        raise LookupError("graph traversal failed")

    with pytest.raises(LookupError):
        Dumper().write_file(broken_types(), out_path)

    assert out_path.read_text(encoding="utf-8") == "previous dump\n"
