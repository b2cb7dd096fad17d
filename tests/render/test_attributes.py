"""Tests for declgen.render.attributes."""

from __future__ import annotations

from declgen.models import MarkerRole
from declgen.render.attributes import attribute_syntax, render_attributes
from tests._fixtures.graph_factory import attr


def test_attribute_suffix_is_trimmed_and_arguments_rendered() -> None:
    item = attr("UnityEngine.TooltipAttribute", "Max health")
    assert attribute_syntax(item) == 'Tooltip("Max health")'


def test_named_arguments_follow_positional_ones() -> None:
    item = attr("Game.RangeAttribute", 0, 10, Step=2)
    assert attribute_syntax(item) == "Range(0, 10, Step = 2)"


def test_bare_attribute_name_is_kept_intact() -> None:
    item = attr("Game.Attribute")
    assert attribute_syntax(item) == "Attribute"


def test_unsupported_argument_drops_argument_list() -> None:
    item = attr("Game.OddAttribute", object())
    assert attribute_syntax(item) == "Odd"


def test_lines_are_sorted_by_type_name_with_addresses() -> None:
    attributes = [
        attr("Game.ZetaAttribute", address=0x2000),
        attr("Game.AlphaAttribute"),
    ]
    rendered = render_attributes(attributes, line_prefix="\t")
    assert rendered == "\t[Alpha]\n\t[Zeta] // 0x00002000\n"


def test_inline_mode_omits_addresses() -> None:
    attributes = [attr("Game.ZetaAttribute", address=0x2000), attr("Game.AlphaAttribute")]
    assert render_attributes(attributes, inline=True) == "[Alpha] [Zeta] "


def test_assembly_target_and_marker_exclusion() -> None:
    attributes = [
        attr("System.Reflection.AssemblyTitleAttribute", "Game"),
        attr("System.Runtime.CompilerServices.ExtensionAttribute"),
    ]
    rendered = render_attributes(attributes, target="assembly: ", exclude=(MarkerRole.EXTENSION,))
    assert rendered == '[assembly: AssemblyTitle("Game")]\n'


def test_excluding_a_role_never_drops_plain_attributes() -> None:
    attributes = [attr("Game.PlainAttribute")]
    assert render_attributes(attributes, exclude=(MarkerRole.NONE,)) == "[Plain]\n"
