"""Custom attribute rendering."""

from __future__ import annotations

from typing import Collection, Iterable, List

from ..errors import UnsupportedConstructError
from ..logging import get_logger
from ..models import CustomAttributeData, MarkerRole
from .naming import format_address, format_literal, unmangled_base_name

_LOGGER = get_logger("render.attributes")
_SUFFIX = "Attribute"


def attribute_display_name(attribute: CustomAttributeData) -> str:
    name = unmangled_base_name(attribute.attribute_type)
    if name.endswith(_SUFFIX) and len(name) > len(_SUFFIX):
        return name[: -len(_SUFFIX)]
    return name


def attribute_syntax(attribute: CustomAttributeData) -> str:
    """Return the bracket contents for one attribute (``Name(args)``)."""
    name = attribute_display_name(attribute)
    try:
        arguments: List[str] = [format_literal(value) for value in attribute.arguments]
        arguments.extend(
            f"{key} = {format_literal(value)}" for key, value in attribute.named_arguments.items()
        )
    except UnsupportedConstructError as exc:
        _LOGGER.debug("Dropping arguments of %s: %s", name, exc)
        return name
    if not arguments:
        return name
    return f"{name}({', '.join(arguments)})"


def select_attributes(
    attributes: Iterable[CustomAttributeData],
    exclude: Collection[MarkerRole] = (),
) -> List[CustomAttributeData]:
    """Drop excluded marker roles and order by attribute type name."""
    kept = [attribute for attribute in attributes if attribute.role is MarkerRole.NONE or attribute.role not in exclude]
    return sorted(kept, key=lambda attribute: attribute.attribute_type.name)


def render_attributes(
    attributes: Iterable[CustomAttributeData],
    *,
    line_prefix: str = "",
    target: str = "",
    inline: bool = False,
    exclude: Collection[MarkerRole] = (),
) -> str:
    """Render attributes one per line, or space-separated when ``inline``."""
    chunks: List[str] = []
    for attribute in select_attributes(attributes, exclude):
        text = f"[{target}{attribute_syntax(attribute)}]"
        if inline:
            chunks.append(text + " ")
            continue
        if attribute.virtual_address:
            text += f" // {format_address(attribute.virtual_address)}"
        chunks.append(f"{line_prefix}{text}\n")
    return "".join(chunks)


__all__ = [
    "attribute_display_name",
    "attribute_syntax",
    "render_attributes",
    "select_attributes",
]
