"""Assemble rendered types into one C# source unit."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Set

from jinja2 import Environment, FileSystemLoader

from ..config import DumpOptions
from ..constants import GLOBAL_NAMESPACE_LABEL
from ..logging import get_logger
from ..models import Assembly, MarkerRole, TypeInfo
from .attributes import render_attributes
from .references import referenced_namespaces
from .types import render_type

_TEMPLATE_NAME = "source_file.cs.j2"


def namespace_sort_key(namespace: str) -> tuple[int, str]:
    """Order ``System`` namespaces ahead of everything else."""
    is_system = namespace == "System" or namespace.startswith("System.")
    return (0 if is_system else 1, namespace)


@dataclass
class FileAccumulator:
    """Result of one pass over the input types."""

    namespaces: Set[str] = field(default_factory=set)
    assemblies: List[Assembly] = field(default_factory=list)
    bodies: List[str] = field(default_factory=list)
    skipped: int = 0

    def add(self, type_info: TypeInfo, text: str) -> None:
        label = type_info.namespace or GLOBAL_NAMESPACE_LABEL
        self.bodies.append(f"// Namespace: {label}\n{text}\n")
        self.namespaces.update(referenced_namespaces(type_info))
        assembly = type_info.assembly
        if assembly is not None and all(assembly is not seen for seen in self.assemblies):
            self.assemblies.append(assembly)

    def using_namespaces(self) -> List[str]:
        namespaces = set(self.namespaces)
        for assembly in self.assemblies:
            namespaces.update(
                attribute.attribute_type.namespace
                for attribute in assembly.custom_attributes
                if attribute.attribute_type.namespace
            )
        return sorted(namespaces, key=namespace_sort_key)


def render_assembly_info(assemblies: Iterable[Assembly]) -> str:
    """Identity comment and assembly-level attributes per assembly."""
    parts: List[str] = []
    for assembly in assemblies:
        parts.append(f"// Image {assembly.index}: {assembly.full_name} - {assembly.image.type_start}\n")
        attributes = render_attributes(
            assembly.custom_attributes, target="assembly: ", exclude=(MarkerRole.EXTENSION,)
        )
        if attributes:
            parts.append(attributes + "\n")
    return "".join(parts).rstrip()


class FileAssembler:
    """Renders an ordered sequence of types into a single text unit."""

    def __init__(self, options: DumpOptions | None = None, templates_dir: Path | None = None) -> None:
        self.options = options or DumpOptions()
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.logger = get_logger("assembler")

    def collect(self, types: Iterable[TypeInfo]) -> FileAccumulator:
        """Render every eligible top-level type, in input order."""
        accumulator = FileAccumulator()
        for type_info in types:
            # Nested types are reached through their declaring type.
            if type_info.is_nested:
                continue
            if self.options.is_excluded(type_info.namespace):
                accumulator.skipped += 1
                continue
            text = render_type(type_info, self.options)
            if not text:
                accumulator.skipped += 1
                continue
            accumulator.add(type_info, text)
        self.logger.info(
            "Rendered %d types (%d skipped) across %d assemblies",
            len(accumulator.bodies),
            accumulator.skipped,
            len(accumulator.assemblies),
        )
        return accumulator

    def render(self, accumulator: FileAccumulator) -> str:
        template = self._env.get_template(_TEMPLATE_NAME)
        return template.render(
            namespaces=accumulator.using_namespaces(),
            assembly_info=render_assembly_info(accumulator.assemblies),
            body="".join(accumulator.bodies),
        )

    def assemble(self, types: Iterable[TypeInfo]) -> str:
        return self.render(self.collect(types))


__all__ = [
    "FileAccumulator",
    "FileAssembler",
    "namespace_sort_key",
    "render_assembly_info",
]
