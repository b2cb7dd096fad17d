"""Write reconstructed declarations to files or streams."""

from __future__ import annotations

import re
from collections import OrderedDict
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Sequence, TextIO

from .config import DumpOptions
from .errors import SinkFailure
from .logging import get_logger
from .models import Assembly, TypeInfo
from .render.assembler import FileAssembler

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.\-]+")


@contextmanager
def open_sink(path: Path) -> Iterator[TextIO]:
    """Open ``path`` for writing, converting I/O failures into :class:`SinkFailure`."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = path.open("w", encoding="utf-8", newline="\n")
    except OSError as exc:
        raise SinkFailure(f"Cannot create output file {path}: {exc}") from exc
    try:
        yield handle
    except OSError as exc:
        raise SinkFailure(f"Failed writing {path}: {exc}") from exc
    finally:
        handle.close()


def all_types(assemblies: Iterable[Assembly]) -> List[TypeInfo]:
    """Every type defined by ``assemblies``, nested types included."""
    return [type_info for assembly in assemblies for type_info in assembly.defined_types]


def _file_stem(name: str) -> str:
    return _UNSAFE_FILENAME.sub("_", name).strip("_") or "-"


class Dumper:
    """Renders metadata graphs into C# declaration files."""

    def __init__(self, options: DumpOptions | None = None, assembler: FileAssembler | None = None) -> None:
        self.options = options or DumpOptions()
        self.assembler = assembler or FileAssembler(self.options)
        self.logger = get_logger("dumper")

    def render(self, types: Iterable[TypeInfo]) -> str:
        return self.assembler.assemble(types)

    def write(self, types: Iterable[TypeInfo], sink: TextIO) -> None:
        """Render ``types`` and write the text to an open stream."""
        text = self.render(types)
        try:
            sink.write(text)
        except OSError as exc:
            raise SinkFailure(f"Failed writing output stream: {exc}") from exc

    def write_file(self, types: Iterable[TypeInfo], out_path: Path) -> Path:
        # The sink is opened only once the whole pass has rendered.
        text = self.render(types)
        with open_sink(out_path) as sink:
            sink.write(text)
        self.logger.info("Wrote %s", out_path)
        return out_path

    def write_single_file(self, assemblies: Sequence[Assembly], out_path: Path) -> Path:
        return self.write_file(all_types(assemblies), out_path)

    def write_files_by_namespace(self, assemblies: Sequence[Assembly], out_dir: Path) -> List[Path]:
        """One file per namespace, named after it (``-.cs`` for the global namespace)."""
        groups: Dict[str, List[TypeInfo]] = OrderedDict()
        for type_info in all_types(assemblies):
            if type_info.is_nested or self.options.is_excluded(type_info.namespace):
                continue
            groups.setdefault(type_info.namespace, []).append(type_info)
        written = []
        for namespace, types in groups.items():
            stem = _file_stem(namespace) if namespace else "-"
            written.append(self.write_file(types, out_dir / f"{stem}.cs"))
        return written

    def write_files_by_assembly(self, assemblies: Sequence[Assembly], out_dir: Path) -> List[Path]:
        """One file per assembly, named after the assembly's simple name."""
        written = []
        for assembly in assemblies:
            types = [
                type_info
                for type_info in assembly.defined_types
                if not type_info.is_nested and not self.options.is_excluded(type_info.namespace)
            ]
            if not types:
                continue
            stem = _file_stem(Path(assembly.name).stem if assembly.name.endswith(".dll") else assembly.name)
            written.append(self.write_file(types, out_dir / f"{stem}.cs"))
        return written

    def dump(self, assemblies: Sequence[Assembly], output: Path, *, layout: str = "single") -> List[Path]:
        """Write ``assemblies`` using the given layout (single, namespace or assembly)."""
        if layout == "single":
            return [self.write_single_file(assemblies, output)]
        if layout == "namespace":
            return self.write_files_by_namespace(assemblies, output)
        if layout == "assembly":
            return self.write_files_by_assembly(assemblies, output)
        raise ValueError(f"Unknown output layout '{layout}'")


__all__ = ["Dumper", "all_types", "open_sink"]
