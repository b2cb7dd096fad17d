"""Declaration renderers for types, members and attributes."""

from .assembler import FileAccumulator, FileAssembler
from .members import MemberKind, RenderContext
from .types import render_type

__all__ = ["FileAccumulator", "FileAssembler", "MemberKind", "RenderContext", "render_type"]
