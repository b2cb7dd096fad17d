"""Error taxonomy for declaration rendering."""

from __future__ import annotations


class DeclgenError(RuntimeError):
    """Base class for declgen failures."""


class RenderError(DeclgenError):
    """A single member could not be rendered; the owning type omits it."""


class MalformedGraphError(RenderError):
    """A relationship the grammar requires is missing from the graph."""


class UnsupportedConstructError(RenderError):
    """The graph holds a shape the renderers have no rule for."""


class SinkFailure(DeclgenError):
    """The output destination could not be created or written."""


__all__ = [
    "DeclgenError",
    "MalformedGraphError",
    "RenderError",
    "SinkFailure",
    "UnsupportedConstructError",
]
