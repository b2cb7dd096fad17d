"""Graph document loading."""

from .loader import GraphBuilder, GraphLoadError, build_graph, load_graph
from .typeref import TypeRefSpec, TypeRefSyntaxError, parse_type_ref

__all__ = [
    "GraphBuilder",
    "GraphLoadError",
    "TypeRefSpec",
    "TypeRefSyntaxError",
    "build_graph",
    "load_graph",
    "parse_type_ref",
]
