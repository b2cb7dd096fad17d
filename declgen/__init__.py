"""Reconstruct C# declaration source from an ahead-of-time compiled metadata graph."""

from .config import DumpOptions
from .dumper import Dumper

__all__ = ["DumpOptions", "Dumper"]

__version__ = "0.1.0"
