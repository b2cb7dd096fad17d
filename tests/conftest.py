from __future__ import annotations

import pytest

from declgen.config import DumpOptions
from declgen.render.members import RenderContext


@pytest.fixture
def options() -> DumpOptions:
    """Default render options."""
    return DumpOptions()


@pytest.fixture
def ctx(options: DumpOptions) -> RenderContext:
    """A top-level render context with default options."""
    return RenderContext(options=options)
