from __future__ import annotations

import pytest

from buildtimeline.resolvers import reset_resolvers
from buildtimeline.ui.console import Console, set_console


@pytest.fixture(autouse=True)
def _fresh_globals():
    set_console(Console(debug=False))
    reset_resolvers()
    yield
    reset_resolvers()
