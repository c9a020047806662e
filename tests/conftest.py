from __future__ import annotations

import itertools
from typing import Callable

import pytest


@pytest.fixture
def id_generator() -> Callable[[], str]:
    """Deterministic replacement for uuid4: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"
