from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from adeferred.scheduler import ManualScheduler, get_scheduler, set_scheduler

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Create a deterministic scheduler driven by the test."""
    return ManualScheduler()


@pytest.fixture
def default_scheduler() -> Generator[None, None, None]:
    """Restore the default scheduler after the test."""
    previous = get_scheduler()
    yield
    set_scheduler(previous)
