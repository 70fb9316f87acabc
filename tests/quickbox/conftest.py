"""Test fixtures for QuickBox.

Provides two levels of test fixtures:
1. Engine tests: ``editor`` / ``sample_editor`` driven by a ``ManualScheduler``
   so coalescing windows are advanced explicitly
2. API tests: ``test_client`` on ``create_api_app()`` without a server
"""

import pytest

from quickbox.editor import Editor
from quickbox.formats import create_sample_document
from quickbox.timers import ManualScheduler

# Longer than any coalescing window used in the tests
SETTLE = 1.0


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual clock, nothing fires until advanced."""
    return ManualScheduler()


@pytest.fixture
def editor(scheduler) -> Editor:
    """Editor on the default startup document (one empty page)."""
    return Editor(scheduler=scheduler)


@pytest.fixture
def sample_editor(scheduler) -> Editor:
    """Editor on the two-page sample document.

    header: box-1 (menu), footer: box-2 (text),
    page-1: box-3 (heading), box-5 (button -> page-2), page-2: box-4 (heading)
    """
    return Editor(create_sample_document(), scheduler=scheduler)


@pytest.fixture
def settle(scheduler):
    """Advance the clock past the coalescing window."""
    def _settle():
        return scheduler.advance(SETTLE)
    return _settle


@pytest.fixture
def test_client():
    """TestClient for FastAPI unit testing without a server."""
    from starlette.testclient import TestClient

    from quickbox.app import create_api_app
    from quickbox.sessions import session_manager

    session_manager.clear()
    app = create_api_app()
    with TestClient(app) as client:
        yield client
    session_manager.clear()
