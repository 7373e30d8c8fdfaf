"""
Pytest configuration and fixtures for engine tests
"""
import os

# Set minimal test environment before the settings module is imported
os.environ["ENVIRONMENT"] = "testing"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["FEVER_TIMER_ENABLED"] = "false"

from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport

from adrenaline.gamification import AdrenalineComposer
from adrenaline.storage import InMemoryStore

from fakes import FakeClock, FakeScheduler, ScriptedRandom


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def make_composer(store, clock, rng, scheduler):
    """Build composers sharing the test store, clock, rng and scheduler"""

    def _make(**overrides):
        kwargs = dict(
            store=store,
            storage_key="test-adrenaline",
            clock=clock,
            rng=rng,
            scheduler=scheduler,
            critical_base_rate=0.05,
            fever_trigger_rate=0.05,
        )
        kwargs.update(overrides)
        return AdrenalineComposer(**kwargs)

    return _make


@pytest.fixture
def composer(make_composer):
    return make_composer()


@pytest.fixture
async def client(composer) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to an app serving the ``composer`` fixture"""
    from adrenaline.main import create_app

    app = create_app(composer=composer)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
