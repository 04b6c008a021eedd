from __future__ import annotations

from collections.abc import Generator

import pytest


@pytest.fixture(autouse=True)
def _fresh_processor() -> Generator[None, None, None]:
    """Every test starts with no tracked games in the process-wide processor."""

    from cauldron.runtime import reset_processor_for_tests

    reset_processor_for_tests()
    yield
    reset_processor_for_tests()


@pytest.fixture()
def client_and_redis():
    """FastAPI TestClient with fakeredis standing in for the event stream sink."""

    import fakeredis
    from fastapi.testclient import TestClient

    from cauldron.api.deps import get_redis
    from cauldron.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
