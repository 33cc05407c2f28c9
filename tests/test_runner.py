"""
Tests for the blocking resolver used by the Streamlit UI.
"""
from contextlib import asynccontextmanager

import pytest

from pricelist_resolver.backend import BlockingResolver, open_backend
from pricelist_resolver.config.settings import Settings


@pytest.fixture
def runner(tmp_path, sample_snapshot_path):
    settings = Settings(project_root=tmp_path, backend='snapshot', snapshot_path=sample_snapshot_path)
    blocking = BlockingResolver(open_backend(settings))
    yield blocking
    blocking.close()


def test_resolves_from_sync_code(runner):
    result = runner.resolve("7501000000010")
    assert result.product_name == "Classic Tee Red XL"
    assert runner.describe()["backend"] == "snapshot"


def test_backend_is_reused_across_lookups(runner):
    backend = runner.backend
    runner.resolve("7501000000010")
    assert runner.resolve("0000000000000") is None
    assert runner.backend is backend


def test_close_releases_backend(tmp_path, sample_snapshot_path):
    events = []

    @asynccontextmanager
    async def tracked():
        settings = Settings(project_root=tmp_path, backend='snapshot', snapshot_path=sample_snapshot_path)
        async with open_backend(settings) as backend:
            events.append("open")
            yield backend
        events.append("closed")

    blocking = BlockingResolver(tracked())
    blocking.close()
    blocking.close()

    assert events == ["open", "closed"]
    assert blocking.closed
    with pytest.raises(RuntimeError):
        blocking.resolve("7501000000010")


def test_open_failure_propagates(tmp_path):
    settings = Settings(project_root=tmp_path, backend='snapshot', snapshot_path=tmp_path / 'missing.json')
    with pytest.raises(FileNotFoundError):
        BlockingResolver(open_backend(settings))
