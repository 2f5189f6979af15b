"""
Pytest configuration and shared fixtures.

Provides in-memory and failure-injecting persistence adapters, a plan store,
the lifecycle manager and the aggregator wired to that store.
"""

import pytest

from tcof.core.config import clear_cache
from tcof.core.plans.adapters import MemoryAdapter
from tcof.core.plans.aggregator import ParentAggregator
from tcof.core.plans.lifecycle import TaskLifecycleManager
from tcof.core.plans.store import PlanStore

# ==============================================================================
# Adapter Fixtures
# ==============================================================================


class FlakyAdapter(MemoryAdapter):
    """Memory adapter whose calls can be made to fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_get = False
        self.fail_set = False
        self.fail_delete = False
        self.fail_list = False
        self.set_calls = 0

    async def get(self, key: str) -> str | None:
        if self.fail_get:
            raise ConnectionError("storage unavailable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        self.set_calls += 1
        if self.fail_set:
            raise ConnectionError("storage unavailable")
        await super().set(key, value)

    async def delete(self, key: str) -> None:
        if self.fail_delete:
            raise ConnectionError("storage unavailable")
        await super().delete(key)

    async def list(self, prefix: str) -> list[str]:
        if self.fail_list:
            raise ConnectionError("storage unavailable")
        return await super().list(prefix)


@pytest.fixture
def adapter() -> FlakyAdapter:
    """Provide a memory adapter with failure switches."""
    return FlakyAdapter()


@pytest.fixture
def store(adapter: FlakyAdapter) -> PlanStore:
    """Provide a plan store backed by the flaky memory adapter."""
    return PlanStore(adapter)


@pytest.fixture
def manager(store: PlanStore) -> TaskLifecycleManager:
    return TaskLifecycleManager(store)


@pytest.fixture
def aggregator(store: PlanStore) -> ParentAggregator:
    return ParentAggregator(store)


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config loading away from the real user config and env."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "TCOF_STORAGE_BACKEND",
        "TCOF_DATA_DIR",
        "TCOF_KEY_PREFIX",
        "TCOF_REFERENCE_URL",
        "TCOF_REFERENCE_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()
