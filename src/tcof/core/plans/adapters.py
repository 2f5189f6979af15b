"""
Persistence adapter protocol and registry.

The plan store persists JSON-serialised plan records through a key-value
adapter. Adapters are asynchronous and may fail at any call; the store
converts failures into failure results rather than propagating them.

Two adapters ship with the engine:
- ``memory``: a process-local dict, used for tests and ephemeral sessions
- ``json``: one JSON file per key in a data directory, written atomically
"""

import asyncio
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote, unquote

from tcof.core.plans.exceptions import AdapterNotRegisteredError


@runtime_checkable
class PersistenceAdapter(Protocol):
    """
    Protocol for key-value persistence adapters.

    Values are JSON strings. Every method is a coroutine and may raise on
    transient failure.
    """

    async def get(self, key: str) -> str | None:
        """
        Fetch the value stored under ``key``.

        Returns:
            The stored string, or None if the key is absent
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key``. Removing an absent key is not an error."""
        ...

    async def list(self, prefix: str) -> list[str]:
        """Return every stored key starting with ``prefix``."""
        ...


# Adapter registry
_adapters: dict[str, type[Any]] = {}


def register_adapter(name: str) -> Callable[[type[Any]], type[Any]]:
    """
    Decorator to register a persistence adapter implementation.

    Usage:
        @register_adapter("memory")
        class MemoryAdapter:
            async def get(self, key): ...

    Args:
        name: Adapter name used in configuration (e.g. "memory", "json")

    Returns:
        Decorator function
    """

    def decorator(adapter_class: type[Any]) -> type[Any]:
        _adapters[name] = adapter_class
        return adapter_class

    return decorator


def get_adapter(name: str, **options: Any) -> PersistenceAdapter:
    """
    Instantiate a registered adapter.

    Args:
        name: Registered adapter name
        **options: Constructor keyword arguments for the adapter

    Returns:
        Adapter instance

    Raises:
        AdapterNotRegisteredError: If no adapter is registered under ``name``
    """
    adapter_class = _adapters.get(name)
    if adapter_class is None:
        raise AdapterNotRegisteredError(name, list_adapters())
    adapter: PersistenceAdapter = adapter_class(**options)
    return adapter


def list_adapters() -> list[str]:
    """List all registered adapter names."""
    return list(_adapters.keys())


@register_adapter("memory")
class MemoryAdapter:
    """
    Adapter backed by a plain dict.

    Example:
        >>> adapter = MemoryAdapter()
        >>> await adapter.set("tcof_plan_1", "{}")
        >>> await adapter.list("tcof_plan_")
        ['tcof_plan_1']
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)

    async def list(self, prefix: str) -> list[str]:
        return [key for key in self.data if key.startswith(prefix)]


@register_adapter("json")
class JsonFileAdapter:
    """
    Adapter storing each key as a JSON file in a data directory.

    Keys are percent-encoded into file names. Writes go to a temporary file
    that is atomically renamed over the target, so a failed write never
    leaves a truncated record behind. Blocking file IO runs in a worker
    thread.

    Example:
        >>> adapter = JsonFileAdapter(Path(".tcof/plans"))
        >>> await adapter.set("tcof_plan_1", '{"id": "1"}')
        >>> (Path(".tcof/plans") / "tcof_plan_1.json").exists()
        True
    """

    SUFFIX = ".json"

    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)

    def _path_for(self, key: str) -> Path:
        return self.data_dir / f"{quote(key, safe='')}{self.SUFFIX}"

    def _read(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8").removesuffix("\n")

    def _write(self, key: str, value: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=self.data_dir, prefix=".tcof_", suffix=".json.tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.write("\n")
            os.replace(temp_path, self._path_for(key))
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def _remove(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    def _keys(self, prefix: str) -> list[str]:
        if not self.data_dir.exists():
            return []
        keys = [
            unquote(path.name[: -len(self.SUFFIX)])
            for path in sorted(self.data_dir.glob(f"*{self.SUFFIX}"))
            if not path.name.startswith(".")
        ]
        return [key for key in keys if key.startswith(prefix)]

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)

    async def list(self, prefix: str) -> list[str]:
        return await asyncio.to_thread(self._keys, prefix)
