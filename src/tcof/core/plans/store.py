"""
Plan record store.

Owns the canonical PlanRecord for each plan id: an in-memory cache shadowed
by an asynchronous persistence adapter. The store's lifetime belongs to the
caller (request, session or process), and it can be used as an async
context manager to drop the cache on exit.

Write semantics:
- The cache is updated before the adapter write is awaited, so a ``load``
  issued while the write is in flight sees the new value.
- If the adapter write fails, the cache is put back to its pre-call value
  (unless a later save has already replaced the entry) and the call reports
  failure. A retry with the same input is safe.
- A plan that cannot be read from persistence is never overwritten by a
  default record.
- Adapter failures are logged and never propagate to the caller.

Example:
    >>> store = PlanStore(MemoryAdapter())
    >>> plan_id = await store.create(name="Website relaunch")
    >>> plan = await store.load(plan_id)
    >>> plan.name
    'Website relaunch'
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from tcof.core.config.models import TcofConfig
from tcof.core.plans.adapters import PersistenceAdapter, get_adapter
from tcof.core.plans.exceptions import PlanCorruptedError
from tcof.core.plans.models import PlanRecord, new_id, utc_now

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "tcof_plan_"
LATEST_PLAN_KEY = "tcof_most_recent_plan"

# Field name -> JSON alias, used to normalise patch keys
_PLAN_ALIASES = {
    name: field.alias or name for name, field in PlanRecord.model_fields.items()
}


class PlanStore:
    """
    Cache-backed repository of plan records.

    Args:
        adapter: Persistence adapter holding JSON plan records
        key_prefix: Prefix prepended to plan ids to form storage keys
        clock: Callable returning the current timestamp (for ``lastUpdated``)
        id_factory: Callable allocating new plan ids
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.adapter = adapter
        self.key_prefix = key_prefix
        self._clock = clock
        self._id_factory = id_factory
        self._cache: dict[str, PlanRecord] = {}

    @classmethod
    def from_config(cls, config: TcofConfig) -> "PlanStore":
        """
        Build a store from configuration.

        Args:
            config: Loaded TcofConfig

        Returns:
            PlanStore using the configured adapter and key prefix

        Raises:
            AdapterNotRegisteredError: If the configured backend is unknown
        """
        storage = config.storage
        options: dict[str, Any] = {}
        if storage.backend == "json":
            options["data_dir"] = storage.data_dir
        adapter = get_adapter(storage.backend, **options)
        return cls(adapter, key_prefix=storage.key_prefix)

    async def __aenter__(self) -> "PlanStore":
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.clear_cache()

    def key_for(self, plan_id: str) -> str:
        """Storage key for a plan id."""
        return f"{self.key_prefix}{plan_id}"

    def is_cached(self, plan_id: str) -> bool:
        return plan_id in self._cache

    def evict(self, plan_id: str) -> None:
        """Drop a plan from the in-memory cache without touching persistence."""
        self._cache.pop(plan_id, None)

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _fetch(self, plan_id: str, *, raise_on_error: bool = False) -> PlanRecord | None:
        """
        Read a plan from persistence, bypassing the cache.

        Args:
            plan_id: Plan to read
            raise_on_error: Re-raise adapter failures instead of returning None

        Returns:
            The persisted PlanRecord, or None if absent or the adapter failed

        Raises:
            PlanCorruptedError: If the stored payload is not a valid plan
        """
        key = self.key_for(plan_id)
        try:
            raw = await self.adapter.get(key)
        except Exception as e:
            logger.warning("Failed to load plan %s from persistence: %s", plan_id, e)
            if raise_on_error:
                raise
            return None

        if raw is None:
            return None

        try:
            return PlanRecord.model_validate_json(raw)
        except ValidationError as e:
            raise PlanCorruptedError(plan_id, key, str(e)) from e

    async def create(
        self,
        name: str | None = None,
        description: str | None = None,
    ) -> str | None:
        """
        Create, persist and cache a new empty plan.

        The new plan also becomes the most recent plan.

        Args:
            name: Optional plan name
            description: Optional plan description

        Returns:
            The new plan id, or None if it could not be persisted
        """
        plan = PlanRecord.empty(plan_id=self._id_factory(), name=name, description=description)
        if await self.save(plan.id, plan) is None:
            return None
        await self.set_latest_plan_id(plan.id)
        logger.debug("Created plan %s", plan.id)
        return plan.id

    async def load(self, plan_id: str) -> PlanRecord | None:
        """
        Return the plan, from cache if present, otherwise from persistence.

        The returned object is the cached instance. Callers that mutate it
        should work on a copy and hand it back through ``save``.

        Returns:
            PlanRecord, or None if the plan is unknown or unreachable

        Raises:
            PlanCorruptedError: If the persisted payload is malformed
        """
        cached = self._cache.get(plan_id)
        if cached is not None:
            logger.debug("Plan %s served from cache", plan_id)
            return cached

        plan = await self._fetch(plan_id)
        if plan is None:
            logger.debug("Plan %s not found", plan_id)
            return None

        self._cache[plan_id] = plan
        return plan

    async def save(
        self,
        plan_id: str,
        patch: PlanRecord | Mapping[str, Any],
    ) -> PlanRecord | None:
        """
        Merge a patch onto a plan, stamp it and persist it.

        A PlanRecord patch replaces the whole record. A mapping patch is
        merged shallowly at the top level (field names or JSON aliases);
        ``stages`` is replaced wholesale when supplied. On a cache miss the
        persisted record is used as the merge base, and a fresh default
        record only when persistence has nothing.

        Args:
            plan_id: Plan to save
            patch: Full record or partial top-level patch

        Returns:
            The merged record on success, None if persistence failed (including
            a failed read of an uncached plan, in which case nothing is written)
        """
        now = self._clock()

        if isinstance(patch, PlanRecord):
            merged = patch.model_copy(update={"id": plan_id, "last_updated": now})
        else:
            base = self._cache.get(plan_id)
            if base is None:
                try:
                    base = await self._fetch(plan_id, raise_on_error=True)
                except PlanCorruptedError:
                    raise
                except Exception:
                    # An unreadable record is not an absent one; never overwrite it
                    return None
            if base is None:
                logger.debug("Plan %s unknown, saving onto a default record", plan_id)
                base = PlanRecord.empty(plan_id=plan_id)

            data = base.model_dump(by_alias=True)
            for key, value in patch.items():
                data[_PLAN_ALIASES.get(key, key)] = value
            data["id"] = plan_id
            data["lastUpdated"] = now
            merged = PlanRecord.model_validate(data)

        previous = self._cache.get(plan_id)
        self._cache[plan_id] = merged
        try:
            await self.adapter.set(self.key_for(plan_id), merged.to_json())
        except Exception as e:
            logger.warning("Failed to persist plan %s: %s", plan_id, e)
            # A later save may have replaced our record while the write was pending
            if self._cache.get(plan_id) is merged:
                if previous is None:
                    self._cache.pop(plan_id, None)
                else:
                    self._cache[plan_id] = previous
            return None

        logger.debug("Saved plan %s", plan_id)
        return merged

    async def delete(self, plan_id: str) -> bool:
        """
        Delete a plan from persistence and the cache.

        Returns:
            True if the plan existed and was removed
        """
        key = self.key_for(plan_id)
        try:
            exists = plan_id in self._cache or await self.adapter.get(key) is not None
            if not exists:
                return False
            await self.adapter.delete(key)
        except Exception as e:
            logger.warning("Failed to delete plan %s: %s", plan_id, e)
            return False

        self._cache.pop(plan_id, None)
        if await self.get_latest_plan_id() == plan_id:
            await self._set_raw(LATEST_PLAN_KEY, None)
        return True

    async def list_plan_ids(self) -> list[str]:
        """
        List known plan ids: persisted ones first, then cache-only ones.

        Returns:
            De-duplicated plan ids in first-seen order
        """
        try:
            keys = await self.adapter.list(self.key_prefix)
        except Exception as e:
            logger.warning("Failed to list plans: %s", e)
            keys = []
        persisted = [key[len(self.key_prefix):] for key in keys if key != LATEST_PLAN_KEY]
        return list(dict.fromkeys([*persisted, *self._cache]))

    async def get_latest_plan_id(self) -> str | None:
        """Id of the most recently created or selected plan, if any."""
        try:
            value = await self.adapter.get(LATEST_PLAN_KEY)
        except Exception as e:
            logger.warning("Failed to read most recent plan id: %s", e)
            return None
        return value or None

    async def set_latest_plan_id(self, plan_id: str) -> bool:
        """Record ``plan_id`` as the most recent plan."""
        return await self._set_raw(LATEST_PLAN_KEY, plan_id)

    async def _set_raw(self, key: str, value: str | None) -> bool:
        try:
            if value is None:
                await self.adapter.delete(key)
            else:
                await self.adapter.set(key, value)
        except Exception as e:
            logger.warning("Failed to write %s: %s", key, e)
            return False
        return True
