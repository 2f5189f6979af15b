"""
Reference data client.

Fetches preset heuristics and TCOF success factors from the reference data
API. The API is optional: any network, HTTP or payload error is logged and
the embedded defaults are returned instead, so plan creation never depends
on the endpoint being reachable.

Example:
    >>> client = ReferenceDataClient(base_url="https://tcof.example.com")
    >>> data = await client.load()
    >>> [h.text for h in data.preset_heuristics][:1]
    ['Start slow to go fast']
"""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter

from tcof.core.config.models import ReferenceConfig, TcofConfig
from tcof.core.reference.defaults import DEFAULT_PRESET_HEURISTICS, DEFAULT_SUCCESS_FACTORS
from tcof.core.reference.models import (
    PresetHeuristic,
    ReferenceData,
    ReferenceSource,
    SuccessFactor,
)

logger = logging.getLogger(__name__)

HEURISTICS_PATH = "/api/admin/preset-heuristics"
FACTORS_PATH = "/api/admin/tcof-factors"

_heuristics_adapter = TypeAdapter(list[PresetHeuristic])
_factors_adapter = TypeAdapter(list[SuccessFactor])


class ReferenceDataClient:
    """
    Read-only client for the reference data API.

    Args:
        base_url: API base URL; None disables remote fetching
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config: TcofConfig | ReferenceConfig) -> "ReferenceDataClient":
        reference = config.reference if isinstance(config, TcofConfig) else config
        return cls(base_url=reference.base_url, timeout=reference.timeout)

    async def _get_json(self, path: str) -> Any:
        """
        GET a JSON document from the reference API.

        Raises:
            httpx.HTTPError: On network failure or non-2xx status
            ValueError: If the body is not valid JSON
        """
        async with httpx.AsyncClient(
            base_url=self.base_url or "",
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.get(path)
            response.raise_for_status()
            return response.json()

    async def fetch_preset_heuristics(self) -> tuple[list[PresetHeuristic], ReferenceSource]:
        """
        Fetch preset heuristics, falling back to the embedded set.

        Returns:
            Tuple of (heuristics, where they came from)
        """
        if not self.base_url:
            return list(DEFAULT_PRESET_HEURISTICS), ReferenceSource.EMBEDDED

        try:
            payload = await self._get_json(HEURISTICS_PATH)
            heuristics = _heuristics_adapter.validate_python(payload)
        except (httpx.HTTPError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            logger.warning("Preset heuristics unavailable, using embedded defaults: %s", e)
            return list(DEFAULT_PRESET_HEURISTICS), ReferenceSource.EMBEDDED

        return heuristics, ReferenceSource.REMOTE

    async def fetch_success_factors(self) -> tuple[list[SuccessFactor], ReferenceSource]:
        """
        Fetch TCOF success factors, falling back to the embedded set.

        Returns:
            Tuple of (factors, where they came from)
        """
        if not self.base_url:
            return list(DEFAULT_SUCCESS_FACTORS), ReferenceSource.EMBEDDED

        try:
            payload = await self._get_json(FACTORS_PATH)
            factors = _factors_adapter.validate_python(payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Success factors unavailable, using embedded defaults: %s", e)
            return list(DEFAULT_SUCCESS_FACTORS), ReferenceSource.EMBEDDED

        return factors, ReferenceSource.REMOTE

    async def load(self) -> ReferenceData:
        """Fetch all reference data needed to seed a plan."""
        heuristics, heuristics_source = await self.fetch_preset_heuristics()
        factors, factors_source = await self.fetch_success_factors()
        return ReferenceData(
            preset_heuristics=heuristics,
            success_factors=factors,
            heuristics_source=heuristics_source,
            factors_source=factors_source,
        )
