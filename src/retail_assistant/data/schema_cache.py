"""Once-initialized schema cache.

The first successful describe() is kept for the lifetime of the cache. A
provider failure returns the built-in fallback schema without caching it, so
the next call tries the provider again. There is no other invalidation.
"""

from __future__ import annotations

import asyncio

from retail_assistant.config.constants import FALLBACK_RETAIL_SCHEMA
from retail_assistant.models.domain import SchemaDescriptor
from retail_assistant.observability.logger import get_logger
from retail_assistant.protocols.schema_provider import SchemaProvider

logger = get_logger("schema_cache")


class SchemaCache:
    def __init__(
        self,
        provider: SchemaProvider | None,
        fallback_text: str = FALLBACK_RETAIL_SCHEMA,
    ) -> None:
        self._provider = provider
        self._fallback = SchemaDescriptor(text=fallback_text)
        self._descriptor: SchemaDescriptor | None = None
        self._lock = asyncio.Lock()

    @property
    def populated(self) -> bool:
        return self._descriptor is not None

    async def get(self) -> SchemaDescriptor:
        if self._descriptor is not None:
            return self._descriptor

        async with self._lock:
            if self._descriptor is not None:
                return self._descriptor
            if self._provider is None:
                return self._fallback
            try:
                descriptor = await self._provider.describe()
            except Exception as e:
                logger.warning("schema_provider_unavailable", error=str(e))
                return self._fallback

            self._descriptor = descriptor
            logger.info("schema_cached", tables=len(descriptor.tables))
            return descriptor
