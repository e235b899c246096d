"""Tests for the once-initialized schema cache."""

import asyncio

from retail_assistant.config.constants import FALLBACK_RETAIL_SCHEMA
from retail_assistant.data.schema_cache import SchemaCache
from tests.fakes import FakeSchemaProvider


async def test_caches_first_success():
    provider = FakeSchemaProvider()
    cache = SchemaCache(provider)
    first = await cache.get()
    second = await cache.get()
    assert first is second
    assert provider.calls == 1
    assert cache.populated


async def test_concurrent_callers_describe_once():
    provider = FakeSchemaProvider()
    cache = SchemaCache(provider)
    results = await asyncio.gather(*(cache.get() for _ in range(5)))
    assert provider.calls == 1
    assert all(r is results[0] for r in results)


async def test_failure_returns_fallback_without_caching():
    provider = FakeSchemaProvider(fail=True)
    cache = SchemaCache(provider)
    descriptor = await cache.get()
    assert descriptor.text == FALLBACK_RETAIL_SCHEMA
    assert not cache.populated

    provider.fail = False
    descriptor = await cache.get()
    assert descriptor is provider.descriptor
    assert provider.calls == 2


async def test_no_provider_uses_fallback():
    cache = SchemaCache(None)
    assert (await cache.get()).text == FALLBACK_RETAIL_SCHEMA
