"""Tests for cache decorator key generation, tagging and invalidation."""

from uuid import uuid4

import pytest

from src.cache import cached, invalidate_user_auth_cache
from src.cache import decorator as cache_module
from src.core.context import AuthContext
from src.database.models import StaffRole


@pytest.fixture
def memory_cache(monkeypatch):
    """Replace the Redis-backed helpers with an in-process store."""
    store: dict[str, object] = {}
    tags: dict[str, set[str]] = {}

    async def _get(key):
        return store.get(key)

    async def _set(key, value, ttl, extra_tags=None):
        store[key] = value
        for tag in (extra_tags or []) + cache_module._extract_tags_from_result(value):
            tags.setdefault(tag, set()).add(key)
        return True

    async def _invalidate(tag):
        keys = tags.pop(tag, set())
        for key in keys:
            store.pop(key, None)
        return len(keys)

    monkeypatch.setattr(cache_module, "_get_cache", _get)
    monkeypatch.setattr(cache_module, "_set_cache", _set)
    monkeypatch.setattr(cache_module, "_invalidate_by_tag", _invalidate)
    return store


@pytest.mark.asyncio
async def test_cache_decorator_without_backend_calls_through():
    """Cache is disabled in tests, so every call executes the function."""
    call_count = 0

    @cached(ttl=60)
    async def get_value(param: str) -> str:
        nonlocal call_count
        call_count += 1
        return f"result-{param}"

    assert await get_value("test") == "result-test"
    assert await get_value("test") == "result-test"
    assert call_count == 2


@pytest.mark.asyncio
async def test_cache_decorator_caches_result(memory_cache):
    call_count = 0

    @cached(ttl=60)
    async def get_value(param: str) -> str:
        nonlocal call_count
        call_count += 1
        return f"result-{param}"

    await get_value("a")
    await get_value("a")
    await get_value("b")

    assert call_count == 2
    assert len(memory_cache) == 2


def test_cache_key_skips_non_simple_arguments():
    async def load(db, token):
        return None

    key = cache_module._generate_cache_key(load, (object(), "abc"), {})

    assert key.startswith("cache:")
    assert key.endswith(":abc")
    assert "object" not in key


def test_cache_key_hashes_long_values():
    async def load(db, token):
        return None

    token = "x" * 400
    key = cache_module._generate_cache_key(load, (None, token), {})

    assert token not in key
    assert key == cache_module._generate_cache_key(load, (None, token), {})
    assert key != cache_module._generate_cache_key(load, (None, "y" * 400), {})


def test_tags_from_kwargs_and_results():
    user_id = uuid4()
    organization_id = uuid4()
    context = AuthContext(
        user_id=user_id, organization_id=organization_id, role=StaffRole.PHARMACIST
    )

    assert cache_module._extract_tags((), {"user_id": user_id}) == [f"user:{user_id}"]
    assert cache_module._extract_tags((), {"organization_id": organization_id}) == [
        f"org:{organization_id}"
    ]
    assert cache_module._extract_tags_from_result(context) == [
        f"user:{user_id}",
        f"org:{organization_id}",
    ]
    assert cache_module._extract_tags_from_result({"user_id": user_id}) == []


@pytest.mark.asyncio
async def test_invalidate_user_auth_cache_evicts_cached_context(memory_cache):
    user_id = uuid4()
    call_count = 0

    @cached(ttl=60)
    async def resolve(token: str) -> AuthContext:
        nonlocal call_count
        call_count += 1
        return AuthContext(user_id=user_id, organization_id=uuid4(), role=StaffRole.PHARMACIST)

    await resolve("token")
    await resolve("token")
    assert call_count == 1

    assert await invalidate_user_auth_cache(user_id) == 1

    await resolve("token")
    assert call_count == 2
