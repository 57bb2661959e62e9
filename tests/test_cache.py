# tests/test_cache.py

"""
Tests for caching functionality.
"""

from unittest.mock import patch

from core.cache import (
    SimpleCache,
    cache_delete,
    cache_get,
    cache_set,
    invalidate_user,
    user_key,
)


def test_cache_set_and_get():
    cache_set("test_key", "test_value", ttl_seconds=60)

    assert cache_get("test_key") == "test_value"


def test_cache_expiration():
    """Entries disappear once the monotonic clock passes their TTL."""
    with patch("core.cache.time.monotonic", return_value=1000.0):
        cache_set("expiring_key", "value", ttl_seconds=300)

    with patch("core.cache.time.monotonic", return_value=1299.0):
        assert cache_get("expiring_key") == "value"

    with patch("core.cache.time.monotonic", return_value=1300.0):
        assert cache_get("expiring_key") is None


def test_cache_delete():
    cache_set("delete_key", "delete_value")
    cache_delete("delete_key")

    assert cache_get("delete_key") is None


def test_invalidate_user_only_drops_that_user():
    cache_set(user_key("condominiums", "user-1", "list"), ["a"])
    cache_set(user_key("condominiums", "user-10", "list"), ["b"])
    cache_set(user_key("suppliers", "user-1", "list"), ["c"])

    invalidate_user("condominiums", "user-1")

    assert cache_get(user_key("condominiums", "user-1", "list")) is None
    assert cache_get(user_key("condominiums", "user-10", "list")) == ["b"]
    assert cache_get(user_key("suppliers", "user-1", "list")) == ["c"]


def test_simple_cache_delete_prefix_counts():
    cache = SimpleCache()
    cache.set("a:1", 1)
    cache.set("a:2", 2)
    cache.set("b:1", 3)

    assert cache.delete_prefix("a:") == 2
    assert cache.size() == 1
