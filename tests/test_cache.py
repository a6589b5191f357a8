"""Tests for the disk cache decorator."""

import pytest
from addon_gallery.cache import cache_stats, cached, clear_cache


class TestCached:
    """Caching plain and async functions."""

    def test_sync_results_are_cached(self):
        calls = []

        @cached(key_prefix="test")
        def double(x):
            calls.append(x)
            return x * 2

        assert double(2) == 4
        assert double(2) == 4
        assert double(3) == 6
        assert calls == [2, 3]

    @pytest.mark.asyncio
    async def test_async_results_are_cached(self):
        calls = []

        @cached(key_prefix="test", ignore_kwargs=["client"])
        async def fetch(name, *, client=None):
            calls.append(name)
            return f"readme of {name}"

        assert await fetch("a", client=object()) == "readme of a"
        assert await fetch("a", client=object()) == "readme of a"
        assert calls == ["a"]

    @pytest.mark.asyncio
    async def test_none_is_not_cached(self):
        calls = []

        @cached(key_prefix="test")
        async def missing(name):
            calls.append(name)
            return None

        assert await missing("x") is None
        assert await missing("x") is None
        assert calls == ["x", "x"]

    def test_clear_cache(self):
        @cached(key_prefix="test")
        def value():
            return "v"

        value()
        assert cache_stats()["size"] == 1
        clear_cache()
        assert cache_stats()["size"] == 0
