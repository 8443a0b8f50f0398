"""
Tests for the split caches.
"""

import pytest

from deexcitation_mc.physics.cache import LFUCache, SimpleCache


class TestSimpleCache:
    def test_unbounded(self):
        cache = SimpleCache()
        for i in range(1000):
            cache.insert(i, i * i)
        assert len(cache) == 1000
        assert cache.get(31) == 961

    def test_missing_key(self):
        cache = SimpleCache()
        assert cache.get('x') is None
        assert cache.get('x', 5) == 5

    def test_clear(self):
        cache = SimpleCache()
        cache.insert('a', 1)
        cache.clear()
        assert 'a' not in cache


class TestLFUCache:
    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            LFUCache(0)

    def test_evicts_least_frequently_used(self):
        cache = LFUCache(2)
        cache.insert('a', 1)
        cache.insert('b', 2)
        cache.get('a')
        cache.get('a')
        cache.get('b')
        cache.insert('c', 3)
        assert 'a' in cache
        assert 'b' not in cache
        assert cache.get('c') == 3

    def test_ties_evict_oldest(self):
        cache = LFUCache(2)
        cache.insert('a', 1)
        cache.insert('b', 2)
        cache.insert('c', 3)
        assert 'a' not in cache
        assert 'b' in cache and 'c' in cache

    def test_hits(self):
        cache = LFUCache(3)
        cache.insert('a', 1)
        cache.get('a')
        cache.get('a')
        assert cache.hits('a') == 2
        assert cache.hits('missing') is None

    def test_update_keeps_size(self):
        cache = LFUCache(2)
        cache.insert('a', 1)
        cache.insert('a', 2)
        assert len(cache) == 1
        assert cache.get('a') == 2
