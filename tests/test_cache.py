"""Tests for the translation cache."""

import threading

from bilingual_srt.cache import DEFAULT_TTL, TranslationCache, cache_key


class FakeClock:

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestTranslationCache:

    def test_set_and_get(self):
        cache = TranslationCache()
        cache.set("google:Hello", "你好")
        assert cache.get("google:Hello") == "你好"
        assert cache.get("google:hello") is None

    def test_zero_ttl_is_absent(self):
        cache = TranslationCache()
        cache.set("k", "v", ttl=0)
        assert cache.get("k") is None

    def test_expiry_evicts_on_read(self):
        clock = FakeClock()
        cache = TranslationCache(clock=clock)
        cache.set("k", "v", ttl=10)
        clock.now += 9
        assert cache.get("k") == "v"
        clock.now += 1
        assert cache.get("k") is None
        assert cache.size() == 0

    def test_default_ttl_is_a_day(self):
        clock = FakeClock()
        cache = TranslationCache(clock=clock)
        cache.set("k", "v")
        clock.now += DEFAULT_TTL - 1
        assert cache.get("k") == "v"
        clock.now += 1
        assert cache.get("k") is None

    def test_overwrite_refreshes_expiry(self):
        clock = FakeClock()
        cache = TranslationCache(clock=clock)
        cache.set("k", "old", ttl=10)
        clock.now += 8
        cache.set("k", "new", ttl=10)
        clock.now += 8
        assert cache.get("k") == "new"

    def test_delete_clear_size(self):
        cache = TranslationCache()
        cache.set("a", "1")
        cache.set("b", "2")
        assert cache.size() == 2
        assert len(cache) == 2
        cache.delete("a")
        cache.delete("missing")
        assert cache.size() == 1
        cache.clear()
        assert cache.size() == 0

    def test_sweep_at_multiple_of_hundred(self):
        clock = FakeClock()
        cache = TranslationCache(clock=clock)
        for i in range(50):
            cache.set(f"old{i}", "v", ttl=1)
        clock.now += 5
        for i in range(49):
            cache.set(f"new{i}", "v")
        assert cache.size() == 99
        # 第 100 次写入触发清理
        cache.set("new49", "v")
        assert cache.size() == 50

    def test_concurrent_writes(self):
        cache = TranslationCache()

        def worker(n):
            for i in range(200):
                cache.set(f"{n}:{i}", str(i))
                cache.get(f"{n}:{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert cache.size() == 800

    def test_fresh_instances_are_empty(self):
        TranslationCache().set("k", "v")
        assert TranslationCache().size() == 0


def test_cache_key():
    assert cache_key("google", "Hello ") == "google:Hello "
