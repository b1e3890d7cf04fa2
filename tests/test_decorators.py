"""
Tests for the @cached decorator.

Run with: pytest tests/test_decorators.py -v
"""

from radcache import cached, codecs
from radcache.decorators import _generate_cache_key


class TestGenerateCacheKey:
    def test_positional(self):
        assert _generate_cache_key("user:{0}:scores", (123,), {}) == "user:123:scores"

    def test_named(self):
        key = _generate_cache_key("user:{user_id}:matches:{limit}", (), {"user_id": 1, "limit": 10})

        assert key == "user:1:matches:10"

    def test_hash_fallback(self):
        key = _generate_cache_key("user:{missing}", (1,), {})

        assert key.startswith("user:{missing}:")
        assert len(key.rsplit(":", 1)[1]) == 8


class TestCached:
    """Tests for read-through caching of function results."""

    def test_caches_result_under_prefixed_key(self, cache, fake_redis):
        calls = []

        @cached(cache, "user:{0}:scores", ttl=300)
        def get_scores(user_id):
            calls.append(user_id)
            return {"python": 0.9}

        assert get_scores(1) == {"python": 0.9}
        assert get_scores(1) == {"python": 0.9}
        assert calls == [1]
        assert "test_user:1:scores" in fake_redis._data

    def test_callable_key_and_codec(self, cache, fake_redis):
        @cached(cache, lambda n: f"square:{n}", codec=codecs.INT)
        def square(n):
            return n * n

        assert square(4) == 16
        assert fake_redis._data["test_square:4"] == b"16"

    def test_skip_cache_if(self, cache, fake_redis):
        calls = []

        @cached(cache, "v:{0}", skip_cache_if=lambda x: x < 0)
        def value(x):
            calls.append(x)
            return x

        value(-1)
        value(-1)

        assert calls == [-1, -1]
        assert fake_redis._data == {}

    def test_invalidate(self, cache):
        calls = []

        @cached(cache, "v:{0}")
        def value(x):
            calls.append(x)
            return x

        value(2)
        assert value.invalidate(2) is True
        assert value.invalidate(2) is False
        value(2)

        assert calls == [2, 2]
        assert value.cache_key_template == "v:{0}"
        assert value.cache_ttl is None
