from unittest.mock import patch

from idverify.store import redis_conn


@patch("idverify.store.redis_conn.Redis")
def test_client_is_built_once_per_url(mock_redis):
    redis_conn._client.cache_clear()
    try:
        with patch.object(redis_conn.settings, "REDIS_URL", "redis://cache:6379/1"):
            a = redis_conn.get_redis()
            b = redis_conn.get_redis()
        assert a is b
        mock_redis.from_url.assert_called_once_with("redis://cache:6379/1", decode_responses=True, socket_timeout=1.0)
    finally:
        redis_conn._client.cache_clear()


@patch("idverify.store.redis_conn.Redis")
def test_new_url_gets_new_client(mock_redis):
    mock_redis.from_url.side_effect = lambda url, **kw: object()
    redis_conn._client.cache_clear()
    try:
        with patch.object(redis_conn.settings, "REDIS_URL", "redis://a:6379/0"):
            a = redis_conn.get_redis()
        with patch.object(redis_conn.settings, "REDIS_URL", "redis://b:6379/0"):
            b = redis_conn.get_redis()
        assert a is not b
    finally:
        redis_conn._client.cache_clear()
