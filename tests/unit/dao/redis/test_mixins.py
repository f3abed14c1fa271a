"""Unit tests for Redis-based mixins.

Test coverage includes:
    1. Connecting to a keyspace
       - Ensures each DAO keyspace selects its own Redis database from the config section.
       - Ensures keyspaces fall back to databases 0 (codes) and 1 (limits).
       - Ensures a pre-initialized client is used as is, with the given key prefix.
       - Confirms a missing config section or non-integer indexes raise BadConfigurationError.
    2. Healthcheck behavior
       - Healthcheck pings Redis at construction and on demand.
       - Missed pong from Redis raises DataStoreError naming host, port, db and keyspace.
"""

from unittest.mock import MagicMock, patch

import pytest
import redis

from urlshortener.constants import Keyspace
from urlshortener.exceptions import BadConfigurationError
from urlshortener.dao.exceptions import DataStoreError
from urlshortener.dao.redis import ShortURLRedisDAO, RateLimitRedisDAO, StatsRedisDAO
from urlshortener.dao.redis.mixins import RedisClientMixin, keyspace_db


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def redis_config():
    return {'host': 'redis', 'port': '6380', 'codes_db': 3, 'limits_db': '4', 'username': 'default', 'password': 'password'}


@pytest.fixture
def redis_client():
    _redis_client = MagicMock(
        spec=redis.Redis, connection_pool=MagicMock(spec=redis.ConnectionPool, connection_kwargs={'host': 'redis', 'port': 6379, 'db': 1})
    )
    _redis_client.ping.return_value = True
    return _redis_client


@pytest.fixture
def redis_mock():
    with patch('urlshortener.dao.redis.mixins.redis.Redis', autospec=True) as _redis_mock:
        _redis_mock.return_value.ping.return_value = True
        yield _redis_mock


# -------------------------------
# 1. Connecting to a keyspace
# -------------------------------


@pytest.mark.parametrize(
    'dao_cls, db',
    [
        (ShortURLRedisDAO, 3),
        (RateLimitRedisDAO, 4),
        (StatsRedisDAO, 4),
    ],
)
def test_dao_connects_to_its_keyspace(redis_mock, redis_config, dao_cls, db):
    """Ensure short codes and quotas land in different databases."""
    dao = dao_cls(redis_config, prefix='testapp:test')

    redis_mock.assert_called_once_with(host='redis', port=6380, db=db, username='default', password='password', decode_responses=True)
    assert dao.redis is redis_mock.return_value
    assert dao.keys.prefix == 'testapp:test'


@pytest.mark.parametrize('keyspace, db', [(Keyspace.CODES, 0), (Keyspace.LIMITS, 1)])
def test_keyspace_default_databases(keyspace, db):
    """Ensure keyspaces fall back to databases 0 and 1."""
    assert keyspace_db({'host': 'redis', 'db': 7}, keyspace) == db


def test_initialize_with_defaults(redis_mock):
    """Ensure an empty section connects to localhost:6379."""
    StatsRedisDAO({})

    redis_mock.assert_called_once_with(host='localhost', port=6379, db=1, username=None, password=None, decode_responses=True)


def test_initialize_does_not_modify_config(redis_mock, redis_config):
    """Ensure the loaded config section is left untouched."""
    expected = dict(redis_config)

    ShortURLRedisDAO(redis_config)
    RateLimitRedisDAO(redis_config)

    assert redis_config == expected


def test_initialize_with_redis_client(redis_client):
    """Ensure a pre-initialized client is used without reading any config."""
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')

    assert mixin.redis is redis_client
    assert mixin.keys.prefix == 'testapp:test'


def test_initialize_without_redis_section(redis_mock):
    """Ensure a missing 'redis' section raises BadConfigurationError."""
    with pytest.raises(BadConfigurationError, match="Missing 'redis' section in configuration."):
        ShortURLRedisDAO(None)
    redis_mock.assert_not_called()


@pytest.mark.parametrize(
    'redis_config, message',
    [
        ({'codes_db': 'zero'}, "Redis setting 'codes_db' must be an integer"),
        ({'codes_db': -1}, "Redis setting 'codes_db' must not be negative"),
        ({'port': None}, "Redis setting 'port' must be an integer"),
    ],
)
def test_initialize_with_bad_redis_section(redis_mock, redis_config, message):
    """Ensure malformed ports and database indexes raise BadConfigurationError."""
    with pytest.raises(BadConfigurationError, match=message):
        ShortURLRedisDAO(redis_config)
    redis_mock.assert_not_called()


# -------------------------------
# 2. Healthcheck behavior
# -------------------------------


def test_healthcheck_passes(redis_client):
    """Ensure healthcheck pings Redis."""
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')
    redis_client.ping.assert_called_once()  # initialization performs a healthcheck

    mixin._healthcheck()

    assert redis_client.ping.call_count == 2  # once in initialization, once separately


@pytest.mark.parametrize('error', [redis.exceptions.ConnectionError('Connection error'), redis.exceptions.TimeoutError('Timeout')])
def test_healthcheck_fails(redis_client, error):
    """Ensure healthcheck raises DataStoreError when Redis is unreachable."""
    redis_client.ping.side_effect = error

    with pytest.raises(DataStoreError, match=r"Can't connect to Redis at redis:6379/1 \(limits keyspace\)\.") as exc_info:
        StatsRedisDAO(redis_client=redis_client)
    assert exc_info.value.__cause__ is error


def test_initialize_with_unreachable_redis(redis_mock):
    """Ensure a client built from config is health checked too."""
    redis_mock_instance = redis_mock.return_value
    redis_mock_instance.ping.side_effect = redis.exceptions.ConnectionError('Connection error')
    redis_mock_instance.connection_pool = MagicMock()
    redis_mock_instance.connection_pool.connection_kwargs = {'host': '203.0.113.1', 'port': 18000, 'db': 5}

    with pytest.raises(DataStoreError, match=r"Can't connect to Redis at 203.0.113.1:18000/5 \(codes keyspace\)\."):
        ShortURLRedisDAO({'host': '203.0.113.1', 'port': 18000, 'codes_db': 5})
