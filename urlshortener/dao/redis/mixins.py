"""Redis connection shared by the Redis-backed DAOs.

Short codes and client quotas live in separate Redis databases, one per
logical keyspace (see `Keyspace`). Each DAO class names the keyspace it works
in; the mixin picks the matching `<keyspace>_db` index out of the Lambda's
'redis' config section, connects and PINGs the server once, so an unreachable
store fails when the DAO is built rather than on its first command.

Example:
    >>> class StatsRedisDAO(RedisClientMixin, StatsBaseDAO):
    ...     keyspace = Keyspace.LIMITS
    ...
    >>> dao = StatsRedisDAO({'host': 'redis', 'port': 6379, 'codes_db': 0, 'limits_db': 1}, prefix='myapp:prod')
    >>> dao.redis.connection_pool.connection_kwargs['db']
    1
"""

from typing import ClassVar

import redis

from urlshortener.types import RedisConfiguration
from urlshortener.constants import Keyspace
from urlshortener.exceptions import BadConfigurationError
from urlshortener.dao.redis.redis_key_schema import RedisKeySchema
from urlshortener.dao.exceptions import DataStoreError


# Redis database index per keyspace when the config doesn't name one
DEFAULT_KEYSPACE_DB = {
    Keyspace.CODES: 0,
    Keyspace.LIMITS: 1,
}


def _int_setting(redis_config: RedisConfiguration, name: str, default: int) -> int:
    value = redis_config.get(name, default)
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise BadConfigurationError(f"Redis setting '{name}' must be an integer (given value: {value!r}).") from e
    if number < 0:
        raise BadConfigurationError(f"Redis setting '{name}' must not be negative (given value: {number}).")
    return number


def keyspace_db(redis_config: RedisConfiguration, keyspace: Keyspace) -> int:
    """Database index holding a keyspace, e.g. 'limits_db' for Keyspace.LIMITS."""
    return _int_setting(redis_config, f'{keyspace}_db', DEFAULT_KEYSPACE_DB[keyspace])


class RedisClientMixin:
    """Keyspace-aware Redis client for Redis-backed DAOs.

    Attributes:
        keyspace (Keyspace):
            Keyspace (and thus Redis database) the DAO class works in.
            Overridden by each DAO.
        redis (redis.Redis):
            Client connected to the keyspace's database.
        keys (RedisKeySchema):
            Namespaced key names.
    """

    keyspace: ClassVar[Keyspace] = Keyspace.CODES

    def __init__(
        self,
        redis_config: RedisConfiguration | None = None,
        *,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        """Connect to the DAO's keyspace

        Args:
            redis_config (RedisConfiguration | None):
                The 'redis' config section: host, port, optional username and
                password, and one database index per keyspace ('codes_db',
                'limits_db'). Ignored when `redis_client` is given.
            redis_client (redis.Redis | None):
                Ready-made client, e.g. a test double.
            prefix (str | None):
                Namespace prefix for all keys, e.g. 'app:env'.

        Raises:
            BadConfigurationError:
                If there's neither a client nor a 'redis' section, or a port
                or database index isn't a non-negative integer.
            DataStoreError:
                If Redis doesn't answer the PING.
        """
        if redis_client is None:
            if redis_config is None:
                raise BadConfigurationError("Missing 'redis' section in configuration.")
            redis_client = redis.Redis(
                host=redis_config.get('host', 'localhost'),
                port=_int_setting(redis_config, 'port', 6379),
                db=keyspace_db(redis_config, self.keyspace),
                username=redis_config.get('username'),
                password=redis_config.get('password'),
                decode_responses=True,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    def _healthcheck(self) -> None:
        """PING Redis; raise DataStoreError naming host:port/db if it doesn't answer."""
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            info = self.redis.connection_pool.connection_kwargs
            where = f"{info.get('host')}:{info.get('port')}/{info.get('db')}"
            raise DataStoreError(f"Can't connect to Redis at {where} ({self.keyspace} keyspace).") from e
