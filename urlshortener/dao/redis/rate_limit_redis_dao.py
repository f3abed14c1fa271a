"""Data Access Object (DAO) implementation for per-client rate limiting in Redis

Each client (identified by its network address) owns one counter key holding
its remaining quota. The key is created on the client's first request with
the full quota and a fixed TTL (the quota window); it is decremented once per
admitted request and disappears when the window expires.

Classes:
    RateLimitRedisDAO:
        DAO counting client requests against a quota in a Redis datastore.

Example:
    >>> from urlshortener.dao.redis import RateLimitRedisDAO

    >>> dao = RateLimitRedisDAO({'host': 'localhost', 'limits_db': 1}, quota=10, window_seconds=1800)
    >>> dao.check('203.0.113.7')
    RateLimitStatus(remaining=9, reset_seconds=1800)
"""

from beartype import beartype

from urlshortener.types import RedisConfiguration
from urlshortener.models import RateLimitStatus
from urlshortener.constants import TTL, Defaults, Keyspace
from urlshortener.dao.base import RateLimitBaseDAO
from urlshortener.dao.redis.mixins import RedisClientMixin
from urlshortener.dao.redis.helpers import handle_redis_connection_error
from urlshortener.dao.exceptions import QuotaExceededError


# KEYS[1]: client quota key
# ARGV[1]: quota granted at window start
# ARGV[2]: window duration in seconds
#
# Returns {admitted (0|1), remaining quota, seconds until reset}.
CHECK_QUOTA_SCRIPT = """
redis.call('SET', KEYS[1], ARGV[1], 'NX', 'EX', ARGV[2])
local ttl = redis.call('TTL', KEYS[1])
if ttl < 0 then
    redis.call('EXPIRE', KEYS[1], ARGV[2])
    ttl = tonumber(ARGV[2])
end
local remaining = tonumber(redis.call('GET', KEYS[1]))
if remaining == nil or remaining <= 0 then
    return {0, remaining or 0, ttl}
end
return {1, redis.call('DECR', KEYS[1]), ttl}
"""


class RateLimitRedisDAO(RedisClientMixin, RateLimitBaseDAO):
    """Redis-based Data Access Object (DAO) for per-client request quotas

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
        quota (int):
            Requests granted to a client per window.
        window_seconds (int):
            Duration of a quota window in seconds.

    Methods:
        check(client_id: str, **kwargs) -> RateLimitStatus:
            Admit one request and return the remaining quota and reset time.
            Raises QuotaExceededError when the client's counter is at 0.
            Raises DataStoreError on connectivity issues with Redis.
    """

    keyspace = Keyspace.LIMITS

    def __init__(
        self,
        redis_config: RedisConfiguration | None = None,
        *,
        quota: int = Defaults.API_QUOTA,
        window_seconds: int = TTL.QUOTA_WINDOW,
        **kwargs,
    ):
        if window_seconds <= 0:
            raise ValueError(f'Quota window must be a positive number of seconds (given value: {window_seconds}).')
        if quota < 0:
            raise ValueError(f'Quota must be a non-negative integer (given value: {quota}).')

        super().__init__(redis_config, **kwargs)
        self.quota = quota
        self.window_seconds = window_seconds
        self._check_quota = self.redis.register_script(CHECK_QUOTA_SCRIPT)

    @handle_redis_connection_error
    @beartype
    def check(self, client_id: str, **kwargs) -> RateLimitStatus:
        """Count one request against the client's quota

        NOTE: Initialization, the zero check and the decrement run inside a
              single Lua script, which Redis executes atomically. A plain
              GET + DECR sequence would let concurrent requests from the same
              client both read a counter of 1 and both be admitted:

              (lambda 1): GET <app>:limits:<client>         => 1
              (lambda 2): GET <app>:limits:<client>         => 1
              (lambda 1): DECR <app>:limits:<client>        => 0 (admitted)
              (lambda 2): DECR <app>:limits:<client>        => -1 (admitted, over quota)

              With the script, a counter at 0 is never decremented and never
              observed negative.
        NOTE: The window is fixed when the key is created (SET NX EX). Neither
              reads nor decrements extend it.

        Args:
            client_id (str):
                Identifier of the client (caller network address).
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            RateLimitStatus:
                Remaining quota after this request and seconds until reset.

        Raises:
            QuotaExceededError:
                If the client's quota for the current window is used up.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.check('203.0.113.7')
            RateLimitStatus(remaining=9, reset_seconds=1800)
        """
        client_quota_key = self.keys.client_quota_key(client_id)
        admitted, remaining, ttl = self._check_quota(keys=[client_quota_key], args=[self.quota, self.window_seconds])

        if not admitted:
            raise QuotaExceededError(f"Rate limit exceeded for client '{client_id}'.", reset_seconds=int(ttl))

        return RateLimitStatus(remaining=int(remaining), reset_seconds=int(ttl))
