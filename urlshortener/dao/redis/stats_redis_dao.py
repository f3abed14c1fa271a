from urlshortener.constants import Keyspace
from urlshortener.dao.base import StatsBaseDAO
from urlshortener.dao.redis.mixins import RedisClientMixin
from urlshortener.dao.redis.helpers import handle_redis_connection_error


class StatsRedisDAO(RedisClientMixin, StatsBaseDAO):
    """Redis-based global resolution counter.

    Lives in the rate limit keyspace next to the client quota keys. The counter
    key has no TTL and is only ever incremented.

    Example:
        >>> dao = StatsRedisDAO({'host': 'localhost', 'limits_db': 1}, prefix='app:dev')
        >>> dao.increment()
        124
    """

    keyspace = Keyspace.LIMITS

    @handle_redis_connection_error
    def increment(self, **kwargs) -> int:
        return self.redis.incr(self.keys.counter_key())
