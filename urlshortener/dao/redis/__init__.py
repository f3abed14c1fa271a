from urlshortener.dao.redis.redis_key_schema import RedisKeySchema
from urlshortener.dao.redis.mixins import RedisClientMixin
from urlshortener.dao.redis.short_url_redis_dao import ShortURLRedisDAO
from urlshortener.dao.redis.rate_limit_redis_dao import RateLimitRedisDAO
from urlshortener.dao.redis.stats_redis_dao import StatsRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortURLRedisDAO',
    'RateLimitRedisDAO',
    'StatsRedisDAO',
]
