from urlshortener.dao.base.short_url_base_dao import ShortURLBaseDAO
from urlshortener.dao.base.rate_limit_base_dao import RateLimitBaseDAO
from urlshortener.dao.base.stats_base_dao import StatsBaseDAO


__all__ = [
    'ShortURLBaseDAO',
    'RateLimitBaseDAO',
    'StatsBaseDAO',
]
