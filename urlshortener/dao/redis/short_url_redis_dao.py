"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO for the
short code keyspace.

Responsibilities:
    - Check for, insert and retrieve short URLs from Redis;
    - Expire each mapping after its requested number of hours;
    - Refuse to overwrite a live mapping;
    - Raise appropriate DAO exceptions.

Classes:
    ShortURLRedisDAO:
        DAO for storing and retrieving ShortURLModel in a Redis datastore.

Example:
    >>> from urlshortener.models import ShortURLModel
    >>> from urlshortener.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO({"host": "localhost", "codes_db": 0}, prefix="app:dev")

    >>> short_url = ShortURLModel(
    ...     target="https://example.com/page",
    ...     shortcode="abc123",
    ...     expiry_hours=24,
    ... )
    >>> dao.insert(short_url)
    <ShortURLRedisDAO>

    >>> retrieved = dao.get("abc123")
    >>> retrieved.target
    'https://example.com/page'
    >>> retrieved.expires_at
    <datetime>
"""

import math
from datetime import datetime, timedelta, UTC

from beartype import beartype

from urlshortener.models import ShortURLModel
from urlshortener.constants import TTL, Keyspace
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.redis.mixins import RedisClientMixin
from urlshortener.dao.redis.helpers import handle_redis_connection_error
from urlshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL mappings

    This class implements the ShortURLBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        exists(shortcode: str, **kwargs) -> bool:
            True iff a live mapping exists for the shortcode.

        insert(short_url: ShortURLModel, **kwargs) -> ShortURLRedisDAO:
            Insert a short URL mapping expiring after `expiry_hours`.
            Raises ShortURLAlreadyExistsError when a URL with the same shortcode exists.
            Raises DataStoreError on connectivity issues with Redis.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            Retrieve a short URL mapping and its expiry by shortcode.
            Raises ShortURLNotFoundError when the shortcode doesn't exist.
            Raises DataStoreError on connectivity issues with Redis.
    """

    keyspace = Keyspace.CODES

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a live short URL mapping exists

        Args:
            shortcode (str):
                The shortcode identifier for the shortened URL.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            bool: True if the mapping exists and hasn't expired.

        Example:
            >>> dao.exists('abc123')
            False
        """
        return bool(self.redis.exists(self.keys.link_url_key(shortcode)))

    @handle_redis_connection_error
    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLRedisDAO':
        """Insert a short URL mapping into Redis

        The mapping is written with a single `SET NX EX` command, so a live
        mapping is never overwritten, even when two requests race for the same
        shortcode after both passed an `exists()` check.

        Args:
            short_url (ShortURLModel):
                ShortURLModel instance representing the shortened URL mapping.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLRedisDAO: self (for method chaining)

        Raises:
            ValueError:
                If the mapping's expiry is not a positive number of hours.
            ShortURLAlreadyExistsError:
                If a short URL with the same shortcode already exists.
            DataStoreError:
                If a Redis connection issue occurs.

        Example:
            >>> short_url = ShortURLModel(
            ...     target='https://example.com',
            ...     shortcode='abc123',
            ...     expiry_hours=1,
            ... )
            >>> dao.insert(short_url)
            <ShortURLRedisDAO>
        """
        if short_url.expiry_hours <= 0:
            raise ValueError(f'Expiry must be a positive number of hours (given value: {short_url.expiry_hours}).')

        link_url_key = self.keys.link_url_key(short_url.shortcode)
        # fmt: off
        created = self.redis.set(link_url_key,
                                 short_url.target,
                                 nx=True,
                                 ex=short_url.expiry_hours * TTL.ONE_HOUR)
        # fmt: on
        if not created:
            raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a stored short URL mapping by shortcode

        Fetches the original URL and its remaining TTL using a single Redis
        transaction. Calculates the expiry datetime from the remaining TTL value.

        Args:
            shortcode (str):
                The shortcode identifier for the shortened URL.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLModel:
                The retrieved ShortURLModel instance if found.

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.get('abc123')
            ShortURLModel(target='https://example.com', shortcode='abc123', ...)
        """
        link_url_key = self.keys.link_url_key(shortcode)

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.get(link_url_key)
            pipe.ttl(link_url_key)
            original_url, ttl = pipe.execute()

        if original_url is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        # TTL is -1 for keys written without an expiry (never by insert())
        if ttl is None or ttl < 0:
            return ShortURLModel(target=original_url, shortcode=shortcode)

        # expiry_hours holds the remaining lifetime, rounded up to whole hours
        return ShortURLModel(
            target=original_url,
            shortcode=shortcode,
            expiry_hours=max(1, math.ceil(ttl / TTL.ONE_HOUR)),
            expires_at=datetime.now(UTC) + timedelta(seconds=ttl),
        )
