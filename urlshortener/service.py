"""Shortening and resolution of URLs

The service orchestrates the validators, the shortcode generator and the
DAOs. It holds no mutable state between calls: every piece of cross-request
state (mappings, client quotas, resolution stats) lives in the data store.

Classes:
    ShortenerService:
        shorten(request, client_id) -> ShortenResult
        resolve(shortcode) -> str

Example:
    >>> from urlshortener.dao.redis import ShortURLRedisDAO, RateLimitRedisDAO, StatsRedisDAO
    >>> redis_config = {'host': 'localhost', 'port': 6379, 'codes_db': 0, 'limits_db': 1}
    >>> service = ShortenerService(
    ...     short_url_dao=ShortURLRedisDAO(redis_config),
    ...     rate_limit_dao=RateLimitRedisDAO(redis_config, quota=10),
    ...     stats_dao=StatsRedisDAO(redis_config),
    ...     domain='sho.rt',
    ... )
    >>> result = service.shorten(ShortenRequest(original_url='http://example.com/a'), client_id='203.0.113.7')
    >>> result.original_url
    'https://example.com/a'
    >>> service.resolve(result.shortcode)
    'https://example.com/a'
"""

import logging
from collections.abc import Callable

from urlshortener.constants import Defaults
from urlshortener.models import ShortURLModel, ShortenRequest, ShortenResult
from urlshortener.dao.base import ShortURLBaseDAO, RateLimitBaseDAO, StatsBaseDAO
from urlshortener.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError
from urlshortener.exceptions import AliasInUseError, BadConfigurationError, MissingClientIDError
from urlshortener.utils.shortener import generate_shortcode
from urlshortener.utils.validators import validate_url, validate_alias, validate_expiry
from urlshortener.utils.logging import log_service_call


logger = logging.getLogger(__name__)


class ShortenerService:
    """Shorten URLs under a per-client quota and resolve shortcodes

    Attributes:
        short_url_dao (ShortURLBaseDAO):
            Short code -> URL mappings.
        rate_limit_dao (RateLimitBaseDAO | None):
            Per-client request quotas. Only shorten() needs it.
        stats_dao (StatsBaseDAO | None):
            Global resolution counter. Resolution works without it.
        domain (str | None):
            The service's own public domain, rejected as a shortening target.
        default_expiry_hours (int):
            Lifetime of mappings created without an explicit expiry.
        generation_attempts (int):
            How many random shortcodes to draw before giving up on collisions.
            Defaults to 1: a collision fails the request with AliasInUseError
            and the caller retries. Custom aliases are never retried.
        generate (Callable[[], str]):
            Random shortcode source.
    """

    def __init__(
        self,
        short_url_dao: ShortURLBaseDAO,
        rate_limit_dao: RateLimitBaseDAO | None,
        stats_dao: StatsBaseDAO | None = None,
        domain: str | None = None,
        default_expiry_hours: int = Defaults.EXPIRY_HOURS,
        generation_attempts: int = Defaults.GENERATION_ATTEMPTS,
        generate: Callable[[], str] = generate_shortcode,
    ):
        if generation_attempts < 1:
            raise ValueError(f'generation_attempts must be at least 1 (given value: {generation_attempts}).')

        self.short_url_dao = short_url_dao
        self.rate_limit_dao = rate_limit_dao
        self.stats_dao = stats_dao
        self.domain = domain
        self.default_expiry_hours = default_expiry_hours
        self.generation_attempts = generation_attempts
        self.generate = generate

    @log_service_call
    def shorten(self, request: ShortenRequest, client_id: str | None) -> ShortenResult:
        """Create a short URL for a client

        Procedure:
        - Step 1: Require a client id
        - Step 2: Count the request against the client's quota
        - Step 3: Validate target URL, custom alias and expiry
        - Step 4: Pick the candidate shortcode (custom alias or random)
        - Step 5: Refuse candidates which are already live
        - Step 6: Store the mapping with the requested expiry
        - Step 7: Report the mapping and the client's quota status

        NOTE: The request is counted against the quota as soon as it's
              admitted, so rejected input (invalid URL, alias in use) still
              uses up quota.

        Args:
            request (ShortenRequest):
                Target URL, optional custom alias and expiry.
            client_id (str | None):
                Caller network address.

        Returns:
            ShortenResult: the stored mapping and the client's quota status.

        Raises:
            MissingClientIDError: If client_id is missing.
            QuotaExceededError: If the client's quota is used up.
            InvalidURLError: If the target URL is malformed.
            DomainRejectedError: If the target URL points at this service.
            InvalidAliasError: If the custom alias is not a valid shortcode.
            InvalidExpiryError: If the expiry is negative or not an integer.
            AliasInUseError: If the shortcode already maps to a live URL.
            DataStoreError: If the data store is unavailable.
            BadConfigurationError: If the service has no rate limiter.
        """
        # 1- Require a client id
        if client_id is None or not client_id.strip():
            raise MissingClientIDError('Unable to determine the client address.')

        # 2- Count request against client quota (raises QuotaExceededError)
        if self.rate_limit_dao is None:
            raise BadConfigurationError("Can't shorten URLs without a rate limiter (rate_limit_dao is None).")
        rate = self.rate_limit_dao.check(client_id)

        # 3- Validate request input
        target_url = validate_url(request.original_url, domain=self.domain)
        expiry_hours = validate_expiry(request.expiry_hours, default=self.default_expiry_hours)
        custom_alias = validate_alias(request.custom_alias) if request.custom_alias else None

        # 4, 5, 6- Pick a free shortcode and store the mapping
        attempts = 1 if custom_alias else self.generation_attempts
        for attempt in range(1, attempts + 1):
            shortcode = custom_alias or self.generate()
            try:
                self._store(ShortURLModel(target=target_url, shortcode=shortcode, expiry_hours=expiry_hours))
            except AliasInUseError:
                if attempt == attempts:
                    raise
                logger.info('Random shortcode collided. Drawing another one.', extra={'shortcode': shortcode, 'attempt': attempt})
            else:
                break

        # 7- Report mapping and quota status
        return ShortenResult(
            original_url=target_url,
            shortcode=shortcode,
            expiry_hours=expiry_hours,
            rate_remaining=rate.remaining,
            rate_reset_minutes=rate.reset_minutes,
        )

    def _store(self, short_url: ShortURLModel) -> None:
        if self.short_url_dao.exists(short_url.shortcode):
            raise AliasInUseError(f"Short URL with code '{short_url.shortcode}' is already in use.")

        # Another request may have claimed the shortcode since exists()
        try:
            self.short_url_dao.insert(short_url)
        except ShortURLAlreadyExistsError as e:
            raise AliasInUseError(f"Short URL with code '{short_url.shortcode}' is already in use.") from e

    @log_service_call
    def resolve(self, shortcode: str) -> str:
        """Return the URL a shortcode maps to

        Each successful resolution increments the global stats counter on a
        best-effort basis: a stats failure is logged and never affects the
        returned URL.

        Args:
            shortcode (str): the shortcode to resolve.

        Returns:
            str: the stored target URL.

        Raises:
            ShortURLNotFoundError: If no live mapping exists.
            DataStoreError: If the short code data store is unavailable.
        """
        short_url = self.short_url_dao.get(shortcode)

        if self.stats_dao is not None:
            try:
                self.stats_dao.increment()
            except DataStoreError:
                logger.warning('Failed to increment resolution counter.', exc_info=True, extra={'shortcode': shortcode})

        return short_url.target
