"""Abstract base class for per-client rate limit data access objects (DAOs).

This interface defines the contract for counting client requests against a
quota over a fixed time window. The window starts on the client's first
request and is never extended by later requests.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from urlshortener.dao.redis import RateLimitRedisDAO
        >>> dao = RateLimitRedisDAO(quota=10, window_seconds=1800)

        >>> status = dao.check("203.0.113.7")
        >>> status.remaining
        9
        >>> status.reset_seconds
        1800
"""

from abc import ABC, abstractmethod

from urlshortener.models import RateLimitStatus


class RateLimitBaseDAO(ABC):
    """Interface for per-client request quota data access objects (DAOs)

    Methods:
        check(client_id: str, **kwargs) -> RateLimitStatus:
            Count one request against the client's quota.
            Raises QuotaExceededError if the quota is already used up.
            Raises DataStoreError on read or write failure.

    Subclassing:
        Concrete implementations must initialize the quota lazily on a client's
        first request and decrement it atomically, so that concurrent requests
        never admit more than `quota` requests per window.
    """

    @abstractmethod
    def check(self, client_id: str, **kwargs) -> RateLimitStatus:
        """Admit one request for a client, or reject it if the quota is used up.

        NOTE: Implementations must not decrement a counter that already reached 0.

        Args:
            client_id (str):
                Identifier of the client (caller network address).

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            RateLimitStatus:
                Remaining quota after this request and seconds until reset.

        Raises:
            QuotaExceededError:
                If the client has no quota left in the current window.

            DataStoreError:
                If there is an error in the data store.
        """
        pass
