"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortURLNotFoundError:
        Raised when a ShortURLModel is not found in the data store.

    ShortURLAlreadyExistsError:
        Raised when attempting to insert a ShortURLModel that already exists.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

    QuotaExceededError:
        Raised when a client has used up its request quota for the current window.

Example:
    >>> from urlshortener.dao.exceptions import QuotaExceededError
    >>> raise QuotaExceededError("Rate limit exceeded.", reset_seconds=120)
    Traceback (most recent call last):
        ...
    urlshortener.dao.exceptions.QuotaExceededError: Rate limit exceeded.
"""

from urlshortener.exceptions import ShortenerError


class DAOError(ShortenerError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class ShortURLNotFoundError(DAOError):
    """Raised when a ShortURLModel is not found in the data store."""

    error_code = 'dao:short_url_not_found_error'


class ShortURLAlreadyExistsError(DAOError):
    """Raised when inserting a ShortURLModel that already exists in the data store."""

    error_code = 'dao:short_url_already_exists_error'


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, and out-of-memory failures.
    """

    error_code = 'dao:data_store_error'


class QuotaExceededError(DAOError):
    """Raised when a client's request quota for the current window is used up.

    Attributes:
        reset_seconds (int):
            Seconds until the quota window expires and the client may retry.
    """

    error_code = 'dao:quota_exceeded_error'

    def __init__(self, message: str = '', reset_seconds: int = 0):
        super().__init__(message)
        self.reset_seconds = reset_seconds

    @property
    def reset_minutes(self) -> int:
        return self.reset_seconds // 60
