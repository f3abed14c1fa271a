from dataclasses import dataclass
from datetime import datetime

from urlshortener.constants import Defaults


# fmt: off
@dataclass(frozen=True)
class ShortURLModel:
    target: str                                 # Original long URL (normalized to https)
    shortcode: str                              # Unique short identifier of shortened URL
    expiry_hours: int = Defaults.EXPIRY_HOURS   # Lifetime of the mapping, in hours
    expires_at: datetime | None = None          # TTL as Python datetime, after which this record is expired


@dataclass(frozen=True)
class ShortenRequest:
    original_url: str                   # URL as supplied by the client
    custom_alias: str | None = None     # Caller-chosen shortcode
    expiry_hours: int | None = None     # None or 0 means the default expiry


@dataclass(frozen=True)
class ShortenResult:
    original_url: str                   # Normalized target URL that was stored
    shortcode: str                      # Shortcode mapped to the target URL
    expiry_hours: int                   # Effective lifetime of the mapping
    rate_remaining: int                 # Requests left in the client's quota window
    rate_reset_minutes: int             # Minutes until the quota window resets
# fmt: on


@dataclass(frozen=True)
class RateLimitStatus:
    """Outcome of an admitted request against a client's quota.

    Attributes:
        remaining (int):
            Quota left after this request was counted.
        reset_seconds (int):
            Seconds until the client's quota window expires.
    """

    remaining: int
    reset_seconds: int

    @property
    def reset_minutes(self) -> int:
        return self.reset_seconds // 60
