from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    ONE_HOUR = 3_600  # 60 * 60, one unit of short URL expiry
    # Per-client rate limit window (30 minutes in seconds)
    QUOTA_WINDOW = 1_800  # 30 * 60


class Defaults:
    """Default service values."""

    API_QUOTA = 10  # Shorten requests per client per quota window
    EXPIRY_HOURS = 24  # Short URL lifetime when none (or 0) is requested
    GENERATION_ATTEMPTS = 1  # Random shortcode draws per request (1 = no retry)


class Keyspace(StrEnum):
    """Logical Redis keyspaces (one Redis database each)."""

    CODES = 'codes'
    LIMITS = 'limits'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'

    class Service(StrEnum):
        API_QUOTA = 'API_QUOTA'
        DOMAIN = 'DOMAIN'
        QUOTA_WINDOW_SECONDS = 'QUOTA_WINDOW_SECONDS'
        DEFAULT_EXPIRY_HOURS = 'DEFAULT_EXPIRY_HOURS'


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
