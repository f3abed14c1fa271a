class ShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortener_error'


class ConfigurationError(ShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class ValidationError(ShortenerError):
    """Base exception for rejected shorten requests."""

    error_code = 'request:validation_error'


class InvalidURLError(ValidationError):
    """Raised when the target URL is not a well-formed http(s) URL."""

    error_code = 'request:invalid_url'


class DomainRejectedError(ValidationError):
    """Raised when the target URL points back at the service's own domain."""

    error_code = 'request:domain_rejected'


class InvalidAliasError(ValidationError):
    """Raised when a custom alias contains characters unfit for a URL path."""

    error_code = 'request:invalid_alias'


class InvalidExpiryError(ValidationError):
    """Raised when the requested expiry is not a non-negative number of hours."""

    error_code = 'request:invalid_expiry'


class MissingClientIDError(ValidationError):
    """Raised when the caller's network address can't be determined."""

    error_code = 'request:missing_client_id'


class AliasInUseError(ShortenerError):
    """Raised when the candidate shortcode already maps to a live URL."""

    error_code = 'service:alias_in_use'
