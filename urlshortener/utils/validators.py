"""Validation of shorten request input.

Functions:
    validate_url(raw_url, domain=None) -> str
        Check a target URL is well-formed and doesn't point back at this
        service, then return it with its scheme upgraded to https.
    validate_alias(alias) -> str
        Check a custom alias is usable as a URL path segment.
    validate_expiry(expiry_hours) -> int
        Resolve the requested expiry, defaulting to 24 hours.

Example:
    >>> from urlshortener.utils.validators import validate_url
    >>> validate_url('http://example.com/a')
    'https://example.com/a'
    >>> validate_url('example.com/a')
    'https://example.com/a'
    >>> validate_url('https://sho.rt/abc', domain='sho.rt')
    DomainRejectedError: ...
"""

import re
import ipaddress
import urllib.parse

from urlshortener.constants import Defaults
from urlshortener.exceptions import (
    InvalidURLError,
    DomainRejectedError,
    InvalidAliasError,
    InvalidExpiryError,
)


MAX_URL_LENGTH = 2083
ALLOWED_SCHEMES = frozenset({'http', 'https'})

_SCHEME_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*://')
_WHITESPACE_RE = re.compile(r'\s')
_DNS_LABEL_RE = re.compile(r'^(?!-)[a-z0-9-]{1,63}(?<!-)$')
_ALIAS_RE = re.compile(r'^[0-9A-Za-z_-]{1,32}$')


def _valid_host(hostname: str) -> bool:
    if hostname == 'localhost':
        return True

    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        pass
    else:
        return True

    try:
        hostname = hostname.encode('idna').decode('ascii')
    except UnicodeError:
        return False

    labels = hostname.rstrip('.').split('.')
    if len(labels) < 2 or len(hostname) > 253:
        return False
    if not all(_DNS_LABEL_RE.match(label) for label in labels):
        return False
    # Top-level label can't be all digits (rules out things like 999.1)
    return not labels[-1].isdigit()


def _strip_www(hostname: str) -> str:
    return hostname[4:] if hostname.startswith('www.') else hostname


def domain_host(domain: str | None) -> str | None:
    """Return the bare, lowercase host of a configured public domain.

    The domain may be configured with or without a scheme, port or path,
    e.g. 'sho.rt', 'https://www.sho.rt', 'localhost:3000'.
    """
    if not domain:
        return None
    if not _SCHEME_RE.match(domain):
        domain = f'https://{domain}'
    hostname = urllib.parse.urlsplit(domain).hostname
    return _strip_www(hostname) if hostname else None


def validate_url(raw_url: str, domain: str | None = None) -> str:
    """Validate a target URL and upgrade it to https

    Args:
        raw_url (str):
            Target URL as supplied by the client. The scheme is optional.
        domain (str | None):
            The service's own public domain. URLs pointing at it are rejected
            so short URLs can't point at other short URLs of this service.

    Returns:
        str: The URL with `https` scheme; host and path unchanged.

    Raises:
        InvalidURLError:
            If the URL is not a well-formed http(s) URL with a valid host.
        DomainRejectedError:
            If the URL's host is the service's own domain.
    """
    if not isinstance(raw_url, str) or not raw_url:
        raise InvalidURLError('URL must be a non-empty string.')
    if len(raw_url) > MAX_URL_LENGTH:
        raise InvalidURLError(f'URL is longer than {MAX_URL_LENGTH} characters.')
    if _WHITESPACE_RE.search(raw_url):
        raise InvalidURLError(f"Invalid URL '{raw_url}'.")

    url = raw_url if _SCHEME_RE.match(raw_url) else f'https://{raw_url}'
    components = urllib.parse.urlsplit(url)

    if components.scheme not in ALLOWED_SCHEMES:
        raise InvalidURLError(f"Unsupported URL scheme '{components.scheme}'.")

    try:
        hostname = components.hostname
        components.port  # noqa: B018 raises ValueError on out-of-range or non-numeric ports
    except ValueError as e:
        raise InvalidURLError(f"Invalid URL '{raw_url}'.") from e

    if not hostname or not _valid_host(hostname):
        raise InvalidURLError(f"Invalid URL '{raw_url}'.")

    own_host = domain_host(domain)
    if own_host is not None and _strip_www(hostname) == own_host:
        raise DomainRejectedError(f"URLs on the service's own domain '{own_host}' can't be shortened.")

    # Only the scheme changes; empty query or fragment markers are kept
    return 'https' + url[len(components.scheme):]


def validate_alias(alias: str) -> str:
    """Check a custom alias is a usable shortcode.

    Raises:
        InvalidAliasError: If the alias is not 1-32 characters of [0-9A-Za-z_-].
    """
    if not isinstance(alias, str) or not _ALIAS_RE.match(alias):
        raise InvalidAliasError(f'Invalid custom alias {alias!r}: use 1-32 letters, digits, "-" or "_".')
    return alias


def validate_expiry(expiry_hours: int | None, default: int = Defaults.EXPIRY_HOURS) -> int:
    """Resolve the requested expiry in hours.

    None and 0 mean "use the default"; any other value must be a positive int.

    Raises:
        InvalidExpiryError: If the expiry is negative or not an integer.
    """
    if expiry_hours is None or expiry_hours == 0:
        return default
    if isinstance(expiry_hours, bool) or not isinstance(expiry_hours, int) or expiry_hours < 0:
        raise InvalidExpiryError(f'Expiry must be a non-negative number of hours (given value: {expiry_hours!r}).')
    return expiry_hours
